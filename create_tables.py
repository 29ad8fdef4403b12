#!/usr/bin/env python3
"""
Crea las tablas del hogar (sedes, usuarios, residentes, contactos, notas clínicas)
en la base configurada por DATABASE_URL.
"""

import asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from hogar.models import Base
from hogar.config import settings
from hogar.db import normalize_database_url
from hogar.logging_config import logger

async def main():
    engine = create_async_engine(normalize_database_url(settings.database_url))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    logger.info("Tablas creadas", extra={"tables": sorted(Base.metadata.tables)})

if __name__ == "__main__":
    asyncio.run(main())
