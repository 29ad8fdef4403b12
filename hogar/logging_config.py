# hogar/logging_config.py
"""
Logging estructurado (JSON) del servicio.
Cada registro lleva el nombre del servicio y campos con nombres estables
(timestamp, level, logger) para filtrarlos en el agregador de logs.
"""

import logging
import sys
from pythonjsonlogger import jsonlogger

from hogar.config import settings

_RENAMED_FIELDS = {"asctime": "timestamp", "levelname": "level", "name": "logger"}


def build_formatter() -> jsonlogger.JsonFormatter:
    return jsonlogger.JsonFormatter(
        fmt='%(asctime)s %(name)s %(levelname)s %(message)s %(module)s %(lineno)d',
        datefmt='%Y-%m-%dT%H:%M:%S',
        rename_fields=_RENAMED_FIELDS,
        static_fields={"service": settings.app_name},
    )


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Instala el handler JSON en el logger raíz una sola vez."""
    root = logging.getLogger()
    root.setLevel(level or settings.log_level.upper())

    if not any(getattr(h, "_hogar_json", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler._hogar_json = True
        handler.setFormatter(build_formatter())
        root.addHandler(handler)

    # Librerías externas solo a partir de WARNING
    for noisy in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return root


logger = setup_logging()
