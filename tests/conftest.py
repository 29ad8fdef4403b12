"""
Fixtures compartidas: base SQLite temporaria (aiosqlite), sesión, cliente HTTP
contra la app con la sesión sustituida y fábricas de entidades.

Las fábricas crean cada entidad en su propia sesión y la devuelven ya cerrada:
el objeto queda desacoplado con sus columnas cargadas, de modo que un rollback
de la sesión `db` en el test no lo expira.
"""

import os
import itertools
from datetime import date

# Antes de importar hogar: la configuración se lee al importar
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hogar.db import get_session
from hogar.models import Base
from hogar.schemas import SiteCreate, UserCreate, ResidentCreate
from hogar.security import create_access_token
from hogar.services.site_service import SiteService
from hogar.services.user_service import UserService
from hogar.services.resident_service import ResidentService
from hogar.validators import rut_check_digit
from main import create_app

PASSWORD = "secreto123"


def make_rut(body: int) -> str:
    return f"{body}-{rut_check_digit(str(body))}"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'hogar.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    app = create_app()

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_site(session_factory):
    counter = itertools.count(1)

    async def _make(name=None, max_capacity=10, **kwargs):
        values = {
            "name": name or f"Sede {next(counter)}",
            "address": "Av. Libertador 1234",
            "commune": "Santiago",
            "region": "Metropolitana",
            "max_capacity": max_capacity,
        }
        values.update(kwargs)
        async with session_factory() as session:
            return await SiteService(session).create(SiteCreate(**values))

    return _make


@pytest.fixture
def make_user(session_factory):
    counter = itertools.count(1)

    async def _make(role="director", email=None, **kwargs):
        n = next(counter)
        data = UserCreate(
            first_name="Ana",
            last_name=f"Pérez {n}",
            email=email or f"usuario{n}@hogar.cl",
            password=PASSWORD,
            role=role,
            **kwargs,
        )
        async with session_factory() as session:
            return await UserService(session).create(data)

    return _make


@pytest.fixture
def make_resident(session_factory):
    counter = itertools.count(10_000_000)

    async def _make(created_by, **kwargs):
        values = {
            "rut": make_rut(next(counter)),
            "first_names": "Juan",
            "paternal_surname": "Soto",
            "birth_date": date(1960, 5, 10),
            "admission_date": date(2024, 1, 15),
            "admission_reason": "Situación de calle",
        }
        values.update(kwargs)
        async with session_factory() as session:
            return await ResidentService(session).create(ResidentCreate(**values), created_by.id)

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict:
        token = create_access_token(user.id, user.role, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
