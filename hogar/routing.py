"""
Tablas de rutas como datos: (método, ruta, handler, roles requeridos).
Cada módulo de routers declara su tabla y build_router la registra en FastAPI.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, NamedTuple, Optional

from fastapi import APIRouter, Depends

from hogar.deps import require_roles

# ---------- Conjuntos de roles ----------
DIRECTION = frozenset({"director", "admin"})
CASE_MANAGERS = DIRECTION | {"social_worker"}
CLINICAL = DIRECTION | {"psychologist"}
STAFF = CASE_MANAGERS | {"psychologist"}
ALL_ROLES = STAFF | {"volunteer"}
# Cualquier usuario autenticado
AUTHENTICATED = frozenset()


class Route(NamedTuple):
    method: str
    path: str
    endpoint: Callable
    roles: Optional[frozenset]  # None = ruta pública
    status_code: int = 200
    response_model: Any = None


def build_router(prefix: str, tags: list[str], routes: Iterable[Route]) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=tags)
    for route in routes:
        dependencies = [] if route.roles is None else [Depends(require_roles(*route.roles))]
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            dependencies=dependencies,
        )
    return router
