# hogar/routers/users.py
from __future__ import annotations

from typing import List, Optional

from fastapi import Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.deps import get_db
from hogar.routing import Route, build_router, AUTHENTICATED, DIRECTION, STAFF
from hogar.schemas import (
    UserCreate, UserUpdate, UserOut, UserStatistics, UserRole,
    PaginationParams, PaginatedResponse,
)
from hogar.services.user_service import UserService

async def create_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return UserOut.from_model(await UserService(db).create(payload))

async def list_users(
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    users, total = await UserService(db).list(
        search=search,
        role=role,
        is_active=is_active,
        offset=(pagination.page - 1) * pagination.size,
        limit=pagination.size,
    )
    return PaginatedResponse[UserOut].build([UserOut.from_model(u) for u in users], total, pagination)

async def search_users(q: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return [UserOut.from_model(u) for u in await UserService(db).search(q)]

async def user_statistics(db: AsyncSession = Depends(get_db)):
    return await UserService(db).statistics()

async def get_user(id: str, db: AsyncSession = Depends(get_db)):
    return UserOut.from_model(await UserService(db).get(id))

async def update_user(id: str, payload: UserUpdate, db: AsyncSession = Depends(get_db)):
    return UserOut.from_model(await UserService(db).update(id, payload))

async def delete_user(id: str, db: AsyncSession = Depends(get_db)):
    await UserService(db).delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

async def deactivate_user(id: str, db: AsyncSession = Depends(get_db)):
    return UserOut.from_model(await UserService(db).deactivate(id))

ROUTES = [
    Route("POST", "", create_user, DIRECTION, status.HTTP_201_CREATED, UserOut),
    Route("GET", "", list_users, STAFF, response_model=PaginatedResponse[UserOut]),
    Route("GET", "/search", search_users, STAFF, response_model=List[UserOut]),
    Route("GET", "/statistics", user_statistics, DIRECTION, response_model=UserStatistics),
    Route("GET", "/{id}", get_user, AUTHENTICATED, response_model=UserOut),
    Route("PATCH", "/{id}", update_user, DIRECTION, response_model=UserOut),
    Route("DELETE", "/{id}", delete_user, frozenset({"director"}), status.HTTP_204_NO_CONTENT),
    Route("PATCH", "/{id}/deactivate", deactivate_user, DIRECTION, response_model=UserOut),
]

router = build_router("/users", ["users"], ROUTES)
