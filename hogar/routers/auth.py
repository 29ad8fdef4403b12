# hogar/routers/auth.py
from __future__ import annotations

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.config import settings
from hogar.deps import get_db, get_current_user
from hogar.routing import Route, build_router, AUTHENTICATED
from hogar.schemas import LoginRequest, TokenResponse, UserOut
from hogar.security import create_access_token
from hogar.services.user_service import UserService

async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).authenticate(payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")

    token = create_access_token(user.id, user.role, user.email)
    return TokenResponse(access_token=token, user=UserOut.from_model(user))

async def profile(current: dict = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Datos del usuario autenticado, leídos desde la base de datos."""
    return UserOut.from_model(await UserService(db).get(current["id"]))

async def health():
    return {"status": "ok", "service": settings.app_name}

ROUTES = [
    Route("POST", "/login", login, None, response_model=TokenResponse),
    Route("GET", "/profile", profile, AUTHENTICATED, response_model=UserOut),
    Route("GET", "/health", health, None),
]

router = build_router("/auth", ["auth"], ROUTES)
