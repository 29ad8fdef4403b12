from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import jwt

from hogar.db import get_session
from hogar.security import decode_token

bearer = HTTPBearer(auto_error=False)

async def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_token(creds.credentials)
        result = {"id": payload["sub"], "role": payload["role"]}
        if "email" in payload:
            result["email"] = payload["email"]
        return result
    except (jwt.PyJWTError, KeyError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_db(session: AsyncSession = Depends(get_session)) -> AsyncSession:
    """Sesión de base de datos de la petición."""
    return session

def require_roles(*roles: str):
    """
    Dependencia de autorización: exige un usuario autenticado y, si se indican
    roles, que el suyo esté entre ellos.
    """
    allowed = frozenset(roles)

    async def checker(current: dict = Depends(get_current_user)) -> dict:
        if allowed and current["role"] not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tiene permiso para realizar esta acción",
            )
        return current

    return checker
