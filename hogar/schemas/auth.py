# =====================================================================
# ESQUEMAS DE AUTENTICACIÓN
# =====================================================================

from __future__ import annotations

from typing import Literal
from pydantic import BaseModel, EmailStr

from .user import UserOut

class LoginRequest(BaseModel):
    """
    Esquema para la solicitud de inicio de sesión.

    Attributes:
        email (EmailStr): Email de la cuenta
        password (str): Contraseña del usuario (en texto plano)
    """
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """
    Esquema para la respuesta del token de acceso.

    Attributes:
        access_token (str): Token JWT de acceso
        token_type (Literal["bearer"]): Tipo de token (siempre 'bearer')
        user (UserOut): Datos del usuario autenticado
    """
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserOut

