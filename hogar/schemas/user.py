# =====================================================================
# ESQUEMAS DE USUARIOS
# =====================================================================

from __future__ import annotations

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hogar.computed import full_name
from .enums import UserRole

_USER_COLUMNS = (
    "id", "first_name", "last_name", "email", "rut", "phone", "role",
    "site_id", "is_active", "last_login", "created_at", "updated_at",
)

class UserCreate(BaseModel):
    """
    Esquema para la creación de un usuario.

    Attributes:
        first_name (str): Nombre
        last_name (str): Apellido
        email (EmailStr): Email único
        password (str): Contraseña en texto plano (8-72 caracteres, se guarda hasheada)
        rut (Optional[str]): RUT del usuario
        phone (Optional[str]): Teléfono
        role (UserRole): Rol del usuario
        site_id (Optional[str]): Sede de trabajo
    """
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    rut: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    role: UserRole
    site_id: Optional[str] = None


class UserUpdate(BaseModel):
    """Esquema para la actualización parcial de un usuario."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    rut: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    role: Optional[UserRole] = None
    site_id: Optional[str] = None
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    """
    Esquema de salida de usuario. Nunca incluye el hash de la contraseña.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    rut: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    site_id: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user) -> "UserOut":
        return cls(
            **{k: getattr(user, k) for k in _USER_COLUMNS},
            full_name=full_name(user.first_name, user.last_name),
        )


class RoleCount(BaseModel):
    role: str
    count: int


class UserStatistics(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    by_role: List[RoleCount]
