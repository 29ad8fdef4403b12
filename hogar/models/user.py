# =====================================================================
# MODELO DE USUARIOS
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Boolean, ForeignKey, DateTime, func
from datetime import datetime
from typing import Optional

from .base import Base, user_role_enum

class User(Base):
    """
    Modelo de Usuario (cuenta del personal).
    Representa a los usuarios del sistema con diferentes roles y permisos.
    """
    __tablename__ = "users"

    # ---------- Identificación ----------
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(user_role_enum, nullable=False)

    # ---------- Datos de autenticación ----------
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # ---------- Datos personales ----------
    rut: Mapped[Optional[str]] = mapped_column(String(12), unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20))

    # ---------- Sede de trabajo ----------
    site_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("sites.id"))

    # ---------- Estado ----------
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # ---------- Auditoría ----------
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        """Representación en string del usuario."""
        return f"<User(id={self.id[:8]}..., role={self.role})>"

    def __str__(self) -> str:
        return f"Usuario {self.email} ({self.role})"
