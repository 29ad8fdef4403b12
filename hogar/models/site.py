# =====================================================================
# MODELO DE SEDES
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Integer, Boolean, DateTime, CheckConstraint, func
from datetime import datetime
from typing import Optional

from .base import Base, site_category_enum

class Site(Base):
    """
    Modelo de Sede (instalación física) con capacidad acotada de residentes.
    La ocupación es un contador mantenido por el directorio de residentes.
    """
    __tablename__ = "sites"
    __table_args__ = (
        CheckConstraint("current_occupancy >= 0", name="ck_site_occupancy_non_negative"),
        CheckConstraint("current_occupancy <= max_capacity", name="ck_site_occupancy_le_max"),
    )

    # ---------- Identificación ----------
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(site_category_enum, nullable=False, default='residence')

    # ---------- Dirección y contacto ----------
    address: Mapped[str] = mapped_column(Text, nullable=False)
    commune: Mapped[Optional[str]] = mapped_column(String(100))
    region: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(20))

    # ---------- Capacidad ----------
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    current_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # ---------- Auditoría ----------
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Site(id={self.id[:8]}..., name={self.name}, occupancy={self.current_occupancy}/{self.max_capacity})>"

    def __str__(self) -> str:
        return f"Sede {self.name}"
