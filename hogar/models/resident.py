# =====================================================================
# MODELO DE RESIDENTES
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, ForeignKey, Date, DateTime, func
from datetime import datetime, date
from typing import Optional

from .base import Base, resident_status_enum, resident_gender_enum

class Resident(Base):
    """
    Modelo de Residente.
    Persona bajo cuidado, seguida desde su ingreso hasta su egreso o traslado.
    El RUT se guarda siempre en formato canónico (12.345.678-5).
    """
    __tablename__ = "residents"

    # ---------- Identificación ----------
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    rut: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)

    # ---------- Datos personales ----------
    first_names: Mapped[str] = mapped_column(String(100), nullable=False)
    paternal_surname: Mapped[str] = mapped_column(String(100), nullable=False)
    maternal_surname: Mapped[Optional[str]] = mapped_column(String(100))
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(resident_gender_enum)
    nationality: Mapped[str] = mapped_column(String(100), nullable=False, default='Chilena')
    marital_status: Mapped[Optional[str]] = mapped_column(String(50))
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(255))

    # ---------- Ingreso ----------
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    admission_reason: Mapped[str] = mapped_column(Text, nullable=False)
    origin: Mapped[Optional[str]] = mapped_column(String(200))
    legal_status: Mapped[Optional[str]] = mapped_column(String(100))

    # ---------- Salud ----------
    blood_type: Mapped[Optional[str]] = mapped_column(String(5))
    allergies: Mapped[Optional[str]] = mapped_column(Text)
    medications: Mapped[Optional[str]] = mapped_column(Text)
    health_notes: Mapped[Optional[str]] = mapped_column(Text)

    # ---------- Educación y actividad ----------
    education_level: Mapped[Optional[str]] = mapped_column(String(50))
    occupation: Mapped[Optional[str]] = mapped_column(String(100))
    daily_activity: Mapped[Optional[str]] = mapped_column(Text)

    # ---------- Estado y egreso ----------
    status: Mapped[str] = mapped_column(resident_status_enum, nullable=False, default='active')
    discharge_date: Mapped[Optional[date]] = mapped_column(Date)
    discharge_reason: Mapped[Optional[str]] = mapped_column(Text)

    # ---------- Asignación ----------
    site_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("sites.id"))
    responsible_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id"))

    # ---------- Auditoría ----------
    created_by_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Resident(id={self.id[:8]}..., rut={self.rut}, status={self.status})>"

    def __str__(self) -> str:
        return f"Residente {self.first_names} {self.paternal_surname} ({self.status})"
