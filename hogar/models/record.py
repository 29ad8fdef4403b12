# =====================================================================
# MODELOS DE CONTACTOS Y NOTAS CLÍNICAS
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Boolean, ForeignKey, Date, DateTime, func
from datetime import datetime, date
from typing import Optional

from .base import Base, session_type_enum

class Contact(Base):
    """
    Contacto de un residente (familiar, tutor, etc.).
    Se elimina junto con su residente.
    """
    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    resident_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("residents.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    relationship: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    is_emergency_contact: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Contact(id={self.id[:8]}..., resident_id={self.resident_id[:8]}..., name={self.name})>"


class ClinicalNote(Base):
    """
    Nota de sesión psicológica sobre un residente.
    Solo se agregan; no existe flujo de edición ni borrado.
    """
    __tablename__ = "clinical_notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    resident_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("residents.id", ondelete="CASCADE"),
        nullable=False
    )
    psychologist_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)

    # ---------- Sesión ----------
    session_date: Mapped[date] = mapped_column(Date, nullable=False)
    session_type: Mapped[str] = mapped_column(session_type_enum, nullable=False, default='individual')
    content: Mapped[str] = mapped_column(Text, nullable=False)
    diagnosis: Mapped[Optional[str]] = mapped_column(Text)
    recommendations: Mapped[Optional[str]] = mapped_column(Text)
    next_session: Mapped[Optional[date]] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<ClinicalNote(id={self.id[:8]}..., resident_id={self.resident_id[:8]}..., date={self.session_date})>"
