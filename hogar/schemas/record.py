# =====================================================================
# ESQUEMAS DE CONTACTOS Y NOTAS CLÍNICAS
# =====================================================================

from __future__ import annotations

from typing import Optional
from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, Field

from .enums import SessionType

class ContactCreate(BaseModel):
    """
    Esquema para registrar un contacto de un residente.

    Attributes:
        name (str): Nombre del contacto
        relationship (str): Parentesco o relación
        phone (str): Teléfono
        is_emergency_contact (bool): Contacto de emergencia (default: False)
        notes (Optional[str]): Observaciones
    """
    name: str = Field(..., min_length=1, max_length=200)
    relationship: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    is_emergency_contact: bool = False
    notes: Optional[str] = None


class ContactOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resident_id: str
    name: str
    relationship: str
    phone: str
    is_emergency_contact: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class ClinicalNoteCreate(BaseModel):
    """
    Esquema para registrar una nota de sesión psicológica.
    El autor es el usuario autenticado, salvo que se indique psychologist_id.
    """
    session_date: date
    session_type: SessionType = "individual"
    content: str = Field(..., min_length=1)
    diagnosis: Optional[str] = None
    recommendations: Optional[str] = None
    next_session: Optional[date] = None
    psychologist_id: Optional[str] = None


class ClinicalNoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resident_id: str
    psychologist_id: str
    session_date: date
    session_type: SessionType
    content: str
    diagnosis: Optional[str] = None
    recommendations: Optional[str] = None
    next_session: Optional[date] = None
    created_at: Optional[datetime] = None
