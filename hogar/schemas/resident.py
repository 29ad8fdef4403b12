# =====================================================================
# ESQUEMAS DE RESIDENTES
# =====================================================================

from __future__ import annotations

from typing import Optional, List
from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hogar.computed import full_name, age
from .enums import ResidentStatus, ResidentGender

# =========================================================
# ESQUEMAS DE RESIDENTES
# =========================================================

class ResidentCreate(BaseModel):
    """
    Esquema para la creación de un nuevo residente.

    Attributes:
        rut (str): RUT chileno (12345678-5 o 12.345.678-5)
        first_names (str): Nombres
        paternal_surname (str): Apellido paterno
        maternal_surname (Optional[str]): Apellido materno
        birth_date (date): Fecha de nacimiento
        admission_date (date): Fecha de ingreso
        admission_reason (str): Motivo de ingreso
        status (ResidentStatus): Estado inicial (default: 'active')
        site_id (Optional[str]): Sede asignada (consume un lugar si está activo)
        responsible_id (Optional[str]): Usuario responsable del caso
    """
    rut: str
    first_names: str = Field(..., min_length=1, max_length=100)
    paternal_surname: str = Field(..., min_length=1, max_length=100)
    maternal_surname: Optional[str] = Field(None, max_length=100)
    birth_date: date
    gender: Optional[ResidentGender] = None
    nationality: Optional[str] = Field(None, max_length=100)
    marital_status: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    admission_date: date
    admission_reason: str = Field(..., min_length=1)
    origin: Optional[str] = Field(None, max_length=200)
    legal_status: Optional[str] = Field(None, max_length=100)
    blood_type: Optional[str] = Field(None, max_length=5)
    allergies: Optional[str] = None
    medications: Optional[str] = None
    health_notes: Optional[str] = None
    education_level: Optional[str] = Field(None, max_length=50)
    occupation: Optional[str] = Field(None, max_length=100)
    daily_activity: Optional[str] = None
    status: ResidentStatus = "active"
    site_id: Optional[str] = None
    responsible_id: Optional[str] = None


class ResidentUpdate(BaseModel):
    """
    Esquema para la actualización de un residente existente.
    Un cambio de site_id traslada el lugar ocupado de una sede a otra.
    """
    rut: Optional[str] = None
    first_names: Optional[str] = Field(None, min_length=1, max_length=100)
    paternal_surname: Optional[str] = Field(None, min_length=1, max_length=100)
    maternal_surname: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    gender: Optional[ResidentGender] = None
    nationality: Optional[str] = Field(None, max_length=100)
    marital_status: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    admission_date: Optional[date] = None
    admission_reason: Optional[str] = Field(None, min_length=1)
    origin: Optional[str] = Field(None, max_length=200)
    legal_status: Optional[str] = Field(None, max_length=100)
    blood_type: Optional[str] = Field(None, max_length=5)
    allergies: Optional[str] = None
    medications: Optional[str] = None
    health_notes: Optional[str] = None
    education_level: Optional[str] = Field(None, max_length=50)
    occupation: Optional[str] = Field(None, max_length=100)
    daily_activity: Optional[str] = None
    status: Optional[ResidentStatus] = None
    site_id: Optional[str] = None
    responsible_id: Optional[str] = None


class ResidentDischarge(BaseModel):
    """
    Esquema para el egreso de un residente.

    Attributes:
        discharge_reason (str): Motivo de egreso
        discharge_date (Optional[date]): Fecha de egreso (default: hoy)
    """
    discharge_reason: str = Field(..., min_length=1)
    discharge_date: Optional[date] = None


class ResidentOut(BaseModel):
    """
    Esquema para la salida de datos de residente, con nombre completo y edad calculados.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    rut: str
    first_names: str
    paternal_surname: str
    maternal_surname: Optional[str] = None
    full_name: str
    age: int
    birth_date: date
    gender: Optional[ResidentGender] = None
    nationality: str
    marital_status: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    admission_date: date
    admission_reason: str
    origin: Optional[str] = None
    legal_status: Optional[str] = None
    blood_type: Optional[str] = None
    allergies: Optional[str] = None
    medications: Optional[str] = None
    health_notes: Optional[str] = None
    education_level: Optional[str] = None
    occupation: Optional[str] = None
    daily_activity: Optional[str] = None
    status: ResidentStatus
    discharge_date: Optional[date] = None
    discharge_reason: Optional[str] = None
    site_id: Optional[str] = None
    responsible_id: Optional[str] = None
    created_by_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, resident) -> "ResidentOut":
        columns = {c: getattr(resident, c) for c in resident.__table__.columns.keys()}
        return cls(
            **columns,
            full_name=full_name(resident.first_names, resident.paternal_surname, resident.maternal_surname),
            age=age(resident.birth_date),
        )


class StatusCount(BaseModel):
    status: str
    count: int


class GenderCount(BaseModel):
    gender: str
    count: int


class MonthCount(BaseModel):
    month: str
    count: int


class ResidentStatistics(BaseModel):
    """
    Estadísticas de residentes (opcionalmente de una sola sede).

    Attributes:
        total (int): Total de residentes
        by_status (List[StatusCount]): Conteo por estado
        by_gender (List[GenderCount]): Conteo por género (sin nulos)
        admissions_by_month (List[MonthCount]): Ingresos de los últimos 12 meses con datos, 'YYYY-MM' desc
    """
    total: int
    by_status: List[StatusCount]
    by_gender: List[GenderCount]
    admissions_by_month: List[MonthCount]
