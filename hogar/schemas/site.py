# =====================================================================
# ESQUEMAS DE SEDES
# =====================================================================

from __future__ import annotations

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from hogar.computed import available_slots, occupancy_percentage, full_address
from .enums import SiteCategory

_SITE_COLUMNS = (
    "id", "name", "category", "address", "commune", "region", "phone",
    "max_capacity", "current_occupancy", "is_active", "created_at", "updated_at",
)

class SiteCreate(BaseModel):
    """
    Esquema para la creación de una nueva sede.

    Attributes:
        name (str): Nombre único de la sede
        category (SiteCategory): Tipo de sede
        address (str): Dirección física
        commune (Optional[str]): Comuna
        region (Optional[str]): Región
        phone (Optional[str]): Teléfono de contacto
        max_capacity (int): Capacidad máxima (1-500)
        current_occupancy (int): Ocupación inicial (default: 0)
        is_active (bool): Sede activa (default: True)
    """
    name: str = Field(..., min_length=1, max_length=200)
    category: SiteCategory = "residence"
    address: str = Field(..., min_length=1)
    commune: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    max_capacity: int = Field(..., ge=1, le=500)
    current_occupancy: int = Field(0, ge=0)
    is_active: bool = True


class SiteUpdate(BaseModel):
    """
    Esquema para la actualización de una sede.
    current_occupancy solo debe usarse como ajuste administrativo explícito.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[SiteCategory] = None
    address: Optional[str] = Field(None, min_length=1)
    commune: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    max_capacity: Optional[int] = Field(None, ge=1, le=500)
    current_occupancy: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class SiteMaxCapacityUpdate(BaseModel):
    max_capacity: int = Field(..., ge=1, le=500)


class SiteOut(BaseModel):
    """
    Esquema de salida de una sede, con los campos calculados
    (lugares disponibles, porcentaje de ocupación, dirección completa).
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: SiteCategory
    address: str
    commune: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None
    max_capacity: int
    current_occupancy: int
    is_active: bool
    available_slots: int
    occupancy_percentage: int
    full_address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, site) -> "SiteOut":
        return cls(
            **{k: getattr(site, k) for k in _SITE_COLUMNS},
            available_slots=available_slots(site.max_capacity, site.current_occupancy),
            occupancy_percentage=occupancy_percentage(site.max_capacity, site.current_occupancy),
            full_address=full_address(site.address, site.commune, site.region),
        )


class SiteCapacityOut(BaseModel):
    site_id: str
    has_capacity: bool
    available_slots: int


class SiteDeleteCheck(BaseModel):
    can_delete: bool
    reasons: List[str]


class CategoryCount(BaseModel):
    category: str
    count: int


class RegionCount(BaseModel):
    region: str
    count: int


class CapacitySummary(BaseModel):
    total: int
    occupied: int
    available: int


class SiteStatistics(BaseModel):
    """
    Estadísticas agregadas de sedes.

    Attributes:
        total_sites (int): Total de sedes
        active_sites (int): Sedes activas
        inactive_sites (int): Sedes inactivas
        by_category (List[CategoryCount]): Conteo por tipo
        capacity (CapacitySummary): Capacidad total/ocupada/disponible de sedes activas
        by_region (List[RegionCount]): Conteo por región
    """
    total_sites: int
    active_sites: int
    inactive_sites: int
    by_category: List[CategoryCount]
    capacity: CapacitySummary
    by_region: List[RegionCount]
