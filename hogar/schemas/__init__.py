# =====================================================================
# MÓDULO DE ESQUEMAS DE PYDANTIC
# =====================================================================

"""
Módulo que contiene todos los esquemas de Pydantic de la API del hogar.
Cada esquema está separado en su propio archivo por entidad.
"""

from .enums import UserRole, SiteCategory, ResidentStatus, ResidentGender, SessionType

from .auth import LoginRequest, TokenResponse
from .site import (
    SiteCreate, SiteUpdate, SiteMaxCapacityUpdate, SiteOut, SiteCapacityOut,
    SiteDeleteCheck, SiteStatistics, CategoryCount, RegionCount, CapacitySummary,
)
from .user import UserCreate, UserUpdate, UserOut, UserStatistics, RoleCount
from .resident import (
    ResidentCreate, ResidentUpdate, ResidentDischarge, ResidentOut,
    ResidentStatistics, StatusCount, GenderCount, MonthCount,
)
from .record import ContactCreate, ContactOut, ClinicalNoteCreate, ClinicalNoteOut
from .pagination import PaginationParams, PaginatedResponse, ResidentFilterParams
