# =====================================================================
# ESQUEMAS DE PAGINACIÓN Y FILTROS
# =====================================================================

from __future__ import annotations

from typing import Optional, List, Generic, TypeVar
from datetime import date
from pydantic import BaseModel, Field

from .enums import ResidentStatus

T = TypeVar("T")

# =========================================================
# ESQUEMAS DE PAGINACIÓN
# =========================================================

class PaginationParams(BaseModel):
    """
    Esquema para parámetros de paginación.

    Attributes:
        page (int): Número de página (default: 1, mínimo: 1)
        size (int): Tamaño de página (default: 20, rango: 1-100)
    """
    page: int = Field(1, ge=1, description="Número de página")
    size: int = Field(20, ge=1, le=100, description="Tamaño de página")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Esquema para respuesta paginada.

    Attributes:
        items (List[T]): Elementos de la página actual
        total (int): Total de elementos
        page (int): Página actual
        size (int): Tamaño de página
        pages (int): Total de páginas
        has_next (bool): Indica si hay página siguiente
        has_prev (bool): Indica si hay página anterior
    """
    items: List[T]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, items: list, total: int, pagination: PaginationParams):
        pages = (total + pagination.size - 1) // pagination.size
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            size=pagination.size,
            pages=pages,
            has_next=pagination.page < pages,
            has_prev=pagination.page > 1,
        )


# =========================================================
# ESQUEMAS DE FILTROS
# =========================================================

class ResidentFilterParams(BaseModel):
    """
    Filtros del listado de residentes.

    Attributes:
        status (Optional[ResidentStatus]): Estado del residente
        site_id (Optional[str]): Sede
        search (Optional[str]): Texto libre sobre nombres, apellido paterno y RUT
        date_from (Optional[date]): Ingreso desde
        date_to (Optional[date]): Ingreso hasta
    """
    status: Optional[ResidentStatus] = Field(None, description="Filtrar por estado")
    site_id: Optional[str] = Field(None, description="Filtrar por sede")
    search: Optional[str] = Field(None, description="Término de búsqueda")
    date_from: Optional[date] = Field(None, description="Ingreso desde")
    date_to: Optional[date] = Field(None, description="Ingreso hasta")
