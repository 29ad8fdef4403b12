"""
Campos calculados de las entidades, como funciones puras sobre sus columnas.
"""
from __future__ import annotations

from datetime import date
from typing import Optional


def available_slots(max_capacity: int, current_occupancy: int) -> int:
    return max_capacity - current_occupancy


def occupancy_percentage(max_capacity: int, current_occupancy: int) -> int:
    if max_capacity == 0:
        return 0
    return round(current_occupancy / max_capacity * 100)


def full_address(address: str, commune: Optional[str] = None, region: Optional[str] = None) -> str:
    return ", ".join(part for part in (address, commune, region) if part)


def full_name(*parts: Optional[str]) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def age(birth_date: date, today: Optional[date] = None) -> int:
    """Edad en años cumplidos a la fecha dada (hoy por defecto)."""
    today = today or date.today()
    years = today.year - birth_date.year
    # Ajustar si el cumpleaños aún no ha pasado este año
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years
