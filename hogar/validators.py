"""
Validaciones compartidas: RUT chileno y orden de fechas de ingreso/egreso.
"""
from __future__ import annotations

import re
from datetime import date

from hogar.exceptions import ValidationError

# 1 a 3 grupos de dígitos (el primero de hasta 3), puntos opcionales,
# guión y dígito verificador (número o K)
RUT_PATTERN = re.compile(r"^\d{1,3}(?:\.?\d{3}){0,2}-[\dkK]$")


def rut_check_digit(body: str) -> str:
    """
    Calcula el dígito verificador (módulo 11) de la parte numérica de un RUT.

    Los dígitos se recorren de derecha a izquierda con pesos 2..7 cíclicos;
    11 - (suma % 11) da el dígito, con 11 -> "0" y 10 -> "K".
    """
    total = 0
    weight = 2
    for digit in reversed(body):
        total += int(digit) * weight
        weight = 2 if weight == 7 else weight + 1
    remainder = 11 - (total % 11)
    if remainder == 11:
        return "0"
    if remainder == 10:
        return "K"
    return str(remainder)


def normalize_rut(rut: str) -> str:
    """
    Lleva un RUT a su forma canónica: puntos cada tres dígitos desde la
    derecha, guión y dígito verificador en mayúscula ("12.345.678-5").
    No valida el dígito verificador.
    """
    clean = rut.strip().replace(".", "").replace("-", "")
    body, dv = clean[:-1], clean[-1:].upper()

    groups = []
    while len(body) > 3:
        groups.insert(0, body[-3:])
        body = body[:-3]
    if body:
        groups.insert(0, body)

    return f"{'.'.join(groups)}-{dv}"


def validate_rut(rut: str) -> str:
    """
    Valida formato y dígito verificador; devuelve el RUT normalizado.
    Lanza ValidationError si no es válido.
    """
    value = (rut or "").strip()
    if not RUT_PATTERN.match(value):
        raise ValidationError("Formato de RUT inválido. Use: 12345678-5 o 12.345.678-5")

    canonical = normalize_rut(value)
    body, dv = canonical.replace(".", "").split("-")
    if rut_check_digit(body) != dv:
        raise ValidationError("El dígito verificador del RUT no es válido")
    return canonical


def validate_admission_dates(birth_date: date, admission_date: date, today: date | None = None) -> None:
    """Exige fecha de nacimiento <= fecha de ingreso <= hoy."""
    today = today or date.today()
    if birth_date > today:
        raise ValidationError("La fecha de nacimiento no puede ser futura")
    if admission_date > today:
        raise ValidationError("La fecha de ingreso no puede ser futura")
    if admission_date < birth_date:
        raise ValidationError("La fecha de ingreso no puede ser anterior a la fecha de nacimiento")


def validate_discharge_date(admission_date: date, discharge_date: date) -> None:
    if discharge_date < admission_date:
        raise ValidationError("La fecha de egreso no puede ser anterior a la fecha de ingreso")
