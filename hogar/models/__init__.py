# =====================================================================
# MÓDULO DE MODELOS DE BASE DE DATOS
# =====================================================================

"""
Módulo que contiene todos los modelos de la base de datos del hogar.
Cada modelo está separado en su propio archivo por entidad.
"""

# Importar la clase base y enumeraciones
from .base import (
    Base,
    user_role_enum,
    site_category_enum,
    resident_status_enum,
    resident_gender_enum,
    session_type_enum,
)

# Importar modelos por entidad
from .site import Site
from .user import User
from .resident import Resident
from .record import Contact, ClinicalNote

__all__ = [
    # Base y enums
    "Base",
    "user_role_enum",
    "site_category_enum",
    "resident_status_enum",
    "resident_gender_enum",
    "session_type_enum",

    # Modelos principales
    "Site",
    "User",
    "Resident",
    "Contact",
    "ClinicalNote",
]
