# =====================================================================
# MODELO BASE Y ENUMERACIONES PARA LA BASE DE DATOS
# =====================================================================

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Enum

# ---------- Clase Base para todos los modelos ----------
class Base(DeclarativeBase):
    """
    Clase base declarativa para todos los modelos de SQLAlchemy.
    Proporciona funcionalidad común a todas las entidades.
    """
    pass

# ---------- Valores de las enumeraciones ----------
# Deben coincidir con los Literal de hogar/schemas/enums.py

USER_ROLES = ('director', 'psychologist', 'social_worker', 'admin', 'volunteer')
SITE_CATEGORIES = ('shelter_house', 'day_center', 'residence', 'other')
RESIDENT_STATUSES = ('active', 'inactive', 'discharged', 'transferred')
RESIDENT_GENDERS = ('male', 'female', 'other', 'unspecified')
SESSION_TYPES = ('individual', 'family', 'group', 'evaluation')

# ---------- Enumeraciones de la base de datos ----------

user_role_enum = Enum(*USER_ROLES, name='user_role_enum')

site_category_enum = Enum(*SITE_CATEGORIES, name='site_category_enum')

resident_status_enum = Enum(*RESIDENT_STATUSES, name='resident_status_enum')

resident_gender_enum = Enum(*RESIDENT_GENDERS, name='resident_gender_enum')

session_type_enum = Enum(*SESSION_TYPES, name='session_type_enum')
