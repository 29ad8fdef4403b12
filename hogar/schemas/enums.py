# =====================================================================
# ENUMERACIONES DEL SISTEMA
# =====================================================================

from __future__ import annotations

from typing import Literal

"""
Enumeraciones principales que definen los tipos y estados del sistema.
Estas enumeraciones deben coincidir con las definiciones en hogar/models/base.py.
"""

# Roles de usuario en el sistema
UserRole = Literal["director", "psychologist", "social_worker", "admin", "volunteer"]

# Tipos de sede
SiteCategory = Literal["shelter_house", "day_center", "residence", "other"]

# Estados posibles de un residente
ResidentStatus = Literal["active", "inactive", "discharged", "transferred"]

# Género declarado del residente
ResidentGender = Literal["male", "female", "other", "unspecified"]

# Tipos de sesión de las notas clínicas
SessionType = Literal["individual", "family", "group", "evaluation"]
