"""
Directorio de usuarios: cuentas del personal, hash de credenciales y login.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.db import atomic
from hogar.exceptions import ConflictError, NotFoundError, ValidationError
from hogar.models import User, Site, Resident, ClinicalNote
from hogar.schemas import UserCreate, UserUpdate
from hogar.security import new_uuid, hash_password, verify_password, normalize_email
from hogar.validators import validate_rut

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("first_name", "last_name", "email", "role", "is_active")


class UserService:
    """Operaciones sobre cuentas de usuario."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # -------------------- Consultas --------------------

    async def get(self, user_id: str) -> User:
        user = await self.db.get(User, user_id, populate_existing=True)
        if not user:
            raise NotFoundError(f"Usuario con ID {user_id} no encontrado")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.email == normalize_email(email)))

    async def get_active(self, user_id: str) -> User:
        """Usuario existente y activo; NotFound en otro caso."""
        user = await self.db.scalar(select(User).where(User.id == user_id, User.is_active.is_(True)))
        if not user:
            raise NotFoundError("Responsable no encontrado o inactivo")
        return user

    def _filtered(self, search: Optional[str], role: Optional[str], is_active: Optional[bool]):
        query = select(User)
        if search:
            term = f"%{search}%"
            query = query.where(or_(
                User.first_name.ilike(term),
                User.last_name.ilike(term),
                User.email.ilike(term),
            ))
        if role:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        return query

    async def list(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[List[User], int]:
        """Devuelve (página de usuarios, total que cumple los filtros)."""
        query = self._filtered(search, role, is_active)
        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))

        query = query.order_by(User.last_name.asc(), User.first_name.asc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def search(self, text: str) -> List[User]:
        users, _ = await self.list(search=text)
        return users

    async def statistics(self) -> dict:
        total = await self.db.scalar(select(func.count(User.id))) or 0
        active = await self.db.scalar(select(func.count(User.id)).where(User.is_active.is_(True))) or 0
        by_role = await self.db.execute(
            select(User.role, func.count(User.id)).group_by(User.role).order_by(User.role)
        )
        return {
            "total_users": total,
            "active_users": active,
            "inactive_users": total - active,
            "by_role": [{"role": r, "count": n} for r, n in by_role.all()],
        }

    # -------------------- Escritura --------------------

    async def _ensure_email_available(self, email: str) -> None:
        if await self.db.scalar(select(User.id).where(User.email == email)):
            raise ConflictError("El email ya está registrado")

    async def _ensure_rut_available(self, rut: str) -> None:
        if await self.db.scalar(select(User.id).where(User.rut == rut)):
            raise ConflictError("El RUT ya está registrado")

    async def _ensure_site_exists(self, site_id: str) -> None:
        if not await self.db.get(Site, site_id):
            raise NotFoundError("Sede no encontrada")

    async def create(self, data: UserCreate) -> User:
        values = data.model_dump(exclude={"password"})
        values["email"] = normalize_email(values["email"])

        async with atomic(self.db):
            await self._ensure_email_available(values["email"])
            # RUT opcional: None lo omite, cualquier otro valor se valida
            if values.get("rut") is not None:
                values["rut"] = validate_rut(values["rut"])
                await self._ensure_rut_available(values["rut"])
            if values.get("site_id"):
                await self._ensure_site_exists(values["site_id"])

            user = User(id=new_uuid(), password_hash=hash_password(data.password), **values)
            self.db.add(user)

        await self.db.refresh(user)
        logger.info(f"Usuario creado: {user.email} ({user.role})")
        return user

    async def update(self, user_id: str, data: UserUpdate) -> User:
        changes = data.model_dump(exclude_unset=True)

        async with atomic(self.db):
            user = await self.get(user_id)

            for field in _REQUIRED_FIELDS:
                if field in changes and changes[field] is None:
                    raise ValidationError(f"El campo {field} no puede ser nulo")

            if changes.get("email"):
                changes["email"] = normalize_email(changes["email"])
                if changes["email"] != user.email:
                    await self._ensure_email_available(changes["email"])

            if changes.get("rut") is not None:
                changes["rut"] = validate_rut(changes["rut"])
                if changes["rut"] != user.rut:
                    await self._ensure_rut_available(changes["rut"])

            if changes.get("site_id"):
                await self._ensure_site_exists(changes["site_id"])

            password = changes.pop("password", None)
            if password:
                user.password_hash = hash_password(password)

            for field, value in changes.items():
                setattr(user, field, value)

        await self.db.refresh(user)
        logger.info(f"Usuario actualizado: {user_id}")
        return user

    async def deactivate(self, user_id: str) -> User:
        async with atomic(self.db):
            user = await self.get(user_id)
            user.is_active = False

        await self.db.refresh(user)
        logger.info(f"Usuario desactivado: {user_id}")
        return user

    async def _is_referenced(self, user_id: str) -> bool:
        residents = await self.db.scalar(
            select(func.count(Resident.id)).where(
                or_(Resident.responsible_id == user_id, Resident.created_by_id == user_id)
            )
        )
        notes = await self.db.scalar(
            select(func.count(ClinicalNote.id)).where(ClinicalNote.psychologist_id == user_id)
        )
        return bool(residents or notes)

    async def delete(self, user_id: str) -> bool:
        """
        Elimina la cuenta. Si otras entidades la referencian, solo se desactiva.
        Devuelve True si hubo borrado físico.
        """
        async with atomic(self.db):
            user = await self.get(user_id)
            if await self._is_referenced(user_id):
                user.is_active = False
                removed = False
            else:
                await self.db.delete(user)
                removed = True

        logger.info(f"Usuario {'eliminado' if removed else 'desactivado (tiene referencias)'}: {user_id}")
        return removed

    # -------------------- Autenticación --------------------

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Devuelve el usuario si las credenciales son válidas, o None.
        No distingue entre email inexistente y contraseña incorrecta.
        """
        user = await self.get_by_email(email)
        valid = verify_password(password, user.password_hash if user else None)

        if not user or not valid or not user.is_active:
            return None

        async with atomic(self.db):
            user.last_login = datetime.now(timezone.utc)

        await self.db.refresh(user)
        return user
