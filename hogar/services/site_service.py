"""
Directorio de sedes: CRUD, activación y contabilidad de ocupación.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.db import atomic
from hogar.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from hogar.models import Site, User, Resident
from hogar.schemas import SiteCreate, SiteUpdate
from hogar.security import new_uuid

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "category", "address", "max_capacity", "current_occupancy", "is_active")


class SiteService:
    """Operaciones sobre sedes. Recibe la sesión de base de datos explícitamente."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # -------------------- Consultas --------------------

    async def get(self, site_id: str) -> Site:
        site = await self.db.get(Site, site_id, populate_existing=True)
        if not site:
            raise NotFoundError(f"Sede con ID {site_id} no encontrada")
        return site

    async def get_by_name(self, name: str) -> Site:
        site = await self.db.scalar(select(Site).where(Site.name == name))
        if not site:
            raise NotFoundError(f'Sede "{name}" no encontrada')
        return site

    async def list(
        self,
        is_active: Optional[bool] = None,
        category: Optional[str] = None,
        region: Optional[str] = None,
        with_capacity: bool = False,
    ) -> List[Site]:
        query = select(Site).order_by(Site.name.asc())

        if is_active is not None:
            query = query.where(Site.is_active == is_active)
        if category:
            query = query.where(Site.category == category)
        if region:
            query = query.where(Site.region == region)
        if with_capacity:
            query = query.where(Site.current_occupancy < Site.max_capacity)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_active(self) -> List[Site]:
        return await self.list(is_active=True)

    async def list_with_capacity(self) -> List[Site]:
        return await self.list(is_active=True, with_capacity=True)

    async def list_by_region(self, region: str) -> List[Site]:
        return await self.list(is_active=True, region=region)

    async def list_by_category(self, category: str) -> List[Site]:
        return await self.list(is_active=True, category=category)

    async def list_nearby(self, region: str, limit: int = 5) -> List[Site]:
        result = await self.db.execute(
            select(Site)
            .where(Site.region == region, Site.is_active.is_(True))
            .order_by(Site.name.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def search(
        self,
        name: Optional[str] = None,
        category: Optional[str] = None,
        region: Optional[str] = None,
        commune: Optional[str] = None,
        with_capacity: bool = False,
    ) -> List[Site]:
        """Búsqueda sobre sedes activas; los textos se comparan por subcadena sin distinguir mayúsculas."""
        query = select(Site).where(Site.is_active.is_(True)).order_by(Site.name.asc())

        if name:
            query = query.where(Site.name.ilike(f"%{name}%"))
        if category:
            query = query.where(Site.category == category)
        if region:
            query = query.where(Site.region.ilike(f"%{region}%"))
        if commune:
            query = query.where(Site.commune.ilike(f"%{commune}%"))
        if with_capacity:
            query = query.where(Site.current_occupancy < Site.max_capacity)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def has_capacity(self, site_id: str) -> bool:
        site = await self.get(site_id)
        return site.is_active and site.current_occupancy < site.max_capacity

    async def users(self, site_id: str) -> List[User]:
        await self.get(site_id)
        result = await self.db.execute(
            select(User).where(User.site_id == site_id).order_by(User.first_name.asc())
        )
        return list(result.scalars().all())

    async def residents(self, site_id: str) -> List[Resident]:
        await self.get(site_id)
        result = await self.db.execute(
            select(Resident).where(Resident.site_id == site_id).order_by(Resident.first_names.asc())
        )
        return list(result.scalars().all())

    async def _count_dependents(self, site_id: str) -> tuple[int, int]:
        users = await self.db.scalar(select(func.count(User.id)).where(User.site_id == site_id))
        residents = await self.db.scalar(select(func.count(Resident.id)).where(Resident.site_id == site_id))
        return users or 0, residents or 0

    async def can_delete(self, site_id: str) -> dict:
        await self.get(site_id)
        users, residents = await self._count_dependents(site_id)
        reasons = []
        if users:
            reasons.append(f"Tiene {users} usuario(s) asignado(s)")
        if residents:
            reasons.append(f"Tiene {residents} residente(s) asignado(s)")
        return {"can_delete": not reasons, "reasons": reasons}

    async def statistics(self) -> dict:
        total = await self.db.scalar(select(func.count(Site.id))) or 0
        active = await self.db.scalar(select(func.count(Site.id)).where(Site.is_active.is_(True))) or 0

        by_category = await self.db.execute(
            select(Site.category, func.count(Site.id)).group_by(Site.category).order_by(Site.category)
        )
        capacity = (await self.db.execute(
            select(
                func.coalesce(func.sum(Site.max_capacity), 0),
                func.coalesce(func.sum(Site.current_occupancy), 0),
            ).where(Site.is_active.is_(True))
        )).one()
        by_region = await self.db.execute(
            select(Site.region, func.count(Site.id))
            .where(Site.region.is_not(None))
            .group_by(Site.region)
            .order_by(Site.region)
        )

        capacity_total, occupied = int(capacity[0]), int(capacity[1])
        return {
            "total_sites": total,
            "active_sites": active,
            "inactive_sites": total - active,
            "by_category": [{"category": c, "count": n} for c, n in by_category.all()],
            "capacity": {
                "total": capacity_total,
                "occupied": occupied,
                "available": capacity_total - occupied,
            },
            "by_region": [{"region": r, "count": n} for r, n in by_region.all()],
        }

    # -------------------- Escritura --------------------

    async def _ensure_name_available(self, name: str) -> None:
        existing = await self.db.scalar(select(Site.id).where(Site.name == name))
        if existing:
            raise ConflictError("Ya existe una sede con ese nombre")

    async def create(self, data: SiteCreate) -> Site:
        try:
            async with atomic(self.db):
                await self._ensure_name_available(data.name)

                if data.current_occupancy > data.max_capacity:
                    raise ValidationError("La capacidad actual no puede ser mayor que la capacidad máxima")

                site = Site(id=new_uuid(), **data.model_dump())
                self.db.add(site)
        except Exception as e:
            logger.error(f"Error al crear sede: {e}")
            raise

        await self.db.refresh(site)
        logger.info(f"Sede creada: {site.name} (ID: {site.id})")
        return site

    async def update(self, site_id: str, data: SiteUpdate) -> Site:
        changes = data.model_dump(exclude_unset=True)

        async with atomic(self.db):
            site = await self.get(site_id)

            if changes.get("name") and changes["name"] != site.name:
                await self._ensure_name_available(changes["name"])

            for field in _REQUIRED_FIELDS:
                if field in changes and changes[field] is None:
                    raise ValidationError(f"El campo {field} no puede ser nulo")

            max_capacity = changes.get("max_capacity", site.max_capacity)
            occupancy = changes.get("current_occupancy", site.current_occupancy)
            if "max_capacity" in changes and max_capacity < occupancy:
                raise ValidationError("La capacidad máxima no puede ser menor que la capacidad actual")
            if occupancy > max_capacity:
                raise ValidationError("La capacidad actual no puede ser mayor que la capacidad máxima")

            if "current_occupancy" in changes:
                logger.warning(
                    f"Ajuste administrativo de ocupación en sede {site_id}: "
                    f"{site.current_occupancy} -> {occupancy}"
                )

            for field, value in changes.items():
                setattr(site, field, value)

        await self.db.refresh(site)
        logger.info(f"Sede actualizada: {site_id}")
        return site

    async def update_max_capacity(self, site_id: str, max_capacity: int) -> Site:
        async with atomic(self.db):
            site = await self.get(site_id)
            if max_capacity < site.current_occupancy:
                raise ValidationError("La nueva capacidad máxima no puede ser menor que la capacidad actual")
            site.max_capacity = max_capacity

        await self.db.refresh(site)
        return site

    async def delete(self, site_id: str) -> None:
        async with atomic(self.db):
            site = await self.get(site_id)
            users, residents = await self._count_dependents(site_id)

            if users:
                raise StateError(
                    "No se puede eliminar la sede porque tiene usuarios asignados. "
                    "Reasigna los usuarios primero o desactiva la sede."
                )
            if residents:
                raise StateError(
                    "No se puede eliminar la sede porque tiene residentes asignados. "
                    "Transfiere los residentes primero o desactiva la sede."
                )

            await self.db.delete(site)

        logger.info(f"Sede eliminada: {site_id}")

    async def _set_active(self, site_id: str, active: bool) -> Site:
        async with atomic(self.db):
            site = await self.get(site_id)
            if site.is_active == active:
                raise StateError("La sede ya está activa" if active else "La sede ya está desactivada")
            site.is_active = active

        await self.db.refresh(site)
        logger.info(f"Sede {'activada' if active else 'desactivada'}: {site_id}")
        return site

    async def deactivate(self, site_id: str) -> Site:
        return await self._set_active(site_id, False)

    async def activate(self, site_id: str) -> Site:
        return await self._set_active(site_id, True)

    # -------------------- Ocupación --------------------
    # Solo las usa el directorio de residentes, dentro de su propia transacción:
    # no hacen commit.

    async def increment_occupancy(self, site_id: str) -> None:
        """
        Ocupa un lugar. La condición va en el mismo UPDATE, de modo que una
        lectura desactualizada no puede llevar el contador sobre el máximo.
        """
        result = await self.db.execute(
            update(Site)
            .where(
                Site.id == site_id,
                Site.is_active.is_(True),
                Site.current_occupancy < Site.max_capacity,
            )
            .values(current_occupancy=Site.current_occupancy + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        site = await self.get(site_id)
        if not site.is_active:
            raise StateError("No se pueden agregar residentes a una sede inactiva")
        raise StateError("La sede ha alcanzado su capacidad máxima")

    async def decrement_occupancy(self, site_id: str) -> None:
        """Libera un lugar; falla si la ocupación ya es 0."""
        result = await self.db.execute(
            update(Site)
            .where(Site.id == site_id, Site.current_occupancy > 0)
            .values(current_occupancy=Site.current_occupancy - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        await self.get(site_id)
        raise StateError("La capacidad actual ya es 0")
