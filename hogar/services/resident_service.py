"""
Directorio de residentes: ingreso, egreso, traslado entre sedes y consultas.

Un residente ocupa un lugar en su sede si y solo si está en estado 'active'.
Cada operación que mueve lugares (ingreso, traslado, egreso, borrado) se
ejecuta en una única transacción junto con el cambio del residente: si algo
falla, ni el residente ni los contadores de las sedes quedan modificados.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select, func, or_, extract, delete
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.config import settings
from hogar.db import atomic
from hogar.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from hogar.models import Resident, User, Contact, ClinicalNote
from hogar.schemas import ResidentCreate, ResidentUpdate
from hogar.security import new_uuid
from hogar.services.site_service import SiteService
from hogar.services.user_service import UserService
from hogar.validators import (
    normalize_rut,
    validate_rut,
    validate_admission_dates,
    validate_discharge_date,
)

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "rut", "first_names", "paternal_surname", "birth_date", "nationality",
    "admission_date", "admission_reason", "status",
)


def holds_capacity(status: str, site_id: Optional[str]) -> bool:
    return status == "active" and site_id is not None


class ResidentService:
    """Operaciones sobre residentes; usa SiteService para la ocupación de sedes."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sites = SiteService(db)
        self.users = UserService(db)

    # -------------------- Consultas --------------------

    async def get(self, resident_id: str) -> Resident:
        resident = await self.db.get(Resident, resident_id, populate_existing=True)
        if not resident:
            raise NotFoundError(f"Residente con ID {resident_id} no encontrado")
        return resident

    async def get_by_rut(self, rut: str) -> Resident:
        resident = await self.db.scalar(select(Resident).where(Resident.rut == normalize_rut(rut)))
        if not resident:
            raise NotFoundError(f"Residente con RUT {rut} no encontrado")
        return resident

    async def list(
        self,
        status: Optional[str] = None,
        site_id: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[List[Resident], int]:
        """Devuelve (página de residentes ordenada por nombres, total filtrado)."""
        query = select(Resident)

        if status:
            query = query.where(Resident.status == status)
        if site_id:
            query = query.where(Resident.site_id == site_id)
        if search:
            term = f"%{search}%"
            query = query.where(or_(
                Resident.first_names.ilike(term),
                Resident.paternal_surname.ilike(term),
                Resident.rut.ilike(term),
            ))
        if date_from:
            query = query.where(Resident.admission_date >= date_from)
        if date_to:
            query = query.where(Resident.admission_date <= date_to)

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))

        query = query.order_by(Resident.first_names.asc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def list_active(self) -> List[Resident]:
        residents, _ = await self.list(status="active")
        return residents

    async def list_by_site(self, site_id: str) -> List[Resident]:
        residents, _ = await self.list(site_id=site_id)
        return residents

    async def without_responsible(self, site_id: Optional[str] = None) -> List[Resident]:
        query = select(Resident).where(
            Resident.responsible_id.is_(None),
            Resident.status == "active",
        )
        if site_id:
            query = query.where(Resident.site_id == site_id)
        result = await self.db.execute(query.order_by(Resident.admission_date.desc()))
        return list(result.scalars().all())

    async def birthdays_this_month(self, today: Optional[date] = None) -> List[Resident]:
        today = today or date.today()
        result = await self.db.execute(
            select(Resident)
            .where(
                extract("month", Resident.birth_date) == today.month,
                Resident.status == "active",
            )
            .order_by(extract("day", Resident.birth_date).asc())
        )
        return list(result.scalars().all())

    async def search(
        self,
        first_names: Optional[str] = None,
        paternal_surname: Optional[str] = None,
        rut: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Resident]:
        """Búsqueda multi-campo, limitada a settings.search_limit resultados."""
        query = select(Resident)

        if first_names:
            query = query.where(Resident.first_names.ilike(f"%{first_names}%"))
        if paternal_surname:
            query = query.where(Resident.paternal_surname.ilike(f"%{paternal_surname}%"))
        if rut:
            query = query.where(Resident.rut.ilike(f"%{rut}%"))
        if status:
            query = query.where(Resident.status == status)

        result = await self.db.execute(
            query.order_by(Resident.first_names.asc()).limit(settings.search_limit)
        )
        return list(result.scalars().all())

    async def statistics(self, site_id: Optional[str] = None) -> dict:
        def scoped(query):
            return query.where(Resident.site_id == site_id) if site_id else query

        total = await self.db.scalar(scoped(select(func.count(Resident.id)))) or 0

        by_status = await self.db.execute(
            scoped(select(Resident.status, func.count(Resident.id)))
            .group_by(Resident.status)
            .order_by(Resident.status)
        )
        by_gender = await self.db.execute(
            scoped(select(Resident.gender, func.count(Resident.id)))
            .where(Resident.gender.is_not(None))
            .group_by(Resident.gender)
            .order_by(Resident.gender)
        )

        year = extract("year", Resident.admission_date)
        month = extract("month", Resident.admission_date)
        by_month = await self.db.execute(
            scoped(select(year, month, func.count(Resident.id)))
            .group_by(year, month)
            .order_by(year.desc(), month.desc())
            .limit(12)
        )

        return {
            "total": total,
            "by_status": [{"status": s, "count": n} for s, n in by_status.all()],
            "by_gender": [{"gender": g, "count": n} for g, n in by_gender.all()],
            "admissions_by_month": [
                {"month": f"{int(y):04d}-{int(m):02d}", "count": n} for y, m, n in by_month.all()
            ],
        }

    # -------------------- Escritura --------------------

    async def _ensure_rut_available(self, rut: str) -> None:
        if await self.db.scalar(select(Resident.id).where(Resident.rut == rut)):
            raise ConflictError("El RUT ya está registrado en el sistema")

    async def create(self, data: ResidentCreate, created_by_id: str) -> Resident:
        rut = validate_rut(data.rut)
        validate_admission_dates(data.birth_date, data.admission_date)

        values = data.model_dump(exclude={"rut"})
        if not values.get("nationality"):
            values["nationality"] = "Chilena"

        try:
            async with atomic(self.db):
                await self._ensure_rut_available(rut)

                if not await self.db.get(User, created_by_id):
                    raise NotFoundError("Usuario creador no encontrado")

                if data.site_id:
                    await self.sites.get(data.site_id)
                    if holds_capacity(data.status, data.site_id):
                        await self.sites.increment_occupancy(data.site_id)

                if data.responsible_id:
                    await self.users.get_active(data.responsible_id)

                resident = Resident(id=new_uuid(), rut=rut, created_by_id=created_by_id, **values)
                self.db.add(resident)
        except Exception as e:
            logger.error(f"Error al crear residente: {e}")
            raise

        await self.db.refresh(resident)
        logger.info(f"Residente creado: {resident.first_names} {resident.paternal_surname} (ID: {resident.id})")
        return resident

    async def _move_capacity(
        self,
        old_status: str,
        old_site_id: Optional[str],
        new_status: str,
        new_site_id: Optional[str],
    ) -> None:
        """Libera el lugar anterior y ocupa el nuevo, dentro de la transacción en curso."""
        old_holds = holds_capacity(old_status, old_site_id)
        new_holds = holds_capacity(new_status, new_site_id)

        if old_holds and new_holds and old_site_id == new_site_id:
            return
        if old_holds:
            await self.sites.decrement_occupancy(old_site_id)
        if new_holds:
            await self.sites.increment_occupancy(new_site_id)

    async def update(self, resident_id: str, data: ResidentUpdate) -> Resident:
        changes = data.model_dump(exclude_unset=True)

        try:
            async with atomic(self.db):
                resident = await self.get(resident_id)

                for field in _REQUIRED_FIELDS:
                    if field in changes and changes[field] is None:
                        raise ValidationError(f"El campo {field} no puede ser nulo")

                if "rut" in changes:
                    changes["rut"] = validate_rut(changes["rut"])
                    if changes["rut"] != resident.rut:
                        await self._ensure_rut_available(changes["rut"])

                if "birth_date" in changes or "admission_date" in changes:
                    admission = changes.get("admission_date", resident.admission_date)
                    validate_admission_dates(changes.get("birth_date", resident.birth_date), admission)
                    if resident.discharge_date:
                        validate_discharge_date(admission, resident.discharge_date)

                if changes.get("responsible_id"):
                    await self.users.get_active(changes["responsible_id"])

                new_site_id = changes["site_id"] if "site_id" in changes else resident.site_id
                new_status = changes.get("status", resident.status)
                # El egreso exige fecha y motivo: solo por discharge()
                if new_status == "discharged" and resident.status != "discharged":
                    raise StateError("Para egresar a un residente use la acción de egreso")
                if "site_id" in changes and new_site_id:
                    await self.sites.get(new_site_id)

                await self._move_capacity(resident.status, resident.site_id, new_status, new_site_id)

                for field, value in changes.items():
                    setattr(resident, field, value)
        except Exception as e:
            logger.error(f"Error al actualizar residente {resident_id}: {e}")
            raise

        await self.db.refresh(resident)
        logger.info(f"Residente actualizado: {resident_id}")
        return resident

    async def assign_responsible(self, resident_id: str, user_id: str) -> Resident:
        return await self.update(resident_id, ResidentUpdate(responsible_id=user_id))

    async def change_site(self, resident_id: str, site_id: str) -> Resident:
        return await self.update(resident_id, ResidentUpdate(site_id=site_id))

    async def activate(self, resident_id: str) -> Resident:
        """Reactiva un residente; si tiene sede, vuelve a ocupar un lugar en ella."""
        resident = await self.get(resident_id)
        if resident.status == "active":
            raise StateError("El residente ya está activo")
        return await self.update(resident_id, ResidentUpdate(status="active"))

    async def discharge(self, resident_id: str, reason: str, discharge_date: Optional[date] = None) -> Resident:
        try:
            async with atomic(self.db):
                resident = await self.get(resident_id)

                if resident.status == "discharged":
                    raise StateError("El residente ya está egresado")

                discharge_date = discharge_date or date.today()
                # La fecha se valida antes de liberar el lugar en la sede
                validate_discharge_date(resident.admission_date, discharge_date)

                if holds_capacity(resident.status, resident.site_id):
                    await self.sites.decrement_occupancy(resident.site_id)

                resident.status = "discharged"
                resident.discharge_reason = reason
                resident.discharge_date = discharge_date
        except Exception as e:
            logger.error(f"Error al egresar residente {resident_id}: {e}")
            raise

        await self.db.refresh(resident)
        logger.info(f"Residente egresado: {resident_id}")
        return resident

    async def delete(self, resident_id: str) -> None:
        async with atomic(self.db):
            resident = await self.get(resident_id)

            if holds_capacity(resident.status, resident.site_id):
                await self.sites.decrement_occupancy(resident.site_id)

            await self.db.execute(delete(Contact).where(Contact.resident_id == resident_id))
            await self.db.execute(delete(ClinicalNote).where(ClinicalNote.resident_id == resident_id))
            await self.db.delete(resident)

        logger.info(f"Residente eliminado: {resident_id}")
