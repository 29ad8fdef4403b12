"""
Registros asociados a un residente: contactos y notas clínicas.
"""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.db import atomic
from hogar.exceptions import NotFoundError, ValidationError
from hogar.models import Contact, ClinicalNote, Resident, User
from hogar.schemas import ContactCreate, ClinicalNoteCreate
from hogar.security import new_uuid

logger = logging.getLogger(__name__)


async def _ensure_resident(db: AsyncSession, resident_id: str) -> None:
    if not await db.get(Resident, resident_id):
        raise NotFoundError(f"Residente con ID {resident_id} no encontrado")


class ContactService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, resident_id: str) -> List[Contact]:
        await _ensure_resident(self.db, resident_id)
        result = await self.db.execute(
            select(Contact)
            .where(Contact.resident_id == resident_id)
            .order_by(Contact.is_emergency_contact.desc(), Contact.name.asc())
        )
        return list(result.scalars().all())

    async def create(self, resident_id: str, data: ContactCreate) -> Contact:
        async with atomic(self.db):
            await _ensure_resident(self.db, resident_id)
            contact = Contact(id=new_uuid(), resident_id=resident_id, **data.model_dump())
            self.db.add(contact)

        await self.db.refresh(contact)
        logger.info(f"Contacto creado para residente {resident_id}: {contact.id}")
        return contact

    async def delete(self, resident_id: str, contact_id: str) -> None:
        async with atomic(self.db):
            contact = await self.db.scalar(
                select(Contact).where(Contact.id == contact_id, Contact.resident_id == resident_id)
            )
            if not contact:
                raise NotFoundError("Contacto no encontrado")
            await self.db.delete(contact)


class ClinicalNoteService:
    """Notas de sesión psicológica. Solo alta y consulta."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, resident_id: str) -> List[ClinicalNote]:
        await _ensure_resident(self.db, resident_id)
        result = await self.db.execute(
            select(ClinicalNote)
            .where(ClinicalNote.resident_id == resident_id)
            .order_by(ClinicalNote.session_date.desc(), ClinicalNote.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, resident_id: str, data: ClinicalNoteCreate, author_id: str) -> ClinicalNote:
        psychologist_id = data.psychologist_id or author_id

        async with atomic(self.db):
            await _ensure_resident(self.db, resident_id)

            author = await self.db.get(User, psychologist_id)
            if not author:
                raise NotFoundError("Psicólogo/a no encontrado/a")
            if author.role != "psychologist":
                raise ValidationError("Solo un usuario con rol de psicólogo/a puede registrar notas clínicas")

            if data.next_session and data.next_session < data.session_date:
                raise ValidationError("La próxima sesión no puede ser anterior a la sesión registrada")

            note = ClinicalNote(
                id=new_uuid(),
                resident_id=resident_id,
                psychologist_id=psychologist_id,
                **data.model_dump(exclude={"psychologist_id"}),
            )
            self.db.add(note)

        await self.db.refresh(note)
        logger.info(f"Nota clínica registrada para residente {resident_id}: {note.id}")
        return note
