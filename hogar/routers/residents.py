# hogar/routers/residents.py
from __future__ import annotations

from typing import List, Optional

from fastapi import Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.deps import get_db, get_current_user
from hogar.routing import Route, build_router, ALL_ROLES, CASE_MANAGERS, CLINICAL, DIRECTION, STAFF
from hogar.schemas import (
    ResidentCreate, ResidentUpdate, ResidentDischarge, ResidentOut, ResidentStatistics,
    ResidentStatus, ContactCreate, ContactOut, ClinicalNoteCreate, ClinicalNoteOut,
    PaginationParams, PaginatedResponse, ResidentFilterParams,
)
from hogar.services.resident_service import ResidentService
from hogar.services.record_service import ContactService, ClinicalNoteService

# -------------------- Consultas --------------------

async def list_residents(
    pagination: PaginationParams = Depends(),
    filters: ResidentFilterParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    residents, total = await ResidentService(db).list(
        status=filters.status,
        site_id=filters.site_id,
        search=filters.search,
        date_from=filters.date_from,
        date_to=filters.date_to,
        offset=(pagination.page - 1) * pagination.size,
        limit=pagination.size,
    )
    items = [ResidentOut.from_model(r) for r in residents]
    return PaginatedResponse[ResidentOut].build(items, total, pagination)

async def list_active_residents(db: AsyncSession = Depends(get_db)):
    return [ResidentOut.from_model(r) for r in await ResidentService(db).list_active()]

async def resident_statistics(site_id: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    return await ResidentService(db).statistics(site_id)

async def search_residents(
    first_names: Optional[str] = Query(None),
    paternal_surname: Optional[str] = Query(None),
    rut: Optional[str] = Query(None),
    status: Optional[ResidentStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    residents = await ResidentService(db).search(
        first_names=first_names, paternal_surname=paternal_surname, rut=rut, status=status
    )
    return [ResidentOut.from_model(r) for r in residents]

async def residents_without_responsible(site_id: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    return [ResidentOut.from_model(r) for r in await ResidentService(db).without_responsible(site_id)]

async def residents_birthdays(db: AsyncSession = Depends(get_db)):
    return [ResidentOut.from_model(r) for r in await ResidentService(db).birthdays_this_month()]

async def get_resident_by_rut(rut: str, db: AsyncSession = Depends(get_db)):
    return ResidentOut.from_model(await ResidentService(db).get_by_rut(rut))

async def get_resident(id: str, db: AsyncSession = Depends(get_db)):
    return ResidentOut.from_model(await ResidentService(db).get(id))

# -------------------- Escritura --------------------

async def create_resident(
    payload: ResidentCreate,
    current: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ResidentOut.from_model(await ResidentService(db).create(payload, current["id"]))

async def update_resident(id: str, payload: ResidentUpdate, db: AsyncSession = Depends(get_db)):
    return ResidentOut.from_model(await ResidentService(db).update(id, payload))

async def delete_resident(id: str, db: AsyncSession = Depends(get_db)):
    await ResidentService(db).delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

async def discharge_resident(id: str, payload: ResidentDischarge, db: AsyncSession = Depends(get_db)):
    resident = await ResidentService(db).discharge(id, payload.discharge_reason, payload.discharge_date)
    return ResidentOut.from_model(resident)

async def assign_responsible(id: str, user_id: str, db: AsyncSession = Depends(get_db)):
    return ResidentOut.from_model(await ResidentService(db).assign_responsible(id, user_id))

async def change_site(id: str, site_id: str, db: AsyncSession = Depends(get_db)):
    return ResidentOut.from_model(await ResidentService(db).change_site(id, site_id))

async def activate_resident(id: str, db: AsyncSession = Depends(get_db)):
    return ResidentOut.from_model(await ResidentService(db).activate(id))

# -------------------- Contactos y notas clínicas --------------------

async def list_contacts(id: str, db: AsyncSession = Depends(get_db)):
    return await ContactService(db).list(id)

async def create_contact(id: str, payload: ContactCreate, db: AsyncSession = Depends(get_db)):
    return await ContactService(db).create(id, payload)

async def delete_contact(id: str, contact_id: str, db: AsyncSession = Depends(get_db)):
    await ContactService(db).delete(id, contact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

async def list_clinical_notes(id: str, db: AsyncSession = Depends(get_db)):
    return await ClinicalNoteService(db).list(id)

async def create_clinical_note(
    id: str,
    payload: ClinicalNoteCreate,
    current: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ClinicalNoteService(db).create(id, payload, current["id"])

# Las rutas estáticas van antes que /{id}
ROUTES = [
    Route("POST", "", create_resident, CASE_MANAGERS, status.HTTP_201_CREATED, ResidentOut),
    Route("GET", "", list_residents, ALL_ROLES, response_model=PaginatedResponse[ResidentOut]),
    Route("GET", "/active", list_active_residents, ALL_ROLES, response_model=List[ResidentOut]),
    Route("GET", "/statistics", resident_statistics, DIRECTION, response_model=ResidentStatistics),
    Route("GET", "/search", search_residents, ALL_ROLES, response_model=List[ResidentOut]),
    Route("GET", "/without-responsible", residents_without_responsible, CASE_MANAGERS, response_model=List[ResidentOut]),
    Route("GET", "/birthdays", residents_birthdays, ALL_ROLES, response_model=List[ResidentOut]),
    Route("GET", "/rut/{rut}", get_resident_by_rut, CASE_MANAGERS, response_model=ResidentOut),
    Route("GET", "/{id}", get_resident, ALL_ROLES, response_model=ResidentOut),
    Route("PATCH", "/{id}", update_resident, CASE_MANAGERS, response_model=ResidentOut),
    Route("DELETE", "/{id}", delete_resident, DIRECTION, status.HTTP_204_NO_CONTENT),
    Route("PATCH", "/{id}/discharge", discharge_resident, CASE_MANAGERS, response_model=ResidentOut),
    Route("PATCH", "/{id}/assign-responsible/{user_id}", assign_responsible, CASE_MANAGERS, response_model=ResidentOut),
    Route("PATCH", "/{id}/change-site/{site_id}", change_site, CASE_MANAGERS, response_model=ResidentOut),
    Route("PATCH", "/{id}/activate", activate_resident, CASE_MANAGERS, response_model=ResidentOut),
    Route("GET", "/{id}/contacts", list_contacts, STAFF, response_model=List[ContactOut]),
    Route("POST", "/{id}/contacts", create_contact, CASE_MANAGERS, status.HTTP_201_CREATED, ContactOut),
    Route("DELETE", "/{id}/contacts/{contact_id}", delete_contact, CASE_MANAGERS, status.HTTP_204_NO_CONTENT),
    Route("GET", "/{id}/clinical-notes", list_clinical_notes, CLINICAL, response_model=List[ClinicalNoteOut]),
    Route("POST", "/{id}/clinical-notes", create_clinical_note, CLINICAL, status.HTTP_201_CREATED, ClinicalNoteOut),
]

router = build_router("/residents", ["residents"], ROUTES)
