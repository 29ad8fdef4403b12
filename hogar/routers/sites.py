# hogar/routers/sites.py
from __future__ import annotations

from typing import List, Optional

from fastapi import Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hogar.deps import get_db
from hogar.routing import Route, build_router, ALL_ROLES, DIRECTION, STAFF
from hogar.schemas import (
    SiteCreate, SiteUpdate, SiteMaxCapacityUpdate, SiteOut, SiteCapacityOut,
    SiteDeleteCheck, SiteStatistics, SiteCategory, UserOut, ResidentOut,
)
from hogar.services.site_service import SiteService
from hogar.computed import available_slots

# -------------------- Consultas --------------------

async def list_sites(
    is_active: Optional[bool] = Query(None),
    category: Optional[SiteCategory] = Query(None),
    region: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    sites = await SiteService(db).list(is_active=is_active, category=category, region=region)
    return [SiteOut.from_model(s) for s in sites]

async def list_active_sites(db: AsyncSession = Depends(get_db)):
    return [SiteOut.from_model(s) for s in await SiteService(db).list_active()]

async def list_sites_with_capacity(db: AsyncSession = Depends(get_db)):
    return [SiteOut.from_model(s) for s in await SiteService(db).list_with_capacity()]

async def site_statistics(db: AsyncSession = Depends(get_db)):
    return await SiteService(db).statistics()

async def search_sites(
    name: Optional[str] = Query(None),
    category: Optional[SiteCategory] = Query(None),
    region: Optional[str] = Query(None),
    commune: Optional[str] = Query(None),
    with_capacity: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    sites = await SiteService(db).search(
        name=name, category=category, region=region, commune=commune, with_capacity=with_capacity
    )
    return [SiteOut.from_model(s) for s in sites]

async def sites_by_region(region: str, db: AsyncSession = Depends(get_db)):
    return [SiteOut.from_model(s) for s in await SiteService(db).list_by_region(region)]

async def sites_by_category(category: SiteCategory, db: AsyncSession = Depends(get_db)):
    return [SiteOut.from_model(s) for s in await SiteService(db).list_by_category(category)]

async def get_site(id: str, db: AsyncSession = Depends(get_db)):
    return SiteOut.from_model(await SiteService(db).get(id))

async def site_users(id: str, db: AsyncSession = Depends(get_db)):
    return [UserOut.from_model(u) for u in await SiteService(db).users(id)]

async def site_residents(id: str, db: AsyncSession = Depends(get_db)):
    return [ResidentOut.from_model(r) for r in await SiteService(db).residents(id)]

async def site_has_capacity(id: str, db: AsyncSession = Depends(get_db)):
    service = SiteService(db)
    has_capacity = await service.has_capacity(id)
    site = await service.get(id)
    return SiteCapacityOut(
        site_id=id,
        has_capacity=has_capacity,
        available_slots=available_slots(site.max_capacity, site.current_occupancy),
    )

async def site_can_delete(id: str, db: AsyncSession = Depends(get_db)):
    return await SiteService(db).can_delete(id)

# -------------------- Escritura --------------------

async def create_site(payload: SiteCreate, db: AsyncSession = Depends(get_db)):
    return SiteOut.from_model(await SiteService(db).create(payload))

async def update_site(id: str, payload: SiteUpdate, db: AsyncSession = Depends(get_db)):
    return SiteOut.from_model(await SiteService(db).update(id, payload))

async def update_site_max_capacity(id: str, payload: SiteMaxCapacityUpdate, db: AsyncSession = Depends(get_db)):
    return SiteOut.from_model(await SiteService(db).update_max_capacity(id, payload.max_capacity))

async def delete_site(id: str, db: AsyncSession = Depends(get_db)):
    await SiteService(db).delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

async def deactivate_site(id: str, db: AsyncSession = Depends(get_db)):
    return SiteOut.from_model(await SiteService(db).deactivate(id))

async def activate_site(id: str, db: AsyncSession = Depends(get_db)):
    return SiteOut.from_model(await SiteService(db).activate(id))

# Las rutas estáticas van antes que /{id}
ROUTES = [
    Route("POST", "", create_site, DIRECTION, status.HTTP_201_CREATED, SiteOut),
    Route("GET", "", list_sites, ALL_ROLES, response_model=List[SiteOut]),
    Route("GET", "/active", list_active_sites, ALL_ROLES, response_model=List[SiteOut]),
    Route("GET", "/with-capacity", list_sites_with_capacity, STAFF, response_model=List[SiteOut]),
    Route("GET", "/statistics", site_statistics, DIRECTION, response_model=SiteStatistics),
    Route("GET", "/search", search_sites, ALL_ROLES, response_model=List[SiteOut]),
    Route("GET", "/region/{region}", sites_by_region, ALL_ROLES, response_model=List[SiteOut]),
    Route("GET", "/category/{category}", sites_by_category, ALL_ROLES, response_model=List[SiteOut]),
    Route("GET", "/{id}", get_site, ALL_ROLES, response_model=SiteOut),
    Route("GET", "/{id}/users", site_users, DIRECTION, response_model=List[UserOut]),
    Route("GET", "/{id}/residents", site_residents, STAFF, response_model=List[ResidentOut]),
    Route("GET", "/{id}/has-capacity", site_has_capacity, STAFF, response_model=SiteCapacityOut),
    Route("GET", "/{id}/can-delete", site_can_delete, DIRECTION, response_model=SiteDeleteCheck),
    Route("PATCH", "/{id}", update_site, DIRECTION, response_model=SiteOut),
    Route("PATCH", "/{id}/max-capacity", update_site_max_capacity, DIRECTION, response_model=SiteOut),
    Route("DELETE", "/{id}", delete_site, DIRECTION, status.HTTP_204_NO_CONTENT),
    Route("PATCH", "/{id}/deactivate", deactivate_site, DIRECTION, response_model=SiteOut),
    Route("PATCH", "/{id}/activate", activate_site, DIRECTION, response_model=SiteOut),
]

router = build_router("/sites", ["sites"], ROUTES)
