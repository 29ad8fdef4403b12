import pytest

from hogar.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from hogar.models import Site
from hogar.schemas import SiteCreate, SiteUpdate
from hogar.services.site_service import SiteService


async def test_create_and_get(db, make_site):
    site = await make_site(name="Casa Acogida Norte", max_capacity=20)

    fetched = await SiteService(db).get(site.id)
    assert fetched.name == "Casa Acogida Norte"
    assert fetched.current_occupancy == 0
    assert fetched.is_active is True


async def test_duplicate_name_is_conflict(db, make_site):
    await make_site(name="Sede Sur")
    with pytest.raises(ConflictError):
        await make_site(name="Sede Sur")

    assert len(await SiteService(db).list()) == 1


async def test_initial_occupancy_above_max_is_rejected(db):
    data = SiteCreate(name="Sede X", address="Calle 1", max_capacity=2, current_occupancy=3)
    with pytest.raises(ValidationError):
        await SiteService(db).create(data)


async def test_get_missing_site(db):
    with pytest.raises(NotFoundError):
        await SiteService(db).get("no-existe")


async def test_max_capacity_cannot_drop_below_occupancy(db, make_site):
    site = await make_site(max_capacity=10, current_occupancy=5)
    service = SiteService(db)

    with pytest.raises(ValidationError):
        await service.update_max_capacity(site.id, 4)
    with pytest.raises(ValidationError):
        await service.update(site.id, SiteUpdate(max_capacity=4))

    updated = await service.update_max_capacity(site.id, 5)
    assert updated.max_capacity == 5


async def test_update_rejects_null_required_field(db, make_site):
    site = await make_site()
    with pytest.raises(ValidationError):
        await SiteService(db).update(site.id, SiteUpdate(name=None))


async def test_rename_to_existing_name_is_conflict(db, make_site):
    await make_site(name="Sede A")
    other = await make_site(name="Sede B")
    with pytest.raises(ConflictError):
        await SiteService(db).update(other.id, SiteUpdate(name="Sede A"))


async def test_activate_and_deactivate(db, make_site):
    site = await make_site()
    service = SiteService(db)

    deactivated = await service.deactivate(site.id)
    assert deactivated.is_active is False
    with pytest.raises(StateError):
        await service.deactivate(site.id)

    activated = await service.activate(site.id)
    assert activated.is_active is True
    with pytest.raises(StateError):
        await service.activate(site.id)


async def test_delete_with_residents_is_refused(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    await make_resident(director, site_id=site.id)
    service = SiteService(db)

    check = await service.can_delete(site.id)
    assert check["can_delete"] is False
    with pytest.raises(StateError):
        await service.delete(site.id)

    assert (await service.get(site.id)).current_occupancy == 1


async def test_delete_empty_site(db, make_site):
    site = await make_site()
    service = SiteService(db)

    assert (await service.can_delete(site.id))["can_delete"] is True
    await service.delete(site.id)
    with pytest.raises(NotFoundError):
        await service.get(site.id)


async def test_increment_respects_max_and_active(db, make_site):
    service = SiteService(db)
    full = await make_site(max_capacity=1, current_occupancy=1)
    inactive = await make_site()
    await service.deactivate(inactive.id)

    with pytest.raises(StateError, match="capacidad máxima"):
        await service.increment_occupancy(full.id)
    with pytest.raises(StateError, match="inactiva"):
        await service.increment_occupancy(inactive.id)


async def test_decrement_at_zero_fails(db, make_site):
    site = await make_site()
    with pytest.raises(StateError):
        await SiteService(db).decrement_occupancy(site.id)


async def test_increment_is_guarded_against_stale_reads(session_factory, make_site):
    site = await make_site(max_capacity=1)

    async with session_factory() as first, session_factory() as second:
        stale = await SiteService(first).get(site.id)
        assert stale.current_occupancy == 0

        await SiteService(second).increment_occupancy(site.id)
        await second.commit()

        # La lectura de `first` dice 0, pero la base ya está llena
        with pytest.raises(StateError):
            await SiteService(first).increment_occupancy(site.id)
        await first.rollback()

    async with session_factory() as check:
        assert (await SiteService(check).get(site.id)).current_occupancy == 1


async def test_queries_and_statistics(db, make_site):
    await make_site(name="Centro Día Sur", category="day_center", region="Biobío", max_capacity=10, current_occupancy=10)
    await make_site(name="Residencia Norte", category="residence", region="Antofagasta", max_capacity=5, current_occupancy=1)
    closed = await make_site(name="Casa Cerrada", category="shelter_house", region="Biobío", max_capacity=8)
    service = SiteService(db)
    await service.deactivate(closed.id)

    assert [s.name for s in await service.list_active()] == ["Centro Día Sur", "Residencia Norte"]
    assert [s.name for s in await service.list_with_capacity()] == ["Residencia Norte"]
    assert [s.name for s in await service.list_by_region("Biobío")] == ["Centro Día Sur"]
    assert [s.name for s in await service.search(name="norte")] == ["Residencia Norte"]

    stats = await service.statistics()
    assert stats["total_sites"] == 3
    assert stats["active_sites"] == 2
    assert stats["inactive_sites"] == 1
    assert stats["capacity"] == {"total": 15, "occupied": 11, "available": 4}


async def test_unguarded_read_modify_write_loses_an_admission(session_factory, make_site):
    site = await make_site(max_capacity=1)

    async with session_factory() as first, session_factory() as second:
        stale = await first.get(Site, site.id)
        fresh = await second.get(Site, site.id)

        fresh.current_occupancy += 1
        await second.commit()

        # Escritura sin condición desde una lectura vieja: no ve que la sede ya está llena
        stale.current_occupancy += 1
        await first.commit()

    async with session_factory() as check:
        assert (await SiteService(check).get(site.id)).current_occupancy == 1


async def test_lookup_helpers(db, make_site):
    await make_site(name="Hogar Temuco", region="Araucanía")
    await make_site(name="Hogar Angol", region="Araucanía")
    service = SiteService(db)

    assert (await service.get_by_name("Hogar Temuco")).region == "Araucanía"
    with pytest.raises(NotFoundError):
        await service.get_by_name("Hogar Inexistente")
    assert [s.name for s in await service.list_nearby("Araucanía", limit=1)] == ["Hogar Angol"]
    assert len(await service.list_by_category("residence")) == 2
