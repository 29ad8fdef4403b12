from datetime import date

import pytest

from hogar.config import settings
from hogar.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from hogar.schemas import ResidentUpdate
from hogar.services.resident_service import ResidentService, holds_capacity
from hogar.services.site_service import SiteService
from hogar.services.user_service import UserService


async def occupancy(db, site_id: str) -> int:
    return (await SiteService(db).get(site_id)).current_occupancy


def test_holds_capacity():
    assert holds_capacity("active", "s1") is True
    assert holds_capacity("active", None) is False
    assert holds_capacity("discharged", "s1") is False


async def test_create_normalizes_rut_and_takes_a_slot(db, make_site, make_user, make_resident):
    site = await make_site(max_capacity=3)
    director = await make_user()

    resident = await make_resident(director, rut="12345678-5", site_id=site.id)

    assert resident.rut == "12.345.678-5"
    assert resident.nationality == "Chilena"
    assert resident.created_by_id == director.id
    assert await occupancy(db, site.id) == 1


async def test_full_site_scenario(db, make_site, make_user, make_resident):
    north = await make_site(name="Norte", max_capacity=1)
    director = await make_user()
    service = ResidentService(db)

    first = await make_resident(director, rut="1-9", site_id=north.id)
    assert await occupancy(db, north.id) == 1

    with pytest.raises(StateError):
        await make_resident(director, rut="2-7", site_id=north.id)
    with pytest.raises(NotFoundError):
        await service.get_by_rut("2-7")
    assert await occupancy(db, north.id) == 1

    discharged = await service.discharge(first.id, "Reinserción familiar")
    assert discharged.status == "discharged"
    assert discharged.discharge_date == date.today()
    assert await occupancy(db, north.id) == 0

    with pytest.raises(StateError):
        await service.discharge(first.id, "Otra vez")
    assert await occupancy(db, north.id) == 0


async def test_inactive_site_rejects_admission(db, make_site, make_user, make_resident):
    site = await make_site()
    await SiteService(db).deactivate(site.id)
    director = await make_user()

    with pytest.raises(StateError):
        await make_resident(director, site_id=site.id)


async def test_inactive_resident_does_not_take_a_slot(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    await make_resident(director, site_id=site.id, status="inactive")
    assert await occupancy(db, site.id) == 0


async def test_duplicate_rut_is_conflict(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    await make_resident(director, rut="12.345.678-5", site_id=site.id)

    with pytest.raises(ConflictError):
        await make_resident(director, rut="12345678-5", site_id=site.id)
    assert await occupancy(db, site.id) == 1


async def test_invalid_rut_and_dates(db, make_user, make_resident):
    director = await make_user()
    with pytest.raises(ValidationError):
        await make_resident(director, rut="12345678-9")
    with pytest.raises(ValidationError):
        await make_resident(director, birth_date=date(2000, 1, 1), admission_date=date(1999, 1, 1))


async def test_unknown_site_or_responsible(db, make_user, make_resident):
    director = await make_user()
    with pytest.raises(NotFoundError):
        await make_resident(director, site_id="no-existe")
    with pytest.raises(NotFoundError):
        await make_resident(director, responsible_id="no-existe")


async def test_transfer_moves_the_slot(db, make_site, make_user, make_resident):
    site_a = await make_site(name="A", current_occupancy=4)
    site_b = await make_site(name="B")
    director = await make_user()
    resident = await make_resident(director, site_id=site_a.id)
    assert await occupancy(db, site_a.id) == 5

    moved = await ResidentService(db).change_site(resident.id, site_b.id)

    assert moved.site_id == site_b.id
    assert await occupancy(db, site_a.id) == 4
    assert await occupancy(db, site_b.id) == 1
    assert [r.id for r in await ResidentService(db).list_by_site(site_b.id)] == [resident.id]


async def test_transfer_to_full_site_changes_nothing(db, make_site, make_user, make_resident):
    site_a = await make_site(name="A")
    site_b = await make_site(name="B", max_capacity=1, current_occupancy=1)
    director = await make_user()
    resident = await make_resident(director, site_id=site_a.id)
    service = ResidentService(db)

    with pytest.raises(StateError):
        await service.change_site(resident.id, site_b.id)

    assert (await service.get(resident.id)).site_id == site_a.id
    assert await occupancy(db, site_a.id) == 1
    assert await occupancy(db, site_b.id) == 1


async def test_status_change_through_update(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    resident = await make_resident(director, site_id=site.id)
    service = ResidentService(db)

    await service.update(resident.id, ResidentUpdate(status="inactive"))
    assert await occupancy(db, site.id) == 0

    with pytest.raises(ValidationError):
        await service.update(resident.id, ResidentUpdate(first_names=None))


async def test_reactivation_takes_the_slot_again(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    resident = await make_resident(director, site_id=site.id)
    service = ResidentService(db)

    await service.discharge(resident.id, "Egreso voluntario")
    assert await occupancy(db, site.id) == 0

    reactivated = await service.activate(resident.id)
    assert reactivated.status == "active"
    assert await occupancy(db, site.id) == 1

    with pytest.raises(StateError):
        await service.activate(resident.id)


async def test_discharge_before_admission_keeps_the_slot(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    resident = await make_resident(director, site_id=site.id, admission_date=date(2024, 1, 15))
    service = ResidentService(db)

    with pytest.raises(ValidationError):
        await service.discharge(resident.id, "Error", date(2024, 1, 1))

    assert (await service.get(resident.id)).status == "active"
    assert await occupancy(db, site.id) == 1


async def test_delete_releases_the_slot(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    resident = await make_resident(director, site_id=site.id)
    service = ResidentService(db)

    await service.delete(resident.id)

    assert await occupancy(db, site.id) == 0
    with pytest.raises(NotFoundError):
        await service.get(resident.id)


async def test_assign_responsible_requires_active_user(db, make_user, make_resident):
    director = await make_user()
    worker = await make_user(role="social_worker")
    resident = await make_resident(director)
    service = ResidentService(db)

    assigned = await service.assign_responsible(resident.id, worker.id)
    assert assigned.responsible_id == worker.id
    assert await service.without_responsible() == []

    await UserService(db).deactivate(worker.id)
    other = await make_resident(director)
    with pytest.raises(NotFoundError):
        await service.assign_responsible(other.id, worker.id)
    assert (await service.get(other.id)).responsible_id is None


async def test_birthdays_this_month(db, make_user, make_resident):
    director = await make_user()
    today = date.today()
    other_month = today.month % 12 + 1

    celebrating = await make_resident(director, birth_date=date(1970, today.month, 1), admission_date=date(2020, 1, 1))
    await make_resident(director, birth_date=date(1970, other_month, 1), admission_date=date(2020, 1, 1))

    birthdays = await ResidentService(db).birthdays_this_month()
    assert [r.id for r in birthdays] == [celebrating.id]


async def test_search_is_capped(db, make_user, make_resident, monkeypatch):
    monkeypatch.setattr(settings, "search_limit", 3)
    director = await make_user()
    for _ in range(5):
        await make_resident(director, first_names="María")

    found = await ResidentService(db).search(first_names="mar")
    assert len(found) == 3


async def test_list_paginates_and_filters(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    for name in ("Ana", "Berta", "Carla"):
        await make_resident(director, first_names=name, site_id=site.id)
    await make_resident(director, first_names="Diana", status="inactive")
    service = ResidentService(db)

    page, total = await service.list(site_id=site.id, offset=1, limit=1)
    assert total == 3
    assert [r.first_names for r in page] == ["Berta"]

    active, _ = await service.list(status="active")
    assert len(active) == 3


async def test_statistics(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    await make_resident(director, site_id=site.id, gender="female", admission_date=date(2024, 3, 10))
    await make_resident(director, site_id=site.id, gender="male", admission_date=date(2024, 3, 20))
    await make_resident(director, gender="male", admission_date=date(2023, 11, 5), status="inactive")

    stats = await ResidentService(db).statistics()
    assert stats["total"] == 3
    assert {"status": "active", "count": 2} in stats["by_status"]
    assert {"gender": "male", "count": 2} in stats["by_gender"]
    assert stats["admissions_by_month"][0] == {"month": "2024-03", "count": 2}

    scoped = await ResidentService(db).statistics(site_id=site.id)
    assert scoped["total"] == 2


async def test_update_validates_empty_rut(db, make_user, make_resident):
    director = await make_user()
    resident = await make_resident(director, rut="12345678-5")
    service = ResidentService(db)

    with pytest.raises(ValidationError):
        await service.update(resident.id, ResidentUpdate(rut=""))
    with pytest.raises(ValidationError):
        await service.update(resident.id, ResidentUpdate(rut="12345678-9"))

    assert (await service.get(resident.id)).rut == "12.345.678-5"


async def test_update_cannot_discharge(db, make_site, make_user, make_resident):
    site = await make_site()
    director = await make_user()
    resident = await make_resident(director, site_id=site.id)
    service = ResidentService(db)

    with pytest.raises(StateError):
        await service.update(resident.id, ResidentUpdate(status="discharged"))

    refreshed = await service.get(resident.id)
    assert refreshed.status == "active"
    assert refreshed.discharge_date is None
    assert await occupancy(db, site.id) == 1
