import pytest

from hogar.exceptions import ConflictError, NotFoundError, ValidationError
from hogar.schemas import UserUpdate
from hogar.security import verify_password
from hogar.services.user_service import UserService
from conftest import PASSWORD


async def test_create_hashes_password_and_normalizes_email(db, make_user):
    user = await make_user(email="Directora@Hogar.CL")

    assert user.email == "directora@hogar.cl"
    assert user.password_hash != PASSWORD
    assert verify_password(PASSWORD, user.password_hash)


async def test_duplicate_email_is_conflict(db, make_user):
    await make_user(email="equipo@hogar.cl")
    with pytest.raises(ConflictError):
        await make_user(email="EQUIPO@hogar.cl")

    _, total = await UserService(db).list()
    assert total == 1


async def test_duplicate_rut_is_conflict(db, make_user):
    await make_user(rut="12345678-5")
    with pytest.raises(ConflictError):
        await make_user(rut="12.345.678-5")


async def test_unknown_site_is_not_found(db, make_user):
    with pytest.raises(NotFoundError):
        await make_user(site_id="no-existe")


async def test_update_changes_password(db, make_user):
    user = await make_user()
    updated = await UserService(db).update(user.id, UserUpdate(password="otra-clave-1"))

    assert verify_password("otra-clave-1", updated.password_hash)
    assert not verify_password(PASSWORD, updated.password_hash)


async def test_update_rejects_null_email(db, make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await UserService(db).update(user.id, UserUpdate(email=None))


async def test_authenticate(db, make_user):
    user = await make_user(email="psico@hogar.cl", role="psychologist")
    service = UserService(db)

    logged = await service.authenticate("PSICO@hogar.cl", PASSWORD)
    assert logged.id == user.id
    assert logged.last_login is not None

    assert await service.authenticate("psico@hogar.cl", "incorrecta") is None
    assert await service.authenticate("nadie@hogar.cl", PASSWORD) is None

    await service.deactivate(user.id)
    assert await service.authenticate("psico@hogar.cl", PASSWORD) is None


async def test_delete_referenced_user_only_deactivates(db, make_user, make_resident):
    director = await make_user()
    await make_resident(director)
    service = UserService(db)

    assert await service.delete(director.id) is False
    assert (await service.get(director.id)).is_active is False


async def test_delete_unreferenced_user(db, make_user):
    user = await make_user(role="volunteer")
    service = UserService(db)

    assert await service.delete(user.id) is True
    with pytest.raises(NotFoundError):
        await service.get(user.id)


async def test_list_filters_and_statistics(db, make_user):
    await make_user(role="director")
    await make_user(role="psychologist")
    volunteer = await make_user(role="volunteer")
    service = UserService(db)
    await service.deactivate(volunteer.id)

    users, total = await service.list(role="psychologist")
    assert total == 1
    assert users[0].role == "psychologist"

    _, active = await service.list(is_active=True)
    assert active == 2

    stats = await service.statistics()
    assert stats["total_users"] == 3
    assert stats["inactive_users"] == 1
    assert {"role": "volunteer", "count": 1} in stats["by_role"]


async def test_update_validates_or_clears_rut(db, make_user):
    user = await make_user(rut="12345678-5")
    service = UserService(db)

    with pytest.raises(ValidationError):
        await service.update(user.id, UserUpdate(rut=""))
    assert (await service.get(user.id)).rut == "12.345.678-5"

    cleared = await service.update(user.id, UserUpdate(rut=None))
    assert cleared.rut is None


async def test_create_rejects_empty_rut(db, make_user):
    with pytest.raises(ValidationError):
        await make_user(rut="")

    _, total = await UserService(db).list()
    assert total == 0
