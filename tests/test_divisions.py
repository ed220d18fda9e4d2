import pytest
from datetime import date

from app.core.exceptions import NotFoundError, ValidationError
from app.models.program import AdvancedProgramEntry
from app.services import division_service, program_store

from conftest import auth_headers, ensure_division, submit_sample_leave


@pytest.mark.asyncio
async def test_create_division(db_session):
    division = await division_service.create_division(db_session, "  East  ")
    assert division.id is not None
    assert division.name == "East"


@pytest.mark.asyncio
async def test_duplicate_name_is_case_insensitive(db_session):
    await division_service.create_division(db_session, "East")
    with pytest.raises(ValidationError):
        await division_service.create_division(db_session, "east")


@pytest.mark.asyncio
async def test_name_too_short(db_session):
    with pytest.raises(ValidationError):
        await division_service.create_division(db_session, " E ")


@pytest.mark.asyncio
async def test_rename_carries_name_to_users_and_records(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await program_store.insert_entry(db_session, AdvancedProgramEntry(
        user_id=org["field"].id, user_name="Faiz Field", division="North",
        entry_date=date(2030, 3, 15), program_name="Survey", place="Yard",
    ))
    north = await ensure_division(db_session, "North")

    division, moved = await division_service.rename_division(db_session, north.id, "Northern")
    assert division.name == "Northern"
    assert moved == 5

    for key in ("staff_a", "cc", "dh"):
        await db_session.refresh(org[key])
        assert org[key].division == "Northern"
    await db_session.refresh(org["south_dh"])
    assert org["south_dh"].division == "South"

    await db_session.refresh(leave)
    assert leave.division == "Northern"
    entry = await program_store.get_entry(db_session, org["field"].id, date(2030, 3, 15))
    await db_session.refresh(entry)
    assert entry.division == "Northern"


@pytest.mark.asyncio
async def test_rename_to_existing_name_refused(db_session, org):
    north = await ensure_division(db_session, "North")
    with pytest.raises(ValidationError):
        await division_service.rename_division(db_session, north.id, "SOUTH")


@pytest.mark.asyncio
async def test_delete_refused_while_users_assigned(db_session, org):
    north = await ensure_division(db_session, "North")
    with pytest.raises(ValidationError) as exc:
        await division_service.delete_division(db_session, north.id)
    assert exc.value.details == {"assigned_users": 5}


@pytest.mark.asyncio
async def test_delete_empty_division(db_session):
    empty = await division_service.create_division(db_session, "West")
    await division_service.delete_division(db_session, empty.id)
    with pytest.raises(NotFoundError):
        await division_service.get_division(db_session, empty.id)


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_division_management_permissions(client, org):
    res = await client.get("/api/divisions/", headers=auth_headers(org["staff_a"]))
    assert res.status_code == 200
    assert [d["name"] for d in res.json()] == ["North", "South"]

    res = await client.post("/api/divisions/", json={"name": "East"}, headers=auth_headers(org["staff_a"]))
    assert res.status_code == 403
    res = await client.post("/api/divisions/", json={"name": "East"}, headers=auth_headers(org["dh"]))
    assert res.status_code == 403

    res = await client.post("/api/divisions/", json={"name": "East"}, headers=auth_headers(org["hod"]))
    assert res.status_code == 201
    east_id = res.json()["id"]

    res = await client.post("/api/divisions/", json={"name": "EAST"}, headers=auth_headers(org["admin"]))
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"

    res = await client.patch(f"/api/divisions/{east_id}", json={"name": "Eastern"}, headers=auth_headers(org["admin"]))
    assert res.status_code == 200
    assert res.json()["usersUpdated"] == 0
    assert res.json()["division"]["name"] == "Eastern"

    res = await client.delete(f"/api/divisions/{east_id}", headers=auth_headers(org["hod"]))
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_delete_guard_over_http(client, db_session, org):
    north = await ensure_division(db_session, "North")
    res = await client.delete(f"/api/divisions/{north.id}", headers=auth_headers(org["admin"]))
    assert res.status_code == 400
    assert res.json()["details"] == {"assigned_users": 5}
