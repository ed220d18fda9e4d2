import pytest
from datetime import date

from app.services import directory_service, leave_service
from app.services.leave_service import approve_leave, recommend_leave, submit_leave

from conftest import actor, make_user, submit_sample_leave


async def _ids(coro):
    return {leave.id for leave in await coro}


@pytest.mark.asyncio
async def test_to_recommend(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    # named recommender, and the division's CC by fallback
    assert await _ids(leave_service.list_to_recommend(db_session, actor(org["cc"]))) == {leave.id}
    # a Divisional Head only sees what is explicitly routed to them
    assert await _ids(leave_service.list_to_recommend(db_session, actor(org["dh"]))) == set()
    assert await _ids(leave_service.list_to_recommend(db_session, actor(org["south_dh"]))) == set()

    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")
    assert await _ids(leave_service.list_to_recommend(db_session, actor(org["cc"]))) == set()


@pytest.mark.asyncio
async def test_division_cc_fallback_covers_other_recommenders(db_session, org):
    # routed to the Divisional Head for recommendation, still visible to the division CC
    result = await submit_leave(
        db_session, actor(org["staff_a"]), "casual", date(2025, 3, 3), date(2025, 3, 4), "Bank",
        org["staff_b"].id, org["dh"].id, org["hod"].id,
    )
    assert await _ids(leave_service.list_to_recommend(db_session, actor(org["dh"]))) == {result.record.id}
    assert await _ids(leave_service.list_to_recommend(db_session, actor(org["cc"]))) == {result.record.id}


@pytest.mark.asyncio
async def test_to_approve(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    assert await _ids(leave_service.list_to_approve(db_session, actor(org["dh"]))) == set()

    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")

    for key in ("dh", "hod", "admin"):
        assert await _ids(leave_service.list_to_approve(db_session, actor(org[key]))) == {leave.id}, key
    for key in ("south_dh", "cc", "staff_b", "staff_a"):
        assert await _ids(leave_service.list_to_approve(db_session, actor(org[key]))) == set(), key


@pytest.mark.asyncio
async def test_staff_to_approve_is_always_empty(db_session, org):
    # even when a Staff member is (wrongly) named as approver in stored data
    leave = await submit_sample_leave(db_session, org)
    leave.approver_id = org["staff_b"].id
    db_session.add(leave)
    await db_session.commit()
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")

    assert await leave_service.list_to_approve(db_session, actor(org["staff_b"])) == []


@pytest.mark.asyncio
async def test_approved_download(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")
    await approve_leave(db_session, actor(org["dh"]), leave.id, "approved")

    for key in ("dh", "hod", "admin"):
        assert await _ids(leave_service.list_approved(db_session, actor(org[key]))) == {leave.id}, key
    for key in ("south_dh", "cc", "staff_a"):
        assert await _ids(leave_service.list_approved(db_session, actor(org[key]))) == set(), key


@pytest.mark.asyncio
async def test_staff_directory(db_session, org):
    everyone = await directory_service.list_directory(db_session, actor(org["admin"]))
    assert len(everyone) == len(org)
    assert len(await directory_service.list_directory(db_session, actor(org["hod"]))) == len(org)

    north = {u.id for u in await directory_service.list_directory(db_session, actor(org["cc"]))}
    assert north == {org[k].id for k in ("staff_a", "staff_b", "field", "cc", "dh")}
    south = {u.id for u in await directory_service.list_directory(db_session, actor(org["south_dh"]))}
    assert south == {org["south_staff"].id, org["south_dh"].id}

    assert await directory_service.list_directory(db_session, actor(org["staff_a"])) == []


@pytest.mark.asyncio
async def test_directory_search(db_session, org):
    await make_user(db_session, "Zoya Planner", division="North")

    found = await directory_service.list_directory(db_session, actor(org["admin"]), search="zoya")
    assert [u.name for u in found] == ["Zoya Planner"]

    # search never widens scope
    assert await directory_service.list_directory(db_session, actor(org["south_dh"]), search="zoya") == []
