import pytest
import uuid
from datetime import date

from app.core.database import AsyncSessionLocal
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.enums import LeaveStatus, NotificationKind
from app.models.user import UserRole
from app.services import directory_service, leave_service, leave_store
from app.services.leave_service import approve_leave, compute_leave_days, recommend_leave, submit_leave

from conftest import actor, make_user, submit_sample_leave


# ------------------------------------------------------------
# SUBMIT
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_submit_computes_days_and_denormalizes(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    assert leave.status == LeaveStatus.pending
    assert leave.leave_days == 3
    assert leave.applicant_name == "Asha Staff"
    assert leave.division == "North"
    assert leave.acting_officer_name == "Bala Staff"
    assert leave.recommendation_by is None and leave.approval_by is None


@pytest.mark.asyncio
async def test_submit_notifies_recommender_and_approver(db_session, org):
    result = await submit_leave(
        db_session,
        actor(org["staff_a"]),
        leave_type="casual",
        start_date=date(2025, 4, 1),
        resume_date=date(2025, 4, 2),
        reason="Errand",
        acting_officer_id=org["staff_b"].id,
        recommender_id=org["cc"].id,
        approver_id=org["hod"].id,
    )
    kinds = {(n.kind, n.recipient_id) for n in result.notifications}
    assert kinds == {
        (NotificationKind.leave_submitted, org["cc"].id),
        (NotificationKind.leave_submitted, org["hod"].id),
    }
    assert result.audit[0].action == "leave.submitted"


def test_compute_leave_days():
    assert compute_leave_days(date(2025, 3, 10), date(2025, 3, 13)) == 3
    assert compute_leave_days(date(2025, 12, 31), date(2026, 1, 1)) == 1


@pytest.mark.asyncio
async def test_submit_rejects_resume_not_after_start(db_session, org):
    with pytest.raises(ValidationError):
        await submit_sample_leave(db_session, org, start=date(2025, 3, 10), resume=date(2025, 3, 10))


@pytest.mark.asyncio
async def test_submit_rejects_blank_reason(db_session, org):
    with pytest.raises(ValidationError):
        await submit_leave(
            db_session, actor(org["staff_a"]), "annual", date(2025, 3, 10), date(2025, 3, 12), "   ",
            org["staff_b"].id, org["cc"].id, org["dh"].id,
        )


@pytest.mark.asyncio
async def test_submit_rejects_ineligible_officers(db_session, org):
    applicant = actor(org["staff_a"])
    args = ("annual", date(2025, 3, 10), date(2025, 3, 12), "Trip")

    # acting officer from another division
    with pytest.raises(ValidationError):
        await submit_leave(db_session, applicant, *args, org["south_staff"].id, org["cc"].id, org["dh"].id)
    # applicant as own acting officer
    with pytest.raises(ValidationError):
        await submit_leave(db_session, applicant, *args, org["staff_a"].id, org["cc"].id, org["dh"].id)
    # Staff cannot recommend
    with pytest.raises(ValidationError):
        await submit_leave(db_session, applicant, *args, org["staff_b"].id, org["staff_b"].id, org["dh"].id)
    # a foreign Divisional Head cannot approve
    with pytest.raises(ValidationError):
        await submit_leave(db_session, applicant, *args, org["staff_b"].id, org["cc"].id, org["south_dh"].id)
    # Division CC cannot approve
    with pytest.raises(ValidationError):
        await submit_leave(db_session, applicant, *args, org["staff_b"].id, org["cc"].id, org["cc"].id)


@pytest.mark.asyncio
async def test_submit_requires_division(db_session, org):
    with pytest.raises(ValidationError):
        await submit_leave(
            db_session, actor(org["hod"]), "annual", date(2025, 3, 10), date(2025, 3, 12), "Rest",
            org["staff_b"].id, org["cc"].id, org["admin"].id,
        )


# ------------------------------------------------------------
# SCENARIO: empty not_recommended comment
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_not_recommended_requires_comment(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    with pytest.raises(ValidationError):
        await recommend_leave(db_session, actor(org["cc"]), leave.id, "not_recommended", "  ")

    stored = await leave_store.get_leave(db_session, leave.id)
    await db_session.refresh(stored)
    assert stored.status == LeaveStatus.pending


@pytest.mark.asyncio
async def test_not_recommended_is_terminal(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    result = await recommend_leave(db_session, actor(org["cc"]), leave.id, "not_recommended", "Short staffed")
    assert result.record.status == LeaveStatus.rejected
    assert result.record.rejection_reason == "Short staffed"
    assert result.record.recommendation_by == org["cc"].id
    assert result.notifications[0].kind == NotificationKind.leave_decided
    assert result.notifications[0].recipient_id == org["staff_a"].id

    # approval stage is skipped for good
    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(org["dh"]), leave.id, "approved")


# ------------------------------------------------------------
# SCENARIO: CC recommends, DH approves
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_full_approval_path(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    rec = await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended", "Fine by me")
    assert rec.record.status == LeaveStatus.recommended
    assert rec.record.recommendation_remarks == "Fine by me"
    assert rec.notifications[0].kind == NotificationKind.leave_recommended
    assert rec.notifications[0].recipient_id == org["dh"].id

    app = await approve_leave(db_session, actor(org["dh"]), leave.id, "approved")
    assert app.record.status == LeaveStatus.approved
    assert app.record.approval_by == org["dh"].id
    assert app.record.approval_date is not None
    assert app.notifications[0].recipient_id == org["staff_a"].id
    assert app.audit[0].details == {"from": "recommended", "to": "approved"}


@pytest.mark.asyncio
async def test_not_approved_requires_comment_and_sets_reason(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")

    with pytest.raises(ValidationError):
        await approve_leave(db_session, actor(org["dh"]), leave.id, "not_approved", "")

    result = await approve_leave(db_session, actor(org["dh"]), leave.id, "not_approved", "Audit week")
    assert result.record.status == LeaveStatus.rejected
    assert result.record.rejection_reason == "Audit week"


# ------------------------------------------------------------
# SCENARIO: foreign Divisional Head
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_foreign_divisional_head_cannot_act(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    with pytest.raises(AuthorizationError):
        await recommend_leave(db_session, actor(org["south_dh"]), leave.id, "recommended")

    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")
    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(org["south_dh"]), leave.id, "approved")


@pytest.mark.asyncio
async def test_authorization_checked_before_comment(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    # an outsider with an empty comment is refused for who they are, not for the comment
    with pytest.raises(AuthorizationError):
        await recommend_leave(db_session, actor(org["south_staff"]), leave.id, "not_recommended", "")


@pytest.mark.asyncio
async def test_applicant_never_acts_on_own_leave(db_session, org):
    # a Divisional Head applying for leave, routed to the HOD
    result = await submit_leave(
        db_session, actor(org["dh"]), "sick", date(2025, 5, 5), date(2025, 5, 7), "Fever",
        org["staff_b"].id, org["cc"].id, org["hod"].id,
    )
    leave = result.record
    with pytest.raises(AuthorizationError):
        await recommend_leave(db_session, actor(org["dh"]), leave.id, "recommended")

    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")
    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(org["dh"]), leave.id, "approved")

    done = await approve_leave(db_session, actor(org["hod"]), leave.id, "approved")
    assert done.record.status == LeaveStatus.approved


@pytest.mark.asyncio
async def test_staff_cannot_approve(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")
    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(org["staff_b"]), leave.id, "approved")


@pytest.mark.asyncio
async def test_demoted_approver_loses_assignment(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")

    demoted = await directory_service.update_user(
        db_session, org["dh"].id, {"role": UserRole.Staff.value, "division": "South"}
    )
    assert await leave_service.list_to_approve(db_session, actor(demoted)) == []
    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(demoted), leave.id, "approved")

    stored = await leave_store.get_leave(db_session, leave.id)
    await db_session.refresh(stored)
    assert stored.status == LeaveStatus.recommended


@pytest.mark.asyncio
async def test_moved_recommender_loses_assignment(db_session, org):
    leave = await submit_sample_leave(db_session, org)

    moved = await directory_service.update_user(db_session, org["cc"].id, {"division": "South"})
    assert await leave_service.list_to_recommend(db_session, actor(moved)) == []
    with pytest.raises(AuthorizationError):
        await recommend_leave(db_session, actor(moved), leave.id, "recommended")

    # the division's remaining officers can still move it on
    done = await recommend_leave(db_session, actor(org["dh"]), leave.id, "recommended")
    assert done.record.status == LeaveStatus.recommended


@pytest.mark.asyncio
async def test_wrong_stage_is_refused(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    # approving a pending application skips the recommendation stage
    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(org["dh"]), leave.id, "approved")


@pytest.mark.asyncio
async def test_terminal_records_are_immutable(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")
    await approve_leave(db_session, actor(org["dh"]), leave.id, "approved")

    with pytest.raises(AuthorizationError):
        await approve_leave(db_session, actor(org["hod"]), leave.id, "not_approved", "Changed mind")
    with pytest.raises(AuthorizationError):
        await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")


@pytest.mark.asyncio
async def test_unknown_leave_is_not_found(db_session, org):
    with pytest.raises(NotFoundError):
        await recommend_leave(db_session, actor(org["cc"]), uuid.uuid4(), "recommended")


# ------------------------------------------------------------
# SCENARIO: two approvers race
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_concurrent_approvers_conflict(db_session, org):
    leave = await submit_sample_leave(db_session, org)
    await recommend_leave(db_session, actor(org["cc"]), leave.id, "recommended")

    async with AsyncSessionLocal() as session_a, AsyncSessionLocal() as session_b:
        # both approvers have read the application while it was still 'recommended'
        seen_by_b = await leave_store.get_leave(session_b, leave.id)
        assert seen_by_b.status == LeaveStatus.recommended

        first = await approve_leave(session_a, actor(org["dh"]), leave.id, "approved")
        assert first.record.status == LeaveStatus.approved

        with pytest.raises(ConflictError):
            await approve_leave(session_b, actor(org["hod"]), leave.id, "not_approved", "Too late")

    async with AsyncSessionLocal() as check:
        stored = await leave_store.get_leave(check, leave.id)
        assert stored.status == LeaveStatus.approved
        assert stored.approval_by == org["dh"].id
        assert stored.rejection_reason is None


# ------------------------------------------------------------
# INVARIANTS
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_terminal_implies_actor_and_rejection_implies_reason(db_session, org):
    first = await submit_sample_leave(db_session, org)
    second = await submit_sample_leave(db_session, org, start=date(2025, 6, 1), resume=date(2025, 6, 3))
    third = await submit_sample_leave(db_session, org, start=date(2025, 7, 1), resume=date(2025, 7, 2))

    await recommend_leave(db_session, actor(org["cc"]), first.id, "not_recommended", "No cover")
    await recommend_leave(db_session, actor(org["dh"]), second.id, "recommended")
    await approve_leave(db_session, actor(org["hod"]), second.id, "approved")
    await recommend_leave(db_session, actor(org["admin"]), third.id, "recommended")
    await approve_leave(db_session, actor(org["dh"]), third.id, "not_approved", "Year end")

    for leave in await leave_service.list_my_leaves(db_session, actor(org["staff_a"])):
        await db_session.refresh(leave)
        assert leave.status in (LeaveStatus.approved, LeaveStatus.rejected)
        assert leave.approval_by or leave.recommendation_by
        if leave.status == LeaveStatus.rejected:
            assert leave.rejection_reason


@pytest.mark.asyncio
async def test_eligible_officers(db_session, org):
    officers = await leave_service.list_eligible_officers(db_session, actor(org["staff_a"]))

    acting = {u.id for u in officers["acting_officers"]}
    assert org["staff_b"].id in acting and org["field"].id in acting
    assert org["staff_a"].id not in acting
    assert org["south_staff"].id not in acting

    assert {u.id for u in officers["recommenders"]} == {org["cc"].id, org["dh"].id}

    approvers = [u.id for u in officers["approvers"]]
    assert set(approvers) == {org["dh"].id, org["hod"].id, org["admin"].id}
    assert len(approvers) == len(set(approvers))


@pytest.mark.asyncio
async def test_eligible_officers_without_division(db_session):
    hod = await make_user(db_session, "Lone HOD", role=UserRole.HOD, division=None)
    officers = await leave_service.list_eligible_officers(db_session, actor(hod))
    assert officers == {"acting_officers": [], "recommenders": [], "approvers": []}
