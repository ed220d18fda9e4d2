# app/services/leave_service.py
"""
Leave application workflow.

    pending --recommended-----> recommended --approved-----> approved
       |                            |
       +--not_recommended--+        +--not_approved--+
                           v                         v
                        rejected                  rejected

Every transition is checked against the caller (assignment or role scope)
and the current status, then written with a conditional update so two
deciders can never both win.
"""

import math
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import scoping
from app.core.constants import (
    ACTING_OFFICER_ROLES,
    ELIGIBLE_APPROVER_DIVISION_ROLES,
    ELIGIBLE_APPROVER_GLOBAL_ROLES,
    ELIGIBLE_RECOMMENDER_ROLES,
)
from app.core.context import Actor
from app.core.exceptions import AuthorizationError, ValidationError
from app.core.permissions import can_approve, can_recommend, can_view_leave, require
from app.core.workflow import LEAVE_WORKFLOW, resolve_transition
from app.models.enums import (
    ApprovalDecision,
    LeaveStatus,
    LeaveType,
    NotificationKind,
    RecommendationDecision,
)
from app.models.leave import LeaveApplication
from app.models.user import User
from app.services import directory_service, leave_store
from app.services.audit_service import AuditEntry
from app.services.dispatch_service import WorkflowResult
from app.services.notification_service import NotificationRequest


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------
def compute_leave_days(start_date: date, resume_date: date) -> int:
    """Whole days between the first day of leave and the day work resumes."""
    if isinstance(start_date, datetime) or isinstance(resume_date, datetime):
        seconds = (resume_date - start_date).total_seconds()
        return math.ceil(seconds / timedelta(days=1).total_seconds())
    return (resume_date - start_date).days


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


def is_eligible_acting_officer(applicant: Actor, user: User) -> bool:
    return (
        user.id != applicant.id
        and user.role in ACTING_OFFICER_ROLES
        and applicant.same_division(user.division)
    )


def is_eligible_recommender(applicant: Actor, user: User) -> bool:
    return (
        user.id != applicant.id
        and user.role in ELIGIBLE_RECOMMENDER_ROLES
        and applicant.same_division(user.division)
    )


def is_eligible_approver(applicant: Actor, user: User) -> bool:
    if user.id == applicant.id:
        return False
    if user.role in ELIGIBLE_APPROVER_GLOBAL_ROLES:
        return True
    return user.role in ELIGIBLE_APPROVER_DIVISION_ROLES and applicant.same_division(user.division)


async def _resolve_officer(session: AsyncSession, user_id: UUID, label: str, check, applicant: Actor) -> User:
    user = await directory_service.get_user_by_id(session, user_id)
    if user is None or not check(applicant, user):
        raise ValidationError(f"Selected {label} is not valid for your division.")
    return user


def _leave_payload(leave: LeaveApplication, **extra) -> Dict:
    payload = {
        "leaveId": str(leave.id),
        "applicantName": leave.applicant_name,
        "leaveType": leave.leave_type.value if hasattr(leave.leave_type, "value") else leave.leave_type,
        "startDate": leave.start_date.isoformat(),
        "resumeDate": leave.resume_date.isoformat(),
    }
    payload.update(extra)
    return payload


# ---------------------------------------------------------
# SUBMIT
# ---------------------------------------------------------
async def submit_leave(
    session: AsyncSession,
    applicant: Actor,
    leave_type: LeaveType,
    start_date: date,
    resume_date: date,
    reason: str,
    acting_officer_id: UUID,
    recommender_id: UUID,
    approver_id: UUID,
) -> WorkflowResult:
    if not applicant.division:
        raise ValidationError("You must be assigned to a division before applying for leave.")
    if resume_date <= start_date:
        raise ValidationError("Resume date must be after the start date.")
    reason = _clean(reason)
    if not reason:
        raise ValidationError("Reason for leave is required.")

    acting = await _resolve_officer(session, acting_officer_id, "acting officer", is_eligible_acting_officer, applicant)
    recommender = await _resolve_officer(session, recommender_id, "recommending officer", is_eligible_recommender, applicant)
    approver = await _resolve_officer(session, approver_id, "approving officer", is_eligible_approver, applicant)

    leave = LeaveApplication(
        applicant_id=applicant.id,
        applicant_name=applicant.name,
        designation=applicant.designation or "N/A",
        division=applicant.division,
        leave_type=LeaveType(leave_type),
        leave_days=compute_leave_days(start_date, resume_date),
        start_date=start_date,
        resume_date=resume_date,
        reason=reason,
        acting_officer_id=acting.id,
        acting_officer_name=acting.name,
        recommender_id=recommender.id,
        approver_id=approver.id,
        status=LeaveStatus(LEAVE_WORKFLOW.initial_state),
    )
    leave = await leave_store.create_leave(session, leave)
    logger.info(f"Leave {leave.id} submitted by {applicant.email} ({leave.leave_days} day(s))")

    return WorkflowResult(
        record=leave,
        notifications=[
            NotificationRequest(NotificationKind.leave_submitted, recommender.id, _leave_payload(leave, stage="recommender")),
            NotificationRequest(NotificationKind.leave_submitted, approver.id, _leave_payload(leave, stage="approver")),
        ],
        audit=[AuditEntry("leave.submitted", "leave", str(leave.id), details={"to": LeaveStatus.pending.value})],
    )


# ---------------------------------------------------------
# RECOMMEND
# ---------------------------------------------------------
async def recommend_leave(
    session: AsyncSession,
    actor: Actor,
    leave_id: UUID,
    decision: RecommendationDecision,
    comment: Optional[str] = None,
) -> WorkflowResult:
    leave = await leave_store.require_leave(session, leave_id)
    require(can_recommend(actor, leave), "You are not authorized to recommend this leave application.")

    decision = RecommendationDecision(decision)
    transition = resolve_transition(LEAVE_WORKFLOW, leave.status, decision.value)
    comment = _clean(comment)
    if transition.requires_comment and not comment:
        raise ValidationError("Please provide a reason for not recommending this application.")

    fields = {
        "status": LeaveStatus(transition.to_state),
        "recommendation_by": actor.id,
        "recommendation_date": datetime.utcnow(),
    }
    if decision == RecommendationDecision.recommended:
        fields["recommendation_remarks"] = comment or None
    else:
        fields["rejection_reason"] = comment

    previous = LeaveStatus(leave.status)
    leave = await leave_store.update_leave(session, leave.id, fields, expected_status=previous)
    logger.info(f"Leave {leave.id}: {previous.value} -> {leave.status.value} by {actor.email}")

    if decision == RecommendationDecision.recommended:
        notifications = [
            NotificationRequest(NotificationKind.leave_recommended, leave.approver_id, _leave_payload(leave))
        ]
    else:
        notifications = [
            NotificationRequest(
                NotificationKind.leave_decided,
                leave.applicant_id,
                _leave_payload(leave, status=LeaveStatus.rejected.value, rejectionReason=comment),
            )
        ]

    return WorkflowResult(
        record=leave,
        notifications=notifications,
        audit=[
            AuditEntry(
                f"leave.{decision.value}",
                "leave",
                str(leave.id),
                remarks=comment or None,
                details={"from": previous.value, "to": leave.status.value},
            )
        ],
    )


# ---------------------------------------------------------
# APPROVE
# ---------------------------------------------------------
async def approve_leave(
    session: AsyncSession,
    actor: Actor,
    leave_id: UUID,
    decision: ApprovalDecision,
    comment: Optional[str] = None,
) -> WorkflowResult:
    leave = await leave_store.require_leave(session, leave_id)
    require(can_approve(actor, leave), "You are not authorized to approve this leave application.")

    decision = ApprovalDecision(decision)
    transition = resolve_transition(LEAVE_WORKFLOW, leave.status, decision.value)
    comment = _clean(comment)
    if transition.requires_comment and not comment:
        raise ValidationError("Please provide a reason for not approving this application.")

    fields = {
        "status": LeaveStatus(transition.to_state),
        "approval_by": actor.id,
        "approval_date": datetime.utcnow(),
    }
    if decision == ApprovalDecision.approved:
        fields["approval_remarks"] = comment or None
    else:
        fields["rejection_reason"] = comment

    previous = LeaveStatus(leave.status)
    leave = await leave_store.update_leave(session, leave.id, fields, expected_status=previous)
    logger.info(f"Leave {leave.id}: {previous.value} -> {leave.status.value} by {actor.email}")

    payload = _leave_payload(leave, status=leave.status.value)
    if leave.status == LeaveStatus.rejected:
        payload["rejectionReason"] = comment

    return WorkflowResult(
        record=leave,
        notifications=[NotificationRequest(NotificationKind.leave_decided, leave.applicant_id, payload)],
        audit=[
            AuditEntry(
                f"leave.{decision.value}",
                "leave",
                str(leave.id),
                remarks=comment or None,
                details={"from": previous.value, "to": leave.status.value},
            )
        ],
    )


# ---------------------------------------------------------
# READS
# ---------------------------------------------------------
async def get_leave_for(session: AsyncSession, actor: Actor, leave_id: UUID) -> LeaveApplication:
    leave = await leave_store.require_leave(session, leave_id)
    if not can_view_leave(actor, leave):
        raise AuthorizationError("You do not have access to this leave application.")
    return leave


async def list_my_leaves(session: AsyncSession, actor: Actor, status: Optional[LeaveStatus] = None) -> List[LeaveApplication]:
    return await leave_store.query_leaves(session, scoping.own_leaves(actor, status))


async def list_to_recommend(session: AsyncSession, actor: Actor) -> List[LeaveApplication]:
    return await leave_store.query_leaves(session, scoping.leaves_to_recommend(actor))


async def list_to_approve(session: AsyncSession, actor: Actor) -> List[LeaveApplication]:
    return await leave_store.query_leaves(session, scoping.leaves_to_approve(actor))


async def list_approved(session: AsyncSession, actor: Actor) -> List[LeaveApplication]:
    return await leave_store.query_leaves(session, scoping.approved_leaves(actor))


async def list_eligible_officers(session: AsyncSession, applicant: Actor) -> Dict[str, List[User]]:
    """Candidates for the acting, recommending and approving officer fields."""
    if not applicant.division:
        return {"acting_officers": [], "recommenders": [], "approvers": []}

    division_users = await directory_service.list_users_by_division(session, applicant.division)
    global_approvers: List[User] = []
    for role in sorted(ELIGIBLE_APPROVER_GLOBAL_ROLES, key=lambda r: r.value):
        global_approvers.extend(await directory_service.list_users_by_role(session, role))

    approvers = [u for u in division_users if is_eligible_approver(applicant, u)]
    seen = {u.id for u in approvers}
    approvers += [u for u in global_approvers if u.id not in seen and is_eligible_approver(applicant, u)]

    return {
        "acting_officers": [u for u in division_users if is_eligible_acting_officer(applicant, u)],
        "recommenders": [u for u in division_users if is_eligible_recommender(applicant, u)],
        "approvers": approvers,
    }
