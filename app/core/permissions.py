# app/core/permissions.py
"""
Record-level authorization for workflow actions.

Two paths grant the right to act on a leave at a given stage:
  * explicit assignment (caller is the named recommender / approver), or
  * role fallback (system-wide role, or division role on the record's division).
Both are checked against the caller's current role and division, so a named
officer who has since been demoted or moved loses the right to act.
Neither takes precedence: whichever decision is committed first wins, the
other caller gets ConflictError from the conditional write.
"""

from app.core.constants import (
    APPROVE_ROLES,
    DIRECTORY_ROLES,
    PROGRAM_DECISION_ROLES,
    RECOMMEND_ROLES,
    USER_DELETE_ROLES,
)
from app.core.context import Actor
from app.core.exceptions import AuthorizationError
from app.models.leave import LeaveApplication
from app.models.program import AdvancedProgramEntry


def _role_covers(actor: Actor, allowed_roles, division) -> bool:
    if actor.role not in allowed_roles:
        return False
    if actor.is_system_wide:
        return True
    return actor.is_division_scoped and actor.same_division(division)


def can_recommend(actor: Actor, leave: LeaveApplication) -> bool:
    if actor.id == leave.applicant_id:
        return False
    # being the named recommender does not lift the role and division check
    return _role_covers(actor, RECOMMEND_ROLES, leave.division)


def can_approve(actor: Actor, leave: LeaveApplication) -> bool:
    if actor.id == leave.applicant_id:
        return False
    return _role_covers(actor, APPROVE_ROLES, leave.division)


def can_view_leave(actor: Actor, leave: LeaveApplication) -> bool:
    if actor.id in (leave.applicant_id, leave.recommender_id, leave.approver_id, leave.acting_officer_id):
        return True
    if actor.is_system_wide:
        return True
    return actor.is_division_scoped and actor.same_division(leave.division)


def can_decide_program(actor: Actor, entry: AdvancedProgramEntry) -> bool:
    if actor.id == entry.user_id:
        return False
    return _role_covers(actor, PROGRAM_DECISION_ROLES, entry.division)


def can_view_directory(actor: Actor) -> bool:
    return actor.role in DIRECTORY_ROLES


def require(allowed: bool, message: str = "Access denied") -> None:
    if not allowed:
        raise AuthorizationError(message)


def require_user_delete(actor: Actor, target_id) -> None:
    if actor.role not in USER_DELETE_ROLES:
        raise AuthorizationError("Only Admin or HOD can delete users.")
    if actor.id == target_id:
        raise AuthorizationError("You cannot delete your own account while logged in.")
