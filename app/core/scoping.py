# app/core/scoping.py
"""
Who sees what. Each function turns an Actor into a SQL predicate that the
stores apply directly in the query, so no list is fetched broadly and
filtered afterwards.

Admin and HOD are system-wide, Divisional Head and Division CC are limited to
their own division, Staff never sees other users' records.
"""

from datetime import date
from typing import Optional

from sqlalchemy import and_, false, or_, true

from app.core.constants import APPROVE_ROLES, RECOMMEND_ROLES
from app.core.context import Actor
from app.models.enums import LeaveStatus, ProgramStatus
from app.models.leave import LeaveApplication
from app.models.program import AdvancedProgramEntry
from app.models.user import User, UserRole


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


# ----------------------------------------------------------
# LEAVE APPLICATIONS
# ----------------------------------------------------------
def _named(column, actor: Actor):
    """Assigned to the caller, limited to their own division unless system-wide."""
    named = column == actor.id
    if actor.is_system_wide:
        return named
    if actor.division:
        return and_(named, LeaveApplication.division == actor.division)
    return false()


def leaves_to_recommend(actor: Actor):
    if actor.role not in RECOMMEND_ROLES:
        return false()

    pending = LeaveApplication.status == LeaveStatus.pending
    clauses = [_named(LeaveApplication.recommender_id, actor)]

    # division-wide fallback for the division's CC
    if actor.role == UserRole.DivisionCC and actor.division:
        clauses.append(LeaveApplication.division == actor.division)

    return and_(pending, or_(*clauses), LeaveApplication.applicant_id != actor.id)


def leaves_to_approve(actor: Actor):
    if actor.role not in APPROVE_ROLES:
        return false()

    recommended = LeaveApplication.status == LeaveStatus.recommended
    clauses = [_named(LeaveApplication.approver_id, actor)]

    if actor.is_system_wide:
        clauses.append(true())
    elif actor.role == UserRole.DivisionalHead and actor.division:
        clauses.append(LeaveApplication.division == actor.division)

    return and_(recommended, or_(*clauses), LeaveApplication.applicant_id != actor.id)


def approved_leaves(actor: Actor):
    approved = LeaveApplication.status == LeaveStatus.approved

    if actor.is_system_wide:
        return approved
    if actor.role == UserRole.DivisionalHead and actor.division:
        return and_(approved, LeaveApplication.division == actor.division)
    return false()


def own_leaves(actor: Actor, status: Optional[LeaveStatus] = None):
    predicate = LeaveApplication.applicant_id == actor.id
    if status is not None:
        predicate = and_(predicate, LeaveApplication.status == status)
    return predicate


# ----------------------------------------------------------
# STAFF DIRECTORY
# ----------------------------------------------------------
def directory(actor: Actor, search: Optional[str] = None):
    if actor.is_system_wide:
        predicate = true()
    elif actor.is_division_scoped and actor.division:
        predicate = User.division == actor.division
    else:
        return false()

    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        predicate = and_(
            predicate,
            or_(
                User.name.ilike(term),
                User.email.ilike(term),
                User.designation.ilike(term),
            ),
        )
    return predicate


# ----------------------------------------------------------
# ADVANCED PROGRAM
# ----------------------------------------------------------
def in_month(year: int, month: int):
    start, end = month_bounds(year, month)
    return and_(AdvancedProgramEntry.entry_date >= start, AdvancedProgramEntry.entry_date < end)


def programs_for_approval(actor: Actor, year: int, month: int, division: Optional[str] = None):
    submitted = and_(AdvancedProgramEntry.status == ProgramStatus.submitted, in_month(year, month))

    if actor.is_system_wide:
        if division:
            return and_(submitted, AdvancedProgramEntry.division == division)
        return submitted
    if actor.is_division_scoped and actor.division:
        return and_(
            submitted,
            AdvancedProgramEntry.division == actor.division,
            AdvancedProgramEntry.user_id != actor.id,
        )
    return false()


def own_programs(actor: Actor, year: int, month: int):
    return and_(AdvancedProgramEntry.user_id == actor.id, in_month(year, month))
