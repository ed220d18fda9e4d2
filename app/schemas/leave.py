# app/schemas/leave.py

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from app.models.enums import ApprovalDecision, LeaveStatus, LeaveType, RecommendationDecision
from app.schemas.base import CamelModel
from app.schemas.user import UserSummary


# ============================================================
# APPLICANT → submission
# ============================================================
class LeaveCreate(CamelModel):
    leave_type: LeaveType
    start_date: date
    resume_date: date
    reason: str
    acting_officer_id: UUID
    recommender_id: UUID
    approver_id: UUID


# ============================================================
# DECISIONS
# ============================================================
class RecommendRequest(CamelModel):
    decision: RecommendationDecision
    comment: Optional[str] = None


class ApproveRequest(CamelModel):
    decision: ApprovalDecision
    comment: Optional[str] = None


# ============================================================
# READ
# ============================================================
class LeaveRead(CamelModel):
    id: UUID
    applicant_id: UUID
    applicant_name: str
    designation: Optional[str] = None
    division: str
    leave_type: LeaveType
    leave_days: int
    start_date: date
    resume_date: date
    reason: str
    acting_officer_id: UUID
    acting_officer_name: str
    recommender_id: UUID
    approver_id: UUID
    status: LeaveStatus

    recommendation_by: Optional[UUID] = None
    recommendation_date: Optional[datetime] = None
    recommendation_remarks: Optional[str] = None
    approval_by: Optional[UUID] = None
    approval_date: Optional[datetime] = None
    approval_remarks: Optional[str] = None
    rejection_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime


class EligibleOfficers(CamelModel):
    acting_officers: List[UserSummary] = []
    recommenders: List[UserSummary] = []
    approvers: List[UserSummary] = []
