# app/models/leave.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy import Enum as PGEnum
from datetime import date, datetime
import uuid
from typing import Optional

from app.models.enums import LeaveStatus, LeaveType


def _values(enum_cls):
    return [m.value for m in enum_cls]


class LeaveApplication(SQLModel, table=True):
    """
    One leave request. Column names follow the stored document fields
    (applicantId, resumeDate, ...) so existing records load unchanged.
    """

    __tablename__ = "leave_applications"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    # --- applicant snapshot ---
    applicant_id: uuid.UUID = Field(
        sa_column=Column("applicantId", Uuid, ForeignKey("users.id"), nullable=False, index=True)
    )
    applicant_name: str = Field(sa_column=Column("applicantName", String, nullable=False))
    designation: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    division: str = Field(sa_column=Column(String(128), nullable=False, index=True))

    # --- request ---
    leave_type: LeaveType = Field(
        sa_column=Column(
            "leaveType",
            PGEnum(LeaveType, name="leave_type", values_callable=_values),
            nullable=False,
        )
    )
    leave_days: int = Field(sa_column=Column("leaveDays", Integer, nullable=False))
    start_date: date = Field(sa_column=Column("startDate", Date, nullable=False))
    resume_date: date = Field(sa_column=Column("resumeDate", Date, nullable=False))
    reason: str = Field(sa_column=Column(Text, nullable=False))

    # --- routing ---
    acting_officer_id: uuid.UUID = Field(
        sa_column=Column("actingOfficerId", Uuid, ForeignKey("users.id"), nullable=False)
    )
    acting_officer_name: str = Field(sa_column=Column("actingOfficerName", String, nullable=False))
    recommender_id: uuid.UUID = Field(
        sa_column=Column("recommenderId", Uuid, ForeignKey("users.id"), nullable=False, index=True)
    )
    approver_id: uuid.UUID = Field(
        sa_column=Column("approverId", Uuid, ForeignKey("users.id"), nullable=False, index=True)
    )

    status: LeaveStatus = Field(
        default=LeaveStatus.pending,
        sa_column=Column(
            PGEnum(LeaveStatus, name="leave_status", values_callable=_values),
            nullable=False,
            index=True,
        )
    )

    # --- recommendation stage ---
    recommendation_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column("recommendationBy", Uuid, ForeignKey("users.id"), nullable=True)
    )
    recommendation_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column("recommendationDate", DateTime(timezone=True), nullable=True)
    )
    recommendation_remarks: Optional[str] = Field(
        default=None,
        sa_column=Column("recommendationRemarks", Text, nullable=True)
    )

    # --- approval stage ---
    approval_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column("approvalBy", Uuid, ForeignKey("users.id"), nullable=True)
    )
    approval_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column("approvalDate", DateTime(timezone=True), nullable=True)
    )
    approval_remarks: Optional[str] = Field(
        default=None,
        sa_column=Column("approvalRemarks", Text, nullable=True)
    )

    rejection_reason: Optional[str] = Field(
        default=None,
        sa_column=Column("rejectionReason", Text, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True), nullable=False)
    )
