# app/schemas/program.py

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.models.enums import ProgramDecision, ProgramStatus
from app.schemas.base import CamelModel


# ============================================================
# OWNER → save / submit a month
# ============================================================
class ProgramEntryInput(CamelModel):
    entry_date: date = Field(alias="date")
    program_name: str = ""
    place: str = ""


class ProgramBatchRequest(CamelModel):
    month: str = Field(pattern=r"^\d{4}-\d{2}$", examples=["2025-03"])
    entries: List[ProgramEntryInput] = []


# ============================================================
# APPROVER
# ============================================================
class ProgramDecisionRequest(CamelModel):
    decision: ProgramDecision


class DecideMonthRequest(CamelModel):
    user_id: UUID
    month: str = Field(pattern=r"^\d{4}-\d{2}$")
    decision: ProgramDecision


# ============================================================
# READ
# ============================================================
class ProgramEntryRead(CamelModel):
    id: UUID
    user_id: UUID
    user_name: str
    division: str
    entry_date: date = Field(alias="date")
    program_name: str
    place: str
    status: ProgramStatus
    decided_by: Optional[UUID] = None
    decided_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SkippedEntry(CamelModel):
    entry_date: date = Field(alias="date")
    reason: str


class FailedEntry(CamelModel):
    entry_date: date = Field(alias="date")
    error: str


class ProgramBatchResult(CamelModel):
    saved: List[ProgramEntryRead] = []
    skipped: List[SkippedEntry] = []
    failed: List[FailedEntry] = []
