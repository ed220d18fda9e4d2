# app/models/program.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Date, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy import Enum as PGEnum
from datetime import date, datetime
import uuid
from typing import Optional

from app.models.enums import ProgramStatus


class AdvancedProgramEntry(SQLModel, table=True):
    """A Field-staff member's planned work for one calendar day."""

    __tablename__ = "advanced_programs"
    __table_args__ = (
        UniqueConstraint("userId", "date", name="uq_advanced_programs_user_date"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    user_id: uuid.UUID = Field(
        sa_column=Column("userId", Uuid, ForeignKey("users.id"), nullable=False, index=True)
    )
    user_name: str = Field(sa_column=Column("userName", String, nullable=False))
    division: str = Field(sa_column=Column(String(128), nullable=False, index=True))

    entry_date: date = Field(sa_column=Column("date", Date, nullable=False, index=True))
    program_name: str = Field(default="", sa_column=Column("programName", String, nullable=False))
    place: str = Field(default="", sa_column=Column(String, nullable=False))

    status: ProgramStatus = Field(
        default=ProgramStatus.draft,
        sa_column=Column(
            PGEnum(ProgramStatus, name="program_status", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
            index=True,
        )
    )

    decided_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column("decidedBy", Uuid, ForeignKey("users.id"), nullable=True)
    )
    decided_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column("decidedAt", DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("updatedAt", DateTime(timezone=True), nullable=False)
    )
