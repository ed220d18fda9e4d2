#app/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, String
from typing import Optional, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    actor_id: Optional[UUID] = Field(default=None, foreign_key="users.id")
    actor_role: Optional[str] = None

    # Snapshot, survives later renames of the actor
    actor_name: Optional[str] = None

    # "leave" | "program" | "division" | "user"
    entity_type: str = Field(sa_column=Column(String(32), nullable=False, index=True))
    entity_id: Optional[str] = Field(default=None, index=True)

    action: str
    remarks: Optional[str] = None

    # e.g. {"from": "pending", "to": "recommended"}
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    timestamp: datetime = Field(default_factory=datetime.utcnow)
