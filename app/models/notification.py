from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, Text, Uuid
from sqlalchemy import Enum as PGEnum
from datetime import datetime
import uuid
from typing import Any, Dict

from app.models.enums import NotificationKind


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    # recipient
    user_id: uuid.UUID = Field(
        sa_column=Column("userId", Uuid, ForeignKey("users.id"), nullable=False, index=True)
    )

    kind: NotificationKind = Field(
        sa_column=Column(
            PGEnum(NotificationKind, name="notification_kind", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        )
    )
    title: str = Field(sa_column=Column(String(200), nullable=False))
    message: str = Field(sa_column=Column(Text, nullable=False))
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    read: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column("createdAt", DateTime(timezone=True), nullable=False, index=True)
    )
