from datetime import datetime
from typing import Any, Dict
from uuid import UUID

from app.models.enums import NotificationKind
from app.schemas.base import CamelModel


class NotificationRead(CamelModel):
    id: UUID
    user_id: UUID
    kind: NotificationKind
    title: str
    message: str
    data: Dict[str, Any] = {}
    read: bool
    created_at: datetime
