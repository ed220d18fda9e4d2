# app/services/dispatch_service.py

from dataclasses import dataclass, field
from typing import Any, List

from fastapi import BackgroundTasks

from app.core.context import Actor
from app.services import audit_service, notification_service
from app.services.audit_service import AuditEntry
from app.services.notification_service import NotificationRequest


@dataclass
class WorkflowResult:
    """A committed state change plus the side effects it should trigger."""

    record: Any
    notifications: List[NotificationRequest] = field(default_factory=list)
    audit: List[AuditEntry] = field(default_factory=list)


def schedule(background_tasks: BackgroundTasks, actor: Actor, result: WorkflowResult) -> None:
    """Queue notifications and audit writes to run after the response is sent."""
    if result.notifications:
        background_tasks.add_task(notification_service.dispatch, list(result.notifications))
    if result.audit:
        background_tasks.add_task(audit_service.record, actor, list(result.audit))
