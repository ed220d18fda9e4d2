# app/services/audit_service.py

from dataclasses import dataclass, field
from uuid import UUID
from typing import Optional, Dict, Any, List

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.context import Actor
from app.core.database import AsyncSessionLocal, store_errors
from app.models.audit import AuditLog


@dataclass
class AuditEntry:
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    remarks: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


# Note: no 'session' argument.
# This function manages its own session so it can run as a background task.
async def log_activity(
    action: str,
    actor_id: Optional[UUID],
    entity_type: str,
    entity_id: Optional[str] = None,
    actor_role: Optional[str] = None,
    actor_name: Optional[str] = None,
    remarks: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
):
    """
    Creates an audit log entry in a separate DB session.
    Safe for use in BackgroundTasks.
    """
    async with AsyncSessionLocal() as session:
        try:
            session.add(
                AuditLog(
                    actor_id=actor_id,
                    actor_role=actor_role,
                    actor_name=actor_name,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    action=action,
                    remarks=remarks,
                    details=details or {}
                )
            )
            await session.commit()
        except Exception:
            # never fail the request that triggered the log
            logger.exception(f"Audit log write failed for '{action}' on {entity_type} {entity_id}")
            await session.rollback()


async def record(actor: Actor, entries: List[AuditEntry]) -> None:
    for entry in entries:
        await log_activity(
            action=entry.action,
            actor_id=actor.id,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            actor_role=actor.role.value,
            actor_name=actor.name,
            remarks=entry.remarks,
            details=entry.details,
        )


async def list_audit_logs(
    session: AsyncSession,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    actor_role: Optional[str] = None,
    limit: int = 100,
) -> List[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.timestamp.desc()).limit(limit)
    if action:
        query = query.where(AuditLog.action == action)
    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)
    if actor_role:
        query = query.where(AuditLog.actor_role == actor_role)

    async with store_errors("load audit logs"):
        result = await session.execute(query)
    return list(result.scalars().all())
