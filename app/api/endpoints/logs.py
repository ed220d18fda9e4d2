# app/api/endpoints/logs.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.api.deps import get_db_session, require_admin
from app.core.context import Actor
from app.schemas.audit import AuditLogRead
from app.services.audit_service import list_audit_logs

router = APIRouter(prefix="/api/admin", tags=["Audit & Logs"])


# -------------------------------------------------------------------
# VIEW WORKFLOW AUDIT LOGS
# -------------------------------------------------------------------
@router.get("/audit-logs", response_model=List[AuditLogRead])
async def get_audit_logs(
    action: Optional[str] = Query(None, description="e.g. leave.approved"),
    entity_type: Optional[str] = Query(None, description="leave | program | division | user"),
    actor_role: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    _: Actor = Depends(require_admin),
):
    """
    Who moved which record from which status to which, newest first.
    Written after each transition in its own session.
    """
    return await list_audit_logs(session, action, entity_type, actor_role, limit)
