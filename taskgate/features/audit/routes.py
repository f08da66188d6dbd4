"""
Audit log routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.database.engine import get_db
from taskgate.features.audit.schemas import AuditLogResponse
from taskgate.features.audit.service import AuditRecorder
from taskgate.features.permissions.identity import Actor
from taskgate.features.users.dependencies import get_current_actor


router = APIRouter(tags=["audit"])


@router.get("/", response_model=list[AuditLogResponse])
async def list_audit_logs(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Audit history of your organization and its sub-organizations, newest first."""
    return await AuditRecorder(db).find_all(actor)
