"""
Audit recorder: the only writer of audit log rows.
"""
from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core import config
from taskgate.features.audit.models import AuditLog
from taskgate.features.audit.schemas import AuditLogResponse
from taskgate.features.permissions.access import ensure_permission, resolve_accessible_org_ids
from taskgate.features.permissions.identity import Actor, NoOrganization
from taskgate.features.permissions.rbac import Permission
from taskgate.features.users.models import User
from taskgate.utils import get_logger


log = get_logger(__name__)


class AuditRecorder:
    """
    Appends audit entries and reads them back scoped to an actor's
    accessible organizations.

    Writes are flushed into the caller's session and commit together with
    the mutation they describe.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        user_id: Optional[str],
        organization_id: Optional[str],
        action: str,
        resource: str,
        resource_id: str = "",
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """
        Create an audit log entry.

        Args:
            user_id: User performing the action (None for system events)
            organization_id: Organization context
            action: Action tag, e.g. "task:create"
            resource: Entity kind, e.g. "task"
            resource_id: ID of the affected entity
            details: Additional structured details

        Returns:
            Created AuditLog object
        """
        entry = AuditLog(
            user_id=user_id,
            organization_id=organization_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            details=details,
        )
        self.db.add(entry)
        await self.db.flush()

        log.info(
            "Audit: user=%s action=%s resource=%s:%s org=%s",
            user_id, action, resource, resource_id, organization_id
        )
        return entry

    async def find_all(self, actor: Actor) -> list[AuditLogResponse]:
        """
        Newest-first audit entries for the actor's home organization and its
        direct children, capped at AUDIT_PAGE_SIZE.
        """
        ensure_permission(actor, Permission.AUDIT_READ)
        if isinstance(actor.organization, NoOrganization):
            return []

        org_ids = await resolve_accessible_org_ids(self.db, actor.organization.id)
        result = await self.db.execute(
            select(AuditLog, User.email)
            .outerjoin(User, User.id == AuditLog.user_id)
            .where(AuditLog.organization_id.in_(org_ids))
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .limit(config.AUDIT_PAGE_SIZE)
        )

        entries = []
        for entry, email in result.all():
            response = AuditLogResponse.model_validate(entry)
            response.user_email = email
            entries.append(response)
        return entries
