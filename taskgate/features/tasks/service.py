"""
Task operations gated by role permissions and organization reach.

Every method checks the actor's role first, then resolves the entity (404),
then checks organization reach (403). Mutations are followed by exactly one
audit entry; deletes are audited before the row is removed.
"""
from collections.abc import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.errors import Forbidden, NotFound
from taskgate.features.audit.service import AuditRecorder
from taskgate.features.permissions.access import (
    can_access_task_org,
    ensure_permission,
    resolve_accessible_org_ids,
)
from taskgate.features.permissions.identity import Actor, NoOrganization
from taskgate.features.permissions.rbac import Permission
from taskgate.features.tasks.models import Task
from taskgate.features.tasks.schemas import TaskCreate, TaskUpdate


class TaskService:

    def __init__(self, db: AsyncSession, audit: AuditRecorder | None = None):
        self.db = db
        self.audit = audit or AuditRecorder(db)

    async def list(self, actor: Actor) -> Sequence[Task]:
        """Tasks owned by the actor's organization or its children, newest first."""
        ensure_permission(actor, Permission.TASK_READ)
        if isinstance(actor.organization, NoOrganization):
            return []

        org_ids = await resolve_accessible_org_ids(self.db, actor.organization.id)
        result = await self.db.execute(
            select(Task)
            .where(Task.organization_id.in_(org_ids))
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return result.scalars().all()

    async def get(self, task_id: str, actor: Actor) -> Task:
        ensure_permission(actor, Permission.TASK_READ)
        return await self._get_accessible(task_id, actor)

    async def create(self, dto: TaskCreate, actor: Actor) -> Task:
        ensure_permission(actor, Permission.TASK_CREATE)
        if isinstance(actor.organization, NoOrganization):
            raise Forbidden("You must belong to an organization to create tasks")

        org_ids = await resolve_accessible_org_ids(self.db, actor.organization.id)
        target_org_id = dto.organization_id or actor.organization.id
        if target_org_id not in org_ids:
            raise Forbidden("You cannot create tasks in this organization")

        task = Task(
            title=dto.title,
            description=dto.description,
            status=dto.status,
            category=dto.category,
            organization_id=target_org_id,
            created_by_id=actor.id,
        )
        self.db.add(task)
        await self.db.flush()
        await self.db.refresh(task)

        await self.audit.log(
            actor.id,
            task.organization_id,
            "task:create",
            "task",
            task.id,
            {"title": task.title},
        )
        return task

    async def update(self, task_id: str, dto: TaskUpdate, actor: Actor) -> Task:
        """Apply only the fields present in dto."""
        ensure_permission(actor, Permission.TASK_UPDATE)
        task = await self._get_accessible(task_id, actor)

        for field, value in dto.model_dump(exclude_unset=True).items():
            setattr(task, field, value)
        await self.db.flush()
        await self.db.refresh(task)

        await self.audit.log(
            actor.id,
            task.organization_id,
            "task:update",
            "task",
            task.id,
            {"title": task.title, "status": task.status.value},
        )
        return task

    async def remove(self, task_id: str, actor: Actor) -> None:
        ensure_permission(actor, Permission.TASK_DELETE)
        task = await self._get_accessible(task_id, actor)

        await self.audit.log(
            actor.id,
            task.organization_id,
            "task:delete",
            "task",
            task.id,
            {"title": task.title},
        )
        await self.db.delete(task)
        await self.db.flush()

    async def _get_accessible(self, task_id: str, actor: Actor) -> Task:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFound("Task not found")

        if isinstance(actor.organization, NoOrganization) or not can_access_task_org(
            actor.organization.id,
            task.organization_id,
            task.organization.parent_id,
        ):
            raise Forbidden("You cannot access tasks of this organization")
        return task
