"""
Organization administration.

Only Owners create or delete organizations. An Owner without an organization
creates a root and moves into it; an Owner of a root creates direct children
of that root. Deletion is limited to the Owner's own root or its children
and requires the organization to be empty.
"""
from collections.abc import Sequence
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.errors import BadRequest, Conflict, Forbidden, NotFound
from taskgate.features.audit.service import AuditRecorder
from taskgate.features.organizations.dependencies import (
    count_children,
    fetch_children,
    get_organization,
)
from taskgate.features.organizations.models import Organization
from taskgate.features.permissions.access import can_access_organization
from taskgate.features.permissions.identity import Actor, NoOrganization
from taskgate.features.permissions.rbac import Role
from taskgate.features.tasks.models import Task
from taskgate.features.users.models import User
from taskgate.utils import get_logger


log = get_logger(__name__)


class OrganizationService:

    def __init__(self, db: AsyncSession, audit: AuditRecorder | None = None):
        self.db = db
        self.audit = audit or AuditRecorder(db)

    async def create(self, name: str, parent_id: str | None, actor: Actor) -> Organization:
        if actor.role != Role.OWNER:
            raise Forbidden("Only Owner can create organizations")

        if isinstance(actor.organization, NoOrganization):
            return await self._create_root(name, parent_id, actor)

        my_org = await get_organization(self.db, actor.organization.id)
        if my_org is None:
            raise NotFound("Your organization not found")
        if not my_org.is_root:
            raise Forbidden("Only Owner of a root organization may create sub-organizations")

        if parent_id is not None and not can_access_organization(my_org.id, parent_id):
            requested_parent = await get_organization(self.db, parent_id)
            if requested_parent is not None and not requested_parent.is_root:
                raise Conflict("Organizations are limited to two levels; a sub-organization cannot have children")
            raise BadRequest("parentId must be your root organization id")

        child = Organization(name=name, parent_id=my_org.id)
        self.db.add(child)
        await self.db.flush()
        await self.db.refresh(child)

        await self.audit.log(
            actor.id,
            my_org.id,
            "organization:create",
            "organization",
            child.id,
            {"name": child.name, "parentId": child.parent_id},
        )
        return child

    async def list(self, actor: Actor) -> Sequence[Organization]:
        """
        The actor's own organization. Owners of a root also get its children.
        """
        if isinstance(actor.organization, NoOrganization):
            return []

        org = await get_organization(self.db, actor.organization.id)
        if org is None:
            return []
        if actor.role == Role.OWNER and org.is_root:
            return [org, *await fetch_children(self.db, org.id)]
        return [org]

    async def remove(self, organization_id: str, actor: Actor) -> None:
        if actor.role != Role.OWNER:
            raise Forbidden("Only Owner can delete organizations")
        if isinstance(actor.organization, NoOrganization):
            raise Forbidden("No organization assigned")

        org = await get_organization(self.db, organization_id)
        if org is None:
            raise NotFound("Organization not found")

        my_org = await get_organization(self.db, actor.organization.id)
        if my_org is None:
            raise Forbidden("Your organization not found")
        if not my_org.is_root:
            raise Forbidden("Only Owner of a root organization may delete organizations")

        is_my_root = can_access_organization(my_org.id, org.id)
        is_my_child = org.parent_id == my_org.id
        if not is_my_root and not is_my_child:
            raise Forbidden("You can only delete your root organization or its direct children")

        if await self._count_members(org.id, exclude_user_id=actor.id):
            raise Conflict("Cannot delete organization that has users. Reassign or remove users first.")
        if is_my_root and await count_children(self.db, org.id):
            raise Conflict("Cannot delete organization that has sub-organizations. Delete them first.")
        if await self._count_tasks(org.id):
            raise Conflict("Cannot delete organization that still owns tasks")

        if is_my_root:
            await self.db.execute(
                update(User).where(User.id == actor.id).values(organization_id=None)
            )
            log.info("User %s left deleted root organization %s", actor.id, org.id)

        await self.db.delete(org)
        await self.db.flush()

        await self.audit.log(
            actor.id,
            my_org.id,
            "organization:delete",
            "organization",
            org.id,
            {"name": org.name},
        )

    async def _create_root(self, name: str, parent_id: str | None, actor: Actor) -> Organization:
        if parent_id is not None:
            raise Conflict("Cannot set parentId when creating your first (root) organization")

        root = Organization(name=name, parent_id=None)
        self.db.add(root)
        await self.db.flush()
        await self.db.refresh(root)

        await self.db.execute(
            update(User).where(User.id == actor.id).values(organization_id=root.id)
        )

        await self.audit.log(
            actor.id,
            root.id,
            "organization:create",
            "organization",
            root.id,
            {"name": root.name, "parentId": None},
        )
        return root

    async def _count_members(self, organization_id: str, exclude_user_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(User)
            .where(User.organization_id == organization_id, User.id != exclude_user_id)
        )
        return result.scalar_one()

    async def _count_tasks(self, organization_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Task).where(Task.organization_id == organization_id)
        )
        return result.scalar_one()
