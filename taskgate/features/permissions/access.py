"""
Organization scoping and access decisions.

Organizations form at most two levels: roots (no parent) and their direct
children. A user reaches their home organization plus its direct children.
"""
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.errors import Forbidden
from taskgate.features.organizations.dependencies import fetch_child_org_ids
from taskgate.features.permissions.identity import Actor
from taskgate.features.permissions.rbac import Permission, has_permission
from taskgate.utils import get_logger


log = get_logger(__name__)


def accessible_org_ids(home_org_id: str, child_ids: Iterable[str]) -> list[str]:
    """
    Compute the organizations a user may act within.

    The home organization comes first, followed by the children in the order
    supplied. No recursion: children of children are never considered.
    Callers must not pass a missing home organization.
    """
    org_ids = [home_org_id]
    for child_id in child_ids:
        if child_id not in org_ids:
            org_ids.append(child_id)
    return org_ids


def can_access_task_org(
    user_org_id: str,
    task_org_id: str,
    task_org_parent_id: str | None,
) -> bool:
    """
    Can a user in user_org_id reach a resource owned by task_org_id?

    Same organization, or the user's organization is the direct parent of the
    owning organization. Children cannot reach their parent; siblings cannot
    reach each other.
    """
    return user_org_id == task_org_id or task_org_parent_id == user_org_id


def can_access_organization(user_org_id: str, target_org_id: str) -> bool:
    """Organization-level access is same-organization only."""
    return user_org_id == target_org_id


def ensure_permission(actor: Actor, permission: Permission) -> None:
    """Raise Forbidden unless the actor's role grants the permission."""
    if not has_permission(actor.role, permission):
        log.debug("User %s (%s) denied %s", actor.id, actor.role.value, permission.value)
        raise Forbidden(f"Missing required permission: {permission.value}")


async def resolve_accessible_org_ids(db: AsyncSession, home_org_id: str) -> list[str]:
    """Look up the direct children of home_org_id and compute the accessible set."""
    child_ids = await fetch_child_org_ids(db, home_org_id)
    return accessible_org_ids(home_org_id, child_ids)
