"""
Organization storage lookups shared across features.
"""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.features.organizations.models import Organization


async def get_organization(db: AsyncSession, organization_id: str) -> Organization | None:
    """Fetch an organization by ID, or None if it does not exist."""
    result = await db.execute(
        select(Organization).where(Organization.id == organization_id)
    )
    return result.scalar_one_or_none()


async def fetch_children(db: AsyncSession, parent_id: str) -> list[Organization]:
    """Direct children of an organization, oldest first."""
    result = await db.execute(
        select(Organization)
        .where(Organization.parent_id == parent_id)
        .order_by(Organization.created_at, Organization.id)
    )
    return list(result.scalars().all())


async def fetch_child_org_ids(db: AsyncSession, parent_id: str) -> list[str]:
    """IDs of the direct children of an organization, oldest first."""
    result = await db.execute(
        select(Organization.id)
        .where(Organization.parent_id == parent_id)
        .order_by(Organization.created_at, Organization.id)
    )
    return list(result.scalars().all())


async def count_children(db: AsyncSession, parent_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Organization).where(Organization.parent_id == parent_id)
    )
    return result.scalar_one()
