"""
Organization feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.database.engine import get_db
from taskgate.features.organizations.schemas import OrganizationCreate, OrganizationResponse
from taskgate.features.organizations.service import OrganizationService
from taskgate.features.permissions.identity import Actor
from taskgate.features.users.dependencies import get_current_actor


router = APIRouter(tags=["organizations"])


@router.get("/", response_model=list[OrganizationResponse])
async def list_organizations(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List the organizations visible to the current user."""
    return await OrganizationService(db).list(actor)


@router.post("/", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    org_data: OrganizationCreate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a root organization, or a sub-organization of your root (Owner only)."""
    return await OrganizationService(db).create(org_data.name, org_data.parent_id, actor)


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(
    organization_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete an empty organization (Owner only)."""
    await OrganizationService(db).remove(organization_id, actor)
