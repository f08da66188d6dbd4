"""
Pydantic schemas for organization-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class OrganizationCreate(BaseModel):
    """Schema for creating an organization (Owner only)."""
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: str | None = Field(
        None,
        alias="parentId",
        description="Must be your own root organization ID when given. Omit for your first organization."
    )

    model_config = ConfigDict(populate_by_name=True)


class OrganizationResponse(BaseModel):
    """Schema for organization responses."""
    id: str
    name: str
    parent_id: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrganizationSummary(BaseModel):
    """Minimal organization info embedded in other responses."""
    id: str
    name: str
    parent_id: str | None = None

    model_config = ConfigDict(from_attributes=True)
