"""
Pydantic schemas for task-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator

from taskgate.features.organizations.schemas import OrganizationSummary
from taskgate.features.tasks.models import TaskStatus, TaskCategory
from taskgate.features.users.schemas import UserSummary


class TaskCreate(BaseModel):
    """Schema for creating a task."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus = TaskStatus.OPEN
    category: TaskCategory = TaskCategory.WORK
    organization_id: str | None = Field(
        None,
        alias="organizationId",
        description="Owning organization. Defaults to your own; may be any organization you can reach."
    )

    model_config = ConfigDict(populate_by_name=True)


class TaskUpdate(BaseModel):
    """
    Schema for partially updating a task.

    Only fields present in the request are applied. Explicit null is only
    accepted for description.
    """
    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    category: TaskCategory | None = None

    @field_validator("title", "status", "category")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TaskResponse(BaseModel):
    """Schema for task responses."""
    id: str
    title: str
    description: str | None = None
    status: TaskStatus
    category: TaskCategory
    organization_id: str
    created_by_id: str
    organization: OrganizationSummary | None = None
    created_by: UserSummary | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
