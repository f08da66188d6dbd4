"""
Task feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.database.engine import get_db
from taskgate.features.permissions.identity import Actor
from taskgate.features.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse
from taskgate.features.tasks.service import TaskService
from taskgate.features.users.dependencies import get_current_actor


router = APIRouter(tags=["tasks"])


@router.get("/", response_model=list[TaskResponse])
async def list_tasks(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List tasks of your organization and its sub-organizations, newest first."""
    return await TaskService(db).list(actor)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    return await TaskService(db).get(task_id, actor)


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    return await TaskService(db).create(task_data, actor)


@router.put("/{task_id}", response_model=TaskResponse)
@router.patch("/{task_id}", response_model=TaskResponse, include_in_schema=False)
async def update_task(
    task_id: str,
    update_data: TaskUpdate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a task. Only the fields provided are changed."""
    return await TaskService(db).update(task_id, update_data, actor)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    await TaskService(db).remove(task_id, actor)
