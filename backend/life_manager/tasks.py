from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from .auth import MessageResponse, get_current_user_id
from .database import get_db_connection
from .services.tasks_service import add_task, delete_task, list_tasks, update_task

router = APIRouter(tags=["tasks"])


class TaskCreate(BaseModel):
    goal_id: UUID
    task_name: str = Field(min_length=1, max_length=200)

    @field_validator("task_name", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class TaskUpdate(BaseModel):
    task_name: str = Field(min_length=1, max_length=200)
    status: str = Field(min_length=1, max_length=40)

    @field_validator("task_name", "status", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class TaskResponse(BaseModel):
    id: UUID
    goal_id: UUID
    task_name: str
    status: str
    created_at: datetime
    updated_at: datetime


class TaskCreatedResponse(BaseModel):
    message: str
    task_id: UUID


@router.post("/tasks", response_model=TaskCreatedResponse)
async def create_task_endpoint(
    payload: TaskCreate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> TaskCreatedResponse:
    row = await add_task(connection, user_id, payload.goal_id, payload.task_name)
    return TaskCreatedResponse(message="Task added successfully", task_id=row["id"])


@router.get("/goals/{goal_id}/tasks", response_model=list[TaskResponse])
async def list_tasks_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[TaskResponse]:
    rows = await list_tasks(connection, user_id, goal_id)
    return [TaskResponse(**row) for row in rows]


@router.put("/tasks/{task_id}", response_model=MessageResponse)
async def update_task_endpoint(
    task_id: UUID,
    payload: TaskUpdate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    await update_task(connection, user_id, task_id, payload.task_name, payload.status)
    return MessageResponse(message="Task updated successfully")


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task_endpoint(
    task_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    await delete_task(connection, user_id, task_id)
    return MessageResponse(message="Task deleted successfully")
