"""Goals router: scoped goal CRUD plus the investment sub-resource."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_serializer

from .auth import MessageResponse, get_current_user_id
from .database import get_db_connection
from .services.goals_service import (
    add_investment,
    create_goal,
    delete_goal,
    edit_investment,
    get_goal,
    list_goals,
    reset_investment,
    update_goal,
)
from .utils import money

router = APIRouter(prefix="/goals", tags=["goals"])


class GoalWriteRequest(BaseModel):
    """Body for both create and full update; any investment_amount sent is ignored."""
    title: str = Field(min_length=1, max_length=120)
    category: str = Field(min_length=1, max_length=60)
    target_amount: Decimal = Field(max_digits=12, decimal_places=2)
    target_date: date


class InvestmentRequest(BaseModel):
    investment_amount: Decimal = Field(max_digits=12, decimal_places=2)


class GoalResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    category: str
    target_amount: Decimal
    target_date: date
    investment_amount: Decimal
    created_at: datetime
    updated_at: datetime

    @field_serializer("target_amount", "investment_amount")
    def serialize_decimal(self, value: Decimal) -> float:
        return money(value)


class GoalCreatedResponse(BaseModel):
    message: str
    goal_id: UUID


@router.post("", response_model=GoalCreatedResponse)
async def create_goal_endpoint(
    payload: GoalWriteRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalCreatedResponse:
    row = await create_goal(connection, user_id, payload.model_dump())
    return GoalCreatedResponse(message="Goal created successfully", goal_id=row["id"])


@router.get("", response_model=list[GoalResponse])
async def list_goals_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[GoalResponse]:
    rows = await list_goals(connection, user_id)
    return [GoalResponse(**row) for row in rows]


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalResponse:
    row = await get_goal(connection, user_id, goal_id)
    return GoalResponse(**row)


@router.put("/{goal_id}", response_model=MessageResponse)
async def update_goal_endpoint(
    goal_id: UUID,
    payload: GoalWriteRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    """Replace a goal's editable fields. 404 when the user has no such goal."""
    await update_goal(connection, user_id, goal_id, payload.model_dump())
    return MessageResponse(message="Goal updated successfully")


@router.delete("/{goal_id}", response_model=MessageResponse)
async def delete_goal_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    """Idempotent: succeeds whether or not a goal was removed."""
    await delete_goal(connection, user_id, goal_id)
    return MessageResponse(message="Goal deleted successfully")


@router.put("/{goal_id}/invest", response_model=MessageResponse)
async def add_investment_endpoint(
    goal_id: UUID,
    payload: InvestmentRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    """Incremental add; amount must be > 0."""
    await add_investment(connection, user_id, goal_id, payload.investment_amount)
    return MessageResponse(message="Investment added successfully")


@router.put("/{goal_id}/invest/edit", response_model=MessageResponse)
async def edit_investment_endpoint(
    goal_id: UUID,
    payload: InvestmentRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    """Absolute replace; amount must be >= 0."""
    await edit_investment(connection, user_id, goal_id, payload.investment_amount)
    return MessageResponse(message="Investment updated successfully")


@router.delete("/{goal_id}/invest", response_model=MessageResponse)
async def reset_investment_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    await reset_investment(connection, user_id, goal_id)
    return MessageResponse(message="Investment deleted successfully")
