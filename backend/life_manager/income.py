from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_serializer

from .auth import MessageResponse, get_current_user_id
from .database import get_db_connection
from .services.income_service import get_monthly_income, set_income
from .utils import money

router = APIRouter(prefix="/income", tags=["income"])


class IncomeRequest(BaseModel):
    monthly_income: Decimal = Field(max_digits=12, decimal_places=2)


class IncomeResponse(BaseModel):
    monthly_income: Decimal

    @field_serializer("monthly_income")
    def serialize_amount(self, value: Decimal) -> float:
        return money(value)


@router.post("", response_model=MessageResponse)
async def set_income_endpoint(
    payload: IncomeRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    await set_income(connection, user_id, payload.monthly_income)
    return MessageResponse(message="Income saved successfully")


@router.get("", response_model=IncomeResponse)
async def get_income_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> IncomeResponse:
    return IncomeResponse(monthly_income=await get_monthly_income(connection, user_id))
