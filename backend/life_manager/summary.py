from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .auth import get_current_user_id
from .database import get_db_connection
from .services.summary_service import get_summary
from .utils import money

router = APIRouter(tags=["summary"])


class SummaryGoal(BaseModel):
    title: str
    investment_amount: Decimal

    @field_serializer("investment_amount")
    def serialize_amount(self, value: Decimal) -> float:
        return money(value)


class SummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    income: Decimal
    total_investment: Decimal = Field(alias="totalInvestment")
    savings: Decimal
    goals: list[SummaryGoal]

    @field_serializer("income", "total_investment", "savings")
    def serialize_decimal(self, value: Decimal) -> float:
        return money(value)


@router.get("/summary", response_model=SummaryResponse)
async def summary_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> SummaryResponse:
    """
    Example response:
    {
      "income": 500.0,
      "totalInvestment": 200.0,
      "savings": 300.0,
      "goals": [{"title": "Car", "investment_amount": 200.0}]
    }
    """
    payload = await get_summary(connection, user_id)
    return SummaryResponse.model_validate(payload)
