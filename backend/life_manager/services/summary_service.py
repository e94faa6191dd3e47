"""Income vs. invested vs. savings for one user."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ..utils import quantize_amount
from .income_service import get_monthly_income

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any


def compute_summary(income: Decimal, goals: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Pure aggregation step.

    - NULL investment amounts count as 0
    - savings = income - total invested, not clamped (can go negative)
    """
    goal_rows = [
        {"title": goal["title"], "investment_amount": quantize_amount(goal.get("investment_amount"))}
        for goal in goals
    ]
    total_investment = quantize_amount(sum((g["investment_amount"] for g in goal_rows), Decimal("0")))
    income = quantize_amount(income)

    return {
        "income": income,
        "total_investment": total_investment,
        "savings": quantize_amount(income - total_investment),
        "goals": goal_rows,
    }


async def get_summary(connection: AsyncConnection, user_id: UUID) -> dict[str, Any]:
    income = await get_monthly_income(connection, user_id)

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT title, investment_amount
            FROM goals
            WHERE user_id = %s
            ORDER BY created_at ASC
            """,
            (user_id,),
        )
        goals = await cursor.fetchall()

    return compute_summary(income, goals)
