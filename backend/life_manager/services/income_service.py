from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ..errors import InvalidAmount
from ..utils import quantize_amount

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any


async def set_income(
    connection: AsyncConnection,
    user_id: UUID,
    monthly_income: Decimal,
) -> dict[str, Any]:
    """
    Insert or replace the user's single income row.

    ON CONFLICT keeps the one-row-per-user invariant without a separate
    read, so racing calls for the same user cannot create a second row.
    """
    if monthly_income is None or monthly_income <= 0:
        raise InvalidAmount("Invalid income")

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            INSERT INTO income (user_id, monthly_income)
            VALUES (%s, %s)
            ON CONFLICT (user_id)
            DO UPDATE SET monthly_income = EXCLUDED.monthly_income,
                          updated_at = NOW()
            RETURNING user_id, monthly_income, updated_at
            """,
            (user_id, quantize_amount(monthly_income)),
        )
        row = await cursor.fetchone()

    return {**row, "monthly_income": quantize_amount(row["monthly_income"])}


async def get_monthly_income(connection: AsyncConnection, user_id: UUID) -> Decimal:
    """The user's monthly income, or 0 when none was recorded."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT monthly_income
            FROM income
            WHERE user_id = %s
            """,
            (user_id,),
        )
        row = await cursor.fetchone()

    if row is None:
        return Decimal("0.00")
    return quantize_amount(row["monthly_income"])
