"""Service layer for goal CRUD and the three investment mutators."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ..errors import InvalidAmount, NotFound, ValidationFailed
from ..utils import quantize_amount

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

logger = logging.getLogger(__name__)

GOAL_COLUMNS = (
    "id, user_id, title, category, target_amount, target_date, "
    "investment_amount, created_at, updated_at"
)


def _normalize_goal_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Presence checks only; amounts are stored at cent precision."""
    title = str(data.get("title") or "").strip()
    if not title:
        raise ValidationFailed("title is required")

    category = str(data.get("category") or "").strip()
    if not category:
        raise ValidationFailed("category is required")

    if data.get("target_amount") is None:
        raise ValidationFailed("target_amount is required")

    target_date = data.get("target_date")
    if not isinstance(target_date, date):
        raise ValidationFailed("target_date is required")

    return {
        "title": title,
        "category": category,
        "target_amount": quantize_amount(data["target_amount"]),
        "target_date": target_date,
    }


def _with_money(row: dict[str, Any]) -> dict[str, Any]:
    return {
        **row,
        "target_amount": quantize_amount(row["target_amount"]),
        "investment_amount": quantize_amount(row.get("investment_amount")),
    }


async def _update_scoped_goal(
    connection: AsyncConnection,
    sql: str,
    params: tuple[Any, ...],
    goal_id: UUID,
) -> dict[str, Any]:
    async with connection.cursor() as cursor:
        await cursor.execute(sql, params)
        row = await cursor.fetchone()

    if row is None:
        logger.info("Scoped goal update matched nothing: goal %s", goal_id)
        raise NotFound("Goal not found")

    return _with_money(row)


async def create_goal(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Create one goal; investment_amount always starts at 0."""
    normalized = _normalize_goal_fields(data)

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            INSERT INTO goals (user_id, title, category, target_amount, target_date, investment_amount)
            VALUES (%s, %s, %s, %s, %s, 0)
            RETURNING {GOAL_COLUMNS}
            """,
            (
                user_id,
                normalized["title"],
                normalized["category"],
                normalized["target_amount"],
                normalized["target_date"],
            ),
        )
        row = await cursor.fetchone()

    return _with_money(row)


async def list_goals(connection: AsyncConnection, user_id: UUID) -> list[dict[str, Any]]:
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {GOAL_COLUMNS}
            FROM goals
            WHERE user_id = %s
            ORDER BY created_at ASC
            """,
            (user_id,),
        )
        rows = await cursor.fetchall()

    return [_with_money(row) for row in rows]


async def get_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> dict[str, Any]:
    """Fetch one user-scoped goal."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {GOAL_COLUMNS}
            FROM goals
            WHERE id = %s
              AND user_id = %s
            """,
            (goal_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise NotFound("Goal not found")

    return _with_money(row)


async def update_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Replace title/category/target/date on a goal the user owns."""
    normalized = _normalize_goal_fields(data)

    return await _update_scoped_goal(
        connection,
        f"""
        UPDATE goals
        SET title = %s,
            category = %s,
            target_amount = %s,
            target_date = %s,
            updated_at = NOW()
        WHERE id = %s
          AND user_id = %s
        RETURNING {GOAL_COLUMNS}
        """,
        (
            normalized["title"],
            normalized["category"],
            normalized["target_amount"],
            normalized["target_date"],
            goal_id,
            user_id,
        ),
        goal_id,
    )


async def delete_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> bool:
    """
    Hard-delete one goal scoped to the user.

    Idempotent: deleting a goal that is already gone (or never belonged to
    the user) is not an error. Returns whether a row was removed.
    """
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            DELETE FROM goals
            WHERE id = %s
              AND user_id = %s
            RETURNING id
            """,
            (goal_id, user_id),
        )
        row = await cursor.fetchone()

    return row is not None


async def add_investment(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
    amount: Decimal,
) -> dict[str, Any]:
    """
    Increment investment_amount by a positive amount.

    The increment happens inside one UPDATE so concurrent additions to the
    same goal cannot overwrite each other.
    """
    if amount is None or amount <= 0:
        raise InvalidAmount("Invalid investment amount")

    return await _update_scoped_goal(
        connection,
        f"""
        UPDATE goals
        SET investment_amount = COALESCE(investment_amount, 0) + %s,
            updated_at = NOW()
        WHERE id = %s
          AND user_id = %s
        RETURNING {GOAL_COLUMNS}
        """,
        (quantize_amount(amount), goal_id, user_id),
        goal_id,
    )


async def edit_investment(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
    amount: Decimal,
) -> dict[str, Any]:
    """Replace investment_amount absolutely; zero is allowed."""
    if amount is None or amount < 0:
        raise InvalidAmount("Invalid amount")

    return await _update_scoped_goal(
        connection,
        f"""
        UPDATE goals
        SET investment_amount = %s,
            updated_at = NOW()
        WHERE id = %s
          AND user_id = %s
        RETURNING {GOAL_COLUMNS}
        """,
        (quantize_amount(amount), goal_id, user_id),
        goal_id,
    )


async def reset_investment(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> dict[str, Any]:
    return await _update_scoped_goal(
        connection,
        f"""
        UPDATE goals
        SET investment_amount = 0,
            updated_at = NOW()
        WHERE id = %s
          AND user_id = %s
        RETURNING {GOAL_COLUMNS}
        """,
        (goal_id, user_id),
        goal_id,
    )
