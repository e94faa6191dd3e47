"""
Tasks hang off goals. Every statement joins back to goals.user_id, so a
caller can only see or touch tasks under goals they own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from ..errors import NotFound, ValidationFailed

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

TASK_COLUMNS = "t.id, t.goal_id, t.task_name, t.status, t.created_at, t.updated_at"


def _clean(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationFailed(f"{field} is required")
    return cleaned


async def add_task(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
    task_name: str,
) -> dict[str, Any]:
    name = _clean(task_name, "task_name")

    # INSERT ... SELECT inserts nothing when the goal is missing or foreign.
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            INSERT INTO tasks (goal_id, task_name)
            SELECT g.id, %s
            FROM goals g
            WHERE g.id = %s
              AND g.user_id = %s
            RETURNING id, goal_id, task_name, status, created_at, updated_at
            """,
            (name, goal_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise NotFound("Goal not found")

    return row


async def list_tasks(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> list[dict[str, Any]]:
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT 1
            FROM goals
            WHERE id = %s
              AND user_id = %s
            """,
            (goal_id, user_id),
        )
        if await cursor.fetchone() is None:
            raise NotFound("Goal not found")

        await cursor.execute(
            f"""
            SELECT {TASK_COLUMNS}
            FROM tasks t
            WHERE t.goal_id = %s
            ORDER BY t.created_at ASC
            """,
            (goal_id,),
        )
        return await cursor.fetchall()


async def update_task(
    connection: AsyncConnection,
    user_id: UUID,
    task_id: UUID,
    task_name: str,
    status: str,
) -> dict[str, Any]:
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            UPDATE tasks t
            SET task_name = %s,
                status = %s,
                updated_at = NOW()
            FROM goals g
            WHERE t.id = %s
              AND t.goal_id = g.id
              AND g.user_id = %s
            RETURNING {TASK_COLUMNS}
            """,
            (_clean(task_name, "task_name"), _clean(status, "status"), task_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise NotFound("Task not found")

    return row


async def delete_task(
    connection: AsyncConnection,
    user_id: UUID,
    task_id: UUID,
) -> bool:
    """Idempotent delete; returns whether a row was removed."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            DELETE FROM tasks t
            USING goals g
            WHERE t.id = %s
              AND t.goal_id = g.id
              AND g.user_id = %s
            RETURNING t.id
            """,
            (task_id, user_id),
        )
        row = await cursor.fetchone()

    return row is not None
