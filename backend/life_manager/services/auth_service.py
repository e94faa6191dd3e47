"""Credential store access: registration and password verification."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from psycopg.errors import UniqueViolation

from ..errors import DuplicateUser, InvalidCredentials, ValidationFailed

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if not normalized or "@" not in normalized:
        raise ValidationFailed("Invalid email")
    return normalized


async def register_user(
    connection: AsyncConnection,
    *,
    name: str,
    email: str,
    password: str,
    rounds: int,
) -> dict[str, Any]:
    """
    Insert one user with a salted bcrypt hash computed by pgcrypto.

    The unique index on LOWER(email) makes the duplicate check and the insert
    one statement, so two concurrent signups cannot both succeed.
    """
    clean_name = name.strip()
    if not clean_name:
        raise ValidationFailed("Name is required")
    if not password:
        raise ValidationFailed("Password is required")

    async with connection.cursor() as cursor:
        try:
            await cursor.execute(
                """
                INSERT INTO users (name, email, password_hash)
                VALUES (%s, %s, crypt(%s, gen_salt('bf', %s::int)))
                RETURNING id, name, email, created_at
                """,
                (clean_name, normalize_email(email), password, rounds),
            )
        except UniqueViolation as exc:
            raise DuplicateUser() from exc

        row = await cursor.fetchone()

    logger.info("Registered user %s", row["id"])
    return row


async def _burn_hash(connection: AsyncConnection, password: str, rounds: int) -> None:
    """Run one throwaway bcrypt hash for logins with no matching user."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            "SELECT crypt(%s, gen_salt('bf', %s::int))",
            (password, rounds),
        )
        await cursor.fetchone()


async def verify_credentials(
    connection: AsyncConnection,
    *,
    email: str,
    password: str,
    rounds: int,
) -> dict[str, Any]:
    """
    Return the user row for a matching email/password pair.

    Every path runs exactly one bcrypt computation, so unknown email and
    wrong password match in both message and timing.
    """
    try:
        normalized = normalize_email(email)
    except ValidationFailed:
        normalized = None

    row = None
    if normalized is not None:
        async with connection.cursor() as cursor:
            await cursor.execute(
                """
                SELECT id, name, email,
                       password_hash = crypt(%s, password_hash) AS password_ok
                FROM users
                WHERE LOWER(email) = LOWER(%s)
                """,
                (password, normalized),
            )
            row = await cursor.fetchone()

    if row is None:
        await _burn_hash(connection, password, rounds)

    if row is None or not row["password_ok"]:
        logger.info("Rejected login attempt")
        raise InvalidCredentials()

    return {key: row[key] for key in ("id", "name", "email")}
