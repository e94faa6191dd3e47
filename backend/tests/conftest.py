from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from psycopg.errors import UniqueViolation

from life_manager.auth import TokenSigner
from life_manager.config import Settings
from life_manager.database import get_db_connection
from life_manager.main import create_app

TEST_SECRET = "test-secret-key-for-life-manager-tests"

GOAL_SELECT = (
    "SELECT id, user_id, title, category, target_amount, target_date, "
    "investment_amount, created_at, updated_at FROM goals"
)


class FakeCursor:
    """Interprets the exact SQL emitted by the services against in-memory tables."""

    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self._rows: list[dict] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def execute(self, query, params=None):
        params = params or ()
        normalized = " ".join(query.split())
        self.connection.executed.append(normalized)
        self._rows = []
        db = self.connection

        # --- users ---
        if normalized.startswith("INSERT INTO users (name, email, password_hash)"):
            name, email, password, _rounds = params
            if any(user["email"].lower() == email.lower() for user in db.users.values()):
                raise UniqueViolation("duplicate key value violates unique constraint")
            user_id = uuid4()
            row = {
                "id": user_id,
                "name": name,
                "email": email,
                "password_hash": f"crypt:{password}",
                "created_at": db._next_timestamp(),
            }
            db.users[user_id] = row
            self._rows = [{key: row[key] for key in ("id", "name", "email", "created_at")}]
            return

        if normalized.startswith("SELECT id, name, email, password_hash = crypt(%s, password_hash) AS password_ok FROM users"):
            password, email = params
            for user in db.users.values():
                if user["email"].lower() == email.lower():
                    row = {key: user[key] for key in ("id", "name", "email")}
                    row["password_ok"] = user["password_hash"] == f"crypt:{password}"
                    self._rows = [row]
            return

        if normalized.startswith("SELECT crypt(%s, gen_salt('bf', %s::int))"):
            password, _rounds = params
            self._rows = [{"crypt": f"crypt:{password}"}]
            return

        # --- income ---
        if normalized.startswith("INSERT INTO income (user_id, monthly_income)"):
            user_id, amount = params
            row = {"user_id": user_id, "monthly_income": Decimal(str(amount)), "updated_at": db._next_timestamp()}
            db.income[user_id] = row
            self._rows = [row]
            return

        if normalized.startswith("SELECT monthly_income FROM income WHERE user_id = %s"):
            row = db.income.get(params[0])
            if row:
                self._rows = [{"monthly_income": row["monthly_income"]}]
            return

        # --- goals ---
        if normalized.startswith("INSERT INTO goals"):
            user_id, title, category, target_amount, target_date = params
            goal_id = uuid4()
            now = db._next_timestamp()
            row = {
                "id": goal_id,
                "user_id": user_id,
                "title": title,
                "category": category,
                "target_amount": Decimal(str(target_amount)),
                "target_date": target_date,
                "investment_amount": Decimal("0"),
                "created_at": now,
                "updated_at": now,
            }
            db.goals[goal_id] = row
            self._rows = [dict(row)]
            return

        if normalized.startswith(f"{GOAL_SELECT} WHERE id = %s AND user_id = %s"):
            row = db._owned_goal(*params)
            if row:
                self._rows = [dict(row)]
            return

        if normalized.startswith(f"{GOAL_SELECT} WHERE user_id = %s"):
            rows = [row for row in db.goals.values() if row["user_id"] == params[0]]
            rows.sort(key=lambda row: row["created_at"])
            self._rows = [dict(row) for row in rows]
            return

        if normalized.startswith("SELECT title, investment_amount FROM goals WHERE user_id = %s"):
            rows = [row for row in db.goals.values() if row["user_id"] == params[0]]
            rows.sort(key=lambda row: row["created_at"])
            self._rows = [{"title": row["title"], "investment_amount": row["investment_amount"]} for row in rows]
            return

        if normalized.startswith("SELECT 1 FROM goals WHERE id = %s AND user_id = %s"):
            if db._owned_goal(*params):
                self._rows = [{"?column?": 1}]
            return

        if normalized.startswith("UPDATE goals SET title = %s"):
            title, category, target_amount, target_date, goal_id, user_id = params
            row = db._owned_goal(goal_id, user_id)
            if row:
                row.update(
                    {
                        "title": title,
                        "category": category,
                        "target_amount": Decimal(str(target_amount)),
                        "target_date": target_date,
                        "updated_at": db._next_timestamp(),
                    }
                )
                self._rows = [dict(row)]
            return

        if normalized.startswith("UPDATE goals SET investment_amount = COALESCE(investment_amount, 0) + %s"):
            amount, goal_id, user_id = params
            row = db._owned_goal(goal_id, user_id)
            if row:
                row["investment_amount"] = (row["investment_amount"] or Decimal("0")) + Decimal(str(amount))
                row["updated_at"] = db._next_timestamp()
                self._rows = [dict(row)]
            return

        if normalized.startswith("UPDATE goals SET investment_amount = %s"):
            amount, goal_id, user_id = params
            row = db._owned_goal(goal_id, user_id)
            if row:
                row["investment_amount"] = Decimal(str(amount))
                row["updated_at"] = db._next_timestamp()
                self._rows = [dict(row)]
            return

        if normalized.startswith("UPDATE goals SET investment_amount = 0"):
            row = db._owned_goal(*params)
            if row:
                row["investment_amount"] = Decimal("0")
                row["updated_at"] = db._next_timestamp()
                self._rows = [dict(row)]
            return

        if normalized.startswith("DELETE FROM goals"):
            row = db._owned_goal(*params)
            if row:
                del db.goals[row["id"]]
                for task_id in [tid for tid, task in db.tasks.items() if task["goal_id"] == row["id"]]:
                    del db.tasks[task_id]
                self._rows = [{"id": row["id"]}]
            return

        # --- tasks ---
        if normalized.startswith("INSERT INTO tasks (goal_id, task_name) SELECT g.id, %s FROM goals g"):
            task_name, goal_id, user_id = params
            if db._owned_goal(goal_id, user_id):
                task_id = uuid4()
                now = db._next_timestamp()
                row = {
                    "id": task_id,
                    "goal_id": goal_id,
                    "task_name": task_name,
                    "status": "pending",
                    "created_at": now,
                    "updated_at": now,
                }
                db.tasks[task_id] = row
                self._rows = [dict(row)]
            return

        if normalized.startswith("SELECT t.id, t.goal_id, t.task_name, t.status, t.created_at, t.updated_at FROM tasks t"):
            rows = [row for row in db.tasks.values() if row["goal_id"] == params[0]]
            rows.sort(key=lambda row: row["created_at"])
            self._rows = [dict(row) for row in rows]
            return

        if normalized.startswith("UPDATE tasks t SET task_name = %s"):
            task_name, status, task_id, user_id = params
            row = db._owned_task(task_id, user_id)
            if row:
                row.update({"task_name": task_name, "status": status, "updated_at": db._next_timestamp()})
                self._rows = [dict(row)]
            return

        if normalized.startswith("DELETE FROM tasks t USING goals g"):
            row = db._owned_task(*params)
            if row:
                del db.tasks[row["id"]]
                self._rows = [{"id": row["id"]}]
            return

        raise AssertionError(f"Unhandled query: {normalized}")

    async def fetchone(self):
        if not self._rows:
            return None
        return self._rows[0]

    async def fetchall(self):
        return list(self._rows)


class FakeConnection:
    def __init__(self):
        self.users: dict[UUID, dict] = {}
        self.income: dict[UUID, dict] = {}
        self.goals: dict[UUID, dict] = {}
        self.tasks: dict[UUID, dict] = {}
        self.executed: list[str] = []
        self._tick = 0

    def _next_timestamp(self):
        self._tick += 1
        return datetime(2026, 1, 1, 12, self._tick // 60, self._tick % 60)

    def _owned_goal(self, goal_id, user_id):
        row = self.goals.get(goal_id)
        if row and row["user_id"] == user_id:
            return row
        return None

    def _owned_task(self, task_id, user_id):
        row = self.tasks.get(task_id)
        if row and self._owned_goal(row["goal_id"], user_id):
            return row
        return None

    def cursor(self):
        return FakeCursor(self)


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret_key=TEST_SECRET, database_url="")


@pytest.fixture
def signer(settings) -> TokenSigner:
    return TokenSigner.from_settings(settings)


@pytest.fixture
def fake_db() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def app(settings, fake_db):
    app = create_app(settings)

    async def override_db():
        yield fake_db

    app.dependency_overrides[get_db_connection] = override_db
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(signer):
    def _headers(user_id: UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {signer.issue(user_id)}"}

    return _headers
