"""Apply schema.sql and seed a demo user with income, goals and tasks via the API."""

import os
import sys
from pathlib import Path

import httpx
import psycopg

DATABASE_URL = os.environ.get("DATABASE_URL", "")
API_BASE = os.environ.get("API_BASE", "http://localhost:3000")
SCHEMA_PATH = Path(__file__).with_name("schema.sql")

DEMO_USER = {"name": "Demo User", "email": "demo@lifemanager.local", "password": "demo-password"}
MONTHLY_INCOME = "4200.00"

SAMPLE_GOALS = [
    {
        "title": "Emergency Fund",
        "category": "savings",
        "target_amount": "6000.00",
        "target_date": "2027-06-30",
        "investments": ["500.00", "250.00"],
        "tasks": ["Open high-yield account", "Automate monthly transfer"],
    },
    {
        "title": "Car",
        "category": "vehicle",
        "target_amount": "10000.00",
        "target_date": "2027-01-01",
        "investments": ["200.00"],
        "tasks": ["Compare financing offers"],
    },
    {
        "title": "Japan Trip",
        "category": "travel",
        "target_amount": "3500.00",
        "target_date": "2027-04-01",
        "investments": [],
        "tasks": ["Book flights", "Renew passport"],
    },
]


def apply_schema() -> None:
    print("Applying schema...")
    with psycopg.connect(DATABASE_URL, autocommit=True) as conn:
        conn.execute(SCHEMA_PATH.read_text())


def main():
    if not DATABASE_URL:
        print("ERROR: DATABASE_URL env var is not set")
        sys.exit(1)

    apply_schema()

    with httpx.Client(base_url=API_BASE) as client:
        resp = client.post("/signup", json=DEMO_USER)
        if resp.status_code == 200:
            print("  Created demo user")
        else:
            print(f"  Signup skipped ({resp.status_code}): {resp.json().get('message')}")

        resp = client.post("/login", json={"email": DEMO_USER["email"], "password": DEMO_USER["password"]})
        resp.raise_for_status()
        headers = {"Authorization": f"Bearer {resp.json()['token']}"}
        print("  Logged in")

        client.post("/income", json={"monthly_income": MONTHLY_INCOME}, headers=headers).raise_for_status()

        errors = 0
        for goal in SAMPLE_GOALS:
            resp = client.post(
                "/goals",
                json={key: goal[key] for key in ("title", "category", "target_amount", "target_date")},
                headers=headers,
            )
            if resp.status_code != 200:
                errors += 1
                print(f"  FAIL ({resp.status_code}): {resp.text}")
                continue

            goal_id = resp.json()["goal_id"]
            for amount in goal["investments"]:
                client.put(f"/goals/{goal_id}/invest", json={"investment_amount": amount}, headers=headers)
            for task_name in goal["tasks"]:
                client.post("/tasks", json={"goal_id": goal_id, "task_name": task_name}, headers=headers)
            print(f"  OK: {goal['title']:15s} target ${goal['target_amount']:>9s}")

        summary = client.get("/summary", headers=headers).json()

    print(
        f"\nDone! {len(SAMPLE_GOALS) - errors} goals, {errors} errors. "
        f"income={summary['income']} invested={summary['totalInvestment']} savings={summary['savings']}"
    )


if __name__ == "__main__":
    main()
