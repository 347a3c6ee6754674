# tests/conftest.py
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("REMINDER_SCHEDULER_ENABLED", "false")

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app import create_app
from auth.security import hash_password, token_for_user
from storage.database import Database

THIS_YEAR = date.today().year

ENGINEERS = [("Alice", "#ef4444"), ("Bob", "#22c55e"), ("Carol", "#3b82f6")]
SERVICES = [
    ("SOC Alerts", "primary"),
    ("Threat Intel", "primary"),
    ("Vulnerabilities", "secondary"),
]

# (engineer, service, month, status, how many)
TASKS = [
    ("Alice", "SOC Alerts", "January", "completed", 3),
    ("Bob", "SOC Alerts", "January", "pending", 2),
    ("Bob", "Threat Intel", "February", "in-progress", 1),
    ("Carol", "Vulnerabilities", "March", "completed", 4),
]


def add_tasks(db, engineer, service, month, year, status="completed", count=1, week=1, priority="medium"):
    for _ in range(count):
        db.execute(
            "INSERT INTO tasks (service, engineer, week, month, year, status, priority) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (service, engineer, week, month, year, status, priority),
        )


def add_user(db, email, name, role, engineer_name=None, password="secret123"):
    user_id = db.execute(
        "INSERT INTO users (email, name, password_hash, role, engineer_name) VALUES (?, ?, ?, ?, ?)",
        (email, name, hash_password(password), role, engineer_name),
    )
    return db.query_one("SELECT * FROM users WHERE id = ?", (user_id,))


def seed(db, year):
    for name, color in ENGINEERS:
        db.execute("INSERT INTO engineers (name, color) VALUES (?, ?)", (name, color))
    for name, category in SERVICES:
        db.execute("INSERT INTO services (name, category) VALUES (?, ?)", (name, category))
    for engineer, service, month, status, count in TASKS:
        add_tasks(db, engineer, service, month, year, status=status, count=count)
    add_tasks(db, "Alice", "Threat Intel", "December", year - 1, count=2)


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def seeded_db(db):
    """Ten tasks in 2025 plus two in 2024"""
    seed(db, 2025)
    return db


@pytest.fixture
def api_db(db):
    """Same data set, dated in the current year for the HTTP API"""
    seed(db, THIS_YEAR)
    return db


@pytest.fixture
def users(api_db):
    return {
        "admin": add_user(api_db, "admin@example.com", "Admin", "admin"),
        "director": add_user(api_db, "director@example.com", "Director", "director"),
        "alice": add_user(api_db, "alice@example.com", "Alice A.", "engineer", engineer_name="Alice"),
        "bob": add_user(api_db, "bob@example.com", "Bob B.", "engineer", engineer_name="Bob"),
    }


@pytest.fixture
def client(api_db):
    return TestClient(create_app(api_db, start_scheduler=False))


@pytest.fixture
def auth(users):
    """auth("admin") -> Authorization header for that seeded user"""

    def headers(who):
        return {"Authorization": "Bearer {0}".format(token_for_user(users[who]))}

    return headers
