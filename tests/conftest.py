"""Shared fixtures: an in-memory MongoDB and a small group-sharing setup."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ROLE_SYNC_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from database import CATEGORIES, TRANSACTIONS, USER_GROUPS, USERS, get_db


@pytest.fixture
def db():
    return AsyncMongoMockClient()["budget_test"]


@pytest.fixture
async def sharing_db(db):
    """Users A, B, C share group g1; C is also in g2 with E; D has no groups."""
    await db[USERS].insert_many([
        {"_id": "A", "email": "a@example.com", "username": "alice", "role": "user", "group_ids": ["g1"]},
        {"_id": "B", "email": "b@example.com", "username": "bob", "role": "user", "group_ids": ["g1"]},
        {"_id": "C", "email": "c@example.com", "username": "carol", "role": "user", "group_ids": ["g1", "g2"]},
        {"_id": "D", "email": "d@example.com", "username": "dave", "role": "user"},
        {"_id": "E", "email": "e@example.com", "username": "erin", "role": "admin", "group_ids": ["g2"]},
    ])
    await db[USER_GROUPS].insert_many([
        {"_id": "g1", "name": "Home", "owner_id": "A", "member_ids": ["A", "B", "C"]},
        {"_id": "g2", "name": "Work", "owner_id": "C", "member_ids": ["C", "E"]},
    ])
    return db


@pytest.fixture
async def seeded_db(sharing_db):
    """Categories and transactions owned by the sharing users."""
    db = sharing_db
    await db[CATEGORIES].insert_many([
        {"name": "Food", "type": "expense", "user_id": "A"},
        {"name": "rent", "type": "expense", "user_id": "A"},
        {"name": "food", "type": "expense", "user_id": "B"},
        {"name": "Travel", "type": "expense", "user_id": "B"},
        {"name": "Salary", "type": "income", "user_id": "C"},
        {"name": "Hidden", "type": "expense", "user_id": "D"},
    ])
    await db[TRANSACTIONS].insert_many([
        {"user_id": "A", "amount": -20.0, "type": "expense", "description": "Lunch",
         "date": "2024-03-02T12:00:00.000Z", "status": "paid", "is_recurring": False},
        {"user_id": "B", "amount": -55.5, "type": "expense", "description": "Groceries",
         "date": "2024-03-10T09:30:00.000Z", "status": "paid", "is_recurring": False},
        {"user_id": "C", "amount": 3000.0, "type": "income", "description": "Salary",
         "date": "2024-02-28T08:00:00.000Z", "status": "paid", "is_recurring": False},
        {"user_id": "D", "amount": -10.0, "type": "expense", "description": "Secret",
         "date": "2024-03-05T10:00:00.000Z", "status": "paid", "is_recurring": False},
        {"user_id": "E", "amount": -99.0, "type": "expense", "description": "Office",
         "date": "2024-03-06T10:00:00.000Z", "status": "paid", "is_recurring": False},
    ])
    return db


@pytest.fixture
async def client(db):
    from app import app

    async def override_get_db():
        return db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(uid: str, email: str, role: str = "user") -> dict:
    from utils.auth import create_access_token

    token = create_access_token({"sub": email, "uid": uid, "role": role})
    return {"Authorization": f"Bearer {token}"}
