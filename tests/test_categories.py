"""Tests for CategoryService."""

import pytest
from pymongo.errors import PyMongoError

from services.categories import CategoryService, dedupe_by_name
from utils.errors import NotAuthenticatedError


class FailingResolver:
    async def get_shared_member_ids(self, user_id):
        raise PyMongoError("connection lost")


class TestCrud:
    async def test_create_sets_timestamps(self, db):
        service = CategoryService(db)
        created = await service.create({"name": "Food", "type": "expense", "user_id": "A"})

        assert created["_id"]
        assert created["name"] == "Food"
        assert created["created_at"] == created["updated_at"]
        assert created["created_at"].endswith("Z")

    async def test_global_category_keeps_null_owner(self, db):
        service = CategoryService(db)
        created = await service.create({"name": "Misc", "type": "expense"})

        assert "user_id" in created
        assert created["user_id"] is None
        assert [c["name"] for c in await service.get_global_categories()] == ["Misc"]

    async def test_get_missing_returns_none(self, db):
        service = CategoryService(db)
        assert await service.get("65f000000000000000000000") is None
        assert await service.get("not-an-object-id") is None

    async def test_update_only_touches_name_and_type(self, db):
        service = CategoryService(db)
        created = await service.create({"name": "Food", "type": "expense", "user_id": "A"})

        updated = await service.update(created["_id"], {"name": "Groceries", "user_id": "B"})

        assert updated["name"] == "Groceries"
        assert updated["type"] == "expense"
        assert updated["user_id"] == "A"

    async def test_update_missing_returns_none(self, db):
        service = CategoryService(db)
        assert await service.update("65f000000000000000000000", {"name": "X"}) is None

    async def test_delete_is_hard(self, db):
        service = CategoryService(db)
        created = await service.create({"name": "Food", "type": "expense", "user_id": "A"})

        assert await service.delete(created["_id"]) is True
        assert await service.get(created["_id"]) is None
        assert await service.delete(created["_id"]) is False

    async def test_add_category_requires_user(self, db):
        service = CategoryService(db)
        with pytest.raises(NotAuthenticatedError):
            await service.add_category({"name": "Food", "type": "expense"}, None)

    async def test_add_category_assigns_owner(self, db):
        service = CategoryService(db)
        created = await service.add_category({"name": "Food", "type": "expense"}, "A")
        assert created["user_id"] == "A"


class TestListing:
    async def test_user_categories_sorted_by_name(self, seeded_db):
        service = CategoryService(seeded_db)
        names = [c["name"] for c in await service.get_user_categories("A")]
        assert names == ["Food", "rent"]

    async def test_all_categories(self, seeded_db):
        service = CategoryService(seeded_db)
        assert len(await service.get_all_categories()) == 6

    async def test_shared_categories(self, seeded_db):
        service = CategoryService(seeded_db)
        shared = await service.get_shared_categories("A")
        assert sorted(c["user_id"] for c in shared) == ["B", "B", "C"]

    async def test_no_groups_no_shared(self, seeded_db):
        service = CategoryService(seeded_db)
        assert await service.get_shared_categories("D") == []

    async def test_combined_deduplicates_case_insensitively(self, seeded_db):
        service = CategoryService(seeded_db)
        categories = await service.get_all_user_categories("A")

        assert [c["name"] for c in categories] == ["Food", "rent", "Salary", "Travel"]
        food = next(c for c in categories if c["name"].lower() == "food")
        assert food["user_id"] == "A"

    async def test_combined_for_user_without_groups(self, seeded_db):
        service = CategoryService(seeded_db)
        assert [c["name"] for c in await service.get_all_user_categories("D")] == ["Hidden"]

    async def test_backend_failure_falls_back_to_empty(self, seeded_db):
        service = CategoryService(seeded_db, membership=FailingResolver())
        assert await service.get_shared_categories("A") == []
        assert [c["name"] for c in await service.get_all_user_categories("A")] == ["Food", "rent"]


class TestDedupeByName:
    def test_first_occurrence_wins(self):
        categories = [
            {"name": "Food", "user_id": "A"},
            {"name": "FOOD", "user_id": "B"},
            {"name": "Rent", "user_id": "B"},
            {"name": "rent", "user_id": "C"},
        ]
        assert dedupe_by_name(categories) == [
            {"name": "Food", "user_id": "A"},
            {"name": "Rent", "user_id": "B"},
        ]
