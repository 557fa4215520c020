"""Tests for ShoppingListService."""

from services.shopping_lists import ShoppingListService, new_shopping_list, new_shopping_list_item


async def _list(service, name, user_id, items=(), **extra):
    return await service.create({"name": name, "user_id": user_id, "items": list(items), **extra})


class TestCreate:
    async def test_defaults(self, db):
        service = ShoppingListService(db)
        created = await _list(service, "Weekly", "A")

        assert created["status"] == "active"
        assert created["items"] == []
        assert created["created_at"] == created["updated_at"]
        assert "group_id" not in created

    async def test_items_get_ids(self, db):
        service = ShoppingListService(db)
        created = await _list(service, "Weekly", "A", [
            {"name": "Milk", "completed": False},
            {"id": "keep-me", "name": "Bread", "completed": True},
        ])

        milk, bread = created["items"]
        assert milk["id"]
        assert bread["id"] == "keep-me"

    async def test_create_with_group(self, db):
        service = ShoppingListService(db)
        created = await service.create_with_group({"name": "Party", "user_id": "A"}, "g1")
        assert created["group_id"] == "g1"

    def test_builders(self):
        shopping_list = new_shopping_list("Weekly", "A")
        item = new_shopping_list_item("Eggs", 12, "pcs")

        assert shopping_list["status"] == "active"
        assert shopping_list["user_id"] == "A"
        assert item["completed"] is False
        assert item["quantity"] == 12
        assert "unit" not in new_shopping_list_item("Salt")


class TestComplete:
    async def test_complete_records_amount_and_link(self, db):
        service = ShoppingListService(db)
        created = await _list(service, "Weekly", "A")

        completed = await service.complete_shopping_list(created["_id"], 42.5, "cat1", "tx1")

        assert completed["status"] == "completed"
        assert completed["total_amount"] == 42.5
        assert completed["category_id"] == "cat1"
        assert completed["linked_transaction_id"] == "tx1"

    async def test_complete_missing(self, db):
        service = ShoppingListService(db)
        assert await service.complete_shopping_list("65f000000000000000000000", 1, "cat1") is None


class TestSharing:
    async def test_lists_shared_through_group(self, sharing_db):
        service = ShoppingListService(sharing_db)
        await _list(service, "Bob private", "B")
        await _list(service, "Bob for home", "B", group_id="g1")
        await _list(service, "Carol for work", "C", group_id="g2")
        await _list(service, "Alice for home", "A", group_id="g1")

        shared = await service.get_shared_shopping_lists("A")

        assert [sl["name"] for sl in shared] == ["Bob for home"]

    async def test_no_groups(self, sharing_db):
        service = ShoppingListService(sharing_db)
        await _list(service, "Bob for home", "B", group_id="g1")
        assert await service.get_shared_shopping_lists("D") == []

    async def test_active_and_completed(self, sharing_db):
        service = ShoppingListService(sharing_db)
        own = await _list(service, "Mine", "A")
        await _list(service, "Bob for home", "B", group_id="g1")
        await service.complete_shopping_list(own["_id"], 10, "cat1")

        active = await service.get_all_active_shopping_lists("A")
        completed = await service.get_all_completed_shopping_lists("A")

        assert [sl["name"] for sl in active] == ["Bob for home"]
        assert [sl["name"] for sl in completed] == ["Mine"]
        assert len(await service.get_all_user_shopping_lists("A")) == 2


class TestDuplicate:
    async def test_copy_is_fresh(self, db):
        service = ShoppingListService(db)
        original = await _list(service, "Weekly", "A", [{"name": "Milk", "completed": True}])
        original = await service.complete_shopping_list(original["_id"], 5, "cat1", "tx1")

        copy = await service.duplicate_shopping_list(original, "B")

        assert copy["_id"] != original["_id"]
        assert copy["name"] == "Weekly (copy)"
        assert copy["status"] == "active"
        assert copy["user_id"] == "B"
        assert "total_amount" not in copy
        assert "linked_transaction_id" not in copy
        assert copy["items"][0]["completed"] is False
        assert copy["items"][0]["id"] != original["items"][0]["id"]


class TestSuggestions:
    async def test_ranked_by_frequency(self, db):
        service = ShoppingListService(db)
        await _list(service, "One", "A", [{"name": "Milk", "quantity": 1}, {"name": "Bread"}])
        await _list(service, "Two", "A", [{"name": "milk", "quantity": 2, "unit": "l"}])
        await _list(service, "Three", "A", [{"name": "MILK"}, {"name": "Butter"}])

        suggestions = await service.get_item_suggestions("A")

        assert suggestions[0]["name"].lower() == "milk"
        assert suggestions[0]["frequency"] == 3
        assert suggestions[0]["quantity"] == 2
        assert suggestions[0]["unit"] == "l"
        assert {s["name"] for s in suggestions[1:]} == {"Bread", "Butter"}

    async def test_query_and_limit(self, db):
        service = ShoppingListService(db)
        await _list(service, "One", "A", [{"name": n} for n in ("Apple", "Apricot", "Banana")])

        assert [s["name"] for s in await service.get_item_suggestions("A", "ap")] == ["Apple", "Apricot"]
        assert len(await service.get_item_suggestions("A", limit=1)) == 1
