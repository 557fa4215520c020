import logging
import uuid
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from database import SHOPPING_LISTS
from services.base import DocumentService
from services.group_membership import GroupMembershipResolver
from utils.dates import now_iso

logger = logging.getLogger(__name__)

BY_UPDATED_DESC = [("updated_at", DESCENDING)]


def new_shopping_list_item(name: str, quantity: Optional[float] = None,
                           unit: Optional[str] = None) -> dict:
    item = {"id": str(uuid.uuid4()), "name": name, "completed": False}
    if quantity is not None:
        item["quantity"] = quantity
    if unit is not None:
        item["unit"] = unit
    return item


def new_shopping_list(name: str, user_id: str) -> dict:
    now = now_iso()
    return {
        "name": name,
        "items": [],
        "created_at": now,
        "updated_at": now,
        "status": "active",
        "user_id": user_id,
    }


def with_item_ids(items: List[dict]) -> List[dict]:
    """Give every item without an id a fresh one"""
    return [item if item.get("id") else {**item, "id": str(uuid.uuid4())} for item in items]


class ShoppingListService(DocumentService):
    collection_name = SHOPPING_LISTS

    def __init__(self, db, membership: Optional[GroupMembershipResolver] = None):
        super().__init__(db)
        self.membership = membership or GroupMembershipResolver(db)

    async def get(self, list_id: str) -> Optional[dict]:
        return await self.get_by_id(list_id)

    async def create(self, shopping_list: dict) -> dict:
        new_list = {**new_shopping_list(shopping_list["name"], shopping_list["user_id"]),
                    **shopping_list}
        new_list["items"] = with_item_ids(new_list.get("items") or [])
        return await super().create(new_list)

    async def create_with_group(self, shopping_list: dict, group_id: Optional[str] = None) -> dict:
        if group_id:
            shopping_list = {**shopping_list, "group_id": group_id}
        return await self.create(shopping_list)

    async def update(self, list_id: str, updates: dict) -> Optional[dict]:
        changes = {**updates, "updated_at": now_iso()}
        if changes.get("items") is not None:
            changes["items"] = with_item_ids(changes["items"])
        return await super().update(list_id, changes)

    async def get_user_shopping_lists(self, user_id: str) -> List[dict]:
        return await self.query({"user_id": user_id}, BY_UPDATED_DESC)

    async def get_all_shopping_lists(self) -> List[dict]:
        return await self.query({}, BY_UPDATED_DESC)

    async def get_active_shopping_lists(self) -> List[dict]:
        return await self.query({"status": "active"}, BY_UPDATED_DESC)

    async def get_completed_shopping_lists(self) -> List[dict]:
        return await self.query({"status": "completed"}, BY_UPDATED_DESC)

    async def complete_shopping_list(self, list_id: str, total_amount: float, category_id: str,
                                     linked_transaction_id: Optional[str] = None) -> Optional[dict]:
        # Single-document update; the transaction link is whatever the caller passes
        return await self.update(list_id, {
            "status": "completed",
            "total_amount": total_amount,
            "category_id": category_id,
            "linked_transaction_id": linked_transaction_id,
        })

    async def get_shared_shopping_lists(self, user_id: str) -> List[dict]:
        """Lists other users explicitly shared with one of the user's groups"""
        try:
            group_ids = await self.membership.get_group_ids(user_id)
            if not group_ids:
                return []
            return await self.query(
                {"group_id": {"$in": group_ids}, "user_id": {"$ne": user_id}},
                BY_UPDATED_DESC,
            )
        except PyMongoError:
            logger.exception("Error fetching shared shopping lists for user %s", user_id)
            return []

    async def get_all_user_shopping_lists(self, user_id: str) -> List[dict]:
        try:
            own = await self.get_user_shopping_lists(user_id)
        except PyMongoError:
            logger.exception("Error fetching shopping lists for user %s", user_id)
            return []
        shared = await self.get_shared_shopping_lists(user_id)

        lists = own + shared
        lists.sort(key=lambda sl: sl.get("updated_at") or "", reverse=True)
        return lists

    async def get_all_active_shopping_lists(self, user_id: str) -> List[dict]:
        lists = await self.get_all_user_shopping_lists(user_id)
        return [sl for sl in lists if sl.get("status") == "active"]

    async def get_all_completed_shopping_lists(self, user_id: str) -> List[dict]:
        lists = await self.get_all_user_shopping_lists(user_id)
        return [sl for sl in lists if sl.get("status") == "completed"]

    async def duplicate_shopping_list(self, shopping_list: dict, user_id: str) -> dict:
        now = now_iso()
        copy = {
            k: v for k, v in shopping_list.items()
            if k not in ("_id", "total_amount", "linked_transaction_id")
        }
        copy.update({
            "name": f"{shopping_list['name']} (copy)",
            "items": [{**item, "id": str(uuid.uuid4()), "completed": False}
                      for item in shopping_list.get("items") or []],
            "status": "active",
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        })
        return await self.create(copy)

    async def get_item_suggestions(self, user_id: str, query: Optional[str] = None,
                                   limit: int = 5) -> List[dict]:
        """Items from the user's lists ranked by how often they were bought.

        Names are merged case-insensitively; the largest quantity seen is kept.
        """
        lists = await self.get_all_user_shopping_lists(user_id)

        suggestions = {}
        for shopping_list in lists:
            for item in shopping_list.get("items") or []:
                key = item["name"].lower()
                existing = suggestions.get(key)
                if existing is None:
                    suggestions[key] = {
                        "name": item["name"],
                        "quantity": item.get("quantity"),
                        "unit": item.get("unit"),
                        "frequency": 1,
                    }
                    continue

                existing["frequency"] += 1
                quantity = item.get("quantity")
                if quantity and (not existing["quantity"] or quantity > existing["quantity"]):
                    existing["quantity"] = quantity
                unit = item.get("unit")
                if unit and (not existing["unit"] or existing["unit"] == unit):
                    existing["unit"] = unit

        ranked = sorted(suggestions.values(), key=lambda s: s["frequency"], reverse=True)
        if query:
            needle = query.lower()
            ranked = [s for s in ranked if needle in s["name"].lower()]
        return ranked[:limit]
