import logging
from typing import List, Optional

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from database import CATEGORIES
from services.base import DocumentService
from services.group_membership import GroupMembershipResolver
from utils.dates import now_iso
from utils.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)

BY_NAME = [("name", ASCENDING)]


def dedupe_by_name(categories: List[dict]) -> List[dict]:
    """Keep the first category for each case-insensitive name"""
    seen = set()
    unique = []
    for category in categories:
        key = (category.get("name") or "").lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(category)
    return unique


class CategoryService(DocumentService):
    collection_name = CATEGORIES
    # user_id null marks a legacy/global category
    nullable_fields = ("user_id",)

    def __init__(self, db, membership: Optional[GroupMembershipResolver] = None):
        super().__init__(db)
        self.membership = membership or GroupMembershipResolver(db)

    async def get(self, category_id: str) -> Optional[dict]:
        return await self.get_by_id(category_id)

    async def create(self, category: dict) -> dict:
        now = now_iso()
        new_category = {
            "name": category["name"],
            "type": category["type"],
            "user_id": category.get("user_id"),
            "created_at": now,
            "updated_at": now,
        }
        return await super().create(new_category)

    async def update(self, category_id: str, updates: dict) -> Optional[dict]:
        changes = {k: updates[k] for k in ("name", "type") if updates.get(k)}
        changes["updated_at"] = now_iso()
        return await super().update(category_id, changes)

    async def add_category(self, category: dict, user_id: Optional[str]) -> dict:
        if not user_id:
            raise NotAuthenticatedError()
        try:
            return await self.create({**category, "user_id": user_id})
        except PyMongoError:
            logger.exception("Error adding category for user %s", user_id)
            raise

    async def get_all_categories(self) -> List[dict]:
        return await self.query({}, BY_NAME)

    async def get_user_categories(self, user_id: str) -> List[dict]:
        return await self.query({"user_id": user_id}, BY_NAME)

    async def get_global_categories(self) -> List[dict]:
        return await self.query({"user_id": None}, BY_NAME)

    async def get_shared_categories(self, user_id: str) -> List[dict]:
        """Categories owned by the other members of the user's groups"""
        try:
            member_ids = await self.membership.get_shared_member_ids(user_id)
            if not member_ids:
                return []
            return await self.query({"user_id": {"$in": sorted(member_ids)}}, BY_NAME)
        except PyMongoError:
            logger.exception("Error fetching shared categories for user %s", user_id)
            return []

    async def get_all_user_categories(self, user_id: str) -> List[dict]:
        """Own categories followed by shared ones, one per name, sorted by name"""
        try:
            own = await self.get_user_categories(user_id)
        except PyMongoError:
            logger.exception("Error fetching categories for user %s", user_id)
            return []
        shared = await self.get_shared_categories(user_id)

        categories = dedupe_by_name(own + shared)
        categories.sort(key=lambda c: (c.get("name") or "").lower())
        return categories
