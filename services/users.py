import logging
from typing import List, Optional

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from database import SHOPPING_LISTS, TRANSACTIONS, USER_GROUPS, USERS
from services.base import DocumentService
from utils.dates import now_iso

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "user"


class UserService(DocumentService):
    collection_name = USERS

    async def get(self, user_id: str) -> Optional[dict]:
        return await self.get_by_id(user_id)

    async def get_user_by_email(self, email: str) -> Optional[dict]:
        users = await self.query({"email": email}, limit=1)
        return users[0] if users else None

    async def get_all_users(self) -> List[dict]:
        return await self.query({}, [("email", ASCENDING)])

    async def create_user(self, user: dict) -> dict:
        now = now_iso()
        new_user = {
            "role": DEFAULT_ROLE,
            "group_ids": [],
            "is_active": True,
            "created_at": now,
            "last_login_at": now,
            **user,
        }
        return await self.create(new_user)

    async def update_user_role(self, user_id: str, role: str) -> Optional[dict]:
        # Custom claims follow through the role-sync trigger
        return await self.update(user_id, {"role": role})

    async def update_user_profile(self, user_id: str, updates: dict) -> Optional[dict]:
        allowed = {k: v for k, v in updates.items() if k in ("username", "full_name")}
        return await self.update(user_id, allowed)

    async def record_login(self, user_id: str) -> Optional[dict]:
        return await self.update(user_id, {"last_login_at": now_iso()})

    async def delete_user_account(self, user_id: str) -> bool:
        """Delete the user together with their transactions, lists and owned groups"""
        try:
            for collection_name, owner_field in ((USER_GROUPS, "owner_id"),
                                                 (TRANSACTIONS, "user_id"),
                                                 (SHOPPING_LISTS, "user_id")):
                result = await self.db[collection_name].delete_many({owner_field: user_id})
                logger.info("Deleted %d documents from %s for user %s",
                            result.deleted_count, collection_name, user_id)
            return await self.delete(user_id)
        except PyMongoError:
            logger.exception("Error deleting account of user %s", user_id)
            raise
