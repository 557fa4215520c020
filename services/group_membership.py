import logging
from typing import List, Set

from database import USER_GROUPS, USERS, document_key

logger = logging.getLogger(__name__)


class GroupMembershipResolver:
    """Resolves which other users share a group with a given user.

    Walks user -> group_ids -> each group's member_ids. The requesting user
    is never part of the result. Missing users, missing groups and empty
    `group_ids` all resolve to nothing.
    """

    def __init__(self, db):
        self.db = db

    async def get_group_ids(self, user_id: str) -> List[str]:
        user = await self.db[USERS].find_one({"_id": document_key(user_id)})
        if not user:
            return []
        return [str(group_id) for group_id in user.get("group_ids") or []]

    async def get_shared_member_ids(self, user_id: str) -> Set[str]:
        group_ids = await self.get_group_ids(user_id)
        if not group_ids:
            return set()

        member_ids: Set[str] = set()
        for group_id in group_ids:
            group = await self.db[USER_GROUPS].find_one({"_id": document_key(group_id)})
            if not group:
                logger.debug("Group %s referenced by user %s does not exist", group_id, user_id)
                continue
            for member_id in group.get("member_ids") or []:
                if str(member_id) != user_id:
                    member_ids.add(str(member_id))

        return member_ids
