"""Tests for resolving shared group members."""

from services.group_membership import GroupMembershipResolver


class TestSharedMemberIds:
    async def test_example_group(self, sharing_db):
        """A in g1 with members A, B, C shares with B and C."""
        resolver = GroupMembershipResolver(sharing_db)
        assert await resolver.get_shared_member_ids("A") == {"B", "C"}

    async def test_union_over_groups_excludes_self(self, sharing_db):
        resolver = GroupMembershipResolver(sharing_db)
        members = await resolver.get_shared_member_ids("C")
        assert members == {"A", "B", "E"}
        assert "C" not in members

    async def test_user_without_groups(self, sharing_db):
        resolver = GroupMembershipResolver(sharing_db)
        assert await resolver.get_shared_member_ids("D") == set()

    async def test_unknown_user(self, sharing_db):
        resolver = GroupMembershipResolver(sharing_db)
        assert await resolver.get_shared_member_ids("nobody") == set()

    async def test_empty_group_ids(self, db):
        await db["users"].insert_one({"_id": "solo", "group_ids": []})
        resolver = GroupMembershipResolver(db)
        assert await resolver.get_shared_member_ids("solo") == set()

    async def test_missing_group_is_skipped(self, db):
        await db["users"].insert_one({"_id": "u1", "group_ids": ["gone", "g"]})
        await db["userGroups"].insert_one({"_id": "g", "member_ids": ["u1", "u2"]})
        resolver = GroupMembershipResolver(db)
        assert await resolver.get_shared_member_ids("u1") == {"u2"}

    async def test_only_member_of_own_group(self, db):
        await db["users"].insert_one({"_id": "u1", "group_ids": ["g"]})
        await db["userGroups"].insert_one({"_id": "g", "member_ids": ["u1"]})
        resolver = GroupMembershipResolver(db)
        assert await resolver.get_shared_member_ids("u1") == set()


class TestGroupIds:
    async def test_group_ids(self, sharing_db):
        resolver = GroupMembershipResolver(sharing_db)
        assert await resolver.get_group_ids("C") == ["g1", "g2"]
        assert await resolver.get_group_ids("D") == []
