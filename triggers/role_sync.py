"""Mirrors a user document's `role` into authentication custom claims.

`on_user_role_changed` is the trigger body; `watch_user_role_changes` feeds it
from a change stream on the users collection. Delivery is at-least-once and
failures are only logged.
"""
import logging
from typing import Optional

from pymongo.errors import PyMongoError

from database import USERS
from services.claims import AuthClaimsService

logger = logging.getLogger(__name__)


async def on_user_role_changed(user_id: str, before: Optional[dict], after: Optional[dict],
                               claims: AuthClaimsService) -> None:
    try:
        if not after:
            logger.info("User document %s was deleted, skipping", user_id)
            return

        if before and before.get("role") == after.get("role"):
            logger.info("Role unchanged for user %s, skipping", user_id)
            return

        new_role = after.get("role")
        logger.info("Updating auth claims for user %s to role: %s", user_id, new_role)
        await claims.set_custom_user_claims(user_id, {"role": new_role})
        logger.info("Successfully updated claims for user %s", user_id)
    except Exception:
        logger.exception("Error updating claims for user %s", user_id)


def role_touched(change: dict) -> bool:
    """Whether a change event may have altered the role.

    Without a pre-image only the update description tells; replaces and
    events without a description are treated as role changes.
    """
    if change.get("operationType") != "update":
        return True
    description = change.get("updateDescription")
    if not description:
        return True
    updated = description.get("updatedFields") or {}
    removed = description.get("removedFields") or []
    return "role" in updated or "role" in removed


async def watch_user_role_changes(db, claims: Optional[AuthClaimsService] = None) -> None:
    """Run the trigger for every update of a user document.

    Needs a replica set. Pre-images are used when the collection has
    `changeStreamPreAndPostImages` enabled; otherwise updates that leave
    `role` out of their update description are skipped.
    """
    claims = claims or AuthClaimsService(db)
    pipeline = [{"$match": {"operationType": {"$in": ["update", "replace"]}}}]
    try:
        async with db[USERS].watch(
            pipeline,
            full_document="updateLookup",
            full_document_before_change="whenAvailable",
        ) as stream:
            logger.info("Watching %s for role changes", USERS)
            async for change in stream:
                user_id = str(change["documentKey"]["_id"])
                before = change.get("fullDocumentBeforeChange")
                if before is None and not role_touched(change):
                    logger.debug("Update of user %s does not touch role, skipping", user_id)
                    continue
                await on_user_role_changed(user_id, before, change.get("fullDocument"), claims)
    except PyMongoError as e:
        logger.error("Role sync stopped, change stream unavailable: %s", e)
