import logging

from database import AUTH_CLAIMS
from utils.dates import now_iso

logger = logging.getLogger(__name__)


class AuthClaimsService:
    """Custom claims store of the authentication provider.

    Claims are embedded into access tokens at login, so a change only shows
    up in tokens issued afterwards.
    """

    def __init__(self, db):
        self.db = db

    async def set_custom_user_claims(self, uid: str, claims: dict) -> None:
        await self.db[AUTH_CLAIMS].replace_one(
            {"_id": uid},
            {"_id": uid, "claims": dict(claims), "updated_at": now_iso()},
            upsert=True,
        )
        logger.info("Custom claims for user %s set to %s", uid, claims)

    async def get_custom_user_claims(self, uid: str) -> dict:
        document = await self.db[AUTH_CLAIMS].find_one({"_id": uid})
        if not document:
            return {}
        return document.get("claims") or {}
