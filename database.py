import logging
import os

import motor.motor_asyncio
from bson import ObjectId
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("MONGO_DB_NAME", "budget")

# Collection names
USERS = "users"
CATEGORIES = "categories"
TRANSACTIONS = "transactions"
SHOPPING_LISTS = "shoppingLists"
USER_GROUPS = "userGroups"
AUTH_CLAIMS = "auth_claims"

client = motor.motor_asyncio.AsyncIOMotorClient(MONGO_URI)
db = client[DB_NAME]


async def get_db():
    """FastAPI dependency returning the database handle"""
    return db


def document_key(document_id):
    """Map an id string to the value stored in `_id`.

    Ids generated by the database are ObjectIds; documents created with an
    explicit id keep it as a plain string.
    """
    if isinstance(document_id, ObjectId):
        return document_id
    if isinstance(document_id, str) and ObjectId.is_valid(document_id):
        return ObjectId(document_id)
    return document_id


def serialize(document):
    """Convert `_id` to str for JSON responses"""
    if document is None:
        return None
    document["_id"] = str(document["_id"])
    return document


async def test_connection():
    try:
        await client.admin.command("ping")
        logger.info("✅ Connected to MongoDB successfully!")
    except Exception as e:
        logger.error("❌ MongoDB connection failed: %s", e)
