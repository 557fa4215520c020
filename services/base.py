import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from database import document_key, serialize

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]


def clean_document(data: dict, nullable: Iterable[str] = ()) -> dict:
    """Drop fields set to None, except those allowed to be stored as null"""
    keep = set(nullable)
    return {k: v for k, v in data.items() if v is not None or k in keep}


class DocumentService:
    """CRUD and filtered queries against one collection.

    Documents come back as dicts with `_id` converted to str.
    """

    collection_name: str = ""
    nullable_fields: Tuple[str, ...] = ()

    def __init__(self, db):
        self.db = db

    @property
    def collection(self):
        return self.db[self.collection_name]

    async def get_by_id(self, document_id: str) -> Optional[dict]:
        logger.debug("Getting document %s from %s", document_id, self.collection_name)
        if not document_id:
            return None
        document = await self.collection.find_one({"_id": document_key(document_id)})
        if document is None:
            logger.debug("Document %s not found in %s", document_id, self.collection_name)
        return serialize(document)

    async def create(self, data: dict) -> dict:
        new_doc = clean_document(data, self.nullable_fields)
        new_doc.pop("_id", None)
        logger.debug("Creating document in %s: %s", self.collection_name, new_doc)
        result = await self.collection.insert_one(new_doc)
        created = await self.collection.find_one({"_id": result.inserted_id})
        logger.debug("Created document %s in %s", result.inserted_id, self.collection_name)
        return serialize(created)

    async def create_with_id(self, document_id: str, data: dict) -> dict:
        new_doc = clean_document(data, self.nullable_fields)
        new_doc["_id"] = document_id
        logger.debug("Creating document with id %s in %s", document_id, self.collection_name)
        await self.collection.replace_one({"_id": document_id}, new_doc, upsert=True)
        created = await self.collection.find_one({"_id": document_id})
        return serialize(created)

    async def update(self, document_id: str, data: dict) -> Optional[dict]:
        """Merge `data` into the document; None when it does not exist"""
        updates = clean_document(data, self.nullable_fields)
        updates.pop("_id", None)
        logger.debug("Updating document %s in %s: %s", document_id, self.collection_name, updates)
        key = document_key(document_id)
        if updates:
            result = await self.collection.update_one({"_id": key}, {"$set": updates})
            if result.matched_count == 0:
                return None
        updated = await self.collection.find_one({"_id": key})
        return serialize(updated)

    async def delete(self, document_id: str) -> bool:
        logger.debug("Deleting document %s from %s", document_id, self.collection_name)
        result = await self.collection.delete_one({"_id": document_key(document_id)})
        return result.deleted_count > 0

    async def query(self, filters: Optional[dict] = None, sort: Optional[SortSpec] = None,
                    limit: Optional[int] = None) -> List[dict]:
        logger.debug("Querying %s with filters %s sort %s", self.collection_name, filters, sort)
        cursor = self.collection.find(filters or {})
        if sort:
            cursor = cursor.sort(list(sort))
        if limit:
            cursor = cursor.limit(limit)
        documents = await cursor.to_list(length=None)
        logger.debug("Found %d documents in %s", len(documents), self.collection_name)
        return [serialize(doc) for doc in documents]

    async def get_all(self, sort: Optional[SortSpec] = None) -> List[dict]:
        return await self.query({}, sort)
