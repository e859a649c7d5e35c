"""
Document store adapter

Uniform list/get/insert/replace/delete operations against any collection.
List results are streamed straight from the store cursor as a JSON array
and are never collected into memory.
"""
import asyncio
import re
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.errors import PyMongoError

from inhouse.core.errors import NotFound, StoreError, store_errors
from inhouse.database.mongodb import StoreContext
from inhouse.resources.registry import Resource
from inhouse.services.schema_service import infer_schema
from inhouse.utils.logger import logger
from inhouse.utils.serialization import dumps

# Same framing as JSONStream.stringify()
ARRAY_OPEN = "[\n"
ARRAY_SEPARATOR = "\n,\n"
ARRAY_CLOSE = "\n]\n"

SYSTEM_MARKER = "system."
PRIVATE_PREFIX = "_"


def _now() -> datetime:
    """Current UTC time at the millisecond precision BSON dates keep"""
    now = datetime.utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


async def stream_documents(cursor) -> AsyncIterator[str]:
    """
    Encode documents as they arrive from `cursor`.

    The generator is lazy and single-use. The cursor is closed when the
    stream ends, fails, is cancelled or is closed early by its consumer.
    """
    try:
        yield ARRAY_OPEN
        first = True
        async for document in cursor:
            if not first:
                yield ARRAY_SEPARATOR
            first = False
            yield dumps(document)
        yield ARRAY_CLOSE
    except asyncio.CancelledError:
        logger.warning("Client went away during list stream; releasing cursor")
        raise
    except PyMongoError as exc:
        logger.error(f"Store failed mid-stream: {exc}", exc_info=True)
        raise StoreError(exc) from exc
    finally:
        await cursor.close()


class DocumentService:
    """Handles all generic resource operations"""

    async def list_collections(self, store: StoreContext) -> List[str]:
        """User-visible collection names: no system or private collections"""
        with store_errors():
            names = await store.database.list_collection_names()

        db_prefix = re.compile(r"^" + re.escape(store.db_name) + r"\.")
        collections = []
        for name in names:
            name = db_prefix.sub("", name)
            if SYSTEM_MARKER in name or name.startswith(PRIVATE_PREFIX):
                continue
            collections.append(name)
        return collections

    async def describe(self, resource: Resource) -> Dict[str, Any]:
        """Document count and inferred schema of a resource"""
        with store_errors():
            count = await resource.collection.count_documents({})
        schema = await infer_schema(resource.collection)
        return {
            "name": resource.name,
            "count": count,
            "schema": schema,
        }

    async def list(self, resource: Resource, filter: Dict[str, Any]) -> Tuple[int, AsyncIterator[str]]:
        """
        Count the matching documents and open a stream over them.

        Counting first surfaces store failures before the response starts.
        """
        with store_errors():
            count = await resource.collection.count_documents(filter)
            cursor = resource.collection.find(filter)
        return count, stream_documents(cursor)

    async def get(self, resource: Resource, id: ObjectId) -> Dict[str, Any]:
        with store_errors():
            document = await resource.collection.find_one({"_id": id})
        if document is None:
            raise NotFound()
        return document

    async def insert(
        self,
        resource: Resource,
        body: Dict[str, Any],
        parent_field: Optional[str] = None,
        parent_id: Optional[ObjectId] = None,
    ) -> Dict[str, Any]:
        """Stamp timestamps (and parent linkage) and insert `body`"""
        if parent_field is not None:
            body[parent_field] = parent_id

        body["createdAt"] = _now()
        body["updatedAt"] = body["createdAt"]

        with store_errors():
            result = await resource.collection.insert_one(body)
        body["_id"] = result.inserted_id
        return body

    async def replace(self, resource: Resource, id: ObjectId, body: Dict[str, Any]) -> None:
        """Full replace keyed by `id`; a client supplied `_id` is dropped"""
        body.pop("_id", None)
        body["updatedAt"] = _now()

        with store_errors():
            await resource.collection.replace_one({"_id": id}, body)

    async def delete(self, resource: Resource, id: ObjectId) -> None:
        with store_errors():
            result = await resource.collection.delete_one({"_id": id})
        if result.deleted_count == 0:
            raise NotFound()


# Singleton instance
document_service = DocumentService()
