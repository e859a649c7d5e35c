"""
Request-scoped dependencies shared by the route modules
"""
import json
from typing import Any, Dict

from bson import ObjectId
from fastapi import Depends, Request

from inhouse.core.errors import InvalidIdentifier, ValidationError
from inhouse.database.identifiers import parse_object_id
from inhouse.database.mongodb import StoreContext
from inhouse.resources.registry import Resource, parent_field
from inhouse.utils.logger import logger


def get_store(request: Request) -> StoreContext:
    """The store context attached to the app at startup"""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Store context is not initialised; the app has not started")
    return store


async def get_resource(resource: str, store: StoreContext = Depends(get_store)) -> Resource:
    """Bind the `{resource}` path segment to a collection handle"""
    return store.registry.resolve(resource)


async def get_parent_field(main_resource: str) -> str:
    """Bind the `{main_resource}` path segment to its linkage field name"""
    return parent_field(main_resource)


async def document_id(id: str) -> ObjectId:
    try:
        return parse_object_id(id)
    except InvalidIdentifier:
        logger.warning(f"Rejected malformed identifier: {id!r}")
        raise


async def document_body(request: Request) -> Dict[str, Any]:
    """
    The JSON object sent as request body.

    A missing, unparsable or non-object body is rejected with an empty 400.
    """
    raw = await request.body()
    if not raw.strip():
        raise ValidationError()
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationError()
    if not isinstance(body, dict):
        raise ValidationError()
    return body
