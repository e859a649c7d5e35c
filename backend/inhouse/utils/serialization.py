"""
JSON encoding for documents read from the store
"""
import json
from typing import Any

from bson import ObjectId
from fastapi.encoders import jsonable_encoder

BSON_ENCODERS = {
    ObjectId: str,
    bytes: lambda value: value.hex(),
}


def to_jsonable(value: Any) -> Any:
    """Convert store values (ObjectId, datetime, bytes) into JSON-ready data"""
    return jsonable_encoder(value, custom_encoder=BSON_ENCODERS)


def dumps(value: Any) -> str:
    return json.dumps(to_jsonable(value))
