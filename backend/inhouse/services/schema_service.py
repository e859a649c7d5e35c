"""
Schema inference for schema-less collections

Every document of a collection is folded into one accumulator with a deep,
right-biased merge: nested objects are merged key by key, any other value
from a later document replaces the earlier one. The merged object (minus
`_id`) is then described as a mapping of dotted field paths to type names.

Fields whose type changed during the merge keep the last-seen type but are
tagged with `varied` and the full set of `observed` types, so callers can
tell they should not rely on that type.
"""
from datetime import datetime
from typing import Any, Dict, Set

from bson import Binary, Decimal128, Int64, ObjectId

from inhouse.core.errors import store_errors
from inhouse.utils.logger import logger


def type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Int64, Decimal128)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, ObjectId):
        return "objectId"
    if isinstance(value, (bytes, Binary)):
        return "binary"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class SchemaAccumulator:
    """Folds documents into one merged object and tracks observed types"""

    def __init__(self):
        self.merged: Dict[str, Any] = {}
        self.observed: Dict[str, Set[str]] = {}
        self.count = 0

    def add(self, document: Dict[str, Any]) -> None:
        self._merge(self.merged, document, "")
        self.count += 1

    def _merge(self, target: Dict[str, Any], source: Dict[str, Any], prefix: str) -> None:
        for key, value in source.items():
            path = f"{prefix}{key}"
            self.observed.setdefault(path, set()).add(type_name(value))

            if isinstance(value, dict):
                current = target.get(key)
                if not isinstance(current, dict):
                    current = target[key] = {}
                self._merge(current, value, f"{path}.")
            else:
                target[key] = value

    def describe(self) -> Dict[str, Dict[str, Any]]:
        merged = dict(self.merged)
        merged.pop("_id", None)

        schema: Dict[str, Dict[str, Any]] = {}
        self._describe(merged, "", schema)
        return schema

    def _describe(self, obj: Dict[str, Any], prefix: str, schema: Dict[str, Dict[str, Any]]) -> None:
        for key, value in obj.items():
            path = f"{prefix}{key}"
            entry: Dict[str, Any] = {"type": type_name(value)}

            observed = self.observed.get(path, set())
            if len(observed) > 1:
                entry["varied"] = True
                entry["observed"] = sorted(observed)

            schema[path] = entry
            if isinstance(value, dict):
                self._describe(value, f"{path}.", schema)


async def infer_schema(collection) -> Dict[str, Dict[str, Any]]:
    """Stream every document of `collection` and describe the merged shape"""
    accumulator = SchemaAccumulator()

    with store_errors():
        cursor = collection.find({})
        try:
            async for document in cursor:
                accumulator.add(document)
        finally:
            await cursor.close()

    schema = accumulator.describe()
    varied = [path for path, entry in schema.items() if entry.get("varied")]
    if varied:
        logger.info(f"Inferred schema over {accumulator.count} documents; varied fields: {varied}")
    return schema
