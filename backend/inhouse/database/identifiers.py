"""
Document identifier parsing

Accepts the store's native 12 raw byte form or its 24 character
hexadecimal text form. Everything else is rejected before any store call.
"""
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from inhouse.core.errors import InvalidIdentifier

RAW_LENGTH = 12


def parse_object_id(value: Any) -> ObjectId:
    """Convert `value` into an ObjectId or raise InvalidIdentifier"""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, (str, bytes)):
        raise InvalidIdentifier(value)

    # A 12 character string is the raw binary form, one byte per character
    if isinstance(value, str) and len(value) == RAW_LENGTH:
        try:
            value = value.encode("latin-1")
        except UnicodeEncodeError:
            raise InvalidIdentifier(value)

    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifier(value)
