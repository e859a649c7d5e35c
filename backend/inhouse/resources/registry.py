"""
Resource registry

Turns URL path segments into live collection handles. There is no fixed set
of resources: any collection name is routable once it has been camel-cased
and validated. Handles are created on first use and cached.
"""
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from pymongo.errors import InvalidName

from inhouse.core.errors import ValidationError

_SEPARATORS = re.compile(r"[-_\s]+(.)?")


def camelize(segment: str) -> str:
    """
    Camel-case a path segment the way underscore.string does.

    >>> camelize("issue-comments")
    'issueComments'
    >>> camelize("_hook")
    'Hook'
    """
    return _SEPARATORS.sub(
        lambda match: match.group(1).upper() if match.group(1) else "",
        segment.strip(),
    )


def parent_field(segment: str) -> str:
    """Name of the field linking child documents to a parent resource"""
    return camelize(segment) + "Id"


def validate_collection_name(name: str) -> str:
    if not name:
        raise ValidationError("Resource name must not be empty")
    if "$" in name or "\x00" in name or ".." in name:
        raise ValidationError(f"Invalid resource name: {name}")
    if name.startswith(".") or name.endswith("."):
        raise ValidationError(f"Invalid resource name: {name}")
    return name


@dataclass(frozen=True)
class Resource:
    name: str
    collection: Any


class ResourceRegistry:
    """
    Maps canonical resource names to collection handles.

    Least recently used handles are evicted once `max_size` is reached.
    """

    def __init__(self, database, max_size: int = 1024):
        self.database = database
        self.max_size = max_size
        self._resources: "OrderedDict[str, Resource]" = OrderedDict()

    def resolve(self, segment: str) -> Resource:
        name = camelize(segment)
        if name in self._resources:
            self._resources.move_to_end(name)
            return self._resources[name]

        validate_collection_name(name)
        try:
            collection = self.database[name]
        except InvalidName as exc:
            raise ValidationError(f"Invalid resource name: {name}") from exc

        if len(self._resources) >= self.max_size:
            self._resources.popitem(last=False)
        resource = self._resources[name] = Resource(name=name, collection=collection)
        return resource

    def __contains__(self, name: str) -> bool:
        return name in self._resources

    def __len__(self) -> int:
        return len(self._resources)
