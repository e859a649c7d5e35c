"""
Pytest configuration and fixtures for the inhouse gateway tests.

The store is an in-memory stand-in exposing the part of the motor API the
gateway uses, so the HTTP surface can be exercised without a MongoDB server.
"""
import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import OperationFailure

from inhouse.api.dependencies import get_store
from inhouse.auth.signature import SignatureVerifier, get_signature_verifier
from inhouse.database.mongodb import create_store_context
from inhouse.main import app


def _matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    return all(key in document and document[key] == value for key, value in filter.items())


class FakeCursor:
    """Async cursor that records how far it has been read and whether it was closed"""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents
        self.consumed = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed or self.consumed >= len(self._documents):
            raise StopAsyncIteration
        document = copy.deepcopy(self._documents[self.consumed])
        self.consumed += 1
        return document

    async def close(self):
        self.closed = True


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.exists = False
        self.cursors: List[FakeCursor] = []

    def find(self, filter: Optional[Dict[str, Any]] = None) -> FakeCursor:
        filter = filter or {}
        cursor = FakeCursor([doc for doc in self.documents if _matches(doc, filter)])
        self.cursors.append(cursor)
        return cursor

    async def find_one(self, filter: Dict[str, Any]):
        for document in self.documents:
            if _matches(document, filter):
                return copy.deepcopy(document)
        return None

    async def count_documents(self, filter: Dict[str, Any]) -> int:
        return len([doc for doc in self.documents if _matches(doc, filter)])

    async def insert_one(self, document: Dict[str, Any]):
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        self.exists = True
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    async def replace_one(self, filter: Dict[str, Any], replacement: Dict[str, Any]):
        for index, document in enumerate(self.documents):
            if _matches(document, filter):
                new_document = copy.deepcopy(replacement)
                new_document["_id"] = document["_id"]
                self.documents[index] = new_document
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, filter: Dict[str, Any]):
        for index, document in enumerate(self.documents):
            if _matches(document, filter):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FailingCollection(FakeCollection):
    """Every operation fails the way a broken store would"""

    error = OperationFailure("not authorized on inhouse", code=13, details={"ok": 0, "errmsg": "not authorized on inhouse", "code": 13})

    def find(self, filter=None):
        raise self.error

    async def find_one(self, filter):
        raise self.error

    async def count_documents(self, filter):
        raise self.error

    async def insert_one(self, document):
        raise self.error

    async def replace_one(self, filter, replacement):
        raise self.error

    async def delete_one(self, filter):
        raise self.error


class FakeDatabase:
    def __init__(self, name: str = "inhouse"):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def create_collection(self, name: str, collection: Optional[FakeCollection] = None) -> FakeCollection:
        collection = collection or FakeCollection(name)
        collection.exists = True
        self.collections[name] = collection
        return collection

    async def list_collection_names(self) -> List[str]:
        return [name for name, collection in self.collections.items() if collection.exists]


class FakeClient:
    def __init__(self, database: FakeDatabase):
        self.database = database
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.database

    def close(self):
        self.closed = True


@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def store(database):
    return create_store_context(FakeClient(database), database.name)


@pytest.fixture
def client(store):
    """Test client wired to the in-memory store, with signatures disabled"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_signature_verifier] = lambda: SignatureVerifier(None)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def push_payload():
    """A GitHub push event for the master branch"""
    return {
        "ref": "refs/heads/master",
        "repository": {
            "name": "widgets",
            "full_name": "acme/widgets",
            "clone_url": "https://github.com/acme/widgets.git",
        },
        "head_commit": {"id": "6dcb09b5b57875f334f61aebed695e2e4193db5e", "message": "Fix all the things"},
        "pusher": {"name": "octocat", "email": "octocat@github.com"},
    }
