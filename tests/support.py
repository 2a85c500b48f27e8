# In-memory stand-ins for the async pymongo collection API used by the routes.
# Only the operations and update operators the service issues are supported.

import copy
from types import SimpleNamespace

from bson import ObjectId
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

VALID_MISSING_ID = "0123456789abcdef01234567"


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        return [copy.deepcopy(doc) for doc in self._documents]


class FakeCollection:
    """Dict-backed collection. Set ``fail = True`` to make every call raise."""

    def __init__(self):
        self.documents = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise PyMongoError("connection refused")

    def _match(self, flt):
        for doc in self.documents:
            if doc["_id"] == flt["_id"]:
                return doc
        return None

    async def insert_one(self, document):
        self._check()
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, flt=None):
        self._check()
        return FakeCursor(list(self.documents))

    async def find_one(self, flt):
        self._check()
        doc = self._match(flt)
        return copy.deepcopy(doc) if doc is not None else None

    async def update_one(self, flt, update):
        self._check()
        doc = self._match(flt)
        if doc is None:
            return SimpleNamespace(matched_count=0, modified_count=0)

        for key, value in update.get("$set", {}).items():
            doc[key] = copy.deepcopy(value)
        for key, value in update.get("$addToSet", {}).items():
            values = doc.setdefault(key, [])
            if value not in values:
                values.append(value)
        return SimpleNamespace(matched_count=1, modified_count=1)

    async def delete_one(self, flt):
        self._check()
        doc = self._match(flt)
        if doc is None:
            return SimpleNamespace(deleted_count=0)
        self.documents.remove(doc)
        return SimpleNamespace(deleted_count=1)


class FakeMongoClient:
    """Replaces pymongo.AsyncMongoClient; ``reachable`` controls ping."""

    reachable = True
    instances = []

    def __init__(self, uri, **kwargs):
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False
        self.databases = {}
        self.admin = SimpleNamespace(command=self._command)
        FakeMongoClient.instances.append(self)

    async def _command(self, name):
        if not self.reachable:
            raise ServerSelectionTimeoutError("localhost:27017: connection refused")
        return {"ok": 1.0}

    def __getitem__(self, name):
        return self.databases.setdefault(name, _FakeDatabase())

    async def close(self):
        self.closed = True


class _FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())
