"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Test fixtures                                                 ║
║                                                                              ║
║  - FakeDatabase: in-memory, Motor-shaped (awaitable collection methods)      ║
║    records every call in `calls` and can fail chosen operations              ║
║    every awaited operation yields to the loop once, like a real round trip   ║
║  - store:  RecordStore over a FakeDatabase, installed as the shared store    ║
║  - rpc:    RemoteProcedureGateway on httpx.MockTransport, with recorded      ║
║            calls and per-procedure canned responses                          ║
║  - api:    httpx.AsyncClient on the FastAPI app (ASGITransport)              ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio
import copy
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio
from pymongo.errors import OperationFailure

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from services.record_store import RecordStore, set_store  # noqa: E402
from services.remote_procedures import RemoteProcedureGateway, set_gateway  # noqa: E402

FUNCTIONS_BASE = "http://functions.test/v1"


# ==================== FAKE MONGO ====================

def _matches_condition(value, condition):
    if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
        for op, expected in condition.items():
            if op == "$in" and value not in expected:
                return False
            if op == "$nin" and value in expected:
                return False
            if op == "$ne" and value == expected:
                return False
            if op == "$gte" and (value is None or value < expected):
                return False
            if op == "$gt" and (value is None or value <= expected):
                return False
            if op == "$lte" and (value is None or value > expected):
                return False
            if op == "$lt" and (value is None or value >= expected):
                return False
        return True
    return value == condition


def matches_filter(doc, query):
    return all(_matches_condition(doc.get(k), cond) for k, cond in (query or {}).items())


def _project(doc, projection):
    result = copy.deepcopy(doc)
    if projection and projection.get("_id") == 0:
        result.pop("_id", None)
    return result


def _sort_key(field):
    def key(doc):
        value = doc.get(field)
        return (value is None, value if value is not None else 0)
    return key


class FakeCursor:

    def __init__(self, docs):
        self.docs = docs

    def sort(self, keys, direction=None):
        if isinstance(keys, str):
            keys = [(keys, direction or 1)]
        for field, order in reversed(list(keys)):
            self.docs.sort(key=_sort_key(field), reverse=order == -1)
        return self

    async def to_list(self, length=None):
        return self.docs[:length] if length else list(self.docs)


class FakeCollection:

    def __init__(self, database, name):
        self.database = database
        self.name = name
        self.docs = []

    def _record(self, op, *args):
        self.database.calls.append((self.name, op) + args)
        if (self.name, op) in self.database.failing:
            raise OperationFailure(f"{op} on {self.name} failed")

    def _apply(self, doc, update, inserting=False):
        for k, v in update.get("$set", {}).items():
            doc[k] = copy.deepcopy(v)
        for k, v in update.get("$inc", {}).items():
            doc[k] = (doc.get(k) or 0) + v
        if inserting:
            for k, v in update.get("$setOnInsert", {}).items():
                doc[k] = copy.deepcopy(v)

    def find(self, query=None, projection=None):
        self._record("find", query)
        return FakeCursor([_project(d, projection) for d in self.docs if matches_filter(d, query)])

    async def find_one(self, query=None, projection=None):
        await asyncio.sleep(0)
        self._record("find_one", query)
        for doc in self.docs:
            if matches_filter(doc, query):
                return _project(doc, projection)
        return None

    async def count_documents(self, query):
        await asyncio.sleep(0)
        self._record("count_documents", query)
        return len([d for d in self.docs if matches_filter(d, query)])

    async def insert_one(self, doc):
        await asyncio.sleep(0)
        self._record("insert_one", copy.deepcopy(doc))
        doc["_id"] = f"oid-{len(self.docs) + 1}"
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def update_one(self, query, update, upsert=False):
        await asyncio.sleep(0)
        self._record("update_one", query, copy.deepcopy(update))
        for doc in self.docs:
            if matches_filter(doc, query):
                self._apply(doc, update)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            self._apply(doc, update, inserting=True)
            doc["_id"] = f"oid-{len(self.docs) + 1}"
            self.docs.append(doc)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def update_many(self, query, update):
        await asyncio.sleep(0)
        self._record("update_many", query, copy.deepcopy(update))
        matched = [d for d in self.docs if matches_filter(d, query)]
        for doc in matched:
            self._apply(doc, update)
        return SimpleNamespace(matched_count=len(matched), modified_count=len(matched))

    async def find_one_and_update(self, query, update, projection=None, return_document=None):
        await asyncio.sleep(0)
        self._record("find_one_and_update", query, copy.deepcopy(update))
        for doc in self.docs:
            if matches_filter(doc, query):
                before = _project(doc, projection)
                self._apply(doc, update)
                return _project(doc, projection) if return_document else before
        return None

    async def delete_one(self, query):
        await asyncio.sleep(0)
        self._record("delete_one", query)
        for i, doc in enumerate(self.docs):
            if matches_filter(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:

    def __init__(self):
        self.collections = {}
        self.calls = []
        self.failing = set()

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def seed(self, table, *docs):
        for doc in docs:
            self[table].docs.append(copy.deepcopy(doc))

    def rows(self, table):
        return [_project(d, {"_id": 0}) for d in self[table].docs]

    def fail(self, table, op):
        self.failing.add((table, op))

    def calls_for(self, table, op):
        return [c for c in self.calls if c[0] == table and c[1] == op]


# ==================== FAKE REMOTE PROCEDURES ====================

class RemoteProcedureRecorder:
    """Canned responses per procedure name; every request is recorded"""

    def __init__(self):
        self.calls = []
        self.responses = {}

    def respond(self, name, body=None, status=200):
        self.responses[name] = (status, body if body is not None else {})

    def calls_to(self, name):
        return [body for called, body in self.calls if called == name]

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        self.calls.append((name, body))
        status, payload = self.responses.get(name, (200, {}))
        return httpx.Response(status, json=payload)


# ==================== FIXTURES ====================

@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    record_store = RecordStore(fake_db)
    set_store(record_store)
    yield record_store
    set_store(None)


@pytest.fixture
def rpc():
    recorder = RemoteProcedureRecorder()
    gateway = RemoteProcedureGateway(
        FUNCTIONS_BASE,
        api_key="test-key",
        transport=httpx.MockTransport(recorder.handler),
    )
    recorder.gateway = gateway
    set_gateway(gateway)
    yield recorder
    set_gateway(None)


@pytest_asyncio.fixture
async def api(store, rpc):
    from server import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def jane_doe():
    return {
        "id": "pro-jane",
        "first_name": "Jane",
        "last_name": "Doe",
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "status": "new",
        "pipeline_stage": "new",
        "qualification_score": 85,
        "total_sales": 1250000,
        "motivation": 7,
        "cities": ["Austin", "Round Rock"],
        "states": ["TX"],
        "source": "model-match",
        "created_at": "2026-01-10T10:00:00+00:00",
    }
