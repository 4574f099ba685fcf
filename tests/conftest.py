"""Shared fakes standing in for a MongoDB deployment."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pytest
from bson import ObjectId

_MISSING = object()


def _lookup(doc: Mapping[str, Any], dotted: str) -> Any:
    current: Any = doc
    for part in dotted.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _matches(doc: Mapping[str, Any], predicate: Mapping[str, Any]) -> bool:
    for key, expected in predicate.items():
        actual = _lookup(doc, key)
        if isinstance(expected, Mapping) and any(op.startswith("$") for op in expected):
            for op, operand in expected.items():
                if actual is _MISSING:
                    return False
                if op == "$gte" and not actual >= operand:
                    return False
                if op == "$lte" and not actual <= operand:
                    return False
                if op == "$regex" and not re.search(operand, str(actual)):
                    return False
        elif actual is _MISSING or actual != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = list(docs)

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self._docs.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._docs = self._docs[:count]
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeProfileCollection:
    """Minimal ``system.profile`` supporting the predicates the service issues."""

    def __init__(self, docs: Optional[List[Dict[str, Any]]] = None) -> None:
        self.docs = list(docs or [])
        self.queries: List[Dict[str, Any]] = []
        self.pipelines: List[List[Dict[str, Any]]] = []
        self.aggregate_results: List[List[Dict[str, Any]]] = []

    def find(self, predicate: Mapping[str, Any], limit: int = 0) -> FakeCursor:
        self.queries.append(dict(predicate))
        return FakeCursor([doc for doc in self.docs if _matches(doc, predicate)]).limit(limit)

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.pipelines.append(pipeline)
        return self.aggregate_results.pop(0) if self.aggregate_results else []


class FakeDatabase:
    """Scripted explain endpoint recording every command it receives."""

    def __init__(
        self,
        *,
        reply: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
        collections: Optional[List[str]] = None,
    ) -> None:
        self.reply = reply or {}
        self.error = error
        self.collections = list(collections or [])
        self.commands: List[Dict[str, Any]] = []
        self.named: Dict[str, Any] = {}

    def command(self, command: Mapping[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self.commands.append(dict(command))
        if self.error is not None:
            raise self.error
        return self.reply

    def list_collection_names(self, filter: Optional[Mapping[str, Any]] = None) -> List[str]:
        names = self.collections
        if filter and "name" in filter:
            names = [name for name in names if name == filter["name"]]
        return names

    def __getitem__(self, name: str) -> Any:
        return self.named[name]


class FakeClient:
    def __init__(self, databases: Dict[str, FakeDatabase]) -> None:
        self.databases = databases

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.databases[name]


def collscan_explain(docs_examined: int = 50000, returned: int = 3, millis: int = 35) -> Dict[str, Any]:
    return {
        "queryPlanner": {
            "namespace": "shop.orders",
            "winningPlan": {"stage": "COLLSCAN", "direction": "forward"},
        },
        "executionStats": {
            "executionSuccess": True,
            "nReturned": returned,
            "executionTimeMillis": millis,
            "totalKeysExamined": 0,
            "totalDocsExamined": docs_examined,
            "executionStages": {
                "stage": "COLLSCAN",
                "nReturned": returned,
                "works": docs_examined + 2,
                "advanced": returned,
                "isEOF": 1,
                "direction": "forward",
                "docsExamined": docs_examined,
            },
        },
        "serverInfo": {"host": "db1", "version": "7.0.5"},
    }


def ixscan_explain(index_name: str = "status_1", returned: int = 3) -> Dict[str, Any]:
    return {
        "queryPlanner": {
            "namespace": "shop.orders",
            "winningPlan": {
                "stage": "FETCH",
                "inputStage": {"stage": "IXSCAN", "indexName": index_name},
            },
        },
        "executionStats": {
            "nReturned": returned,
            "executionTimeMillis": 1,
            "totalKeysExamined": returned,
            "totalDocsExamined": returned,
            "executionStages": {
                "stage": "FETCH",
                "docsExamined": returned,
                "advanced": returned,
                "isEOF": 1,
                "inputStage": {
                    "stage": "IXSCAN",
                    "keysExamined": returned,
                    "indexName": index_name,
                    "direction": "forward",
                },
            },
        },
    }


def sbe_group_explain(docs_examined: int = 50000, returned: int = 4) -> Dict[str, Any]:
    """A slot-based ``$match`` + ``$group`` plan over an unindexed field."""

    return {
        "explainVersion": "2",
        "queryPlanner": {
            "namespace": "shop.orders",
            "winningPlan": {
                "queryPlan": {
                    "stage": "GROUP",
                    "inputStage": {"stage": "COLLSCAN", "direction": "forward"},
                },
                "slotBasedPlan": {"slots": "$$RESULT=s9", "stages": "[2] project ..."},
            },
        },
        "executionStats": {
            "nReturned": returned,
            "executionTimeMillis": 48,
            "totalKeysExamined": 0,
            "totalDocsExamined": docs_examined,
            "executionStages": {
                "stage": "project",
                "inputStage": {
                    "stage": "group",
                    "inputStage": {
                        "stage": "filter",
                        "inputStage": {"stage": "scan", "numReads": docs_examined},
                    },
                },
            },
        },
    }


ORDER_ID = ObjectId("65f1c2a9e4b0a1b2c3d4e5f6")
UPDATE_ID = ObjectId("65f1c2a9e4b0a1b2c3d4e5f7")
AGG_ID = ObjectId("65f1c2a9e4b0a1b2c3d4e5f8")
BAD_NS_ID = ObjectId("65f1c2a9e4b0a1b2c3d4e5f9")


@pytest.fixture
def profile_docs() -> List[Dict[str, Any]]:
    ts = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    return [
        {
            "_id": ORDER_ID,
            "op": "query",
            "ns": "shop.orders",
            "command": {"find": "orders", "filter": {"status": "pending"}, "comment": "checkout-report"},
            "millis": 420,
            "keysExamined": 0,
            "docsExamined": 50000,
            "nreturned": 3,
            "planSummary": "COLLSCAN",
            "ts": ts,
            "client": "10.0.0.5",
            "user": "app@shop",
        },
        {
            "_id": UPDATE_ID,
            "op": "update",
            "ns": "school.students",
            "command": {"q": {"age": {"$lt": 18}}, "u": {"$set": {"flag": True}}},
            "millis": 250,
            "docsExamined": 1200,
            "ts": ts,
        },
        {
            "_id": AGG_ID,
            "op": "command",
            "ns": "shop.orders",
            "command": {"aggregate": "orders", "cursor": {}},
            "millis": 900,
            "ts": ts,
        },
        {
            "_id": BAD_NS_ID,
            "op": "query",
            "ns": "orphaned",
            "command": {"filter": {}},
            "ts": ts,
        },
        {
            "_id": "legacy-42",
            "op": "remove",
            "ns": "shop.carts",
            "query": {"q": {"expired": True}},
            "millis": 130,
            "ts": ts,
        },
    ]


@pytest.fixture
def profile_collection(profile_docs) -> FakeProfileCollection:
    return FakeProfileCollection(profile_docs)
