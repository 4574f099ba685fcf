import pytest

from slowq_explain.errors import NotFoundError
from slowq_explain.profiler import OperationLocator

from .conftest import FakeProfileCollection, ORDER_ID


def test_exact_object_id_match_is_tried_first(profile_collection):
    operation = OperationLocator(profile_collection).locate(str(ORDER_ID))

    assert operation.identifier == str(ORDER_ID)
    assert profile_collection.queries == [{"_id": ORDER_ID}]


def test_falls_back_to_comment(profile_collection):
    operation = OperationLocator(profile_collection).locate("checkout-report")

    assert operation.identifier == str(ORDER_ID)
    assert profile_collection.queries == [
        {"_id": "checkout-report"},
        {"command.comment": "checkout-report"},
    ]


def test_falls_back_to_literal_identifier(profile_collection):
    operation = OperationLocator(profile_collection).locate("legacy-42")
    assert operation.operation_type == "delete"


def test_valid_object_id_without_match_uses_fallbacks():
    collection = FakeProfileCollection(
        [{"_id": "1", "op": "query", "ns": "a.b", "command": {"comment": "65f1c2a9e4b0a1b2c3d4e5ff"}}]
    )
    operation = OperationLocator(collection).locate("65f1c2a9e4b0a1b2c3d4e5ff")
    assert operation.identifier == "1"
    assert len(collection.queries) == 3


def test_ambiguous_comment_is_not_a_match():
    collection = FakeProfileCollection(
        [
            {"_id": "1", "ns": "a.b", "command": {"comment": "nightly"}},
            {"_id": "2", "ns": "a.b", "command": {"comment": "nightly"}},
        ]
    )
    with pytest.raises(NotFoundError):
        OperationLocator(collection).locate("nightly")


@pytest.mark.parametrize("query_id", ["65f1c2a9e4b0a1b2c3d4e500", "missing", ""])
def test_unknown_identifier_raises_not_found(profile_collection, query_id):
    with pytest.raises(NotFoundError) as excinfo:
        OperationLocator(profile_collection).locate(query_id)
    assert excinfo.value.query_id == query_id
