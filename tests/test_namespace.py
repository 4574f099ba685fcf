import pytest

from slowq_explain.errors import MalformedNamespaceError
from slowq_explain.profiler import resolve_namespace


def test_splits_on_first_separator():
    namespace = resolve_namespace("shop.orders")
    assert namespace.database == "shop"
    assert namespace.collection == "orders"
    assert str(namespace) == "shop.orders"


def test_only_first_separator_is_honoured():
    assert resolve_namespace("shop.orders.archive") == ("shop", "orders.archive")


@pytest.mark.parametrize("raw", ["orders", "shop.", ".orders", "", None])
def test_rejects_unparseable_namespaces(raw):
    with pytest.raises(MalformedNamespaceError):
        resolve_namespace(raw)
