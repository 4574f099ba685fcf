"""Namespace parsing for ``database.collection`` identifiers."""

from __future__ import annotations

from typing import NamedTuple

from ..errors import MalformedNamespaceError


class Namespace(NamedTuple):
    database: str
    collection: str

    def __str__(self) -> str:
        return f"{self.database}.{self.collection}"


def resolve_namespace(namespace: str | None) -> Namespace:
    """Split *namespace* on its first ``.`` into database and collection.

    Only the first separator is honoured, so ``shop.orders.archive`` resolves
    to database ``shop`` and collection ``orders.archive``.
    """

    if not namespace or "." not in namespace:
        raise MalformedNamespaceError(namespace or "")
    database, collection = namespace.split(".", 1)
    if not database or not collection:
        raise MalformedNamespaceError(namespace)
    return Namespace(database, collection)
