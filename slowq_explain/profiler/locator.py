"""Locate a single profiled operation by identifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

from bson import ObjectId
from pymongo.collection import Collection

from ..errors import NotFoundError
from ..utils.logging_utils import get_logger
from .records import ProfiledOperation

LOGGER = get_logger("profiler.locator")


@dataclass(frozen=True)
class LookupStrategy:
    """Named predicate builder; returns ``None`` when it cannot apply to an id."""

    name: str
    build_filter: Callable[[str], Optional[Dict[str, Any]]]


def _by_object_id(query_id: str) -> Optional[Dict[str, Any]]:
    if not ObjectId.is_valid(query_id):
        return None
    return {"_id": ObjectId(query_id)}


def _by_literal_id(query_id: str) -> Optional[Dict[str, Any]]:
    return {"_id": query_id}


def _by_comment(query_id: str) -> Optional[Dict[str, Any]]:
    return {"command.comment": query_id}


DEFAULT_STRATEGIES: tuple[LookupStrategy, ...] = (
    LookupStrategy("object_id", _by_object_id),
    LookupStrategy("literal_id", _by_literal_id),
    LookupStrategy("comment", _by_comment),
)


class OperationLocator:
    """Try each lookup strategy in order until one yields a unique match."""

    def __init__(
        self,
        collection: Collection,
        strategies: Sequence[LookupStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.collection = collection
        self.strategies = tuple(strategies)

    def locate(self, query_id: str) -> ProfiledOperation:
        if not query_id:
            raise NotFoundError(query_id)

        for index, strategy in enumerate(self.strategies):
            predicate = strategy.build_filter(query_id)
            if predicate is None:
                continue
            matches = list(self.collection.find(predicate, limit=2))
            if len(matches) == 1:
                if index:
                    LOGGER.info(
                        "Located %s via fallback strategy %s", query_id, strategy.name
                    )
                return ProfiledOperation.from_document(matches[0])
            if matches:
                LOGGER.info(
                    "Strategy %s matched several profile entries for %s; skipping",
                    strategy.name,
                    query_id,
                )

        raise NotFoundError(query_id)
