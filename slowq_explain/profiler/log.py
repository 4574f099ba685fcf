"""Browsing helpers over the profiler collection."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection

from ..utils.logging_utils import get_logger
from .records import ProfiledOperation

LOGGER = get_logger("profiler.log")

_EMPTY_OVERVIEW = {
    "total_queries": 0,
    "avg_execution_time": 0,
    "max_execution_time": 0,
    "total_keys_examined": 0,
}


class ProfileLog:
    """Read-only queries against ``system.profile``."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def list_operations(
        self,
        *,
        start: Optional[datetime],
        end: Optional[datetime],
        collection: Optional[str] = None,
        limit: int = 100,
    ) -> List[ProfiledOperation]:
        if start is None or end is None:
            raise ValueError('Both "from" and "to" date parameters are required')

        query: Dict[str, Any] = {"ts": {"$gte": start, "$lte": end}}
        if collection and collection != "all":
            query["ns"] = {"$regex": rf"\.{re.escape(collection)}$"}

        cursor = (
            self.collection.find(query)
            .sort("ts", DESCENDING)
            .limit(max(0, int(limit)))
        )
        operations = [ProfiledOperation.from_document(doc) for doc in cursor]
        LOGGER.debug("Listed %d profiled operations", len(operations))
        return operations

    def stats(self) -> Dict[str, Any]:
        overview_rows = list(
            self.collection.aggregate(
                [
                    {
                        "$group": {
                            "_id": None,
                            "total_queries": {"$sum": 1},
                            "avg_execution_time": {"$avg": "$millis"},
                            "max_execution_time": {"$max": "$millis"},
                            "total_keys_examined": {"$sum": "$keysExamined"},
                        }
                    }
                ]
            )
        )
        breakdown = list(
            self.collection.aggregate(
                [
                    {
                        "$group": {
                            "_id": "$op",
                            "count": {"$sum": 1},
                            "avg_time": {"$avg": "$millis"},
                        }
                    },
                    {"$sort": {"count": -1}},
                ]
            )
        )

        overview = dict(_EMPTY_OVERVIEW)
        if overview_rows:
            row = overview_rows[0]
            overview.update({key: row.get(key) or 0 for key in _EMPTY_OVERVIEW})
        return {
            "overview": overview,
            "operation_breakdown": [
                {"operation": row.get("_id"), "count": row.get("count", 0), "avg_time": row.get("avg_time")}
                for row in breakdown
            ],
        }
