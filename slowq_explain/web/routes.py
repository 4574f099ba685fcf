"""Flask blueprint exposing profiler browsing and explain diagnostics."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional

from bson import json_util
from flask import Blueprint, current_app, jsonify, request

from ..analysis import DiagnosticAssembler
from ..config import settings
from ..errors import MalformedNamespaceError, NotFoundError
from ..profiler import ProfileLog
from ..storage import connect
from ..utils.logging_utils import get_logger

LOGGER = get_logger("web.routes")

bp = Blueprint("slowq_explain", __name__, url_prefix="/api/profiler")


def _get_client() -> Any:
    client = getattr(current_app, "slowq_mongo_client", None)
    if client is None:
        LOGGER.info("Opening MongoDB client for %s", settings.database_name)
        client, _database = connect(settings)
        current_app.slowq_mongo_client = client
    return client


def _get_assembler() -> DiagnosticAssembler:
    assembler: DiagnosticAssembler | None = getattr(current_app, "slowq_assembler", None)
    if assembler is None:
        assembler = DiagnosticAssembler.from_client(_get_client(), settings)
        current_app.slowq_assembler = assembler
    return assembler


def _get_profile_log() -> ProfileLog:
    profile_log: ProfileLog | None = getattr(current_app, "slowq_profile_log", None)
    if profile_log is None:
        database = _get_client()[settings.database_name]
        profile_log = ProfileLog(database[settings.profile_collection])
        current_app.slowq_profile_log = profile_log
    return profile_log


def _jsonable(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Render BSON values (ObjectId, datetimes) as Extended JSON."""

    return json.loads(json_util.dumps(payload, json_options=json_util.RELAXED_JSON_OPTIONS))


def _parse_datetime(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _safe_int(raw: Any, default: int) -> int:
    try:
        return int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default


def _error(error: str, message: str, status: int) -> Any:
    return jsonify({"error": error, "message": message}), status


@bp.route("", strict_slashes=False)
def list_profiled_operations() -> Any:
    raw_from = request.args.get("from")
    raw_to = request.args.get("to")
    if not raw_from or not raw_to:
        return _error(
            "Missing required parameters",
            'Both "from" and "to" date parameters are required',
            400,
        )
    try:
        start = _parse_datetime(raw_from)
        end = _parse_datetime(raw_to)
    except ValueError as exc:
        return _error("Invalid date parameter", str(exc), 400)

    collection = request.args.get("collection") or "all"
    limit = _safe_int(request.args.get("limit"), settings.default_list_limit)
    try:
        operations = _get_profile_log().list_operations(
            start=start, end=end, collection=collection, limit=limit
        )
    except Exception as exc:
        LOGGER.exception("Profiler query error")
        return _error("Failed to retrieve profiler data", str(exc), 500)

    data = [operation.as_summary() for operation in operations]
    return jsonify(
        _jsonable(
            {
                "success": True,
                "data": data,
                "total": len(data),
                "query": {
                    "from": raw_from,
                    "to": raw_to,
                    "collection": collection,
                    "limit": limit,
                },
            }
        )
    )


@bp.route("/explain")
def explain_operation() -> Any:
    query_id = request.args.get("queryId")
    if not query_id:
        return _error("Missing required parameter", 'Parameter "queryId" is required', 400)

    try:
        response = _get_assembler().diagnose(query_id)
    except NotFoundError as exc:
        return _error("Query not found", str(exc), 404)
    except MalformedNamespaceError as exc:
        return _error("Invalid namespace", str(exc), 400)
    except Exception as exc:
        LOGGER.exception("Explain route error")
        return _error("Failed to retrieve explain plan", str(exc), 500)

    return jsonify(_jsonable(response.as_dict()))


@bp.route("/stats")
def profiler_stats() -> Any:
    try:
        stats = _get_profile_log().stats()
    except Exception as exc:
        LOGGER.exception("Stats query error")
        return _error("Failed to retrieve profiler statistics", str(exc), 500)
    return jsonify(_jsonable({"success": True, "data": stats}))
