"""Flask application entrypoint for the explain diagnostics API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from flask import Flask, jsonify

from .analysis import DiagnosticAssembler
from .profiler import ProfileLog
from .storage import close
from .web import profiler_blueprint


def create_app(
    *,
    assembler: DiagnosticAssembler | None = None,
    profile_log: ProfileLog | None = None,
    client: Any = None,
) -> Flask:
    """Build the app; collaborators left as ``None`` connect lazily on first use."""

    app = Flask(__name__)
    app.slowq_assembler = assembler
    app.slowq_profile_log = profile_log
    app.slowq_mongo_client = client
    app.register_blueprint(profiler_blueprint)

    @app.route("/health")
    def health() -> Any:
        return jsonify(
            {
                "status": "OK",
                "message": "Profiler explain API is running",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    return app


def shutdown(app: Flask) -> None:
    close(getattr(app, "slowq_mongo_client", None))
    app.slowq_mongo_client = None


if __name__ == "__main__":
    application = create_app()
    try:
        application.run(host="0.0.0.0", port=3001)
    finally:
        shutdown(application)
