"""Health check and metrics endpoints for the operator."""

from __future__ import annotations

import json
import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.wrappers import Response

# Set once kopf has finished its startup handlers
_ready = threading.Event()


def mark_ready() -> None:
    _ready.set()


def mark_not_ready() -> None:
    _ready.clear()


def _json_response(payload: dict[str, Any], status: int) -> Response:
    return Response(json.dumps(payload, separators=(",", ":")), mimetype="application/json", status=status)


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    ``/healthz`` answers as long as the process serves requests; ``/readyz``
    answers 503 until the operator has started.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            return _json_response({"status": "ok"}, 200)(environ, start_response)
        if path == "/readyz":
            if _ready.is_set():
                return _json_response({"status": "ready"}, 200)(environ, start_response)
            return _json_response({"status": "starting"}, 503)(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app
