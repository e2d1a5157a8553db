"""
Flask integration: request breadcrumbs, request metrics, error capture.

Usage::

    bugcatch.init(dsn=...)
    app = Flask(__name__)
    BugCatchFlask(app)
"""

import time
from typing import Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

import bugcatch

from ..client import Client


class BugCatchFlask:
    """Installs request hooks and an error handler on a Flask app.

    Args:
        app: The Flask application.
        client: Client to report to.  Defaults to the one created by
            :func:`bugcatch.init`, looked up on every request.
    """

    def __init__(self, app: Flask, *, client: Optional[Client] = None) -> None:
        self.app = app
        self._client = client
        self._install(app)

    @property
    def client(self) -> Optional[Client]:
        return self._client if self._client is not None else bugcatch.get_client()

    # ── installation ─────────────────────────────────────────────

    def _install(self, app: Flask) -> None:
        app.before_request(self._before)
        app.after_request(self._after)
        app.register_error_handler(Exception, self._handle_exception)

    # ── hooks ────────────────────────────────────────────────────

    def _before(self) -> None:
        g.bugcatch_start = time.monotonic()
        client = self.client
        if client is not None:
            client.add_breadcrumb(
                type="http",
                category="request",
                message=f"{request.method} {request.path}",
            )

    def _after(self, response):
        client = self.client
        start = g.get("bugcatch_start")
        if client is not None and start is not None:
            duration_ms = (time.monotonic() - start) * 1000
            client.track_request(request.method, _route_of_request(), duration_ms, response.status_code)
        return response

    def _handle_exception(self, exc: Exception):
        # Let Flask render HTTP exceptions (400, 404, etc.) normally
        if isinstance(exc, HTTPException):
            return exc

        client = self.client
        event_id = None
        if client is not None:
            event_id = client.capture_exception(
                exc,
                extra={"method": request.method, "path": request.path},
            )
        return jsonify({"error": "Internal Server Error", "event_id": event_id}), 500


def _route_of_request() -> str:
    """The matched rule template (``/orders/<int:id>``) or the raw path."""
    rule = request.url_rule
    return rule.rule if rule is not None else request.path
