"""
The BugCatch client: shared state plus the capture pipeline.

A capture runs filter → build → ``before_send`` → serialize → send on the
calling thread, up to handing the payload to the transport; delivery
itself happens in the background.  No public method raises: failures are
logged through the SDK logger and the call returns ``None``.
"""

import sys
import threading
from typing import Any, Dict, Mapping, Optional

from .breadcrumbs import BreadcrumbBuffer
from .config import Options
from .constants import DEFAULT_MESSAGE_LEVEL
from .diagnostics.logging import setup_sdk_logger
from .diagnostics.stats import DeliveryStats
from .events import EventBuilder
from .filters import ErrorFilter
from .handlers import CrashHandlerToken, install_crash_handler
from .models import BreadcrumbEntry, Event, UserContext
from .routes import build_metrics_url, normalize_route
from .serializer import encode, escape
from .transport import Transport


class Client:
    """Captures exceptions and messages and ships them to the ingest endpoint.

    Usage::

        client = Client(Options(dsn=os.environ["BUGCATCH_DSN"], release="1.2.3"))

        try:
            risky_operation()
        except Exception:
            client.capture_exception()

        client.capture_message("Payment gateway timed out", level="warning")
        client.destroy()

    Most applications go through :func:`bugcatch.init` instead, which keeps
    exactly one client per process.
    """

    def __init__(self, options: Options, *, transport: Optional[Transport] = None) -> None:
        self.options = options
        self.logger = setup_sdk_logger(debug=options.debug)
        self.ingest_url = options.dsn
        self.metrics_url = build_metrics_url(options.dsn)
        self._stats = DeliveryStats()
        self._transport = transport or Transport(
            self.ingest_url,
            self.metrics_url,
            timeout=options.send_timeout,
            max_workers=options.max_workers,
            stats=self._stats,
            logger=self.logger,
        )
        self._filter = ErrorFilter(options.ignore_errors)
        self._breadcrumbs = BreadcrumbBuffer(options.max_breadcrumbs)
        self._tags: Dict[str, str] = {}
        self._tags_lock = threading.Lock()
        self._user: Optional[UserContext] = None
        self._builder = EventBuilder(
            release=options.release,
            environment=options.environment,
            get_user=lambda: self._user,
            get_tags=self._tags_snapshot,
            get_breadcrumbs=self._breadcrumbs.get_all,
        )
        self._crash_token: Optional[CrashHandlerToken] = None
        self._destroyed = False
        self._destroy_lock = threading.Lock()

        if options.auto_capture_errors:
            self._crash_token = install_crash_handler(self._capture_crash)

        self.logger.debug("BugCatch initialized. Ingest: %s", self.ingest_url)

    # ── Capture ──────────────────────────────────────────────────

    def capture_exception(
        self,
        exc: Optional[BaseException] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """Capture an exception and send it.

        Args:
            exc: The exception.  If ``None``, uses ``sys.exc_info()``.
            extra: Additional context attached as the event's ``extra``.

        Returns:
            The generated ``event_id``, or ``None`` if there was nothing to
            capture or the event was ignored or dropped.
        """
        try:
            if exc is None:
                exc = sys.exc_info()[1]
                if exc is None:
                    return None
            if self._filter.should_ignore(exc):
                self._stats.inc("filtered")
                self.logger.debug("Ignoring exception: %s", exc)
                return None
            event = self._builder.build_exception_event(exc, extra)
            return self._send(event)
        except Exception:
            self.logger.exception("Failed to capture exception")
            return None

    def capture_message(
        self,
        message: str,
        level: Optional[str] = DEFAULT_MESSAGE_LEVEL,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """Capture a plain message.

        Args:
            message: The message text.
            level: One of ``fatal``, ``error``, ``warning``, ``info``, ``debug``.
            extra: Additional context.

        Returns:
            The generated ``event_id``, or ``None`` if dropped.
        """
        try:
            event = self._builder.build(level or DEFAULT_MESSAGE_LEVEL, message, extra)
            return self._send(event)
        except Exception:
            self.logger.exception("Failed to capture message")
            return None

    # ── Context ──────────────────────────────────────────────────

    def set_user(self, user: Optional[UserContext]) -> None:
        """Attach *user* to all subsequent events (``None`` clears it)."""
        self._user = user

    def clear_user(self) -> None:
        self._user = None

    def set_tag(self, key: str, value: str) -> None:
        """Attach a tag to all subsequent events.  ``None`` keys or values are ignored."""
        if key is None or value is None:
            return
        with self._tags_lock:
            self._tags[str(key)] = str(value)

    def remove_tag(self, key: str) -> None:
        if key is None:
            return
        with self._tags_lock:
            self._tags.pop(key, None)

    def add_breadcrumb(self, crumb: Optional[BreadcrumbEntry] = None, **kwargs: Any) -> None:
        """Record a breadcrumb.

        Pass a :class:`BreadcrumbEntry`, or its fields as keyword arguments::

            client.add_breadcrumb(category="db.query", message="SELECT 1")
        """
        try:
            if crumb is None:
                if not kwargs:
                    return
                crumb = BreadcrumbEntry(**kwargs)
            self._breadcrumbs.add(crumb)
        except Exception:
            self.logger.exception("Failed to add breadcrumb")

    # ── Metrics ──────────────────────────────────────────────────

    def track_request(
        self,
        method: str,
        route: str,
        duration_ms: float,
        status_code: int,
    ) -> None:
        """Report the timing of one HTTP request.

        *route* may be a raw path or URL; UUID and numeric segments are
        normalised to ``:id`` so metrics group by route template.
        """
        if method is None or route is None:
            return
        try:
            body = (
                "{"
                f'"method":{escape(method.upper())},'
                f'"route":{escape(normalize_route(route))},'
                f'"duration_ms":{int(duration_ms)},'
                f'"status_code":{int(status_code)}'
                "}"
            )
            self._transport.send_metric(body)
        except Exception:
            self.logger.exception("Failed to track request")

    # ── Lifecycle ────────────────────────────────────────────────

    def destroy(self) -> None:
        """Restore the previous crash hooks and clear all client state.

        Idempotent.  In-flight sends are neither awaited nor cancelled.
        """
        with self._destroy_lock:
            if self._destroyed:
                return
            self._destroyed = True
        try:
            if self._crash_token is not None:
                self._crash_token.restore()
                self._crash_token = None
            self._breadcrumbs.clear()
            with self._tags_lock:
                self._tags.clear()
            self._user = None
            self._transport.close(wait=False)
            self.logger.debug("BugCatch destroyed.")
        except Exception:
            self.logger.exception("Failed to destroy client")

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def user(self) -> Optional[UserContext]:
        return self._user

    @property
    def tags(self) -> Dict[str, str]:
        """A copy of the current tags."""
        return self._tags_snapshot()

    @property
    def breadcrumbs(self) -> BreadcrumbBuffer:
        return self._breadcrumbs

    @property
    def crash_handler_installed(self) -> bool:
        return self._crash_token is not None and self._crash_token.installed

    def stats(self) -> Dict[str, int]:
        """Capture and delivery counters for this client."""
        return self._stats.snapshot()

    # ── Internal helpers ─────────────────────────────────────────

    def _tags_snapshot(self) -> Dict[str, str]:
        with self._tags_lock:
            return dict(self._tags)

    def _capture_crash(self, exc: BaseException, thread_name: str) -> None:
        self.capture_exception(exc, {"thread": thread_name})

    def _send(self, event: Event) -> Optional[str]:
        self._stats.inc("captured")
        hook = self.options.before_send
        if hook is not None:
            try:
                event = hook(event)
            except Exception:
                self._stats.inc("discarded")
                self.logger.exception("before_send hook raised; event dropped")
                return None
            if event is None:
                self._stats.inc("discarded")
                self.logger.debug("Event dropped by before_send hook.")
                return None

        body = encode(event)
        self._transport.send_event(event.event_id, body)
        return event.event_id
