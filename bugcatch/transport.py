"""
Fire-and-forget HTTP delivery of events and request metrics.

Each send is a task on a small thread pool; the caller gets control back
immediately.  The outcome is only ever logged, from inside the task, and
nothing is retried.  Delivery is best-effort: a failed or slow POST means
the event is lost.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import requests

from .constants import (
    CONNECT_TIMEOUT_SECONDS,
    DEFAULT_MAX_WORKERS,
    EVENT_TIMEOUT_SECONDS,
    JSON_CONTENT_TYPE,
    MAX_LOGGED_BODY_CHARS,
    METRIC_TIMEOUT_SECONDS,
    SDK_USER_AGENT,
)
from .diagnostics.logging import get_sdk_logger
from .diagnostics.stats import DeliveryStats


class Transport:
    """POSTs serialized payloads to the ingest and metrics endpoints.

    Non-2xx responses are logged with the (truncated) response body.
    """

    def __init__(
        self,
        ingest_url: str,
        metrics_url: str,
        *,
        timeout: float = EVENT_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        session: Optional[requests.Session] = None,
        stats: Optional[DeliveryStats] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.ingest_url = ingest_url
        self.metrics_url = metrics_url
        self.timeout = timeout
        self.stats = stats or DeliveryStats()
        self.logger = logger or get_sdk_logger()
        self._session = session or requests.Session()
        self._session.headers.update(
            {"Content-Type": JSON_CONTENT_TYPE, "User-Agent": SDK_USER_AGENT}
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="bugcatch-transport"
        )

    # ── Public API ───────────────────────────────────────────────

    def send_event(self, event_id: str, body: str) -> Optional[Future]:
        """Queue *body* for delivery and return at once.

        Returns:
            The task's ``Future`` (for tests and diagnostics), or ``None``
            if the transport is already closed.
        """
        return self._submit(self._deliver_event, event_id, body)

    def send_metric(self, body: str) -> Optional[Future]:
        """Queue a request-metric body for delivery."""
        return self._submit(self._deliver_metric, body)

    def close(self, wait: bool = False) -> None:
        """Stop accepting sends.  Already queued sends still run."""
        self._executor.shutdown(wait=wait)

    # ── Worker tasks ─────────────────────────────────────────────

    def _submit(self, fn, *args) -> Optional[Future]:
        try:
            return self._executor.submit(fn, *args)
        except RuntimeError as exc:
            # executor shut down
            self.logger.warning("Transport closed, dropping payload: %s", exc)
            return None

    def _deliver_event(self, event_id: str, body: str) -> None:
        try:
            response = self._session.post(
                self.ingest_url,
                data=body.encode("utf-8"),
                timeout=(CONNECT_TIMEOUT_SECONDS, self.timeout),
            )
        except requests.RequestException as exc:
            self._on_event_complete(event_id, None, exc)
            return
        except Exception:
            self.stats.inc("failed")
            self.logger.exception("Unexpected error sending event %s", event_id)
            return
        self._on_event_complete(event_id, response, None)

    def _on_event_complete(
        self,
        event_id: str,
        response: Optional[requests.Response],
        error: Optional[BaseException],
    ) -> None:
        if error is not None:
            self.stats.inc("failed")
            self.logger.warning(
                "Network error for event %s: %s", event_id, error, extra={"event_id": event_id}
            )
            return
        status = response.status_code
        if 200 <= status < 300:
            self.stats.inc("sent")
            self.logger.debug(
                "Event sent: %s (HTTP %s)",
                event_id,
                status,
                extra={"event_id": event_id, "status_code": status},
            )
        else:
            self.stats.inc("failed")
            self.logger.warning(
                "Failed to send event %s: HTTP %s: %s",
                event_id,
                status,
                (response.text or "")[:MAX_LOGGED_BODY_CHARS],
                extra={"event_id": event_id, "status_code": status},
            )

    def _deliver_metric(self, body: str) -> None:
        try:
            response = self._session.post(
                self.metrics_url,
                data=body.encode("utf-8"),
                timeout=(CONNECT_TIMEOUT_SECONDS, METRIC_TIMEOUT_SECONDS),
            )
        except requests.RequestException as exc:
            self.logger.debug("Failed to send metric: %s", exc)
            return
        except Exception:
            self.logger.exception("Unexpected error sending metric")
            return
        if 200 <= response.status_code < 300:
            self.stats.inc("metrics_sent")
        else:
            self.logger.debug("Metric rejected: HTTP %s", response.status_code)
