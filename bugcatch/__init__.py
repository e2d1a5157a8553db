"""
BugCatch - error and message capture for Python applications.

Call ``init`` once at startup, then use the module-level helpers anywhere::

    import bugcatch

    bugcatch.init(dsn=os.environ["BUGCATCH_DSN"], release="1.2.3",
                  environment="production")

    try:
        risky_operation()
    except Exception:
        bugcatch.capture_exception()

    bugcatch.capture_message("Payment gateway timed out", level="warning")
    bugcatch.set_user(UserContext(id="u123", email="alice@example.com"))
    bugcatch.add_breadcrumb(category="db.query", message="SELECT * FROM orders")

Every helper is a no-op returning ``None`` until ``init`` has been called.
"""

import threading
from typing import Any, Mapping, Optional

from .client import Client
from .config import ConfigError, Options, load_options
from .constants import DEFAULT_MESSAGE_LEVEL, SDK_VERSION
from .filters import IgnoreRule
from .models import BreadcrumbEntry, Event, ExceptionValue, Level, StackFrame, UserContext

__version__ = SDK_VERSION

_client: Optional[Client] = None
_lock = threading.Lock()


def init(options: Optional[Options] = None, **kwargs: Any) -> Client:
    """Create the process-wide client, destroying any previous one first.

    Args:
        options: Ready-made ``Options``.  If omitted, *kwargs* are passed to
            ``Options`` directly.

    Raises:
        ConfigError: If the configuration is invalid.  An existing client is
            left untouched in that case.
    """
    global _client
    if options is None:
        options = Options(**kwargs)
    elif kwargs:
        raise TypeError("Pass either an Options object or keyword arguments, not both")
    with _lock:
        if _client is not None:
            _client.destroy()
            _client = None
        _client = Client(options)
        return _client


def destroy() -> None:
    """Destroy the current client, restoring any replaced crash hooks."""
    global _client
    with _lock:
        if _client is not None:
            _client.destroy()
            _client = None


def get_client() -> Optional[Client]:
    """The current client, or ``None`` if not initialised."""
    return _client


def capture_exception(
    exc: Optional[BaseException] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """Capture an exception (``sys.exc_info()`` when *exc* is ``None``)."""
    c = _client
    return c.capture_exception(exc, extra) if c is not None else None


def capture_message(
    message: str,
    level: Optional[str] = DEFAULT_MESSAGE_LEVEL,
    extra: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """Capture a plain message at *level*."""
    c = _client
    return c.capture_message(message, level, extra) if c is not None else None


def set_user(user: Optional[UserContext]) -> None:
    c = _client
    if c is not None:
        c.set_user(user)


def clear_user() -> None:
    c = _client
    if c is not None:
        c.clear_user()


def set_tag(key: str, value: str) -> None:
    c = _client
    if c is not None:
        c.set_tag(key, value)


def remove_tag(key: str) -> None:
    c = _client
    if c is not None:
        c.remove_tag(key)


def add_breadcrumb(crumb: Optional[BreadcrumbEntry] = None, **kwargs: Any) -> None:
    c = _client
    if c is not None:
        c.add_breadcrumb(crumb, **kwargs)


def track_request(method: str, route: str, duration_ms: float, status_code: int) -> None:
    """Report an HTTP request timing; see :meth:`Client.track_request`."""
    c = _client
    if c is not None:
        c.track_request(method, route, duration_ms, status_code)


__all__ = [
    "init",
    "destroy",
    "get_client",
    "capture_exception",
    "capture_message",
    "set_user",
    "clear_user",
    "set_tag",
    "remove_tag",
    "add_breadcrumb",
    "track_request",
    "load_options",
    "Client",
    "Options",
    "ConfigError",
    "IgnoreRule",
    "Event",
    "ExceptionValue",
    "StackFrame",
    "UserContext",
    "BreadcrumbEntry",
    "Level",
]
