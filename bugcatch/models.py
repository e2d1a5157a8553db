"""
Event data model: events, exceptions, stack frames, users and breadcrumbs.

All types render themselves through :mod:`bugcatch.serializer` by listing
their fields; absent optional fields are left out of the JSON document.
"""

import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import FrameType, TracebackType
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import NON_APP_MODULE_PREFIXES, PLATFORM
from .serializer import JsonEntity

_STDLIB_MODULES = frozenset(getattr(sys, "stdlib_module_names", ()))


class Level:
    """Severity levels understood by the ingest service."""

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def qualified_type_name(exc: BaseException) -> str:
    """``module.QualName`` for *exc*'s type; builtins are left unprefixed."""
    cls = type(exc)
    module = cls.__module__
    if module in (None, "builtins"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def is_in_app(module: Optional[str]) -> bool:
    """Return ``False`` for standard-library and SDK-internal modules."""
    if not module:
        return True
    top = module.split(".", 1)[0]
    if top in _STDLIB_MODULES or top in NON_APP_MODULE_PREFIXES:
        return False
    return True


# ── Stack frames ─────────────────────────────────────────────────


@dataclass(frozen=True)
class StackFrame(JsonEntity):
    """A single frame of a Python traceback."""

    filename: Optional[str] = None
    lineno: Optional[int] = None
    function: Optional[str] = None
    in_app: bool = True

    @classmethod
    def from_frame(cls, frame: FrameType, lineno: Optional[int]) -> "StackFrame":
        code = frame.f_code
        module = frame.f_globals.get("__name__")
        qualname = getattr(code, "co_qualname", code.co_name)
        function = f"{module}.{qualname}" if module else qualname
        return cls(
            filename=code.co_filename or None,
            lineno=lineno if lineno and lineno > 0 else None,
            function=function,
            in_app=is_in_app(module),
        )

    def json_fields(self):
        return (
            ("filename", self.filename),
            ("lineno", self.lineno),
            ("function", self.function),
            ("in_app", self.in_app),
        )


# ── Exceptions ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ExceptionValue(JsonEntity):
    """One exception of a causal chain, with its frames outermost first."""

    type: str
    value: Optional[str] = None
    frames: Tuple[StackFrame, ...] = ()

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ExceptionValue":
        return cls(
            type=qualified_type_name(exc),
            value=_message_of(exc),
            frames=_frames_from_traceback(exc.__traceback__),
        )

    def json_fields(self):
        return (
            ("type", self.type),
            ("value", self.value),
            ("stacktrace", {"frames": list(self.frames)}),
        )


def _message_of(exc: BaseException) -> Optional[str]:
    try:
        return str(exc) or None
    except Exception:
        return f"<unprintable {qualified_type_name(exc)} object>"


def _frames_from_traceback(tb: Optional[TracebackType]) -> Tuple[StackFrame, ...]:
    if tb is None:
        return ()
    return tuple(StackFrame.from_frame(frame, lineno) for frame, lineno in traceback.walk_tb(tb))


# ── User ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UserContext(JsonEntity):
    """User identity attached to every subsequent event."""

    id: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None

    def json_fields(self):
        return (
            ("id", self.id),
            ("email", self.email),
            ("username", self.username),
        )


# ── Breadcrumbs ──────────────────────────────────────────────────


@dataclass(frozen=True)
class BreadcrumbEntry(JsonEntity):
    """A timestamped record of something that happened before an error.

    Usage::

        client.add_breadcrumb(BreadcrumbEntry(category="db.query",
                                              message="SELECT * FROM orders"))
    """

    type: Optional[str] = None
    category: Optional[str] = None
    message: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def json_fields(self):
        return (
            ("timestamp", self.timestamp),
            ("type", self.type),
            ("category", self.category),
            ("message", self.message),
            ("data", self.data or None),
        )


# ── Event ────────────────────────────────────────────────────────


@dataclass
class Event(JsonEntity):
    """The document sent to the ingest endpoint.

    Created by :class:`~bugcatch.events.EventBuilder`.  A ``before_send``
    hook may change any field except ``event_id``.
    """

    event_id: str
    timestamp: str
    level: Optional[str] = None
    message: Optional[str] = None
    release: Optional[str] = None
    environment: Optional[str] = None
    user: Optional[UserContext] = None
    tags: Optional[Dict[str, str]] = None
    extra: Optional[Dict[str, Any]] = None
    exceptions: Optional[List[ExceptionValue]] = None
    breadcrumbs: Optional[List[BreadcrumbEntry]] = None
    platform: str = field(default=PLATFORM, init=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "event_id" and "event_id" in self.__dict__:
            raise AttributeError("event_id is assigned once at creation")
        super().__setattr__(name, value)

    def json_fields(self):
        exceptions = {"values": self.exceptions} if self.exceptions else None
        return (
            ("event_id", self.event_id),
            ("timestamp", self.timestamp),
            ("platform", self.platform),
            ("level", self.level),
            ("message", self.message),
            ("release", self.release),
            ("environment", self.environment),
            ("user", self.user),
            ("tags", _non_null_tags(self.tags)),
            ("extra", self.extra or None),
            ("exception", exceptions),
            ("breadcrumbs", self.breadcrumbs or None),
        )


def _non_null_tags(tags: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    if not tags:
        return None
    kept = {k: v for k, v in tags.items() if v is not None}
    return kept or None


def exception_chain(exc: BaseException) -> Sequence[BaseException]:
    """Walk *exc*'s causes and return them innermost cause first.

    Follows ``__cause__``, or ``__context__`` unless it was suppressed with
    ``raise ... from None``.  Cycles are cut at the first repeat.
    """
    chain: List[BaseException] = []
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    chain.reverse()
    return chain
