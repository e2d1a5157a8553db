"""
Event assembly from client state plus per-call arguments.

The builder reads shared state through the callables it is given, so every
event gets its own snapshot of tags and breadcrumbs; two concurrent
captures may see slightly different state, which is acceptable.
"""

import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional

from .constants import EXCEPTION_LEVEL
from .models import (
    BreadcrumbEntry,
    Event,
    ExceptionValue,
    UserContext,
    exception_chain,
    utc_now_iso,
)


class EventBuilder:
    """Builds :class:`~bugcatch.models.Event` objects.

    Args:
        release: Copied onto every event.
        environment: Copied onto every event.
        get_user: Returns the current user, or ``None``.
        get_tags: Returns a fresh copy of the current tag map.
        get_breadcrumbs: Returns a fresh snapshot of the breadcrumb buffer.
    """

    def __init__(
        self,
        *,
        release: Optional[str],
        environment: Optional[str],
        get_user: Callable[[], Optional[UserContext]],
        get_tags: Callable[[], Dict[str, str]],
        get_breadcrumbs: Callable[[], List[BreadcrumbEntry]],
    ) -> None:
        self.release = release
        self.environment = environment
        self._get_user = get_user
        self._get_tags = get_tags
        self._get_breadcrumbs = get_breadcrumbs

    def build(
        self,
        level: str,
        message: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Event:
        event = Event(event_id=new_event_id(), timestamp=utc_now_iso())
        event.level = level
        event.message = message
        event.release = self.release
        event.environment = self.environment
        event.user = self._get_user()

        tags = self._get_tags()
        if tags:
            event.tags = tags

        if extra:
            event.extra = dict(extra)

        crumbs = self._get_breadcrumbs()
        if crumbs:
            event.breadcrumbs = crumbs

        return event

    def build_exception_event(
        self,
        exc: BaseException,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Event:
        """Build an ``error`` event whose exception list runs root cause first."""
        event = self.build(EXCEPTION_LEVEL, extra=extra)
        event.exceptions = [ExceptionValue.from_exception(e) for e in exception_chain(exc)]
        return event


def new_event_id() -> str:
    return str(uuid.uuid4())
