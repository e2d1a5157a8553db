"""Bounded, thread-safe breadcrumb ring buffer."""

import threading
from collections import deque
from typing import Deque, List

from .models import BreadcrumbEntry


class BreadcrumbBuffer:
    """Keeps the most recent *capacity* breadcrumbs, oldest first.

    Usage::

        buf = BreadcrumbBuffer(100)
        buf.add(BreadcrumbEntry(category="http", message="GET /api/orders"))
        crumbs = buf.get_all()
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"Breadcrumb capacity must be > 0, got {capacity}")
        self._capacity = capacity
        self._entries: Deque[BreadcrumbEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, entry: BreadcrumbEntry) -> None:
        """Append *entry*, evicting the oldest one when full."""
        with self._lock:
            self._entries.append(entry)

    def get_all(self) -> List[BreadcrumbEntry]:
        """Return a snapshot list, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
