"""
Delivery counters for a client.

Tracks how many captures were filtered, discarded by the hook, handed to
the transport, and how the transport fared.  Counters are per client and
reset with it.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class _Counter:
    """Monotonically increasing counter."""

    value: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)

    def inc(self, amount: int = 1) -> None:
        with self.lock:
            self.value += amount


class DeliveryStats:
    """Thread-safe named counters.

    Usage::

        stats = DeliveryStats()
        stats.inc("captured")
        stats.snapshot()["captured"]
    """

    NAMES = ("captured", "filtered", "discarded", "sent", "failed", "metrics_sent")

    def __init__(self) -> None:
        self._counters: Dict[str, _Counter] = {name: _Counter() for name in self.NAMES}

    def inc(self, name: str, amount: int = 1) -> None:
        """Increment a counter; unknown names raise ``KeyError``."""
        self._counters[name].inc(amount)

    def snapshot(self) -> Dict[str, int]:
        return {name: c.value for name, c in self._counters.items()}
