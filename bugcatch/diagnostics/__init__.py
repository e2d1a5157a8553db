"""
Diagnostics for the SDK itself: logging, secret scrubbing, delivery stats.

Provides:
- ``setup_sdk_logger``: stderr (and optional file) logger for SDK output
- ``PiiScrubber``: filters DSN keys and other secrets from log records
- ``DeliveryStats``: per-client capture and delivery counters
"""

from .logging import get_sdk_logger, setup_sdk_logger
from .pii import PiiScrubber
from .stats import DeliveryStats

__all__ = [
    "setup_sdk_logger",
    "get_sdk_logger",
    "PiiScrubber",
    "DeliveryStats",
]
