"""
Secret scrubbing filter for the SDK's own log records.

The DSN carries the project's SDK key as a ``key=`` query parameter, and
debug output echoes the DSN; this filter redacts it along with bearer
tokens, generic secrets and email addresses before a line is emitted.
"""

import logging
import re
from typing import FrozenSet, Pattern

# Patterns that match sensitive values in log messages.
_SENSITIVE_PATTERNS: list[tuple[Pattern, str]] = [
    # DSN / URL query keys: ?key=abc or &key=abc
    (re.compile(r"([?&](?:key|sdk_key|api_key|token)=)[^&\s\"']+", re.IGNORECASE), r"\1[REDACTED]"),
    # Bearer tokens / Authorization headers
    (re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE), r"\1[REDACTED]"),
    # Generic API keys / tokens in key=value or key:value
    (
        re.compile(
            r"(?i)\b(api[_-]?key|token|secret|password|passwd|authorization|"
            r"access_token|refresh_token|private_key)"
            r"(\s*[:=]\s*)"
            r"(['\"]?)([^\s'\"&]{4,})\3"
        ),
        r"\1\2\3[REDACTED]\3",
    ),
    # Email addresses
    (re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+"), "[EMAIL_REDACTED]"),
]

# Record attribute names that should *always* be fully redacted when present.
_REDACT_ATTRS: FrozenSet[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "dsn",
    }
)


class PiiScrubber(logging.Filter):
    """Logging filter that scrubs secrets from log records.

    Attach to a handler or logger::

        handler.addFilter(PiiScrubber())
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        msg = record.getMessage()
        record.msg = scrub_text(msg)
        record.args = None  # prevent double-formatting

        for attr in _REDACT_ATTRS:
            if hasattr(record, attr):
                setattr(record, attr, "[REDACTED]")

        return True


def scrub_text(text: str) -> str:
    """Apply all sensitive-data patterns to *text* and return the result."""
    for pattern, replacement in _SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text
