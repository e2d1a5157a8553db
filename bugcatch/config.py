"""
Client configuration: the ``Options`` value object and its loaders.

``Options`` is immutable once built and validates itself on construction,
so a bad DSN fails at startup rather than on the first capture.
``load_options`` assembles one from an optional JSON file, ``BUGCATCH_*``
environment variables and keyword overrides, in that order of precedence
(later wins).
"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Pattern, Tuple, Union

from dotenv import find_dotenv, load_dotenv

from .constants import DEFAULT_MAX_BREADCRUMBS, DEFAULT_MAX_WORKERS, EVENT_TIMEOUT_SECONDS
from .filters import IgnoreRule
from .models import Event

BeforeSend = Callable[[Event], Optional[Event]]
IgnoreSpec = Union[IgnoreRule, str, Pattern]


class ConfigError(ValueError):
    """Raised when the SDK configuration is missing or invalid."""


@dataclass(frozen=True)
class Options:
    """SDK configuration.

    Usage::

        options = Options(
            dsn="https://ingest.example.com/ingest/my-project?key=abc",
            release="1.2.3",
            environment="production",
            ignore_errors=["Connection refused", re.compile(r"Timeout.*")],
        )

    Args:
        dsn: Ingest URL; required and non-blank.
        release: Application version attached to every event.
        environment: Deployment environment attached to every event.
        debug: Log SDK activity at DEBUG level.
        max_breadcrumbs: Breadcrumb ring buffer capacity (> 0).
        auto_capture_errors: Install uncaught-exception hooks.
        ignore_errors: ``str`` entries match literally, compiled patterns
            as regular expressions.
        before_send: Called with each event before it is sent; return
            ``None`` to drop it.
        send_timeout: Read timeout in seconds for event POSTs.
        max_workers: Size of the delivery thread pool.
    """

    dsn: str
    release: Optional[str] = None
    environment: Optional[str] = None
    debug: bool = False
    max_breadcrumbs: int = DEFAULT_MAX_BREADCRUMBS
    auto_capture_errors: bool = True
    ignore_errors: Tuple[IgnoreRule, ...] = field(default_factory=tuple)
    before_send: Optional[BeforeSend] = None
    send_timeout: float = EVENT_TIMEOUT_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        if not isinstance(self.dsn, str) or not self.dsn.strip():
            raise ConfigError("BugCatch DSN must not be blank")
        if self.max_breadcrumbs <= 0:
            raise ConfigError(f"max_breadcrumbs must be > 0, got {self.max_breadcrumbs}")
        if self.max_workers <= 0:
            raise ConfigError(f"max_workers must be > 0, got {self.max_workers}")
        if self.before_send is not None and not callable(self.before_send):
            raise ConfigError("before_send must be callable")
        try:
            rules = tuple(IgnoreRule.coerce(r) for r in _as_iterable(self.ignore_errors))
        except (TypeError, re.error) as exc:
            raise ConfigError(f"Invalid ignore rule: {exc}") from exc
        # frozen dataclass: bypass __setattr__ to store the normalised rules
        object.__setattr__(self, "ignore_errors", rules)


def _as_iterable(value: Any) -> Iterable[IgnoreSpec]:
    if value is None:
        return ()
    if isinstance(value, (str, re.Pattern, IgnoreRule)):
        return (value,)
    return value


# ── Loading ──────────────────────────────────────────────────────

# JSON key -> Options field
_FILE_KEYS: Dict[str, str] = {
    "dsn": "dsn",
    "release": "release",
    "environment": "environment",
    "debug": "debug",
    "maxBreadcrumbs": "max_breadcrumbs",
    "autoCaptureErrors": "auto_capture_errors",
    "sendTimeout": "send_timeout",
    "maxWorkers": "max_workers",
}
_BOOL_FIELDS = frozenset({"debug", "auto_capture_errors"})
_INT_FIELDS = frozenset({"max_breadcrumbs", "max_workers"})

# Environment variable -> (Options field, converter)
_ENV_KEYS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "BUGCATCH_DSN": ("dsn", str),
    "BUGCATCH_RELEASE": ("release", str),
    "BUGCATCH_ENVIRONMENT": ("environment", str),
    "BUGCATCH_DEBUG": ("debug", lambda v: _parse_bool("BUGCATCH_DEBUG", v)),
    "BUGCATCH_MAX_BREADCRUMBS": ("max_breadcrumbs", lambda v: _parse_int("BUGCATCH_MAX_BREADCRUMBS", v)),
    "BUGCATCH_AUTO_CAPTURE_ERRORS": (
        "auto_capture_errors",
        lambda v: _parse_bool("BUGCATCH_AUTO_CAPTURE_ERRORS", v),
    ),
}


def load_options(config_path: Optional[Union[str, Path]] = None, **overrides: Any) -> Options:
    """
    Build ``Options`` from a JSON file, the environment and *overrides*.

    ``${ENV_VAR:-default}`` placeholders in the file's string values are
    resolved first.  A ``.env`` file in the working directory is loaded
    (without overriding variables already set).

    Args:
        config_path: Optional path to a JSON config file with camelCase keys.
        **overrides: ``Options`` fields that win over file and environment.

    Returns:
        Validated ``Options``.

    Raises:
        ConfigError: If the file cannot be read or parsed, or the result is invalid.
    """
    load_dotenv(find_dotenv(usecwd=True))
    values: Dict[str, Any] = {}

    if config_path is not None:
        values.update(_read_config_file(Path(config_path)))

    for var, (name, convert) in _ENV_KEYS.items():
        raw = os.environ.get(var)
        if raw is not None and raw != "":
            values[name] = convert(raw)

    values.update(overrides)

    if "dsn" not in values:
        raise ConfigError("BugCatch DSN is not configured (set BUGCATCH_DSN or pass dsn=)")
    return Options(**values)


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration in {path} must be a JSON object")

    raw = _resolve(raw)
    values: Dict[str, Any] = {}
    for key, name in _FILE_KEYS.items():
        if key not in raw:
            continue
        value = raw[key]
        # placeholders always resolve to strings
        if isinstance(value, str) and name in _BOOL_FIELDS:
            value = _parse_bool(key, value)
        elif isinstance(value, str) and name in _INT_FIELDS:
            value = _parse_int(key, value)
        values[name] = value

    rules = [IgnoreRule.literal(s) for s in raw.get("ignoreErrors", [])]
    try:
        rules += [IgnoreRule.pattern(p) for p in raw.get("ignoreErrorPatterns", [])]
    except re.error as exc:
        raise ConfigError(f"Invalid ignoreErrorPatterns entry in {path}: {exc}") from exc
    if rules:
        values["ignore_errors"] = tuple(rules)
    return values


# ── Private helpers ──────────────────────────────────────────────

_PLACEHOLDER_RE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _resolve(obj: Any) -> Any:
    """Recursively resolve ``${ENV_VAR:-default}`` in string values."""
    if isinstance(obj, str):
        return _PLACEHOLDER_RE.sub(_replace_match, obj)
    elif isinstance(obj, dict):
        return {k: _resolve(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_resolve(v) for v in obj]
    return obj


def _replace_match(m: re.Match) -> str:
    var = m.group(1)
    default = m.group(2) if m.group(2) is not None else ""
    return os.environ.get(var, default)


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
