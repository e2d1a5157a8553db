"""
Centralised constants for the BugCatch SDK.

Timeouts, defaults and fixed payload values live here so they can be
imported by any module without circular dependencies.
"""

# ── Version ──────────────────────────────────────────────────────
SDK_VERSION = "0.4.0"
SDK_USER_AGENT = f"bugcatch-python/{SDK_VERSION}"

# ── Event payload ────────────────────────────────────────────────
PLATFORM = "python"
DEFAULT_MESSAGE_LEVEL = "info"
EXCEPTION_LEVEL = "error"

# ── Client defaults ──────────────────────────────────────────────
DEFAULT_MAX_BREADCRUMBS = 100
DEFAULT_MAX_WORKERS = 2

# ── HTTP ─────────────────────────────────────────────────────────
CONNECT_TIMEOUT_SECONDS = 5.0
EVENT_TIMEOUT_SECONDS = 10.0
METRIC_TIMEOUT_SECONDS = 5.0
METRICS_PATH_SEGMENT = "/metrics"
JSON_CONTENT_TYPE = "application/json"
MAX_LOGGED_BODY_CHARS = 500  # response body is truncated in failure logs

# ── Route templates ──────────────────────────────────────────────
ROUTE_ID_PLACEHOLDER = ":id"

# ── In-app detection ─────────────────────────────────────────────
# Top-level module names that never count as application code, on top of
# ``sys.stdlib_module_names``.
NON_APP_MODULE_PREFIXES = frozenset(
    {
        "bugcatch",
        "_frozen_importlib",
        "_frozen_importlib_external",
        "importlib",
    }
)

# ── Logging ──────────────────────────────────────────────────────
SDK_LOGGER_NAME = "bugcatch"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB per log file
LOG_BACKUP_COUNT = 5
