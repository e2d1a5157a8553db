"""
Route templating for request metrics.

Raw request paths are reduced to templates (``/api/orders/:id``) so that
metrics group by route rather than by individual resource ids.
"""

import re
from urllib.parse import urlsplit

from .constants import METRICS_PATH_SEGMENT, ROUTE_ID_PLACEHOLDER

_UUID_SEGMENT_RE = re.compile(
    r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}(?=/|$)"
)
_NUMERIC_SEGMENT_RE = re.compile(r"/[0-9]{1,20}(?=/|$)")


def normalize_route(route: str) -> str:
    """Return the templated path of *route* (a path or a full URL).

    UUID segments are replaced first, then purely numeric ones::

        >>> normalize_route("/api/orders/12345/items/67?page=2")
        '/api/orders/:id/items/:id'
    """
    path = _extract_path(route)
    path = _UUID_SEGMENT_RE.sub("/" + ROUTE_ID_PLACEHOLDER, path)
    return _NUMERIC_SEGMENT_RE.sub("/" + ROUTE_ID_PLACEHOLDER, path)


def build_metrics_url(dsn: str) -> str:
    """Insert the metrics segment before the DSN's query string.

    ``http://host/ingest/p1?key=k`` becomes ``http://host/ingest/p1/metrics?key=k``.
    """
    base, sep, query = dsn.partition("?")
    if not sep:
        return dsn + METRICS_PATH_SEGMENT
    return f"{base}{METRICS_PATH_SEGMENT}?{query}"


def _extract_path(route: str) -> str:
    try:
        path = urlsplit(route).path
    except ValueError:
        path = ""
    if path:
        return path
    return route.split("?", 1)[0]
