"""
Minimal JSON text encoder for BugCatch payloads.

Every value is first classified into one of a closed set of kinds
(:class:`JsonKind`) and then rendered by a single recursive :func:`encode`.
Domain entities subclass :class:`JsonEntity` and describe themselves as an
ordered list of ``(key, value)`` pairs; the encoder owns the policy of
dropping pairs whose value is ``None``.  Plain maps and lists keep their
``None`` values as ``null``.
"""

import math
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

# Two-character escapes; any other control character below 0x20 is \u00XX.
_SHORT_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


class JsonKind(Enum):
    """The value kinds the encoder knows how to render."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    LIST = "list"
    MAP = "map"
    ENTITY = "entity"
    OTHER = "other"


class JsonEntity:
    """Base for domain objects that render as JSON objects."""

    def json_fields(self) -> Sequence[Tuple[str, Any]]:
        raise NotImplementedError

    def to_json(self) -> str:
        return encode(self)


def kind_of(value: Any) -> JsonKind:
    """Classify *value* into its :class:`JsonKind`."""
    if value is None:
        return JsonKind.NULL
    if isinstance(value, str):
        return JsonKind.STRING
    # bool before number: ``True`` is an ``int`` too
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, JsonEntity):
        return JsonKind.ENTITY
    if isinstance(value, Mapping):
        return JsonKind.MAP
    if isinstance(value, (list, tuple)):
        return JsonKind.LIST
    return JsonKind.OTHER


def escape(s: Optional[str]) -> str:
    """Quote and escape *s* as a JSON string literal.

    ``None`` renders as the ``null`` literal.  Non-ASCII characters are
    passed through unescaped, except lone surrogates (from
    ``surrogateescape`` decoding), which are written as ``\\uXXXX`` so the
    text stays UTF-8 encodable.
    """
    if s is None:
        return "null"
    out: List[str] = ['"']
    for ch in s:
        short = _SHORT_ESCAPES.get(ch)
        if short is not None:
            out.append(short)
        elif ch < " " or "\ud800" <= ch <= "\udfff":
            out.append("\\u%04x" % ord(ch))
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def encode(value: Any) -> str:
    """Render any supported value as JSON text."""
    kind = kind_of(value)
    if kind is JsonKind.NULL:
        return "null"
    if kind is JsonKind.STRING:
        return escape(value)
    if kind is JsonKind.BOOLEAN:
        return "true" if value else "false"
    if kind is JsonKind.NUMBER:
        return _encode_number(value)
    if kind is JsonKind.LIST:
        return _encode_list(value)
    if kind is JsonKind.MAP:
        return _encode_pairs(value.items(), omit_none=False)
    if kind is JsonKind.ENTITY:
        return _encode_pairs(value.json_fields(), omit_none=True)
    return escape(str(value))


def _encode_number(value: Any) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            return "null"
        return float.__repr__(value)
    # int.__repr__ so IntEnum members render as their number
    return int.__repr__(value)


def _encode_list(items: Iterable[Any]) -> str:
    return "[" + ",".join(encode(item) for item in items) + "]"


def _encode_pairs(pairs: Iterable[Tuple[Any, Any]], *, omit_none: bool) -> str:
    parts: List[str] = []
    for key, val in pairs:
        if omit_none and val is None:
            continue
        parts.append(escape(str(key)) + ":" + encode(val))
    return "{" + ",".join(parts) + "}"
