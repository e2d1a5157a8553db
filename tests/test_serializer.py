"""Tests for the JSON encoder: escaping, value kinds, entity field omission."""

import json
from enum import IntEnum

from bugcatch.models import BreadcrumbEntry, StackFrame, UserContext
from bugcatch.serializer import JsonKind, encode, escape, kind_of


class _Priority(IntEnum):
    HIGH = 1


# ── escape ───────────────────────────────────────────────────────


class TestEscape:
    def test_plain_string(self):
        assert escape("hello") == '"hello"'

    def test_quotes_and_backslash(self):
        assert escape('say "hi"') == '"say \\"hi\\""'
        assert escape("C:\\temp") == '"C:\\\\temp"'

    def test_short_control_escapes(self):
        assert escape("line1\nline2") == '"line1\\nline2"'
        assert escape("a\tb\rc\bd\fe") == '"a\\tb\\rc\\bd\\fe"'

    def test_other_control_characters_use_unicode_escape(self):
        assert escape("\x01") == '"\\u0001"'
        assert escape("\x1f") == '"\\u001f"'

    def test_non_ascii_passes_through(self):
        assert escape("café ☕") == '"café ☕"'

    def test_lone_surrogate_uses_unicode_escape(self):
        # os.fsdecode of a non-UTF-8 path leaves lone surrogates behind
        text = "caf\udce9"
        escaped = escape(text)
        assert escaped == '"caf\\udce9"'
        escaped.encode("utf-8")
        assert json.loads(escaped) == text

    def test_none_is_null_literal(self):
        assert escape(None) == "null"

    def test_escaped_message_round_trips_through_json(self):
        message = 'quote " backslash \\ newline \n bell \x07 end'
        assert json.loads(escape(message)) == message


# ── kind_of / encode ─────────────────────────────────────────────


class TestEncode:
    def test_kind_classification(self):
        assert kind_of(None) is JsonKind.NULL
        assert kind_of("x") is JsonKind.STRING
        assert kind_of(True) is JsonKind.BOOLEAN
        assert kind_of(3) is JsonKind.NUMBER
        assert kind_of(2.5) is JsonKind.NUMBER
        assert kind_of([1]) is JsonKind.LIST
        assert kind_of((1,)) is JsonKind.LIST
        assert kind_of({"a": 1}) is JsonKind.MAP
        assert kind_of(UserContext(id="u1")) is JsonKind.ENTITY
        assert kind_of(object()) is JsonKind.OTHER

    def test_booleans_are_not_numbers(self):
        assert encode(True) == "true"
        assert encode(False) == "false"

    def test_numbers(self):
        assert encode(42) == "42"
        assert encode(-1.5) == "-1.5"
        assert encode(_Priority.HIGH) == "1"

    def test_non_finite_floats_render_null(self):
        assert encode(float("nan")) == "null"
        assert encode(float("inf")) == "null"

    def test_maps_and_lists_keep_nulls(self):
        text = encode({"a": None, "b": [1, None, "x"]})
        assert json.loads(text) == {"a": None, "b": [1, None, "x"]}

    def test_map_keys_are_stringified(self):
        assert json.loads(encode({1: "one"})) == {"1": "one"}

    def test_unknown_objects_use_str(self):
        class Thing:
            def __str__(self):
                return "thing!"

        assert encode(Thing()) == '"thing!"'

    def test_nested_structure_is_valid_json(self):
        value = {"user": UserContext(id="u1"), "list": [{"k": True}], "n": 0}
        assert json.loads(encode(value)) == {
            "user": {"id": "u1"},
            "list": [{"k": True}],
            "n": 0,
        }


# ── entities ─────────────────────────────────────────────────────


class TestEntityEncoding:
    def test_absent_entity_fields_are_omitted(self):
        data = json.loads(encode(UserContext(email="a@b.com")))
        assert data == {"email": "a@b.com"}

    def test_empty_user_is_empty_object(self):
        assert encode(UserContext()) == "{}"

    def test_stack_frame_always_has_in_app(self):
        data = json.loads(StackFrame(in_app=False).to_json())
        assert data == {"in_app": False}

    def test_breadcrumb_data_preserves_nulls(self):
        crumb = BreadcrumbEntry(category="http", data={"status": 200, "body": None}, timestamp="t")
        data = json.loads(crumb.to_json())
        assert data == {"timestamp": "t", "category": "http", "data": {"status": 200, "body": None}}

    def test_breadcrumb_empty_data_omitted(self):
        data = json.loads(BreadcrumbEntry(message="m", data={}, timestamp="t").to_json())
        assert "data" not in data
