"""Tests for the event data model: frames, exception chains, event JSON shape."""

import json

import pytest

from bugcatch.models import (
    BreadcrumbEntry,
    Event,
    ExceptionValue,
    StackFrame,
    UserContext,
    exception_chain,
    is_in_app,
    qualified_type_name,
)


class AppError(Exception):
    pass


def _raise_from_app():
    raise AppError("from app")


# ── Stack frames ─────────────────────────────────────────────────


class TestStackFrames:
    def test_in_app_flags(self):
        assert is_in_app("myapp.services.orders") is True
        assert is_in_app("__main__") is True
        assert is_in_app("json.decoder") is False
        assert is_in_app("os") is False
        assert is_in_app("bugcatch.client") is False

    def test_missing_module_counts_as_app(self):
        assert is_in_app(None) is True

    def test_frames_are_outermost_first(self):
        try:
            _raise_from_app()
        except AppError as exc:
            value = ExceptionValue.from_exception(exc)

        functions = [f.function for f in value.frames]
        assert functions[0].endswith("test_frames_are_outermost_first")
        assert functions[-1].endswith("_raise_from_app")
        assert all(f.lineno and f.lineno > 0 for f in value.frames)
        assert value.frames[-1].in_app is True

    def test_stdlib_frame_not_in_app(self):
        try:
            json.loads("{")
        except ValueError as exc:
            value = ExceptionValue.from_exception(exc)

        assert value.frames[-1].in_app is False
        assert value.frames[0].in_app is True

    def test_non_positive_lineno_is_absent(self):
        frame = StackFrame(filename="x.py", lineno=None, function="f", in_app=True)
        assert "lineno" not in json.loads(frame.to_json())


# ── Exceptions ───────────────────────────────────────────────────


class TestExceptionValue:
    def test_type_name_of_builtin(self):
        assert qualified_type_name(ValueError("x")) == "ValueError"

    def test_type_name_includes_module(self):
        assert qualified_type_name(AppError("x")).endswith("AppError")
        assert "." in qualified_type_name(AppError("x"))

    def test_empty_message_is_absent(self):
        value = ExceptionValue.from_exception(RuntimeError())
        assert value.value is None
        assert "value" not in json.loads(value.to_json())

    def test_unprintable_message_falls_back_to_type_name(self):
        class Unprintable(Exception):
            def __str__(self):
                raise RuntimeError("boom")

        value = ExceptionValue.from_exception(Unprintable())
        assert value.type.endswith("Unprintable")
        assert value.value == f"<unprintable {value.type} object>"

    def test_never_raised_exception_has_empty_frames(self):
        value = ExceptionValue.from_exception(RuntimeError("boom"))
        data = json.loads(value.to_json())
        assert data == {"type": "RuntimeError", "value": "boom", "stacktrace": {"frames": []}}

    def test_explicit_cause_chain_innermost_first(self):
        cause = KeyError("null ref")
        error = RuntimeError("outer")
        error.__cause__ = cause
        chain = exception_chain(error)
        assert chain == [cause, error]

    def test_implicit_context_is_followed(self):
        try:
            try:
                raise ValueError("inner")
            except ValueError:
                raise RuntimeError("outer")
        except RuntimeError as exc:
            chain = exception_chain(exc)
        assert [type(e) for e in chain] == [ValueError, RuntimeError]

    def test_suppressed_context_is_not_followed(self):
        try:
            try:
                raise ValueError("inner")
            except ValueError:
                raise RuntimeError("outer") from None
        except RuntimeError as exc:
            chain = exception_chain(exc)
        assert [type(e) for e in chain] == [RuntimeError]

    def test_cycles_terminate(self):
        a = ValueError("a")
        b = ValueError("b")
        a.__cause__ = b
        b.__cause__ = a
        assert exception_chain(a) == [b, a]


# ── Event ────────────────────────────────────────────────────────


class TestEvent:
    def test_event_id_is_write_once(self):
        event = Event(event_id="abc", timestamp="t")
        with pytest.raises(AttributeError):
            event.event_id = "other"

    def test_other_fields_are_mutable(self):
        event = Event(event_id="abc", timestamp="t", message="m")
        event.message = "changed"
        event.user = UserContext(id="u1")
        assert event.message == "changed"

    def test_minimal_json_shape(self):
        data = json.loads(Event(event_id="abc", timestamp="t").to_json())
        assert data == {"event_id": "abc", "timestamp": "t", "platform": "python"}

    def test_full_json_shape(self):
        event = Event(
            event_id="abc",
            timestamp="t",
            level="error",
            message="boom",
            release="1.0.0",
            environment="test",
            user=UserContext(id="u1", username="alice"),
            tags={"region": "eu-west-1"},
            extra={"count": 3, "missing": None},
            exceptions=[ExceptionValue(type="ValueError", value="bad")],
            breadcrumbs=[BreadcrumbEntry(category="http", timestamp="t0")],
        )
        data = json.loads(event.to_json())
        assert data["level"] == "error"
        assert data["user"] == {"id": "u1", "username": "alice"}
        assert data["tags"] == {"region": "eu-west-1"}
        assert data["extra"] == {"count": 3, "missing": None}
        assert data["exception"]["values"][0]["type"] == "ValueError"
        assert data["exception"]["values"][0]["stacktrace"] == {"frames": []}
        assert data["breadcrumbs"] == [{"timestamp": "t0", "category": "http"}]

    def test_empty_collections_are_omitted(self):
        event = Event(event_id="abc", timestamp="t", tags={}, extra={}, exceptions=[], breadcrumbs=[])
        data = json.loads(event.to_json())
        assert set(data) == {"event_id", "timestamp", "platform"}

    def test_null_tag_values_are_skipped(self):
        event = Event(event_id="abc", timestamp="t", tags={"a": "1", "b": None})
        assert json.loads(event.to_json())["tags"] == {"a": "1"}

    def test_breadcrumb_timestamp_defaults_to_now(self):
        crumb = BreadcrumbEntry(message="x")
        assert crumb.timestamp
        assert "T" in crumb.timestamp
