"""
Ignore rules for captured exceptions.

A rule is either a literal string or a regular expression.  Both are
matched with ``re.search`` against the exception message, falling back to
the qualified type name when the message is empty.
"""

import re
from typing import Iterable, Pattern, Tuple, Union

from .models import qualified_type_name


class IgnoreRule:
    """A single compiled ignore rule."""

    __slots__ = ("source", "is_literal", "_regex")

    def __init__(self, source: str, regex: Pattern, *, is_literal: bool) -> None:
        self.source = source
        self.is_literal = is_literal
        self._regex = regex

    @classmethod
    def literal(cls, text: str) -> "IgnoreRule":
        """Match *text* verbatim anywhere in the subject."""
        return cls(text, re.compile(re.escape(text)), is_literal=True)

    @classmethod
    def pattern(cls, regex: Union[str, Pattern]) -> "IgnoreRule":
        """Match a regular expression anywhere in the subject."""
        compiled = regex if isinstance(regex, re.Pattern) else re.compile(regex)
        return cls(compiled.pattern, compiled, is_literal=False)

    @classmethod
    def coerce(cls, rule: Union["IgnoreRule", str, Pattern]) -> "IgnoreRule":
        """Normalise a config value: ``str`` is literal, ``re.Pattern`` is a pattern."""
        if isinstance(rule, IgnoreRule):
            return rule
        if isinstance(rule, re.Pattern):
            return cls.pattern(rule)
        if isinstance(rule, str):
            return cls.literal(rule)
        raise TypeError(f"Unsupported ignore rule: {rule!r}")

    def matches(self, subject: str) -> bool:
        return self._regex.search(subject) is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IgnoreRule):
            return NotImplemented
        return (self.source, self.is_literal) == (other.source, other.is_literal)

    def __hash__(self) -> int:
        return hash((self.source, self.is_literal))

    def __repr__(self) -> str:
        kind = "literal" if self.is_literal else "pattern"
        return f"IgnoreRule.{kind}({self.source!r})"


class ErrorFilter:
    """Decides whether a captured exception is dropped before an event is built."""

    def __init__(self, rules: Iterable[IgnoreRule] = ()) -> None:
        self._rules: Tuple[IgnoreRule, ...] = tuple(rules)

    @property
    def rules(self) -> Tuple[IgnoreRule, ...]:
        return self._rules

    def should_ignore(self, exc: BaseException) -> bool:
        if not self._rules:
            return False
        subject = match_subject(exc)
        return any(rule.matches(subject) for rule in self._rules)


def match_subject(exc: BaseException) -> str:
    """The exception message, or its type name when the message is empty."""
    try:
        message = str(exc)
    except Exception:
        message = ""
    return message or qualified_type_name(exc)
