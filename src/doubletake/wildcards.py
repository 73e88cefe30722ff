"""Wildcard argument matchers.

A wildcard matcher stands in for an argument value in a double's argument
pattern.  It never *equals* an ordinary argument, so a pattern containing one
can only match a call by wildcard; it does equal another matcher of the same
kind and configuration, which is what makes a call that passes the matcher
itself an exact match.
"""

from __future__ import annotations

import abc
import numbers
import re
from typing import Any, Callable


class WildcardMatcher(abc.ABC):
    """Base class: subclasses implement :meth:`wildcard_match`.

    Matchers hash by type only, since their configuration (a dict for
    :func:`dict_including`, say) need not be hashable.
    """

    @abc.abstractmethod
    def wildcard_match(self, value: Any) -> bool:
        """Return True if *value* is accepted in place of this matcher."""

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash(type(self))


class Anything(WildcardMatcher):
    def wildcard_match(self, value: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "anything()"


class IsA(WildcardMatcher):
    def __init__(self, klass: type | tuple[type, ...]) -> None:
        self.klass = klass

    def wildcard_match(self, value: Any) -> bool:
        return isinstance(value, self.klass)

    def __repr__(self) -> str:
        return f"is_a({self.klass!r})"


class Numeric(WildcardMatcher):
    """Matches real numbers; booleans are excluded."""

    def wildcard_match(self, value: Any) -> bool:
        return isinstance(value, numbers.Real) and not isinstance(value, bool)

    def __repr__(self) -> str:
        return "numeric()"


class Boolean(WildcardMatcher):
    def wildcard_match(self, value: Any) -> bool:
        return isinstance(value, bool)

    def __repr__(self) -> str:
        return "boolean()"


class DuckType(WildcardMatcher):
    """Matches values exposing every named attribute."""

    def __init__(self, *attributes: str) -> None:
        self.attributes = attributes

    def wildcard_match(self, value: Any) -> bool:
        return all(hasattr(value, name) for name in self.attributes)

    def __repr__(self) -> str:
        names = ", ".join(repr(name) for name in self.attributes)
        return f"duck_type({names})"


class DictIncluding(WildcardMatcher):
    """Matches mappings containing at least the given items."""

    def __init__(self, expected: dict[Any, Any]) -> None:
        self.expected = dict(expected)

    def wildcard_match(self, value: Any) -> bool:
        try:
            return all(
                key in value and value[key] == expected
                for key, expected in self.expected.items()
            )
        except TypeError:
            return False

    def __repr__(self) -> str:
        return f"dict_including({self.expected!r})"


class Matching(WildcardMatcher):
    """Matches strings against a regular expression (``re.search``)."""

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        self.pattern = re.compile(pattern)

    def wildcard_match(self, value: Any) -> bool:
        return isinstance(value, str) and self.pattern.search(value) is not None

    def __repr__(self) -> str:
        return f"matching({self.pattern.pattern!r})"


class Satisfy(WildcardMatcher):
    """Matches values for which *predicate* returns a truthy result."""

    def __init__(self, predicate: Callable[[Any], Any]) -> None:
        self.predicate = predicate

    def wildcard_match(self, value: Any) -> bool:
        return bool(self.predicate(value))

    def __repr__(self) -> str:
        name = getattr(self.predicate, "__name__", repr(self.predicate))
        return f"satisfy({name})"


class AnyArgs(WildcardMatcher):
    """Trailing matcher accepting any remaining positionals and keywords."""

    def wildcard_match(self, value: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "*any_args()"


def anything() -> Anything:
    return Anything()


def is_a(klass: type | tuple[type, ...]) -> IsA:
    return IsA(klass)


def numeric() -> Numeric:
    return Numeric()


def boolean() -> Boolean:
    return Boolean()


def duck_type(*attributes: str) -> DuckType:
    return DuckType(*attributes)


def dict_including(expected: dict[Any, Any] | None = None, **items: Any) -> DictIncluding:
    merged = dict(expected or {})
    merged.update(items)
    return DictIncluding(merged)


def matching(pattern: str | re.Pattern[str]) -> Matching:
    return Matching(pattern)


def satisfy(predicate: Callable[[Any], Any]) -> Satisfy:
    return Satisfy(predicate)


def any_args() -> AnyArgs:
    return AnyArgs()
