"""Argument expectations: how a double's declared pattern meets a call."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from doubletake.wildcards import AnyArgs, WildcardMatcher


@dataclass(frozen=True)
class Call:
    """The arguments of one intercepted invocation.

    The *block* of a call is its trailing positional argument when that
    argument is callable and is not a class.  It stays part of ``args`` so
    that matching and forwarding to the original method see the call exactly
    as made.  Any other trailing callable, a bound method or a lambda passed
    as data included, is taken as the block too; a yielding double calls it.

    *receiver* is the instance a call arrived on when a method is doubled
    for every instance of a class.  It takes no part in matching.
    """

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    receiver: Any = field(default=None, compare=False, repr=False)

    @property
    def block(self) -> Callable[..., Any] | None:
        if self.args and callable(self.args[-1]) and not isinstance(self.args[-1], type):
            return self.args[-1]
        return None

    def format(self, method_name: str) -> str:
        return format_invocation(method_name, self.args, self.kwargs)


def format_invocation(method_name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    """Render ``name(1, 'a', key=2)``."""
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"{method_name}({', '.join(parts)})"


class MatchKind(Enum):
    EXACT = "exact"
    WILDCARD = "wildcard"
    NONE = "none"


def _accepts(expected: Any, actual: Any) -> bool:
    if isinstance(expected, WildcardMatcher):
        return expected.wildcard_match(actual)
    return expected == actual


class ArgumentExpectation:
    """A declared sequence of positional and keyword argument matchers.

    A trailing :func:`~doubletake.wildcards.any_args` accepts any remaining
    positional arguments and any keywords that were not declared.
    """

    def __init__(self, args: tuple[Any, ...] = (), kwargs: dict[str, Any] | None = None) -> None:
        self.args = tuple(args)
        self.kwargs = dict(kwargs or {})
        self.open_ended = bool(self.args) and isinstance(self.args[-1], AnyArgs)
        self._fixed = self.args[:-1] if self.open_ended else self.args

    @property
    def arity(self) -> int:
        """Number of fixed positional arguments declared."""
        return len(self._fixed)

    def exact_match(self, call: Call) -> bool:
        if self.open_ended:
            return False
        return self.args == call.args and self.kwargs == call.kwargs

    def wildcard_match(self, call: Call) -> bool:
        if self.open_ended:
            if len(call.args) < len(self._fixed):
                return False
        elif len(call.args) != len(self._fixed):
            return False
        if not all(_accepts(e, a) for e, a in zip(self._fixed, call.args)):
            return False

        if not self.open_ended and set(self.kwargs) != set(call.kwargs):
            return False
        for key, expected in self.kwargs.items():
            if key not in call.kwargs or not _accepts(expected, call.kwargs[key]):
                return False
        return True

    def classify(self, call: Call) -> MatchKind:
        if self.exact_match(call):
            return MatchKind.EXACT
        if self.wildcard_match(call):
            return MatchKind.WILDCARD
        return MatchKind.NONE

    def format(self, method_name: str) -> str:
        return format_invocation(method_name, self.args, self.kwargs)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.args == other.args and self.kwargs == other.kwargs

    def __repr__(self) -> str:
        return f"ArgumentExpectation(args={self.args!r}, kwargs={self.kwargs!r})"


class AnyArgumentExpectation(ArgumentExpectation):
    """The catch-all pattern of a double declared without arguments.

    It never matches exactly and always matches by wildcard, so catch-all
    doubles compete in the wildcard buckets of the matcher.
    """

    def __init__(self) -> None:
        super().__init__()
        self.open_ended = True

    @property
    def arity(self) -> int:
        return 0

    def exact_match(self, call: Call) -> bool:
        return False

    def wildcard_match(self, call: Call) -> bool:
        return True

    def format(self, method_name: str) -> str:
        return f"{method_name}(<any arguments>)"

    def __repr__(self) -> str:
        return "AnyArgumentExpectation()"
