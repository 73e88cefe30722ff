"""Assertions against the space's call log.

Spy verification asks "was this method called with these arguments?" after
the fact, independently of which double (if any) answered the calls::

    space.received(mailer, "send", "hi").times(2).call()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from doubletake.arguments import AnyArgumentExpectation, ArgumentExpectation, MatchKind
from doubletake.errors import SpyVerificationError
from doubletake.times_called import TimesCalledExpectation

if TYPE_CHECKING:
    from doubletake.space import Space


class SpyVerification:
    def __init__(
        self,
        space: "Space",
        subject: Any,
        method_name: str,
        expectation: ArgumentExpectation,
    ) -> None:
        self.space = space
        self.subject = subject
        self.method_name = method_name
        self.argument_expectation = expectation
        self.times_called_expectation = TimesCalledExpectation.once()

    def times(self, count: int) -> "SpyVerification":
        self.times_called_expectation = TimesCalledExpectation.exactly(count)
        return self

    def at_least(self, count: int) -> "SpyVerification":
        self.times_called_expectation = TimesCalledExpectation.at_least(count)
        return self

    def at_most(self, count: int) -> "SpyVerification":
        self.times_called_expectation = TimesCalledExpectation.at_most(count)
        return self

    def never(self) -> "SpyVerification":
        return self.times(0)

    def with_any_args(self) -> "SpyVerification":
        self.argument_expectation = AnyArgumentExpectation()
        return self

    def matching_calls(self) -> int:
        return sum(
            1
            for call in self.space.calls_to(self.subject, self.method_name)
            if self.argument_expectation.classify(call) is not MatchKind.NONE
        )

    def call(self) -> None:
        count = self.matching_calls()
        times = self.times_called_expectation
        if times.accepts(count):
            return
        recorded = self.space.calls_to(self.subject, self.method_name)
        lines = [
            f"On subject {self.subject!r},",
            f"expected {self.argument_expectation.format(self.method_name)} "
            f"to be called {times.expected_message()} times, was called {count} times",
            "recorded invocations:",
        ]
        lines.extend(f"- {c.format(self.method_name)}" for c in recorded)
        if not recorded:
            lines.append("- (none)")
        raise SpyVerificationError("\n".join(lines))
