"""Selecting the double that answers a call.

Candidates are ranked in this order, first non-empty bucket wins:

1. exact, terminal          -> earliest declared
2. exact, non-terminal      -> latest declared
3. wildcard, terminal       -> earliest declared
4. wildcard, non-terminal   -> latest declared
5. matching but no longer attemptable -> earliest declared

Bucket 5 exists so that an exhausted double raises its own times-called
error instead of the call failing with a generic not-found error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from doubletake.arguments import Call, MatchKind
from doubletake.double import Double


@dataclass
class DoubleMatches:
    """The doubles of one binding, partitioned against a call."""

    matching_doubles: list[Double] = field(default_factory=list)
    exact_terminal: list[Double] = field(default_factory=list)
    exact_non_terminal: list[Double] = field(default_factory=list)
    wildcard_terminal: list[Double] = field(default_factory=list)
    wildcard_non_terminal: list[Double] = field(default_factory=list)

    @classmethod
    def find_all(cls, doubles: Sequence[Double], call: Call) -> "DoubleMatches":
        matches = cls()
        for double in doubles:
            kind = double.argument_expectation.classify(call)
            if kind is MatchKind.NONE:
                continue
            matches.matching_doubles.append(double)
            if not double.attempt():
                continue
            if kind is MatchKind.EXACT:
                bucket = matches.exact_terminal if double.terminal else matches.exact_non_terminal
            else:
                bucket = matches.wildcard_terminal if double.terminal else matches.wildcard_non_terminal
            bucket.append(double)
        return matches

    def select(self) -> Double | None:
        if self.exact_terminal:
            return self.exact_terminal[0]
        if self.exact_non_terminal:
            return self.exact_non_terminal[-1]
        if self.wildcard_terminal:
            return self.wildcard_terminal[0]
        if self.wildcard_non_terminal:
            return self.wildcard_non_terminal[-1]
        if self.matching_doubles:
            return self.matching_doubles[0]
        return None


def select_double(doubles: Sequence[Double], call: Call) -> Double | None:
    """Return the double that should answer *call*, or None if none match."""
    return DoubleMatches.find_all(doubles, call).select()
