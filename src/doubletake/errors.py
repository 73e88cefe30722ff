"""Error taxonomy for the double engine.

Every error is fatal to the call (or verification) that raised it.  The
engine never retries or swallows them: their purpose is to fail a test
deterministically with a precise message.
"""

from __future__ import annotations


class DoubleError(Exception):
    """Base class for all errors raised by the engine."""


class DoubleNotFoundError(DoubleError):
    """Raised when no registered double matches an intercepted call."""


class TimesCalledError(DoubleError):
    """Raised when a double is called too often, or too rarely at verify."""


class ArityMismatchError(DoubleError):
    """Raised when a strict double's arity does not fit the real method."""


class SubjectDoesNotImplementMethodError(DoubleError):
    """Raised when a double requires a method the subject does not have."""


class OrderingViolationError(DoubleError):
    """Raised when an ordered double is invoked before its predecessor."""


class SpyVerificationError(DoubleError):
    """Raised when recorded calls do not satisfy a received-call assertion."""


class VerificationFailures(DoubleError):
    """Several verification errors collected in one teardown pass."""

    def __init__(self, errors: list[DoubleError]) -> None:
        self.errors = list(errors)
        lines = [f"{len(self.errors)} expectations were not met:"]
        for index, error in enumerate(self.errors, start=1):
            lines.append(f"{index}) {type(error).__name__}: {error}")
        super().__init__("\n".join(lines))
