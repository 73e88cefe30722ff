"""Times-called expectations: how often a double may and must be invoked."""

from __future__ import annotations

from enum import Enum


class TimesCalledState(Enum):
    NOT_SATISFIED = "not_satisfied"
    SATISFIED = "satisfied"
    EXHAUSTED = "exhausted"


class TimesCalledExpectation:
    """A ``[minimum, maximum]`` call range plus the running call count.

    ``maximum=None`` means unbounded.  An expectation with a finite maximum is
    *terminal*: once the count reaches it the double can no longer be
    attempted, and another call is an error rather than a silent drop.
    """

    def __init__(self, minimum: int = 1, maximum: int | None = 1) -> None:
        if minimum < 0:
            raise ValueError(f"minimum must be non-negative, got {minimum}")
        if maximum is not None and maximum < minimum:
            raise ValueError(f"maximum {maximum} is below minimum {minimum}")
        self.minimum = minimum
        self.maximum = maximum
        self.times_called = 0

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def exactly(cls, times: int) -> "TimesCalledExpectation":
        return cls(times, times)

    @classmethod
    def once(cls) -> "TimesCalledExpectation":
        return cls(1, 1)

    @classmethod
    def twice(cls) -> "TimesCalledExpectation":
        return cls(2, 2)

    @classmethod
    def never(cls) -> "TimesCalledExpectation":
        return cls(0, 0)

    @classmethod
    def at_least(cls, times: int) -> "TimesCalledExpectation":
        return cls(times, None)

    @classmethod
    def at_most(cls, times: int) -> "TimesCalledExpectation":
        return cls(0, times)

    @classmethod
    def between(cls, minimum: int, maximum: int) -> "TimesCalledExpectation":
        return cls(minimum, maximum)

    @classmethod
    def any_number(cls) -> "TimesCalledExpectation":
        return cls(0, None)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def terminal(self) -> bool:
        return self.maximum is not None

    @property
    def satisfied(self) -> bool:
        return self.times_called >= self.minimum

    @property
    def exhausted(self) -> bool:
        return self.maximum is not None and self.times_called >= self.maximum

    @property
    def state(self) -> TimesCalledState:
        if self.exhausted:
            return TimesCalledState.EXHAUSTED
        if self.satisfied:
            return TimesCalledState.SATISFIED
        return TimesCalledState.NOT_SATISFIED

    def attempt(self) -> bool:
        """Return True while one more call is within the range."""
        return not self.exhausted

    def accepts(self, count: int) -> bool:
        """Return True if *count* calls lie inside the range."""
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum

    def increment(self) -> None:
        self.times_called += 1

    def expected_message(self) -> str:
        if self.maximum is None:
            if self.minimum == 0:
                return "any number"
            return f"at least {self.minimum}"
        if self.minimum == self.maximum:
            return str(self.minimum)
        if self.minimum == 0:
            return f"at most {self.maximum}"
        return f"{self.minimum} to {self.maximum}"

    def __repr__(self) -> str:
        return (
            f"TimesCalledExpectation(minimum={self.minimum}, "
            f"maximum={self.maximum}, times_called={self.times_called})"
        )
