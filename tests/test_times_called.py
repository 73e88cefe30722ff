"""Unit tests for times-called expectations."""

import pytest

from doubletake.times_called import TimesCalledExpectation, TimesCalledState


def called(expectation, times):
    for _ in range(times):
        expectation.increment()
    return expectation


class TestStates:
    def test_exactly_once_lifecycle(self):
        expectation = TimesCalledExpectation.once()
        assert expectation.state is TimesCalledState.NOT_SATISFIED
        assert expectation.attempt()
        called(expectation, 1)
        assert expectation.state is TimesCalledState.EXHAUSTED
        assert expectation.satisfied
        assert not expectation.attempt()

    def test_range_is_satisfied_before_exhausted(self):
        expectation = called(TimesCalledExpectation.between(1, 3), 2)
        assert expectation.state is TimesCalledState.SATISFIED
        assert expectation.attempt()

    def test_never_starts_exhausted_and_satisfied(self):
        expectation = TimesCalledExpectation.never()
        assert expectation.satisfied
        assert expectation.exhausted
        assert expectation.state is TimesCalledState.EXHAUSTED

    def test_unbounded_is_never_exhausted(self):
        expectation = called(TimesCalledExpectation.at_least(1), 100)
        assert not expectation.terminal
        assert not expectation.exhausted
        assert expectation.state is TimesCalledState.SATISFIED

    def test_terminal_means_finite_maximum(self):
        assert TimesCalledExpectation.exactly(3).terminal
        assert TimesCalledExpectation.at_most(2).terminal
        assert not TimesCalledExpectation.any_number().terminal


class TestAccepts:
    def test_accepts_counts_inside_range(self):
        expectation = TimesCalledExpectation.between(2, 3)
        assert not expectation.accepts(1)
        assert expectation.accepts(2)
        assert expectation.accepts(3)
        assert not expectation.accepts(4)

    def test_unbounded_accepts_large_counts(self):
        assert TimesCalledExpectation.at_least(2).accepts(10_000)


class TestValidation:
    def test_negative_minimum_rejected(self):
        with pytest.raises(ValueError):
            TimesCalledExpectation(-1, 2)

    def test_maximum_below_minimum_rejected(self):
        with pytest.raises(ValueError):
            TimesCalledExpectation(3, 2)


@pytest.mark.parametrize("expectation, message", [
    (TimesCalledExpectation.once(), "1"),
    (TimesCalledExpectation.never(), "0"),
    (TimesCalledExpectation.at_least(2), "at least 2"),
    (TimesCalledExpectation.at_most(4), "at most 4"),
    (TimesCalledExpectation.between(1, 3), "1 to 3"),
    (TimesCalledExpectation.any_number(), "any number"),
])
def test_expected_message(expectation, message):
    assert expectation.expected_message() == message
