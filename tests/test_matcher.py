"""Unit tests for double selection priority."""

from doubletake.arguments import Call
from doubletake.double import Double
from doubletake.matcher import DoubleMatches, select_double
from doubletake.times_called import TimesCalledExpectation
from doubletake.wildcards import anything


def exhaust(double):
    while double.attempt():
        double.invoke(Call(double.argument_expectation.args))
    return double


class TestPriority:
    def test_exact_beats_catch_all_declared_later(self):
        exact = Double.mock("send", args=(1,))
        catch_all = Double.stub("send")
        assert select_double([exact, catch_all], Call((1,))) is exact

    def test_exact_beats_catch_all_declared_earlier(self):
        catch_all = Double.stub("send")
        exact = Double.mock("send", args=(1,))
        assert select_double([catch_all, exact], Call((1,))) is exact

    def test_exact_non_terminal_beats_wildcard_terminal(self):
        wildcard = Double.mock("send", args=(anything(),))
        exact_stub = Double.stub("send", args=(1,))
        assert select_double([wildcard, exact_stub], Call((1,))) is exact_stub

    def test_terminal_exact_first_declared_wins(self):
        first = Double.mock("send", args=(1,))
        second = Double.mock("send", args=(1,))
        assert select_double([first, second], Call((1,))) is first

    def test_non_terminal_exact_last_declared_wins(self):
        first = Double.stub("send", args=(1,))
        second = Double.stub("send", args=(1,))
        assert select_double([first, second], Call((1,))) is second

    def test_non_terminal_catch_all_last_declared_wins(self):
        first = Double.stub("send")
        second = Double.stub("send")
        assert select_double([first, second], Call()) is second

    def test_terminal_beats_non_terminal_within_wildcards(self):
        stub = Double.stub("send")
        mock = Double.mock("send")
        assert select_double([stub, mock], Call()) is mock

    def test_wildcard_terminal_first_declared_wins(self):
        first = Double.mock("send", args=(anything(),))
        second = Double.mock("send")
        assert select_double([first, second], Call((5,))) is first

    def test_exhausted_terminal_falls_through_to_next(self):
        first = exhaust(Double.mock("send", args=(1,)))
        second = Double.mock("send", args=(1,))
        assert select_double([first, second], Call((1,))) is second

    def test_exhausted_exact_falls_back_to_catch_all(self):
        exact = exhaust(Double.mock("send", args=(1,)))
        catch_all = Double.stub("send")
        assert select_double([exact, catch_all], Call((1,))) is catch_all


class TestExhaustedFallback:
    def test_exhausted_double_is_returned_to_surface_its_error(self):
        never = Double.never("send")
        assert select_double([never], Call()) is never

    def test_first_exhausted_double_wins(self):
        first = exhaust(Double.mock("send", times=TimesCalledExpectation.exactly(2)))
        second = exhaust(Double.mock("send"))
        assert select_double([first, second], Call()) is first

    def test_not_found(self):
        assert select_double([Double.mock("send", args=(1,))], Call((2,))) is None
        assert select_double([], Call()) is None


class TestPartition:
    def test_buckets(self):
        exact_mock = Double.mock("send", args=(1,))
        exact_stub = Double.stub("send", args=(1,))
        wild_mock = Double.mock("send", args=(anything(),))
        catch_all = Double.stub("send")
        other = Double.mock("send", args=(2,))
        never = Double.never("send", args=(1,))

        matches = DoubleMatches.find_all(
            [exact_mock, exact_stub, wild_mock, catch_all, other, never], Call((1,))
        )

        assert matches.exact_terminal == [exact_mock]
        assert matches.exact_non_terminal == [exact_stub]
        assert matches.wildcard_terminal == [wild_mock]
        assert matches.wildcard_non_terminal == [catch_all]
        assert matches.matching_doubles == [exact_mock, exact_stub, wild_mock, catch_all, never]

    def test_selection_does_not_count(self):
        double = Double.mock("send")
        select_double([double], Call())
        assert double.times_called == 0
