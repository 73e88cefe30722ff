"""Unit tests for Double invocation and verification."""

import pytest

from doubletake.arguments import AnyArgumentExpectation, Call
from doubletake.double import Double
from doubletake.errors import ArityMismatchError, OrderingViolationError, TimesCalledError
from doubletake.interceptor import MethodSignature
from doubletake.times_called import TimesCalledExpectation


class TestKinds:
    def test_mock_defaults_to_exactly_once(self):
        double = Double.mock("send")
        assert (double.times_called_expectation.minimum, double.times_called_expectation.maximum) == (1, 1)

    def test_stub_defaults_to_any_number(self):
        double = Double.stub("send")
        assert double.times_called_expectation.minimum == 0
        assert double.times_called_expectation.maximum is None

    def test_never_is_zero_zero(self):
        double = Double.never("send")
        assert (double.times_called_expectation.minimum, double.times_called_expectation.maximum) == (0, 0)

    def test_no_pattern_is_catch_all(self):
        assert isinstance(Double.stub("send").argument_expectation, AnyArgumentExpectation)

    def test_returns_and_implementation_are_exclusive(self):
        with pytest.raises(ValueError):
            Double("send", returns=1, implementation=lambda: 2)


class TestInvoke:
    def test_no_implementation_returns_none(self):
        assert Double.stub("send").invoke(Call()) is None

    def test_returns_constant(self):
        assert Double.stub("send", returns="bar").invoke(Call((1,))) == "bar"

    def test_implementation_receives_arguments(self):
        double = Double.stub("send", implementation=lambda to, body="": f"{to}:{body}")
        assert double.invoke(Call(("bob",), {"body": "hi"})) == "bob:hi"

    def test_counts_calls(self):
        double = Double.stub("send")
        double.invoke(Call())
        double.invoke(Call())
        assert double.times_called == 2

    def test_exceeding_max_raises_on_the_next_call(self):
        double = Double("send", times=TimesCalledExpectation.exactly(3))
        for _ in range(3):
            double.invoke(Call())
        with pytest.raises(TimesCalledError, match="expected 3, invoked 4"):
            double.invoke(Call())
        assert double.times_called == 3

    def test_never_raises_on_first_call(self):
        with pytest.raises(TimesCalledError, match=r"send\(1\)\nexpected 0, invoked 1"):
            Double.never("send").invoke(Call((1,)))

    def test_counts_even_when_implementation_raises(self):
        def boom():
            raise KeyError("boom")

        double = Double.mock("send", implementation=boom)
        with pytest.raises(KeyError):
            double.invoke(Call())
        assert double.times_called == 1
        double.verify()


class TestYields:
    def test_calls_block_with_yield_values(self):
        seen = []
        double = Double.stub("each", yields=(1, 2), returns="done")
        assert double.invoke(Call((lambda *a: seen.append(a),))) == "done"
        assert seen == [(1, 2)]

    def test_empty_yield(self):
        seen = []
        double = Double.stub("each", yields=())
        double.invoke(Call((lambda: seen.append("called"),)))
        assert seen == ["called"]

    def test_missing_block_is_type_error(self):
        with pytest.raises(TypeError):
            Double.stub("each", yields=(1,)).invoke(Call((1,)))


class TestOrdering:
    def test_predecessor_must_be_exhausted(self):
        first = Double("open", times=TimesCalledExpectation.exactly(2))
        second = Double("close")
        second.predecessor = first
        first.invoke(Call())
        with pytest.raises(OrderingViolationError, match="open"):
            second.invoke(Call())
        first.invoke(Call())
        second.invoke(Call())
        assert second.times_called == 1

    def test_partly_consumed_ranged_predecessor_blocks(self):
        first = Double("open", times=TimesCalledExpectation.between(1, 2))
        second = Double("close")
        second.predecessor = first
        first.invoke(Call())
        assert first.satisfied
        with pytest.raises(OrderingViolationError, match=r"expected 1 to 2, invoked 1"):
            second.invoke(Call())
        assert second.times_called == 0
        first.invoke(Call())
        second.invoke(Call())


class TestVerify:
    def test_under_minimum_raises(self):
        double = Double("send", times=TimesCalledExpectation.exactly(3))
        double.invoke(Call())
        double.invoke(Call())
        with pytest.raises(TimesCalledError, match="expected 3, invoked 2"):
            double.verify()

    @pytest.mark.parametrize("calls", [1, 2, 3])
    def test_within_range_passes(self, calls):
        double = Double("send", times=TimesCalledExpectation.between(1, 3))
        for _ in range(calls):
            double.invoke(Call())
        double.verify()

    def test_never_passes_without_calls(self):
        Double.never("send").verify()


class TestDefinitionArity:
    def test_catch_all_fits_zero_arity(self):
        Double.mock("ping").check_definition_arity(MethodSignature())

    def test_catch_all_rejected_when_method_takes_arguments(self):
        signature = MethodSignature(positional=("arg",), required=1)
        with pytest.raises(ArityMismatchError):
            Double.mock("send").check_definition_arity(signature)

    def test_arguments_rejected_when_method_takes_none(self):
        with pytest.raises(ArityMismatchError):
            Double.mock("ping", args=(1,)).check_definition_arity(MethodSignature())

    def test_variadic_accepts_more(self):
        signature = MethodSignature(positional=("a", "b"), required=2, variadic=True)
        Double.mock("log", args=(1, 2)).check_definition_arity(signature)
        Double.mock("log", args=(1, 2, 3)).check_definition_arity(signature)
        with pytest.raises(ArityMismatchError):
            Double.mock("log", args=(1,)).check_definition_arity(signature)
