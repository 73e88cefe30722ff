"""A single double definition and its invocation rules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from doubletake.arguments import AnyArgumentExpectation, ArgumentExpectation, Call
from doubletake.errors import ArityMismatchError, OrderingViolationError, TimesCalledError
from doubletake.interceptor import MethodSignature
from doubletake.times_called import TimesCalledExpectation

if TYPE_CHECKING:
    from doubletake.injection import DoubleInjection

_UNSET: Any = object()


class Double:
    """One programmable stand-in for a method call.

    A double pairs an argument pattern with a times-called range and an
    implementation.  Doubles are created by definition code, registered on a
    :class:`~doubletake.injection.DoubleInjection`, and invoked by it when the
    matcher selects them.

    Parameters
    ----------
    method_name:
        Name of the doubled method, used in diagnostics.
    args, kwargs:
        The argument pattern.  Leaving both out declares a catch-all.
    expectation:
        A prebuilt :class:`ArgumentExpectation`, instead of *args*/*kwargs*.
    times:
        The times-called range; defaults to exactly once.
    implementation:
        Callable producing the return value.  It receives the call's
        arguments, or for proxy doubles the original return value.
    returns:
        Shorthand for an implementation returning a constant.
    proxy:
        Call the subject's original method first.
    strict:
        Check arity against the subject's real method.  ``None`` defers to
        the space configuration.
    yields:
        Values passed to the call's block before the implementation runs.
    """

    def __init__(
        self,
        method_name: str,
        *,
        args: tuple[Any, ...] | None = None,
        kwargs: dict[str, Any] | None = None,
        expectation: ArgumentExpectation | None = None,
        times: TimesCalledExpectation | None = None,
        implementation: Callable[..., Any] | None = None,
        returns: Any = _UNSET,
        proxy: bool = False,
        strict: bool | None = None,
        yields: tuple[Any, ...] | None = None,
    ) -> None:
        if expectation is None:
            if args is None and kwargs is None:
                expectation = AnyArgumentExpectation()
            else:
                expectation = ArgumentExpectation(args or (), kwargs)
        if returns is not _UNSET:
            if implementation is not None:
                raise ValueError("pass either implementation or returns, not both")
            implementation = _constant(returns)

        self.method_name = method_name
        self.argument_expectation = expectation
        self.times_called_expectation = times if times is not None else TimesCalledExpectation.once()
        self.implementation = implementation
        self.proxy = proxy
        self.strict = strict
        self.yields = tuple(yields) if yields is not None else None
        self.predecessor: Double | None = None
        self.injection: DoubleInjection | None = None

    # ------------------------------------------------------------------
    # Kinds
    # ------------------------------------------------------------------

    @classmethod
    def mock(cls, method_name: str, **options: Any) -> "Double":
        """A double that must be called exactly once unless *times* says otherwise."""
        options.setdefault("times", TimesCalledExpectation.once())
        return cls(method_name, **options)

    @classmethod
    def stub(cls, method_name: str, **options: Any) -> "Double":
        """A double that may be called any number of times."""
        options.setdefault("times", TimesCalledExpectation.any_number())
        return cls(method_name, **options)

    @classmethod
    def never(cls, method_name: str, **options: Any) -> "Double":
        """A negative expectation: any matching call is an error."""
        options.setdefault("times", TimesCalledExpectation.never())
        return cls(method_name, **options)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def times_called(self) -> int:
        return self.times_called_expectation.times_called

    @property
    def terminal(self) -> bool:
        return self.times_called_expectation.terminal

    def attempt(self) -> bool:
        return self.times_called_expectation.attempt()

    @property
    def satisfied(self) -> bool:
        return self.times_called_expectation.satisfied

    @property
    def exhausted(self) -> bool:
        return self.times_called_expectation.exhausted

    @property
    def formatted_name(self) -> str:
        return self.argument_expectation.format(self.method_name)

    # ------------------------------------------------------------------
    # Arity
    # ------------------------------------------------------------------

    def check_definition_arity(self, signature: MethodSignature) -> None:
        """Check the declared pattern against the real method's signature."""
        expectation = self.argument_expectation
        if isinstance(expectation, AnyArgumentExpectation):
            nargs, keywords = 0, ()
        elif expectation.open_ended:
            # Only the fixed part is known; it must fit without the tail.
            if expectation.arity > signature.fixed_arity and not signature.variadic:
                raise self._arity_error(signature, expectation.arity)
            return
        else:
            nargs, keywords = expectation.arity, tuple(expectation.kwargs)
        if not signature.accepts(nargs, keywords):
            raise self._arity_error(signature, nargs)

    def check_call_arity(self, signature: MethodSignature, call: Call) -> None:
        if not signature.accepts(len(call.args), tuple(call.kwargs)):
            raise self._arity_error(signature, len(call.args), call)

    def _arity_error(
        self, signature: MethodSignature, nargs: int, call: Call | None = None
    ) -> ArityMismatchError:
        shown = call.format(self.method_name) if call else self.formatted_name
        return ArityMismatchError(
            f"{shown} does not fit the subject's signature "
            f"{self.method_name}{signature.describe()} ({nargs} positional arguments)"
        )

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def invoke(self, call: Call) -> Any:
        times = self.times_called_expectation
        if not times.attempt():
            raise TimesCalledError(
                f"{call.format(self.method_name)}\n"
                f"expected {times.expected_message()}, invoked {times.times_called + 1}"
            )
        predecessor = self.predecessor
        if predecessor is not None and not predecessor.exhausted:
            raise OrderingViolationError(
                f"{call.format(self.method_name)} was called before "
                f"{predecessor.formatted_name} had run its course "
                f"(expected {predecessor.times_called_expectation.expected_message()}, "
                f"invoked {predecessor.times_called})"
            )
        if self.strict and self.injection is not None and self.injection.signature is not None:
            self.check_call_arity(self.injection.signature, call)

        times.increment()

        if self.yields is not None:
            block = call.block
            if block is None:
                raise TypeError(
                    f"{call.format(self.method_name)} must be given a callable "
                    f"as its last positional argument because the double yields"
                )
            block(*self.yields)

        if self.proxy:
            if self.injection is None:
                raise RuntimeError(f"proxy double {self.formatted_name} is not registered")
            result = self.injection.call_original(call)
            if self.implementation is not None:
                return self.implementation(result)
            return result
        if self.implementation is None:
            return None
        return self.implementation(*call.args, **call.kwargs)

    def verify(self) -> None:
        times = self.times_called_expectation
        if not times.satisfied:
            raise TimesCalledError(
                f"{self.formatted_name}\n"
                f"expected {times.expected_message()}, invoked {times.times_called}"
            )

    def __repr__(self) -> str:
        return f"<Double {self.formatted_name} {self.times_called_expectation!r}>"


def _constant(value: Any) -> Callable[..., Any]:
    def implementation(*args: Any, **kwargs: Any) -> Any:
        return value

    return implementation
