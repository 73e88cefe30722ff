"""DoubleInjection: the binding of a subject and a method.

An injection owns every double defined for one ``(subject, method)`` pair.
Once bound, each call of the method lands in :meth:`DoubleInjection.dispatch`,
which records it, lets the matcher pick a double and invokes it.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from doubletake.arguments import Call
from doubletake.config import EngineConfig
from doubletake.double import Double
from doubletake.errors import DoubleError, DoubleNotFoundError, SubjectDoesNotImplementMethodError
from doubletake.interceptor import MethodInterceptor
from doubletake.matcher import select_double

if TYPE_CHECKING:
    from doubletake.space import Space

logger = logging.getLogger(__name__)


class DoubleInjection:
    """All doubles for one method on one subject.

    The original behavior and signature are captured once, at creation,
    before any hook is installed.
    """

    def __init__(
        self,
        subject: Any,
        method_name: str,
        interceptor: MethodInterceptor,
        *,
        space: "Space | None" = None,
        config: EngineConfig | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self.subject = subject
        self.method_name = method_name
        self.doubles: list[Double] = []
        self.calls: list[Call] = []
        self.passthrough = False
        self.bound = False
        self._interceptor = interceptor
        self._space = space
        self._config = config or EngineConfig()
        self._lock = lock or threading.RLock()
        self.original = interceptor.original(subject, method_name)
        self.signature = interceptor.signature(subject, method_name)

    @property
    def subject_has_method(self) -> bool:
        return self.signature is not None

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    def register(self, double: Double) -> Double:
        """Append *double*; earlier doubles for the same pattern stay."""
        if double.strict is None:
            double.strict = self._config.strict
        if self.signature is None and (double.strict or not self._config.allow_missing_methods):
            raise SubjectDoesNotImplementMethodError(
                f"{self.subject!r} does not implement {self.method_name}"
            )
        if double.strict:
            double.check_definition_arity(self.signature)
        with self._lock:
            double.injection = self
            self.doubles.append(double)
        logger.debug("Registered %r on %r", double, self.subject)
        return double

    def bind(self) -> "DoubleInjection":
        """Install the dispatching hook on the subject (once)."""
        with self._lock:
            if not self.bound:
                self._interceptor.install(self.subject, self.method_name, self.dispatch)
                self.bound = True
        return self

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def dispatch(
        self,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        receiver: Any = None,
    ) -> Any:
        call = Call(tuple(args), dict(kwargs or {}), receiver)
        with self._lock:
            self.calls.append(call)
            if self._space is not None:
                self._space.record_call(self.subject, self.method_name, call)
            double = select_double(self.doubles, call)
            if double is None:
                if self.passthrough and self.original is not None:
                    logger.debug("No double for %s, calling original", call.format(self.method_name))
                    return self.call_original(call)
                raise DoubleNotFoundError(self.not_found_message(call))
            logger.debug("Dispatching %s to %r", call.format(self.method_name), double)
            return double.invoke(call)

    def call_original(self, call: Call) -> Any:
        if self.original is None:
            raise SubjectDoesNotImplementMethodError(
                f"{self.subject!r} has no original {self.method_name} to call"
            )
        if call.receiver is not None:
            return self.original(call.receiver, *call.args, **call.kwargs)
        return self.original(*call.args, **call.kwargs)

    def not_found_message(self, call: Call) -> str:
        subject = call.receiver if call.receiver is not None else self.subject
        lines = [
            f"On subject {subject!r},",
            "unexpected method invocation:",
            f"  {call.format(self.method_name)}",
            "expected invocations:",
        ]
        lines.extend(f"- {double.formatted_name}" for double in self.doubles)
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def failures(self) -> list[DoubleError]:
        errors: list[DoubleError] = []
        for double in self.doubles:
            try:
                double.verify()
            except DoubleError as exc:
                errors.append(exc)
        return errors

    def verify(self) -> None:
        for double in self.doubles:
            double.verify()

    def reset(self) -> None:
        """Restore the subject's method and forget every double."""
        with self._lock:
            if self.bound:
                self._interceptor.uninstall(self.subject, self.method_name)
                self.bound = False
            self.doubles.clear()
            self.calls.clear()
        logger.debug("Reset %r.%s", self.subject, self.method_name)

    def __repr__(self) -> str:
        return f"<DoubleInjection {self.subject!r}.{self.method_name} doubles={len(self.doubles)}>"
