"""Space: the registry of live double injections for one test scope.

A space maps ``(subject, method)`` pairs to :class:`DoubleInjection`
objects, keeps the log of every dispatched call and links ordered doubles.
It is an explicit object: each test (or each concurrently running test)
owns its own space, normally through :func:`space_scope` or the pytest
fixture in :mod:`doubletake.pytest_plugin`.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from doubletake.arguments import ArgumentExpectation, Call
from doubletake.config import EngineConfig
from doubletake.double import Double
from doubletake.errors import DoubleError, OrderingViolationError, VerificationFailures
from doubletake.injection import DoubleInjection
from doubletake.interceptor import AttributeInterceptor, InstanceOfInterceptor, MethodInterceptor
from doubletake.spy import SpyVerification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedCall:
    subject: Any
    method_name: str
    call: Call


class Space:
    """Registry of double injections, the call log and the ordered chain."""

    def __init__(
        self,
        interceptor: MethodInterceptor | None = None,
        config: EngineConfig | None = None,
        instance_interceptor: MethodInterceptor | None = None,
    ) -> None:
        self.interceptor = interceptor or AttributeInterceptor()
        self.instance_interceptor = instance_interceptor or InstanceOfInterceptor()
        self.config = config or EngineConfig()
        # Keyed by (subject id, method name, doubles every instance).
        self._injections: dict[tuple[int, str, bool], DoubleInjection] = {}
        self._calls: list[RecordedCall] = []
        self._ordered: list[Double] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Injections
    # ------------------------------------------------------------------

    def get_or_create(self, subject: Any, method_name: str, *, instances: bool = False) -> DoubleInjection:
        """Return the injection for the pair, creating and binding it once.

        With *instances*, *subject* must be a class and the injection covers
        the method on every instance of it rather than on the class object.
        """
        key = (id(subject), method_name, instances)
        with self._lock:
            injection = self._injections.get(key)
            if injection is None:
                injection = DoubleInjection(
                    subject,
                    method_name,
                    self.instance_interceptor if instances else self.interceptor,
                    space=self,
                    config=self.config,
                    lock=self._lock,
                )
                injection.bind()
                self._injections[key] = injection
                logger.debug("Created injection for %r.%s", subject, method_name)
            return injection

    def double_injection_exists(self, subject: Any, method_name: str, *, instances: bool = False) -> bool:
        return (id(subject), method_name, instances) in self._injections

    @property
    def injections(self) -> list[DoubleInjection]:
        return list(self._injections.values())

    def register(self, subject: Any, method_name: str, double: Double, *, instances: bool = False) -> Double:
        """Define *double* for ``subject.method_name``."""
        with self._lock:
            existed = self.double_injection_exists(subject, method_name, instances=instances)
            injection = self.get_or_create(subject, method_name, instances=instances)
            try:
                return injection.register(double)
            except DoubleError:
                if not existed and not injection.doubles:
                    self.reset_double(subject, method_name, instances=instances)
                raise

    def instance_of(self, klass: type, method_name: str, double: Double) -> Double:
        """Define *double* for ``method_name`` on every instance of *klass*."""
        return self.register(klass, method_name, double, instances=True)

    def order(self, double: Double) -> Double:
        """Require *double* to run after the previously ordered double is exhausted."""
        if not double.terminal:
            raise OrderingViolationError(
                f"{double.formatted_name} cannot be ordered: ordered doubles "
                f"need a finite times-called expectation"
            )
        with self._lock:
            if self._ordered:
                double.predecessor = self._ordered[-1]
            self._ordered.append(double)
        return double

    def then(self, double: Double) -> Double:
        """Same as :meth:`order`; reads as ``space.order(first); space.then(second)``."""
        return self.order(double)

    @property
    def ordered_doubles(self) -> list[Double]:
        return list(self._ordered)

    # ------------------------------------------------------------------
    # Call log
    # ------------------------------------------------------------------

    def record_call(self, subject: Any, method_name: str, call: Call) -> None:
        if not self.config.record_calls:
            return
        with self._lock:
            self._calls.append(RecordedCall(subject, method_name, call))

    @property
    def recorded_calls(self) -> list[RecordedCall]:
        return list(self._calls)

    def calls_to(self, subject: Any, method_name: str) -> list[Call]:
        return [
            recorded.call
            for recorded in self._calls
            if recorded.subject is subject and recorded.method_name == method_name
        ]

    def received(self, subject: Any, method_name: str, *args: Any, **kwargs: Any) -> SpyVerification:
        """Start an assertion that ``subject.method_name(*args, **kwargs)`` was called."""
        return SpyVerification(self, subject, method_name, ArgumentExpectation(args, kwargs))

    # ------------------------------------------------------------------
    # Verify / reset
    # ------------------------------------------------------------------

    def verify_all(self) -> None:
        """Verify every injection, reporting all unmet expectations at once."""
        self._raise_failures(self.injections)

    def verify(self, *subjects: Any) -> None:
        """Verify only the injections on *subjects*."""
        ids = {id(subject) for subject in subjects}
        self._raise_failures([i for i in self.injections if id(i.subject) in ids])

    def _raise_failures(self, injections: list[DoubleInjection]) -> None:
        with self._lock:
            errors: list[DoubleError] = []
            for injection in injections:
                errors.extend(injection.failures())
        if not errors:
            return
        logger.debug("Verification found %d failure(s)", len(errors))
        if len(errors) == 1:
            raise errors[0]
        raise VerificationFailures(errors)

    def reset_double(self, subject: Any, method_name: str, *, instances: bool = False) -> None:
        with self._lock:
            injection = self._injections.pop((id(subject), method_name, instances), None)
            if injection is not None:
                self._ordered = [d for d in self._ordered if d.injection is not injection]
                injection.reset()

    def reset_all(self) -> None:
        """Restore every subject and empty the space; safe to repeat."""
        with self._lock:
            injections = list(self._injections.values())
            self._injections.clear()
            for injection in reversed(injections):
                injection.reset()
            self._calls.clear()
            self._ordered.clear()
        if injections:
            logger.debug("Reset %d injection(s)", len(injections))


@contextmanager
def space_scope(
    interceptor: MethodInterceptor | None = None,
    config: EngineConfig | None = None,
    *,
    verify: bool = True,
) -> Iterator[Space]:
    """Yield a fresh space; verify it on clean exit and always reset it.

    Usage::

        with space_scope() as space:
            space.register(mailer, "send", Double.mock("send", returns=True))
            mailer.send()
    """
    space = Space(interceptor=interceptor, config=config)
    try:
        yield space
        if verify:
            space.verify_all()
    finally:
        space.reset_all()
