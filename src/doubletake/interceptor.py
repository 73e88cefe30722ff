"""Method interception: the seam between the engine and real objects.

The engine never patches objects itself.  It asks a :class:`MethodInterceptor`
for the subject's original behavior and signature, and to install or remove
the hook that routes calls into :meth:`DoubleInjection.dispatch`.
:class:`AttributeInterceptor` is the default implementation, built on
``setattr``/``delattr`` and :func:`inspect.signature`; :class:`InstanceOfInterceptor`
reroutes a method for every instance of a class.
"""

from __future__ import annotations

import abc
import functools
import inspect
import logging
import types
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

Dispatch = Callable[..., Any]


@dataclass(frozen=True)
class MethodSignature:
    """The callable shape of a subject's method, as seen by its callers.

    Attributes
    ----------
    positional:
        Names of the positional parameters, in order.
    required:
        How many leading positional parameters have no default.
    variadic:
        Whether a ``*args`` tail accepts extra positionals.
    keywords:
        Names of keyword-only parameters.
    required_keywords:
        Keyword-only parameters without a default.
    variadic_keywords:
        Whether a ``**kwargs`` tail accepts unknown keywords.
    """

    positional: tuple[str, ...] = ()
    required: int = 0
    variadic: bool = False
    keywords: frozenset[str] = frozenset()
    required_keywords: frozenset[str] = frozenset()
    variadic_keywords: bool = False

    @classmethod
    def permissive(cls) -> "MethodSignature":
        """A signature accepting any call, for callables inspect cannot read."""
        return cls(variadic=True, variadic_keywords=True)

    @classmethod
    def from_callable(cls, fn: Callable[..., Any], *, bound: bool = False) -> "MethodSignature":
        """Read *fn*'s signature; *bound* drops the leading ``self`` of a plain function."""
        try:
            sig = inspect.signature(fn)
        except (TypeError, ValueError):
            return cls.permissive()

        params = list(sig.parameters.values())
        if bound and params and params[0].kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            params = params[1:]

        positional: list[str] = []
        required = 0
        variadic = False
        keywords: set[str] = set()
        required_keywords: set[str] = set()
        variadic_keywords = False
        for param in params:
            if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
                positional.append(param.name)
                if param.default is param.empty:
                    required = len(positional)
            elif param.kind is param.VAR_POSITIONAL:
                variadic = True
            elif param.kind is param.KEYWORD_ONLY:
                keywords.add(param.name)
                if param.default is param.empty:
                    required_keywords.add(param.name)
            elif param.kind is param.VAR_KEYWORD:
                variadic_keywords = True
        return cls(
            positional=tuple(positional),
            required=required,
            variadic=variadic,
            keywords=frozenset(keywords),
            required_keywords=frozenset(required_keywords),
            variadic_keywords=variadic_keywords,
        )

    @property
    def fixed_arity(self) -> int:
        return len(self.positional)

    def accepts(self, nargs: int, keywords: tuple[str, ...] | frozenset[str] = ()) -> bool:
        """Return True if a call with *nargs* positionals and *keywords* binds."""
        if nargs > len(self.positional) and not self.variadic:
            return False
        bound = set(self.positional[:nargs])
        for name in keywords:
            if name in bound:
                return False
            if name not in self.positional and name not in self.keywords and not self.variadic_keywords:
                return False
            bound.add(name)
        if any(name not in bound for name in self.positional[: self.required]):
            return False
        return self.required_keywords <= bound

    def describe(self) -> str:
        parts = list(self.positional[: self.required])
        parts.extend(f"{name}=..." for name in self.positional[self.required:])
        if self.variadic:
            parts.append("*args")
        elif self.keywords:
            parts.append("*")
        parts.extend(sorted(self.keywords))
        if self.variadic_keywords:
            parts.append("**kwargs")
        return f"({', '.join(parts)})"


class MethodInterceptor(abc.ABC):
    """Capability the engine needs to reroute a subject's method.

    Hooks call ``dispatch(args, kwargs)``.  Interceptors that reroute a method
    for every instance of a class call ``dispatch(args, kwargs, receiver)``
    instead, and their :meth:`original` takes the receiver as its first
    argument.
    """

    @abc.abstractmethod
    def original(self, subject: Any, method_name: str) -> Callable[..., Any] | None:
        """Return the current behavior of the method, or None if absent."""

    @abc.abstractmethod
    def signature(self, subject: Any, method_name: str) -> MethodSignature | None:
        """Return the method's signature, or None if the subject lacks it."""

    @abc.abstractmethod
    def install(self, subject: Any, method_name: str, dispatch: Dispatch) -> None:
        """Route calls of ``subject.method_name`` into *dispatch*."""

    @abc.abstractmethod
    def uninstall(self, subject: Any, method_name: str) -> None:
        """Undo :meth:`install`, restoring what was there before."""


# Marks a name that is not in the subject's own namespace.
_ABSENT = object()


class AttributeInterceptor(MethodInterceptor):
    """Intercepts by replacing the attribute on the subject itself.

    Instance subjects get a plain function in their ``__dict__``.  Class
    subjects get a descriptor that answers with the hook only when it is
    looked up on that very class, so subclasses and instances keep their
    normal behavior.  An instance method is not a method of the class
    object, so on a class subject it counts as absent; use
    :class:`InstanceOfInterceptor` to reroute it for instances.

    The subject's own attribute (if any) is saved at install time and put
    back on uninstall; a hook shadowing an inherited or missing attribute is
    simply deleted.
    """

    def __init__(self) -> None:
        self._saved: dict[tuple[int, str], Any] = {}

    def original(self, subject: Any, method_name: str) -> Callable[..., Any] | None:
        if isinstance(subject, type) and inspect.isfunction(
            inspect.getattr_static(subject, method_name, None)
        ):
            return None
        value = getattr(subject, method_name, None)
        return value if callable(value) else None

    def signature(self, subject: Any, method_name: str) -> MethodSignature | None:
        value = self.original(subject, method_name)
        if value is None:
            return None
        return MethodSignature.from_callable(value)

    def install(self, subject: Any, method_name: str, dispatch: Dispatch) -> None:
        saved = self._save(subject, method_name)

        def hook(*args: Any, **kwargs: Any) -> Any:
            return dispatch(args, kwargs)

        hook.__name__ = method_name
        hook.__qualname__ = method_name
        original = self.original(subject, method_name)
        if original is not None:
            functools.update_wrapper(hook, original, updated=())
        if isinstance(subject, type):
            setattr(subject, method_name, _ClassHook(subject, method_name, saved, hook))
        else:
            setattr(subject, method_name, hook)
        logger.debug("Installed hook for %r.%s", subject, method_name)

    def uninstall(self, subject: Any, method_name: str) -> None:
        key = (id(subject), method_name)
        if key not in self._saved:
            return
        saved = self._saved.pop(key)
        if saved is _ABSENT:
            delattr(subject, method_name)
        else:
            setattr(subject, method_name, saved)
        logger.debug("Removed hook for %r.%s", subject, method_name)

    def _save(self, subject: Any, method_name: str) -> Any:
        key = (id(subject), method_name)
        if key not in self._saved:
            self._saved[key] = _own_attribute(subject, method_name)
        return self._saved[key]


class InstanceOfInterceptor(AttributeInterceptor):
    """Intercepts a method for every instance of a class subject.

    The hook is a descriptor on the class that binds to the receiving
    instance, so instances created after install are rerouted too, including
    calls made from their ``__init__``.  Lookups on the class itself still
    see the original attribute.
    """

    def original(self, subject: Any, method_name: str) -> Callable[..., Any] | None:
        raw = _class_attribute(subject, method_name)
        if not _is_method(raw):
            return None

        def original(receiver: Any, *args: Any, **kwargs: Any) -> Any:
            return _bind(raw, receiver)(*args, **kwargs)

        original.__name__ = method_name
        return original

    def signature(self, subject: Any, method_name: str) -> MethodSignature | None:
        raw = _class_attribute(subject, method_name)
        if not _is_method(raw):
            return None
        if isinstance(raw, (staticmethod, classmethod)):
            return MethodSignature.from_callable(raw.__get__(None, subject))
        return MethodSignature.from_callable(raw, bound=inspect.isfunction(raw))

    def install(self, subject: Any, method_name: str, dispatch: Dispatch) -> None:
        _require_class(subject)
        saved = self._save(subject, method_name)

        def hook(receiver: Any, *args: Any, **kwargs: Any) -> Any:
            return dispatch(args, kwargs, receiver)

        hook.__name__ = method_name
        hook.__qualname__ = f"{subject.__qualname__}.{method_name}"
        setattr(subject, method_name, _InstanceHook(subject, method_name, saved, hook))
        logger.debug("Installed instance hook for %r.%s", subject, method_name)


class _HookDescriptor:
    """Class attribute standing in for a method while a hook is installed.

    Lookups the hook does not cover resolve to what the class would have
    given without it: the saved own attribute, or the next one in the MRO.
    """

    def __init__(self, subject: type, method_name: str, saved: Any, hook: Callable[..., Any]) -> None:
        self.subject = subject
        self.method_name = method_name
        self.saved = saved
        self.hook = hook

    def _fallback(self, obj: Any, owner: type | None) -> Any:
        owner = owner if owner is not None else type(obj)
        value = self.saved
        if value is _ABSENT:
            value = self._inherited(owner)
        getter = getattr(type(value), "__get__", None)
        return getter(value, obj, owner) if getter is not None else value

    def _inherited(self, owner: type) -> Any:
        mro = owner.__mro__
        for klass in mro[mro.index(self.subject) + 1:]:
            if self.method_name in vars(klass):
                return vars(klass)[self.method_name]
        raise AttributeError(f"{owner.__name__!r} has no attribute {self.method_name!r}")


class _ClassHook(_HookDescriptor):
    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        if obj is None and owner is self.subject:
            return self.hook
        return self._fallback(obj, owner)


class _InstanceHook(_HookDescriptor):
    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        if obj is not None:
            return types.MethodType(self.hook, obj)
        return self._fallback(obj, owner)


def _own_attribute(subject: Any, method_name: str) -> Any:
    """Return the raw attribute from the subject's own namespace, or ``_ABSENT``."""
    try:
        namespace = vars(subject)
    except TypeError:
        return _ABSENT
    return namespace.get(method_name, _ABSENT)


def _require_class(subject: Any) -> None:
    if not isinstance(subject, type):
        raise TypeError(f"instance doubles need a class subject, got {subject!r}")


def _class_attribute(subject: Any, method_name: str) -> Any:
    """Find *method_name* in the class MRO without triggering descriptors."""
    _require_class(subject)
    for klass in subject.__mro__:
        value = vars(klass).get(method_name, _ABSENT)
        if isinstance(value, _HookDescriptor):
            # Look through a hook installed by another injection.
            value = value.saved
        if value is not _ABSENT:
            return value
    return _ABSENT


def _is_method(raw: Any) -> bool:
    return isinstance(raw, (staticmethod, classmethod)) or (raw is not _ABSENT and callable(raw))


def _bind(raw: Any, receiver: Any) -> Callable[..., Any]:
    getter = getattr(type(raw), "__get__", None)
    return getter(raw, receiver, type(receiver)) if getter is not None else raw
