"""doubletake - a test double engine.

Replace a method on a subject with programmable doubles, route each call to
the right double, and verify call expectations at teardown.

Usage:
    from doubletake import Double, space_scope

    with space_scope() as space:
        space.register(mailer, "send", Double.mock("send", args=("hi",), returns=True))
        mailer.send("hi")
"""

from doubletake.arguments import AnyArgumentExpectation, ArgumentExpectation, Call, MatchKind
from doubletake.config import EngineConfig
from doubletake.double import Double
from doubletake.errors import (
    ArityMismatchError,
    DoubleError,
    DoubleNotFoundError,
    OrderingViolationError,
    SpyVerificationError,
    SubjectDoesNotImplementMethodError,
    TimesCalledError,
    VerificationFailures,
)
from doubletake.injection import DoubleInjection
from doubletake.interceptor import (
    AttributeInterceptor,
    InstanceOfInterceptor,
    MethodInterceptor,
    MethodSignature,
)
from doubletake.matcher import DoubleMatches, select_double
from doubletake.space import RecordedCall, Space, space_scope
from doubletake.spy import SpyVerification
from doubletake.times_called import TimesCalledExpectation, TimesCalledState
from doubletake.wildcards import (
    any_args,
    anything,
    boolean,
    dict_including,
    duck_type,
    is_a,
    matching,
    numeric,
    satisfy,
)

__all__ = [
    "AnyArgumentExpectation",
    "ArgumentExpectation",
    "Call",
    "MatchKind",
    "EngineConfig",
    "Double",
    "ArityMismatchError",
    "DoubleError",
    "DoubleNotFoundError",
    "OrderingViolationError",
    "SpyVerificationError",
    "SubjectDoesNotImplementMethodError",
    "TimesCalledError",
    "VerificationFailures",
    "DoubleInjection",
    "AttributeInterceptor",
    "InstanceOfInterceptor",
    "MethodInterceptor",
    "MethodSignature",
    "DoubleMatches",
    "select_double",
    "RecordedCall",
    "Space",
    "space_scope",
    "SpyVerification",
    "TimesCalledExpectation",
    "TimesCalledState",
    "any_args",
    "anything",
    "boolean",
    "dict_including",
    "duck_type",
    "is_a",
    "matching",
    "numeric",
    "satisfy",
]
__version__ = "0.1.0"
