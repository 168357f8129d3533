"""
stepin.errors - Error kinds and tagged results

Step-in failures are raised internally as StepinError subclasses and
converted to StepResult values at the public entry points, so callers
always get either an expression or a failure kind plus the offending form.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class StepinError(Exception):
    """Base class for step-in failures. Carries the offending form."""

    kind = "error"

    def __init__(self, message: str, form: Any = None):
        super().__init__(message)
        self.form = form


class UnresolvedSymbol(StepinError):
    """The callee cannot be found in any loaded namespace."""

    kind = "unresolved-symbol"


class NoMatchingArity(StepinError):
    """No clause of the callee accepts the call's argument count."""

    kind = "no-matching-arity"

    def __init__(self, message: str, form: Any = None, arg_count: int = 0, arities=()):
        super().__init__(message, form)
        self.arg_count = arg_count
        self.arities = list(arities)


class MalformedDefinition(StepinError):
    """The callee's source does not have the doc/attr-map/clauses shape."""

    kind = "malformed-definition"


class EvaluationDeferred(StepinError):
    """Reading or evaluating was refused because read-time evaluation is off."""

    kind = "evaluation-deferred"


class EvalError(Exception):
    """Raised by the interpreter when evaluation fails."""

    def __init__(self, message: str, form: Any = None):
        super().__init__(message)
        self.form = form


class ResultType(Enum):
    """Type of result returned from a step-in operation or a REPL evaluation."""

    VALUE = "value"
    ERROR = "error"
    INCOMPLETE = "incomplete"
    EMPTY = "empty"


@dataclass
class StepResult:
    """Result of flattening or stepping into a call."""

    type: ResultType
    value: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    form: Any = None

    def is_success(self) -> bool:
        return self.type == ResultType.VALUE

    def is_error(self) -> bool:
        return self.type == ResultType.ERROR

    @classmethod
    def from_error(cls, err: StepinError) -> "StepResult":
        return cls(
            type=ResultType.ERROR,
            error=str(err),
            error_type=err.kind,
            form=err.form,
        )


__all__ = [
    "StepinError",
    "UnresolvedSymbol",
    "NoMatchingArity",
    "MalformedDefinition",
    "EvaluationDeferred",
    "EvalError",
    "ResultType",
    "StepResult",
]
