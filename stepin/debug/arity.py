"""
stepin.debug.arity - Picking the clause that matches a call

A definition has one or more clauses, each a parameter vector and a body.
A clause's arity is its number of fixed parameters, or UNBOUNDED_ARITY when
it takes rest arguments. The selected clause is the one with the smallest
arity that can take the call's argument count, so fixed-arity clauses win
over a variadic one whenever they cover the call.
"""

from dataclasses import dataclass, field
from typing import Any

from stepin.errors import NoMatchingArity
from stepin.runtime.types import VectorLiteral, is_symbol

# Ranking value for clauses with a rest parameter
UNBOUNDED_ARITY = 1000


def arity(params) -> int:
    """Number of fixed parameters, or UNBOUNDED_ARITY if params contains &."""
    items = params.items if isinstance(params, VectorLiteral) else list(params)
    if any(is_symbol(item, "&") for item in items):
        return UNBOUNDED_ARITY
    return len(items)


@dataclass
class Clause:
    """One arity alternative of a definition: a parameter vector and a body."""

    params: VectorLiteral
    body: list[Any] = field(default_factory=list)

    @property
    def arity(self) -> int:
        return arity(self.params)

    @property
    def is_variadic(self) -> bool:
        return self.arity == UNBOUNDED_ARITY


def select_clause(clauses: list[Clause], arg_count: int, form: Any = None) -> Clause:
    """
    Return the clause with the smallest arity >= arg_count.

    Raises:
        NoMatchingArity: if no clause can take arg_count arguments.
    """
    ranked = sorted(clauses, key=lambda clause: clause.arity)
    for clause in ranked:
        if clause.arity >= arg_count:
            return clause
    arities = [c.arity for c in ranked]
    raise NoMatchingArity(
        f"No clause accepts {arg_count} argument(s); available arities: "
        + ", ".join("&" if a == UNBOUNDED_ARITY else str(a) for a in arities),
        form,
        arg_count=arg_count,
        arities=arities,
    )


__all__ = ["UNBOUNDED_ARITY", "Clause", "arity", "select_clause"]
