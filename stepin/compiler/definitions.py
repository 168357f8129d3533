"""
stepin.compiler.definitions - The shape of function and macro definitions

A definition form is

    (defn name doc-string? attr-map? [params*] body*)
    (defn name doc-string? attr-map? ([params*] body*)+ attr-map?)

with defn-, defmacro or def/fn in place of defn. parse_definition splits a
form into its optional docstring, optional attribute map and one or more
clauses. The defn and defmacro macros and the step-in tooling both rely on
this single reading of the shape.
"""

from dataclasses import dataclass
from typing import Any, Optional

from stepin.debug.arity import Clause
from stepin.errors import MalformedDefinition
from stepin.runtime.types import Decorated, MapLiteral, Symbol, VectorLiteral

DEFINING_FORMS = {"defn", "defn-", "defmacro"}
FN_FORMS = {"fn", "fn*"}


@dataclass
class Definition:
    """The resolved shape of a callee."""

    kind: str  # "defn", "defn-", "defmacro", "def"
    name: Symbol
    clauses: list[Clause]
    doc: Optional[str] = None
    attr_map: Optional[MapLiteral] = None
    meta: Any = None  # ^meta attached to the name, if any

    @property
    def is_macro(self) -> bool:
        return self.kind == "defmacro"

    @property
    def arglists(self) -> list[VectorLiteral]:
        return [clause.params for clause in self.clauses]


def _unwrap_name(form) -> tuple[Any, Any]:
    if isinstance(form, Decorated):
        return form.form, form.expr
    return form, None


def parse_clauses(decls: list, form: Any = None) -> list[Clause]:
    """
    Parse what follows the name/doc/attr-map of a definition: a single
    [params] body... or several ([params] body...) lists.
    """
    if not decls:
        raise MalformedDefinition("Definition has no parameter list", form)

    if isinstance(decls[0], VectorLiteral):
        return [Clause(decls[0], list(decls[1:]))]

    clauses = []
    for decl in decls:
        if isinstance(decl, MapLiteral):
            # trailing attr-map of a multi-arity definition
            continue
        if not isinstance(decl, list) or not decl:
            raise MalformedDefinition(
                f"Expected a parameter vector or an arity clause, got {decl!r}", form
            )
        params = decl[0]
        if not isinstance(params, VectorLiteral):
            raise MalformedDefinition(
                f"Parameter declaration {params!r} should be a vector", form
            )
        clauses.append(Clause(params, list(decl[1:])))
    if not clauses:
        raise MalformedDefinition("Definition has no arity clauses", form)
    return clauses


def parse_fn(form: list) -> tuple[Optional[Symbol], list[Clause]]:
    """Parse (fn name? [params] body...) or (fn name? ([params] body...)+)."""
    rest = list(form[1:])
    name = None
    if rest and isinstance(rest[0], Symbol):
        name = rest[0]
        rest = rest[1:]
    return name, parse_clauses(rest, form)


def parse_definition(form) -> Definition:
    """
    Split a definition form into name, docstring, attribute map and clauses.

    Raises:
        MalformedDefinition: if form is not a recognizable definition.
    """
    if not isinstance(form, list) or len(form) < 2:
        raise MalformedDefinition(f"Not a definition form: {form!r}", form)
    head = form[0]
    if not isinstance(head, Symbol):
        raise MalformedDefinition(f"Not a definition form: {form!r}", form)
    kind = head.local_name

    name, meta = _unwrap_name(form[1])
    if not isinstance(name, Symbol):
        raise MalformedDefinition(
            f"First argument to {kind} must be a symbol, got {form[1]!r}", form
        )

    rest = list(form[2:])
    doc = None
    if rest and isinstance(rest[0], str):
        doc = rest[0]
        rest = rest[1:]

    if kind == "def":
        # (def name doc? (fn ...))
        if len(rest) != 1 or not (
            isinstance(rest[0], list)
            and rest[0]
            and isinstance(rest[0][0], Symbol)
            and rest[0][0].local_name in FN_FORMS
        ):
            raise MalformedDefinition(
                f"{name} is not defined as a function: {form!r}", form
            )
        _, clauses = parse_fn(rest[0])
        return Definition(kind, name, clauses, doc=doc, meta=meta)

    if kind not in DEFINING_FORMS:
        raise MalformedDefinition(f"Unsupported definition form {kind}", form)

    attr_map = None
    if rest and isinstance(rest[0], MapLiteral):
        attr_map = rest[0]
        rest = rest[1:]

    clauses = parse_clauses(rest, form)
    return Definition(kind, name, clauses, doc=doc, attr_map=attr_map, meta=meta)


__all__ = [
    "Definition",
    "DEFINING_FORMS",
    "FN_FORMS",
    "parse_clauses",
    "parse_definition",
    "parse_fn",
]
