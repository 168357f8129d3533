"""
stepin.compiler.macros - Bootstrap macros and macro expansion

This module implements the macros the interpreter needs before any source
file can be loaded:
- let, fn, loop: binding forms with destructuring, lowered to the let*,
  fn* and loop* special forms through the pattern binder
- defn, defmacro: definitions, lowered to def with :doc, :arglists and
  :macro metadata
- ns: namespace declaration, lowered to in-ns and require calls
- Macro expansion functions

Everything else (when, cond, ->, and, or ...) is defined with defmacro in
stepin/std/core.clj, so it has source text like user code does.
"""

from typing import Any, Callable, Optional

from stepin.compiler.definitions import parse_clauses, parse_definition
from stepin.compiler.reader import SourceList
from stepin.debug.destructure import PatternBinder, bindings_vector
from stepin.runtime.core import gensym
from stepin.runtime.types import (
    Decorated,
    Keyword,
    MapLiteral,
    Symbol,
    VectorLiteral,
    is_keyword,
    is_symbol,
)

# Name -> Python macro function, interned into the core namespace
BOOTSTRAP_MACROS: dict[str, Callable] = {}

# Name -> arglists reported for the bootstrap macros
BOOTSTRAP_ARGLISTS: dict[str, str] = {}


def bootstrap_macro(name: str, arglists: str):
    def register(fn):
        BOOTSTRAP_MACROS[name] = fn
        BOOTSTRAP_ARGLISTS[name] = arglists
        return fn

    return register


def _binding_items(form, what: str) -> list:
    if not isinstance(form, VectorLiteral):
        raise SyntaxError(f"{what} requires a vector for its binding")
    if len(form.items) % 2 != 0:
        raise SyntaxError(f"{what} requires an even number of forms in binding vector")
    return list(form.items)


# =============================================================================
# Binding forms
# =============================================================================


@bootstrap_macro("let", "([bindings & body])")
def let_macro(bindings, *body):
    """binding => binding-form init-expr

    Evaluates the exprs in a lexical context in which the symbols in the
    binding-forms are bound to their respective init-exprs or parts
    therein."""
    _binding_items(bindings, "let")
    flat = PatternBinder().destructure(bindings)
    return [Symbol("let*"), bindings_vector(flat), *body]


def _simplify_params(params: VectorLiteral, body: list) -> tuple[VectorLiteral, list]:
    """
    Replace destructuring parameters with generated names, moving the
    patterns into a let around the body.
    """
    new_params: list[Any] = []
    patterns: list[Any] = []
    for param in params.items:
        if isinstance(param, Decorated):
            param = param.form
        if isinstance(param, Symbol):
            new_params.append(param)
            continue
        temp = gensym("p__")
        new_params.append(temp)
        patterns.extend([param, temp])
    if patterns:
        body = [[Symbol("let"), VectorLiteral(patterns), *body]]
    return VectorLiteral(new_params), body


@bootstrap_macro("fn", "([name? [params*] exprs*] [name? ([params*] exprs*) +])")
def fn_macro(*args):
    """params => positional-params* , or positional-params* & rest-param

    Defines a function. Parameters may be destructuring patterns."""
    rest = list(args)
    name = None
    if rest and isinstance(rest[0], Symbol):
        name = rest.pop(0)
    clauses = parse_clauses(rest)
    out: list[Any] = [Symbol("fn*")]
    if name is not None:
        out.append(name)
    for clause in clauses:
        params, body = _simplify_params(clause.params, clause.body)
        out.append([params, *body])
    return out


@bootstrap_macro("loop", "([bindings & body])")
def loop_macro(bindings, *body):
    """Evaluates the exprs in a lexical context like let, and acts as a
    recur target."""
    items = _binding_items(bindings, "loop")
    pairs = [(items[i], items[i + 1]) for i in range(0, len(items), 2)]
    if all(isinstance(target, Symbol) for target, _ in pairs):
        return [Symbol("loop*"), bindings, *body]

    temps = [gensym("loop__") for _ in pairs]
    outer = VectorLiteral([x for temp, (_, init) in zip(temps, pairs) for x in (temp, init)])
    loop_bindings = VectorLiteral([x for temp in temps for x in (temp, temp)])
    inner = VectorLiteral([x for temp, (target, _) in zip(temps, pairs) for x in (target, temp)])
    return [
        Symbol("let"),
        outer,
        [Symbol("loop*"), loop_bindings, [Symbol("let"), inner, *body]],
    ]


# =============================================================================
# Definitions
# =============================================================================


def _definition_meta(definition, extra_pairs) -> MapLiteral:
    pairs: list[tuple[Any, Any]] = []
    if isinstance(definition.meta, MapLiteral):
        pairs.extend(definition.meta.pairs)
    elif isinstance(definition.meta, Keyword):
        pairs.append((definition.meta, True))
    if definition.attr_map is not None:
        pairs.extend(definition.attr_map.pairs)
    if definition.doc is not None:
        pairs.append((Keyword("doc"), definition.doc))
    arglists = [clause.params for clause in definition.clauses]
    pairs.append((Keyword("arglists"), [Symbol("quote"), arglists]))
    pairs.extend(extra_pairs)
    return MapLiteral(pairs)


def _lower_definition(head: str, args, extra_pairs) -> list:
    definition = parse_definition([Symbol(head), *args])
    fn_form: list[Any] = [Symbol("fn"), definition.name]
    for clause in definition.clauses:
        fn_form.append([clause.params, *clause.body])
    meta = _definition_meta(definition, extra_pairs)
    return [Symbol("def"), Decorated(meta, definition.name), fn_form]


@bootstrap_macro("defn", "([name doc-string? attr-map? [params*] body] [name doc-string? attr-map? ([params*] body) + attr-map?])")
def defn_macro(*args):
    """Same as (def name (fn [params*] exprs*)) with a docstring and
    attributes added to the var metadata."""
    return _lower_definition("defn", args, [])


@bootstrap_macro("defmacro", "([name doc-string? attr-map? [params*] body] [name doc-string? attr-map? ([params*] body) + attr-map?])")
def defmacro_macro(*args):
    """Like defn, but the resulting function name is declared as a macro
    and will be used as a macro by the interpreter when it is called."""
    return _lower_definition("defmacro", args, [(Keyword("macro"), True)])


# =============================================================================
# Namespaces
# =============================================================================


@bootstrap_macro("ns", "([name docstring? references*])")
def ns_macro(name, *references):
    """Sets the current namespace to name, creating it if needed, and loads
    the namespaces named in (:require ...) references."""
    if not isinstance(name, Symbol):
        raise SyntaxError(f"ns name must be a symbol, got {name!r}")
    out: list[Any] = [
        Symbol("do"),
        [Symbol("stepin.core/in-ns"), [Symbol("quote"), name]],
    ]
    for ref in references:
        if isinstance(ref, str):
            continue
        if not isinstance(ref, list) or not ref:
            raise SyntaxError(f"Invalid ns reference: {ref!r}")
        if is_keyword(ref[0], "require"):
            for spec in ref[1:]:
                out.append([Symbol("stepin.core/require"), [Symbol("quote"), spec]])
    return out


# =============================================================================
# Macro Expansion
# =============================================================================


def is_macro_call(form, lookup: Callable[[Symbol], Optional[Callable]]) -> bool:
    """Check if form is a call whose head names a macro according to lookup."""
    if not isinstance(form, list) or len(form) == 0:
        return False
    head = form[0]
    if not isinstance(head, Symbol) or is_symbol(head, "&"):
        return False
    return lookup(head) is not None


def _carry_location(expansion, form):
    if isinstance(expansion, list) and not isinstance(expansion, SourceList):
        if isinstance(form, SourceList):
            return SourceList(
                expansion, form.line, form.col, form.end_line, form.end_col
            )
    return expansion


def macroexpand_1(form, lookup: Callable[[Symbol], Optional[Callable]]):
    """Expand form once if it's a macro call.

    The expansion keeps the call's source location, so a def produced by
    defn records the line of the defn.
    """
    if not is_macro_call(form, lookup):
        return form
    macro_fn = lookup(form[0])
    return _carry_location(macro_fn(*form[1:]), form)


def macroexpand(form, lookup, max_depth=100):
    """Expand form until its head is no longer a macro."""
    depth = 0
    while is_macro_call(form, lookup) and depth < max_depth:
        form = macroexpand_1(form, lookup)
        depth += 1

    if depth >= max_depth:
        raise RuntimeError(f"Macro expansion exceeded maximum depth of {max_depth}")

    return form


__all__ = [
    "BOOTSTRAP_MACROS",
    "BOOTSTRAP_ARGLISTS",
    "is_macro_call",
    "macroexpand_1",
    "macroexpand",
]
