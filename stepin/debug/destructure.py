"""
stepin.debug.destructure - The pattern binder

Turns a binding pattern plus a value expression into a flat, ordered list
of (name, expression) bindings, following Clojure's destructure:

- Simple binding: x -> (x value)
- Vector destructuring: [a b & rest :as all] -> positional nth/nthnext access
- Map destructuring: {a :x b :y :keys [c] :strs [d] :syms [e] :or {a 1} :as m}
- Nested patterns: [[a b] {:keys [c]}] -> recursive destructuring

Every emitted target is a plain symbol. Intermediate values are held in
generated temporaries named vec__N and map__N. The emitted expressions are
code: evaluating them in order, each seeing the earlier ones, performs the
destructuring.

Two binding modes are provided. bind_values binds a pattern against an
expression that will be evaluated; bind_raw_forms binds it against a list
of unevaluated forms (macro arguments), quoted as data.
"""

import re
from typing import Any, Callable, NamedTuple, Optional

from stepin.errors import MalformedDefinition
from stepin.runtime.core import gensym as _gensym
from stepin.runtime.types import (
    Decorated,
    Keyword,
    MapLiteral,
    Symbol,
    VectorLiteral,
    is_keyword,
    is_symbol,
)

CORE_NS = "stepin.core"

# Names of the temporaries introduced by the binder
TEMP_NAME_PATTERN = re.compile(r"^(vec|map)__\d+$")

# The synthetic name macro arguments are bound to
ARGS_SYMBOL = Symbol("args")


class Binding(NamedTuple):
    """A (name, value-expression) pair."""

    name: Symbol
    value: Any


def _core(name: str) -> Symbol:
    return Symbol(f"{CORE_NS}/{name}")


def is_temp_name(sym: Symbol) -> bool:
    """Check if sym is a temporary introduced by the binder."""
    return bool(TEMP_NAME_PATTERN.match(sym.name))


def quote_maybe(x):
    """Quote x unless it is self-quoting: symbols and lists get (quote x)."""
    if callable(x) and not isinstance(x, (Symbol, Keyword)):
        return x
    if isinstance(x, (Symbol, list)):
        return [Symbol("quote"), x]
    return x


def _items(form) -> list:
    if isinstance(form, VectorLiteral):
        return list(form.items)
    if isinstance(form, (list, tuple)):
        return list(form)
    raise MalformedDefinition(f"Expected a binding vector, got {form!r}", form)


class PatternBinder:
    """
    Expands binding patterns into flat binding lists.

    Args:
        skip_identity: omit bindings whose target is the very symbol
            they would be bound to, e.g. (x x) when a parameter has the
            same name as the argument passed for it
        gensym: factory for temporary names, defaults to the core gensym
    """

    def __init__(
        self,
        skip_identity: bool = False,
        gensym: Optional[Callable[[str], Symbol]] = None,
    ):
        self.skip_identity = skip_identity
        self.gensym = gensym or _gensym

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def destructure(self, bindings) -> list[Binding]:
        """Expand a let-style [pattern value pattern value ...] vector."""
        items = _items(bindings)
        if len(items) % 2 != 0:
            raise MalformedDefinition(
                "destructure requires an even number of forms in binding vector",
                bindings,
            )
        result: list[Binding] = []
        for i in range(0, len(items), 2):
            result.extend(self.bind(items[i], items[i + 1]))
        return result

    def bind(self, pattern, value_expr) -> list[Binding]:
        """Bind pattern against value_expr."""
        if isinstance(pattern, Decorated):
            return self.bind(pattern.form, value_expr)
        if isinstance(pattern, Symbol):
            if self.skip_identity and value_expr == pattern:
                return []
            return [Binding(pattern, value_expr)]
        if isinstance(pattern, VectorLiteral):
            return self._bind_vector(pattern, value_expr)
        if isinstance(pattern, MapLiteral):
            return self._bind_map(pattern, value_expr)
        raise MalformedDefinition(f"Unsupported binding form: {pattern!r}", pattern)

    bind_values = bind

    def bind_many(self, patterns, value_exprs) -> list[Binding]:
        """
        Bind patterns to value_exprs pairwise.

        Patterns without a value bind to nil; values without a pattern are
        ignored. A parameter list containing & is bound as a whole vector.
        """
        patterns = _items(patterns)
        value_exprs = list(value_exprs)
        if any(is_symbol(p, "&") for p in patterns):
            return self.bind(VectorLiteral(patterns), VectorLiteral(value_exprs))
        result: list[Binding] = []
        for i, pattern in enumerate(patterns):
            value = value_exprs[i] if i < len(value_exprs) else None
            result.extend(self.bind(pattern, value))
        return result

    def bind_raw_forms(self, pattern, forms) -> list[Binding]:
        """
        Bind pattern against unevaluated forms.

        The forms are quoted into a list bound to the synthetic name `args`,
        and the pattern is destructured against `args`.
        """
        quoted = quote_maybe(list(forms))
        return [Binding(ARGS_SYMBOL, quoted)] + self.bind(pattern, ARGS_SYMBOL)

    # -------------------------------------------------------------------------
    # Vector patterns
    # -------------------------------------------------------------------------

    def _bind_vector(self, pattern: VectorLiteral, value_expr) -> list[Binding]:
        gvec = self.gensym("vec__")
        result = [Binding(gvec, value_expr)]
        items = pattern.items
        n = 0
        seen_rest = False
        i = 0
        while i < len(items):
            item = items[i]
            if is_symbol(item, "&"):
                if i + 1 >= len(items):
                    raise MalformedDefinition(
                        "& must be followed by a binding pattern", pattern
                    )
                result.extend(
                    self.bind(items[i + 1], [_core("nthnext"), gvec, n])
                )
                seen_rest = True
                i += 2
            elif is_keyword(item, "as"):
                if i + 1 >= len(items):
                    raise MalformedDefinition(":as must be followed by a symbol", pattern)
                result.extend(self.bind(items[i + 1], gvec))
                i += 2
            else:
                if seen_rest:
                    raise MalformedDefinition(
                        "Unsupported binding form, only :as can follow & parameter",
                        pattern,
                    )
                result.extend(self.bind(item, [_core("nth"), gvec, n, None]))
                n += 1
                i += 1
        return result

    # -------------------------------------------------------------------------
    # Map patterns
    # -------------------------------------------------------------------------

    def _bind_map(self, pattern: MapLiteral, value_expr) -> list[Binding]:
        gmap = self.gensym("map__")
        result = [
            Binding(gmap, [_core("seq-to-map-for-destructuring"), value_expr])
        ]

        defaults = pattern.get(Keyword("or"))
        if defaults is not None and not isinstance(defaults, MapLiteral):
            raise MalformedDefinition(":or must be followed by a map", pattern)

        def lookup(key_expr, local: Symbol):
            default = defaults.get(local, _NO_DEFAULT) if defaults else _NO_DEFAULT
            if default is _NO_DEFAULT:
                return [_core("get"), gmap, key_expr]
            return [_core("get"), gmap, key_expr, default]

        for key, value in pattern.pairs:
            if isinstance(key, Keyword) and key.local_name in ("keys", "strs", "syms"):
                group = key.local_name
                for entry in _items(value):
                    local, key_expr = _group_entry(group, key.namespace, entry)
                    result.extend(self.bind(local, lookup(key_expr, local)))
            elif is_keyword(key, "as"):
                result.extend(self.bind(value, gmap))
            elif is_keyword(key, "or"):
                continue
            elif isinstance(key, Symbol):
                result.extend(self.bind(key, lookup(value, key)))
            elif isinstance(key, (VectorLiteral, MapLiteral, Decorated)):
                result.extend(self.bind(key, [_core("get"), gmap, value]))
            else:
                raise MalformedDefinition(
                    f"Unsupported binding form: {key!r} {value!r}", pattern
                )
        return result


_NO_DEFAULT = object()


def _group_entry(group: str, namespace: Optional[str], entry) -> tuple[Symbol, Any]:
    """
    Return (local symbol, lookup key expression) for one :keys/:strs/:syms
    entry. A namespaced group (:person/keys) or a qualified entry
    (:keys [person/name]) looks up a qualified key.
    """
    if isinstance(entry, (Symbol, Keyword)):
        qualifier = entry.namespace or namespace
        local = Symbol(entry.local_name)
    else:
        raise MalformedDefinition(f"{group} entries must be symbols, got {entry!r}", entry)

    full = f"{qualifier}/{local.name}" if qualifier else local.name
    if group == "keys":
        return local, Keyword(full)
    if group == "strs":
        return local, local.name
    return local, [Symbol("quote"), Symbol(full)]


# Module-level helpers over a default binder

_default_binder = PatternBinder()


def destructure(bindings) -> list[Binding]:
    """Expand a let-style binding vector into flat bindings."""
    return _default_binder.destructure(bindings)


def bind(pattern, value_expr) -> list[Binding]:
    return _default_binder.bind(pattern, value_expr)


def bind_many(patterns, value_exprs) -> list[Binding]:
    return _default_binder.bind_many(patterns, value_exprs)


def bindings_vector(bindings: list[Binding]) -> VectorLiteral:
    """Lay bindings out as a let-style [name value ...] vector."""
    items: list[Any] = []
    for name, value in bindings:
        items.append(name)
        items.append(value)
    return VectorLiteral(items)


__all__ = [
    "Binding",
    "PatternBinder",
    "ARGS_SYMBOL",
    "TEMP_NAME_PATTERN",
    "is_temp_name",
    "quote_maybe",
    "destructure",
    "bind",
    "bind_many",
    "bindings_vector",
]
