"""
stepin.runtime.core - Core runtime functions (Standard Library)

This module contains the Python functions behind the core namespace.
Interpreted code calls them directly; interpreted functions are plain
Python callables, so higher-order functions here accept both.

Categories:
- Sequence operations: first, rest, next, nthnext, seq, nth, get, etc.
- Collection constructors and utilities: vector, hash-map, assoc, into, etc.
- Higher-order functions: map, filter, reduce, apply, etc.
- Strings, symbols and keywords: str, name, keyword, gensym, etc.
- Math and comparison
- Atoms: atom, deref, swap!, reset!

Runtime representations: lists and seqs are Python lists, vectors are
Vector (a tuple subclass), maps are dicts, sets are frozensets, nil is None.
"""

import functools
import operator
from typing import Any, Callable, Optional

from stepin.compiler.printer import pr_str as _pr_str
from stepin.runtime.types import (
    _MISSING,
    Keyword,
    MapLiteral,
    SetLiteral,
    Symbol,
    Vector,
    VectorLiteral,
)

# =============================================================================
# Special forms
# =============================================================================

# Special form name -> usage, as reported by arglist tooling
SPECIAL_FORMS: dict[str, str] = {
    "def": "(def symbol doc-string? init?)",
    "if": "(if test then else?)",
    "do": "(do exprs*)",
    "let*": "(let* [bindings*] exprs*)",
    "fn*": "(fn* name? [params*] exprs*)",
    "loop*": "(loop* [bindings*] exprs*)",
    "recur": "(recur exprs*)",
    "quote": "(quote form)",
    "var": "(var symbol)",
    "throw": "(throw expr)",
    "try": "(try expr* catch-clause* finally-clause?)",
    "catch": "(catch classname name expr*)",
    "finally": "(finally expr*)",
    "set!": "(set! var-symbol expr)",
    ".": "(. instance-expr member-symbol args*)",
    "new": "(new Classname args*)",
    "&": "(& rest)",
    "quasiquote": "(quasiquote form)",
}


def special_symbol_q(sym) -> bool:
    """Return true if sym names a special form."""
    return isinstance(sym, Symbol) and sym.name in SPECIAL_FORMS


# =============================================================================
# Sequence operations
# =============================================================================


def seq(coll) -> Optional[list]:
    """Return a list of the items of coll, or nil when coll is empty."""
    if coll is None:
        return None
    if isinstance(coll, dict):
        items = [Vector((k, v)) for k, v in coll.items()]
    elif isinstance(coll, MapLiteral):
        items = [Vector(pair) for pair in coll.pairs]
    elif isinstance(coll, str):
        items = list(coll)
    else:
        try:
            items = list(coll)
        except TypeError:
            raise TypeError(f"Don't know how to create a seq from {type(coll).__name__}")
    return items if items else None


def first(coll):
    """First item of coll, or None when it is empty."""
    s = seq(coll)
    return s[0] if s else None


def rest(coll) -> list:
    """Return the items after the first, possibly empty."""
    s = seq(coll)
    return s[1:] if s else []


def next_(coll) -> Optional[list]:
    """Return the items after the first, or nil if there are none."""
    return seq(rest(coll))


def nthnext(coll, n) -> Optional[list]:
    """Return the items after the first n, or nil if there are none."""
    s = seq(coll)
    if s is None:
        return None
    return s[n:] or None


def nth(coll, index, default=_MISSING):
    """Get the element at index from a sequential collection."""
    if coll is None:
        return None if default is _MISSING else default
    if isinstance(coll, dict):
        raise TypeError("nth not supported on maps")
    if not isinstance(coll, (list, tuple, str)):
        coll = seq(coll) or []
    if 0 <= index < len(coll):
        return coll[index]
    if default is _MISSING:
        raise IndexError(f"Index {index} out of range")
    return default


def get(coll, key, default=None):
    """Value of key in a map, index in a vector or string, or default."""
    if coll is None:
        return default
    try:
        if isinstance(coll, (dict, MapLiteral)):
            return coll.get(key, default)
        if isinstance(coll, (frozenset, set)):
            return key if key in coll else default
        if isinstance(coll, (Vector, VectorLiteral, str)):
            if isinstance(key, int) and not isinstance(key, bool):
                return nth(coll, key, default)
            return default
    except TypeError:
        return default
    return default


def get_in(coll, keys, default=None):
    """Look up a value in nested associative structures."""
    current = coll
    for key in seq(keys) or []:
        current = get(current, key, _MISSING)
        if current is _MISSING:
            return default
    return current


def count(coll) -> int:
    """Number of items in coll; nil counts as 0."""
    if coll is None:
        return 0
    if isinstance(coll, (list, tuple, str, dict, frozenset, set)):
        return len(coll)
    return len(seq(coll) or [])


def cons(x, coll) -> list:
    """Return a list with x followed by the items of coll."""
    return [x] + (seq(coll) or [])


def conj(coll, *xs):
    """Add elements to a collection in the way natural for its type."""
    if coll is None:
        coll = []
    for x in xs:
        if isinstance(coll, Vector):
            coll = Vector(tuple(coll) + (x,))
        elif isinstance(coll, dict):
            k, v = x
            coll = {**coll, k: v}
        elif isinstance(coll, frozenset):
            coll = coll | {x}
        elif isinstance(coll, list):
            coll = [x] + coll
        else:
            raise TypeError(f"Don't know how to conj onto {type(coll).__name__}")
    return coll


def concat(*colls) -> list:
    """Concatenate the items of the given collections into a list."""
    result = []
    for coll in colls:
        result.extend(seq(coll) or [])
    return result


def list_(*items) -> list:
    return list(items)


def vector(*items) -> Vector:
    return Vector(items)


def vec(coll) -> Vector:
    """Create a vector holding the items of coll."""
    return Vector(seq(coll) or ())


def hash_map(*kvs) -> dict:
    """Create a map from alternating keys and values."""
    if len(kvs) % 2 != 0:
        raise ValueError("hash-map requires an even number of arguments")
    return {kvs[i]: kvs[i + 1] for i in range(0, len(kvs), 2)}


def hash_set(*items) -> frozenset:
    return frozenset(items)


def seq_to_map_for_destructuring(s):
    """
    Turn keyword-argument style rest args into a map.

    A seq of alternating keys and values becomes a map; a seq holding a single
    map yields that map; anything else is returned unchanged.
    """
    if isinstance(s, list):
        if len(s) == 1 and isinstance(s[0], dict):
            return s[0]
        return hash_map(*s)
    return s


def assoc(coll, *kvs):
    """Associate keys with values in a map (or indices in a vector)."""
    if len(kvs) % 2 != 0:
        raise ValueError("assoc expects even number of arguments after map/vector")
    if coll is None:
        coll = {}
    for i in range(0, len(kvs), 2):
        key, val = kvs[i], kvs[i + 1]
        if isinstance(coll, Vector):
            items = list(coll)
            if key == len(items):
                items.append(val)
            else:
                items[key] = val
            coll = Vector(items)
        elif isinstance(coll, dict):
            coll = {**coll, key: val}
        else:
            raise TypeError(f"Don't know how to assoc onto {type(coll).__name__}")
    return coll


def dissoc(coll, *keys):
    """Remove keys from a map."""
    if coll is None:
        return None
    return {k: v for k, v in coll.items() if k not in keys}


def keys(coll) -> Optional[list]:
    return seq(list(coll.keys())) if coll else None


def vals(coll) -> Optional[list]:
    return seq(list(coll.values())) if coll else None


def contains_q(coll, key) -> bool:
    """Check if a collection contains a key (index for vectors)."""
    if coll is None:
        return False
    if isinstance(coll, (dict, frozenset, set)):
        return key in coll
    if isinstance(coll, (Vector, str)):
        return isinstance(key, int) and 0 <= key < len(coll)
    return False


def into(to_coll, from_coll):
    """Conj every item of from_coll onto to_coll."""
    return conj(to_coll, *(seq(from_coll) or []))


def zipmap(ks, vs) -> dict:
    """Return a map with ks mapped to the corresponding vs."""
    return dict(zip(seq(ks) or [], seq(vs) or []))


def interleave(*colls) -> list:
    """Return a list of the first item in each coll, then the second, etc."""
    result = []
    for group in zip(*[seq(c) or [] for c in colls]):
        result.extend(group)
    return result


def partition(n, coll) -> list:
    """Split coll into lists of n items, dropping an incomplete tail."""
    items = seq(coll) or []
    return [items[i : i + n] for i in range(0, len(items) - n + 1, n)]


def take(n, coll) -> list:
    return (seq(coll) or [])[:n]


def drop(n, coll) -> list:
    return (seq(coll) or [])[n:]


def last(coll):
    s = seq(coll)
    return s[-1] if s else None


def reverse(coll) -> list:
    return list(reversed(seq(coll) or []))


def range_(*args) -> list:
    return list(range(*args))


def empty_q(coll) -> bool:
    return seq(coll) is None


# =============================================================================
# Higher-order functions
# =============================================================================


def apply(f: Callable, *args):
    """Call f with the leading args followed by the items of the last arg."""
    if not args:
        return f()
    return f(*args[:-1], *(seq(args[-1]) or []))


def map_(f: Callable, *colls) -> list:
    return [f(*items) for items in zip(*[seq(c) or [] for c in colls])]


def filter_(pred: Callable, coll) -> list:
    return [x for x in seq(coll) or [] if pred(x)]


def remove(pred: Callable, coll) -> list:
    return [x for x in seq(coll) or [] if not pred(x)]


def reduce(f: Callable, *args):
    """(reduce f coll) or (reduce f init coll)."""
    if len(args) == 1:
        items = seq(args[0]) or []
        if not items:
            return f()
        return functools.reduce(f, items[1:], items[0])
    init, coll = args
    return functools.reduce(f, seq(coll) or [], init)


def identity(x):
    return x


def partial(f: Callable, *bound):
    return functools.partial(f, *bound)


def comp(*fns):
    """Compose functions right to left."""

    def composed(*args):
        if not fns:
            return args[0] if args else None
        result = fns[-1](*args)
        for f in reversed(fns[:-1]):
            result = f(result)
        return result

    return composed


# =============================================================================
# Strings, symbols and keywords
# =============================================================================


def str_(*xs) -> str:
    """Concatenate the string forms of xs; nil contributes nothing."""
    parts = []
    for x in xs:
        if x is None:
            continue
        if isinstance(x, str):
            parts.append(x)
        else:
            parts.append(_pr_str(x))
    return "".join(parts)


def subs(s: str, start: int, end: Optional[int] = None) -> str:
    return s[start:end] if end is not None else s[start:]


def name(x) -> str:
    """Return the name of a keyword, symbol or string."""
    if isinstance(x, (Keyword, Symbol)):
        return x.local_name
    if isinstance(x, str):
        return x
    raise TypeError(f"Doesn't support name: {type(x).__name__}")


def keyword(x) -> Keyword:
    if isinstance(x, Keyword):
        return x
    if isinstance(x, Symbol):
        return Keyword(x.name)
    return Keyword(str(x))


def symbol(x) -> Symbol:
    if isinstance(x, Symbol):
        return x
    if isinstance(x, Keyword):
        return Symbol(x.name)
    return Symbol(str(x))


_gensym_counter = 0


def gensym(prefix="G__") -> Symbol:
    """Generate a unique symbol."""
    global _gensym_counter
    _gensym_counter += 1
    return Symbol(f"{prefix}{_gensym_counter}")


def pr_str(*xs) -> str:
    return " ".join(_pr_str(x) for x in xs)


def prn_str(*xs) -> str:
    return pr_str(*xs) + "\n"


def print_str(*xs) -> str:
    return " ".join(_pr_str(x, readably=False) for x in xs)


def println(*xs) -> None:
    print(print_str(*xs))


def prn(*xs) -> None:
    print(pr_str(*xs))


# =============================================================================
# Predicates
# =============================================================================


def nil_q(x) -> bool:
    return x is None


def some_q(x) -> bool:
    return x is not None


def seq_q(x) -> bool:
    return isinstance(x, list)


def list_q(x) -> bool:
    return isinstance(x, list)


def vector_q(x) -> bool:
    return isinstance(x, (Vector, VectorLiteral))


def sequential_q(x) -> bool:
    return isinstance(x, (list, Vector, VectorLiteral))


def map_q(x) -> bool:
    return isinstance(x, (dict, MapLiteral))


def set_q(x) -> bool:
    return isinstance(x, (frozenset, set, SetLiteral))


def string_q(x) -> bool:
    return isinstance(x, str)


def symbol_q(x) -> bool:
    return isinstance(x, Symbol)


def keyword_q(x) -> bool:
    return isinstance(x, Keyword)


def number_q(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def fn_q(x) -> bool:
    return callable(x) and not isinstance(x, (Keyword, dict, Vector))


def truthy(x) -> bool:
    """nil and false are falsey, everything else is truthy."""
    return x is not None and x is not False


def not_(x) -> bool:
    return not truthy(x)


# =============================================================================
# Math and comparison
# =============================================================================


def add(*args):
    return functools.reduce(operator.add, args, 0)


def sub(*args):
    if len(args) == 1:
        return -args[0]
    return functools.reduce(operator.sub, args[1:], args[0])


def mul(*args):
    return functools.reduce(operator.mul, args, 1)


def div(*args):
    if len(args) == 1:
        args = (1,) + args

    def _div(a, b):
        if isinstance(a, int) and isinstance(b, int) and a % b == 0:
            return a // b
        return a / b

    return functools.reduce(_div, args[1:], args[0])


def inc(x):
    return x + 1


def dec(x):
    return x - 1


def mod(a, b):
    return a % b


def _chain(op) -> Callable:
    def compare(*args):
        return all(op(a, b) for a, b in zip(args, args[1:]))

    return compare


eq = _chain(operator.eq)
lt = _chain(operator.lt)
gt = _chain(operator.gt)
lte = _chain(operator.le)
gte = _chain(operator.ge)


def neq(*args) -> bool:
    return not eq(*args)


def even_q(n) -> bool:
    return n % 2 == 0


def odd_q(n) -> bool:
    return n % 2 == 1


def zero_q(n) -> bool:
    return n == 0


def pos_q(n) -> bool:
    return n > 0


def neg_q(n) -> bool:
    return n < 0


def max_(*args):
    return max(args)


def min_(*args):
    return min(args)


def boolean(x) -> bool:
    return truthy(x)


def some(pred: Callable, coll):
    """Return the first truthy (pred x) for x in coll, else nil."""
    for x in seq(coll) or []:
        result = pred(x)
        if truthy(result):
            return result
    return None


def every_q(pred: Callable, coll) -> bool:
    return all(truthy(pred(x)) for x in seq(coll) or [])


def list_star(*args) -> Optional[list]:
    """Return a list of the leading args followed by the items of the last."""
    if not args:
        return None
    return seq(list(args[:-1]) + (seq(args[-1]) or []))


# =============================================================================
# Exceptions
# =============================================================================


class ExceptionInfo(Exception):
    """An exception carrying a map of data, as created by ex-info."""

    def __init__(self, message: str, data=None, cause=None):
        super().__init__(message)
        self.message = message
        self.data = data if data is not None else {}
        self.__cause__ = cause

    def __repr__(self):
        return f"#error {{:message {self.message!r} :data {_pr_str(self.data)}}}"


def ex_info(message: str, data, cause=None) -> ExceptionInfo:
    return ExceptionInfo(message, data, cause)


def ex_data(ex):
    return ex.data if isinstance(ex, ExceptionInfo) else None


def ex_message(ex) -> Optional[str]:
    if isinstance(ex, ExceptionInfo):
        return ex.message
    if isinstance(ex, BaseException):
        return str(ex)
    return None


# =============================================================================
# Atoms
# =============================================================================


class Atom:
    """A mutable reference cell."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"#atom[{_pr_str(self.value)}]"


def atom(value) -> Atom:
    return Atom(value)


def deref(ref):
    if isinstance(ref, Atom):
        return ref.value
    if hasattr(ref, "value"):
        return ref.value
    raise TypeError(f"Can't deref {type(ref).__name__}")


def swap_bang(a: Atom, f: Callable, *args):
    a.value = f(a.value, *args)
    return a.value


def reset_bang(a: Atom, value):
    a.value = value
    return value


# =============================================================================
# Registration
# =============================================================================

# Lisp name -> Python implementation, interned into the core namespace
CORE_FUNCTIONS: dict[str, Callable] = {
    "first": first,
    "rest": rest,
    "next": next_,
    "nthnext": nthnext,
    "seq": seq,
    "nth": nth,
    "get": get,
    "get-in": get_in,
    "count": count,
    "cons": cons,
    "conj": conj,
    "concat": concat,
    "list": list_,
    "vector": vector,
    "vec": vec,
    "hash-map": hash_map,
    "hash-set": hash_set,
    "seq-to-map-for-destructuring": seq_to_map_for_destructuring,
    "assoc": assoc,
    "dissoc": dissoc,
    "keys": keys,
    "vals": vals,
    "contains?": contains_q,
    "into": into,
    "zipmap": zipmap,
    "interleave": interleave,
    "partition": partition,
    "take": take,
    "drop": drop,
    "last": last,
    "reverse": reverse,
    "range": range_,
    "empty?": empty_q,
    "apply": apply,
    "map": map_,
    "filter": filter_,
    "remove": remove,
    "reduce": reduce,
    "identity": identity,
    "partial": partial,
    "comp": comp,
    "str": str_,
    "subs": subs,
    "name": name,
    "keyword": keyword,
    "symbol": symbol,
    "gensym": gensym,
    "pr-str": pr_str,
    "prn-str": prn_str,
    "print-str": print_str,
    "println": println,
    "prn": prn,
    "nil?": nil_q,
    "some?": some_q,
    "seq?": seq_q,
    "list?": list_q,
    "vector?": vector_q,
    "sequential?": sequential_q,
    "map?": map_q,
    "set?": set_q,
    "string?": string_q,
    "symbol?": symbol_q,
    "keyword?": keyword_q,
    "number?": number_q,
    "fn?": fn_q,
    "special-symbol?": special_symbol_q,
    "not": not_,
    "+": add,
    "-": sub,
    "*": mul,
    "/": div,
    "inc": inc,
    "dec": dec,
    "mod": mod,
    "=": eq,
    "not=": neq,
    "<": lt,
    ">": gt,
    "<=": lte,
    ">=": gte,
    "even?": even_q,
    "odd?": odd_q,
    "zero?": zero_q,
    "pos?": pos_q,
    "neg?": neg_q,
    "max": max_,
    "min": min_,
    "boolean": boolean,
    "some": some,
    "every?": every_q,
    "list*": list_star,
    "ex-info": ex_info,
    "ex-data": ex_data,
    "ex-message": ex_message,
    "atom": atom,
    "deref": deref,
    "swap!": swap_bang,
    "reset!": reset_bang,
}
