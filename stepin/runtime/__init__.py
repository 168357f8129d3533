"""
stepin.runtime - The stepin Runtime

Submodules:
- types: Core type definitions (Symbol, Keyword, VectorLiteral, etc.)
- core: Standard library functions (first, rest, map, filter, etc.)
- ns: Namespaces, vars and their definition metadata
- interpreter: Evaluates forms against the namespace registry

Only the types are re-exported here; core and the interpreter use the
printer, which itself depends on the types.
"""

from stepin.runtime.types import (
    Decorated,
    Keyword,
    MapLiteral,
    SetLiteral,
    Symbol,
    Vector,
    VectorLiteral,
    is_keyword,
    is_symbol,
    normalize_name,
    vec,
)

__all__ = [
    "Decorated",
    "Keyword",
    "MapLiteral",
    "SetLiteral",
    "Symbol",
    "Vector",
    "VectorLiteral",
    "is_keyword",
    "is_symbol",
    "normalize_name",
    "vec",
]
