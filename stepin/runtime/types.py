"""
stepin.runtime.types - Forms and runtime values

Forms (code) are built from:
- Symbol and Keyword, which compare by name only
- VectorLiteral, MapLiteral and SetLiteral, the [...], {...} and #{...}
  literals exactly as read, so patterns such as {a :x} survive
- Decorated, a ^meta annotation around a form
- lists for calls (the reader produces SourceList)

Evaluating a VectorLiteral gives a Vector, a MapLiteral a dict and a
SetLiteral a frozenset.
"""

from dataclasses import dataclass
from typing import Any, Optional

_MISSING = object()

# Characters that can't appear in file names of namespaces
_NAME_REPLACEMENTS = (
    ("-", "_"),
    ("?", "_q"),
    ("!", "_bang"),
    ("*", "_star_"),
    ("+", "_plus_"),
    ("'", "_prime_"),
    ("$", "_S_"),
)


def normalize_name(name: str) -> str:
    """Turn a Lisp-style name segment into an identifier: my-app? -> my_app_q."""
    for old, new in _NAME_REPLACEMENTS:
        name = name.replace(old, new)
    return name


@dataclass(eq=False)
class Symbol:
    """
    A symbol, possibly namespace-qualified ("str/join").

    The location fields are where the reader found it. They take no part in
    equality, so a parameter read from a file equals the same name typed at
    the prompt.
    """

    name: str
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name

    def __eq__(self, other):
        if isinstance(other, Symbol):
            return self.name == other.name
        return False

    def __hash__(self):
        return hash(("Symbol", self.name))

    @property
    def namespace(self) -> Optional[str]:
        """The namespace part of a qualified symbol, or None."""
        if "/" in self.name and self.name != "/":
            return self.name.split("/", 1)[0]
        return None

    @property
    def local_name(self) -> str:
        if "/" in self.name and self.name != "/":
            return self.name.split("/", 1)[1]
        return self.name


@dataclass(eq=False)
class Keyword:
    """
    A keyword such as :name or :person/name. Keywords evaluate to themselves
    and, like symbols, compare by name only.

    Calling a keyword looks it up in a map: (:a {:a 1}) => 1, and
    (:b {:a 1} 0) => 0.
    """

    name: str
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f":{self.name}"

    def __str__(self):
        return f":{self.name}"

    def __eq__(self, other):
        if isinstance(other, Keyword):
            return self.name == other.name
        return False

    def __hash__(self):
        return hash(("Keyword", self.name))

    def __call__(self, coll, default=None):
        try:
            if hasattr(coll, "get"):
                return coll.get(self, default)
            return coll[self] if self in coll else default
        except (KeyError, TypeError):
            return default

    @property
    def namespace(self) -> Optional[str]:
        """The namespace part of a qualified keyword (:person/name), or None."""
        if "/" in self.name:
            return self.name.split("/", 1)[0]
        return None

    @property
    def local_name(self) -> str:
        if "/" in self.name:
            return self.name.split("/", 1)[1]
        return self.name


@dataclass
class Decorated:
    """^meta form: expr is the metadata (^:private, ^{:doc "..."}), form the
    annotated form."""

    expr: Any
    form: Any = None
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"Decorated({self.expr!r}, {self.form!r})"


@dataclass
class VectorLiteral:
    """
    A [...] form. Parameter lists and binding patterns are VectorLiterals;
    evaluating one produces a Vector.
    """

    items: list[Any]
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"VectorLiteral({self.items!r})"

    def __eq__(self, other):
        if isinstance(other, VectorLiteral):
            return self.items == other.items
        if isinstance(other, (list, tuple)):
            return self.items == list(other)
        return False

    __hash__ = None

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]


@dataclass
class MapLiteral:
    """
    A {...} form kept as ordered (key, value) pairs. Destructuring patterns
    put binding targets in key position, and those can be unhashable
    vectors or maps, so a dict won't do.
    """

    pairs: list[tuple[Any, Any]]
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"MapLiteral({self.pairs!r})"

    def __eq__(self, other):
        if isinstance(other, MapLiteral):
            return self.pairs == other.pairs
        if isinstance(other, dict):
            return len(self.pairs) == len(other) and all(
                k in other and other[k] == v for k, v in self.pairs
            )
        return False

    def __len__(self):
        return len(self.pairs)

    def get(self, key, default=None):
        """Return the value paired with key (first occurrence)."""
        for k, v in self.pairs:
            if k == key:
                return v
        return default


@dataclass
class SetLiteral:
    """A #{...} form."""

    items: list[Any]
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"SetLiteral({self.items!r})"

    def __eq__(self, other):
        if isinstance(other, SetLiteral):
            return self.items == other.items
        return False

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)


class Vector(tuple):
    """
    Runtime vector value.

    An immutable tuple that compares equal to any list or tuple holding the
    same items, so [1 2] and '(1 2) are equal like they are in Clojure.
    """

    def __eq__(self, other):
        if isinstance(other, (list, tuple, VectorLiteral)):
            return len(self) == len(other) and all(
                a == b for a, b in zip(self, other)
            )
        return False

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = tuple.__hash__

    def __repr__(self):
        return "[" + " ".join(repr(x) for x in self) + "]"


def vec(*items) -> Vector:
    """Create a Vector from the given items."""
    return Vector(items)


def is_symbol(x, name=None) -> bool:
    """Check if x is a Symbol, optionally with a specific name."""
    if isinstance(x, Symbol):
        if name is None:
            return True
        return x.name == name
    return False


def is_keyword(x, name=None) -> bool:
    """Check if x is a Keyword, optionally with a specific name."""
    if isinstance(x, Keyword):
        if name is None:
            return True
        return x.name == name
    return False


__all__ = [
    "Symbol",
    "Keyword",
    "Decorated",
    "VectorLiteral",
    "MapLiteral",
    "SetLiteral",
    "Vector",
    "vec",
    "is_symbol",
    "is_keyword",
    "normalize_name",
    "_MISSING",
]
