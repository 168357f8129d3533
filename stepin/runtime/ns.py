"""
Namespaces and vars.

A Var is a named binding owned by a namespace. Its metadata records where
it was defined (:file, :line, :col) along with :doc, :arglists and :macro.
NamespaceRegistry holds the namespaces an interpreter has loaded.
SOURCE_ROOTS lists the directories searched when a namespace is required,
and SOURCE_CACHE keeps text that was loaded from strings.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

from stepin.runtime.types import Keyword, Symbol, VectorLiteral, normalize_name

SOURCE_EXTENSION = ".clj"


class Var:
    """
    A namespace-owned binding.

    The metadata dict uses plain string keys: "file", "line", "col", "doc",
    "arglists" (list of parameter vectors) and "macro".
    """

    __slots__ = ("ns", "name", "value", "meta")

    def __init__(self, ns: str, name: str, value: Any = None, meta=None):
        self.ns = ns
        self.name = name
        self.value = value
        self.meta: dict[str, Any] = dict(meta or {})

    @property
    def is_macro(self) -> bool:
        return bool(self.meta.get("macro"))

    @property
    def qualified_name(self) -> str:
        return f"{self.ns}/{self.name}"

    def __repr__(self):
        return f"#'{self.qualified_name}"


@dataclass
class NamespaceInfo:
    """Vars, refers and aliases of one namespace."""

    name: str
    file: Optional[str] = None  # None for namespaces made at the REPL
    vars: dict[str, Var] = field(default_factory=dict)
    refers: dict[str, str] = field(default_factory=dict)  # name -> owning ns
    aliases: dict[str, str] = field(default_factory=dict)  # alias -> ns

    def intern(self, name: str, value: Any = None, meta=None) -> Var:
        """Create or update the var `name` in this namespace."""
        var = self.vars.get(name)
        if var is None:
            var = Var(self.name, name, value, meta)
            self.vars[name] = var
        else:
            var.value = value
            if meta is not None:
                var.meta = dict(meta)
        return var


# Searched in order by find_source_file_for_ns: the loading file's
# directory, the working directory, $STEPIN_PATH, then configured paths.
SOURCE_ROOTS: list[str] = []

# file name -> text, for sources that never lived on disk
SOURCE_CACHE: dict[str, str] = {}


def remember_source(file: str, text: str) -> None:
    SOURCE_CACHE[file] = text


def ns_to_relpath(ns: str) -> str:
    """
    Path of a namespace's source relative to a source root.

    "geometry.shapes" maps to "geometry/shapes.clj" and "my.app-utils" to
    "my/app_utils.clj".
    """
    parts = [normalize_name(part) for part in ns.split(".")]
    return os.sep.join(parts) + SOURCE_EXTENSION


def find_source_file_for_ns(
    ns: str, extra_roots: Optional[list[str]] = None
) -> Optional[str]:
    """Absolute path of the first matching file under extra_roots or SOURCE_ROOTS."""
    rel = ns_to_relpath(ns)
    for root in list(extra_roots or []) + SOURCE_ROOTS:
        if not root:
            continue
        candidate = os.path.join(root, rel)
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)
    return None


def init_source_roots(
    current_file: Optional[str] = None,
    extra_paths: Optional[list[str]] = None,
    include_cwd: bool = True,
) -> None:
    """Rebuild SOURCE_ROOTS for loading `current_file` with `extra_paths`."""
    SOURCE_ROOTS.clear()

    if current_file:
        file_dir = os.path.dirname(os.path.abspath(current_file))
        if file_dir:
            SOURCE_ROOTS.append(file_dir)

    if include_cwd:
        cwd = os.getcwd()
        if cwd not in SOURCE_ROOTS:
            SOURCE_ROOTS.append(cwd)

    for p in os.environ.get("STEPIN_PATH", "").split(os.pathsep):
        p = p.strip()
        if p and os.path.isdir(p) and p not in SOURCE_ROOTS:
            SOURCE_ROOTS.append(p)

    for p in extra_paths or []:
        add_source_root(p)


def add_source_root(path: str, prepend: bool = False) -> None:
    path = os.path.abspath(path)
    if path in SOURCE_ROOTS:
        return
    if prepend:
        SOURCE_ROOTS.insert(0, path)
    else:
        SOURCE_ROOTS.append(path)


class NamespaceRegistry:
    """
    The loaded namespaces of one interpreter.

    Lookup follows Clojure's resolve: a qualified symbol goes through
    aliases or full namespace names; an unqualified symbol is looked up in
    the given namespace's own vars, then its refers.
    """

    def __init__(self):
        self.namespaces: dict[str, NamespaceInfo] = {}

    def register(self, name: str, file: Optional[str] = None) -> NamespaceInfo:
        """Create the namespace `name` if needed and return it."""
        info = self.namespaces.get(name)
        if info is None:
            info = NamespaceInfo(name=name, file=file)
            self.namespaces[name] = info
        elif file and not info.file:
            info.file = file
        return info

    def get(self, name: str) -> Optional[NamespaceInfo]:
        return self.namespaces.get(name)

    def loaded(self, name: str) -> bool:
        return name in self.namespaces

    def names(self) -> list[str]:
        return list(self.namespaces.keys())

    def resolve(self, ns_name: str, sym: Symbol) -> Optional[Var]:
        """Resolve sym from the point of view of namespace ns_name."""
        ns = self.namespaces.get(ns_name)
        if ns is None:
            return None

        qualifier = sym.namespace
        if qualifier is not None:
            target = ns.aliases.get(qualifier, qualifier)
            target_ns = self.namespaces.get(target)
            if target_ns is None:
                return None
            return target_ns.vars.get(sym.local_name)

        var = ns.vars.get(sym.name)
        if var is not None:
            return var
        source_ns = ns.refers.get(sym.name)
        if source_ns is not None:
            source = self.namespaces.get(source_ns)
            if source is not None:
                return source.vars.get(sym.name)
        return None

    def resolve_anywhere(self, sym: Symbol) -> Optional[Var]:
        """Scan every loaded namespace for a var named like sym."""
        for ns_name in self.namespaces:
            var = self.resolve(ns_name, sym)
            if var is not None:
                return var
        return None

    def refer_all(self, into: str, source: str) -> None:
        """Refer every var of namespace `source` into namespace `into`."""
        target = self.register(into)
        source_ns = self.namespaces.get(source)
        if source_ns is None:
            return
        for name, var in source_ns.vars.items():
            if not var.meta.get("private"):
                target.refers[name] = source


def _items(form) -> list:
    return list(form.items) if isinstance(form, VectorLiteral) else list(form)


def parse_require_spec(spec) -> dict[str, Any]:
    """
    Parse one libspec of a require: `geometry.shapes`, `[geometry.shapes]`,
    or a vector with `:as alias` and `:refer [names]` / `:refer :all`.

    The result has "ns", "alias" (or None) and "refer" (a list of names,
    the string ":all", or None).
    """
    result: dict[str, Any] = {"ns": None, "alias": None, "refer": None}

    if isinstance(spec, Symbol):
        result["ns"] = spec.name
        return result
    if not isinstance(spec, (VectorLiteral, tuple, list)):
        raise SyntaxError(f"Invalid require spec: {spec}")

    items = _items(spec)
    if not items:
        raise SyntaxError("Empty require spec")
    if not isinstance(items[0], Symbol):
        raise SyntaxError("Require spec must start with namespace symbol")
    result["ns"] = items[0].name

    options = items[1:]
    for i in range(0, len(options), 2):
        option = options[i]
        if not isinstance(option, Keyword):
            raise SyntaxError(f"Unexpected item in require spec: {option}")
        if i + 1 >= len(options):
            raise SyntaxError(f":{option.name} requires a value")
        value = options[i + 1]

        if option.name == "as":
            if not isinstance(value, Symbol):
                raise SyntaxError(":as alias must be a symbol")
            result["alias"] = value.name
        elif option.name == "refer":
            if isinstance(value, Keyword) and value.name == "all":
                result["refer"] = ":all"
            elif isinstance(value, (VectorLiteral, tuple, list)):
                names = _items(value)
                if not all(isinstance(n, Symbol) for n in names):
                    raise SyntaxError(":refer items must be symbols")
                result["refer"] = [n.name for n in names]
            else:
                raise SyntaxError(":refer must be followed by vector or :all")
        else:
            raise SyntaxError(f"Unknown require option :{option.name}")

    return result


__all__ = [
    "Var",
    "NamespaceInfo",
    "NamespaceRegistry",
    "SOURCE_ROOTS",
    "SOURCE_CACHE",
    "remember_source",
    "ns_to_relpath",
    "find_source_file_for_ns",
    "init_source_roots",
    "add_source_root",
    "parse_require_spec",
]
