"""
stepin.debug.environment - The symbol environment the step-in tooling queries

Step-in needs four things from a live system: the definition metadata of a
symbol (namespace, file, line, macro flag, arglists), the source text of a
definition, a way to read text into forms, and a way to evaluate forms.
SymbolEnvironment is that interface; LiveEnvironment implements it over an
Interpreter. Tests can substitute any other implementation.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from stepin.compiler.reader import read_one, read_one_with_text
from stepin.errors import EvaluationDeferred
from stepin.runtime.core import special_symbol_q
from stepin.runtime.interpreter import READ_EVAL_UNKNOWN, Interpreter
from stepin.runtime.ns import SOURCE_CACHE, Var
from stepin.runtime.types import Symbol


@dataclass
class SymbolInfo:
    """What the environment knows about a symbol that names a var."""

    name: str
    ns: Optional[str] = None
    file: Optional[str] = None
    line: int = 0
    source: Optional[str] = None
    is_macro: bool = False
    arglists: list[Any] = field(default_factory=list)
    doc: Optional[str] = None
    value: Any = None


class SymbolEnvironment(ABC):
    """
    Abstract interface to the live system.

    lookup resolves from the current namespace only; lookup_anywhere scans
    every loaded namespace.
    """

    @abstractmethod
    def lookup(self, sym: Symbol) -> Optional[SymbolInfo]:
        """Resolve sym from the current namespace."""

    @abstractmethod
    def evaluate(self, expr):
        """Evaluate expr in the current namespace."""

    @abstractmethod
    def read_expression(self, text: str):
        """Read the first form in text."""

    @abstractmethod
    def current_namespace(self) -> str:
        """Name of the current namespace."""

    @abstractmethod
    def namespaces(self) -> list[str]:
        """Names of every loaded namespace."""

    def lookup_in(self, ns: str, sym: Symbol) -> Optional[SymbolInfo]:
        """Resolve sym from namespace ns; environments without namespaces
        scoping can rely on lookup."""
        return self.lookup(sym)

    def lookup_anywhere(self, sym: Symbol) -> Optional[SymbolInfo]:
        info = self.lookup(sym)
        if info is not None:
            return info
        for ns in self.namespaces():
            info = self.lookup_in(ns, sym)
            if info is not None:
                return info
        return None

    def is_special(self, sym) -> bool:
        return special_symbol_q(sym)

    def source_text(self, sym: Symbol) -> Optional[str]:
        """Source text of the definition of sym, or None."""
        info = self.lookup(sym)
        return info.source if info is not None else None


def expand_home(path: Optional[str]) -> Optional[str]:
    """Expand a leading ~ in path to the user's home directory."""
    if path and path.startswith("~"):
        sep = path.find(os.sep)
        rest = path[sep + 1 :] if sep >= 0 else ""
        return os.path.join(os.path.expanduser("~"), rest)
    return path


def _source_from_text(text: str, line: int, col: int = 0) -> Optional[str]:
    lines = text.splitlines(keepends=True)
    if line < 1 or line > len(lines):
        return None
    _, form_text = read_one_with_text("".join(lines[line - 1 :])[col:])
    return form_text


def source_fn(var: Var, read_eval: Any = True) -> Optional[str]:
    """
    Return the source text of the form that defined var, or None if it
    can't be found.

    The text is taken from the in-memory source cache for code loaded from
    strings, and from the file named in the var's :file metadata otherwise.
    Reading starts at the var's :line and :col and stops after one
    complete form.

    Raises:
        EvaluationDeferred: if read_eval is "unknown".
    """
    file = var.meta.get("file")
    line = var.meta.get("line") or 0
    if not file or not line:
        return None
    if file in SOURCE_CACHE:
        text = SOURCE_CACHE[file]
    else:
        path = expand_home(file)
        if not path or not os.path.isfile(path):
            return None
        with open(path, encoding="utf-8") as f:
            text = f.read()
    if read_eval == READ_EVAL_UNKNOWN:
        raise EvaluationDeferred(
            "Unable to read source while *read-eval* is :unknown.", Symbol(var.qualified_name)
        )
    return _source_from_text(text, line, var.meta.get("col") or 0)


class LiveEnvironment(SymbolEnvironment):
    """SymbolEnvironment over a running Interpreter."""

    def __init__(self, interpreter: Optional[Interpreter] = None):
        self.interpreter = interpreter or Interpreter()

    @property
    def read_eval(self):
        return self.interpreter.read_eval

    def _info(self, var: Var) -> SymbolInfo:
        meta = var.meta
        try:
            source = source_fn(var, self.read_eval)
        except (EvaluationDeferred, SyntaxError):
            source = None
        return SymbolInfo(
            name=var.name,
            ns=var.ns,
            file=meta.get("file"),
            line=meta.get("line") or 0,
            source=source,
            is_macro=var.is_macro,
            arglists=list(meta.get("arglists") or []),
            doc=meta.get("doc"),
            value=var.value,
        )

    def lookup(self, sym: Symbol) -> Optional[SymbolInfo]:
        var = self.interpreter.resolve(sym)
        return self._info(var) if var is not None else None

    def lookup_in(self, ns: str, sym: Symbol) -> Optional[SymbolInfo]:
        var = self.interpreter.registry.resolve(ns, sym)
        return self._info(var) if var is not None else None

    def source_text(self, sym: Symbol) -> Optional[str]:
        var = self.interpreter.resolve(sym)
        if var is None:
            var = self.interpreter.registry.resolve_anywhere(sym)
        if var is None:
            return None
        return source_fn(var, self.read_eval)

    def evaluate(self, expr):
        return self.interpreter.eval(expr)

    def read_expression(self, text: str):
        return read_one(text)

    def current_namespace(self) -> str:
        return self.interpreter.current_ns

    def namespaces(self) -> list[str]:
        return self.interpreter.registry.names()


__all__ = [
    "SymbolInfo",
    "SymbolEnvironment",
    "LiveEnvironment",
    "expand_home",
    "source_fn",
]
