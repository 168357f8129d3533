"""
stepin.debug.resolver - Classifying the head of a call

resolve_sym tells what a symbol names from the point of view of the
current namespace:

- SPECIAL_FORM: a special form (if, def, let*, ...)
- MACRO / FUNCTION: a var, found in the current namespace (own vars,
  refers, aliases, qualified names) or else in any loaded namespace
- KEYWORD: the head was a keyword
- VARIABLE: not a var, but evaluating the symbol produced a value; this
  fallback only runs when speculative evaluation is enabled
- UNKNOWN: none of the above

Resolution never raises.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from stepin.compiler.printer import pr_str
from stepin.debug.environment import SymbolEnvironment, SymbolInfo
from stepin.runtime.core import SPECIAL_FORMS
from stepin.runtime.types import Keyword, Symbol, Vector


class SymbolKind(Enum):
    SPECIAL_FORM = "special"
    MACRO = "macro"
    FUNCTION = "function"
    KEYWORD = "keyword"
    VARIABLE = "variable"
    UNKNOWN = "unknown"


@dataclass
class ResolvedSymbol:
    """The classification of a symbol, with its var info when it has one."""

    kind: SymbolKind
    info: Optional[SymbolInfo] = None
    value: Any = None  # printed value, for VARIABLE

    @property
    def is_macro(self) -> bool:
        return self.kind == SymbolKind.MACRO


class SymbolResolver:
    """
    Resolves symbols against a SymbolEnvironment.

    Args:
        env: the environment to query
        speculative_eval: allow evaluating an unresolved symbol as a last
            resort; the evaluation may have side effects
        log: called with a message for every resolution fallback
    """

    def __init__(
        self,
        env: SymbolEnvironment,
        speculative_eval: bool = False,
        log: Optional[Callable[[str], None]] = None,
    ):
        self.env = env
        self.speculative_eval = speculative_eval
        self.log = log

    def _log(self, message: str) -> None:
        if self.log is not None:
            self.log(message)

    def resolve_sym(self, sym) -> ResolvedSymbol:
        if isinstance(sym, Keyword):
            return ResolvedSymbol(SymbolKind.KEYWORD)
        if not isinstance(sym, Symbol):
            return ResolvedSymbol(SymbolKind.UNKNOWN)
        if self.env.is_special(sym):
            return ResolvedSymbol(SymbolKind.SPECIAL_FORM)

        info = self._lookup(sym)
        if info is not None:
            kind = SymbolKind.MACRO if info.is_macro else SymbolKind.FUNCTION
            return ResolvedSymbol(kind, info)

        if self.speculative_eval:
            try:
                value = self.env.evaluate(sym)
            except Exception as e:
                self._log(f"speculative evaluation of {sym} failed: {e}")
            else:
                if value is not None and value is not False:
                    return ResolvedSymbol(SymbolKind.VARIABLE, value=pr_str(value))

        self._log(f"unable to resolve {sym}")
        return ResolvedSymbol(SymbolKind.UNKNOWN)

    def _lookup(self, sym: Symbol) -> Optional[SymbolInfo]:
        try:
            info = self.env.lookup(sym)
            if info is None:
                info = self.env.lookup_anywhere(sym)
                if info is not None:
                    self._log(f"{sym} resolved outside {self.env.current_namespace()} in {info.ns}")
            return info
        except Exception as e:
            self._log(f"lookup of {sym} failed: {e}")
            return None

    def is_macro(self, sym) -> bool:
        return self.resolve_sym(sym).is_macro

    def arglist(self, sym) -> list[str]:
        """
        Describe how sym can be called: the usage of a special form, the
        :arglists of a var, "[key]" for maps and sets, "[idx]" for vectors.
        """
        resolved = self.resolve_sym(sym)
        if resolved.kind == SymbolKind.SPECIAL_FORM:
            usage = SPECIAL_FORMS.get(sym.name, "()")
            params = usage[1:-1].split(" ", 1)[1:] if " " in usage else []
            return [f"[{params[0]}]" if params else "[]"]

        if resolved.info is not None and resolved.info.arglists:
            return [pr_str(a) for a in resolved.info.arglists]

        try:
            value = resolved.info.value if resolved.info is not None else self.env.evaluate(sym)
        except Exception:
            return ["is uncallable"]
        if isinstance(value, (dict, frozenset, set)):
            return ["[key]"]
        if isinstance(value, Vector):
            return ["[idx]"]
        return ["is uncallable"]


__all__ = ["SymbolKind", "ResolvedSymbol", "SymbolResolver"]
