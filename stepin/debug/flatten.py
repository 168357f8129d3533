"""
stepin.debug.flatten - Stepping into calls

Given a call (f a1 a2 ...), the call flattener finds the source of f,
selects the clause matching the argument count and produces an expression
that runs one step of f with its parameters bound to the arguments:

- flatten_expr: (let [p1 a1 p2 a2 ...] body...), the call inlined
- debug_step_in: (do (def p1 v1) (def p2 v2) ... {:p1 p1 :p2 p2}), the
  parameters defined as vars in the current namespace so that the body can
  be evaluated form by form afterwards

For a function the arguments are expressions to evaluate. For a macro they
are raw forms: debug_step_in binds them, quoted, to args and destructures
the parameters against args, so nothing in the arguments is evaluated.

Stepper is the entry point used by the CLI and the REPL. It owns the
environment, the resolver and the binder, and reports failures as
StepResult values instead of raising.
"""

import sys
from typing import Any, Callable, Optional

from stepin.compiler.definitions import Definition, parse_definition
from stepin.compiler.printer import pr_str
from stepin.config import StepinConfig
from stepin.debug.arity import select_clause
from stepin.debug.destructure import (
    Binding,
    PatternBinder,
    is_temp_name,
    quote_maybe,
)
from stepin.debug.environment import LiveEnvironment, SymbolEnvironment
from stepin.debug.resolver import ResolvedSymbol, SymbolKind, SymbolResolver
from stepin.errors import (
    MalformedDefinition,
    ResultType,
    StepinError,
    StepResult,
    UnresolvedSymbol,
)
from stepin.runtime.interpreter import Interpreter
from stepin.runtime.ns import init_source_roots
from stepin.runtime.types import (
    Decorated,
    Keyword,
    MapLiteral,
    SetLiteral,
    Symbol,
    VectorLiteral,
)


def _split_call(expr) -> tuple[Symbol, list]:
    if not isinstance(expr, list) or not expr:
        raise MalformedDefinition(f"Expected a call form, got {pr_str(expr)}", expr)
    head = expr[0]
    if not isinstance(head, Symbol):
        raise UnresolvedSymbol(f"Can't step into a call of {pr_str(head)}", expr)
    return head, list(expr[1:])


def symbol_function(env: SymbolEnvironment, sym: Symbol):
    """
    Return the form that defined sym, read from its source text.

    Raises:
        UnresolvedSymbol: if sym names no var.
        MalformedDefinition: if the source can't be found or read.
        EvaluationDeferred: if reading source is disallowed.
    """
    try:
        text = env.source_text(sym)
        if text is None:
            info = env.lookup_anywhere(sym)
            if info is None:
                raise UnresolvedSymbol(f"Unable to resolve symbol: {sym}", sym)
            text = info.source
            if text is None:
                raise MalformedDefinition(f"No source available for {sym}", sym)
        return env.read_expression(text)
    except SyntaxError as e:
        raise MalformedDefinition(f"Can't read the source of {sym}: {e}", sym) from e


def _resolve_callee(
    env: SymbolEnvironment, resolver: SymbolResolver, head: Symbol, expr
) -> tuple[Definition, ResolvedSymbol]:
    resolved = resolver.resolve_sym(head)
    if resolved.kind == SymbolKind.SPECIAL_FORM:
        raise MalformedDefinition(f"{head} is a special form and has no definition", expr)
    if resolved.info is None:
        raise UnresolvedSymbol(f"Unable to resolve symbol: {head}", expr)
    definition = parse_definition(symbol_function(env, head))
    return definition, resolved


def flatten_expr(
    expr,
    env: SymbolEnvironment,
    resolver: Optional[SymbolResolver] = None,
    skip_identity: bool = True,
    log: Optional[Callable[[str], None]] = None,
    binder: Optional[PatternBinder] = None,
) -> list:
    """
    Inline a call: bind the selected clause's parameters to the call's
    arguments in a let around the clause body.

    Parameters that get no argument are bound to nil. With skip_identity a
    parameter passed a symbol of the same name is left out of the let. The
    parameters see the caller's values of their arguments, as in the call
    itself, even when an argument names another parameter. A clause with
    rest parameters binds its whole parameter vector to a vector of the
    arguments. Arguments of a macro are quoted, so evaluating the
    result yields the macro's expansion.
    """
    resolver = resolver or SymbolResolver(env)
    head, args = _split_call(expr)
    definition, resolved = _resolve_callee(env, resolver, head, expr)
    clause = select_clause(definition.clauses, len(args), expr)
    if log is not None:
        log(f"{head}: clause {pr_str(clause.params)} selected for {len(args)} argument(s)")

    if resolved.is_macro:
        args = [quote_maybe(a) for a in args]

    if clause.is_variadic:
        bindings = VectorLiteral([clause.params, VectorLiteral(args)])
    else:
        binder = binder or PatternBinder(skip_identity=skip_identity)
        bindings = _parallel_bindings(binder, clause.params, args)
    return [Symbol("let"), bindings, *clause.body]


def _mentions(form, names: set[str]) -> bool:
    if isinstance(form, Symbol):
        return form.name in names
    if isinstance(form, list):
        if form and form[0] == Symbol("quote"):
            return False
        return any(_mentions(x, names) for x in form)
    if isinstance(form, (VectorLiteral, SetLiteral)):
        return any(_mentions(x, names) for x in form.items)
    if isinstance(form, MapLiteral):
        return any(_mentions(k, names) or _mentions(v, names) for k, v in form.pairs)
    if isinstance(form, Decorated):
        return _mentions(form.form, names)
    return False


def _captures(binder: PatternBinder, params: VectorLiteral, args: list) -> bool:
    """True if an argument names something bound by an earlier parameter."""
    bound: set[str] = set()
    for i, param in enumerate(params.items):
        arg = args[i] if i < len(args) else None
        if _mentions(arg, bound):
            return True
        bound.update(b.name.name for b in binder.bind(param, arg))
    return False


def _parallel_bindings(binder: PatternBinder, params: VectorLiteral, args: list) -> VectorLiteral:
    """
    Let bindings giving every parameter its argument as if bound at once.

    When a later argument refers to a name an earlier parameter binds, the
    arguments are first bound to p__N temporaries.
    """
    prelude: list[Binding] = []
    if _captures(binder, params, args):
        temps = [binder.gensym("p__") for _ in args]
        prelude = [Binding(t, a) for t, a in zip(temps, args)]
        args = temps
    items: list[Any] = []
    for name, value in prelude + binder.bind_many(params, args):
        items.extend([name, value])
    return VectorLiteral(items)


def _summary(bindings: list[Binding]) -> MapLiteral:
    names: list[Symbol] = []
    for name, _ in bindings:
        if not is_temp_name(name) and name not in names:
            names.append(name)
    return MapLiteral([(Keyword(name.name), name) for name in names])


def _defs(bindings: list[Binding]) -> list:
    out: list[Any] = [Symbol("do")]
    for name, value in bindings:
        out.append([Symbol("def"), name, value])
    out.append(_summary(bindings))
    return out


def dest(bindings, binder: Optional[PatternBinder] = None) -> list:
    """
    Transform let-style bindings into a sequence of defs.

    The result is (do (def name value)... {:name name ...}); the trailing
    map holds every bound name except the binder's temporaries.
    """
    binder = binder or PatternBinder()
    return _defs(binder.destructure(bindings))


def debug_step_in(
    expr,
    env: SymbolEnvironment,
    resolver: Optional[SymbolResolver] = None,
    binder: Optional[PatternBinder] = None,
    log: Optional[Callable[[str], None]] = None,
) -> list:
    """
    Turn a call into defs of the callee's parameters.

    A function's parameters are destructured against a vector of the
    argument expressions. A macro's parameters are destructured against
    args, which is defined as the quoted list of the raw argument forms.
    """
    resolver = resolver or SymbolResolver(env)
    binder = binder or PatternBinder()
    head, args = _split_call(expr)
    definition, resolved = _resolve_callee(env, resolver, head, expr)
    clause = select_clause(definition.clauses, len(args), expr)
    if log is not None:
        log(f"{head}: clause {pr_str(clause.params)} selected for {len(args)} argument(s)")

    if resolved.is_macro:
        return _defs(binder.bind_raw_forms(clause.params, args))
    return dest(VectorLiteral([clause.params, VectorLiteral(args)]), binder)


class Stepper:
    """
    Step-in facade over a live interpreter.

    Args:
        config: settings; loaded from stepin.edn and the environment if omitted
        env: environment to use instead of a fresh LiveEnvironment
    """

    def __init__(
        self,
        config: Optional[StepinConfig] = None,
        env: Optional[SymbolEnvironment] = None,
    ):
        self.config = config or StepinConfig.load()
        init_source_roots(extra_paths=self.config.get_absolute_source_paths())
        self.log_file = open(self.config.log_file, "a", encoding="utf-8") if self.config.log_file else None
        if env is None:
            env = LiveEnvironment(Interpreter(read_eval=self.config.read_eval))
        self.env = env
        self.resolver = SymbolResolver(env, self.config.speculative_eval, log=self._log)
        self.binder = PatternBinder(skip_identity=self.config.skip_identity_bindings)

    def _log(self, message: str) -> None:
        """Log a message for debugging."""
        if self.log_file:
            self.log_file.write(f"{message}\n")
            self.log_file.flush()
        if self.config.debug:
            print(f"[stepin] {message}", file=sys.stderr)
            sys.stderr.flush()

    def close(self) -> None:
        if self.log_file:
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def interpreter(self) -> Optional[Interpreter]:
        return getattr(self.env, "interpreter", None)

    def _read(self, expr_or_text):
        if isinstance(expr_or_text, str):
            return self.env.read_expression(expr_or_text)
        return expr_or_text

    def _run(self, operation: str, expr_or_text, fn) -> StepResult:
        try:
            form = self._read(expr_or_text)
        except SyntaxError as e:
            self._log(f"{operation}: {e}")
            return StepResult(ResultType.ERROR, error=str(e), error_type="syntax-error", form=expr_or_text)
        try:
            value = fn(form)
        except StepinError as e:
            self._log(f"{operation} of {pr_str(form)} failed ({e.kind}): {e}")
            return StepResult.from_error(e)
        return StepResult(ResultType.VALUE, value=value, form=form)

    def flatten_call(self, expr_or_text) -> StepResult:
        """Inline a call; see flatten_expr."""
        return self._run(
            "flatten",
            expr_or_text,
            lambda form: flatten_expr(
                form,
                self.env,
                self.resolver,
                self.config.skip_identity_bindings,
                log=self._log,
                binder=self.binder,
            ),
        )

    def step_in(self, expr_or_text) -> StepResult:
        """Turn a call into parameter defs; see debug_step_in."""
        return self._run(
            "step-in",
            expr_or_text,
            lambda form: debug_step_in(form, self.env, self.resolver, self.binder, log=self._log),
        )

    def evaluate(self, result_or_form):
        """Evaluate a successful result's expression, or a form."""
        if isinstance(result_or_form, StepResult):
            if not result_or_form.is_success():
                raise ValueError(f"Can't evaluate a failed result: {result_or_form.error}")
            result_or_form = result_or_form.value
        return self.env.evaluate(self._read(result_or_form))

    def resolve(self, sym) -> ResolvedSymbol:
        return self.resolver.resolve_sym(self._read(sym))

    def arglist(self, sym) -> list[str]:
        return self.resolver.arglist(self._read(sym))

    def source(self, sym) -> Optional[str]:
        """Source text of sym's definition; raises EvaluationDeferred like
        source_fn does."""
        return self.env.source_text(self._read(sym))


__all__ = [
    "Stepper",
    "symbol_function",
    "flatten_expr",
    "debug_step_in",
    "dest",
    "quote_maybe",
]
