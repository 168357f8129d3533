"""
stepin.runtime.interpreter - A tree-walking evaluator for stepin source

The interpreter is the live environment the step-in tooling works against.
It owns a NamespaceRegistry, evaluates forms directly (no compilation step)
and records definition metadata on every var it defines: :file, :line,
:col, :doc and :arglists, plus :macro for macros. Source loaded from a
string is kept in SOURCE_CACHE under a pseudo file name so that it can be
read back like a file.

Special forms are methods of Interpreter. let, fn, loop, defn, defmacro and
ns are Python macros (stepin.compiler.macros); the rest of the standard
macros live in stepin/std/core.clj.
"""

import builtins
import importlib
import inspect
import os
from typing import Any, Callable, Optional

from stepin.compiler.macros import BOOTSTRAP_ARGLISTS, BOOTSTRAP_MACROS, macroexpand
from stepin.compiler.macros import macroexpand_1 as _macroexpand_1
from stepin.compiler.printer import pr_str
from stepin.compiler.reader import ReadTimeEval, read_one, read_str
from stepin.errors import EvalError, EvaluationDeferred
from stepin.runtime import core
from stepin.runtime.core import CORE_FUNCTIONS, gensym, seq, truthy
from stepin.runtime.ns import (
    NamespaceRegistry,
    Var,
    find_source_file_for_ns,
    ns_to_relpath,
    parse_require_spec,
    remember_source,
)
from stepin.runtime.types import (
    _MISSING,
    Decorated,
    Keyword,
    MapLiteral,
    SetLiteral,
    Symbol,
    Vector,
    VectorLiteral,
    is_keyword,
    is_symbol,
)

CORE_NS = "stepin.core"
USER_NS = "user"

# Values accepted for read_eval, mirroring *read-eval*
READ_EVAL_UNKNOWN = "unknown"


def _get_lib_path(filename: str) -> str:
    """Get the path to a file in the stepin/std directory."""
    lib_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "std")
    return os.path.join(lib_dir, filename)


# =============================================================================
# Environments and functions
# =============================================================================


class Env:
    """A chain of local binding frames."""

    __slots__ = ("bindings", "parent")

    def __init__(self, bindings: Optional[dict] = None, parent: "Optional[Env]" = None):
        self.bindings = bindings if bindings is not None else {}
        self.parent = parent

    def lookup(self, name: str):
        env = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        return _MISSING

    def define(self, name: str, value) -> None:
        self.bindings[name] = value


class _Recur(Exception):
    def __init__(self, values: list):
        super().__init__("recur")
        self.values = values


class _FnClause:
    __slots__ = ("fixed", "rest", "body")

    def __init__(self, fixed: list[str], rest: Optional[str], body: list):
        self.fixed = fixed
        self.rest = rest
        self.body = body

    def bind(self, env: Env, args: list, from_recur: bool = False) -> None:
        for name, value in zip(self.fixed, args):
            env.define(name, value)
        if self.rest is not None:
            if from_recur:
                env.define(self.rest, args[len(self.fixed)])
            else:
                env.define(self.rest, seq(list(args[len(self.fixed) :])))


class Fn:
    """An interpreted function. Callable from Python like any function."""

    def __init__(self, interp: "Interpreter", name: Optional[str], clauses, env: Env):
        self.interp = interp
        self.name = name
        self.clauses: list[_FnClause] = clauses
        self.env = Env({name: self}, env) if name else env

    def _select(self, n: int) -> _FnClause:
        for clause in self.clauses:
            if clause.rest is None and len(clause.fixed) == n:
                return clause
        for clause in self.clauses:
            if clause.rest is not None and n >= len(clause.fixed):
                return clause
        raise EvalError(f"Wrong number of args ({n}) passed to: {self.name or 'fn'}")

    def __call__(self, *args):
        clause = self._select(len(args))
        values = list(args)
        from_recur = False
        while True:
            local = Env(parent=self.env)
            clause.bind(local, values, from_recur)
            try:
                return self.interp.eval_body(clause.body, local)
            except _Recur as r:
                expected = len(clause.fixed) + (1 if clause.rest is not None else 0)
                if len(r.values) != expected:
                    raise EvalError(
                        f"Mismatched argument count to recur, expected: {expected} args, got: {len(r.values)}"
                    )
                values = r.values
                from_recur = True

    def __repr__(self):
        return f"#function[{self.name or 'fn'}]"

    __str__ = __repr__


def _python_arglists(fn: Callable) -> list[VectorLiteral]:
    """Arglists of a Python function: one vector per optional-arg count."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return []
    required: list[str] = []
    optional: list[str] = []
    rest = None
    for p in sig.parameters.values():
        if p.kind == p.VAR_POSITIONAL:
            rest = p.name
        elif p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            (optional if p.default is not p.empty else required).append(p.name)
    arglists = [
        VectorLiteral([Symbol(n) for n in required + optional[:i]])
        for i in range(len(optional) + 1)
    ]
    if rest is not None:
        last = arglists[-1]
        arglists[-1] = VectorLiteral(last.items + [Symbol("&"), Symbol(rest)])
    return arglists


# =============================================================================
# Interpreter
# =============================================================================


class Interpreter:
    """
    Evaluates stepin forms against a namespace registry.

    Args:
        read_eval: True, False or "unknown", like *read-eval*. Controls #=
            forms, and with "unknown" source text may not be read at all.
        load_prelude: load stepin/std/core.clj into the core namespace
    """

    def __init__(self, read_eval: Any = True, load_prelude: bool = True):
        self.registry = NamespaceRegistry()
        self.read_eval = read_eval
        self.current_ns = CORE_NS
        self.current_file: Optional[str] = None
        self._repl_counter = 0
        self._special_forms: dict[str, Callable] = {
            "quote": self._eval_quote,
            "quasiquote": self._eval_quasiquote,
            "if": self._eval_if,
            "do": self._eval_do,
            "def": self._eval_def,
            "let*": self._eval_let,
            "fn*": self._eval_fn,
            "loop*": self._eval_loop,
            "recur": self._eval_recur,
            "throw": self._eval_throw,
            "try": self._eval_try,
            "var": self._eval_var,
            "set!": self._eval_set,
            ".": self._eval_dot,
            "new": self._eval_new,
        }
        self._bootstrap(load_prelude)

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def _bootstrap(self, load_prelude: bool) -> None:
        core_ns = self.registry.register(CORE_NS)
        for lisp_name, fn in CORE_FUNCTIONS.items():
            core_ns.intern(
                lisp_name,
                fn,
                {
                    "ns": CORE_NS,
                    "name": lisp_name,
                    "doc": inspect.getdoc(fn),
                    "arglists": _python_arglists(fn),
                },
            )
        for lisp_name, fn in self._host_functions().items():
            core_ns.intern(
                lisp_name,
                fn,
                {
                    "ns": CORE_NS,
                    "name": lisp_name,
                    "doc": inspect.getdoc(fn),
                    "arglists": _python_arglists(fn),
                },
            )
        for lisp_name, macro in BOOTSTRAP_MACROS.items():
            core_ns.intern(
                lisp_name,
                macro,
                {
                    "ns": CORE_NS,
                    "name": lisp_name,
                    "doc": inspect.getdoc(macro),
                    "arglists": list(read_one(BOOTSTRAP_ARGLISTS[lisp_name])),
                    "macro": True,
                },
            )
        if load_prelude:
            self.load_file(_get_lib_path("core.clj"))
        self.in_ns(USER_NS)

    def _host_functions(self) -> dict[str, Callable]:
        """Core functions that need the interpreter itself."""
        return {
            "in-ns": self.in_ns,
            "require": self.require,
            "load-file": self.load_file,
            "load-string": self.load_string,
            "eval": self.eval,
            "macroexpand-1": self.macroexpand_1,
            "macroexpand": self.macroexpand,
            "resolve": self.resolve,
            "meta": self.meta,
            "read-string": read_one,
        }

    # -------------------------------------------------------------------------
    # Namespaces and vars
    # -------------------------------------------------------------------------

    def in_ns(self, name):
        """Switch to the namespace name, creating it if needed."""
        name = name.name if isinstance(name, Symbol) else str(name)
        created = not self.registry.loaded(name)
        self.registry.register(name, file=self.current_file)
        if created and name != CORE_NS:
            self.registry.refer_all(name, CORE_NS)
        self.current_ns = name
        return Symbol(name)

    def require(self, spec):
        """Load a namespace (or Python module) and set up its alias/refers."""
        info = parse_require_spec(spec)
        ns_name = info["ns"]
        if not self.registry.loaded(ns_name):
            path = find_source_file_for_ns(ns_name)
            if path is not None:
                self.load_file(path)
            else:
                try:
                    importlib.import_module(ns_name)
                except ImportError:
                    raise EvalError(
                        f"Could not locate {ns_to_relpath(ns_name)} on the source path",
                        spec,
                    )
        current = self.registry.register(self.current_ns)
        if info["alias"]:
            current.aliases[info["alias"]] = ns_name
        if info["refer"] == ":all":
            self.registry.refer_all(current.name, ns_name)
        elif info["refer"]:
            for name in info["refer"]:
                current.refers[name] = ns_name
        return None

    def resolve(self, sym: Symbol) -> Optional[Var]:
        """Resolve sym to a var from the current namespace."""
        return self.registry.resolve(self.current_ns, sym)

    def meta(self, x):
        """Return the metadata of a var as a map with keyword keys."""
        if isinstance(x, Var):
            return {Keyword(k): v for k, v in x.meta.items()}
        return None

    def macro_function(self, sym: Symbol) -> Optional[Callable]:
        var = self.resolve(sym)
        if var is not None and var.is_macro:
            return var.value
        return None

    def macroexpand_1(self, form):
        return _macroexpand_1(form, self.macro_function)

    def macroexpand(self, form):
        return macroexpand(form, self.macro_function)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _load(self, text: str, file: str, restore_ns: bool):
        forms = read_str(text)
        saved_ns, saved_file = self.current_ns, self.current_file
        self.current_file = file
        result = None
        try:
            for form in forms:
                result = self.eval(form)
        finally:
            self.current_file = saved_file
            if restore_ns:
                self.current_ns = saved_ns
        return result

    def _pseudo_file(self) -> str:
        self._repl_counter += 1
        return f"<repl-{self._repl_counter}>"

    def load_string(self, text: str, file: Optional[str] = None):
        """
        Evaluate every form in text and return the last value.

        The text is remembered under file (or a generated <repl-N> name) so
        that definitions made here have readable source.
        """
        file = file or self._pseudo_file()
        remember_source(file, text)
        return self._load(text, file, restore_ns=True)

    def eval_string(self, text: str):
        """Like load_string, but an ns/in-ns in text stays in effect."""
        file = self._pseudo_file()
        remember_source(file, text)
        return self._load(text, file, restore_ns=False)

    def load_file(self, path: str):
        """Evaluate the forms of a source file."""
        path = os.path.abspath(path)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        return self._load(text, path, restore_ns=True)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def eval(self, form, env: Optional[Env] = None):
        """Evaluate a single form."""
        if env is None:
            env = Env()
        if isinstance(form, Symbol):
            return self._eval_symbol(form, env)
        if isinstance(form, list):
            if not form:
                return []
            return self._eval_list(form, env)
        if isinstance(form, (VectorLiteral, Vector)):
            return Vector(self.eval(x, env) for x in form)
        if isinstance(form, MapLiteral):
            return {self.eval(k, env): self.eval(v, env) for k, v in form.pairs}
        if isinstance(form, dict):
            return {self.eval(k, env): self.eval(v, env) for k, v in form.items()}
        if isinstance(form, SetLiteral):
            return frozenset(self.eval(x, env) for x in form.items)
        if isinstance(form, Decorated):
            return self.eval(form.form, env)
        if isinstance(form, ReadTimeEval):
            return self._eval_read_time(form, env)
        return form

    def eval_body(self, body, env: Env):
        result = None
        for form in body:
            result = self.eval(form, env)
        return result

    def _eval_read_time(self, form: ReadTimeEval, env: Env):
        if self.read_eval is True:
            return self.eval(form.form, env)
        if self.read_eval == READ_EVAL_UNKNOWN:
            raise EvaluationDeferred("Reading disallowed - *read-eval* bound to :unknown", form)
        raise EvaluationDeferred("EvalReader not allowed when *read-eval* is false.", form)

    def _eval_symbol(self, sym: Symbol, env: Env):
        value = env.lookup(sym.name)
        if value is not _MISSING:
            return value
        var = self.resolve(sym)
        if var is not None:
            if var.is_macro:
                raise EvalError(f"Can't take value of a macro: {var!r}", sym)
            return var.value
        if sym.namespace:
            value = self._python_member(sym)
        else:
            value = getattr(builtins, sym.name, _MISSING)
        if value is _MISSING:
            raise EvalError(f"Unable to resolve symbol: {sym.name} in this context", sym)
        return value

    def _python_member(self, sym: Symbol):
        """Look up module/attr in a Python module, honouring ns aliases."""
        current = self.registry.get(self.current_ns)
        module_name = sym.namespace
        if current is not None:
            module_name = current.aliases.get(module_name, module_name)
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return _MISSING
        return getattr(module, sym.local_name, _MISSING)

    def _eval_list(self, form: list, env: Env):
        head = form[0]
        if isinstance(head, Symbol):
            name = head.name
            special = self._special_forms.get(name)
            if special is not None:
                return special(form, env)
            if env.lookup(name) is _MISSING:
                if self.macro_function(head) is not None:
                    return self.eval(self.macroexpand_1(form), env)
                if name.startswith(".-") and len(name) > 2:
                    target = self.eval(form[1], env)
                    return getattr(target, name[2:].replace("-", "_"))
                if name.startswith(".") and len(name) > 1 and name != "..":
                    target = self.eval(form[1], env)
                    args = [self.eval(a, env) for a in form[2:]]
                    return getattr(target, name[1:].replace("-", "_"))(*args)

        f = self.eval(head, env)
        args = [self.eval(a, env) for a in form[1:]]
        return self.invoke(f, args, form)

    def invoke(self, f, args: list, form: Any = None):
        """Apply f to already evaluated args."""
        if isinstance(f, dict):
            return f.get(args[0], args[1] if len(args) > 1 else None)
        if isinstance(f, Vector):
            return core.nth(f, *args)
        if isinstance(f, frozenset):
            return args[0] if args[0] in f else None
        if callable(f):
            return f(*args)
        raise EvalError(f"{pr_str(f)} cannot be called", form)

    # -------------------------------------------------------------------------
    # Special forms
    # -------------------------------------------------------------------------

    def _eval_quote(self, form, env):
        if len(form) != 2:
            raise EvalError("quote takes exactly one argument", form)
        return form[1]

    def _eval_if(self, form, env):
        if len(form) not in (3, 4):
            raise EvalError("if requires a test, a then branch and an optional else", form)
        if truthy(self.eval(form[1], env)):
            return self.eval(form[2], env)
        return self.eval(form[3], env) if len(form) == 4 else None

    def _eval_do(self, form, env):
        return self.eval_body(form[1:], env)

    def _eval_meta(self, expr, env) -> dict[str, Any]:
        if isinstance(expr, Keyword):
            return {expr.name: True}
        if isinstance(expr, Symbol):
            return {"tag": expr.name}
        if isinstance(expr, MapLiteral):
            value = self.eval(expr, env)
            return {k.name if isinstance(k, Keyword) else k: v for k, v in value.items()}
        raise EvalError(f"Metadata must be a keyword, symbol or map, got {expr!r}", expr)

    def _eval_def(self, form, env):
        if len(form) < 2:
            raise EvalError("Too few arguments to def", form)
        target = form[1]
        meta: dict[str, Any] = {}
        if isinstance(target, Decorated):
            meta.update(self._eval_meta(target.expr, env))
            target = target.form
        if not isinstance(target, Symbol) or target.namespace:
            raise EvalError(f"First argument to def must be a simple symbol, got {target!r}", form)
        rest = list(form[2:])
        if len(rest) == 2 and isinstance(rest[0], str):
            meta["doc"] = rest[0]
            rest = rest[1:]
        if len(rest) > 1:
            raise EvalError("Too many arguments to def", form)

        ns = self.registry.register(self.current_ns)
        var = ns.vars.get(target.name) or ns.intern(target.name)
        value = self.eval(rest[0], env) if rest else None
        var.value = value
        var.meta = {
            "ns": ns.name,
            "name": target.name,
            "file": self.current_file,
            "line": getattr(form, "line", 0),
            "col": getattr(form, "col", 0),
            **meta,
        }
        return var

    def _eval_let(self, form, env):
        if len(form) < 2 or not isinstance(form[1], VectorLiteral):
            raise EvalError("let* requires a vector for its binding", form)
        items = form[1].items
        if len(items) % 2 != 0:
            raise EvalError("let* requires an even number of forms in binding vector", form)
        local = Env(parent=env)
        for i in range(0, len(items), 2):
            name = items[i]
            if not isinstance(name, Symbol):
                raise EvalError(f"Bad binding form, expected symbol, got: {pr_str(name)}", form)
            local.define(name.name, self.eval(items[i + 1], local))
        return self.eval_body(form[2:], local)

    def _parse_fn_params(self, params, form) -> tuple[list[str], Optional[str]]:
        if not isinstance(params, VectorLiteral):
            raise EvalError(f"Parameter declaration {pr_str(params)} should be a vector", form)
        fixed: list[str] = []
        rest = None
        items = params.items
        i = 0
        while i < len(items):
            item = items[i]
            if is_symbol(item, "&"):
                if i + 1 >= len(items) or not isinstance(items[i + 1], Symbol):
                    raise EvalError("& must be followed by a symbol in fn*", form)
                rest = items[i + 1].name
                i += 2
                continue
            if not isinstance(item, Symbol):
                raise EvalError(f"fn* parameters must be symbols, got {pr_str(item)}", form)
            fixed.append(item.name)
            i += 1
        return fixed, rest

    def _eval_fn(self, form, env):
        rest = list(form[1:])
        name = None
        if rest and isinstance(rest[0], Symbol):
            name = rest.pop(0).name
        if rest and isinstance(rest[0], VectorLiteral):
            raw = [[rest[0], *rest[1:]]]
        else:
            raw = rest
        if not raw:
            raise EvalError("fn* requires a parameter vector", form)
        clauses = []
        for clause in raw:
            if not isinstance(clause, list) or not clause:
                raise EvalError(f"Invalid fn* clause {pr_str(clause)}", form)
            fixed, rest_name = self._parse_fn_params(clause[0], form)
            clauses.append(_FnClause(fixed, rest_name, list(clause[1:])))
        return Fn(self, name, clauses, env)

    def _eval_loop(self, form, env):
        if len(form) < 2 or not isinstance(form[1], VectorLiteral):
            raise EvalError("loop* requires a vector for its binding", form)
        items = form[1].items
        names = []
        local = Env(parent=env)
        for i in range(0, len(items), 2):
            name = items[i]
            if not isinstance(name, Symbol):
                raise EvalError(f"Bad binding form, expected symbol, got: {pr_str(name)}", form)
            names.append(name.name)
            local.define(name.name, self.eval(items[i + 1], local))
        while True:
            try:
                return self.eval_body(form[2:], local)
            except _Recur as r:
                if len(r.values) != len(names):
                    raise EvalError(
                        f"Mismatched argument count to recur, expected: {len(names)} args, got: {len(r.values)}",
                        form,
                    )
                local = Env(dict(zip(names, r.values)), env)

    def _eval_recur(self, form, env):
        raise _Recur([self.eval(a, env) for a in form[1:]])

    def _eval_throw(self, form, env):
        if len(form) != 2:
            raise EvalError("throw takes exactly one argument", form)
        value = self.eval(form[1], env)
        if isinstance(value, BaseException):
            raise value
        raise EvalError(f"throw requires an exception, got {pr_str(value)}", form)

    def _exception_class(self, spec, env):
        if is_keyword(spec, "default") or is_symbol(spec, "Throwable"):
            return Exception
        cls = self.eval(spec, env)
        if not (isinstance(cls, type) and issubclass(cls, BaseException)):
            raise EvalError(f"{pr_str(spec)} is not an exception class", spec)
        return cls

    def _eval_try(self, form, env):
        body: list = []
        catches: list = []
        finally_body = None
        for sub in form[1:]:
            if isinstance(sub, list) and sub and is_symbol(sub[0], "catch"):
                if len(sub) < 3 or not isinstance(sub[2], Symbol):
                    raise EvalError("catch requires a class and a binding symbol", sub)
                catches.append(sub)
            elif isinstance(sub, list) and sub and is_symbol(sub[0], "finally"):
                finally_body = sub[1:]
            else:
                body.append(sub)
        try:
            return self.eval_body(body, env)
        except _Recur:
            raise
        except Exception as e:
            for clause in catches:
                if isinstance(e, self._exception_class(clause[1], env)):
                    return self.eval_body(clause[3:], Env({clause[2].name: e}, env))
            raise
        finally:
            if finally_body is not None:
                self.eval_body(finally_body, env)

    def _eval_var(self, form, env):
        if len(form) != 2 or not isinstance(form[1], Symbol):
            raise EvalError("var takes a single symbol", form)
        var = self.resolve(form[1])
        if var is None:
            raise EvalError(f"Unable to resolve var: {form[1].name} in this context", form)
        return var

    def _eval_set(self, form, env):
        if len(form) != 3 or not isinstance(form[1], Symbol):
            raise EvalError("set! takes a symbol and a value", form)
        var = self.resolve(form[1])
        if var is None:
            raise EvalError(f"Can't change/establish root binding of: {form[1].name}", form)
        var.value = self.eval(form[2], env)
        return var.value

    def _eval_dot(self, form, env):
        if len(form) < 3:
            raise EvalError("Malformed member expression", form)
        target = self.eval(form[1], env)
        member = form[2]
        args = list(form[3:])
        if isinstance(member, list) and member:
            member, args = member[0], list(member[1:])
        if not isinstance(member, Symbol):
            raise EvalError(f"Member must be a symbol, got {pr_str(member)}", form)
        if member.name.startswith("-"):
            return getattr(target, member.name[1:].replace("-", "_"))
        method = getattr(target, member.name.replace("-", "_"))
        return method(*[self.eval(a, env) for a in args])

    def _eval_new(self, form, env):
        if len(form) < 2:
            raise EvalError("new requires a class", form)
        cls = self.eval(form[1], env)
        return cls(*[self.eval(a, env) for a in form[2:]])

    # -------------------------------------------------------------------------
    # Syntax quote
    # -------------------------------------------------------------------------

    def _eval_quasiquote(self, form, env):
        if len(form) != 2:
            raise EvalError("quasiquote takes exactly one argument", form)
        return self._quasi(form[1], env, {})

    def _quasi(self, x, env, gensyms: dict[str, Symbol]):
        if isinstance(x, Symbol):
            if x.name.endswith("#") and len(x.name) > 1:
                if x.name not in gensyms:
                    base = gensym(x.name[:-1] + "__").name
                    gensyms[x.name] = Symbol(base + "__auto__")
                return gensyms[x.name]
            return x
        if isinstance(x, list):
            if x and is_symbol(x[0], "unquote"):
                return self.eval(x[1], env)
            if x and is_symbol(x[0], "unquote-splicing"):
                raise EvalError("unquote-splicing used outside of a list", x)
            return self._quasi_items(x, env, gensyms)
        if isinstance(x, VectorLiteral):
            return VectorLiteral(self._quasi_items(x.items, env, gensyms))
        if isinstance(x, MapLiteral):
            return MapLiteral(
                [(self._quasi(k, env, gensyms), self._quasi(v, env, gensyms)) for k, v in x.pairs]
            )
        if isinstance(x, SetLiteral):
            return SetLiteral(self._quasi_items(x.items, env, gensyms))
        if isinstance(x, Decorated):
            return Decorated(self._quasi(x.expr, env, gensyms), self._quasi(x.form, env, gensyms))
        return x

    def _quasi_items(self, items, env, gensyms) -> list:
        out: list = []
        for item in items:
            if isinstance(item, list) and item and is_symbol(item[0], "unquote-splicing"):
                out.extend(seq(self.eval(item[1], env)) or [])
            else:
                out.append(self._quasi(item, env, gensyms))
        return out


__all__ = [
    "CORE_NS",
    "USER_NS",
    "READ_EVAL_UNKNOWN",
    "Env",
    "Fn",
    "Interpreter",
]
