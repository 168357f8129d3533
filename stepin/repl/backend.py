"""
stepin REPL - An interactive session with step-in commands.

ReplBackend evaluates text in a Stepper's interpreter and understands a few
colon commands for stepping into calls. TerminalRepl is the readline
frontend used by `stepin repl`.
"""

import sys
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from stepin.compiler.printer import format_form, pr_str
from stepin.debug.flatten import Stepper
from stepin.errors import ResultType, StepinError, StepResult


@dataclass
class EvalResult:
    """What one line (or buffered block) of input produced."""

    type: ResultType
    value: Any = None
    output: str = ""
    error: Optional[str] = None
    error_type: Optional[str] = None
    traceback: Optional[str] = None
    code: bool = False  # value is a form to pretty-print

    def is_success(self) -> bool:
        return self.type in (ResultType.VALUE, ResultType.EMPTY)

    def is_error(self) -> bool:
        return self.type is ResultType.ERROR

    def is_incomplete(self) -> bool:
        return self.type is ResultType.INCOMPLETE


def _error(exc: Exception, kind: Optional[str] = None, with_trace=True) -> EvalResult:
    return EvalResult(
        type=ResultType.ERROR,
        error=str(exc),
        error_type=kind or getattr(exc, "kind", type(exc).__name__),
        traceback=traceback.format_exc() if with_trace else None,
    )


def _printed(text: str) -> EvalResult:
    return EvalResult(type=ResultType.EMPTY, output=text + "\n")


COMMANDS = {
    ":step-in": "Define the parameters of a call's callee and show them",
    ":flatten": "Show a call inlined as a let",
    ":source": "Show the source of a definition",
    ":arglist": "Show how a symbol can be called",
    ":resolve": "Show what a symbol names",
    ":doc": "Show the documentation of a symbol",
}


class ReplBackend:
    """
    Evaluation, input buffering and commands, independent of any terminal.

    Pass the Stepper to evaluate in; a default one is made otherwise.
    """

    def __init__(self, stepper: Optional[Stepper] = None):
        self.stepper = stepper or Stepper()
        self.buffer = ""
        self.history: list[tuple[str, EvalResult]] = []

    @property
    def interpreter(self):
        return self.stepper.interpreter

    @property
    def namespace(self) -> str:
        return self.stepper.env.current_namespace()

    def is_complete(self, code: str) -> bool:
        """
        True once every bracket opened in code has been closed.

        Brackets inside strings, comments and character literals such as
        `\\(` don't count. An unterminated string is never complete.
        """
        depth = 0
        state = None  # None, "string" or "comment"
        chars = iter(code)
        for char in chars:
            if state == "comment":
                if char == "\n":
                    state = None
            elif char == "\\":
                next(chars, None)
            elif char == '"':
                state = None if state == "string" else "string"
            elif state == "string":
                continue
            elif char == ";":
                state = "comment"
            elif char in "([{":
                depth += 1
            elif char in ")]}":
                depth -= 1
        return depth <= 0 and state != "string"

    def eval(self, code: str) -> EvalResult:
        """Evaluate code, or run it as a command if it starts with one."""
        text = code.strip()
        if not text:
            return EvalResult(type=ResultType.EMPTY)

        head, *rest = text.split(None, 1)
        if head in COMMANDS:
            return self.run_command(head, rest[0].strip() if rest else "")

        if not self.is_complete(code):
            return EvalResult(type=ResultType.INCOMPLETE)
        try:
            value = self.interpreter.eval_string(code)
        except Exception as e:
            return _error(e)
        return EvalResult(type=ResultType.VALUE, value=value)

    def _from_step_result(self, result: StepResult) -> EvalResult:
        if result.is_success():
            return EvalResult(type=ResultType.VALUE, value=result.value, code=True)
        message = result.error
        if result.form is not None:
            message += f"\n  in: {pr_str(result.form)}"
        return EvalResult(type=ResultType.ERROR, error=message, error_type=result.error_type)

    def _step_in(self, text: str) -> EvalResult:
        result = self.stepper.step_in(text)
        if result.is_error():
            return self._from_step_result(result)
        return EvalResult(
            type=ResultType.VALUE,
            value=self.stepper.evaluate(result),
            output=format_form(result.value) + "\n",
        )

    def _source(self, text: str) -> EvalResult:
        source = self.stepper.source(text)
        if source is None:
            return EvalResult(
                type=ResultType.ERROR,
                error=f"Source not found for {text}",
                error_type="unresolved-symbol",
            )
        return _printed(source)

    def _resolve(self, text: str) -> EvalResult:
        resolved = self.stepper.resolve(text)
        line = resolved.kind.value
        if resolved.info is not None:
            line += f" {resolved.info.ns}/{resolved.info.name}"
        return _printed(line)

    def run_command(self, command: str, argument: str) -> EvalResult:
        """Run one of COMMANDS with its (unparsed) argument."""
        if not argument:
            return EvalResult(
                type=ResultType.ERROR,
                error=f"{command} needs an argument",
                error_type="usage",
            )
        handlers = {
            ":flatten": lambda a: self._from_step_result(self.stepper.flatten_call(a)),
            ":step-in": self._step_in,
            ":source": self._source,
            ":arglist": lambda a: _printed("\n".join(self.stepper.arglist(a))),
            ":resolve": self._resolve,
            ":doc": lambda a: _printed(self.get_doc(a) or f"No documentation found for {a}"),
        }
        try:
            return handlers[command](argument)
        except (StepinError, SyntaxError) as e:
            return _error(e, getattr(e, "kind", "syntax-error"), with_trace=False)
        except Exception as e:
            return _error(e, type(e).__name__)

    def eval_with_buffer(self, line: str) -> EvalResult:
        """
        Add line to the pending input and evaluate it once it is complete.

        Commands are run straight away. Until then INCOMPLETE is returned.
        """
        self.buffer += line + "\n"
        pending = self.buffer
        if not (pending.lstrip().startswith(":") or self.is_complete(pending)):
            return EvalResult(type=ResultType.INCOMPLETE)

        self.buffer = ""
        result = self.eval(pending)
        self.history.append((pending, result))
        return result

    def reset_buffer(self):
        self.buffer = ""

    def get_completions(self, prefix: str) -> list[str]:
        """Names visible from the current namespace that start with prefix."""
        if prefix.startswith(":"):
            candidates = set(COMMANDS)
        else:
            ns = self.interpreter.registry.get(self.namespace)
            if ns is None:
                return []
            candidates = set(ns.vars) | set(ns.refers) | {a + "/" for a in ns.aliases}
        return sorted(c for c in candidates if c.startswith(prefix))

    def get_doc(self, symbol: str) -> Optional[str]:
        """Documentation of symbol: its arglists followed by its docstring."""
        try:
            info = self.stepper.resolve(symbol).info
        except SyntaxError:
            return None
        if info is None:
            return None
        lines = [f"{info.ns}/{info.name}"]
        if info.arglists:
            lines.append(" ".join(pr_str(a) for a in info.arglists))
        if info.is_macro:
            lines.append("Macro")
        if info.doc:
            lines.append(f"  {info.doc}")
        return "\n".join(lines)


class ReplFrontend(ABC):
    """Reads input for a ReplBackend and shows what it returns."""

    def __init__(self, backend: Optional[ReplBackend] = None):
        self.backend = backend or ReplBackend()

    @abstractmethod
    def run(self):
        ...


class TerminalRepl(ReplFrontend):
    """Line-based REPL on stdin/stdout, using readline when it is available."""

    def __init__(
        self,
        backend: Optional[ReplBackend] = None,
        continuation_prompt: str = "... ",
        history_file: Optional[str] = ".stepin_history",
    ):
        super().__init__(backend)
        self.continuation_prompt = continuation_prompt
        self.history_file = history_file
        self.completions: list[str] = []
        self.readline = self._init_readline()

    @property
    def prompt(self) -> str:
        return f"{self.backend.namespace}=> "

    def _init_readline(self):
        try:
            import readline
        except ImportError:
            return None

        readline.set_completer(self.complete)
        readline.parse_and_bind("tab: complete")
        if self.history_file:
            import atexit

            try:
                readline.read_history_file(self.history_file)
            except FileNotFoundError:
                pass
            atexit.register(readline.write_history_file, self.history_file)
        return readline

    def complete(self, text: str, state: int) -> Optional[str]:
        if state == 0:
            self.completions = self.backend.get_completions(text)
        if state < len(self.completions):
            return self.completions[state]
        return None

    def format_value(self, result: EvalResult) -> str:
        return format_form(result.value) if result.code else pr_str(result.value)

    def print_result(self, result: EvalResult):
        """Write a result's output, then its value or its error."""
        if result.output:
            sys.stdout.write(result.output)
        if result.is_error():
            print(f"Error: {result.error_type}: {result.error}", file=sys.stderr)
            if result.traceback and self.backend.stepper.config.debug:
                print(result.traceback, file=sys.stderr)
        elif result.type is ResultType.VALUE:
            print(self.format_value(result))

    def read_line(self, prompt: str) -> Optional[str]:
        """One line of input, "" after Ctrl-C, or None at end of input."""
        try:
            return input(prompt)
        except EOFError:
            print()
            return None
        except KeyboardInterrupt:
            print()
            self.backend.reset_buffer()
            return ""

    def run(self):
        print("stepin REPL")
        print("Type :help for commands, Ctrl-D to quit.")
        print()

        prompt = self.prompt
        while True:
            line = self.read_line(prompt)
            if line is None:
                break
            command = line.strip()
            if command in (":quit", ":exit"):
                break
            if command == ":help":
                self.show_help()
                continue
            if not command and not self.backend.buffer:
                prompt = self.prompt
                continue

            result = self.backend.eval_with_buffer(line)
            if result.is_incomplete():
                prompt = self.continuation_prompt
                continue
            self.print_result(result)
            prompt = self.prompt

    def show_help(self):
        print("Commands:")
        for command, description in COMMANDS.items():
            print(f"  {command:<10} {description}")
        print(f"  {':help':<10} Show this help message")
        print(f"  {':quit':<10} Exit the REPL")
        print()
        print("Example:")
        print("  (defn add [a b] (+ a b))")
        print("  :step-in (add 1 2)         ; defines a and b, => {:a 1, :b 2}")


def create_repl(mode: str = "terminal", **kwargs) -> ReplFrontend:
    """Build the frontend for mode; "terminal" is the only one."""
    frontends = {"terminal": TerminalRepl}
    if mode not in frontends:
        raise ValueError(f"Unknown REPL mode: {mode}")
    return frontends[mode](**kwargs)
