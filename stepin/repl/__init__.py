"""
stepin.repl - Interactive REPL

The REPL evaluates stepin code in a live interpreter and adds commands for
stepping into calls (:step-in, :flatten) and for inspecting definitions
(:source, :arglist, :resolve, :doc).
"""

from stepin.repl.backend import (
    COMMANDS,
    EvalResult,
    ReplBackend,
    ReplFrontend,
    TerminalRepl,
    create_repl,
)

__all__ = [
    "COMMANDS",
    "EvalResult",
    "ReplBackend",
    "ReplFrontend",
    "TerminalRepl",
    "create_repl",
]
