"""
stepin.cli - stepin Command Line Interface

This module provides the main CLI entry point with subcommands:

- stepin flatten CALL     Print CALL inlined as a let around the callee's body
- stepin step-in CALL     Print the defs that bind the callee's parameters
- stepin resolve SYM      Print what SYM names (special form, macro, ...)
- stepin arglist SYM      Print how SYM can be called
- stepin source SYM       Print the source of SYM's definition
- stepin eval CODE        Evaluate CODE and print the value
- stepin repl             Start the interactive REPL

Source files given with --load are loaded before the subcommand runs.
"""

import argparse
import sys
import traceback
from typing import Optional

from stepin.compiler.printer import format_form, pr_str


def _make_stepper(args: argparse.Namespace):
    """Build a Stepper from the config file, environment and CLI flags, and
    load the requested source files into it."""
    from stepin.config import StepinConfig
    from stepin.debug.flatten import Stepper

    config = StepinConfig.load(args.config)
    if args.debug:
        config.debug = True
    if args.read_eval is not None:
        config.read_eval = {"true": True, "false": False}.get(
            args.read_eval, args.read_eval
        )
    if args.source_path:
        config.source_paths.extend(args.source_path)

    stepper = Stepper(config)
    for path in args.load or []:
        stepper.interpreter.load_file(path)
    if args.ns:
        stepper.interpreter.in_ns(args.ns)
    return stepper


def _print_error(result) -> int:
    print(f"Error: {result.error_type}: {result.error}", file=sys.stderr)
    if result.form is not None:
        print(f"  in: {pr_str(result.form)}", file=sys.stderr)
    return 1


def _run(args: argparse.Namespace, body) -> int:
    """Run body(stepper), reporting setup and unexpected errors."""
    from stepin.errors import StepinError

    try:
        stepper = _make_stepper(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading sources: {e}", file=sys.stderr)
        if args.debug:
            traceback.print_exc(file=sys.stderr)
        return 1

    with stepper:
        try:
            return body(stepper)
        except StepinError as e:
            print(f"Error: {e.kind}: {e}", file=sys.stderr)
            if e.form is not None:
                print(f"  in: {pr_str(e.form)}", file=sys.stderr)
            return 1
        except SyntaxError as e:
            print(f"Error: syntax-error: {e}", file=sys.stderr)
            return 1
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            if args.debug:
                traceback.print_exc(file=sys.stderr)
            return 1


def _print_step(stepper, result, evaluate: bool) -> int:
    if result.is_error():
        return _print_error(result)
    print(format_form(result.value))
    if evaluate:
        print(f";; => {pr_str(stepper.evaluate(result))}")
    return 0


def cmd_flatten(args: argparse.Namespace) -> int:
    """Inline a call."""
    return _run(
        args,
        lambda stepper: _print_step(stepper, stepper.flatten_call(args.call), args.eval),
    )


def cmd_step_in(args: argparse.Namespace) -> int:
    """Turn a call into defs of its callee's parameters."""
    return _run(
        args,
        lambda stepper: _print_step(stepper, stepper.step_in(args.call), args.eval),
    )


def cmd_resolve(args: argparse.Namespace) -> int:
    """Classify a symbol."""

    def body(stepper) -> int:
        resolved = stepper.resolve(args.symbol)
        line = resolved.kind.value
        if resolved.info is not None:
            line += f" {resolved.info.ns}/{resolved.info.name}"
            if resolved.info.file:
                line += f" ({resolved.info.file}:{resolved.info.line})"
        elif resolved.value is not None:
            line += f" {resolved.value}"
        print(line)
        return 0

    return _run(args, body)


def cmd_arglist(args: argparse.Namespace) -> int:
    """Print the arglists of a symbol, one per line."""

    def body(stepper) -> int:
        for arglist in stepper.arglist(args.symbol):
            print(arglist)
        return 0

    return _run(args, body)


def cmd_source(args: argparse.Namespace) -> int:
    """Print the source of a definition."""

    def body(stepper) -> int:
        source = stepper.source(args.symbol)
        if source is None:
            print(f"Source not found for {args.symbol}", file=sys.stderr)
            return 1
        print(source)
        return 0

    return _run(args, body)


def cmd_eval(args: argparse.Namespace) -> int:
    """Evaluate code and print the value of the last form."""

    def body(stepper) -> int:
        print(pr_str(stepper.interpreter.eval_string(args.code)))
        return 0

    return _run(args, body)


def cmd_repl(args: argparse.Namespace) -> int:
    """Start the interactive REPL."""
    from stepin.repl import ReplBackend, create_repl

    def body(stepper) -> int:
        repl_instance = create_repl(mode="terminal", backend=ReplBackend(stepper))
        repl_instance.run()
        return 0

    return _run(args, body)


SUBCOMMANDS = {
    "flatten": cmd_flatten,
    "step-in": cmd_step_in,
    "resolve": cmd_resolve,
    "arglist": cmd_arglist,
    "source": cmd_source,
    "eval": cmd_eval,
    "repl": cmd_repl,
}


def create_parser() -> argparse.ArgumentParser:
    """Parser for the global options and every subcommand."""
    parser = argparse.ArgumentParser(
        prog="stepin",
        description="stepin - step into Clojure-style function and macro calls",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  stepin -l src/app.clj flatten "(app/area 3 4)"
  stepin -l src/app.clj step-in --eval "(app/area 3 4)"
  stepin step-in "(when-let [x (f)] (g x))"
  stepin arglist if
  stepin source when
  stepin eval "(let [[a & r] [1 2 3]] r)"
  stepin repl
        """,
    )

    parser.add_argument(
        "-l",
        "--load",
        metavar="FILE",
        action="append",
        help="Load a source file before running the command (repeatable)",
    )
    parser.add_argument(
        "--ns",
        metavar="NS",
        help="Namespace to switch to after loading (default: user)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="stepin.edn to use instead of searching upward from the current directory",
    )
    parser.add_argument(
        "-p",
        "--source-path",
        metavar="DIR",
        action="append",
        help="Extra directory to search for namespaces (repeatable)",
    )
    parser.add_argument(
        "--read-eval",
        choices=["true", "false", "unknown"],
        help="Override :read-eval",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log diagnostics to stderr",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    for name, help_text in (
        ("flatten", "Inline a call as a let around the callee's body"),
        ("step-in", "Bind a call's arguments to the callee's parameters as defs"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("call", help="The call form, e.g. \"(f 1 2)\"")
        sub.add_argument(
            "--eval",
            "-e",
            action="store_true",
            help="Also evaluate the result and print its value",
        )

    for name, help_text in (
        ("resolve", "Show what a symbol names"),
        ("arglist", "Show how a symbol can be called"),
        ("source", "Show the source of a definition"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("symbol", help="The symbol, optionally namespace-qualified")

    eval_parser = subparsers.add_parser("eval", help="Evaluate code")
    eval_parser.add_argument("code", help="Code to evaluate")

    subparsers.add_parser("repl", help="Start the interactive REPL")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the stepin CLI. Calls sys.exit with return code."""
    sys.exit(_main(argv))


def _main(argv: Optional[list[str]] = None) -> int:
    """Run the command line and return the exit status."""
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.subcommand is None:
        return cmd_repl(args)
    return SUBCOMMANDS[args.subcommand](args)


if __name__ == "__main__":
    main()
