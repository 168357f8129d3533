"""
Test suite for the REPL backend and terminal frontend.
"""

import contextlib
import io
import unittest
from unittest import mock


def make_backend():
    from stepin.config import StepinConfig
    from stepin.debug.flatten import Stepper
    from stepin.repl import ReplBackend

    return ReplBackend(Stepper(StepinConfig()))


class TestReplBackend(unittest.TestCase):
    """Test evaluation, buffering and commands."""

    def setUp(self):
        self.backend = make_backend()

    def test_eval(self):
        """Code is evaluated in the current namespace."""
        from stepin.errors import ResultType

        result = self.backend.eval("(+ 1 2)")
        self.assertEqual(result.type, ResultType.VALUE)
        self.assertEqual(result.value, 3)
        self.assertEqual(self.backend.eval("   ").type, ResultType.EMPTY)

    def test_namespace_change_persists(self):
        """An ns form changes the namespace for later input."""
        self.backend.eval("(ns scratch)")
        self.assertEqual(self.backend.namespace, "scratch")

    def test_is_complete(self):
        """Open brackets outside strings and comments make input incomplete."""
        self.assertTrue(self.backend.is_complete("(+ 1 2)"))
        self.assertFalse(self.backend.is_complete("(let [a 1]"))
        self.assertTrue(self.backend.is_complete('(str "(")'))
        self.assertTrue(self.backend.is_complete("(inc 1) ; (open"))
        self.assertTrue(self.backend.is_complete("(str \\()"))
        self.assertFalse(self.backend.is_complete('(str "abc'))

    def test_buffering(self):
        """Lines accumulate until the form is complete."""
        from stepin.errors import ResultType

        self.assertEqual(self.backend.eval_with_buffer("(defn add [a b]").type, ResultType.INCOMPLETE)
        result = self.backend.eval_with_buffer("  (+ a b))")
        self.assertTrue(result.is_success())
        self.assertEqual(self.backend.buffer, "")
        self.assertEqual(self.backend.eval("(add 2 3)").value, 5)
        self.assertEqual(len(self.backend.history), 1)

    def test_reset_buffer(self):
        """reset_buffer discards pending input."""
        self.backend.eval_with_buffer("(let [x 1]")
        self.backend.reset_buffer()
        self.assertEqual(self.backend.eval_with_buffer("(inc 1)").value, 2)

    def test_eval_error(self):
        """Errors carry their kind."""
        result = self.backend.eval("(undefined-fn)")
        self.assertTrue(result.is_error())
        self.assertEqual(result.error_type, "EvalError")
        self.assertIn("undefined-fn", result.error)

        result = self.backend.eval("(let [[a b] 1 2])")
        self.assertTrue(result.is_error())

    def test_step_in_command(self):
        """:step-in defines the parameters and returns the summary."""
        from stepin.runtime.types import Keyword

        self.backend.eval("(defn add [a b] (+ a b))")
        result = self.backend.eval(":step-in (add 1 (inc 1))")
        self.assertTrue(result.is_success(), result.error)
        self.assertEqual(result.value, {Keyword("a"): 1, Keyword("b"): 2})
        self.assertTrue(result.output.startswith("(do"))
        self.assertEqual(self.backend.eval("(+ a b)").value, 3)

    def test_flatten_command(self):
        """:flatten returns the let form as code."""
        from stepin.compiler.printer import pr_str

        self.backend.eval("(defn add [a b] (+ a b))")
        result = self.backend.eval(":flatten (add 1 2)")
        self.assertTrue(result.code)
        self.assertEqual(pr_str(result.value), "(let [a 1 b 2] (+ a b))")

    def test_command_errors(self):
        """Step-in failures are reported with their kind."""
        result = self.backend.eval(":flatten (nope 1)")
        self.assertEqual(result.error_type, "unresolved-symbol")
        self.assertIn("in: (nope 1)", result.error)
        self.assertEqual(self.backend.eval(":flatten").error_type, "usage")
        self.assertEqual(self.backend.eval(":source no-such").error_type, "unresolved-symbol")

    def test_query_commands(self):
        """:arglist, :resolve, :source and :doc print their answers."""
        self.assertEqual(self.backend.eval(":arglist if").output, "[test then else?]\n")
        self.assertEqual(self.backend.eval(":resolve when").output, "macro stepin.core/when\n")
        self.assertTrue(self.backend.eval(":source when").output.startswith("(defmacro when"))
        doc = self.backend.eval(":doc when").output
        self.assertIn("stepin.core/when", doc)
        self.assertIn("[test & body]", doc)
        self.assertIn("Macro", doc)
        self.assertEqual(
            self.backend.eval(":doc no-such").output, "No documentation found for no-such\n"
        )

    def test_completions(self):
        """Completions cover vars, refers, aliases and commands."""
        self.backend.eval("(def my-value 1)")
        self.assertIn("my-value", self.backend.get_completions("my-"))
        self.assertIn("when-let", self.backend.get_completions("when"))
        self.assertEqual(self.backend.get_completions(":fl"), [":flatten"])


class TestTerminalRepl(unittest.TestCase):
    """Test the terminal frontend with scripted input."""

    def make_repl(self):
        from stepin.repl import create_repl

        return create_repl(backend=make_backend(), history_file=None)

    def test_session(self):
        """A defn typed over two lines can be stepped into."""
        repl = self.make_repl()
        lines = ["(defn add [a b]", "  (+ a b))", ":step-in (add 1 2)", ":quit"]
        out = io.StringIO()
        with mock.patch("builtins.input", side_effect=lines), contextlib.redirect_stdout(out):
            repl.run()
        text = out.getvalue()
        self.assertIn("#'user/add", text)
        self.assertIn("{:a 1, :b 2}", text)

    def test_prompt(self):
        """The prompt shows the current namespace."""
        repl = self.make_repl()
        self.assertEqual(repl.prompt, "user=> ")

    def test_errors_go_to_stderr(self):
        """Errors are printed with their kind."""
        repl = self.make_repl()
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            repl.print_result(repl.backend.eval(":flatten (nope)"))
        self.assertIn("Error: unresolved-symbol:", err.getvalue())

    def test_unknown_mode(self):
        """Only the terminal frontend exists."""
        from stepin.repl import create_repl

        with self.assertRaises(ValueError):
            create_repl(mode="web")


if __name__ == "__main__":
    unittest.main()
