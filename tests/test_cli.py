"""
Tests for the stepin command line.
"""

import contextlib
import io
import os
import tempfile
import unittest

SOURCE = """(ns app)

(defn area [w h]
  (* w h))
"""


class TestCli(unittest.TestCase):
    """Run subcommands through _main and check their output."""

    @classmethod
    def setUpClass(cls):
        cls.tmp = tempfile.TemporaryDirectory()
        cls.config = os.path.join(cls.tmp.name, "stepin.edn")
        with open(cls.config, "w") as f:
            f.write("{}")
        cls.source = os.path.join(cls.tmp.name, "app.clj")
        with open(cls.source, "w") as f:
            f.write(SOURCE)

    @classmethod
    def tearDownClass(cls):
        cls.tmp.cleanup()

    def run_cli(self, *argv):
        from stepin.cli import _main

        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            rc = _main(["--config", self.config, "-l", self.source, *argv])
        return rc, out.getvalue(), err.getvalue()

    def test_flatten(self):
        """flatten prints the inlined call."""
        rc, out, _ = self.run_cli("flatten", "(app/area 3 4)")
        self.assertEqual(rc, 0)
        self.assertEqual(out, "(let [w 3 h 4] (* w h))\n")

    def test_flatten_eval(self):
        """--eval also prints the value."""
        rc, out, _ = self.run_cli("flatten", "--eval", "(app/area 3 4)")
        self.assertEqual(rc, 0)
        self.assertTrue(out.endswith(";; => 12\n"))

    def test_step_in_eval(self):
        """step-in --eval prints the defs and the parameter map."""
        rc, out, _ = self.run_cli("step-in", "-e", "(app/area 3 4)")
        self.assertEqual(rc, 0)
        self.assertTrue(out.startswith("(do"))
        self.assertIn("(def w (stepin.core/nth vec__", out)
        self.assertTrue(out.endswith(";; => {:w 3, :h 4}\n"))

    def test_ns_option(self):
        """--ns switches namespace after loading."""
        rc, out, _ = self.run_cli("--ns", "app", "flatten", "(area 1 2)")
        self.assertEqual(rc, 0)
        self.assertEqual(out, "(let [w 1 h 2] (* w h))\n")

    def test_arglist(self):
        """arglist prints one line per arglist."""
        rc, out, _ = self.run_cli("arglist", "if")
        self.assertEqual((rc, out), (0, "[test then else?]\n"))
        rc, out, _ = self.run_cli("arglist", "app/area")
        self.assertEqual((rc, out), (0, "[w h]\n"))

    def test_resolve(self):
        """resolve prints the kind and the qualified name."""
        rc, out, _ = self.run_cli("resolve", "when")
        self.assertEqual(rc, 0)
        self.assertTrue(out.startswith("macro stepin.core/when ("))
        rc, out, _ = self.run_cli("resolve", "app/area")
        self.assertEqual(out, f"function app/area ({self.source}:3)\n")

    def test_source(self):
        """source prints the definition text."""
        rc, out, _ = self.run_cli("source", "app/area")
        self.assertEqual(rc, 0)
        self.assertEqual(out, "(defn area [w h]\n  (* w h))\n")

    def test_source_not_found(self):
        """Functions without source exit with 1."""
        rc, _, err = self.run_cli("source", "first")
        self.assertEqual(rc, 1)
        self.assertIn("Source not found for first", err)

    def test_eval(self):
        """eval prints the value of the last form."""
        rc, out, _ = self.run_cli("eval", "(let [[a & r] [1 2 3]] r)")
        self.assertEqual((rc, out), (0, "(2 3)\n"))

    def test_unresolved_call(self):
        """Step-in failures print the error kind and exit with 1."""
        rc, out, err = self.run_cli("flatten", "(nope 1)")
        self.assertEqual(rc, 1)
        self.assertEqual(out, "")
        self.assertIn("Error: unresolved-symbol:", err)
        self.assertIn("  in: (nope 1)", err)

    def test_eval_error(self):
        """Evaluation errors exit with 1."""
        rc, _, err = self.run_cli("eval", "(undefined-thing)")
        self.assertEqual(rc, 1)
        self.assertIn("Unable to resolve symbol: undefined-thing", err)

    def test_missing_config(self):
        """A missing --config file is reported."""
        from stepin.cli import _main

        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            rc = _main(["--config", os.path.join(self.tmp.name, "nope.edn"), "eval", "1"])
        self.assertEqual(rc, 1)
        self.assertIn("Error: Path does not exist", err.getvalue())

    def test_bad_source_file(self):
        """A source file that fails to load is reported."""
        from stepin.cli import _main

        bad = os.path.join(self.tmp.name, "bad.clj")
        with open(bad, "w") as f:
            f.write("(defn broken [")
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            rc = _main(["--config", self.config, "-l", bad, "eval", "1"])
        self.assertEqual(rc, 1)
        self.assertIn("Error loading sources:", err.getvalue())


if __name__ == "__main__":
    unittest.main()
