"""
Tests for the stepin printer: pr_str and format_form.
"""

import unittest


class TestPrStr(unittest.TestCase):
    """Test single-line printing of forms and values."""

    def test_atoms(self):
        """nil, booleans, strings, keywords and symbols print as source."""
        from stepin.compiler.printer import pr_str
        from stepin.runtime.types import Keyword, Symbol

        self.assertEqual(pr_str(None), "nil")
        self.assertEqual(pr_str(True), "true")
        self.assertEqual(pr_str(False), "false")
        self.assertEqual(pr_str('say "hi"\n'), '"say \\"hi\\"\\n"')
        self.assertEqual(pr_str(Keyword("k")), ":k")
        self.assertEqual(pr_str(Symbol("ns/f")), "ns/f")

    def test_not_readably(self):
        """With readably=False strings print raw."""
        from stepin.compiler.printer import pr_str

        self.assertEqual(pr_str("a b", readably=False), "a b")

    def test_collections(self):
        """Lists, vectors and maps, both as code and as values."""
        from stepin.compiler.printer import pr_str
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Keyword, Vector

        self.assertEqual(pr_str(read_one("(f [a b] {:k 1})")), "(f [a b] {:k 1})")
        self.assertEqual(pr_str(Vector((1, 2))), "[1 2]")
        self.assertEqual(pr_str([1, 2]), "(1 2)")
        self.assertEqual(pr_str({Keyword("a"): 1, Keyword("b"): 2}), "{:a 1, :b 2}")
        self.assertEqual(pr_str(frozenset([1])), "#{1}")

    def test_round_trip_of_code(self):
        """Printing read code reads back to the same form."""
        from stepin.compiler.printer import pr_str
        from stepin.compiler.reader import read_one

        source = "(let [[a & r :as all] xs {:keys [k] :or {k 1}} m] (str a k))"
        self.assertEqual(read_one(pr_str(read_one(source))), read_one(source))

    def test_metadata_and_read_time_eval(self):
        """Decorated and ReadTimeEval forms print with their reader syntax."""
        from stepin.compiler.printer import pr_str
        from stepin.compiler.reader import read_one

        self.assertEqual(pr_str(read_one("^:private x")), "^:private x")
        self.assertEqual(pr_str(read_one("#=(+ 1 2)")), "#=(+ 1 2)")


class TestFormatForm(unittest.TestCase):
    """Test pretty-printing."""

    def test_short_form_stays_on_one_line(self):
        """Forms under the width threshold are printed on one line."""
        from stepin.compiler.printer import format_form
        from stepin.compiler.reader import read_one

        self.assertEqual(format_form(read_one("(let [a 1] a)")), "(let [a 1] a)")

    def test_long_let_breaks_bindings(self):
        """A long let puts each binding pair and each body form on its own line."""
        from stepin.compiler.printer import format_form
        from stepin.compiler.reader import read_one

        form = read_one(
            "(let [first-value (compute-something 1) second-value (compute-other 2)]"
            " (combine first-value second-value))"
        )
        self.assertEqual(
            format_form(form),
            "(let [first-value (compute-something 1)\n"
            "      second-value (compute-other 2)]\n"
            "  (combine first-value second-value))",
        )

    def test_long_do_indents_every_form(self):
        """A long do starts its body on the next line."""
        from stepin.compiler.printer import format_form
        from stepin.compiler.reader import read_one

        form = read_one("(do (def alpha-value 1) (def beta-value 2) {:alpha alpha-value})")
        self.assertEqual(
            format_form(form),
            "(do\n  (def alpha-value 1)\n  (def beta-value 2)\n  {:alpha alpha-value})",
        )


if __name__ == "__main__":
    unittest.main()
