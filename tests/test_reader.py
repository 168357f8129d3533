"""
Tests for the stepin reader.

This module tests:
- Token positions (1-based lines, 0-based columns)
- Literal forms: vectors, maps, sets, keywords, strings, characters
- Reader macros: quote, syntax quote, deref, metadata, #_ and #=
- read_one_with_text returning the exact source of a form
"""

import unittest


class TestTokenize(unittest.TestCase):
    """Test the tokenizer's positions."""

    def test_positions(self):
        """Tokens carry 1-based lines and 0-based columns."""
        from stepin.compiler.reader import tokenize

        tokens = tokenize("(foo\n  bar)")
        self.assertEqual([t.value for t in tokens], ["(", "foo", "bar", ")"])
        self.assertEqual((tokens[0].line, tokens[0].col), (1, 0))
        self.assertEqual((tokens[1].line, tokens[1].col), (1, 1))
        self.assertEqual((tokens[2].line, tokens[2].col), (2, 2))

    def test_commas_and_comments_are_whitespace(self):
        """Commas and ; comments produce no tokens."""
        from stepin.compiler.reader import tokenize

        tokens = tokenize("[1, 2] ; trailing comment\n3")
        self.assertEqual([t.value for t in tokens], ["[", "1", "2", "]", "3"])

    def test_unterminated_string(self):
        """An unterminated string is a syntax error."""
        from stepin.compiler.reader import tokenize

        with self.assertRaises(SyntaxError):
            tokenize('(str "abc')


class TestReader(unittest.TestCase):
    """Test reading forms."""

    def test_atoms(self):
        """Numbers, booleans, nil, keywords and symbols."""
        from stepin.compiler.reader import read_str
        from stepin.runtime.types import Keyword, Symbol

        forms = read_str("42 -7 1.5 0x10 true false nil :k :ns/k sym ns/sym")
        self.assertEqual(
            forms,
            [
                42,
                -7,
                1.5,
                16,
                True,
                False,
                None,
                Keyword("k"),
                Keyword("ns/k"),
                Symbol("sym"),
                Symbol("ns/sym"),
            ],
        )

    def test_list_carries_location(self):
        """Lists are SourceLists that know where they start."""
        from stepin.compiler.reader import SourceList, read_str

        forms = read_str("\n  (f x)")
        self.assertIsInstance(forms[0], SourceList)
        self.assertEqual((forms[0].line, forms[0].col), (2, 2))

    def test_collections(self):
        """Vectors, maps and sets read as literal nodes."""
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Keyword, MapLiteral, SetLiteral, Symbol, VectorLiteral

        form = read_one("[a {b :k} #{1}]")
        self.assertIsInstance(form, VectorLiteral)
        self.assertEqual(form.items[0], Symbol("a"))
        self.assertIsInstance(form.items[1], MapLiteral)
        self.assertEqual(form.items[1].pairs, [(Symbol("b"), Keyword("k"))])
        self.assertIsInstance(form.items[2], SetLiteral)

    def test_odd_map_is_an_error(self):
        """A map literal needs an even number of forms."""
        from stepin.compiler.reader import read_one

        with self.assertRaises(SyntaxError):
            read_one("{:a}")

    def test_strings_and_characters(self):
        """Strings unescape; characters read as one-character strings."""
        from stepin.compiler.reader import read_str

        self.assertEqual(read_str(r'"a\"b\n" \c \space'), ['a"b\n', "c", " "])

    def test_quote_macros(self):
        """' ` @ ~ and ~@ wrap the following form."""
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Symbol

        self.assertEqual(read_one("'x"), [Symbol("quote"), Symbol("x")])
        self.assertEqual(read_one("@a"), [Symbol("deref"), Symbol("a")])
        form = read_one("`(f ~x ~@ys)")
        self.assertEqual(form[0], Symbol("quasiquote"))
        self.assertEqual(form[1][1], [Symbol("unquote"), Symbol("x")])
        self.assertEqual(form[1][2], [Symbol("unquote-splicing"), Symbol("ys")])

    def test_metadata(self):
        """^meta form reads as Decorated."""
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Decorated, Keyword, Symbol

        form = read_one("^:private x")
        self.assertIsInstance(form, Decorated)
        self.assertEqual(form.expr, Keyword("private"))
        self.assertEqual(form.form, Symbol("x"))

    def test_discard(self):
        """#_ drops the next form."""
        from stepin.compiler.reader import read_str

        self.assertEqual(read_str("1 #_2 3"), [1, 3])

    def test_read_time_eval(self):
        """#= reads as a ReadTimeEval node around the form."""
        from stepin.compiler.reader import ReadTimeEval, read_one
        from stepin.runtime.types import Symbol

        form = read_one("#=(+ 1 2)")
        self.assertIsInstance(form, ReadTimeEval)
        self.assertEqual(form.form, [Symbol("+"), 1, 2])

    def test_anonymous_fn_literal_rejected(self):
        """#(...) is not supported."""
        from stepin.compiler.reader import read_one

        with self.assertRaises(SyntaxError):
            read_one("#(inc %)")

    def test_unbalanced(self):
        """Unclosed and unmatched delimiters are syntax errors."""
        from stepin.compiler.reader import read_one, read_str

        with self.assertRaises(SyntaxError):
            read_one("(f (g x)")
        with self.assertRaises(SyntaxError):
            read_str("(f x))")

    def test_read_one_with_text(self):
        """The text of the first form is returned exactly."""
        from stepin.compiler.reader import read_one_with_text
        from stepin.runtime.types import Symbol

        form, text = read_one_with_text('(defn f "doc" [x]\n  (g x)) (other)')
        self.assertEqual(form[1], Symbol("f"))
        self.assertEqual(text, '(defn f "doc" [x]\n  (g x))')

    def test_read_one_empty(self):
        """Reading from text without forms fails."""
        from stepin.compiler.reader import read_one

        with self.assertRaises(SyntaxError):
            read_one("  ; only a comment")


if __name__ == "__main__":
    unittest.main()
