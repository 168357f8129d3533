"""
Tests for clause selection and for parsing definitions into clauses.
"""

import unittest


def clauses_of(source):
    from stepin.compiler.definitions import parse_definition
    from stepin.compiler.reader import read_one

    return parse_definition(read_one(source)).clauses


class TestArity(unittest.TestCase):
    """Test arity and select_clause."""

    def test_arity(self):
        """Fixed parameters count; & makes the arity unbounded."""
        from stepin.compiler.reader import read_one
        from stepin.debug.arity import UNBOUNDED_ARITY, arity

        self.assertEqual(arity(read_one("[]")), 0)
        self.assertEqual(arity(read_one("[a [b c] {:keys [d]}]")), 3)
        self.assertEqual(arity(read_one("[a & r]")), UNBOUNDED_ARITY)

    def test_selects_exact_fixed_arity(self):
        """Two arguments select the two-parameter clause."""
        from stepin.compiler.printer import pr_str
        from stepin.debug.arity import select_clause

        clauses = clauses_of("(defn f ([a] 1) ([a b] 2) ([a b & more] 3))")
        self.assertEqual(pr_str(select_clause(clauses, 2).params), "[a b]")

    def test_selects_variadic_for_many_args(self):
        """More arguments than any fixed clause takes select the variadic one."""
        from stepin.debug.arity import select_clause

        clauses = clauses_of("(defn f ([a] 1) ([a b] 2) ([a b & more] 3))")
        self.assertTrue(select_clause(clauses, 5).is_variadic)

    def test_clause_order_does_not_matter(self):
        """Clauses are ranked by arity, not by their position."""
        from stepin.compiler.printer import pr_str
        from stepin.debug.arity import select_clause

        clauses = clauses_of("(defn f ([a & more] 3) ([a b] 2) ([a] 1))")
        self.assertEqual(pr_str(select_clause(clauses, 1).params), "[a]")
        self.assertEqual(pr_str(select_clause(clauses, 2).params), "[a b]")

    def test_fewer_args_select_smallest_covering_clause(self):
        """Zero arguments select the smallest clause that can take them."""
        from stepin.compiler.printer import pr_str
        from stepin.debug.arity import select_clause

        clauses = clauses_of("(defn f ([a b] 2) ([a] 1))")
        self.assertEqual(pr_str(select_clause(clauses, 0).params), "[a]")

    def test_no_matching_arity(self):
        """Too many arguments for every clause raise NoMatchingArity."""
        from stepin.debug.arity import select_clause
        from stepin.errors import NoMatchingArity

        clauses = clauses_of("(defn f ([a] 1) ([a b] 2))")
        with self.assertRaises(NoMatchingArity) as ctx:
            select_clause(clauses, 3, "call")
        self.assertEqual(ctx.exception.arg_count, 3)
        self.assertEqual(ctx.exception.arities, [1, 2])
        self.assertEqual(ctx.exception.form, "call")
        self.assertEqual(ctx.exception.kind, "no-matching-arity")


class TestParseDefinition(unittest.TestCase):
    """Test splitting definitions into docstring, attr-map and clauses."""

    def test_single_arity_with_doc(self):
        """A docstring before the parameters is recorded."""
        from stepin.compiler.definitions import parse_definition
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Symbol

        definition = parse_definition(read_one('(defn add "Adds." [a b] (+ a b))'))
        self.assertEqual(definition.kind, "defn")
        self.assertEqual(definition.name, Symbol("add"))
        self.assertEqual(definition.doc, "Adds.")
        self.assertEqual(len(definition.clauses), 1)
        self.assertEqual(definition.clauses[0].body, [read_one("(+ a b)")])

    def test_attr_maps(self):
        """Leading and trailing attr-maps are skipped."""
        from stepin.compiler.definitions import parse_definition
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Keyword

        definition = parse_definition(
            read_one('(defn f "doc" {:added "1"} ([] 0) ([x] x) {:extra true})')
        )
        self.assertEqual(definition.attr_map.get(Keyword("added")), "1")
        self.assertEqual([c.arity for c in definition.clauses], [0, 1])

    def test_decorated_name(self):
        """Metadata on the name is unwrapped."""
        from stepin.compiler.definitions import parse_definition
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Keyword, Symbol

        definition = parse_definition(read_one("(defn ^:private helper [] 1)"))
        self.assertEqual(definition.name, Symbol("helper"))
        self.assertEqual(definition.meta, Keyword("private"))

    def test_defmacro(self):
        """defmacro definitions are macros."""
        from stepin.compiler.definitions import parse_definition
        from stepin.compiler.reader import read_one

        definition = parse_definition(read_one("(defmacro m [x & body] x)"))
        self.assertTrue(definition.is_macro)

    def test_def_with_fn(self):
        """(def name (fn ...)) is a definition too."""
        from stepin.compiler.definitions import parse_definition
        from stepin.compiler.printer import pr_str
        from stepin.compiler.reader import read_one

        definition = parse_definition(read_one("(def g (fn g ([x] x) ([x y] y)))"))
        self.assertEqual([pr_str(a) for a in definition.arglists], ["[x]", "[x y]"])

    def test_malformed(self):
        """Forms without the definition shape raise MalformedDefinition."""
        from stepin.compiler.definitions import parse_definition
        from stepin.compiler.reader import read_one
        from stepin.errors import MalformedDefinition

        for source in (
            "(defn f)",
            "(defn f x)",
            "(defn 1 [] 1)",
            "(def x 1)",
            "(let [a 1] a)",
            "(defn f (x) 1)",
            "42",
        ):
            with self.subTest(source=source):
                with self.assertRaises(MalformedDefinition):
                    parse_definition(read_one(source))


if __name__ == "__main__":
    unittest.main()
