"""
Test suite for the stepin interpreter.

This module tests:
- Special forms and the bootstrap macros (let, fn, loop, defn, defmacro)
- The macros defined in std/core.clj
- Definition metadata recorded on vars
- Namespaces, require and aliases
- Python interop
- Read-time evaluation settings
"""

import os
import tempfile
import unittest


def make_interpreter(**kwargs):
    from stepin.runtime.interpreter import Interpreter

    return Interpreter(**kwargs)


class TestEvaluation(unittest.TestCase):
    """Test evaluating forms."""

    def setUp(self):
        self.interp = make_interpreter()

    def ev(self, text):
        return self.interp.eval_string(text)

    def test_arithmetic_and_literals(self):
        """Calls, vectors, maps and sets evaluate to runtime values."""
        from stepin.runtime.types import Keyword

        self.assertEqual(self.ev("(+ 1 2 3)"), 6)
        self.assertEqual(self.ev("[1 (inc 1)]"), [1, 2])
        self.assertEqual(self.ev("{:a (* 2 3)}"), {Keyword("a"): 6})
        self.assertEqual(self.ev("#{1 2}"), frozenset([1, 2]))

    def test_if_and_truthiness(self):
        """Only nil and false are falsey."""
        self.assertEqual(self.ev("(if 0 :yes :no)"), self.ev(":yes"))
        self.assertEqual(self.ev("(if nil 1 2)"), 2)
        self.assertIsNone(self.ev("(if false 1)"))

    def test_quote(self):
        """Quoted code is returned unevaluated."""
        from stepin.runtime.types import Symbol

        self.assertEqual(self.ev("'(f x)"), [Symbol("f"), Symbol("x")])

    def test_let_destructuring(self):
        """let destructures vectors and maps."""
        self.assertEqual(self.ev("(let [[a b] [1 2] {:keys [c]} {:c 3}] (+ a b c))"), 6)

    def test_fn_arities(self):
        """fn with several clauses dispatches on argument count."""
        self.ev("(def f (fn ([] 0) ([x] x) ([x & more] (apply + x more))))")
        self.assertEqual(self.ev("(f)"), 0)
        self.assertEqual(self.ev("(f 5)"), 5)
        self.assertEqual(self.ev("(f 1 2 3)"), 6)

    def test_fn_destructuring_params(self):
        """Pattern parameters are destructured."""
        self.assertEqual(self.ev("((fn [[a b] {:keys [c]}] (+ a b c)) [1 2] {:c 3})"), 6)

    def test_wrong_arity(self):
        """Calling a fn with an unsupported argument count fails."""
        from stepin.errors import EvalError

        with self.assertRaises(EvalError):
            self.ev("((fn [x] x) 1 2)")

    def test_loop_recur(self):
        """loop/recur iterates without growing the stack."""
        self.assertEqual(
            self.ev("(loop [i 0 acc 0] (if (< i 1000) (recur (inc i) (+ acc i)) acc))"),
            499500,
        )

    def test_loop_with_patterns(self):
        """loop bindings may be destructuring patterns."""
        self.assertEqual(
            self.ev("(loop [[x & xs] [1 2 3] acc 0] (if x (recur xs (+ acc x)) acc))"),
            6,
        )

    def test_recur_in_fn(self):
        """recur rebinds the parameters of the enclosing fn."""
        self.ev("(defn countdown [n] (if (zero? n) :done (recur (dec n))))")
        self.assertEqual(self.ev("(countdown 50)"), self.ev(":done"))

    def test_try_catch_finally(self):
        """Exceptions are caught by class; finally always runs."""
        from stepin.runtime.types import Keyword

        self.ev("(def a (atom 0))")
        result = self.ev(
            "(try (throw (ex-info \"boom\" {:a 1})) "
            "(catch Exception e (ex-data e)) "
            "(finally (reset! a 1)))"
        )
        self.assertEqual(result, {Keyword("a"): 1})
        self.assertEqual(self.ev("@a"), 1)
        self.assertEqual(self.ev("(try (/ 1 0) (catch ZeroDivisionError e :div))"), Keyword("div"))

    def test_throw_requires_exception(self):
        """Throwing something that is not an exception is an error."""
        from stepin.errors import EvalError

        with self.assertRaises(EvalError):
            self.ev("(throw 42)")

    def test_unresolved_symbol(self):
        """Unknown symbols raise EvalError."""
        from stepin.errors import EvalError

        with self.assertRaises(EvalError):
            self.ev("(undefined-thing 1)")

    def test_callable_collections(self):
        """Keywords, maps, vectors and sets can be called."""
        self.assertEqual(self.ev("(:a {:a 1})"), 1)
        self.assertEqual(self.ev("({:a 1} :a)"), 1)
        self.assertEqual(self.ev("([10 20] 1)"), 20)
        self.assertEqual(self.ev("(#{3} 3)"), 3)

    def test_python_interop(self):
        """Methods, attributes and module members are reachable."""
        self.assertEqual(self.ev('(.upper "abc")'), "ABC")
        self.assertEqual(self.ev("(math/sqrt 16)"), 4.0)
        self.assertEqual(self.ev('(. "a-b" split "-")'), ["a", "b"])
        self.assertEqual(self.ev("(.-real 3)"), 3)


class TestMacros(unittest.TestCase):
    """Test macros from the bootstrap set and std/core.clj."""

    def setUp(self):
        self.interp = make_interpreter()

    def ev(self, text):
        return self.interp.eval_string(text)

    def test_core_macros(self):
        """when, cond, and, or, -> and if-let behave like Clojure's."""
        self.assertEqual(self.ev("(when true 1 2)"), 2)
        self.assertIsNone(self.ev("(when false 1)"))
        self.assertEqual(self.ev("(cond false 1 :else 2)"), 2)
        self.assertIsNone(self.ev("(cond false 1)"))
        self.assertEqual(self.ev("(and 1 2 3)"), 3)
        self.assertEqual(self.ev("(and 1 nil 3)"), None)
        self.assertEqual(self.ev("(or nil false 4)"), 4)
        self.assertEqual(self.ev("(-> 5 (- 2) inc)"), 4)
        self.assertEqual(self.ev("(->> [1 2 3] (map inc) (reduce +))"), 9)
        self.assertEqual(self.ev("(if-let [x (get {:a 1} :a)] (inc x) :none)"), 2)

    def test_defmacro_with_auto_gensym(self):
        """Syntax quote with x# generates a fresh symbol per expansion."""
        self.ev("(defmacro twice-val [x] `(let [v# ~x] (+ v# v#)))")
        self.assertEqual(self.ev("(twice-val 4)"), 8)
        expansion = self.ev("(macroexpand-1 '(twice-val 4))")
        binding = expansion[1].items[0]
        self.assertTrue(binding.name.startswith("v__"))
        self.assertTrue(binding.name.endswith("__auto__"))

    def test_macroexpand(self):
        """macroexpand-1 expands once, macroexpand until the head is no macro."""
        from stepin.compiler.reader import read_one
        from stepin.runtime.types import Symbol

        once = self.interp.macroexpand_1(read_one("(when a b)"))
        self.assertEqual(once, [Symbol("if"), Symbol("a"), [Symbol("do"), Symbol("b")]])
        full = self.interp.macroexpand(read_one("(when-let [x y] x)"))
        self.assertEqual(full[0], Symbol("let*"))

    def test_macro_value_cannot_be_taken(self):
        """A macro name is not a value."""
        from stepin.errors import EvalError

        with self.assertRaises(EvalError):
            self.ev("when")


class TestDefinitionMetadata(unittest.TestCase):
    """Test the metadata recorded by def, defn and defmacro."""

    def test_defn_metadata(self):
        """defn records ns, name, file, line, col, doc and arglists."""
        from stepin.compiler.printer import pr_str
        from stepin.runtime.types import Symbol

        interp = make_interpreter()
        interp.load_string(
            '(ns meta.test)\n\n  (defn add\n    "Adds."\n    [a b]\n    (+ a b))\n',
            file="<meta-test>",
        )
        var = interp.registry.resolve("meta.test", Symbol("add"))
        self.assertIsNotNone(var)
        self.assertEqual(var.meta["ns"], "meta.test")
        self.assertEqual(var.meta["name"], "add")
        self.assertEqual(var.meta["file"], "<meta-test>")
        self.assertEqual(var.meta["line"], 3)
        self.assertEqual(var.meta["col"], 2)
        self.assertEqual(var.meta["doc"], "Adds.")
        self.assertEqual([pr_str(a) for a in var.meta["arglists"]], ["[a b]"])
        self.assertFalse(var.is_macro)

    def test_defmacro_is_marked(self):
        """defmacro sets :macro."""
        from stepin.runtime.types import Symbol

        interp = make_interpreter()
        interp.eval_string("(defmacro unless [c & body] `(if ~c nil (do ~@body)))")
        self.assertTrue(interp.resolve(Symbol("unless")).is_macro)

    def test_attr_map_and_private(self):
        """An attr-map is merged into the var metadata."""
        from stepin.runtime.types import Symbol

        interp = make_interpreter()
        interp.eval_string('(defn ^:private helper {:added "1.0"} [] 1)')
        var = interp.resolve(Symbol("helper"))
        self.assertTrue(var.meta["private"])
        self.assertEqual(var.meta["added"], "1.0")

    def test_core_functions_have_arglists(self):
        """Python core functions report arglists from their signature."""
        from stepin.compiler.printer import pr_str
        from stepin.runtime.types import Symbol

        interp = make_interpreter()
        var = interp.resolve(Symbol("first"))
        self.assertEqual([pr_str(a) for a in var.meta["arglists"]], ["[coll]"])
        self.assertEqual(var.meta["ns"], "stepin.core")

    def test_def_returns_var(self):
        """def returns the var and (var x) finds it again."""
        interp = make_interpreter()
        var = interp.eval_string("(def x 1)")
        self.assertEqual(repr(var), "#'user/x")
        self.assertIs(interp.eval_string("(var x)"), var)


class TestNamespaces(unittest.TestCase):
    """Test ns, in-ns and require."""

    def setUp(self):
        from stepin.runtime.ns import SOURCE_ROOTS

        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        os.makedirs(os.path.join(self.tmpdir.name, "my"))
        with open(os.path.join(self.tmpdir.name, "my", "util.clj"), "w") as f:
            f.write("(ns my.util)\n\n(defn twice [x] (* 2 x))\n")
        SOURCE_ROOTS.insert(0, self.tmpdir.name)
        self.addCleanup(SOURCE_ROOTS.remove, self.tmpdir.name)

    def test_require_with_alias(self):
        """(ns ... (:require [x :as y])) loads x and aliases it."""
        interp = make_interpreter()
        interp.eval_string("(ns app (:require [my.util :as u]))")
        self.assertEqual(interp.current_ns, "app")
        self.assertEqual(interp.eval_string("(u/twice 4)"), 8)
        self.assertEqual(interp.eval_string("(my.util/twice 5)"), 10)

    def test_require_refer(self):
        """:refer makes names available unqualified."""
        interp = make_interpreter()
        interp.eval_string("(require '[my.util :refer [twice]])")
        self.assertEqual(interp.eval_string("(twice 2)"), 4)

    def test_require_missing(self):
        """Requiring an unknown namespace fails."""
        from stepin.errors import EvalError

        interp = make_interpreter()
        with self.assertRaises(EvalError):
            interp.eval_string("(require 'no.such.ns)")

    def test_load_string_restores_namespace(self):
        """load-string keeps the caller's namespace."""
        interp = make_interpreter()
        interp.load_string("(ns other) (def y 1)")
        self.assertEqual(interp.current_ns, "user")
        self.assertIn("other", interp.registry.names())


class TestReadEval(unittest.TestCase):
    """Test #= under the read-eval settings."""

    def test_enabled(self):
        """With read-eval on, #= evaluates its form."""
        self.assertEqual(make_interpreter().eval_string("#=(+ 1 2)"), 3)

    def test_disabled(self):
        """With read-eval off or unknown, #= is refused."""
        from stepin.errors import EvaluationDeferred

        for setting in (False, "unknown"):
            interp = make_interpreter(read_eval=setting)
            with self.assertRaises(EvaluationDeferred):
                interp.eval_string("#=(+ 1 2)")


if __name__ == "__main__":
    unittest.main()
