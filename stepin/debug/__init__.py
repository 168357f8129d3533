"""
stepin.debug - Stepping into calls

Modules:
- destructure.py: PatternBinder, binding patterns against expressions
- arity.py: Clause and select_clause, picking the clause for an argument count
- environment.py: SymbolEnvironment, the view of the live system
- resolver.py: SymbolResolver, classifying the head of a call
- flatten.py: flatten_expr, debug_step_in and the Stepper facade
"""
