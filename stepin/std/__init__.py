"""
stepin.std - stepin Standard Library

This package contains the stepin source files of the standard library.

Structure:
- core.clj: Functions and macros loaded into stepin.core at startup (when,
  cond, and, or, ->, if-let, merge, update, ...)
"""
