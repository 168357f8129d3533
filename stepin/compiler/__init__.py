"""
stepin.compiler - Reading and printing stepin source

Phases:
1. Read (reader.py): Text -> Forms, with line/column positions
2. Macroexpand (macros.py): The bootstrap macros and expansion helpers
3. Print (printer.py): Forms -> Text, single line or pretty-printed

definitions.py parses defn/defmacro/fn forms into their clauses. The
macro and definition modules depend on the step-in tooling and are
imported from their modules directly.
"""

# Re-export reader
from stepin.compiler.reader import (
    Reader,
    ReadTimeEval,
    SourceList,
    SourceLocation,
    get_source_location,
    read_one,
    read_one_with_text,
    read_str,
    tokenize,
)

# Re-export printer
from stepin.compiler.printer import format_form, pr_str

__all__ = [
    # Reader
    "Reader",
    "ReadTimeEval",
    "SourceList",
    "SourceLocation",
    "get_source_location",
    "read_one",
    "read_one_with_text",
    "read_str",
    "tokenize",
    # Printer
    "format_form",
    "pr_str",
]
