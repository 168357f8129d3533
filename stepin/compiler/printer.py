"""
stepin.compiler.printer - Printing forms and values back as source text

The printer is the inverse of the reader: it renders forms (code) and
runtime values in reader syntax, either on a single line (pr_str) or
pretty-printed with the indentation conventions used for binding blocks
and definitions (format_form).
"""

from typing import Any

from stepin.compiler.reader import ReadTimeEval
from stepin.runtime.types import (
    Decorated,
    Keyword,
    MapLiteral,
    SetLiteral,
    Symbol,
    VectorLiteral,
)

# Forms whose bodies are indented under the head when pretty-printing
_INDENT_FORMS = {
    "do",
    "let",
    "let*",
    "loop",
    "fn",
    "fn*",
    "defn",
    "defn-",
    "defmacro",
    "when",
    "when-let",
    "if-let",
    "try",
}

# Threshold for breaking a list onto multiple lines
_LINE_LENGTH_THRESHOLD = 60

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def pr_str(form: Any, readably: bool = True) -> str:
    """
    Render a form or value on a single line.

    With readably=False strings are emitted raw, which is what str and
    println do.
    """
    return _format_form(form, 0, False, readably)


def format_form(form: Any, indent: int = 0, pretty: bool = True) -> str:
    """
    Format a form as a readable string.

    Args:
        form: The form to format.
        indent: Current indentation level.
        pretty: Whether to use pretty-printing with newlines.
    """
    return _format_form(form, indent, pretty, True)


def _format_string(s: str, readably: bool) -> str:
    if not readably:
        return s
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in s) + '"'


def _format_form(form: Any, indent: int, pretty: bool, readably: bool) -> str:
    """Internal formatting function."""
    if form is None:
        return "nil"
    elif isinstance(form, bool):
        return "true" if form else "false"
    elif isinstance(form, str):
        return _format_string(form, readably)
    elif isinstance(form, Symbol):
        return form.name
    elif isinstance(form, Keyword):
        return f":{form.name}"
    elif isinstance(form, (VectorLiteral, tuple)):
        items = form.items if isinstance(form, VectorLiteral) else list(form)
        return _format_vector(items, indent, pretty, readably)
    elif isinstance(form, list):
        return _format_list(form, indent, pretty, readably)
    elif isinstance(form, MapLiteral):
        return _format_map(form.pairs, indent, pretty, readably)
    elif isinstance(form, dict):
        return _format_map(list(form.items()), indent, pretty, readably)
    elif isinstance(form, SetLiteral):
        return "#{" + " ".join(_format_form(f, 0, False, readably) for f in form.items) + "}"
    elif isinstance(form, (set, frozenset)):
        return "#{" + " ".join(_format_form(f, 0, False, readably) for f in form) + "}"
    elif isinstance(form, Decorated):
        meta = _format_form(form.expr, 0, False, readably)
        return f"^{meta} {_format_form(form.form, indent, pretty, readably)}"
    elif isinstance(form, ReadTimeEval):
        return "#=" + _format_form(form.form, indent, pretty, readably)
    elif isinstance(form, float):
        if form != form:
            return "##NaN"
        if form in (float("inf"), float("-inf")):
            return "##Inf" if form > 0 else "##-Inf"
        return repr(form)
    elif isinstance(form, int):
        return str(form)
    else:
        return str(form)


def _format_list(form: list, indent: int, pretty: bool, readably: bool) -> str:
    """Format a list/sexp with smart indentation."""
    if not form:
        return "()"

    head = form[0]
    head_name = head.name if isinstance(head, Symbol) else None

    single_line = "(" + " ".join(_format_form(f, 0, False, readably) for f in form) + ")"

    if not pretty or len(single_line) <= _LINE_LENGTH_THRESHOLD:
        return single_line

    if head_name in _INDENT_FORMS:
        return _format_indented_form(form, head_name, indent, readably)

    return _format_long_form(form, indent, readably)


def _format_indented_form(form: list, head_name: str, indent: int, readably: bool) -> str:
    """Format a special form with its body indented under the head."""
    head = _format_form(form[0], indent, False, readably)
    body_indent = indent + 2
    indent_str = " " * body_indent

    # Number of leading arguments that stay on the head line
    if head_name in ("defn", "defn-", "defmacro"):
        keep = 2 if len(form) > 2 and isinstance(form[2], VectorLiteral) else 1
    elif head_name == "do" or head_name == "try":
        keep = 0
    else:
        keep = 1

    # Leading arguments are indented from the column they start at
    leading = []
    col = indent + len(head) + 2
    for f in form[1 : 1 + keep]:
        text = _format_form(f, col, True, readably)
        leading.append(text)
        col += len(text.split("\n")[-1]) + 1
    body_parts = [
        _format_form(f, body_indent, True, readably) for f in form[1 + keep :]
    ]
    head_line = " ".join([head] + leading)
    if not body_parts:
        return f"({head_line})"
    body = ("\n" + indent_str).join(body_parts)
    return f"({head_line}\n{indent_str}{body})"


def _format_long_form(form: list, indent: int, readably: bool) -> str:
    """Format a long form by breaking after the first element."""
    head = _format_form(form[0], indent, False, readably)
    if len(form) == 1:
        return f"({head})"

    body_indent = indent + 2
    indent_str = " " * body_indent
    body_parts = [_format_form(f, body_indent, True, readably) for f in form[1:]]
    body = ("\n" + indent_str).join(body_parts)
    return f"({head}\n{indent_str}{body})"


def _format_vector(items: list, indent: int, pretty: bool, readably: bool) -> str:
    """Format a vector."""
    if not items:
        return "[]"

    single_line = "[" + " ".join(_format_form(f, 0, False, readably) for f in items) + "]"
    if not pretty or len(single_line) <= _LINE_LENGTH_THRESHOLD:
        return single_line

    # Binding vectors break after every pair
    body_indent = indent + 1
    indent_str = " " * body_indent
    parts = [_format_form(f, body_indent, True, readably) for f in items]
    if len(parts) % 2 == 0:
        parts = [f"{parts[i]} {parts[i + 1]}" for i in range(0, len(parts), 2)]
    return "[" + ("\n" + indent_str).join(parts) + "]"


def _format_map(pairs: list, indent: int, pretty: bool, readably: bool) -> str:
    """Format a map/dict."""
    if not pairs:
        return "{}"

    formatted_pairs = [
        f"{_format_form(k, 0, False, readably)} {_format_form(v, 0, False, readably)}"
        for k, v in pairs
    ]
    single_line = "{" + ", ".join(formatted_pairs) + "}"

    if not pretty or len(single_line) <= _LINE_LENGTH_THRESHOLD:
        return single_line

    body_indent = indent + 1
    indent_str = " " * body_indent
    parts = [
        f"{_format_form(k, body_indent, True, readably)} "
        f"{_format_form(v, body_indent, True, readably)}"
        for k, v in pairs
    ]
    return "{" + ("\n" + indent_str).join(parts) + "}"


__all__ = ["pr_str", "format_form"]
