"""
Renderer and printer
====================
Two ways of turning an expression back into text.

``format_expression`` (the printer) writes the readable form used by the
print-expanded directive: ``(A "b" (C))``.  Reading it back gives an equal
expression.

``Renderer`` writes output text and performs its own expansion on the way:

  symbol-macro atom       → its substitute, rendered
  function-macro call     → transformer(actual arguments), rendered
  string                  → "quoted", with \\ and " escaped
  any other list          → elements rendered, joined by one space
  any other atom          → its name

The function-macro branch hands the transformer the call's own (raw)
arguments, the same contract the expander uses.  The renderer does not
expand arguments before the call; macro calls inside the transformer's
result are rendered, and so expanded, recursively.
"""

from __future__ import annotations

import io
import logging
from typing import TextIO

from ..expressions import (
    Expression,
    List,
    Str,
    checked_expansion,
    is_function_macro_call,
    is_symbol_macro,
)
from .registry import MacroRegistry, macro_registry

logger = logging.getLogger(__name__)


def quote_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_expression(expr: Expression) -> str:
    """Readable text form of *expr*; no macro expansion."""
    if isinstance(expr, Str):
        return quote_string(expr.value)
    if isinstance(expr, List):
        return "(" + " ".join(format_expression(item) for item in expr.items) + ")"
    return expr.name


class Renderer:
    def __init__(self, registry: MacroRegistry | None = None) -> None:
        self._registry = registry or macro_registry

    def render(self, output: TextIO, expr: Expression) -> None:
        if is_symbol_macro(expr, self._registry):
            self.render(output, self._registry.lookup_symbol_macro(expr))

        elif is_function_macro_call(expr, self._registry):
            transformer = self._registry.lookup_function_macro(expr.head)
            logger.debug("Rendering call to %s", expr.head)
            self.render(output, checked_expansion(expr.head, transformer(list(expr.args))))

        elif isinstance(expr, Str):
            output.write(quote_string(expr.value))

        elif isinstance(expr, List):
            for i, item in enumerate(expr.items):
                if i:
                    output.write(" ")
                self.render(output, item)

        else:
            output.write(expr.name)

    def render_to_string(self, expr: Expression) -> str:
        buf = io.StringIO()
        self.render(buf, expr)
        return buf.getvalue()


def render(output: TextIO, expr: Expression, registry: MacroRegistry | None = None) -> None:
    Renderer(registry).render(output, expr)


def render_to_string(expr: Expression, registry: MacroRegistry | None = None) -> str:
    return Renderer(registry).render_to_string(expr)
