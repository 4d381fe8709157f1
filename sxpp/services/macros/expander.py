"""
MacroExpander
=============
The recursive tree rewrite.

For each node:

  (F a b ...)  with F a function-macro
      → expand a, b, ... left to right, call F's transformer with the
        results; in recursive mode expand the transformer's output again.
  S            with S a symbol-macro
      → S's substitute, one step only.
  (x y ...)    any other list
      → a new list with every element expanded.
  anything else
      → unchanged.

A list whose head is not registered is simply not a macro call.
Termination is up to the macro author: a transformer that keeps
producing calls to itself loops forever in recursive mode.
"""

from __future__ import annotations

import logging

from ..expressions import (
    Atom,
    Expression,
    List,
    checked_expansion,
    is_function_macro_call,
    is_symbol_macro,
)
from .registry import MacroRegistry, macro_registry

logger = logging.getLogger(__name__)


class MacroExpander:
    """
    Expand function-macros and symbol-macros in an expression tree.

    Usage::

        expander = MacroExpander(registry)
        result = expander.expand(expr, recursive=True)
    """

    def __init__(self, registry: MacroRegistry | None = None) -> None:
        self._registry = registry or macro_registry

    @property
    def registry(self) -> MacroRegistry:
        return self._registry

    def expand(self, expr: Expression, recursive: bool = False) -> Expression:
        if is_function_macro_call(expr, self._registry):
            return self._expand_call(expr, recursive)

        if is_symbol_macro(expr, self._registry):
            return self._registry.lookup_symbol_macro(expr)

        if isinstance(expr, List):
            return List(self.expand(item, recursive) for item in expr.items)

        return expr

    def expand_1(self, expr: Expression) -> Expression:
        """One non-recursive expansion step."""
        return self.expand(expr, recursive=False)

    def _expand_call(self, expr: List, recursive: bool) -> Expression:
        head: Atom = expr.head
        transformer = self._registry.lookup_function_macro(head)
        args = [self.expand(arg, recursive) for arg in expr.args]

        logger.debug("Expanding %s with %d argument(s)", head, len(args))
        new_expr = checked_expansion(head, transformer(args))

        if recursive:
            return self.expand(new_expr, recursive)
        return new_expr


def expand(
    expr: Expression,
    recursive: bool = False,
    registry: MacroRegistry | None = None,
) -> Expression:
    return MacroExpander(registry).expand(expr, recursive)
