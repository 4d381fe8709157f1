"""
Macro subsystem — public API.
"""

from .registry import MacroRegistry, MacroTransformer, macro_registry
from .expander import MacroExpander, expand
from .renderer import Renderer, format_expression, render, render_to_string

__all__ = [
    "MacroRegistry",
    "MacroTransformer",
    "macro_registry",
    "MacroExpander",
    "expand",
    "Renderer",
    "format_expression",
    "render",
    "render_to_string",
]
