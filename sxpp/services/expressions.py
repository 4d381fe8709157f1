"""
Expression model
================
The three values every directive reads, expands and renders.

    Atom("DOUBLE")          — bare symbol; numbers are atoms too ("3.14")
    Str("hello")            — string literal, never equal to an Atom
    List((Atom("A"), ...))  — ordered, possibly empty

All variants are frozen dataclasses: hashable, compared structurally.
Atom equality is by canonical name; the reader decides the canonical name
(upper-cased unless case is preserved), so ``Atom("pi") != Atom("PI")``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from sxpp.core.errors import MacroExpansionError

if TYPE_CHECKING:
    from .macros.registry import MacroRegistry


@dataclass(frozen=True)
class Atom:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Str:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class List:
    items: tuple = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # accept any iterable but always store a tuple
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    @property
    def head(self) -> Expression | None:
        return self.items[0] if self.items else None

    @property
    def args(self) -> tuple:
        return self.items[1:]

    def __len__(self) -> int:
        return len(self.items)


Expression = Union[Atom, Str, List]

NIL = List()


def make_list(*items: Expression) -> List:
    return List(items)


def as_atom(name: Atom | str) -> Atom:
    return name if isinstance(name, Atom) else Atom(name)


def is_expression(value) -> bool:
    return isinstance(value, (Atom, Str, List))


def checked_expansion(head: Atom, result) -> Expression:
    """Return a transformer's *result*, refusing anything but an expression."""
    if not is_expression(result):
        raise MacroExpansionError(f"Macro {head} returned a non-expression: {result!r}")
    return result


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_function_macro_call(expr: Expression, registry: MacroRegistry) -> bool:
    """True when *expr* is a List whose head Atom names a function-macro."""
    if not isinstance(expr, List) or not expr.items:
        return False
    head = expr.items[0]
    if not isinstance(head, Atom):
        return False
    return registry.lookup_function_macro(head) is not None


def is_symbol_macro(expr: Expression, registry: MacroRegistry) -> bool:
    return isinstance(expr, Atom) and registry.lookup_symbol_macro(expr) is not None
