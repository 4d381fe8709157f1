"""
MacroRegistry — central store of function-macros and symbol-macros.

Two insertion-ordered mappings, both keyed by Atom:

    function-macros:  Atom -> transformer(args: Sequence[Expression]) -> Expression
    symbol-macros:    Atom -> substitute Expression

Register a function-macro with the decorator:

    @macro_registry.function_macro("DOUBLE")
    def double(args):
        return List((args[0], args[0]))

Scoped overrides install bindings for the extent of a ``with`` block (or a
``body`` callable) and restore the previous bindings on every exit path:

    with registry.scoped_symbol_macros([(Atom("PI"), Atom("3"))]):
        ...

Lifecycle of the shared ``macro_registry`` singleton: empty at import,
filled by definition forms evaluated during a run, reset with ``clear()``.
Components accept an explicit registry and only fall back to the singleton
when none is given.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, Sequence, TypeVar

from ..expressions import Atom, Expression, as_atom

logger = logging.getLogger(__name__)


MacroTransformer = Callable[[Sequence[Expression]], Expression]
T = TypeVar("T")

_ABSENT = object()   # marks a key that had no binding before a scope


class MacroRegistry:
    def __init__(self) -> None:
        self._function_macros: dict[Atom, MacroTransformer] = {}
        self._symbol_macros: dict[Atom, Expression] = {}

    # ---------------------------------------------------------------- define

    def define_function_macro(self, name: Atom | str, fn: MacroTransformer) -> None:
        key = as_atom(name)
        self._function_macros[key] = fn
        logger.debug("Defined function-macro: %s", key)

    def define_symbol_macro(self, name: Atom | str, expr: Expression) -> None:
        key = as_atom(name)
        self._symbol_macros[key] = expr
        logger.debug("Defined symbol-macro: %s", key)

    def function_macro(self, name: Atom | str):
        """Decorator form of ``define_function_macro``."""
        def decorator(fn: MacroTransformer) -> MacroTransformer:
            self.define_function_macro(name, fn)
            return fn
        return decorator

    def undefine_function_macro(self, name: Atom | str) -> None:
        self._function_macros.pop(as_atom(name), None)

    def undefine_symbol_macro(self, name: Atom | str) -> None:
        self._symbol_macros.pop(as_atom(name), None)

    def clear(self) -> None:
        self._function_macros.clear()
        self._symbol_macros.clear()

    # ------------------------------------------------------------------ lookup

    def lookup_function_macro(self, name: Atom | str) -> MacroTransformer | None:
        return self._function_macros.get(as_atom(name))

    def lookup_symbol_macro(self, name: Atom | str) -> Expression | None:
        return self._symbol_macros.get(as_atom(name))

    # ------------------------------------------------------------------ scoping

    @contextmanager
    def scoped_function_macros(
        self, bindings: Iterable[tuple[Atom | str, MacroTransformer]]
    ) -> Iterator[None]:
        with _scoped(self._function_macros, bindings, "function"):
            yield

    @contextmanager
    def scoped_symbol_macros(
        self, bindings: Iterable[tuple[Atom | str, Expression]]
    ) -> Iterator[None]:
        with _scoped(self._symbol_macros, bindings, "symbol"):
            yield

    def with_scoped_function_macros(self, bindings, body: Callable[[], T]) -> T:
        """Run *body* with *bindings* installed as function-macros."""
        with self.scoped_function_macros(bindings):
            return body()

    def with_scoped_symbol_macros(self, bindings, body: Callable[[], T]) -> T:
        """Run *body* with *bindings* installed as symbol-macros."""
        with self.scoped_symbol_macros(bindings):
            return body()

    # ---------------------------------------------------------- introspection

    def snapshot(self) -> tuple[dict[Atom, MacroTransformer], dict[Atom, Expression]]:
        return dict(self._function_macros), dict(self._symbol_macros)

    def registered_names(self) -> list[str]:
        names = {a.name for a in self._function_macros} | {a.name for a in self._symbol_macros}
        return sorted(names)


# ---------------------------------------------------------------------------
# Snapshot / install / restore
# ---------------------------------------------------------------------------

@contextmanager
def _scoped(mapping: dict, bindings: Iterable[tuple], kind: str) -> Iterator[None]:
    saved: list[tuple[Atom, object]] = []
    try:
        for name, value in bindings:
            key = as_atom(name)
            saved.append((key, mapping.get(key, _ABSENT)))
            mapping[key] = value
        logger.debug("Entered %s-macro scope: %s", kind, [k.name for k, _ in saved])
        yield
    finally:
        # reverse order so a name bound twice ends at its original value
        for key, prior in reversed(saved):
            if prior is _ABSENT:
                mapping.pop(key, None)
            else:
                mapping[key] = prior
        logger.debug("Left %s-macro scope: %s", kind, [k.name for k, _ in saved])


# Singleton shared across the process
macro_registry = MacroRegistry()
