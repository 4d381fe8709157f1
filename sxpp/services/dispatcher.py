"""
Prefix dispatcher
=================
The main scanning loop.  Copies input to output one character at a time;
when the text at the read head spells one of the configured prefixes, the
prefix's handler reads one expression and writes (or suppresses) its
result.

Prefixes are tried in table order.  A candidate that fails part way gives
back every character it consumed, so the next candidate (or the verbatim
copy) sees the input unchanged:

    prefixes "#:" and "#c:", input "#c:(foo)"
        "#:"   '#' ok, 'c' != ':'  → push back 'c'
        "#c:"  '#' ok, 'c' ok, ':' ok → handler

Handler kinds
-------------
  print_expanded     write the printed form of the expanded expression
  evaluate_silently  evaluate for side effects, write nothing
  render_evaluated   evaluate, then render the result
  render_expanded    expand, then render the result
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import partial
from typing import Callable, Iterable, TextIO, Union

from sxpp.core.config import Settings, get_settings
from sxpp.core.errors import (
    HostEvaluationError,
    MalformedExpression,
    PreprocessorError,
    UnexpectedEof,
)
from sxpp.schemas import PrefixRule
from .evaluator import Evaluator
from .expressions import Expression
from .macros.expander import MacroExpander
from .macros.registry import MacroRegistry, macro_registry
from .macros.renderer import Renderer, format_expression
from .reader import CharStream, read_expression

logger = logging.getLogger(__name__)


# handler(input, output_or_none, matched_prefix)
Handler = Callable[[CharStream, Union[TextIO, None], str], None]
PrefixEntry = tuple[str, Handler]


class Preprocessor:
    """
    Bundle of prefix table, macro registry and host evaluator.

    Parameters
    ----------
    prefixes : iterable, optional
        ``PrefixRule`` objects or ready-made ``(prefix, handler)`` pairs.
        Defaults to the configured table.
    registry : MacroRegistry, optional
        Defaults to the shared ``macro_registry``.
    evaluator : object, optional
        Anything with ``evaluate(expr) -> Expression``.  Defaults to the
        built-in ``Evaluator`` bound to *registry*.
    recursive : bool, optional
        Re-expand function-macro output.  Defaults to the configured value.
    """

    def __init__(
        self,
        prefixes: Iterable[PrefixRule | PrefixEntry] | None = None,
        registry: MacroRegistry | None = None,
        evaluator=None,
        recursive: bool | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.settings = settings
        self.registry = registry or macro_registry
        self.evaluator = evaluator or Evaluator(self.registry)
        self.expander = MacroExpander(self.registry)
        self.renderer = Renderer(self.registry)
        self.recursive = settings.recursive_expansion if recursive is None else recursive

        rules = settings.prefixes if prefixes is None else prefixes
        self.prefix_table: list[PrefixEntry] = [self._entry(rule) for rule in rules]

    # ----------------------------------------------------------------- public

    def process(self, stream: CharStream | TextIO, output: TextIO | None) -> None:
        """Copy *stream* to *output*, handling every directive on the way."""
        if not isinstance(stream, CharStream):
            stream = CharStream(stream)
        while True:
            ch = stream.read_char()
            if not ch:
                break
            self.maybe_dispatch(stream, output, ch)

    def maybe_dispatch(self, stream: CharStream, output: TextIO | None, lookahead: str) -> bool:
        """
        Try every prefix against *lookahead* and the characters after it.

        Returns True when a handler ran.  Otherwise *lookahead* is written to
        *output* and False is returned.  Running out of input part way
        through a prefix, with no other prefix matching, raises
        UnexpectedEof.
        """
        hit_eof = None
        for prefix, handler in self.prefix_table:
            try:
                matched = _match_prefix(stream, prefix, lookahead)
            except UnexpectedEof as exc:
                hit_eof = exc
                continue
            if matched:
                logger.debug("Dispatching prefix %r", prefix)
                handler(stream, output, prefix)
                return True

        if hit_eof is not None:
            raise hit_eof
        if output is not None:
            output.write(lookahead)
        return False

    # --------------------------------------------------------------- handlers

    def print_expanded(self, stream, output, prefix, preserve_case=False) -> None:
        expr = read_expression(stream, preserve_case)
        with _nesting_guard():
            text = format_expression(self.expander.expand(expr, self.recursive))
        if output is not None:
            output.write(text)

    def evaluate_silently(self, stream, output, prefix, preserve_case=False) -> None:
        expr = read_expression(stream, preserve_case)
        self.evaluate(expr)

    def render_evaluated(self, stream, output, prefix, preserve_case=True) -> None:
        expr = read_expression(stream, preserve_case)
        result = self.evaluate(expr)
        if output is not None:
            with _nesting_guard():
                self.renderer.render(output, result)

    def render_expanded(self, stream, output, prefix, preserve_case=True) -> None:
        expr = read_expression(stream, preserve_case)
        with _nesting_guard():
            expanded = self.expander.expand(expr, self.recursive)
            if output is not None:
                self.renderer.render(output, expanded)

    def evaluate(self, expr: Expression) -> Expression:
        """Call the host evaluator; foreign failures become HostEvaluationError."""
        try:
            return self.evaluator.evaluate(expr)
        except PreprocessorError:
            raise
        except RecursionError as exc:
            raise MalformedExpression("Expression nesting too deep") from exc
        except Exception as exc:
            raise HostEvaluationError(
                f"Evaluating {format_expression(expr)} failed: {exc}"
            ) from exc

    # ----------------------------------------------------------------- private

    def _entry(self, rule: PrefixRule | PrefixEntry) -> PrefixEntry:
        if not isinstance(rule, PrefixRule):
            prefix, handler = rule
            return prefix, handler
        method = getattr(self, rule.handler)
        return rule.prefix, partial(method, preserve_case=rule.reads_preserving_case)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _match_prefix(stream: CharStream, prefix: str, lookahead: str) -> bool:
    """
    Match *prefix* against *lookahead* plus following characters.

    On mismatch the consumed characters are pushed back and False returned.
    """
    if prefix[0] != lookahead:
        return False

    consumed: list[str] = []
    for expected in prefix[1:]:
        ch = stream.read_char()
        if not ch:
            _push_back(stream, consumed)
            raise UnexpectedEof(f"End of input while matching prefix {prefix!r}")
        consumed.append(ch)
        if ch != expected:
            _push_back(stream, consumed)
            return False
    return True


def _push_back(stream: CharStream, consumed: list[str]) -> None:
    for ch in reversed(consumed):
        stream.unread_char(ch)


@contextmanager
def _nesting_guard():
    """Report Python's recursion limit as a malformed (too deep) expression."""
    try:
        yield
    except RecursionError as exc:
        raise MalformedExpression("Expression nesting too deep") from exc
