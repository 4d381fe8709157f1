"""
Expression reader
=================
Reads one s-expression at a time from a character stream.

Grammar
-------
  atom      — run of characters up to whitespace, ( ) " ; ' ` or ,
  "string"  — backslash escapes: \\" \\\\ \\n \\t, any other \\c gives c
  (a b c)   — list, arbitrary nesting
  'x        — shorthand for (quote x)
  ; ...     — comment to end of line, skipped between expressions

The reader never consumes the delimiter that ends an atom: after reading
``pi`` from ``"pi is"`` the next character on the stream is the space.

Case
----
With ``preserve_case=False`` atom text is upper-cased (``double`` reads as
``DOUBLE``).  With ``preserve_case=True`` it is kept verbatim.
"""

from __future__ import annotations

import io
from typing import TextIO

from sxpp.core.errors import MalformedExpression, UnexpectedEof
from .expressions import Atom, Expression, List, Str

_DELIMITERS = frozenset('()";\'`,')
_QUOTE = object()   # pending ' on the read stack
_ESCAPES = {"n": "\n", "t": "\t"}


class CharStream:
    """
    A text stream with unlimited push-back.

    ``read_char()`` returns ``""`` at end of input, matching ``TextIO.read``.
    Pushed-back characters are returned last-in first-out.
    """

    def __init__(self, source: TextIO) -> None:
        self._source = source
        self._pushback: list[str] = []

    def read_char(self) -> str:
        if self._pushback:
            return self._pushback.pop()
        return self._source.read(1)

    def unread_char(self, ch: str) -> None:
        if ch:
            self._pushback.append(ch)

    def peek_char(self) -> str:
        ch = self.read_char()
        self.unread_char(ch)
        return ch


def _as_char_stream(stream) -> CharStream:
    return stream if isinstance(stream, CharStream) else CharStream(stream)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_expression(stream: CharStream | TextIO, preserve_case: bool = False) -> Expression:
    """
    Read exactly one expression from *stream*.

    Raises
    ------
    UnexpectedEof
        No expression starts before the end of input.
    MalformedExpression
        Stray ``)``, unterminated string, or input ends inside a list.
    """
    stream = _as_char_stream(stream)
    ch = _skip_blank(stream)
    if not ch:
        raise UnexpectedEof("End of input while reading an expression")
    return _read_from(stream, ch, preserve_case)


def read_from_string(text: str, preserve_case: bool = False) -> Expression:
    return read_expression(CharStream(io.StringIO(text)), preserve_case)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _skip_blank(stream: CharStream) -> str:
    """Skip whitespace and comments; return the first significant char or ''."""
    while True:
        ch = stream.read_char()
        if not ch:
            return ""
        if ch.isspace():
            continue
        if ch == ";":
            while ch and ch != "\n":
                ch = stream.read_char()
            continue
        return ch


def _read_from(stream: CharStream, ch: str, preserve_case: bool) -> Expression:
    """
    Read the expression starting at *ch* without recursing per nesting level.

    *stack* holds the item lists of the open parentheses and a ``_QUOTE``
    marker for every pending ``'``.
    """
    stack: list = []
    while True:
        expr = None
        if ch == "(":
            stack.append([])
        elif ch == ")":
            if not stack or stack[-1] is _QUOTE:
                raise MalformedExpression("Unexpected ')'")
            expr = List(stack.pop())
        elif ch == '"':
            expr = _read_string(stream)
        elif ch == "'":
            stack.append(_QUOTE)
        else:
            expr = _read_atom(stream, ch, preserve_case)

        if expr is not None:
            while stack and stack[-1] is _QUOTE:
                stack.pop()
                expr = List((Atom("quote" if preserve_case else "QUOTE"), expr))
            if not stack:
                return expr
            stack[-1].append(expr)

        ch = _skip_blank(stream)
        if not ch:
            if stack[-1] is _QUOTE:
                raise MalformedExpression("Nothing follows quote")
            raise MalformedExpression("Unbalanced list: end of input before ')'")


def _read_string(stream: CharStream) -> Str:
    chars: list[str] = []
    while True:
        ch = stream.read_char()
        if not ch:
            raise MalformedExpression("Unterminated string literal")
        if ch == '"':
            return Str("".join(chars))
        if ch == "\\":
            esc = stream.read_char()
            if not esc:
                raise MalformedExpression("Unterminated string literal")
            chars.append(_ESCAPES.get(esc, esc))
        else:
            chars.append(ch)


def _read_atom(stream: CharStream, first: str, preserve_case: bool) -> Atom:
    chars = [first]
    while True:
        ch = stream.read_char()
        if not ch:
            break
        if ch.isspace() or ch in _DELIMITERS:
            stream.unread_char(ch)   # leave the delimiter for the caller
            break
        chars.append(ch)
    text = "".join(chars)
    return Atom(text if preserve_case else text.upper())
