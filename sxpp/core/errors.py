#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Preprocessor exceptions.

Every error raised by the reader, the dispatcher or the host evaluator
derives from PreprocessorError so the command line wrapper can report
them uniformly.  Nothing here is retried: a failure aborts the directive
that raised it and the run stops.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations


# -----------------------------------------------------------------------------

class PreprocessorError(Exception):
    pass


# -----------------------------------------------------------------------------

class MalformedExpression(PreprocessorError):
    """Unbalanced parentheses, a stray ``)`` or an unterminated string."""


class UnexpectedEof(PreprocessorError):
    """Input ended after a prefix started matching or before an expression."""


class HostEvaluationError(PreprocessorError):
    """The host evaluator failed; the original exception is the ``__cause__``."""


class MacroExpansionError(PreprocessorError):
    """A macro transformer returned something that is not an expression."""


# -----------------------------------------------------------------------------
