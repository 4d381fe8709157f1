#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
sxpp — stream driver
====================
Entry points for embedding the preprocessor:

    process(sys.stdin, sys.stdout)
    process_file("notes.txt", sys.stdout)
    text = process_string("pi is #:pi")
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TextIO

from sxpp.core.config import get_settings
from sxpp.services.dispatcher import Preprocessor

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

def create_preprocessor(**kwargs) -> Preprocessor:
    """Preprocessor built from the current settings; *kwargs* override."""
    kwargs.setdefault("settings", get_settings())
    return Preprocessor(**kwargs)


# -----------------------------------------------------------------------------

def process(
    input_stream: TextIO,
    output_stream: TextIO | None,
    preprocessor: Preprocessor | None = None,
) -> None:
    """Run the whole of *input_stream* through the preprocessor.

    Pass ``output_stream=None`` to evaluate directives without writing text.
    """
    pp = preprocessor or create_preprocessor()
    pp.process(input_stream, output_stream)


# -----------------------------------------------------------------------------

def process_file(
    path: str | Path,
    output_stream: TextIO | None,
    preprocessor: Preprocessor | None = None,
    encoding: str | None = None,
) -> None:
    """Process the file at *path*.

    The file is decoded with *encoding*, or else with the preprocessor's
    configured ``input_encoding``.
    """
    pp = preprocessor or create_preprocessor()
    encoding = encoding or pp.settings.input_encoding
    logger.debug("Processing %s (%s)", path, encoding)
    with open(path, encoding=encoding) as fh:
        process(fh, output_stream, pp)


# -----------------------------------------------------------------------------

def process_string(text: str, preprocessor: Preprocessor | None = None) -> str:
    out = io.StringIO()
    with io.StringIO(text) as src:
        process(src, out, preprocessor)
    return out.getvalue()


# -----------------------------------------------------------------------------
