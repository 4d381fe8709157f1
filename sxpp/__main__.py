#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Command line wrapper.

    python -m sxpp notes.txt -o notes.out
    cat notes.txt | python -m sxpp --recursive
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import argparse
import contextlib
import logging
import sys

from sxpp.core.config import get_settings
from sxpp.core.errors import PreprocessorError
from sxpp.main import create_preprocessor, process

logger = logging.getLogger("sxpp")


# -----------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog=settings.app_name, description=__doc__)
    parser.add_argument("input", nargs="?", help="input file (default: stdin)")
    parser.add_argument("-o", "--output", help="output file (default: stdout)")
    parser.add_argument("--recursive", action="store_true", default=None,
                        help="re-expand function-macro output")
    parser.add_argument("--quiet", action="store_true",
                        help="evaluate directives but write no output")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {settings.app_version}")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    pp = create_preprocessor(recursive=args.recursive)

    try:
        # the output file is created only once the input has opened
        with _open_input(args.input, pp) as src:
            if args.quiet:
                process(src, None, pp)
            elif args.output:
                with open(args.output, "w", encoding=settings.input_encoding) as out:
                    process(src, out, pp)
            else:
                process(src, sys.stdout, pp)
    except PreprocessorError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1
    except OSError as exc:
        logger.error("%s", exc)
        return 2
    return 0


def _open_input(path, pp):
    if path:
        return open(path, encoding=pp.settings.input_encoding)
    return contextlib.nullcontext(sys.stdin)


# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
