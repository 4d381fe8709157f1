"""
sxpp — s-expression prefix preprocessor.
"""

from .main import process, process_file, process_string

__all__ = ["process", "process_file", "process_string"]
