"""Document-level API for parsing XML into comparable trees."""

from .parser import Document, parse, parse_file, parse_string

__all__ = [
    "Document",
    "parse",
    "parse_file",
    "parse_string",
]
