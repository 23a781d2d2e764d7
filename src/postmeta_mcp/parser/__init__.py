"""Markdown parsing utilities."""

from .headings import Heading, get_headings, slugify
from .reading_time import calculate_reading_time
from .content import ContentEntry, parse_entry
from .hierarchy import build_heading_tree

__all__ = [
    "Heading",
    "get_headings",
    "slugify",
    "calculate_reading_time",
    "ContentEntry",
    "parse_entry",
    "build_heading_tree",
]
