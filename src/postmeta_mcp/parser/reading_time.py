"""Estimate reading time for markdown prose."""

import math
import re

DEFAULT_WORDS_PER_MINUTE = 200

# Applied in order; each step sees the output of the previous one.
_MARKUP_PATTERNS = [
    (re.compile(r'```[\s\S]*?```'), ''),          # fenced code blocks
    (re.compile(r'`[^`]*`'), ''),                 # inline code
    (re.compile(r'\[([^\]]*)\]\([^)]*\)'), r'\1'),  # links -> label
    (re.compile(r'!\[[^\]]*\]\([^)]*\)'), ''),    # images
    (re.compile(r'#'), ''),                       # heading markers
    (re.compile(r'\*\*|\*|__|_'), ''),            # emphasis markers
    (re.compile(r'>\s?'), ''),                    # blockquote markers
]


def strip_markdown(content: str) -> str:
    """Remove code, link/image syntax and inline markup from markdown text."""
    for pattern, replacement in _MARKUP_PATTERNS:
        content = pattern.sub(replacement, content)
    return content


def count_words(content: str) -> int:
    """
    Count prose words in markdown content.

    Empty or whitespace-only text counts as one word, matching a plain
    whitespace split of an empty string.
    """
    return len(re.split(r'\s+', strip_markdown(content).strip()))


def calculate_reading_time(content: str, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE) -> str:
    """
    Estimate how long content takes to read.

    Args:
        content: Markdown text
        words_per_minute: Reading speed, must be positive

    Returns:
        A string like "3 min read" (never less than 1 minute)

    Raises:
        ValueError: If words_per_minute is not positive
    """
    if words_per_minute <= 0:
        raise ValueError(f"words_per_minute must be positive, got {words_per_minute}")

    minutes = math.ceil(count_words(content) / words_per_minute)
    return f"{max(1, minutes)} min read"
