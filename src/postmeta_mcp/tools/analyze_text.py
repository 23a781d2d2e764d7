"""Tools that run heading extraction and reading time on raw text."""

from typing import Optional

from ..parser.headings import get_headings
from ..parser.reading_time import calculate_reading_time, count_words
from .common import resolve_words_per_minute


def extract_headings(content: str) -> dict:
    """
    Extract headings from raw markdown text.

    Returns:
        Dict with the flat, ordered heading list
    """
    headings = get_headings(content)
    return {
        "count": len(headings),
        "headings": [h.to_dict() for h in headings],
    }


def estimate_reading_time(content: str, words_per_minute: Optional[int] = None) -> dict:
    """
    Estimate reading time for raw markdown text.

    Args:
        content: Markdown text
        words_per_minute: Reading speed (defaults to POSTMETA_WORDS_PER_MINUTE or 200)

    Returns:
        Dict with the reading-time string and the word count it was based on
    """
    try:
        wpm = resolve_words_per_minute(words_per_minute)
        reading_time = calculate_reading_time(content, wpm)
    except ValueError as e:
        return {"error": str(e)}

    return {
        "reading_time": reading_time,
        "word_count": count_words(content),
        "words_per_minute": wpm,
    }
