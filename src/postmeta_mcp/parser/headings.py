"""Extract ATX headings from markdown source."""

import re
from dataclasses import dataclass

# 1-6 hashes, inline whitespace, then non-empty text up to the end of the line.
# Fenced code is not tracked, so headings inside ``` blocks also match.
HEADING_PATTERN = re.compile(r'^(#{1,6})[^\S\r\n]+(\S.*)$', re.MULTILINE)

# ASCII word characters; whitespace stays Unicode-aware
_SLUG_STRIP = re.compile(r'[^A-Za-z0-9_\s-]')
_SLUG_COLLAPSE = re.compile(r'[\s-]+')


@dataclass(frozen=True)
class Heading:
    """A heading found in markdown content."""
    depth: int
    slug: str
    text: str

    def to_dict(self) -> dict:
        return {"depth": self.depth, "slug": self.slug, "text": self.text}


def slugify(text: str) -> str:
    """
    Convert heading text to a URL-friendly anchor slug.

    Word characters are ASCII only, so accented and CJK letters are dropped
    ("Café Über" becomes "caf-ber"). Underscores count as word characters
    and are kept; only runs of whitespace or hyphens become a single hyphen.
    """
    text = text.lower()
    text = _SLUG_STRIP.sub('', text)
    text = _SLUG_COLLAPSE.sub('-', text)
    return text.strip('-')


def get_headings(content: str) -> list[Heading]:
    """
    Extract headings from markdown content.

    Returns one Heading per matching line, in source order. The list is
    flat; nesting is left to parser.hierarchy. Slugs are not deduplicated.
    """
    headings: list[Heading] = []
    for match in HEADING_PATTERN.finditer(content):
        text = match.group(2).strip()
        headings.append(Heading(
            depth=len(match.group(1)),
            slug=slugify(text),
            text=text,
        ))
    return headings
