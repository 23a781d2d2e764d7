"""Parse content-collection entries (markdown/MDX with front matter)."""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import PurePosixPath
from typing import Optional

import yaml

from .headings import Heading, get_headings, slugify
from .reading_time import DEFAULT_WORDS_PER_MINUTE, calculate_reading_time, count_words

logger = logging.getLogger(__name__)

CONTENT_EXTENSIONS = ('.md', '.mdx')


@dataclass
class ContentEntry:
    """Metadata for one entry of a content collection."""
    id: str
    collection: str
    slug: str
    file: str
    title: str
    description: str = ""
    pub_date: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    draft: bool = False
    headings: list[Heading] = field(default_factory=list)
    reading_time: str = "1 min read"
    word_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collection": self.collection,
            "slug": self.slug,
            "file": self.file,
            "title": self.title,
            "description": self.description,
            "pub_date": self.pub_date,
            "tags": self.tags,
            "draft": self.draft,
            "headings": [h.to_dict() for h in self.headings],
            "reading_time": self.reading_time,
            "word_count": self.word_count,
        }


def split_front_matter(content: str) -> tuple[str, dict]:
    """
    Split YAML front matter from content.

    Returns:
        Tuple of (content without front matter, parsed front matter dict)
    """
    if not content.startswith('---'):
        return content, {}

    # Find closing ---
    end_match = re.search(r'\n---[ \t]*(?:\n|$)', content[3:])
    if not end_match:
        return content, {}

    block = content[3:3 + end_match.start()]
    rest = content[3 + end_match.end():]

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.warning("Malformed front matter, ignoring it: %s", e)
        return rest, {}

    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Front matter is not a mapping, ignoring it")
        return rest, {}
    return rest, data


def preprocess_mdx(content: str) -> str:
    """
    Reduce MDX content to plain markdown.

    Strips:
    - import/export statements
    - JSX component tags (keeping the text between opening and closing tags)
    """
    content = re.sub(r'^import\s+.*$', '', content, flags=re.MULTILINE)
    content = re.sub(r'^export\s+(default\s+)?.*$', '', content, flags=re.MULTILINE)

    # Self-closing: <Component prop="value" />
    content = re.sub(r'<[A-Z][a-zA-Z]*\b[^>]*/>', '', content)
    # Opening and closing tags, children preserved
    content = re.sub(r'<[A-Z][a-zA-Z]*\b[^>]*>', '', content)
    content = re.sub(r'</[A-Z][a-zA-Z]*>', '', content)

    return content


def entry_slug(entry_id: str) -> str:
    """Derive an entry slug from its collection-relative path."""
    parts = list(PurePosixPath(entry_id).with_suffix('').parts)
    if len(parts) > 1 and parts[-1] == 'index':
        parts.pop()
    return '/'.join(slugify(part) for part in parts)


def _as_date_string(value) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _as_tags(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(',') if t.strip()]
    if isinstance(value, (list, tuple)):
        return [str(t) for t in value]
    return [str(value)]


def _as_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    return bool(value)


def parse_entry(
    content: str,
    file: str,
    collection: str,
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
) -> ContentEntry:
    """
    Parse a content file into a ContentEntry.

    Args:
        content: Raw file content, front matter included
        file: Path of the file relative to the content root (e.g. "blog/post.mdx")
        collection: Name of the collection the file belongs to
        words_per_minute: Reading speed used for the reading-time estimate

    Returns:
        The parsed ContentEntry
    """
    content = content.replace('\r\n', '\n')
    body, data = split_front_matter(content)
    if file.lower().endswith('.mdx'):
        body = preprocess_mdx(body)

    prefix = f"{collection}/"
    entry_id = file[len(prefix):] if file.startswith(prefix) else file

    headings = get_headings(body)
    slug = str(data.get('slug') or entry_slug(entry_id))

    title = data.get('title')
    if not title:
        title = next((h.text for h in headings if h.depth == 1), slug)

    return ContentEntry(
        id=entry_id,
        collection=collection,
        slug=slug,
        file=file,
        title=str(title),
        description=str(data.get('description') or ''),
        pub_date=_as_date_string(data.get('pubDate', data.get('date'))),
        tags=_as_tags(data.get('tags')),
        draft=_as_flag(data.get('draft', False)),
        headings=headings,
        reading_time=calculate_reading_time(body, words_per_minute),
        word_count=count_words(body),
    )
