"""Tools to get an entry's table of contents."""

from typing import Optional

from ..parser.headings import Heading
from ..parser.hierarchy import build_heading_tree
from .common import build_meta, load_entry


def _headings_of(entry: dict, max_depth: Optional[int] = None) -> list[Heading]:
    headings = [Heading(**h) for h in entry.get("headings", [])]
    if max_depth is not None:
        headings = [h for h in headings if h.depth <= max_depth]
    return headings


def get_toc(
    site: str,
    entry: str,
    max_depth: Optional[int] = None,
    storage_path: Optional[str] = None,
) -> dict:
    """
    Get the flat heading list of an entry.

    Args:
        site: Site identifier (owner/name or just name)
        entry: Entry slug, "collection/slug" or id
        max_depth: Only include headings with depth <= this value
        storage_path: Custom storage path

    Returns:
        Dict with headings in document order
    """
    index, found, err = load_entry(site, entry, storage_path)
    if err:
        return err

    headings = _headings_of(found, max_depth)
    return {
        "site": index.site,
        "entry": found["slug"],
        "title": found["title"],
        "reading_time": found["reading_time"],
        "heading_count": len(headings),
        "headings": [h.to_dict() for h in headings],
        "_meta": build_meta(index),
    }


def get_toc_tree(
    site: str,
    entry: str,
    max_depth: Optional[int] = None,
    storage_path: Optional[str] = None,
) -> dict:
    """
    Get an entry's headings as a nested tree.

    Each heading is nested under the closest preceding heading of a
    smaller depth.
    """
    index, found, err = load_entry(site, entry, storage_path)
    if err:
        return err

    tree = build_heading_tree(_headings_of(found, max_depth))
    return {
        "site": index.site,
        "entry": found["slug"],
        "title": found["title"],
        "tree": [node.to_dict() for node in tree],
        "_meta": build_meta(index),
    }
