"""Tool to get the metadata of a single entry."""

from typing import Optional

from .common import build_meta, load_entry


def get_entry(
    site: str,
    entry: str,
    storage_path: Optional[str] = None,
) -> dict:
    """
    Get the full metadata of an entry.

    Args:
        site: Site identifier (owner/name or just name)
        entry: Entry slug, "collection/slug" or id (e.g. "my-post.mdx")
        storage_path: Custom storage path

    Returns:
        Dict with the entry's front-matter fields, headings and reading time
    """
    index, found, err = load_entry(site, entry, storage_path)
    if err:
        return err

    return {
        **found,
        "site": index.site,
        "_meta": build_meta(index),
    }
