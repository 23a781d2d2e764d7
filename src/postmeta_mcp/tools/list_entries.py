"""Tool to list the entries of an indexed site."""

from typing import Optional

from .common import build_meta, load_site


def list_entries(
    site: str,
    collection: Optional[str] = None,
    tag: Optional[str] = None,
    include_drafts: bool = True,
    storage_path: Optional[str] = None,
) -> dict:
    """
    List entries of a site, newest first.

    Args:
        site: Site identifier (owner/name or just name)
        collection: Only include entries of this collection (e.g. "blog")
        tag: Only include entries carrying this tag (case-insensitive)
        include_drafts: Whether to include entries marked as drafts
        storage_path: Custom storage path

    Returns:
        Dict with entry summaries (no headings)
    """
    index, err = load_site(site, storage_path)
    if err:
        return err

    entries = index.filter_entries(collection=collection, tag=tag, include_drafts=include_drafts)
    # Undated entries sort last
    entries = sorted(entries, key=lambda e: e.get("pub_date") or "", reverse=True)

    return {
        "site": index.site,
        "collections": index.collections,
        "count": len(entries),
        "entries": [
            {
                "id": e["id"],
                "collection": e["collection"],
                "slug": e["slug"],
                "title": e["title"],
                "pub_date": e.get("pub_date"),
                "tags": e.get("tags", []),
                "reading_time": e["reading_time"],
            }
            for e in entries
        ],
        "_meta": build_meta(index),
    }
