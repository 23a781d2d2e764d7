"""Helpers shared by the tool implementations."""

import os
from typing import Optional

from ..parser.reading_time import DEFAULT_WORDS_PER_MINUTE
from ..storage.index_store import IndexStore, SiteIndex


def env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('true', '1', 'yes')


def resolve_words_per_minute(words_per_minute: Optional[int] = None) -> int:
    """Explicit reading speed, else POSTMETA_WORDS_PER_MINUTE, else the default."""
    if words_per_minute is not None:
        value = words_per_minute
    else:
        raw = os.environ.get("POSTMETA_WORDS_PER_MINUTE")
        if not raw:
            return DEFAULT_WORDS_PER_MINUTE
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"POSTMETA_WORDS_PER_MINUTE must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"words_per_minute must be positive, got {value}")
    return value


def load_site(site: str, storage_path: Optional[str] = None) -> tuple[Optional[SiteIndex], Optional[dict]]:
    """Load a site index. Returns (index, error_dict)."""
    store = IndexStore(storage_path)
    resolved = store.resolve_site(site)
    if resolved is None:
        return None, {"error": f"Site not found: {site}"}
    owner, name = resolved

    index = store.load_index(owner, name)
    if not index:
        return None, {"error": f"Site not indexed: {owner}/{name}"}
    return index, None


def load_entry(
    site: str,
    entry: str,
    storage_path: Optional[str] = None,
) -> tuple[Optional[SiteIndex], Optional[dict], Optional[dict]]:
    """Load a site index and one of its entries. Returns (index, entry, error_dict)."""
    index, err = load_site(site, storage_path)
    if err:
        return None, None, err
    found = index.get_entry(entry)
    if not found:
        return index, None, {"error": f"Entry not found: {entry}"}
    return index, found, None


def build_meta(index: SiteIndex) -> dict:
    """Build standard _meta envelope from an index."""
    return {
        "index_version": index.index_version,
        "indexed_at": index.indexed_at,
        "commit_hash": index.commit_hash,
        "words_per_minute": index.words_per_minute,
    }
