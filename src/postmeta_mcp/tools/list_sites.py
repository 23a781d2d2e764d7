"""Tool to list indexed sites."""

from typing import Optional

from ..storage.index_store import IndexStore


def list_sites(storage_path: Optional[str] = None) -> dict:
    """
    List all indexed sites.

    Args:
        storage_path: Custom storage path (defaults to POSTMETA_INDEX_PATH or ~/.postmeta-index)

    Returns:
        Dict with list of indexed sites and their stats
    """
    store = IndexStore(storage_path)
    sites = store.list_sites()

    return {
        "count": len(sites),
        "sites": sites,
    }
