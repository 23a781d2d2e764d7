"""Index storage and retrieval."""

import json
import logging
import os
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..parser.content import ContentEntry
from ..parser.reading_time import DEFAULT_WORDS_PER_MINUTE

logger = logging.getLogger(__name__)

# Increment this when the index schema changes in a backward-incompatible way.
# Old caches with a lower version will be discarded and re-indexed.
CURRENT_INDEX_VERSION = 1


@dataclass
class SiteIndex:
    """Index for a site's content collections."""
    site: str
    owner: str
    name: str
    indexed_at: str
    content_files: list[str]
    entries: list[dict]
    index_version: int = CURRENT_INDEX_VERSION
    commit_hash: str = ""
    file_hashes: dict[str, str] = field(default_factory=dict)
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE

    @property
    def collections(self) -> list[str]:
        return sorted({e["collection"] for e in self.entries})

    def get_entry(self, ref: str) -> Optional[dict]:
        """Get an entry by slug, "collection/slug" or id."""
        for entry in self.entries:
            if ref in (entry["slug"], entry["id"], entry["file"]):
                return entry
            if ref == f"{entry['collection']}/{entry['slug']}":
                return entry
        return None

    def filter_entries(
        self,
        collection: Optional[str] = None,
        tag: Optional[str] = None,
        include_drafts: bool = True,
    ) -> list[dict]:
        """Filter entries by collection, tag and draft status."""
        result = self.entries
        if collection:
            result = [e for e in result if e["collection"] == collection]
        if tag:
            tag_lower = tag.lower()
            result = [e for e in result if tag_lower in (t.lower() for t in e.get("tags", []))]
        if not include_drafts:
            result = [e for e in result if not e.get("draft")]
        return result


def default_storage_path() -> Path:
    """Storage directory from POSTMETA_INDEX_PATH, or ~/.postmeta-index."""
    env_path = os.environ.get("POSTMETA_INDEX_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".postmeta-index"


class IndexStore:
    """Manages storage and retrieval of site indexes."""

    def __init__(self, base_path: Optional[str] = None):
        if base_path:
            self.base_path = Path(base_path)
        else:
            self.base_path = default_storage_path()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _site_key(self, owner: str, name: str) -> str:
        """Generate storage key for a site."""
        return f"{owner}-{name}"

    def _index_path(self, owner: str, name: str) -> Path:
        """Get path to index JSON file."""
        return self.base_path / f"{self._site_key(owner, name)}.json"

    def save_index(
        self,
        owner: str,
        name: str,
        content_files: list[str],
        entries: list[ContentEntry],
        commit_hash: str = "",
        file_hashes: Optional[dict[str, str]] = None,
        words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
    ) -> SiteIndex:
        """
        Save a site index.

        Args:
            owner: Site owner ("local" for local directories)
            name: Site name
            content_files: Content file paths relative to the content root
            entries: Parsed content entries
            commit_hash: Git commit SHA at time of indexing
            file_hashes: Dict mapping file paths to content hashes
            words_per_minute: Reading speed the entries were computed with

        Returns:
            The saved SiteIndex
        """
        index = SiteIndex(
            site=f"{owner}/{name}",
            owner=owner,
            name=name,
            indexed_at=datetime.now(tz=None).isoformat(),
            content_files=content_files,
            entries=[e.to_dict() for e in entries],
            index_version=CURRENT_INDEX_VERSION,
            commit_hash=commit_hash,
            file_hashes=file_hashes or {},
            words_per_minute=words_per_minute,
        )

        index_path = self._index_path(owner, name)
        with open(index_path, "w", encoding="utf-8") as f:
            json.dump(asdict(index), f, indent=2)

        logger.info("Saved index for %s (%d entries)", index.site, len(index.entries))
        return index

    def load_index(self, owner: str, name: str) -> Optional[SiteIndex]:
        """Load a site index if it exists. Returns None for outdated indexes."""
        index_path = self._index_path(owner, name)
        if not index_path.exists():
            return None

        with open(index_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        stored_version = data.get("index_version", 0)
        if stored_version < CURRENT_INDEX_VERSION:
            logger.info("Discarding outdated index %s (version %s)", index_path, stored_version)
            return None

        data.setdefault("commit_hash", "")
        data.setdefault("file_hashes", {})
        data.setdefault("words_per_minute", DEFAULT_WORDS_PER_MINUTE)

        return SiteIndex(**data)

    def list_sites(self) -> list[dict]:
        """List all indexed sites."""
        sites = []
        for index_file in sorted(self.base_path.glob("*.json")):
            try:
                with open(index_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                sites.append({
                    "site": data["site"],
                    "indexed_at": data["indexed_at"],
                    "entry_count": len(data["entries"]),
                    "collections": sorted({e["collection"] for e in data["entries"]}),
                    "index_version": data.get("index_version", 0),
                    "commit_hash": data.get("commit_hash", ""),
                })
            except (json.JSONDecodeError, KeyError):
                logger.warning("Skipping unreadable index file: %s", index_file)
                continue
        return sites

    def resolve_site(self, site: str) -> Optional[tuple[str, str]]:
        """Resolve "owner/name" or a bare name to (owner, name)."""
        if "/" in site:
            owner, name = site.split("/", 1)
            return owner, name
        matching = [s for s in self.list_sites() if s["site"].endswith(f"/{site}")]
        if not matching:
            return None
        owner, name = matching[0]["site"].split("/", 1)
        return owner, name

    def delete_index(self, owner: str, name: str) -> bool:
        """Delete a site index."""
        index_path = self._index_path(owner, name)
        if index_path.exists():
            index_path.unlink()
            return True
        return False
