"""Tool to index a local site's content collections."""

import hashlib
import logging
import subprocess
from pathlib import Path
from typing import Optional

import pathspec

from ..parser.content import CONTENT_EXTENSIONS, ContentEntry, parse_entry
from ..storage.index_store import IndexStore
from .common import resolve_words_per_minute

logger = logging.getLogger(__name__)

# Where an Astro site keeps its content collections
CONTENT_SUBDIR = Path('src') / 'content'


def find_content_root(base_path: Path) -> Path:
    """Return <site>/src/content when present, else the path itself."""
    candidate = base_path / CONTENT_SUBDIR
    if candidate.is_dir():
        return candidate
    return base_path


def validate_path_traversal(resolved_path: Path, base_path: Path) -> bool:
    """Check that a resolved path is within the base directory."""
    try:
        resolved_path.relative_to(base_path)
        return True
    except ValueError:
        return False


def _load_ignore_spec(base_path: Path, extra_patterns: Optional[list[str]] = None) -> Optional[pathspec.GitIgnoreSpec]:
    """Build a gitignore-style spec from .gitignore plus extra patterns."""
    lines: list[str] = []
    gitignore_path = base_path / '.gitignore'
    if gitignore_path.exists():
        try:
            lines.extend(gitignore_path.read_text(encoding='utf-8').splitlines())
        except OSError as e:
            logger.warning("Could not read %s: %s", gitignore_path, e)
    if extra_patterns:
        lines.extend(extra_patterns)
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _compute_file_hash(file_path: Path) -> str:
    """Compute SHA256 hash of a file's content."""
    h = hashlib.sha256()
    try:
        with open(file_path, 'rb') as f:
            for chunk in iter(lambda: f.read(8192), b''):
                h.update(chunk)
    except OSError:
        return ''
    return h.hexdigest()


def _get_local_commit_hash(base_path: Path) -> str:
    """Try to get git HEAD commit hash for a local directory."""
    try:
        result = subprocess.run(
            ['git', 'rev-parse', 'HEAD'],
            cwd=str(base_path),
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("No git commit for %s: %s", base_path, e)
    return ''


def is_content_path(rel_path: str, include_hidden: bool = False) -> bool:
    """
    Check whether a content-root-relative path is a collection entry.

    Entries live inside a collection directory. Names starting with "_"
    are excluded, as are hidden paths unless include_hidden is set.
    """
    parts = Path(rel_path).parts
    if len(parts) < 2:
        return False
    if not rel_path.lower().endswith(CONTENT_EXTENSIONS):
        return False
    for part in parts:
        if part.startswith('_'):
            return False
        if part.startswith('.') and not include_hidden:
            return False
    return True


def discover_content_files(
    base_path: str,
    max_depth: int = 5,
    include_hidden: bool = False,
    follow_symlinks: bool = False,
    extra_ignore_patterns: Optional[list[str]] = None,
) -> list[str]:
    """
    Discover all content-collection files of a local site.

    Args:
        base_path: Site root (or content root) to crawl
        max_depth: Maximum directory depth below the content root
        include_hidden: Whether to include hidden directories (starting with .)
        follow_symlinks: Whether to follow symbolic links (default False for safety)
        extra_ignore_patterns: Additional gitignore-style patterns to exclude

    Returns:
        Sorted list of paths relative to the content root ("blog/post.mdx")
    """
    base = Path(base_path).resolve()
    if not base.exists():
        raise ValueError(f"Path does not exist: {base_path}")
    if not base.is_dir():
        raise ValueError(f"Path is not a directory: {base_path}")

    content_root = find_content_root(base)
    ignore_spec = _load_ignore_spec(base, extra_ignore_patterns)
    content_files: list[str] = []

    def is_ignored(item: Path, is_dir: bool = False) -> bool:
        if ignore_spec is None:
            return False
        rel = item.relative_to(base).as_posix()
        return ignore_spec.match_file(rel + '/' if is_dir else rel)

    def crawl_directory(current_path: Path, current_depth: int) -> None:
        if current_depth > max_depth:
            return

        try:
            items = sorted(current_path.iterdir())
        except OSError as e:
            logger.warning("Cannot list %s: %s", current_path, e)
            return

        for item in items:
            resolved = item.resolve()
            if item.is_symlink():
                if not follow_symlinks:
                    logger.debug("Skipping symlink: %s", item)
                    continue
                if not validate_path_traversal(resolved, base):
                    logger.warning("Symlink escapes base directory, skipping: %s -> %s", item, resolved)
                    continue

            rel_path = item.relative_to(content_root).as_posix()
            if item.is_dir():
                if item.name.startswith('_'):
                    continue
                if item.name.startswith('.') and not include_hidden:
                    continue
                if is_ignored(item, is_dir=True):
                    logger.debug("Skipping ignored directory: %s", rel_path)
                    continue
                crawl_directory(item, current_depth + 1)
            elif item.is_file() and is_content_path(rel_path, include_hidden):
                if is_ignored(item):
                    logger.debug("Skipping ignored file: %s", rel_path)
                    continue
                content_files.append(rel_path)

    crawl_directory(content_root, 0)

    content_files.sort()
    return content_files


def parse_local_site_name(base_path: str) -> str:
    """Generate a site identifier from a local path."""
    return Path(base_path).resolve().name


def parse_content_files(
    files: dict[str, str],
    words_per_minute: int,
    include_drafts: bool = False,
) -> tuple[list[ContentEntry], list[str]]:
    """
    Parse raw content files into entries.

    Args:
        files: Dict mapping content-root-relative paths to raw content
        words_per_minute: Reading speed for reading-time estimates
        include_drafts: Whether to keep entries marked draft: true

    Returns:
        Tuple of (entries, skipped draft file paths)
    """
    entries: list[ContentEntry] = []
    drafts: list[str] = []
    for file_path, content in files.items():
        collection = file_path.split('/', 1)[0]
        entry = parse_entry(content, file_path, collection, words_per_minute)
        if entry.draft and not include_drafts:
            logger.info("Skipping draft: %s", file_path)
            drafts.append(file_path)
            continue
        entries.append(entry)
    return entries, drafts


async def index_local(
    path: str,
    storage_path: Optional[str] = None,
    words_per_minute: Optional[int] = None,
    include_drafts: bool = False,
    max_depth: int = 5,
    include_hidden: bool = False,
    follow_symlinks: bool = False,
    extra_ignore_patterns: Optional[list[str]] = None,
) -> dict:
    """
    Index a local site's content collections.

    Args:
        path: Path to the site root (or its content directory)
        storage_path: Custom storage path (defaults to POSTMETA_INDEX_PATH or ~/.postmeta-index)
        words_per_minute: Reading speed (defaults to POSTMETA_WORDS_PER_MINUTE or 200)
        include_drafts: Whether to index entries marked draft: true
        max_depth: Maximum directory depth to crawl
        include_hidden: Whether to include hidden directories
        follow_symlinks: Whether to follow symbolic links (default False)
        extra_ignore_patterns: Additional gitignore-style patterns to exclude

    Returns:
        Dict with indexing statistics
    """
    base_path = Path(path).resolve()

    try:
        wpm = resolve_words_per_minute(words_per_minute)
        content_files = discover_content_files(
            str(base_path),
            max_depth=max_depth,
            include_hidden=include_hidden,
            follow_symlinks=follow_symlinks,
            extra_ignore_patterns=extra_ignore_patterns,
        )
    except ValueError as e:
        return {
            "success": False,
            "error": str(e),
            "path": str(base_path),
        }

    if not content_files:
        return {
            "success": False,
            "error": "No content files found",
            "path": str(base_path),
            "searched_depth": max_depth,
        }

    content_root = find_content_root(base_path)
    raw_files: dict[str, str] = {}
    file_hashes: dict[str, str] = {}
    for file_path in content_files:
        full_path = content_root / file_path
        try:
            raw_files[file_path] = full_path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            logger.warning("Could not read %s: %s", full_path, e)
            continue
        file_hashes[file_path] = _compute_file_hash(full_path)

    entries, drafts = parse_content_files(raw_files, wpm, include_drafts)

    if not entries:
        return {
            "success": False,
            "error": "No entries extracted from content files",
            "path": str(base_path),
        }

    site_name = parse_local_site_name(path)
    store = IndexStore(storage_path)
    index = store.save_index(
        "local", site_name, sorted(raw_files), entries,
        commit_hash=_get_local_commit_hash(base_path),
        file_hashes=file_hashes,
        words_per_minute=wpm,
    )

    result = {
        "success": True,
        "site": index.site,
        "path": str(base_path),
        "indexed_at": index.indexed_at,
        "file_count": len(raw_files),
        "entry_count": len(entries),
        "collections": index.collections,
        "commit_hash": index.commit_hash,
    }
    if drafts:
        result["skipped_drafts"] = drafts
    return result
