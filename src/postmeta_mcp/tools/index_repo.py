"""Tool to index the content collections of a site hosted on GitHub."""

import hashlib
import logging
import os
import re
from typing import Optional

import httpx

from ..storage.index_store import IndexStore
from .common import env_flag, resolve_words_per_minute
from .index_local import is_content_path, parse_content_files

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
DEFAULT_CONTENT_PREFIX = "src/content/"


def parse_github_url(url: str) -> tuple[str, str]:
    """Extract owner and repo name from GitHub URL."""
    patterns = [
        r"github\.com/([^/]+)/([^/]+)",  # https://github.com/owner/repo
        r"^([^/]+)/([^/]+)$",  # owner/repo
    ]

    for pattern in patterns:
        match = re.search(pattern, url.strip().rstrip('/'))
        if match:
            owner = match.group(1)
            repo = match.group(2)
            if repo.endswith('.git'):
                repo = repo[:-4]
            return owner, repo

    raise ValueError(f"Could not parse GitHub URL: {url}")


def _headers(token: Optional[str], accept: str = "application/vnd.github.v3+json") -> dict:
    headers = {
        "Accept": accept,
        "User-Agent": "postmeta-mcp",
    }
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


async def fetch_file_content(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    path: str,
    token: Optional[str] = None,
) -> str:
    """Fetch raw content of a file from GitHub."""
    url = f"{GITHUB_API}/repos/{owner}/{repo}/contents/{path}"
    response = await client.get(url, headers=_headers(token, "application/vnd.github.v3.raw"))
    response.raise_for_status()
    return response.text


async def fetch_commit_sha(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    token: Optional[str] = None,
) -> str:
    """Fetch the HEAD commit SHA from GitHub API."""
    url = f"{GITHUB_API}/repos/{owner}/{repo}/commits/HEAD"
    try:
        response = await client.get(url, headers=_headers(token))
        if response.status_code == 200:
            return response.json().get("sha", "")
    except httpx.HTTPError as e:
        logger.warning("Could not fetch HEAD commit for %s/%s: %s", owner, repo, e)
    return ""


async def discover_content_files(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    token: Optional[str] = None,
    content_prefix: str = DEFAULT_CONTENT_PREFIX,
) -> tuple[list[str], dict[str, str]]:
    """
    Discover content-collection files in a repository using the Git Trees API.

    Returns:
        Tuple of (paths relative to the content prefix, dict mapping those paths to blob SHAs)
    """
    url = f"{GITHUB_API}/repos/{owner}/{repo}/git/trees/HEAD?recursive=1"
    response = await client.get(url, headers=_headers(token))
    if response.status_code == 404:
        return [], {}
    response.raise_for_status()
    data = response.json()

    content_files: list[str] = []
    blob_shas: dict[str, str] = {}
    for item in data.get("tree", []):
        path = item["path"]
        if item["type"] != "blob" or not path.startswith(content_prefix):
            continue
        rel_path = path[len(content_prefix):]
        if not is_content_path(rel_path):
            continue
        content_files.append(rel_path)
        blob_shas[rel_path] = item.get("sha", "")

    content_files.sort()
    return content_files, blob_shas


async def index_repo(
    url: str,
    storage_path: Optional[str] = None,
    words_per_minute: Optional[int] = None,
    include_drafts: bool = False,
    github_token: Optional[str] = None,
    content_prefix: str = DEFAULT_CONTENT_PREFIX,
    client: Optional[httpx.AsyncClient] = None,
) -> dict:
    """
    Index the content collections of a site's GitHub repository.

    Args:
        url: GitHub repository URL or owner/repo string
        storage_path: Custom storage path (defaults to POSTMETA_INDEX_PATH or ~/.postmeta-index)
        words_per_minute: Reading speed (defaults to POSTMETA_WORDS_PER_MINUTE or 200)
        include_drafts: Whether to index entries marked draft: true
        github_token: GitHub personal access token (for private repos)
        content_prefix: Repository path holding the collections
        client: HTTP client to use (a new one is created if omitted)

    Returns:
        Dict with indexing statistics
    """
    if env_flag('POSTMETA_LOCAL_ONLY'):
        return {
            "success": False,
            "error": "Remote indexing disabled in local-only mode. Unset POSTMETA_LOCAL_ONLY to enable.",
        }

    try:
        owner, repo = parse_github_url(url)
        wpm = resolve_words_per_minute(words_per_minute)
    except ValueError as e:
        return {
            "success": False,
            "error": str(e),
            "url": url,
        }
    token = github_token or os.environ.get("GITHUB_TOKEN")
    if not content_prefix.endswith('/'):
        content_prefix += '/'

    if client is None:
        async with httpx.AsyncClient(timeout=30.0) as own_client:
            return await _index_repo(own_client, owner, repo, token, wpm, include_drafts, content_prefix, storage_path)
    return await _index_repo(client, owner, repo, token, wpm, include_drafts, content_prefix, storage_path)


async def _index_repo(
    client: httpx.AsyncClient,
    owner: str,
    repo: str,
    token: Optional[str],
    words_per_minute: int,
    include_drafts: bool,
    content_prefix: str,
    storage_path: Optional[str],
) -> dict:
    try:
        content_files, blob_shas = await discover_content_files(client, owner, repo, token, content_prefix)
    except httpx.HTTPError as e:
        logger.warning("Could not list files of %s/%s: %s", owner, repo, e)
        return {
            "success": False,
            "error": f"Could not list repository files: {e}",
            "site": f"{owner}/{repo}",
        }

    if not content_files:
        return {
            "success": False,
            "error": f"No content files found under {content_prefix}",
            "site": f"{owner}/{repo}",
        }

    commit_hash = await fetch_commit_sha(client, owner, repo, token)

    raw_files: dict[str, str] = {}
    file_hashes: dict[str, str] = {}
    failed: list[str] = []
    for file_path in content_files:
        try:
            content = await fetch_file_content(client, owner, repo, content_prefix + file_path, token)
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch %s from %s/%s: %s", file_path, owner, repo, e)
            failed.append(file_path)
            continue
        raw_files[file_path] = content
        file_hashes[file_path] = blob_shas.get(file_path) or hashlib.sha256(content.encode()).hexdigest()

    entries, drafts = parse_content_files(raw_files, words_per_minute, include_drafts)

    if not entries:
        return {
            "success": False,
            "error": "No entries extracted from content files",
            "site": f"{owner}/{repo}",
        }

    store = IndexStore(storage_path)
    index = store.save_index(
        owner, repo, sorted(raw_files), entries,
        commit_hash=commit_hash,
        file_hashes=file_hashes,
        words_per_minute=words_per_minute,
    )

    result = {
        "success": True,
        "site": index.site,
        "indexed_at": index.indexed_at,
        "file_count": len(raw_files),
        "entry_count": len(entries),
        "collections": index.collections,
        "commit_hash": commit_hash,
    }
    if drafts:
        result["skipped_drafts"] = drafts
    if failed:
        result["failed_files"] = failed
    return result
