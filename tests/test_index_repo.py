"""Tests for indexing a site hosted on GitHub (HTTP mocked with httpx.MockTransport)."""

import httpx
import pytest

from postmeta_mcp.storage.index_store import IndexStore
from postmeta_mcp.tools.index_repo import index_repo, parse_github_url

FILES = {
    "src/content/blog/hello-world.md": "---\ntitle: Hello World\npubDate: 2024-05-01\n---\n\n# Hello\n\n## Why\n\nBecause.\n",
    "src/content/blog/draft-post.md": "---\ntitle: Draft\ndraft: true\n---\n\nSoon.\n",
    "src/content/projects/portfolio-website.mdx": "---\ntitle: Portfolio\n---\n\nimport X from './X'\n\n## Stack\n\n<X />\n",
}

TREE = [
    {"path": "README.md", "type": "blob", "sha": "r1"},
    {"path": "src/content", "type": "tree", "sha": "t1"},
    {"path": "src/content/config.ts", "type": "blob", "sha": "c1"},
    {"path": "src/content/blog/_template.md", "type": "blob", "sha": "x1"},
    {"path": "src/content/blog/hello-world.md", "type": "blob", "sha": "sha-hello"},
    {"path": "src/content/blog/draft-post.md", "type": "blob", "sha": "sha-draft"},
    {"path": "src/content/blog/broken.md", "type": "blob", "sha": "sha-broken"},
    {"path": "src/content/projects/portfolio-website.mdx", "type": "blob", "sha": "sha-portfolio"},
]


def _make_client(seen_headers=None, tree=TREE):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen_headers is not None:
            seen_headers.append(dict(request.headers))
        path = request.url.path
        if path == "/repos/owner/blog/git/trees/HEAD":
            return httpx.Response(200, json={"tree": tree})
        if path == "/repos/owner/blog/commits/HEAD":
            return httpx.Response(200, json={"sha": "deadbeef"})
        prefix = "/repos/owner/blog/contents/"
        if path.startswith(prefix):
            file_path = path[len(prefix):]
            if file_path in FILES:
                return httpx.Response(200, text=FILES[file_path])
            return httpx.Response(500, text="boom")
        return httpx.Response(404)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParseGithubUrl:
    def test_full_url(self):
        assert parse_github_url("https://github.com/owner/blog") == ("owner", "blog")

    def test_git_suffix(self):
        assert parse_github_url("https://github.com/owner/my.git-blog.git/") == ("owner", "my.git-blog")

    def test_short_form(self):
        assert parse_github_url("owner/blog") == ("owner", "blog")

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_github_url("not a url")


class TestIndexRepo:
    @pytest.mark.asyncio
    async def test_index_repo(self, storage_dir):
        async with _make_client() as client:
            result = await index_repo("owner/blog", storage_path=storage_dir, client=client)

        assert result["success"] is True
        assert result["site"] == "owner/blog"
        assert result["commit_hash"] == "deadbeef"
        assert result["entry_count"] == 2
        assert result["collections"] == ["blog", "projects"]
        assert result["skipped_drafts"] == ["blog/draft-post.md"]
        assert result["failed_files"] == ["blog/broken.md"]

        index = IndexStore(storage_dir).load_index("owner", "blog")
        assert index.file_hashes["blog/hello-world.md"] == "sha-hello"
        hello = index.get_entry("hello-world")
        assert [h["text"] for h in hello["headings"]] == ["Hello", "Why"]
        portfolio = index.get_entry("projects/portfolio-website")
        assert portfolio["headings"] == [{"depth": 2, "slug": "stack", "text": "Stack"}]

    @pytest.mark.asyncio
    async def test_token_sent(self, storage_dir, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "secret-token")
        seen: list[dict] = []
        async with _make_client(seen) as client:
            await index_repo("owner/blog", storage_path=storage_dir, client=client)
        assert seen
        assert all(h.get("authorization") == "token secret-token" for h in seen)

    @pytest.mark.asyncio
    async def test_no_content(self, storage_dir):
        async with _make_client(tree=[{"path": "README.md", "type": "blob", "sha": "r1"}]) as client:
            result = await index_repo("owner/blog", storage_path=storage_dir, client=client)
        assert result["success"] is False
        assert "src/content/" in result["error"]

    @pytest.mark.asyncio
    async def test_unknown_repo(self, storage_dir):
        async with _make_client() as client:
            result = await index_repo("someone/missing", storage_path=storage_dir, client=client)
        assert result["success"] is False

    @pytest.mark.asyncio
    async def test_bad_url(self, storage_dir):
        result = await index_repo("not a url", storage_path=storage_dir)
        assert result["success"] is False
        assert "Could not parse GitHub URL" in result["error"]

    @pytest.mark.asyncio
    async def test_invalid_words_per_minute(self, storage_dir):
        result = await index_repo("owner/blog", storage_path=storage_dir, words_per_minute=0)
        assert result["success"] is False
        assert "words_per_minute" in result["error"]

    @pytest.mark.asyncio
    async def test_tree_listing_forbidden(self, storage_dir):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "API rate limit exceeded"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await index_repo("owner/blog", storage_path=storage_dir, client=client)
        assert result["success"] is False
        assert result["site"] == "owner/blog"
        assert "403" in result["error"]

    @pytest.mark.asyncio
    async def test_custom_words_per_minute(self, storage_dir):
        async with _make_client() as client:
            await index_repo("owner/blog", storage_path=storage_dir, words_per_minute=50, client=client)
        index = IndexStore(storage_dir).load_index("owner", "blog")
        assert index.words_per_minute == 50
