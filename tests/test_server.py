"""Tests for the MCP server tool routing."""

import json

import pytest

from postmeta_mcp.server import call_tool, dispatch, list_tools


@pytest.fixture
def index_env(storage_dir, monkeypatch):
    monkeypatch.setenv("POSTMETA_INDEX_PATH", storage_dir)
    return storage_dir


class TestListTools:
    @pytest.mark.asyncio
    async def test_tool_names(self):
        names = {tool.name for tool in await list_tools()}
        assert names == {
            "extract_headings",
            "estimate_reading_time",
            "index_local",
            "index_repo",
            "list_sites",
            "list_entries",
            "get_entry",
            "get_toc",
            "get_toc_tree",
            "delete_index",
        }


class TestCallTool:
    @pytest.mark.asyncio
    async def test_extract_headings(self):
        contents = await call_tool("extract_headings", {"content": "# Title\n## Sub Heading"})
        result = json.loads(contents[0].text)
        assert [h["slug"] for h in result["headings"]] == ["title", "sub-heading"]

    @pytest.mark.asyncio
    async def test_reading_time(self):
        contents = await call_tool("estimate_reading_time", {"content": "", "words_per_minute": 200})
        assert json.loads(contents[0].text)["reading_time"] == "1 min read"

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        contents = await call_tool("no_such_tool", {})
        assert json.loads(contents[0].text) == {"error": "Unknown tool: no_such_tool"}

    @pytest.mark.asyncio
    async def test_exception_becomes_error(self):
        # Missing required argument raises KeyError inside the handler
        contents = await call_tool("extract_headings", {})
        assert "error" in json.loads(contents[0].text)

    @pytest.mark.asyncio
    async def test_bad_github_url(self):
        contents = await call_tool("index_repo", {"url": "not a url"})
        assert "Could not parse GitHub URL" in json.loads(contents[0].text)["error"]


class TestIndexLifecycle:
    @pytest.mark.asyncio
    async def test_index_query_delete(self, sample_site, index_env):
        result = await dispatch("index_local", {"path": str(sample_site)})
        assert result["success"] is True

        sites = await dispatch("list_sites", {})
        assert sites["count"] == 1

        toc = await dispatch("get_toc", {"site": "my-blog", "entry": "react-hooks-explained"})
        assert toc["heading_count"] == 3

        deleted = await dispatch("delete_index", {"site": "my-blog"})
        assert deleted["success"] is True

        missing = await dispatch("delete_index", {"site": "my-blog"})
        assert "error" in missing
