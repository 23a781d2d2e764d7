"""MCP server for blog post headings and reading-time metadata."""

import asyncio
import json
import logging
import os
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .tools.analyze_text import (
    extract_headings as do_extract_headings,
    estimate_reading_time as do_estimate_reading_time,
)
from .tools.index_local import index_local as do_index_local
from .tools.index_repo import index_repo as do_index_repo
from .tools.list_sites import list_sites as do_list_sites
from .tools.list_entries import list_entries as do_list_entries
from .tools.get_entry import get_entry as do_get_entry
from .tools.get_toc import get_toc as do_get_toc, get_toc_tree as do_get_toc_tree
from .storage.index_store import IndexStore

logger = logging.getLogger(__name__)

_SITE_PROPERTY = {
    "type": "string",
    "description": "Site identifier (owner/name, or just name; local sites are local/<dirname>)",
}
_ENTRY_PROPERTY = {
    "type": "string",
    "description": "Entry slug, collection/slug, or file id (e.g. 'my-post.mdx')",
}
_WPM_PROPERTY = {
    "type": "integer",
    "description": "Reading speed in words per minute (default: POSTMETA_WORDS_PER_MINUTE or 200)",
    "minimum": 1,
}

# Create MCP server
server = Server("postmeta-mcp")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="extract_headings",
            description="""Extract the headings of a markdown document.

Returns one entry per ATX heading line (# to ######) in document order,
each with depth, anchor slug and text. The list is flat and slugs are
not deduplicated. Headings inside fenced code blocks are included.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "content": {
                        "type": "string",
                        "description": "Raw markdown text",
                    },
                },
                "required": ["content"],
            },
        ),
        Tool(
            name="estimate_reading_time",
            description="""Estimate the reading time of a markdown document.

Code blocks, inline code, image syntax, link URLs and markup characters
are ignored. Returns a string like "4 min read" (never below 1 minute)
and the word count it is based on.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "content": {
                        "type": "string",
                        "description": "Raw markdown text",
                    },
                    "words_per_minute": _WPM_PROPERTY,
                },
                "required": ["content"],
            },
        ),
        Tool(
            name="index_local",
            description="""Index the content collections of a local site.

Reads src/content/<collection>/**/*.md(x) (or <path>/<collection>/... when
there is no src/content) and stores title, date, tags, headings and reading
time for every entry.

Features:
- Parses YAML front matter; MDX imports and components are stripped
- Skips drafts (draft: true) unless include_drafts is set
- Skips files and folders starting with "_"
- Respects .gitignore rules
- Symlink-safe (does not follow symlinks by default)""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the site root or its content directory",
                    },
                    "words_per_minute": _WPM_PROPERTY,
                    "include_drafts": {
                        "type": "boolean",
                        "description": "Whether to index entries marked as drafts",
                        "default": False,
                    },
                    "max_depth": {
                        "type": "integer",
                        "description": "Maximum directory depth to crawl (default: 5)",
                        "default": 5,
                    },
                    "include_hidden": {
                        "type": "boolean",
                        "description": "Whether to include hidden directories (starting with .)",
                        "default": False,
                    },
                    "follow_symlinks": {
                        "type": "boolean",
                        "description": "Whether to follow symbolic links (default: false for safety)",
                        "default": False,
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="index_repo",
            description="""Index the content collections of a site hosted on GitHub.

Supports:
- Public repositories (no token needed)
- Private repositories (set GITHUB_TOKEN environment variable)
- URL formats: https://github.com/owner/repo, owner/repo
- Blocked in local-only mode (POSTMETA_LOCAL_ONLY=true)""",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "GitHub repository URL or owner/repo string",
                    },
                    "words_per_minute": _WPM_PROPERTY,
                    "include_drafts": {
                        "type": "boolean",
                        "description": "Whether to index entries marked as drafts",
                        "default": False,
                    },
                    "content_prefix": {
                        "type": "string",
                        "description": "Repository directory holding the collections",
                        "default": "src/content/",
                    },
                },
                "required": ["url"],
            },
        ),
        Tool(
            name="list_sites",
            description="""List all indexed sites.

Returns site names, indexing timestamps, entry counts, collections
and commit hashes.""",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
        Tool(
            name="list_entries",
            description="""List the entries of an indexed site, newest first.

Returns slug, title, date, tags and reading time per entry.
Supports filtering by collection and tag.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "site": _SITE_PROPERTY,
                    "collection": {
                        "type": "string",
                        "description": "Only include entries of this collection (e.g. 'blog')",
                    },
                    "tag": {
                        "type": "string",
                        "description": "Only include entries with this tag",
                    },
                    "include_drafts": {
                        "type": "boolean",
                        "description": "Whether to include drafts",
                        "default": True,
                    },
                },
                "required": ["site"],
            },
        ),
        Tool(
            name="get_entry",
            description="""Get all metadata of one entry: front-matter fields,
headings, word count and reading time.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "site": _SITE_PROPERTY,
                    "entry": _ENTRY_PROPERTY,
                },
                "required": ["site", "entry"],
            },
        ),
        Tool(
            name="get_toc",
            description="""Get the heading list of an entry in document order.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "site": _SITE_PROPERTY,
                    "entry": _ENTRY_PROPERTY,
                    "max_depth": {
                        "type": "integer",
                        "description": "Only include headings with depth <= this value",
                    },
                },
                "required": ["site", "entry"],
            },
        ),
        Tool(
            name="get_toc_tree",
            description="""Get an entry's headings as a nested table of contents.

Each heading is nested under the closest preceding heading of a smaller depth.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "site": _SITE_PROPERTY,
                    "entry": _ENTRY_PROPERTY,
                    "max_depth": {
                        "type": "integer",
                        "description": "Only include headings with depth <= this value",
                    },
                },
                "required": ["site", "entry"],
            },
        ),
        Tool(
            name="delete_index",
            description="""Delete a site's cached index.

This is irreversible; the site will need to be re-indexed.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "site": _SITE_PROPERTY,
                },
                "required": ["site"],
            },
        ),
    ]


async def dispatch(name: str, arguments: dict[str, Any]) -> dict:
    """Run a tool by name and return its result dict."""
    if name == "extract_headings":
        return do_extract_headings(content=arguments["content"])
    elif name == "estimate_reading_time":
        return do_estimate_reading_time(
            content=arguments["content"],
            words_per_minute=arguments.get("words_per_minute"),
        )
    elif name == "index_local":
        return await do_index_local(
            path=arguments["path"],
            words_per_minute=arguments.get("words_per_minute"),
            include_drafts=arguments.get("include_drafts", False),
            max_depth=arguments.get("max_depth", 5),
            include_hidden=arguments.get("include_hidden", False),
            follow_symlinks=arguments.get("follow_symlinks", False),
        )
    elif name == "index_repo":
        return await do_index_repo(
            url=arguments["url"],
            words_per_minute=arguments.get("words_per_minute"),
            include_drafts=arguments.get("include_drafts", False),
            content_prefix=arguments.get("content_prefix", "src/content/"),
        )
    elif name == "list_sites":
        return do_list_sites()
    elif name == "list_entries":
        return do_list_entries(
            site=arguments["site"],
            collection=arguments.get("collection"),
            tag=arguments.get("tag"),
            include_drafts=arguments.get("include_drafts", True),
        )
    elif name == "get_entry":
        return do_get_entry(site=arguments["site"], entry=arguments["entry"])
    elif name == "get_toc":
        return do_get_toc(
            site=arguments["site"],
            entry=arguments["entry"],
            max_depth=arguments.get("max_depth"),
        )
    elif name == "get_toc_tree":
        return do_get_toc_tree(
            site=arguments["site"],
            entry=arguments["entry"],
            max_depth=arguments.get("max_depth"),
        )
    elif name == "delete_index":
        return _handle_delete_index(arguments["site"])
    return {"error": f"Unknown tool: {name}"}


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        result = await dispatch(name, arguments)
    except Exception as e:
        logger.exception("Tool %s failed", name)
        result = {"error": str(e)}
    return [TextContent(type="text", text=json.dumps(result, indent=2))]


def _handle_delete_index(site: str) -> dict:
    """Handle delete_index tool call."""
    store = IndexStore()
    resolved = store.resolve_site(site)
    if resolved is None:
        return {"error": f"Site not found: {site}"}
    owner, name = resolved

    if store.delete_index(owner, name):
        return {"success": True, "message": f"Index deleted for {owner}/{name}"}
    return {"success": False, "error": f"No index found for {owner}/{name}"}


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main():
    """Entry point for the MCP server."""
    # stdout carries the MCP stream
    logging.basicConfig(
        level=os.environ.get("POSTMETA_LOG_LEVEL", "WARNING").upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
