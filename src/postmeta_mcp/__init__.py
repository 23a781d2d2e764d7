"""MCP server for blog post headings and reading-time metadata."""

__version__ = "0.1.0"
