"""MCP tool implementations."""

from .analyze_text import extract_headings, estimate_reading_time
from .index_local import index_local
from .index_repo import index_repo
from .list_sites import list_sites
from .list_entries import list_entries
from .get_entry import get_entry
from .get_toc import get_toc, get_toc_tree
