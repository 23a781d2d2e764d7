"""Index storage."""
