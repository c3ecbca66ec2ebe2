"""Shared helpers: logging setup and the async HTTP client."""
