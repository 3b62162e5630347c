"""Affiliate links store: one source of truth for affiliate links, served over MCP."""

__version__ = "1.0.0"
