# Link Store — affiliate links, click/conversion events and their counters
"""
SQLite-backed store for affiliate link metadata, exposed as MCP tools.
"""

from .errors import DuplicateLink, LinkStoreError, NotFound, StorageError, ValidationError
from .exporter import LinkExporter
from .models import (
    AffiliateLink,
    ClickEvent,
    ConversionEvent,
    ExportFormat,
    LinkFilter,
    LinkStats,
    NewAffiliateLink,
)
from .store import LinkStore

__all__ = [
    "LinkStore",
    "LinkExporter",
    "AffiliateLink",
    "ClickEvent",
    "ConversionEvent",
    "ExportFormat",
    "LinkFilter",
    "LinkStats",
    "NewAffiliateLink",
    "LinkStoreError",
    "ValidationError",
    "DuplicateLink",
    "NotFound",
    "StorageError",
]
