"""Error taxonomy for the link store."""

from __future__ import annotations


class LinkStoreError(Exception):
    """Base class for every failure reported by the link store."""


class ValidationError(LinkStoreError):
    """Malformed or out-of-range input."""


class DuplicateLink(LinkStoreError):
    """A link with the same URL is already stored."""

    def __init__(self, link: str):
        self.link = link
        super().__init__(f"Affiliate link already exists: {link}")


class NotFound(LinkStoreError):
    """The referenced link id does not exist."""

    def __init__(self, link_id: str):
        self.link_id = link_id
        super().__init__(f"Link not found: {link_id}")


class StorageError(LinkStoreError):
    """The underlying SQLite database failed."""
