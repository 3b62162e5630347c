"""Pydantic data models for the affiliate links store.

Records are snake_case in Python and SQL and camelCase on the wire
(``commissionRate``, ``createdAt``, ``linkId``). Every model accepts both.
"""

from __future__ import annotations

import json
import re
import sqlite3
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_LIST_LIMIT = 50
DEFAULT_SEARCH_LIMIT = 20

_url_adapter = TypeAdapter(AnyUrl)
_datetime_adapter = TypeAdapter(datetime)

# Full ISO-8601 date-time: date, "T", time, optional fraction and offset.
_ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})?$"
)


def format_number(value: float) -> str:
    """Render whole floats without a trailing ``.0`` (4.0 -> "4", 4.5 -> "4.5")."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# === Enums ===

class ExportFormat(str, Enum):
    """Supported export formats."""
    JSON = "json"
    CSV = "csv"


# === Records ===

class AffiliateLink(CamelModel):
    """A stored affiliate offer with its cached event counters."""

    id: str
    program: str
    product: str
    link: str
    commission_rate: float
    category: str
    tags: list[str] = []
    expiry: Optional[str] = None
    created_at: str
    updated_at: str
    clicks: int = 0
    conversions: int = 0
    revenue: float = 0.0
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> AffiliateLink:
        return cls(
            id=row["id"],
            program=row["program"],
            product=row["product"],
            link=row["link"],
            commission_rate=row["commission_rate"],
            category=row["category"],
            tags=json.loads(row["tags"]) if row["tags"] else [],
            expiry=row["expiry"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            clicks=row["clicks"] or 0,
            conversions=row["conversions"] or 0,
            revenue=row["revenue"] or 0.0,
            notes=row["notes"],
        )

    def summary(self) -> dict:
        """Short form returned by best-link lookups and search."""
        return {
            "id": self.id,
            "product": self.product,
            "program": self.program,
            "link": self.link,
            "commissionRate": self.commission_rate,
            "category": self.category,
        }

    def listing(self) -> dict:
        """Form returned by filtered listings, counters included."""
        return {
            "id": self.id,
            "program": self.program,
            "product": self.product,
            "link": self.link,
            "commissionRate": self.commission_rate,
            "category": self.category,
            "clicks": self.clicks,
            "conversions": self.conversions,
            "revenue": self.revenue,
        }


class ClickEvent(CamelModel):
    """Append-only click on a link."""
    id: str
    link_id: str
    timestamp: str
    source: Optional[str] = None
    user_id: Optional[str] = None


class ConversionEvent(CamelModel):
    """Append-only sale attributed to a link."""
    id: str
    link_id: str
    timestamp: str
    amount: float
    order_id: Optional[str] = None


class LinkStats(CamelModel):
    """Event aggregates for one link, counted live from the event tables."""
    link_id: str
    product: str
    program: str
    clicks: int
    conversions: int
    revenue: float
    conversion_rate: str

    @staticmethod
    def format_rate(clicks: int, conversions: int) -> str:
        if clicks <= 0:
            return "0%"
        return f"{conversions / clicks * 100:.2f}%"


# === Tool inputs ===

class NewAffiliateLink(CamelModel):
    """Input for storing a new link."""

    program: str = Field(description="Affiliate program (Amazon, ShareASale, CJ, Rakuten, Impact, etc.)")
    product: str = Field(description="Product name or description")
    link: str = Field(description="Full affiliate link URL")
    commission_rate: float = Field(ge=0, le=100, description="Commission rate as percentage (0-100)")
    category: str = Field(description="Product category (tech, home, fitness, finance, etc.)")
    tags: Optional[list[str]] = Field(default=None, description="Optional tags for filtering")
    expiry: Optional[str] = Field(default=None, description="Optional expiry date (ISO 8601)")
    notes: Optional[str] = Field(default=None, description="Optional notes about the link")

    @field_validator("link")
    @classmethod
    def _check_url(cls, v: str) -> str:
        # Validate only; the URL is stored exactly as given.
        _url_adapter.validate_python(v)
        return v

    @field_validator("expiry")
    @classmethod
    def _check_expiry(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            if not _ISO_DATETIME_RE.match(v):
                raise ValueError("expiry must be an ISO 8601 date-time, e.g. 2027-01-01T00:00:00Z")
            _datetime_adapter.validate_python(v)
        return v


class LinkFilter(CamelModel):
    """Filters for listing links. Unset fields do not constrain the result."""

    category: Optional[str] = Field(default=None, description="Filter by category")
    program: Optional[str] = Field(default=None, description="Filter by program")
    min_commission: Optional[float] = Field(default=None, description="Minimum commission rate")
    max_commission: Optional[float] = Field(default=None, description="Maximum commission rate")
    limit: Optional[int] = Field(default=None, ge=0, description=f"Limit results (default {DEFAULT_LIST_LIMIT})")


class BestLinkQuery(CamelModel):
    category: str = Field(description="Product category")


class SearchQuery(CamelModel):
    query: str = Field(description="Search query")
    limit: Optional[int] = Field(default=None, ge=0, description=f"Limit results (default {DEFAULT_SEARCH_LIMIT})")


class StatsQuery(CamelModel):
    link_id: str = Field(description="Affiliate link ID")


class ClickInput(CamelModel):
    link_id: str = Field(description="Affiliate link ID")
    source: Optional[str] = Field(default=None, description="Traffic source (email, social, blog, etc.)")
    user_id: Optional[str] = Field(default=None, description="Optional user ID")


class ConversionInput(CamelModel):
    link_id: str = Field(description="Affiliate link ID")
    amount: float = Field(description="Sale amount")
    order_id: Optional[str] = Field(default=None, description="Optional order ID from affiliate program")


class ExportQuery(CamelModel):
    format: ExportFormat = Field(description="Export format")
