"""Link Store — durable CRUD and counter maintenance for affiliate links.

Usage:
    store = LinkStore.open()            # or LinkStore(get_connection(path))
    link_id = store.create(NewAffiliateLink(...))
    store.record_click(link_id, source="blog")
    stats = store.get_stats(link_id)

The store owns no connection lifecycle beyond ``open``/``close``; callers
inject an opened ``sqlite3.Connection``. Every mutation runs in a single
``with conn:`` transaction so an event row and its counter update commit
or roll back together.
"""

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from ..common.database import create_schema, get_connection
from .errors import DuplicateLink, NotFound, StorageError
from .exporter import LinkExporter
from .models import (
    DEFAULT_LIST_LIMIT,
    DEFAULT_SEARCH_LIMIT,
    AffiliateLink,
    ClickEvent,
    ConversionEvent,
    ExportFormat,
    LinkFilter,
    LinkStats,
    NewAffiliateLink,
)

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Return an id like ``aff_1718000000000_3f9a1c``."""
    return f"aff_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LinkStore:
    """Affiliate links and their click/conversion history in SQLite."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self._conn.row_factory = sqlite3.Row

    @classmethod
    def open(cls, db_path: str | Path | None = None) -> LinkStore:
        """Open (and initialize if needed) the database at db_path."""
        conn = get_connection(db_path)
        create_schema(conn)
        return cls(conn)

    def close(self) -> None:
        self._conn.close()

    # --- Links ---

    def create(self, record: NewAffiliateLink) -> str:
        """Insert a new link and return its generated id.

        Raises:
            DuplicateLink: the URL is already stored.
            StorageError: any other database failure.
        """
        link_id = generate_id()
        now = _now_iso()
        try:
            with self._conn:
                self._conn.execute(
                    """INSERT INTO affiliate_links
                       (id, program, product, link, commission_rate, category,
                        tags, expiry, created_at, updated_at, notes)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        link_id,
                        record.program,
                        record.product,
                        record.link,
                        record.commission_rate,
                        record.category,
                        json.dumps(record.tags) if record.tags else None,
                        record.expiry or None,
                        now,
                        now,
                        record.notes or None,
                    ),
                )
        except sqlite3.IntegrityError as e:
            if "affiliate_links.link" in str(e):
                raise DuplicateLink(record.link) from e
            raise StorageError(f"Failed to store link: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to store link: {e}") from e

        logger.info("Stored link %s: %s (%s)", link_id, record.product, record.program)
        return link_id

    def get(self, link_id: str) -> Optional[AffiliateLink]:
        with self._storage_errors():
            row = self._conn.execute(
                "SELECT * FROM affiliate_links WHERE id = ?", (link_id,)
            ).fetchone()
        return AffiliateLink.from_row(row) if row else None

    def all(self) -> list[AffiliateLink]:
        """Every link, newest first."""
        with self._storage_errors():
            rows = self._conn.execute(
                "SELECT * FROM affiliate_links ORDER BY created_at DESC"
            ).fetchall()
        return [AffiliateLink.from_row(r) for r in rows]

    def list(self, filters: LinkFilter | None = None) -> list[AffiliateLink]:
        """Links matching every given filter, highest commission first."""
        filters = filters or LinkFilter()
        where: list[str] = []
        params: list = []

        if filters.category:
            where.append("category = ?")
            params.append(filters.category)
        if filters.program:
            where.append("program = ?")
            params.append(filters.program)
        if filters.min_commission is not None:
            where.append("commission_rate >= ?")
            params.append(filters.min_commission)
        if filters.max_commission is not None:
            where.append("commission_rate <= ?")
            params.append(filters.max_commission)

        sql = "SELECT * FROM affiliate_links"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY commission_rate DESC LIMIT ?"
        params.append(filters.limit or DEFAULT_LIST_LIMIT)

        with self._storage_errors():
            rows = self._conn.execute(sql, params).fetchall()
        logger.debug("list(%s) -> %d rows", filters.model_dump(exclude_none=True), len(rows))
        return [AffiliateLink.from_row(r) for r in rows]

    def best_for_category(self, category: str) -> Optional[AffiliateLink]:
        """Highest-commission link in category, or None if it has none."""
        with self._storage_errors():
            row = self._conn.execute(
                "SELECT * FROM affiliate_links WHERE category = ? "
                "ORDER BY commission_rate DESC LIMIT 1",
                (category,),
            ).fetchone()
        return AffiliateLink.from_row(row) if row else None

    def search(self, query: str, limit: int | None = None) -> list[AffiliateLink]:
        """Substring match on product or notes, highest commission first.

        Matching follows SQLite LIKE: ASCII case-insensitive, and ``%`` / ``_``
        in the query act as wildcards.
        """
        pattern = f"%{query}%"
        with self._storage_errors():
            rows = self._conn.execute(
                "SELECT * FROM affiliate_links WHERE product LIKE ? OR notes LIKE ? "
                "ORDER BY commission_rate DESC LIMIT ?",
                (pattern, pattern, limit or DEFAULT_SEARCH_LIMIT),
            ).fetchall()
        logger.debug("search(%r) -> %d rows", query, len(rows))
        return [AffiliateLink.from_row(r) for r in rows]

    # --- Events ---

    def get_stats(self, link_id: str) -> LinkStats:
        """Counts and revenue computed from the event tables.

        Raises:
            NotFound: link_id does not exist.
        """
        link = self.get(link_id)
        if link is None:
            raise NotFound(link_id)

        with self._storage_errors():
            clicks = self._conn.execute(
                "SELECT COUNT(*) FROM link_clicks WHERE link_id = ?", (link_id,)
            ).fetchone()[0]
            conversions, revenue = self._conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(amount), 0) FROM link_conversions WHERE link_id = ?",
                (link_id,),
            ).fetchone()

        return LinkStats(
            link_id=link_id,
            product=link.product,
            program=link.program,
            clicks=clicks,
            conversions=conversions,
            revenue=revenue,
            conversion_rate=LinkStats.format_rate(clicks, conversions),
        )

    def record_click(
        self,
        link_id: str,
        source: str | None = None,
        user_id: str | None = None,
    ) -> ClickEvent:
        """Append a click event and bump the link's click counter.

        Raises:
            NotFound: link_id does not exist; nothing is written.
        """
        event = ClickEvent(
            id=generate_id(),
            link_id=link_id,
            timestamp=_now_iso(),
            source=source or None,
            user_id=user_id or None,
        )
        with self._storage_errors(), self._conn:
            self._require_link(link_id)
            self._conn.execute(
                "INSERT INTO link_clicks (id, link_id, timestamp, source, user_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (event.id, event.link_id, event.timestamp, event.source, event.user_id),
            )
            self._conn.execute(
                "UPDATE affiliate_links SET clicks = clicks + 1 WHERE id = ?", (link_id,)
            )
        logger.info("Tracked click on %s (source=%s)", link_id, event.source)
        return event

    def record_conversion(
        self,
        link_id: str,
        amount: float,
        order_id: str | None = None,
    ) -> ConversionEvent:
        """Append a conversion and add it to the link's counters.

        amount is not bounded; refunds may be recorded as negative amounts.

        Raises:
            NotFound: link_id does not exist; nothing is written.
        """
        event = ConversionEvent(
            id=generate_id(),
            link_id=link_id,
            timestamp=_now_iso(),
            amount=amount,
            order_id=order_id or None,
        )
        with self._storage_errors(), self._conn:
            self._require_link(link_id)
            self._conn.execute(
                "INSERT INTO link_conversions (id, link_id, timestamp, amount, order_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (event.id, event.link_id, event.timestamp, event.amount, event.order_id),
            )
            self._conn.execute(
                "UPDATE affiliate_links "
                "SET conversions = conversions + 1, revenue = revenue + ? WHERE id = ?",
                (amount, link_id),
            )
        logger.info("Tracked conversion on %s: %s", link_id, amount)
        return event

    # --- Export ---

    def export_all(self, fmt: ExportFormat | str) -> str:
        """Every link rendered as a JSON array or CSV document."""
        return LinkExporter.export(self.all(), fmt)

    # --- Internals ---

    def _require_link(self, link_id: str) -> None:
        row = self._conn.execute(
            "SELECT 1 FROM affiliate_links WHERE id = ?", (link_id,)
        ).fetchone()
        if row is None:
            raise NotFound(link_id)

    @contextlib.contextmanager
    def _storage_errors(self) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as e:
            logger.error("Database error: %s", e)
            raise StorageError(str(e)) from e
