"""Link exporter — renders stored links as JSON or CSV text.

CSV values are wrapped in double quotes without escaping, so a product or
program containing ``"`` or ``,`` produces a malformed row. Downstream
sheets rely on this exact shape.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable

from .models import AffiliateLink, ExportFormat, format_number

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "ID",
    "Program",
    "Product",
    "Link",
    "Commission %",
    "Category",
    "Clicks",
    "Conversions",
    "Revenue",
]


class LinkExporter:
    """Render affiliate links for export."""

    @staticmethod
    def export(links: Iterable[AffiliateLink], fmt: ExportFormat | str) -> str:
        """Render links in the requested format.

        Args:
            links: Links to export, already in output order.
            fmt: "json" or "csv".

        Returns:
            The rendered document as text.
        """
        fmt = ExportFormat(fmt)
        links = list(links)
        logger.info("Exporting %d links as %s", len(links), fmt.value)
        if fmt is ExportFormat.CSV:
            return LinkExporter.to_csv(links)
        return LinkExporter.to_json(links)

    @staticmethod
    def to_json(links: list[AffiliateLink]) -> str:
        return json.dumps([link.to_dict() for link in links], indent=2, ensure_ascii=False)

    @staticmethod
    def to_csv(links: list[AffiliateLink]) -> str:
        lines = [",".join(CSV_HEADERS)]
        for link in links:
            row = [
                link.id,
                link.program,
                link.product,
                link.link,
                format_number(link.commission_rate),
                link.category,
                link.clicks,
                link.conversions,
                format_number(link.revenue),
            ]
            lines.append(",".join(f'"{value}"' for value in row))
        return "\n".join(lines)
