"""Tool registry and dispatch for the link store.

Maps MCP tool names to LinkStore operations, validating camelCase arguments
with the pydantic input models and translating results to JSON text.
Failures leave this module as ToolError, whose message is the JSON
``{"error": ...}`` payload sent back to the client.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

import pydantic

from .errors import LinkStoreError, NotFound, ValidationError
from .models import (
    BestLinkQuery,
    CamelModel,
    ClickInput,
    ConversionInput,
    ExportQuery,
    LinkFilter,
    NewAffiliateLink,
    SearchQuery,
    StatsQuery,
    format_number,
)
from .store import LinkStore

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """A tool call failed; str(self) is the JSON error payload."""

    def __init__(self, message: str):
        self.payload = {"error": message}
        super().__init__(_dumps(self.payload))


@dataclass(frozen=True)
class ToolSpec:
    """A named tool, its argument model and the store call behind it."""

    name: str
    description: str
    input_model: type[CamelModel]
    handler: Callable[[LinkStore, Any], dict | list | str]

    @property
    def input_schema(self) -> dict:
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return schema


# --- Handlers ---

def _store_affiliate_link(store: LinkStore, args: NewAffiliateLink) -> dict:
    link_id = store.create(args)
    return {
        "success": True,
        "linkId": link_id,
        "message": f"Affiliate link stored: {args.product} ({args.program})",
    }


def _get_affiliate_links(store: LinkStore, args: LinkFilter) -> dict:
    links = store.list(args)
    return {"count": len(links), "links": [link.listing() for link in links]}


def _get_best_link(store: LinkStore, args: BestLinkQuery) -> dict:
    link = store.best_for_category(args.category)
    if link is None:
        return {"error": f"No links found for category: {args.category}"}
    return link.summary()


def _search_links(store: LinkStore, args: SearchQuery) -> dict:
    links = store.search(args.query, args.limit)
    return {
        "query": args.query,
        "count": len(links),
        "links": [link.summary() for link in links],
    }


def _get_stats(store: LinkStore, args: StatsQuery) -> dict:
    try:
        stats = store.get_stats(args.link_id)
    except NotFound:
        return {"error": "Link not found"}
    return stats.to_dict()


def _track_click(store: LinkStore, args: ClickInput) -> dict:
    store.record_click(args.link_id, source=args.source, user_id=args.user_id)
    return {"success": True, "message": "Click tracked"}


def _track_conversion(store: LinkStore, args: ConversionInput) -> dict:
    store.record_conversion(args.link_id, args.amount, order_id=args.order_id)
    return {"success": True, "message": f"Conversion tracked: ${format_number(args.amount)}"}


def _export_links(store: LinkStore, args: ExportQuery) -> str:
    return store.export_all(args.format)


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            "store_affiliate_link",
            "Store a new affiliate link in the database. Returns the link ID for tracking.",
            NewAffiliateLink,
            _store_affiliate_link,
        ),
        ToolSpec(
            "get_affiliate_links",
            "Retrieve affiliate links filtered by category, program, or commission rate.",
            LinkFilter,
            _get_affiliate_links,
        ),
        ToolSpec(
            "get_best_link",
            "Get the highest-commission affiliate link for a specific category.",
            BestLinkQuery,
            _get_best_link,
        ),
        ToolSpec(
            "search_links",
            "Full-text search across all affiliate links by product name or notes.",
            SearchQuery,
            _search_links,
        ),
        ToolSpec(
            "get_stats",
            "Get click, conversion, and revenue stats for a specific link.",
            StatsQuery,
            _get_stats,
        ),
        ToolSpec(
            "track_click",
            "Track a click on an affiliate link.",
            ClickInput,
            _track_click,
        ),
        ToolSpec(
            "track_conversion",
            "Track a conversion (sale) for an affiliate link.",
            ConversionInput,
            _track_conversion,
        ),
        ToolSpec(
            "export_links",
            "Export all affiliate links as JSON or CSV.",
            ExportQuery,
            _export_links,
        ),
    )
}


def dispatch(store: LinkStore, name: str, arguments: dict | None = None) -> str:
    """Run one tool call and return its text result.

    Raises:
        ToolError: unknown tool, invalid arguments or a failed operation.
    """
    spec = TOOLS.get(name)
    if spec is None:
        logger.warning("Unknown tool requested: %s", name)
        raise ToolError(f"Unknown tool: {name}")

    try:
        params = _parse(spec, arguments or {})
        result = spec.handler(store, params)
    except LinkStoreError as e:
        logger.warning("Tool %s failed: %s", name, e)
        raise ToolError(str(e)) from e
    except Exception as e:
        logger.exception("Tool %s crashed", name)
        raise ToolError(str(e) or e.__class__.__name__) from e

    return result if isinstance(result, str) else _dumps(result)


def _parse(spec: ToolSpec, arguments: dict) -> CamelModel:
    try:
        return spec.input_model.model_validate(arguments)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid arguments for {spec.name}: {problems}") from e


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
