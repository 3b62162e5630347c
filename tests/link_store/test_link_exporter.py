"""Tests for JSON/CSV export."""

from __future__ import annotations

import json

import pytest

from affiliate_links.link_store.exporter import CSV_HEADERS, LinkExporter
from affiliate_links.link_store.models import AffiliateLink, ExportFormat, NewAffiliateLink


def _link(**overrides) -> AffiliateLink:
    data = {
        "id": "aff_1_abcdef",
        "program": "Amazon",
        "product": "Desk",
        "link": "https://amzn.to/desk",
        "commission_rate": 4.0,
        "category": "office",
        "created_at": "2026-01-01T00:00:00.000Z",
        "updated_at": "2026-01-01T00:00:00.000Z",
    }
    data.update(overrides)
    return AffiliateLink(**data)


class TestCSV:
    def test_header(self):
        text = LinkExporter.to_csv([])
        assert text == "ID,Program,Product,Link,Commission %,Category,Clicks,Conversions,Revenue"
        assert len(CSV_HEADERS) == 9

    def test_every_value_quoted(self):
        text = LinkExporter.to_csv([_link(clicks=3, conversions=1, revenue=12.5)])
        lines = text.split("\n")
        assert len(lines) == 2
        assert lines[1] == (
            '"aff_1_abcdef","Amazon","Desk","https://amzn.to/desk",'
            '"4","office","3","1","12.5"'
        )

    def test_fractional_commission(self):
        row = LinkExporter.to_csv([_link(commission_rate=4.5)]).split("\n")[1]
        assert '"4.5"' in row

    def test_embedded_quotes_not_escaped(self):
        row = LinkExporter.to_csv([_link(product='27" Monitor, IPS')]).split("\n")[1]
        assert '"27" Monitor, IPS"' in row

    def test_one_row_per_link(self):
        links = [_link(id=f"aff_{i}_aaaaaa", link=f"https://x.test/{i}") for i in range(3)]
        assert len(LinkExporter.to_csv(links).split("\n")) == 4


class TestJSON:
    def test_camel_case_fields(self):
        data = json.loads(LinkExporter.to_json([_link(tags=["a"], notes="n")]))
        assert data == [
            {
                "id": "aff_1_abcdef",
                "program": "Amazon",
                "product": "Desk",
                "link": "https://amzn.to/desk",
                "commissionRate": 4.0,
                "category": "office",
                "tags": ["a"],
                "expiry": None,
                "createdAt": "2026-01-01T00:00:00.000Z",
                "updatedAt": "2026-01-01T00:00:00.000Z",
                "clicks": 0,
                "conversions": 0,
                "revenue": 0.0,
                "notes": "n",
            }
        ]

    def test_empty_export_is_empty_array(self):
        assert json.loads(LinkExporter.to_json([])) == []

    def test_indented(self):
        assert "\n  " in LinkExporter.to_json([_link()])


class TestExportDispatch:
    def test_accepts_string_format(self):
        assert LinkExporter.export([], "csv").startswith("ID,")
        assert LinkExporter.export([], ExportFormat.JSON) == "[]"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            LinkExporter.export([], "xml")


class TestStoreExport:
    def test_json_round_trip_reproduces_stored_fields(self, store, sample_link_data):
        link_id = store.create(NewAffiliateLink(**sample_link_data))
        store.record_click(link_id)
        store.record_conversion(link_id, 30)

        exported = json.loads(store.export_all("json"))
        assert len(exported) == 1
        record = exported[0]
        assert AffiliateLink.model_validate(record) == store.get(link_id)
        assert record["tags"] == ["chair", "ergonomic"]
        assert record["clicks"] == 1
        assert record["conversions"] == 1
        assert record["revenue"] == 30

    def test_json_newest_first(self, store, make_link, db_conn):
        old = make_link()
        new = make_link()
        db_conn.execute(
            "UPDATE affiliate_links SET created_at = '2020-01-01T00:00:00.000Z' WHERE id = ?",
            (old,),
        )
        db_conn.commit()
        ids = [r["id"] for r in json.loads(store.export_all(ExportFormat.JSON))]
        assert ids == [new, old]

    def test_csv_has_row_per_link(self, store, make_link):
        make_link()
        make_link()
        lines = store.export_all("csv").split("\n")
        assert lines[0] == ",".join(CSV_HEADERS)
        assert len(lines) == 3
