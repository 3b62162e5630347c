"""Tests for the command-line entry point."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest

from affiliate_links.link_store import main as cli
from affiliate_links.link_store.models import NewAffiliateLink
from affiliate_links.link_store.store import LinkStore


@pytest.fixture(autouse=True)
def _reset_logging():
    """main() attaches a stderr handler bound to pytest's capture stream."""
    yield
    logging.getLogger("affiliate_links").handlers.clear()


def _seed(db_path) -> str:
    store = LinkStore.open(db_path)
    try:
        link_id = store.create(
            NewAffiliateLink(
                program="Impact",
                product="Yoga Mat",
                link="https://impact.test/mat",
                commission_rate=12,
                category="fitness",
            )
        )
        store.record_click(link_id, source="social")
        return link_id
    finally:
        store.close()


class TestCLI:
    def test_init_db(self, tmp_path):
        db_file = tmp_path / "cli.db"
        assert cli.main(["--db", str(db_file), "init-db"]) == 0
        assert db_file.exists()

    def test_export_to_file(self, tmp_path):
        db_file = tmp_path / "cli.db"
        _seed(db_file)
        out = tmp_path / "exports" / "links.csv"
        assert cli.main(["--db", str(db_file), "export", "--format", "csv", "--output", str(out)]) == 0
        lines = out.read_text(encoding="utf-8").split("\n")
        assert lines[0].startswith("ID,Program")
        assert '"Yoga Mat"' in lines[1]

    def test_export_to_stdout(self, tmp_path, capsys):
        db_file = tmp_path / "cli.db"
        link_id = _seed(db_file)
        assert cli.main(["--db", str(db_file), "export"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data[0]["id"] == link_id

    def test_stats(self, tmp_path, capsys):
        db_file = tmp_path / "cli.db"
        link_id = _seed(db_file)
        assert cli.main(["--db", str(db_file), "stats", "--link-id", link_id]) == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["clicks"] == 1
        assert stats["conversionRate"] == "0.00%"

    def test_stats_missing_link_exits_nonzero(self, tmp_path):
        db_file = tmp_path / "cli.db"
        assert cli.main(["--db", str(db_file), "stats", "--link-id", "aff_missing"]) == 1

    def test_serve_is_default(self, tmp_path):
        db_file = tmp_path / "cli.db"
        with patch.object(cli, "run_stdio") as run_stdio, patch.object(cli.asyncio, "run") as run:
            assert cli.main(["--db", str(db_file)]) == 0
        run.assert_called_once()
        run_stdio.assert_called_once()
        assert isinstance(run_stdio.call_args.args[0], LinkStore)
