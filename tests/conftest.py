"""Shared test fixtures for the affiliate links store."""

import sys
from pathlib import Path

import pytest

# Ensure the package is importable without installation
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from affiliate_links.common.database import get_connection, init_db
from affiliate_links.link_store.models import NewAffiliateLink
from affiliate_links.link_store.store import LinkStore


@pytest.fixture
def temp_db(tmp_path) -> Path:
    """Provide the path of an initialized temporary SQLite database."""
    db_file = tmp_path / "test_affiliate_links.db"
    init_db(db_file)
    return db_file


@pytest.fixture
def db_conn(temp_db):
    """Provide an open SQLite connection to temp_db."""
    conn = get_connection(temp_db)
    yield conn
    conn.close()


@pytest.fixture
def store(db_conn) -> LinkStore:
    """A LinkStore bound to the temp database connection."""
    return LinkStore(db_conn)


@pytest.fixture
def sample_link_data() -> dict:
    """Return sample link input as a client would send it (camelCase)."""
    return {
        "program": "Amazon",
        "product": "Ergonomic Office Chair",
        "link": "https://amzn.to/office-chair-123",
        "commissionRate": 4.5,
        "category": "office-furniture",
        "tags": ["chair", "ergonomic"],
        "expiry": "2027-01-01T00:00:00Z",
        "notes": "Top seller during Q4",
    }


@pytest.fixture
def make_link(store):
    """Factory storing a link with sensible defaults; returns its id."""
    counter = {"n": 0}

    def _make(**overrides) -> str:
        counter["n"] += 1
        data = {
            "program": "ShareASale",
            "product": f"Product {counter['n']}",
            "link": f"https://example.com/aff/{counter['n']}",
            "commission_rate": 5.0,
            "category": "tech",
        }
        data.update(overrides)
        return store.create(NewAffiliateLink(**data))

    return _make
