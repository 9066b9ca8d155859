"""Shared fixtures: in-memory SQLite database, listing factory, fake source."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CMC_API_KEY", "test-cmc-key")
os.environ.setdefault("ADMIN_API_SECRET", "test-admin-secret")

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.ingestion.base import BaseListingSource
from app.models import Base
from app.schemas.cmc import CMCListing

FIXED_NOW = datetime(2026, 2, 18, 15, 30, tzinfo=timezone.utc)


def listing_payload(**overrides: Any) -> Dict[str, Any]:
    """A raw CoinMarketCap listing entry, Bitcoin by default."""
    usd = {
        "price": 50000.0,
        "volume_24h": 30000000000.0,
        "market_cap": 950000000000.0,
        "percent_change_24h": 1.5,
        "last_updated": "2026-02-18T00:00:00Z",
    }
    usd.update(overrides.pop("usd", {}))
    payload = {
        "id": 1,
        "name": "Bitcoin",
        "symbol": "BTC",
        "slug": "bitcoin",
        "cmc_rank": 1,
        "num_market_pairs": 1000,
        "circulating_supply": 19000000.0,
        "total_supply": 21000000.0,
        "max_supply": 21000000.0,
        "date_added": "2013-04-28T00:00:00Z",
        "tags": ["mineable", "pow"],
        "platform": None,
        "quote": {"USD": usd},
    }
    payload.update(overrides)
    return payload


def make_listing(**overrides: Any) -> CMCListing:
    return CMCListing.model_validate(listing_payload(**overrides))


class FakeListingSource(BaseListingSource):
    """In-memory listing provider recording the limits it was asked for."""

    name = "fake"

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.records = records or []
        self.error = error
        self.calls: List[int] = []

    async def fetch_top_listing(self, limit: int) -> List[Dict[str, Any]]:
        self.calls.append(limit)
        if self.error is not None:
            raise self.error
        return list(self.records)


class StubConfigStore:
    def __init__(self, values: Optional[Dict[str, int]] = None):
        self.values = values or {}

    def get_int(self, key: str, default: int) -> int:
        return self.values.get(key, default)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
