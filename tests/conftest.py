"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]

# Add package to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test environment variables before importing the app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("OTEL_LOG_RECORD_FORMAT", "console")

from transit_fraud.core.config import ScoringConfig, Settings  # noqa: E402
from transit_fraud.domain.models.transaction import (  # noqa: E402
    TransactionInput,
    TransactionRecord,
    TransactionStatus,
)
from transit_fraud.domain.randomness import FixedRandomSource  # noqa: E402
from transit_fraud.domain.scoring import RiskScorer  # noqa: E402
from transit_fraud.persistence.memory_repository import (  # noqa: E402
    InMemoryTransactionRepository,
)

# Mid-morning, outside the off-hours window
FIXED_NOW = datetime(2025, 4, 14, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def scoring_config() -> ScoringConfig:
    """Default scoring policy."""
    return ScoringConfig()


@pytest.fixture
def scorer(scoring_config) -> RiskScorer:
    """Scorer with the random term removed."""
    return RiskScorer(scoring_config, random_source=FixedRandomSource(0.0), clock=lambda: FIXED_NOW)


@pytest.fixture
def sample_input() -> TransactionInput:
    return TransactionInput(
        ticket_id="T-1007",
        timestamp=datetime(2025, 4, 14, 9, 15, 0, tzinfo=UTC),
        station="Central Station",
        amount=12.0,
    )


@pytest.fixture
def make_record() -> Callable[..., TransactionRecord]:
    """Factory for stored transaction records."""

    def _make(
        ticket_id: str = "T-1001",
        station: str = "West Terminal",
        amount: float = 12.0,
        fraud_score: float = 0.1,
        status: TransactionStatus = TransactionStatus.CLEARED,
        timestamp: datetime | None = None,
        created_at: datetime | None = None,
    ) -> TransactionRecord:
        return TransactionRecord(
            ticket_id=ticket_id,
            station=station,
            amount=amount,
            fraud_score=fraud_score,
            status=status,
            timestamp=timestamp or FIXED_NOW,
            created_at=created_at or timestamp or FIXED_NOW,
        )

    return _make


@pytest.fixture
def memory_store() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def test_settings() -> Settings:
    return Settings()


@pytest.fixture
def test_app(test_settings, memory_store):
    """FastAPI app with state populated the way the lifespan does it."""
    from transit_fraud.main import create_app

    app = create_app()
    app.state.settings = test_settings
    app.state.store = memory_store
    app.state.scorer = RiskScorer(
        test_settings.scoring,
        random_source=FixedRandomSource(0.0),
        clock=lambda: FIXED_NOW,
    )
    return app


@pytest.fixture
async def client(test_app):
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
