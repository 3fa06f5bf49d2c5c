"""Shared pytest fixtures for Folio CRM tests.

Fixtures:
    - today: The pinned reference date
    - fixed_clock: Clock frozen at 09:00 on that date
    - make_contact: Factory for contacts N days since last contact
    - repo: Empty in-memory repository
    - memory_db: Fresh in-memory SQLite database
    - mock_config: Test configuration with temp paths
"""

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Generator

import pytest

from folio.core.clock import FixedClock
from folio.core.config import Config
from folio.db.database import Database
from folio.db.models import Contact, Stage
from folio.db.repository import InMemoryContactRepository

TODAY = date(2026, 3, 2)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def make_contact() -> Callable[..., Contact]:
    """Build a Contact whose last_contact is `days` before TODAY."""

    def _make(
        days: int = 0,
        stage: Stage = Stage.PROSPECT,
        score: int = 70,
        name: str = "Test Founder",
        company: str = "Test Co",
        contact_id: int | None = None,
        **kwargs,
    ) -> Contact:
        return Contact(
            id=contact_id,
            name=name,
            company=company,
            stage=stage,
            score=score,
            last_contact=TODAY - timedelta(days=days),
            created_at=kwargs.pop("created_at", date(2025, 1, 1)),
            **kwargs,
        )

    return _make


@pytest.fixture
def repo() -> InMemoryContactRepository:
    return InMemoryContactRepository()


@pytest.fixture
def memory_db() -> Generator[Database, None, None]:
    """Create an in-memory database for fast tests.

    Yields:
        Database using :memory:, no cleanup needed
    """
    db = Database(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def mock_config(tmp_path: Path) -> Config:
    """Test configuration with temp paths."""
    return Config(
        db_path=tmp_path / "test.db",
        log_path=tmp_path / "logs",
        debug=True,
    )
