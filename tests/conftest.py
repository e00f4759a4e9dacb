from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from contentlab.adapters.memory import InMemoryContentRepo, InMemoryScheduleRepo
from contentlab.app_shell.context import ServiceContext
from contentlab.rules.loader import load_rules
from contentlab.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@dataclass
class FixedClock:
    """Mock clock for testing."""

    current_time: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)
    )

    def now_utc(self) -> datetime:
        return self.current_time

    def advance(self, seconds: int) -> None:
        """Advance time for testing."""
        self.current_time += timedelta(seconds=seconds)


@pytest.fixture
def rules() -> Rules:
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def content_repo() -> InMemoryContentRepo:
    return InMemoryContentRepo()


@pytest.fixture
def schedule_repo() -> InMemoryScheduleRepo:
    return InMemoryScheduleRepo()


@pytest.fixture
def ctx(content_repo, schedule_repo, rules, clock) -> ServiceContext:
    return ServiceContext.from_repos(content_repo, schedule_repo, rules, clock)


@pytest.fixture
def migrations_dir() -> str:
    return str(PROJECT_ROOT / "migrations")
