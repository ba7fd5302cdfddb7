"""
Shared fixtures for the savings challenge test suite.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from stackr.core.catalog import ChallengeCatalog
from stackr.core.lifecycle import ChallengeLifecycle
from stackr.core.persistence import ChallengeStore, InMemoryStorage


SMALL_TEMPLATES = [
    {
        "id": "hundred",
        "title": "Hundred Dollar Challenge",
        "description": "Save $100",
        "duration_days": 10,
        "target_amount": 100,
        "difficulty": "easy",
        "savings_frequency": "daily",
        "tip_amount": 10,
        "milestones": [
            {"progress_threshold": 25, "reward": "A"},
            {"progress_threshold": 50, "reward": "B"},
            {"progress_threshold": 100, "reward": "C"},
        ],
    },
    {
        "id": "big",
        "title": "Big Saver Challenge",
        "description": "Save $1000",
        "duration_days": 100,
        "target_amount": 1000,
        "difficulty": "hard",
        "savings_frequency": "weekly",
        "tip_amount": 70,
        "milestones": [
            {"progress_threshold": 50, "reward": "Halfway"},
            {"progress_threshold": 100, "reward": "Done"},
        ],
    },
]


class FakeClock:
    """Controllable clock; advance() moves time forward"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def small_catalog():
    return ChallengeCatalog(SMALL_TEMPLATES)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return ChallengeStore(storage)


@pytest.fixture
def notices():
    return []


@pytest.fixture
def lifecycle(store, small_catalog, clock, notices):
    return ChallengeLifecycle(
        "user-1",
        store,
        catalog=small_catalog,
        clock=clock,
        rng=random.Random(42),
        notifier=notices.append,
    ).load()
