"""Shared fixtures: an in-memory database with a controllable clock."""

from datetime import datetime, timezone

import pytest

from evolvefit.config import AppConfig
from evolvefit.core.models import (
    ActivityLevel,
    FitnessProfile,
    Gender,
    Goal,
    MacroBreakdown,
    MealEntry,
)
from evolvefit.shell.auth import hash_password
from evolvefit.shell.database import FitnessDatabase
from evolvefit.shell.kv_store import MemoryKeyValueStore


ADMIN_EMAIL = "coach@evolvefit.app"
ADMIN_PASSWORD = "admin-pass"


class FakeClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(scope="session")
def admin_password_hash():
    return hash_password(ADMIN_PASSWORD, iterations=1000)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def config(admin_password_hash):
    return AppConfig(
        timezone="UTC",
        admin_email=ADMIN_EMAIL,
        admin_password_hash=admin_password_hash,
    )


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def db(store, config, clock):
    return FitnessDatabase(store, config, clock)


def _make_profile(**overrides) -> FitnessProfile:
    fields = dict(
        name="Asha",
        age=25,
        gender=Gender.MALE,
        height=175,
        current_weight=80,
        goal_weight=75,
        activity=ActivityLevel.MODERATELY_ACTIVE,
        goal=Goal.MUSCLE_GAIN,
    )
    fields.update(overrides)
    return FitnessProfile(**fields)


def _make_meal(timestamp: datetime, calories=500, protein=30, carbs=50, fats=20, fiber=None, name="Meal") -> MealEntry:
    return MealEntry(
        name=name,
        timestamp=timestamp,
        macros=MacroBreakdown(calories=calories, protein=protein, carbs=carbs, fats=fats, fiber=fiber),
    )


@pytest.fixture
def make_profile():
    return _make_profile


@pytest.fixture
def make_meal():
    return _make_meal
