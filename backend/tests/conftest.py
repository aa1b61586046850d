"""Pytest configuration and shared fixtures for plan tests."""

import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test settings before planrun imports so config/engine use them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("PLAN_CACHE_ENABLED", "false")

from planrun.db.base import Base
from planrun.models import User  # importing planrun.models registers all plan tables


class FakePlanCache:
    """In-memory stand-in for PlanCache: keeps views in a dict and records invalidations."""

    def __init__(self):
        self.store: dict[int, dict] = {}
        self.invalidated: list[int] = []

    async def get(self, user_id: int):
        return self.store.get(user_id)

    async def set(self, user_id: int, view: dict):
        self.store[user_id] = view

    async def invalidate(self, user_id: int):
        self.invalidated.append(user_id)
        self.store.pop(user_id, None)


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory SQLite per test; StaticPool keeps one shared connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


async def _create_user(session_maker, email: str) -> int:
    async with session_maker() as s:
        user = User(email=email)
        s.add(user)
        await s.commit()
        return user.id


@pytest_asyncio.fixture
async def user_id(session_maker):
    """Committed user row; returns its id."""
    return await _create_user(session_maker, "runner@test.com")


@pytest_asyncio.fixture
async def other_user_id(session_maker):
    return await _create_user(session_maker, "other@test.com")


@pytest.fixture
def fake_cache():
    return FakePlanCache()


def sample_week() -> dict:
    """
    One generator week mixing both shapes. Run volume: 10 + 10.5 + 8 + 18 = 46.5 km.
    Exercises: easy, interval, tempo, long get one run each; the OFP day parses to two.
    """
    return {
        "days": [
            {"type": "easy_run", "distance_km": 10, "pace": "5:00"},
            {"type": "rest"},
            {
                "type": "interval",
                "warmup_km": 2,
                "reps": 5,
                "interval_m": 1000,
                "rest_m": 400,
                "interval_pace": "4:00",
                "cooldown_km": 1.5,
            },
            {"type": "rest"},
            {"type": "tempo", "distance_km": 8, "pace": "4:30"},
            {"type": "long-run", "distance_km": 18, "pace": "5:40"},
            {"type": "ofp", "description": "Приседания — 3×10, 20 кг\nПланка — 1 мин"},
        ]
    }


@pytest.fixture
def make_plan():
    """make_plan(n) -> raw plan with n copies of sample_week()."""

    def _make(weeks: int = 1) -> dict:
        return {"weeks": [sample_week() for _ in range(weeks)]}

    return _make


@pytest.fixture
def easy_plan():
    """easy_plan(n) -> raw plan of n weeks, each: 5 km easy on Monday, rest otherwise."""

    def _make(weeks: int = 1) -> dict:
        return {
            "weeks": [
                {"days": [{"type": "easy", "distance_km": 5, "pace": "6:00"}] + [{"type": "rest"}] * 6}
                for _ in range(weeks)
            ]
        }

    return _make
