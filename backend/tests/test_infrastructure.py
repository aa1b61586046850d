"""Tests for settings, error types, logging setup and the default DB session helpers."""

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from planrun.config import Settings
from planrun.core.errors import PlanError, PlanSaveError, PlanStructureError
from planrun.core.logging import setup_logging
from planrun.db.session import close_db, get_db, init_db
from planrun.services.day_normalizer import NormalizerDefaults


def test_sync_database_url_drops_async_driver():
    s = Settings(database_url="postgresql+asyncpg://u:p@db:5432/planrun")
    assert s.sync_database_url == "postgresql://u:p@db:5432/planrun"
    assert Settings(database_url="sqlite+aiosqlite:///plan.db").sync_database_url == "sqlite:///plan.db"


def test_normalizer_defaults_from_settings():
    s = Settings(plan_default_warmup_km=3.0, plan_default_cooldown_km=1.0)
    defaults = NormalizerDefaults.from_settings(s)
    assert (defaults.warmup_km, defaults.cooldown_km) == (3.0, 1.0)
    assert defaults.exercise_name == "Упражнение"


def test_error_hierarchy():
    assert issubclass(PlanStructureError, PlanError)
    assert issubclass(PlanStructureError, ValueError)
    assert issubclass(PlanSaveError, PlanError)
    assert not issubclass(PlanSaveError, ValueError)


def test_setup_logging_enables_debug_for_package():
    setup_logging()
    assert logging.getLogger("planrun").level == logging.DEBUG


@pytest.mark.asyncio
async def test_init_db_get_db_and_close_db():
    await init_db()
    gen = get_db()
    session = await gen.__anext__()
    assert isinstance(session, AsyncSession)
    r = await session.execute(text("SELECT 1"))
    assert r.scalar() == 1
    await gen.aclose()
    await close_db()
