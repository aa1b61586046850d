"""Calendar view of a user's stored plan, read through the per-user plan cache."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from planrun.core.plan_cache import PlanCache, get_plan_cache
from planrun.models.plan_day import PlanDay
from planrun.models.plan_week import PlanWeek
from planrun.schemas.plan import ExerciseCategory
from planrun.services.day_normalizer import RUN_TYPES
from planrun.services.pace import format_number, round_half_up

logger = logging.getLogger(__name__)

DAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
RUN_DAY_TYPES = frozenset(t.value for t in RUN_TYPES)


def _format_volume(km: float) -> str:
    return f"{format_number(round_half_up(km, 1))} км"


def _week_view(week: PlanWeek) -> dict:
    days: dict[str, dict | None] = {key: None for key in DAY_KEYS}
    run_km = 0.0
    for day in week.days:
        if not 1 <= day.day_of_week <= 7:
            continue
        view = {"type": day.type, "text": day.description}
        if day.is_key_workout:
            view["key"] = True
        days[DAY_KEYS[day.day_of_week - 1]] = view
        if day.type in RUN_DAY_TYPES:
            for ex in day.exercises:
                if ex.category == ExerciseCategory.RUN.value and ex.distance_m:
                    run_km += ex.distance_m / 1000.0

    # Volume from run exercises when present, else the stored column
    if run_km > 0:
        volume = _format_volume(run_km)
    elif week.total_volume:
        volume = _format_volume(week.total_volume)
    else:
        volume = ""
    return {
        "number": week.week_number,
        "start_date": week.start_date.isoformat(),
        "total_volume": volume,
        "days": days,
    }


async def load_training_plan(
    session: AsyncSession,
    user_id: int,
    *,
    cache: PlanCache | None = None,
    use_cache: bool = True,
) -> dict:
    """Return {"weeks": [{"number", "start_date", "total_volume", "days": {"mon": {...} | None, ...}}]}."""
    cache = cache or get_plan_cache()
    if use_cache:
        cached = await cache.get(user_id)
        if cached is not None:
            logger.debug("Training plan loaded from cache for user_id=%s", user_id)
            return cached

    r = await session.execute(
        select(PlanWeek)
        .where(PlanWeek.user_id == user_id)
        .order_by(PlanWeek.week_number)
        .options(selectinload(PlanWeek.days).selectinload(PlanDay.exercises))
        .execution_options(populate_existing=True)
    )
    view = {"weeks": [_week_view(week) for week in r.scalars().all()]}

    if use_cache:
        await cache.set(user_id, view)
        logger.debug("Training plan loaded from DB and cached for user_id=%s", user_id)
    return view
