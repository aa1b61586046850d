"""
Persist normalized training plans (training_plan_weeks -> training_plan_days -> training_day_exercises).

Only this module writes the plan tables. Every operation is one transaction on the given
session: either everything is committed or the session is rolled back and PlanSaveError
is raised, leaving the stored plan exactly as it was. The user's cached calendar view is
invalidated after each successful commit.
"""

import logging
import math
from collections.abc import Awaitable, Callable, Mapping
from datetime import date, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from planrun.config import settings
from planrun.core.errors import PlanSaveError
from planrun.core.plan_cache import PlanCache, get_plan_cache
from planrun.models.plan_day import PlanDay
from planrun.models.plan_day_exercise import PlanDayExercise
from planrun.models.plan_week import PlanWeek
from planrun.schemas.plan import (
    CanonicalDay,
    CanonicalExercise,
    CanonicalSchedule,
    CanonicalWeek,
    DayType,
    ExerciseCategory,
)
from planrun.services.day_normalizer import NormalizerDefaults
from planrun.services.plan_normalizer import (
    DAYS_PER_WEEK,
    ensure_plan_structure,
    monday_of,
    normalize_plan,
    parse_plan_date,
)

logger = logging.getLogger(__name__)

ALLOWED_DAY_TYPES = frozenset(t.value for t in DayType)


def current_week_monday(today: date | None = None) -> date:
    """Cutoff used by recalculation: Monday of the current week."""
    return monday_of(today or date.today())


def _safe_day_type(value: object) -> str:
    """Day type for the type column; anything outside the enum is stored as rest."""
    raw = value.value if isinstance(value, DayType) else value
    if raw in ALLOWED_DAY_TYPES:
        return raw
    logger.warning("Plan saver: day type %r is not allowed, storing 'rest'", value)
    return DayType.REST.value


def _exercise_values(user_id: int, day_id: int, exercise: CanonicalExercise) -> dict:
    if exercise.category == ExerciseCategory.RUN:
        return {
            "user_id": user_id,
            "plan_day_id": day_id,
            "category": ExerciseCategory.RUN.value,
            "name": exercise.name,
            "distance_m": exercise.distance_m,
            "duration_sec": exercise.duration_sec,
            "pace": exercise.pace,
            "notes": exercise.notes,
        }
    return {
        "user_id": user_id,
        "plan_day_id": day_id,
        "category": exercise.category.value,
        "name": exercise.name,
        "sets": exercise.sets,
        "reps": exercise.reps,
        "distance_m": exercise.distance_m,
        "duration_sec": exercise.duration_sec,
        "weight_kg": exercise.weight_kg,
        "pace": exercise.pace,
        "notes": exercise.notes,
        "order_index": exercise.order_index,
    }


async def _insert_exercises(
    session: AsyncSession, user_id: int, day_id: int, exercises: list[CanonicalExercise]
) -> None:
    for exercise in exercises:
        session.add(PlanDayExercise(**_exercise_values(user_id, day_id, exercise)))
    await session.flush()


async def _insert_day(session: AsyncSession, user_id: int, week_id: int, day: CanonicalDay) -> int:
    row = PlanDay(
        user_id=user_id,
        week_id=week_id,
        day_of_week=day.day_of_week,
        type=_safe_day_type(day.type),
        description=day.description,
        is_key_workout=day.is_key_workout,
        date=day.date,
    )
    session.add(row)
    await session.flush()
    return row.id


async def _insert_weeks(session: AsyncSession, user_id: int, weeks: list[CanonicalWeek]) -> None:
    for week in weeks:
        week_row = PlanWeek(
            user_id=user_id,
            week_number=week.week_number,
            start_date=week.start_date,
            total_volume=week.total_volume_km,
        )
        session.add(week_row)
        await session.flush()
        for day in week.days:
            day_id = await _insert_day(session, user_id, week_row.id, day)
            await _insert_exercises(session, user_id, day_id, day.exercises)


async def _delete_all_weeks(session: AsyncSession, user_id: int) -> None:
    user_day_ids = select(PlanDay.id).where(PlanDay.user_id == user_id)
    await session.execute(
        delete(PlanDayExercise)
        .where(PlanDayExercise.plan_day_id.in_(user_day_ids))
        .execution_options(synchronize_session=False)
    )
    await session.execute(
        delete(PlanDay).where(PlanDay.user_id == user_id).execution_options(synchronize_session=False)
    )
    await session.execute(
        delete(PlanWeek).where(PlanWeek.user_id == user_id).execution_options(synchronize_session=False)
    )


async def _delete_weeks_from(session: AsyncSession, user_id: int, cutoff: date) -> int:
    """Delete weeks starting on/after cutoff with their days and exercises. Returns deleted week count."""
    r = await session.execute(
        select(PlanWeek.id).where(PlanWeek.user_id == user_id, PlanWeek.start_date >= cutoff)
    )
    week_ids = list(r.scalars().all())
    if not week_ids:
        return 0
    future_day_ids = select(PlanDay.id).where(PlanDay.user_id == user_id, PlanDay.week_id.in_(week_ids))
    await session.execute(
        delete(PlanDayExercise)
        .where(PlanDayExercise.plan_day_id.in_(future_day_ids))
        .execution_options(synchronize_session=False)
    )
    await session.execute(
        delete(PlanDay)
        .where(PlanDay.user_id == user_id, PlanDay.week_id.in_(week_ids))
        .execution_options(synchronize_session=False)
    )
    await session.execute(
        delete(PlanWeek).where(PlanWeek.id.in_(week_ids)).execution_options(synchronize_session=False)
    )
    return len(week_ids)


async def _write_atomically(
    session: AsyncSession,
    user_id: int,
    action: str,
    writes: Callable[[], Awaitable[None]],
    cache: PlanCache | None,
) -> None:
    try:
        await writes()
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Plan %s failed for user_id=%s, rolled back: %s", action, user_id, e)
        raise PlanSaveError(f"Ошибка сохранения плана: {e}") from e
    await (cache or get_plan_cache()).invalidate(user_id)


def _log_warnings(user_id: int, schedule: CanonicalSchedule) -> None:
    for warning in schedule.warnings:
        logger.warning("Plan normalization (user_id=%s): %s", user_id, warning)


async def get_last_kept_week_number(session: AsyncSession, user_id: int, cutoff_date: date | str) -> int:
    """Highest week_number among weeks starting before cutoff_date; 0 when there are none."""
    cutoff = parse_plan_date(cutoff_date)
    r = await session.execute(
        select(func.max(PlanWeek.week_number)).where(
            PlanWeek.user_id == user_id,
            PlanWeek.start_date < cutoff,
        )
    )
    return int(r.scalar() or 0)


async def save_training_plan(
    session: AsyncSession,
    user_id: int,
    raw_plan: Mapping,
    start_date: date | str,
    *,
    cache: PlanCache | None = None,
    defaults: NormalizerDefaults | None = None,
) -> CanonicalSchedule:
    """
    Replace the user's whole plan with raw_plan starting at start_date (first generation).
    Raises PlanStructureError before touching the DB, PlanSaveError after rollback.
    """
    schedule = normalize_plan(raw_plan, start_date, 0, defaults)
    _log_warnings(user_id, schedule)

    async def writes() -> None:
        await _delete_all_weeks(session, user_id)
        await _insert_weeks(session, user_id, schedule.weeks)

    await _write_atomically(session, user_id, "save", writes, cache)
    logger.info("Plan saved for user_id=%s: %d weeks", user_id, len(schedule.weeks))
    return schedule


async def save_training_plan_from_cutoff(
    session: AsyncSession,
    user_id: int,
    raw_plan: Mapping,
    cutoff_date: date | str,
    *,
    cache: PlanCache | None = None,
    defaults: NormalizerDefaults | None = None,
) -> CanonicalSchedule:
    """
    Recalculation: keep weeks starting before cutoff_date untouched, replace everything from
    the cutoff week on with raw_plan. New weeks start in the cutoff week and are numbered on
    from the last kept week. The cutoff is rolled back to its Monday so the boundary always
    falls between two weeks.
    """
    ensure_plan_structure(raw_plan)
    cutoff = monday_of(parse_plan_date(cutoff_date))

    last_kept_week = await get_last_kept_week_number(session, user_id, cutoff)
    schedule = normalize_plan(raw_plan, cutoff, last_kept_week, defaults)
    _log_warnings(user_id, schedule)

    async def writes() -> None:
        deleted = await _delete_weeks_from(session, user_id, cutoff)
        logger.debug("Plan graft for user_id=%s: replacing %d weeks from %s", user_id, deleted, cutoff)
        await _insert_weeks(session, user_id, schedule.weeks)

    await _write_atomically(session, user_id, "recalculation", writes, cache)
    logger.info(
        "Plan recalculated for user_id=%s: kept %d weeks, saved %d from %s",
        user_id,
        last_kept_week,
        len(schedule.weeks),
        cutoff.isoformat(),
    )
    return schedule


def _empty_week(week_number: int, week_start: date) -> CanonicalWeek:
    days = [
        CanonicalDay(
            date=week_start + timedelta(days=i),
            day_of_week=i + 1,
            type=DayType.FREE,
            description="",
            is_key_workout=False,
        )
        for i in range(DAYS_PER_WEEK)
    ]
    return CanonicalWeek(week_number=week_number, start_date=week_start, total_volume_km=0.0, days=days)


async def create_empty_plan(
    session: AsyncSession,
    user_id: int,
    start_date: date | str,
    end_date: date | str | None = None,
    *,
    cache: PlanCache | None = None,
) -> CanonicalSchedule:
    """
    Replace the user's plan with a blank calendar for self-guided training: every day is
    'free' (room to add a workout), not rest. Length: weeks up to end_date, else the default.
    """
    start = parse_plan_date(start_date)
    if end_date is not None:
        weeks_count = max(1, math.ceil((parse_plan_date(end_date) - start).days / DAYS_PER_WEEK))
    else:
        weeks_count = settings.empty_plan_default_weeks
    first_monday = monday_of(start)
    schedule = CanonicalSchedule(
        weeks=[
            _empty_week(n, first_monday + timedelta(days=DAYS_PER_WEEK * (n - 1)))
            for n in range(1, weeks_count + 1)
        ]
    )

    async def writes() -> None:
        await _delete_all_weeks(session, user_id)
        await _insert_weeks(session, user_id, schedule.weeks)

    await _write_atomically(session, user_id, "empty calendar", writes, cache)
    logger.info("Empty calendar created for user_id=%s: %d weeks", user_id, weeks_count)
    return schedule
