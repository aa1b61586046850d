"""
Normalize a raw generator plan ({"weeks": [{"days": [...7 days]}]}) into a CanonicalSchedule.
Pure: no I/O, deterministic in (raw_plan, start_date, week_number_offset).
Content anomalies become warnings; only a missing/non-list weeks field is fatal.
"""

from collections.abc import Mapping
from datetime import date, datetime, timedelta

from planrun.core.errors import PlanStructureError
from planrun.schemas.plan import CanonicalSchedule, CanonicalWeek
from planrun.services.day_normalizer import NormalizerDefaults, normalize_day, normalize_training_type
from planrun.services.pace import round_half_up

DAYS_PER_WEEK = 7


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def parse_plan_date(value: date | str) -> date:
    """Accept a date or an ISO string (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise PlanStructureError(f"Некорректная дата плана: {value!r}")


def ensure_plan_structure(raw_plan: object) -> list:
    """Return raw_plan["weeks"] or raise PlanStructureError when it is missing or not a list."""
    raw_weeks = raw_plan.get("weeks") if isinstance(raw_plan, Mapping) else None
    if not isinstance(raw_weeks, list):
        raise PlanStructureError("План не содержит данных о неделях")
    return raw_weeks


def normalize_plan(
    raw_plan: Mapping,
    start_date: date | str,
    week_number_offset: int = 0,
    defaults: NormalizerDefaults | None = None,
) -> CanonicalSchedule:
    """
    Week i (0-based) gets week_number = i + 1 + week_number_offset and starts on the Monday of
    start_date + 7*i days, so a recalculated tail starts in the start_date week while its
    numbering continues the kept weeks.
    """
    raw_weeks = ensure_plan_structure(raw_plan)
    if week_number_offset < 0:
        raise PlanStructureError(f"Смещение номера недели не может быть отрицательным: {week_number_offset}")
    start = parse_plan_date(start_date)
    defaults = defaults or NormalizerDefaults.from_settings()

    warnings: list[str] = []
    weeks: list[CanonicalWeek] = []
    for week_index, raw_week in enumerate(raw_weeks):
        week_number = week_index + 1 + week_number_offset
        week_start = monday_of(start + timedelta(days=DAYS_PER_WEEK * week_index))

        raw_days = raw_week.get("days") if isinstance(raw_week, Mapping) else None
        if not isinstance(raw_days, list):
            # Keep the empty week so numbering stays contiguous
            warnings.append(f"Неделя {week_number}: поле days не является массивом")
            weeks.append(CanonicalWeek(week_number=week_number, start_date=week_start))
            continue
        if len(raw_days) != DAYS_PER_WEEK:
            warnings.append(f"Неделя {week_number}: ожидается 7 дней, получено {len(raw_days)}")

        days = []
        volume = 0.0
        for day_index, raw_day in enumerate(raw_days):
            if not isinstance(raw_day, Mapping):
                warnings.append(f"Неделя {week_number}, день {day_index}: не является объектом")
                continue
            day_of_week = day_index % DAYS_PER_WEEK + 1
            on = week_start + timedelta(days=day_of_week - 1)
            day = normalize_day(raw_day, on, day_of_week, defaults)

            if day.type != normalize_training_type(raw_day.get("type")):
                original = raw_day.get("type") or "rest"
                warnings.append(
                    f"Неделя {week_number}, {on.isoformat()}: тип '{original}' переопределён в '{day.type.value}'"
                )
            if day.distance_km is not None and day.distance_km > 0:
                volume += day.distance_km
            days.append(day)

        weeks.append(
            CanonicalWeek(
                week_number=week_number,
                start_date=week_start,
                total_volume_km=round_half_up(volume, 1),
                days=days,
            )
        )

    return CanonicalSchedule(weeks=weeks, warnings=warnings)
