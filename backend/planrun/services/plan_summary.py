"""Plain-text rendering of a normalized plan, used to brief a reviewer about a fresh plan."""

from planrun.schemas.plan import CanonicalSchedule
from planrun.services.day_normalizer import DAY_TITLES

WEEKDAY_NAMES = ("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс")
KEY_MARK = " [ключевая]"


def build_plan_summary(schedule: CanonicalSchedule) -> str:
    lines: list[str] = []
    for week in schedule.weeks:
        lines.append(f"Неделя {week.week_number}:")
        for day in week.days:
            weekday = WEEKDAY_NAMES[day.day_of_week - 1]
            text = day.description.strip() or DAY_TITLES.get(day.type, day.type.value)
            mark = KEY_MARK if day.is_key_workout else ""
            lines.append(f"  {weekday}: {text}{mark}")
        lines.append("")
    return "\n".join(lines)
