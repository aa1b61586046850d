"""
Normalize one generator day into a CanonicalDay.

The generator answers in two shapes: legacy (free-text description + numbers) and
structured (warmup/reps/segments/exercises fields, no description). The shape is decided
once by is_structured(); each shape has its own pure function, both ending in
_canonical_day(), which clears rest days and builds exercises.
Never raises: malformed input degrades to a conservative day.
"""

import logging
import re
from collections.abc import Mapping
from datetime import date

from pydantic import BaseModel, ConfigDict, ValidationError

from planrun.config import Settings, settings
from planrun.schemas.plan import (
    CanonicalDay,
    CanonicalExercise,
    DayType,
    ExerciseCategory,
    LegacyDay,
    StructuredDay,
)
from planrun.services.exercise_parser import parse_exercise_lines
from planrun.services.pace import (
    calculate_duration_minutes,
    format_duration_hms,
    format_number,
    parse_pace_to_seconds,
    round_half_up,
)

logger = logging.getLogger(__name__)

# Generator tokens -> canonical type; tokens already equal to a DayType value map to themselves
TYPE_SYNONYMS: dict[str, DayType] = {
    "easy_run": DayType.EASY,
    "long_run": DayType.LONG,
    "long-run": DayType.LONG,
    "marathon": DayType.LONG,
    "ofp": DayType.OTHER,
}

SIMPLE_RUN_TYPES = frozenset({DayType.EASY, DayType.LONG, DayType.TEMPO, DayType.RACE, DayType.CONTROL})
RUN_TYPES = SIMPLE_RUN_TYPES | {DayType.INTERVAL, DayType.FARTLEK}
KEY_WORKOUT_TYPES = frozenset(
    {DayType.INTERVAL, DayType.TEMPO, DayType.LONG, DayType.FARTLEK, DayType.RACE, DayType.CONTROL}
)
EXERCISE_DAY_TYPES = {DayType.OTHER: ExerciseCategory.OFP, DayType.SBU: ExerciseCategory.SBU}

TYPE_LABELS: dict[DayType, str] = {
    DayType.EASY: "Лёгкий бег",
    DayType.LONG: "Длительный бег",
    DayType.TEMPO: "Темповый бег",
    DayType.RACE: "Соревнование",
    DayType.INTERVAL: "Интервалы",
    DayType.FARTLEK: "Фартлек",
    DayType.CONTROL: "Контрольная тренировка",
}

# Titles for days whose content is empty (summary lines, blank non-rest days)
DAY_TITLES: dict[DayType, str] = {
    **TYPE_LABELS,
    DayType.OTHER: "ОФП",
    DayType.SBU: "СБУ",
    DayType.FREE: "Свободный день",
    DayType.REST: "Отдых",
}

RECOVERY_LABELS = {"jog": "трусцой", "walk": "ходьбой", "rest": "отдых"}
DEFAULT_RECOVERY_LABEL = "трусцой"

# Text that betrays a running workout hidden in a "rest" day
REST_RUN_KEYWORDS_RE = re.compile(r"бег|км|темп|мин/км|трусцой|лёгкий|легкий|дистанция|интервал", re.IGNORECASE)

# Longer daily runs are generator noise; the day keeps its text but no distance
MAX_DAY_DISTANCE_KM = 1000.0

_KEY_TRUE = {"1", "true", "yes", "да"}
_KEY_FALSE = {"0", "false", "no", "нет", ""}


class NormalizerDefaults(BaseModel):
    """Values the generator may omit that still appear in built descriptions."""

    model_config = ConfigDict(frozen=True)

    warmup_km: float = 2.0
    cooldown_km: float = 1.5
    exercise_name: str = "Упражнение"

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "NormalizerDefaults":
        s = s or settings
        return cls(warmup_km=s.plan_default_warmup_km, cooldown_km=s.plan_default_cooldown_km)


def normalize_training_type(raw_type: object) -> DayType:
    """Map a generator type token to a DayType; unknown or empty tokens become rest."""
    if not isinstance(raw_type, str) or not raw_type.strip():
        return DayType.REST
    token = raw_type.strip().lower()
    if token in TYPE_SYNONYMS:
        return TYPE_SYNONYMS[token]
    try:
        return DayType(token)
    except ValueError:
        return DayType.REST


def _filled(v: object) -> bool:
    return bool(v) and v != "0"


def is_structured(raw_day: Mapping) -> bool:
    """True when the day uses the structured-fields shape (nothing to reconcile with a description)."""
    if _filled(raw_day.get("warmup_km")) or _filled(raw_day.get("reps")) or _filled(raw_day.get("interval_m")):
        return True
    for key in ("segments", "exercises", "notes"):
        if _filled(raw_day.get(key)):
            return True
    day_type = normalize_training_type(raw_day.get("type"))
    has_description = _filled(raw_day.get("description"))
    if day_type in SIMPLE_RUN_TYPES and _filled(raw_day.get("distance_km")) and not has_description:
        return True
    return day_type == DayType.REST and not has_description


def resolve_is_key_workout(value: object, day_type: DayType) -> bool:
    """Explicit flag from the generator wins (bool, 0/1, "true"/"false"...); otherwise decided by type."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _KEY_TRUE:
            return True
        if token in _KEY_FALSE:
            return False
    return day_type in KEY_WORKOUT_TYPES


def interval_total_km(day: StructuredDay) -> float:
    warmup = day.warmup_km or 0.0
    cooldown = day.cooldown_km or 0.0
    reps = day.reps or 0
    return warmup + reps * ((day.interval_m or 0) + (day.rest_m or 0)) / 1000.0 + cooldown


def fartlek_total_km(day: StructuredDay) -> float:
    total = (day.warmup_km or 0.0) + (day.cooldown_km or 0.0)
    for seg in day.segments:
        total += (seg.reps or 0) * ((seg.distance_m or 0) + (seg.recovery_m or 0)) / 1000.0
    return total


def _warmup_cooldown(day: StructuredDay, defaults: NormalizerDefaults) -> tuple[float, float]:
    warmup = day.warmup_km if day.warmup_km is not None else defaults.warmup_km
    cooldown = day.cooldown_km if day.cooldown_km is not None else defaults.cooldown_km
    return warmup, cooldown


def _simple_run_description(day: StructuredDay, day_type: DayType) -> str:
    label = TYPE_LABELS.get(day_type, "Бег")
    dist = day.distance_km
    if dist is not None and dist > 0:
        text = f"{label}: {format_number(dist)} км"
        pace_sec = parse_pace_to_seconds(day.pace)
        if pace_sec:
            total_sec = int(round_half_up(dist * pace_sec))
            text += f" или {format_duration_hms(total_sec)}, темп {day.pace}"
        return text
    if day.notes:
        return day.notes
    if day.duration_minutes is not None and day.duration_minutes > 0:
        return f"{label}: {day.duration_minutes} мин"
    return label


def _interval_description(day: StructuredDay, defaults: NormalizerDefaults) -> str:
    warmup, cooldown = _warmup_cooldown(day, defaults)
    text = f"Разминка: {format_number(warmup)} км. {day.reps or 0}×{day.interval_m or 0}м"
    if day.interval_pace:
        text += f" в темпе {day.interval_pace}"
    if day.rest_m and day.rest_m > 0:
        recovery = RECOVERY_LABELS.get(day.rest_type or "jog", DEFAULT_RECOVERY_LABEL)
        text += f", пауза {day.rest_m}м {recovery}"
    return text + f". Заминка: {format_number(cooldown)} км"


def _fartlek_description(day: StructuredDay, defaults: NormalizerDefaults) -> str:
    warmup, cooldown = _warmup_cooldown(day, defaults)
    parts = []
    for seg in day.segments:
        part = f"{seg.reps or 0}×{seg.distance_m or 0}м"
        if seg.pace:
            part += f" в темпе {seg.pace}"
        if seg.recovery_m and seg.recovery_m > 0:
            recovery = RECOVERY_LABELS.get(seg.recovery_type or "jog", DEFAULT_RECOVERY_LABEL)
            part += f", восстановление {seg.recovery_m}м {recovery}"
        parts.append(part)
    return f"Разминка: {format_number(warmup)} км. " + ". ".join(parts) + f". Заминка: {format_number(cooldown)} км"


def _exercise_list_description(day: StructuredDay, day_type: DayType, defaults: NormalizerDefaults) -> str:
    lines = []
    for ex in day.exercises:
        name = ex.name or defaults.exercise_name
        if day_type == DayType.SBU:
            if ex.distance_m and ex.distance_m > 0:
                lines.append(f"{name} — {ex.distance_m} м")
            else:
                lines.append(name)
        elif ex.sets and ex.reps:
            line = f"{name} — {ex.sets}×{ex.reps}"
            if ex.weight_kg:
                line += f", {format_number(ex.weight_kg)} кг"
            lines.append(line)
        elif ex.duration_min:
            lines.append(f"{name} — {ex.duration_min} мин")
        else:
            lines.append(name)
    if not lines:
        return day.notes or ""
    return "\n".join(lines)


def build_description(day: StructuredDay, day_type: DayType, defaults: NormalizerDefaults) -> str:
    """Human-readable description for a structured day (same wording the calendar UI parses)."""
    if day_type in SIMPLE_RUN_TYPES:
        return _simple_run_description(day, day_type)
    if day_type == DayType.INTERVAL:
        return _interval_description(day, defaults)
    if day_type == DayType.FARTLEK:
        return _fartlek_description(day, defaults)
    if day_type in EXERCISE_DAY_TYPES:
        return _exercise_list_description(day, day_type, defaults)
    return ""


def _canonical_day(
    on: date,
    day_of_week: int,
    day_type: DayType,
    description: str,
    distance_km: float | None,
    duration_minutes: int | None,
    pace: str | None,
    key_flag: object,
    extra_exercises: list[CanonicalExercise],
) -> CanonicalDay:
    if day_type == DayType.REST:
        description, distance_km, duration_minutes, pace = "", None, None, None
        extra_exercises = []
    elif not description:
        description = DAY_TITLES[day_type]
    if distance_km is not None and distance_km > MAX_DAY_DISTANCE_KM:
        logger.warning("Day %s: distance %.0f km is out of range, dropped", on, distance_km)
        distance_km, duration_minutes = None, None

    exercises: list[CanonicalExercise] = []
    if distance_km is not None and distance_km > 0 and day_type in RUN_TYPES:
        exercises.append(
            CanonicalExercise(
                category=ExerciseCategory.RUN,
                name=f"Бег {round_half_up(distance_km, 1):.1f} км",
                distance_m=int(round_half_up(distance_km * 1000)),
                duration_sec=duration_minutes * 60 if duration_minutes and duration_minutes > 0 else None,
                pace=pace,
                notes=description,
                order_index=0,
            )
        )
    if day_type in EXERCISE_DAY_TYPES:
        exercises.extend(ex.model_copy(update={"order_index": idx}) for idx, ex in enumerate(extra_exercises))

    return CanonicalDay(
        date=on,
        day_of_week=day_of_week,
        type=day_type,
        description=description,
        distance_km=distance_km,
        duration_minutes=duration_minutes,
        pace=pace,
        is_key_workout=resolve_is_key_workout(key_flag, day_type),
        exercises=exercises,
    )


def _normalize_structured(
    day: StructuredDay, on: date, day_of_week: int, defaults: NormalizerDefaults
) -> CanonicalDay:
    day_type = day.type
    if day_type == DayType.REST and day.distance_km is not None and day.distance_km > 0:
        day_type = DayType.EASY

    distance_km = None
    pace = None
    duration = day.duration_minutes
    if day_type in SIMPLE_RUN_TYPES:
        distance_km = day.distance_km
        pace = day.pace
        if duration is None:
            duration = calculate_duration_minutes(distance_km, pace)
    elif day_type == DayType.INTERVAL:
        # Pace stays per repetition, not summarized for the day
        distance_km = round_half_up(interval_total_km(day), 1)
    elif day_type == DayType.FARTLEK:
        distance_km = round_half_up(fartlek_total_km(day), 1)

    exercises = []
    category = EXERCISE_DAY_TYPES.get(day_type)
    if category is not None:
        exercises = [
            CanonicalExercise(
                category=category,
                name=ex.name or defaults.exercise_name,
                sets=ex.sets,
                reps=ex.reps,
                weight_kg=ex.weight_kg,
                distance_m=ex.distance_m,
                duration_sec=ex.duration_min * 60 if ex.duration_min is not None else None,
            )
            for ex in day.exercises
        ]

    return _canonical_day(
        on,
        day_of_week,
        day_type,
        build_description(day, day_type, defaults),
        distance_km,
        duration,
        pace,
        day.is_key_workout,
        exercises,
    )


def _normalize_legacy(day: LegacyDay, on: date, day_of_week: int) -> CanonicalDay:
    day_type = day.type
    description = day.description or ""
    distance_km = day.distance_km
    has_distance = distance_km is not None and distance_km > 0

    if not description and has_distance:
        description = f"Бег {format_number(distance_km)} км"
        if day.pace:
            description += f" в темпе {day.pace}"

    if day_type == DayType.REST and (has_distance or REST_RUN_KEYWORDS_RE.search(description)):
        day_type = DayType.EASY

    exercises = []
    category = EXERCISE_DAY_TYPES.get(day_type)
    if category is not None and description:
        exercises = [
            CanonicalExercise(category=category, **parsed.model_dump())
            for parsed in parse_exercise_lines(description, category)
        ]

    return _canonical_day(
        on,
        day_of_week,
        day_type,
        description,
        distance_km,
        day.duration_minutes,
        day.pace,
        day.is_key_workout,
        exercises,
    )


def normalize_day(
    raw_day: Mapping,
    computed_date: date,
    day_of_week: int,
    defaults: NormalizerDefaults | None = None,
) -> CanonicalDay:
    """Normalize one raw day. Never raises."""
    defaults = defaults or NormalizerDefaults.from_settings()
    day_type = normalize_training_type(raw_day.get("type"))
    payload = {**raw_day, "type": day_type}
    try:
        if is_structured(raw_day):
            return _normalize_structured(StructuredDay.model_validate(payload), computed_date, day_of_week, defaults)
        return _normalize_legacy(LegacyDay.model_validate(payload), computed_date, day_of_week)
    except ValidationError as e:
        logger.warning("Day %s could not be read (%d errors), stored as rest", computed_date, e.error_count())
        return _canonical_day(computed_date, day_of_week, DayType.REST, "", None, None, None, None, [])
