"""
Training plan models.

Raw*: lenient intermediates for one generator day after shape dispatch. Every scalar is
coerced with a before-validator so malformed LLM output degrades to None instead of failing.
Canonical*: the normalized schedule handed to the plan saver.
"""

import math
import re
from datetime import date
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


class DayType(str, Enum):
    REST = "rest"
    EASY = "easy"
    LONG = "long"
    TEMPO = "tempo"
    INTERVAL = "interval"
    FARTLEK = "fartlek"
    RACE = "race"
    CONTROL = "control"
    OTHER = "other"  # ОФП
    SBU = "sbu"
    FREE = "free"


class ExerciseCategory(str, Enum):
    RUN = "run"
    OFP = "ofp"
    SBU = "sbu"


_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_LEADING_PACE_RE = re.compile(r"^(\d{1,2}:[0-5]\d)(?!\d)")

# Larger magnitudes are not physical for a training day; read them as missing
MAX_ABS_NUMBER = 100_000.0
# Matches training_day_exercises.name
EXERCISE_NAME_MAX_LENGTH = 255


def to_float(v: object) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        try:
            f = float(v)
        except OverflowError:
            return None
    elif isinstance(v, str):
        s = v.strip().replace(",", ".")
        m = _NUMBER_RE.search(s)
        if not m:
            return None
        try:
            f = float(m.group(0))
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(f) or abs(f) > MAX_ABS_NUMBER:
        return None
    return f


def to_int(v: object) -> int | None:
    f = to_float(v)
    return int(f) if f is not None else None


def to_text(v: object) -> str | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        s = v.strip()
        return s or None
    if isinstance(v, (int, float)):
        return str(v)
    return None


def to_pace(v: object) -> str | None:
    """Leading "M:SS" of a pace text ("4:30-4:45 мин/км" -> "4:30"); None when there is none."""
    s = to_text(v)
    if s is None:
        return None
    m = _LEADING_PACE_RE.match(s)
    return m.group(1) if m else None


def clip_name(v: object) -> object:
    if isinstance(v, str):
        return v[:EXERCISE_NAME_MAX_LENGTH].rstrip()
    return v


def to_name(v: object) -> str | None:
    return clip_name(to_text(v))


def _mappings_only(v: object) -> list:
    if not isinstance(v, list):
        return []
    return [item for item in v if isinstance(item, dict)]


LenientFloat = Annotated[float | None, BeforeValidator(to_float)]
LenientInt = Annotated[int | None, BeforeValidator(to_int)]
LenientText = Annotated[str | None, BeforeValidator(to_text)]
LenientPace = Annotated[str | None, BeforeValidator(to_pace)]
LenientName = Annotated[str | None, BeforeValidator(to_name)]


class RawExercise(BaseModel):
    """Exercise entry of a structured OFP/SBU day."""

    model_config = ConfigDict(extra="ignore")

    name: LenientName = None
    sets: LenientInt = None
    reps: LenientInt = None
    weight_kg: LenientFloat = None
    distance_m: LenientInt = None
    duration_min: LenientInt = None


class RawSegment(BaseModel):
    """Fartlek block: reps × distance_m at pace, recovery_m between reps."""

    model_config = ConfigDict(extra="ignore")

    reps: LenientInt = None
    distance_m: LenientInt = None
    pace: LenientText = None
    recovery_m: LenientInt = None
    recovery_type: LenientText = None


class StructuredDay(BaseModel):
    """Day in the structured-fields shape; description is built from these fields."""

    model_config = ConfigDict(extra="ignore")

    type: DayType
    warmup_km: LenientFloat = None
    cooldown_km: LenientFloat = None
    reps: LenientInt = None
    interval_m: LenientInt = None
    interval_pace: LenientText = None
    rest_m: LenientInt = None
    rest_type: LenientText = None
    segments: Annotated[list[RawSegment], BeforeValidator(_mappings_only)] = Field(default_factory=list)
    exercises: Annotated[list[RawExercise], BeforeValidator(_mappings_only)] = Field(default_factory=list)
    notes: LenientText = None
    distance_km: LenientFloat = None
    duration_minutes: LenientInt = None
    pace: LenientPace = None
    is_key_workout: Any = None


class LegacyDay(BaseModel):
    """Day in the legacy shape: free-text description plus optional numbers."""

    model_config = ConfigDict(extra="ignore")

    type: DayType
    description: LenientText = None
    distance_km: LenientFloat = None
    duration_minutes: LenientInt = None
    pace: LenientPace = None
    is_key_workout: Any = None


class CanonicalExercise(BaseModel):
    category: ExerciseCategory
    name: str
    sets: int | None = None
    reps: int | None = None
    weight_kg: float | None = None
    distance_m: int | None = None
    duration_sec: int | None = None
    pace: str | None = None
    notes: str | None = None
    order_index: int = 0


class CanonicalDay(BaseModel):
    date: date
    day_of_week: int = Field(..., ge=1, le=7)  # 1 = Mon
    type: DayType
    description: str = ""
    distance_km: float | None = None
    duration_minutes: int | None = None
    pace: str | None = None  # "M:SS" per km
    is_key_workout: bool = False
    exercises: list[CanonicalExercise] = Field(default_factory=list)


class CanonicalWeek(BaseModel):
    week_number: int = Field(..., ge=1)
    start_date: date  # Monday
    total_volume_km: float = 0.0
    days: list[CanonicalDay] = Field(default_factory=list)


class CanonicalSchedule(BaseModel):
    weeks: list[CanonicalWeek] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
