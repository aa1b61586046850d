"""Pace, duration and number formatting shared by the day normalizer and plan summaries."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

PACE_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero (2.5 -> 3, 0.25 -> 0.3), unlike built-in round()."""
    quant = Decimal(1).scaleb(-ndigits)
    try:
        return float(Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Too many digits for the decimal context (or not finite): no half to resolve at this scale
        return float(round(value, ndigits))


def parse_pace_to_seconds(pace: str | None) -> int | None:
    """'5:30' -> 330 seconds per km. None for anything else."""
    if not pace:
        return None
    m = PACE_RE.match(pace.strip())
    if not m:
        return None
    return int(m.group(1)) * 60 + int(m.group(2))


def format_pace(sec: int) -> str:
    return f"{sec // 60}:{sec % 60:02d}"


def format_duration_hms(total_sec: int) -> str:
    h = total_sec // 3600
    m = (total_sec % 3600) // 60
    s = total_sec % 60
    return f"{h}:{m:02d}:{s:02d}"


def calculate_duration_minutes(distance_km: float | None, pace: str | None) -> int | None:
    """Minutes to cover distance_km at pace, or None when either is missing."""
    if distance_km is None or distance_km <= 0:
        return None
    pace_sec = parse_pace_to_seconds(pace)
    if pace_sec is None or pace_sec <= 0:
        return None
    return int(round_half_up(distance_km * pace_sec / 60))


def format_number(value: float | int) -> str:
    """Compact rendering for descriptions: 10.0 -> '10', 8.5 -> '8.5'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.14g}"
    return str(value)
