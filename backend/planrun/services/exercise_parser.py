"""
Parse OFP/SBU day descriptions into exercises, one per line:
  ОФП: «Приседания — 3×10, 20 кг», «Планка — 1 мин»
  СБУ: «Бег с высоким подниманием бедра — 30 м», «Многоскоки — 0.1 км»
Never raises: unrecognised details end up in notes.
"""

import re
from typing import Annotated

from pydantic import BaseModel, BeforeValidator

from planrun.schemas.plan import MAX_ABS_NUMBER, ExerciseCategory, clip_name
from planrun.services.pace import round_half_up

_LINE_SPLIT_RE = re.compile(r"\r\n|\n|\r")
_DASH_RE = re.compile(r"^(.+?)\s*[—–]\s*(.+)$")
_HYPHEN_RE = re.compile(r"^(.+?)\s*-\s*(.+)$")

_OFP_SETS_RE = re.compile(r"^(\d+)\s*[×xXхХ]\s*(\d+)\s*(?:,\s*(\d+(?:[.,]\d+)?)\s*кг)?")
_OFP_MINUTES_RE = re.compile(r"^(\d+)\s*мин")
_SBU_METERS_RE = re.compile(r"^(\d+)\s*м$")
_SBU_KM_RE = re.compile(r"^([\d.,]+)\s*км$")

# «Силовые: приседания, выпады и становая тяга (3 подхода по 12 повторений)»
_PARAGRAPH_SETS_RE = re.compile(
    r"\s*\((\d+)\s*подход(?:а|ов)?\s*по\s*(\d+)\s*повторени(?:е|я|й)\)\s*$", re.IGNORECASE
)
_PARAGRAPH_SETS_SHORT_RE = re.compile(r"\s*\((\d+)\s*[×xXхХ]\s*(\d+)\)\s*$")
_LABEL_RE = re.compile(r"^(.+?):\s*(.+)$")
_NAMES_SPLIT_RE = re.compile(r"\s*,\s*|\s+и\s+")


class ParsedExercise(BaseModel):
    name: Annotated[str, BeforeValidator(clip_name)]
    sets: int | None = None
    reps: int | None = None
    weight_kg: float | None = None
    duration_sec: int | None = None
    distance_m: int | None = None
    notes: str | None = None


def _to_decimal(s: str) -> float | None:
    try:
        return float(s.replace(",", "."))
    except ValueError:
        return None


def _in_range(*values: float | None) -> bool:
    return all(v is None or v <= MAX_ABS_NUMBER for v in values)


def _split_line(line: str) -> tuple[str, str] | None:
    """Name and details around the first em/en dash; a plain hyphen only when there is none."""
    m = _DASH_RE.match(line) or _HYPHEN_RE.match(line)
    if not m:
        return None
    return m.group(1).strip(), m.group(2).strip()


def _parse_paragraph(line: str) -> list[ParsedExercise]:
    """One-paragraph OFP listing: several names sharing sets/reps."""
    text = line.strip()
    sets = reps = None
    for pattern in (_PARAGRAPH_SETS_RE, _PARAGRAPH_SETS_SHORT_RE):
        m = pattern.search(text)
        if m:
            sets, reps = int(m.group(1)), int(m.group(2))
            if not _in_range(sets, reps):
                sets = reps = None
            text = text[: m.start()].strip()
            break
    m = _LABEL_RE.match(text)
    if m:
        text = m.group(2).strip()
    names = [n.strip() for n in _NAMES_SPLIT_RE.split(text) if n and n.strip()]
    return [ParsedExercise(name=name, sets=sets, reps=reps) for name in names]


def _parse_ofp_details(name: str, details: str) -> ParsedExercise:
    m = _OFP_SETS_RE.match(details)
    if m:
        sets, reps = int(m.group(1)), int(m.group(2))
        weight = _to_decimal(m.group(3)) if m.group(3) else None
        if _in_range(sets, reps, weight):
            return ParsedExercise(name=name, sets=sets, reps=reps, weight_kg=weight)
    m = _OFP_MINUTES_RE.match(details)
    if m and _in_range(int(m.group(1))):
        return ParsedExercise(name=name, duration_sec=int(m.group(1)) * 60)
    return ParsedExercise(name=name, notes=details)


def _parse_sbu_details(name: str, details: str) -> ParsedExercise:
    m = _SBU_METERS_RE.match(details)
    if m and _in_range(int(m.group(1))):
        return ParsedExercise(name=name, distance_m=int(m.group(1)))
    m = _SBU_KM_RE.match(details)
    if m:
        km = _to_decimal(m.group(1))
        if km is not None and _in_range(km):
            return ParsedExercise(name=name, distance_m=int(round_half_up(km * 1000)))
    return ParsedExercise(name=name, notes=details)


def parse_exercise_lines(text: str | None, kind: ExerciseCategory | str) -> list[ParsedExercise]:
    """Split description into exercises. kind is ofp or sbu (anything but sbu parses as ofp)."""
    text = (text or "").strip()
    if not text:
        return []
    category = ExerciseCategory.SBU if kind in (ExerciseCategory.SBU, "sbu") else ExerciseCategory.OFP
    lines = [line.strip() for line in _LINE_SPLIT_RE.split(text) if line.strip()]

    if category == ExerciseCategory.OFP and len(lines) == 1 and _split_line(lines[0]) is None:
        exercises = _parse_paragraph(lines[0])
        if exercises:
            return exercises

    exercises: list[ParsedExercise] = []
    for line in lines:
        parts = _split_line(line)
        if parts is None:
            exercises.append(ParsedExercise(name=line))
            continue
        name, details = parts
        if category == ExerciseCategory.SBU:
            exercises.append(_parse_sbu_details(name, details))
        else:
            exercises.append(_parse_ofp_details(name, details))
    return exercises
