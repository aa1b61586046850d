"""Tests for OFP/SBU exercise line parsing."""

import pytest

from planrun.schemas.plan import ExerciseCategory
from planrun.services.exercise_parser import ParsedExercise, parse_exercise_lines


def test_ofp_sets_and_minutes():
    result = parse_exercise_lines("Приседания — 3×10, 20 кг\nПланка — 1 мин", "ofp")
    assert result == [
        ParsedExercise(name="Приседания", sets=3, reps=10, weight_kg=20.0),
        ParsedExercise(name="Планка", duration_sec=60),
    ]


@pytest.mark.parametrize("text", ["", "   ", None, "\n\n"])
def test_empty_text_gives_no_exercises(text):
    assert parse_exercise_lines(text, ExerciseCategory.OFP) == []


def test_ofp_decimal_weight_and_latin_x():
    result = parse_exercise_lines("Жим гантелей — 4x8, 22,5 кг\r\n\r\nВыпады - 3х12", ExerciseCategory.OFP)
    assert result[0] == ParsedExercise(name="Жим гантелей", sets=4, reps=8, weight_kg=22.5)
    assert result[1] == ParsedExercise(name="Выпады", sets=3, reps=12)
    assert len(result) == 2


def test_hyphen_inside_name_is_kept_when_dash_separates():
    result = parse_exercise_lines("Отжимания-узкие — 3×15", "ofp")
    assert result == [ParsedExercise(name="Отжимания-узкие", sets=3, reps=15)]


def test_unrecognised_details_become_notes():
    result = parse_exercise_lines("Берпи — до отказа\nСкакалка", "ofp")
    assert result[0] == ParsedExercise(name="Берпи", notes="до отказа")
    assert result[1] == ParsedExercise(name="Скакалка")


def test_sbu_meters_and_kilometers():
    text = "Бег с высоким подниманием бедра — 30 м\nМногоскоки — 0,1 км\nЗахлёст голени — 2 серии"
    result = parse_exercise_lines(text, "sbu")
    assert result == [
        ParsedExercise(name="Бег с высоким подниманием бедра", distance_m=30),
        ParsedExercise(name="Многоскоки", distance_m=100),
        ParsedExercise(name="Захлёст голени", notes="2 серии"),
    ]


def test_ofp_paragraph_is_exploded_into_exercises():
    text = "Силовые: приседания, выпады и становая тяга (3 подхода по 12 повторений)"
    result = parse_exercise_lines(text, "ofp")
    assert [e.name for e in result] == ["приседания", "выпады", "становая тяга"]
    assert all(e.sets == 3 and e.reps == 12 for e in result)


def test_ofp_paragraph_short_sets_form():
    result = parse_exercise_lines("Пресс и спина (2×20)", "ofp")
    assert result == [
        ParsedExercise(name="Пресс", sets=2, reps=20),
        ParsedExercise(name="спина", sets=2, reps=20),
    ]


def test_paragraph_fallback_is_ofp_only():
    text = "Силовые: приседания, выпады (3 подхода по 12 повторений)"
    result = parse_exercise_lines(text, "sbu")
    assert result == [ParsedExercise(name=text)]


def test_paragraph_fallback_needs_single_line():
    result = parse_exercise_lines("Приседания\nВыпады", "ofp")
    assert result == [ParsedExercise(name="Приседания"), ParsedExercise(name="Выпады")]


@pytest.mark.parametrize(
    "text",
    ["—", "— 3×10", "x — ", "Бег — 99999999999999999999×1", "::: (0×0)", " — "],
)
def test_garbage_never_raises(text):
    result = parse_exercise_lines(text, "ofp")
    assert isinstance(result, list)


def test_sbu_kilometers_round_half_up():
    result = parse_exercise_lines("Многоскоки — 0.0005 км\nПрыжки — 0,0025 км", "sbu")
    assert [e.distance_m for e in result] == [1, 3]


def test_out_of_range_numbers_become_notes():
    result = parse_exercise_lines("Бег — 99999999999999999999×1\nПланка — 9999999999 мин", "ofp")
    assert result == [
        ParsedExercise(name="Бег", notes="99999999999999999999×1"),
        ParsedExercise(name="Планка", notes="9999999999 мин"),
    ]
    sbu = parse_exercise_lines("Многоскоки — " + "9" * 40 + " км", "sbu")
    assert sbu[0].distance_m is None


def test_long_names_fit_the_name_column():
    line = "Прыжки " * 60
    result = parse_exercise_lines(line + "— 3×10", "ofp")
    assert len(result[0].name) <= 255
    assert result[0].name.startswith("Прыжки Прыжки")
    assert (result[0].sets, result[0].reps) == (3, 10)
    assert len(parse_exercise_lines(line, "sbu")[0].name) <= 255
