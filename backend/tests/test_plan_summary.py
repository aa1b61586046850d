"""Tests for the plain-text plan summary."""

from datetime import date

from planrun.services.plan_normalizer import normalize_plan
from planrun.services.plan_summary import build_plan_summary


def test_summary_lists_days_with_key_marks():
    raw = {
        "weeks": [
            {
                "days": [
                    {"type": "easy", "distance_km": 10, "pace": "5:00"},
                    {"type": "rest"},
                    {"type": "tempo", "distance_km": 8},
                    {"type": "free"},
                    {"type": "rest"},
                    {"type": "sbu", "exercises": [{"name": "Захлёст", "distance_m": 50}]},
                    {"type": "rest"},
                ]
            }
        ]
    }
    summary = build_plan_summary(normalize_plan(raw, date(2026, 3, 2)))
    assert summary.splitlines() == [
        "Неделя 1:",
        "  Пн: Лёгкий бег: 10 км или 0:50:00, темп 5:00",
        "  Вт: Отдых",
        "  Ср: Темповый бег: 8 км [ключевая]",
        "  Чт: Свободный день",
        "  Пт: Отдых",
        "  Сб: Захлёст — 50 м",
        "  Вс: Отдых",
    ]


def test_summary_separates_weeks(easy_plan):
    summary = build_plan_summary(normalize_plan(easy_plan(2), date(2026, 3, 2), 3))
    assert "Неделя 4:\n" in summary
    assert "\n\nНеделя 5:\n" in summary


def test_summary_of_empty_schedule():
    assert build_plan_summary(normalize_plan({"weeks": []}, date(2026, 3, 2))) == ""
