#!/usr/bin/env python3
"""One-off: normalize a raw generator plan (JSON file) and print what would be saved.
Usage: python scripts/debug_normalize_plan.py plan.json [START_DATE] [WEEK_OFFSET]"""
import json
import sys
from datetime import date

from planrun.core.errors import PlanStructureError
from planrun.core.logging import setup_logging
from planrun.services.plan_normalizer import normalize_plan
from planrun.services.plan_summary import build_plan_summary


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        return 1
    setup_logging()
    with open(sys.argv[1], encoding="utf-8") as f:
        raw_plan = json.load(f)
    start = sys.argv[2] if len(sys.argv) > 2 else date.today().isoformat()
    offset = int(sys.argv[3]) if len(sys.argv) > 3 else 0

    try:
        schedule = normalize_plan(raw_plan, start, offset)
    except PlanStructureError as e:
        print("Plan rejected:", e)
        return 1

    print("=== Summary ===")
    print(build_plan_summary(schedule))
    print("=== Warnings ({}) ===".format(len(schedule.warnings)))
    for w in schedule.warnings:
        print(" -", w)
    print()
    print("=== Canonical schedule ===")
    print(json.dumps(schedule.model_dump(mode="json"), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
