from planrun.models.user import User
from planrun.models.plan_week import PlanWeek
from planrun.models.plan_day import PlanDay
from planrun.models.plan_day_exercise import PlanDayExercise

__all__ = [
    "User",
    "PlanWeek",
    "PlanDay",
    "PlanDayExercise",
]
