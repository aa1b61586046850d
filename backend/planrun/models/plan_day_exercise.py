"""Exercise rows of a plan day: one synthesized run per running day, or OFP/SBU items."""

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from planrun.db.base import Base


class PlanDayExercise(Base):
    __tablename__ = "training_day_exercises"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_day_id: Mapped[int] = mapped_column(
        ForeignKey("training_plan_days.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id: Mapped[int | None] = mapped_column(Integer, nullable=True)  # exercise library entry, if linked
    category: Mapped[str] = mapped_column(String(8), nullable=False)  # run | ofp | sbu
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    distance_m: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration_sec: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    pace: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    day: Mapped["PlanDay"] = relationship("PlanDay", back_populates="exercises")
