import datetime as dt
from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from planrun.db.base import Base


class PlanDay(Base):
    __tablename__ = "training_plan_days"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    week_id: Mapped[int] = mapped_column(
        ForeignKey("training_plan_weeks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 1 = Mon .. 7 = Sun
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="rest")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_key_workout: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    week: Mapped["PlanWeek"] = relationship("PlanWeek", back_populates="days")
    exercises: Mapped[list["PlanDayExercise"]] = relationship(
        "PlanDayExercise", back_populates="day", order_by="PlanDayExercise.order_index"
    )
