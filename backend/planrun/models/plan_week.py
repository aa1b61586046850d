"""One calendar week of a user's training plan. Rows are written only by the plan saver."""

from datetime import date
from sqlalchemy import Date, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from planrun.db.base import Base


class PlanWeek(Base):
    __tablename__ = "training_plan_weeks"
    __table_args__ = (Index("ix_training_plan_weeks_user_id_start_date", "user_id", "start_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)  # always a Monday
    total_volume: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # km

    user: Mapped["User"] = relationship("User", back_populates="plan_weeks")
    days: Mapped[list["PlanDay"]] = relationship("PlanDay", back_populates="week", order_by="PlanDay.day_of_week")
