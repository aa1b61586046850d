"""Training plan schema: users, training_plan_weeks, training_plan_days, training_day_exercises

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "training_plan_weeks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("total_volume", sa.Float(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_training_plan_weeks_user_id", "training_plan_weeks", ["user_id"], unique=False)
    op.create_index(
        "ix_training_plan_weeks_user_id_start_date", "training_plan_weeks", ["user_id", "start_date"], unique=False
    )

    op.create_table(
        "training_plan_days",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("week_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, server_default="rest"),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_key_workout", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["week_id"], ["training_plan_weeks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_training_plan_days_user_id", "training_plan_days", ["user_id"], unique=False)
    op.create_index("ix_training_plan_days_week_id", "training_plan_days", ["week_id"], unique=False)
    op.create_index("ix_training_plan_days_date", "training_plan_days", ["date"], unique=False)

    op.create_table(
        "training_day_exercises",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("plan_day_id", sa.Integer(), nullable=False),
        sa.Column("exercise_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(8), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sets", sa.Integer(), nullable=True),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("distance_m", sa.Integer(), nullable=True),
        sa.Column("duration_sec", sa.Integer(), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("pace", sa.String(32), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["plan_day_id"], ["training_plan_days.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_training_day_exercises_user_id", "training_day_exercises", ["user_id"], unique=False)
    op.create_index("ix_training_day_exercises_plan_day_id", "training_day_exercises", ["plan_day_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_training_day_exercises_plan_day_id", table_name="training_day_exercises")
    op.drop_index("ix_training_day_exercises_user_id", table_name="training_day_exercises")
    op.drop_table("training_day_exercises")
    op.drop_index("ix_training_plan_days_date", table_name="training_plan_days")
    op.drop_index("ix_training_plan_days_week_id", table_name="training_plan_days")
    op.drop_index("ix_training_plan_days_user_id", table_name="training_plan_days")
    op.drop_table("training_plan_days")
    op.drop_index("ix_training_plan_weeks_user_id_start_date", table_name="training_plan_weeks")
    op.drop_index("ix_training_plan_weeks_user_id", table_name="training_plan_weeks")
    op.drop_table("training_plan_weeks")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
