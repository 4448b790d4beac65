"""create timesheets table

Revision ID: 0001
Revises: None
Create Date: 2026-01-05
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "timesheets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_in", sa.DateTime(), nullable=True),
        sa.Column("time_out", sa.DateTime(), nullable=True),
        sa.Column("regular_hours", sa.Numeric(precision=6, scale=2), nullable=False, server_default="0"),
        sa.Column("overtime_hours", sa.Numeric(precision=6, scale=2), nullable=False, server_default="0"),
        sa.Column("pto_hours", sa.Numeric(precision=6, scale=2), nullable=False, server_default="0"),
        sa.Column("holiday_hours", sa.Numeric(precision=6, scale=2), nullable=False, server_default="0"),
        sa.Column("pto_notes", sa.Text(), nullable=True),
        sa.Column("holiday_name", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("pay_period_start", sa.Date(), nullable=True),
        sa.Column("pay_period_end", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "date", name="uq_timesheets_employee_date"),
    )
    op.create_index(op.f("ix_timesheets_id"), "timesheets", ["id"], unique=False)
    op.create_index(op.f("ix_timesheets_employee_id"), "timesheets", ["employee_id"], unique=False)
    op.create_index(op.f("ix_timesheets_date"), "timesheets", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_timesheets_date"), table_name="timesheets")
    op.drop_index(op.f("ix_timesheets_employee_id"), table_name="timesheets")
    op.drop_index(op.f("ix_timesheets_id"), table_name="timesheets")
    op.drop_table("timesheets")
