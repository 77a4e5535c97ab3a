"""
Evaluations table.

One row per evaluation suite. The service reads it and performs a single kind of
write (the run trigger); rows are inserted by seed scripts or external tooling.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_evaluations_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "evaluations",
        # SERIAL on Postgres: ids are never reused.
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        # Free text on purpose (no check constraint); the service writes pending/running/completed.
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        # Null until a run completes.
        sa.Column("score", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("test_cases", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_run", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )

    # List view filters by status and sorts by updated_at by default;
    # the performance window also scans updated_at.
    op.create_index("ix_evaluations_status", "evaluations", ["status"])
    op.create_index("ix_evaluations_updated_at", "evaluations", ["updated_at"])


def downgrade() -> None:
    op.drop_index("ix_evaluations_updated_at", table_name="evaluations")
    op.drop_index("ix_evaluations_status", table_name="evaluations")
    op.drop_table("evaluations")
