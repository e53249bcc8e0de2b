"""replace users.is_admin with a required role

Revision ID: 20260315000000
Revises: 20260301000000
Create Date: 2026-03-15 00:00:00.000000

Backfill:
- is_admin = true  -> role = 'admin'
- is_admin = false -> role = 'viewer'

Editors did not exist before this revision; they are assigned by hand afterwards.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20260315000000"
down_revision = "20260301000000"
branch_labels = None
depends_on = None

ROLES = ("viewer", "editor", "admin")


def upgrade() -> None:
    # Nullable first so existing rows can be backfilled
    op.add_column("users", sa.Column("role", sa.String(20), nullable=True))

    op.execute(
        "UPDATE users SET role = CASE WHEN is_admin THEN 'admin' ELSE 'viewer' END"
    )

    with op.batch_alter_table("users") as batch_op:
        batch_op.alter_column(
            "role",
            existing_type=sa.String(20),
            nullable=False,
            server_default="viewer",
        )
        batch_op.create_check_constraint(
            "ck_users_role", "role IN (" + ", ".join(f"'{r}'" for r in ROLES) + ")"
        )
        batch_op.drop_column("is_admin")
        batch_op.create_index("ix_users_role", ["role"])


def downgrade() -> None:
    op.add_column(
        "users",
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    # Editors lose their elevated rights on downgrade
    op.execute("UPDATE users SET is_admin = (role = 'admin')")

    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_index("ix_users_role")
        batch_op.drop_constraint("ck_users_role", type_="check")
        batch_op.drop_column("role")
