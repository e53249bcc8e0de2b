"""make posts.status the only publication field

Revision ID: 20260322000000
Revises: 20260315000000
Create Date: 2026-03-22 00:00:00.000000

Rows where is_published and status disagree are reconciled before the flag
is dropped. Trashed posts stay in trash; otherwise is_published decides
between 'published' and 'draft'.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20260322000000"
down_revision = "20260315000000"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        UPDATE posts
        SET status = CASE WHEN is_published THEN 'published' ELSE 'draft' END
        WHERE status <> 'trash'
        """
    )

    with op.batch_alter_table("posts") as batch_op:
        batch_op.drop_index("ix_posts_is_published")
        batch_op.drop_column("is_published")


def downgrade() -> None:
    op.add_column(
        "posts",
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.execute("UPDATE posts SET is_published = (status = 'published')")
    op.create_index("ix_posts_is_published", "posts", ["is_published"])
