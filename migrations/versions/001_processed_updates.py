"""Processed Telegram updates (SQL-only).

Revision ID: 001_processed_updates
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_processed_updates"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # key is "update_<update_id>"; the primary key is the dedupe constraint
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS processed_updates (
            key TEXT PRIMARY KEY,
            payload JSONB NOT NULL,
            processed_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )
    op.execute(
        """
        CREATE INDEX IF NOT EXISTS processed_updates_processed_at_idx
        ON processed_updates (processed_at)
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS processed_updates")
