"""Content table for guest submissions

- content (text / image / video submissions with moderation status)
- index on (status, created_at) for the rejected-content cleanup query

Idempotent.
"""

from __future__ import annotations

from alembic import op

revision = "20261019_0001_content_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("""
    CREATE EXTENSION IF NOT EXISTS pgcrypto;
    """)
    op.execute("""
    CREATE TABLE IF NOT EXISTS public.content (
        id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id uuid NOT NULL,
        type text NOT NULL CHECK (type IN ('text', 'image', 'video')),
        text_content text,
        media_url text,
        thumbnail_url text,
        status text NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'approved', 'rejected')),
        approved_at timestamptz,
        created_at timestamptz NOT NULL DEFAULT NOW()
    );
    """)
    op.execute("""
    CREATE INDEX IF NOT EXISTS content_status_created_at_idx
    ON public.content (status, created_at);
    """)


def downgrade() -> None:
    op.execute("""
    DROP INDEX IF EXISTS public.content_status_created_at_idx;
    """)
    op.execute("""
    DROP TABLE IF EXISTS public.content;
    """)
