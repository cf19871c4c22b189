"""create_activity_log_table

Revision ID: 3c4d5e6f7a8b
Revises: 2b3c4d5e6f7a
Create Date: 2026-10-19 09:20:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = '3c4d5e6f7a8b'
down_revision: Union[str, None] = '2b3c4d5e6f7a'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE activity_log (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            kind VARCHAR(50) NOT NULL,
            task_id UUID NOT NULL,
            actor_id UUID NOT NULL,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX idx_activity_log_task ON activity_log(task_id, created_at DESC)")
    op.execute("CREATE INDEX idx_activity_log_actor ON activity_log(actor_id)")
    op.execute("CREATE INDEX idx_activity_log_kind ON activity_log(kind)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS activity_log")
