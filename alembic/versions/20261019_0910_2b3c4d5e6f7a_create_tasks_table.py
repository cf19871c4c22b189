"""create_tasks_table

Revision ID: 2b3c4d5e6f7a
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-19 09:10:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = '2b3c4d5e6f7a'
down_revision: Union[str, None] = '1a2b3c4d5e6f'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE TYPE task_status AS ENUM ('YTS', 'IN_PROGRESS', 'ON_HOLD', 'RECURRING', 'COMPLETED')")
    op.execute("CREATE TYPE task_priority AS ENUM ('HIGH', 'MEDIUM', 'LOW')")
    op.execute("CREATE TYPE recurring_cadence AS ENUM ('DAILY', 'WEEKLY', 'MONTHLY', 'QUARTERLY', 'YEARLY')")
    op.execute("CREATE TYPE review_status AS ENUM ('REVIEW_REQUESTED', 'UNDER_REVIEW', 'APPROVED', 'REJECTED')")
    op.execute("""
        CREATE TABLE tasks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            title VARCHAR(500) NOT NULL,
            description TEXT,
            status task_status NOT NULL DEFAULT 'IN_PROGRESS',
            priority task_priority NOT NULL DEFAULT 'MEDIUM',
            start_date DATE,
            due_date DATE,
            project_id UUID REFERENCES projects(id) ON DELETE SET NULL,
            recurring recurring_cadence,
            brand VARCHAR(200),
            tags VARCHAR(500),
            created_by_id UUID NOT NULL REFERENCES identities(id) ON DELETE CASCADE,
            review_status review_status,
            review_requested_by_id UUID REFERENCES identities(id) ON DELETE SET NULL,
            review_requested_at TIMESTAMPTZ,
            reviewer_id UUID REFERENCES identities(id) ON DELETE SET NULL,
            reviewed_by_id UUID REFERENCES identities(id) ON DELETE SET NULL,
            reviewed_at TIMESTAMPTZ,
            review_comment TEXT,
            status_before_review task_status,
            version INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_tasks_active_review_has_reviewer CHECK (
                COALESCE(review_status IN ('REVIEW_REQUESTED', 'UNDER_REVIEW'), false) = (reviewer_id IS NOT NULL)
            )
        )
    """)
    op.execute("CREATE INDEX idx_tasks_status ON tasks(status)")
    op.execute("CREATE INDEX idx_tasks_project_id ON tasks(project_id) WHERE project_id IS NOT NULL")
    op.execute("CREATE INDEX idx_tasks_reviewer ON tasks(reviewer_id, review_status) WHERE reviewer_id IS NOT NULL")
    op.execute("CREATE INDEX idx_tasks_created_at ON tasks(created_at DESC, id)")

    op.execute("""
        CREATE TABLE task_assignees (
            task_id UUID NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
            identity_id UUID NOT NULL REFERENCES identities(id) ON DELETE CASCADE,
            PRIMARY KEY (task_id, identity_id)
        )
    """)
    op.execute("CREATE INDEX idx_task_assignees_identity ON task_assignees(identity_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS task_assignees")
    op.execute("DROP TABLE IF EXISTS tasks")
    op.execute("DROP TYPE IF EXISTS review_status")
    op.execute("DROP TYPE IF EXISTS recurring_cadence")
    op.execute("DROP TYPE IF EXISTS task_priority")
    op.execute("DROP TYPE IF EXISTS task_status")
