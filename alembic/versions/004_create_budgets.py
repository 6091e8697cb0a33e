"""004: create budgets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE budgets (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            "limit"         NUMERIC(12, 2)  NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_budgets_limit_non_negative CHECK ("limit" >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_budgets_user_id ON budgets (user_id);")
    op.execute("""
        CREATE TRIGGER trg_budgets_updated_at
            BEFORE UPDATE ON budgets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS budgets CASCADE;")
