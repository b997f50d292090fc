"""002: create customers table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE customers (
            id          SERIAL          PRIMARY KEY,
            name        VARCHAR(100)    NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_customers_name        UNIQUE (name),
            CONSTRAINT ck_customers_name_length CHECK (char_length(TRIM(name)) BETWEEN 1 AND 100)
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_customers_name_ci ON customers (LOWER(TRIM(name)));")
    op.execute("""
        CREATE TRIGGER trg_customers_updated_at
            BEFORE UPDATE ON customers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS customers;")
