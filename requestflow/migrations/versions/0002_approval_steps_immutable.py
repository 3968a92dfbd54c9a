"""Make approval_steps append-only

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-12

Creates database triggers that reject UPDATE and DELETE on approval_steps,
so the ledger stays intact even for writes that bypass the ORM.
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, Sequence[str], None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Install immutability triggers on approval_steps."""
    if op.get_bind().dialect.name != "postgresql":
        return

    op.execute("""
        CREATE OR REPLACE FUNCTION prevent_approval_step_change()
        RETURNS TRIGGER AS $trigger$
        BEGIN
            RAISE EXCEPTION 'Approval steps are immutable. Record ID: %', OLD.id;
        END;
        $trigger$ LANGUAGE plpgsql;
    """)

    op.execute("""
        CREATE TRIGGER approval_steps_prevent_update
        BEFORE UPDATE ON approval_steps
        FOR EACH ROW
        EXECUTE FUNCTION prevent_approval_step_change();
    """)

    op.execute("""
        CREATE TRIGGER approval_steps_prevent_delete
        BEFORE DELETE ON approval_steps
        FOR EACH ROW
        EXECUTE FUNCTION prevent_approval_step_change();
    """)


def downgrade() -> None:
    """Remove immutability triggers."""
    if op.get_bind().dialect.name != "postgresql":
        return

    op.execute("DROP TRIGGER IF EXISTS approval_steps_prevent_update ON approval_steps;")
    op.execute("DROP TRIGGER IF EXISTS approval_steps_prevent_delete ON approval_steps;")
    op.execute("DROP FUNCTION IF EXISTS prevent_approval_step_change();")
