"""Seed default roles

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-12

Creates one system role per approval checkpoint and domain admin.
"""
from typing import Sequence, Union
import json
import uuid

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0003"
down_revision: Union[str, Sequence[str], None] = "0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Frozen copy of the role table at the time of this revision
DEFAULT_ROLES = {
    "Admin": ["*:*"],
    "Requestor": ["*:read", "*:cancel"],
    "Department Focal": ["*:read", "*:approve_focal", "claim:verify"],
    "Line Manager": ["*:read", "*:approve_manager"],
    "HOD": ["*:read", "*:approve_hod", "visa:approve_manager"],
    "Finance": ["claim:read", "claim:approve_finance"],
    "Ticketing Admin": ["travel:read", "travel:process", "travel:cancel"],
    "Transport Admin": ["transport:read", "transport:process", "transport:cancel"],
    "Accommodation Admin": ["accommodation:read", "accommodation:process", "accommodation:cancel"],
    "Visa Admin": ["visa:read", "visa:process", "visa:cancel"],
    "Claims Admin": ["claim:read", "claim:process", "claim:cancel"],
}


def upgrade() -> None:
    """Create the default system roles."""
    connection = op.get_bind()

    for role_name, permissions in DEFAULT_ROLES.items():
        existing = connection.execute(
            sa.text("SELECT id FROM roles WHERE name = :name"),
            {"name": role_name}
        ).fetchone()

        if existing:
            continue

        connection.execute(
            sa.text("""
                INSERT INTO roles (id, name, permissions, is_system, created_at)
                VALUES (:id, :name, :permissions, true, now())
            """),
            {
                "id": str(uuid.uuid4()),
                "name": role_name,
                "permissions": json.dumps(permissions),
            }
        )


def downgrade() -> None:
    """Remove seeded default roles."""
    connection = op.get_bind()

    for role_name in DEFAULT_ROLES.keys():
        connection.execute(
            sa.text("DELETE FROM roles WHERE name = :name AND is_system = true"),
            {"name": role_name}
        )
