"""Initial schema: roles, workflow_requests, approval_steps, notification tables

Revision ID: 0001
Revises: None
Create Date: 2026-10-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all core tables."""

    # --- roles ---
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("is_system", sa.Boolean(), server_default="false"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_roles"),
        sa.UniqueConstraint("name", name="uq_roles_name"),
    )

    # --- workflow_requests ---
    op.create_table(
        "workflow_requests",
        sa.Column("domain", sa.String(32), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(64), nullable=False),
        sa.Column("requestor_ref", sa.String(255), nullable=False),
        sa.Column("attributes", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("domain", "id", name="pk_workflow_requests"),
    )
    op.create_index("ix_workflow_requests_status", "workflow_requests", ["status"])
    op.create_index("ix_workflow_requests_requestor_ref", "workflow_requests", ["requestor_ref"])
    op.create_index("ix_workflow_requests_created_at", "workflow_requests", ["created_at"])

    # --- approval_steps (FK -> workflow_requests) ---
    op.create_table(
        "approval_steps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_domain", sa.String(32), nullable=False),
        sa.Column("request_id", sa.String(64), nullable=False),
        sa.Column("step_role", sa.String(100), nullable=False),
        sa.Column("actor_name", sa.String(255), nullable=False),
        sa.Column("actor_role", sa.String(100), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("from_status", sa.String(64), nullable=False),
        sa.Column("result_status", sa.String(64), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_approval_steps"),
        sa.ForeignKeyConstraint(
            ["request_domain", "request_id"],
            ["workflow_requests.domain", "workflow_requests.id"],
            name="fk_approval_steps_request_workflow_requests",
        ),
    )
    op.create_index(
        "ix_approval_steps_request",
        "approval_steps",
        ["request_domain", "request_id", "created_at"],
    )

    # --- notification_preferences ---
    op.create_table(
        "notification_preferences",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("subscriber_ref", sa.String(255), nullable=False),
        sa.Column("email_enabled", sa.Boolean(), server_default="true"),
        sa.Column("email_address", sa.String(255), nullable=False),
        sa.Column("subscribed_events", sa.JSON(), server_default="[]"),
        sa.Column("domains", sa.JSON(), server_default="[]"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_notification_preferences"),
    )
    op.create_index(
        "ix_notification_preferences_subscriber_ref",
        "notification_preferences",
        ["subscriber_ref"],
    )

    # --- webhook_configs ---
    op.create_table(
        "webhook_configs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("method", sa.String(10), server_default="POST"),
        sa.Column("auth_type", sa.String(50), nullable=True),
        sa.Column("auth_value", sa.Text(), nullable=True),
        sa.Column("headers", sa.JSON(), server_default="{}"),
        sa.Column("subscribed_events", sa.JSON(), server_default="[]"),
        sa.Column("payload_template", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("last_triggered_at", sa.DateTime(), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("failure_count", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_webhook_configs"),
    )

    # --- notification_logs (FK -> webhook_configs) ---
    op.create_table(
        "notification_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("channel", sa.String(50), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("recipient", sa.String(255), nullable=False),
        sa.Column("webhook_id", sa.Uuid(), nullable=True),
        sa.Column("request_domain", sa.String(32), nullable=True),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("subject", sa.String(512), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("attempts", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_notification_logs"),
        sa.ForeignKeyConstraint(
            ["webhook_id"],
            ["webhook_configs.id"],
            name="fk_notification_logs_webhook_id_webhook_configs",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_notification_logs_request_id", "notification_logs", ["request_id"])
    op.create_index("ix_notification_logs_created_at", "notification_logs", ["created_at"])


def downgrade() -> None:
    """Drop all core tables in reverse dependency order."""
    op.drop_table("notification_logs")
    op.drop_table("webhook_configs")
    op.drop_table("notification_preferences")
    op.drop_table("approval_steps")
    op.drop_table("workflow_requests")
    op.drop_table("roles")
