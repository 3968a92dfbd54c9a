"""Database models for RequestFlow."""

from requestflow.db.models.role import Role
from requestflow.db.models.request import WorkflowRequest
from requestflow.db.models.approval import ApprovalStep
from requestflow.db.models.notification import (
    NotificationPreference,
    WebhookConfig,
    NotificationLog,
    NotificationChannel,
    NotificationEventType,
)

__all__ = [
    "Role",
    "WorkflowRequest",
    "ApprovalStep",
    "NotificationPreference",
    "WebhookConfig",
    "NotificationLog",
    "NotificationChannel",
    "NotificationEventType",
]
