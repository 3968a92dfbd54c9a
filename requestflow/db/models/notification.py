"""Notification preferences and history models."""

import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Boolean, Text, Integer, Uuid
from sqlalchemy.orm import relationship

from requestflow.db.base import Base


class NotificationChannel(str, Enum):
    """Available notification channels."""
    EMAIL = "email"
    WEBHOOK = "webhook"


class NotificationEventType(str, Enum):
    """Workflow events that can trigger notifications."""
    STEP_APPROVED = "step_approved"
    REQUEST_APPROVED = "request_approved"
    REQUEST_REJECTED = "request_rejected"
    REQUEST_CANCELLED = "request_cancelled"
    REQUEST_PROCESSING = "request_processing"
    REQUEST_COMPLETED = "request_completed"


class NotificationPreference(Base):
    """
    Subscriber notification preferences.

    A subscriber receives email for the events they subscribe to, either on
    their own requests or on every request of the listed domains.
    """
    __tablename__ = "notification_preferences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subscriber_ref = Column(String(255), nullable=False, index=True)

    # Email preferences
    email_enabled = Column(Boolean, default=True)
    email_address = Column(String(255), nullable=False)

    # Event subscriptions (list of event types)
    subscribed_events = Column(JSON, default=list)

    # Domains watched regardless of requestor (empty = own requests only)
    domains = Column(JSON, default=list)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<NotificationPreference subscriber={self.subscriber_ref}>"


class WebhookConfig(Base):
    """
    Webhook configuration for external integrations.

    Allows sending workflow events to external systems like Slack, Teams, etc.
    """
    __tablename__ = "webhook_configs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Basic info
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Webhook configuration
    url = Column(Text, nullable=False)
    method = Column(String(10), default="POST")  # POST, PUT

    # Authentication
    auth_type = Column(String(50), nullable=True)  # bearer, basic, header
    auth_value = Column(Text, nullable=True)

    # Custom headers
    headers = Column(JSON, default=dict)

    # Event subscriptions
    subscribed_events = Column(JSON, default=list)

    # Payload template (Jinja2 template for custom payloads)
    payload_template = Column(Text, nullable=True)

    # Status
    is_active = Column(Boolean, default=True)
    last_triggered_at = Column(DateTime, nullable=True)
    last_error = Column(Text, nullable=True)
    failure_count = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<WebhookConfig {self.name}>"


class NotificationLog(Base):
    """
    Log of sent notifications for audit and debugging.
    """
    __tablename__ = "notification_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Notification details
    channel = Column(String(50), nullable=False)  # email, webhook
    event_type = Column(String(50), nullable=False)
    recipient = Column(String(255), nullable=False)  # Email address or webhook ID

    # Related entities
    webhook_id = Column(Uuid(as_uuid=True), ForeignKey("webhook_configs.id", ondelete="SET NULL"), nullable=True)
    request_domain = Column(String(32), nullable=True)
    request_id = Column(String(64), nullable=True, index=True)

    # Payload
    subject = Column(String(512), nullable=True)
    body = Column(Text, nullable=True)
    payload = Column(JSON, nullable=True)

    # Status
    status = Column(String(50), nullable=False, default="pending")  # pending, sent, failed
    error_message = Column(Text, nullable=True)
    attempts = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    sent_at = Column(DateTime, nullable=True)

    # Relationships
    webhook = relationship("WebhookConfig")

    def __repr__(self) -> str:
        return f"<NotificationLog {self.event_type} to {self.recipient}>"
