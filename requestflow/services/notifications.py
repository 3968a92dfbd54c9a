"""Notification service for email and webhook delivery.

Runs inside the Celery worker. Handles:
- Email notifications to requestors and domain watchers
- Webhook notifications to external systems
- A NotificationLog row for every delivery attempt
"""

import base64
import json
import logging
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Dict, Any, List

import aiosmtplib
import httpx
from jinja2 import Template
from sqlalchemy.orm import Session
from sqlalchemy import and_

from requestflow.core.config import Settings, get_settings
from requestflow.core.workflow.definitions import DEFAULT_ROUTING_TABLE, RoutingTable
from requestflow.core.workflow.events import WorkflowEvent
from requestflow.core.workflow.states import WorkflowAction
from requestflow.db.models.notification import (
    NotificationPreference,
    WebhookConfig,
    NotificationLog,
    NotificationChannel,
    NotificationEventType,
)

logger = logging.getLogger(__name__)


# Email templates
EMAIL_TEMPLATES = {
    NotificationEventType.STEP_APPROVED: {
        "subject": "[RequestFlow] {domain_title} request {request_id} moved to {new_status}",
        "body": """
Your {domain} request has cleared an approval step:

Request: {request_id}
Approved By: {actor_name} ({actor_role})
Previous Status: {previous_status}
Current Status: {new_status}
Comments: {comments}

Follow its progress at: {request_url}

---
RequestFlow
        """,
    },
    NotificationEventType.REQUEST_APPROVED: {
        "subject": "[RequestFlow] {domain_title} request {request_id} approved",
        "body": """
Your {domain} request has been fully approved:

Request: {request_id}
Final Approver: {actor_name} ({actor_role})
Status: {new_status}
Comments: {comments}

View it at: {request_url}

---
RequestFlow
        """,
    },
    NotificationEventType.REQUEST_REJECTED: {
        "subject": "[RequestFlow] {domain_title} request {request_id} rejected",
        "body": """
Your {domain} request has been rejected:

Request: {request_id}
Rejected By: {actor_name} ({actor_role})
Rejected At: {previous_status}
Reason: {comments}

View it at: {request_url}

---
RequestFlow
        """,
    },
    NotificationEventType.REQUEST_CANCELLED: {
        "subject": "[RequestFlow] {domain_title} request {request_id} cancelled",
        "body": """
The {domain} request below has been cancelled:

Request: {request_id}
Cancelled By: {actor_name} ({actor_role})
Previous Status: {previous_status}
Reason: {comments}

---
RequestFlow
        """,
    },
    NotificationEventType.REQUEST_PROCESSING: {
        "subject": "[RequestFlow] {domain_title} request {request_id} is being processed",
        "body": """
Your {domain} request has been picked up for processing:

Request: {request_id}
Handled By: {actor_name} ({actor_role})
Status: {new_status}

View it at: {request_url}

---
RequestFlow
        """,
    },
    NotificationEventType.REQUEST_COMPLETED: {
        "subject": "[RequestFlow] {domain_title} request {request_id} completed",
        "body": """
Your {domain} request has been processed:

Request: {request_id}
Completed By: {actor_name} ({actor_role})
Status: {new_status}
Comments: {comments}

View it at: {request_url}

---
RequestFlow
        """,
    },
}


def event_type_for(event: WorkflowEvent, table: RoutingTable = DEFAULT_ROUTING_TABLE) -> NotificationEventType:
    """Classify a workflow event for subscription matching."""
    action = WorkflowAction(event.action)
    if action == WorkflowAction.REJECT:
        return NotificationEventType.REQUEST_REJECTED
    if action == WorkflowAction.CANCEL:
        return NotificationEventType.REQUEST_CANCELLED
    if action == WorkflowAction.PROCESS:
        return NotificationEventType.REQUEST_PROCESSING

    definition = table.get(event.domain)
    if action == WorkflowAction.COMPLETE:
        if event.new_status == definition.completed_status:
            return NotificationEventType.REQUEST_COMPLETED
        return NotificationEventType.REQUEST_PROCESSING
    if definition.is_pending(event.new_status):
        return NotificationEventType.STEP_APPROVED
    return NotificationEventType.REQUEST_APPROVED


class NotificationService:
    """
    Service for sending notifications via email and webhooks.
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        routing_table: RoutingTable = DEFAULT_ROUTING_TABLE,
    ):
        """
        Initialize notification service.

        Args:
            db: Database session
            settings: Settings to use; defaults to the cached application settings
            routing_table: Used to tell intermediate approvals from final ones
        """
        self.db = db
        self.settings = settings or get_settings()
        self.routing_table = routing_table

    async def notify_event(self, event: WorkflowEvent) -> List[str]:
        """
        Send every notification a workflow event triggers.

        Args:
            event: The committed transition

        Returns:
            List of notification log IDs
        """
        event_type = event_type_for(event, self.routing_table)
        context = self._build_event_context(event)
        return await self._send_event_notifications(event_type, event, context)

    async def _send_event_notifications(
        self,
        event_type: NotificationEventType,
        event: WorkflowEvent,
        context: Dict[str, Any],
    ) -> List[str]:
        """Send notifications for an event to all subscribers."""
        notification_ids = []

        for pref in self._email_subscribers(event_type, event):
            notif_id = await self._send_email(
                to_email=pref.email_address,
                event_type=event_type,
                context=context,
                event=event,
            )
            if notif_id:
                notification_ids.append(notif_id)

        webhooks = self.db.query(WebhookConfig).filter(
            WebhookConfig.is_active == True,
        ).all()

        for webhook in webhooks:
            if event_type.value in (webhook.subscribed_events or []):
                notif_id = await self._send_webhook(
                    webhook=webhook,
                    event_type=event_type,
                    context=context,
                    event=event,
                )
                if notif_id:
                    notification_ids.append(notif_id)

        return notification_ids

    def _email_subscribers(
        self,
        event_type: NotificationEventType,
        event: WorkflowEvent,
    ) -> List[NotificationPreference]:
        """Preferences of the requestor and of watchers of the event's domain."""
        prefs = self.db.query(NotificationPreference).filter(
            and_(
                NotificationPreference.email_enabled == True,
                NotificationPreference.email_address.isnot(None),
            )
        ).all()

        subscribers = []
        for pref in prefs:
            if event_type.value not in (pref.subscribed_events or []):
                continue
            is_requestor = event.requestor_ref is not None and pref.subscriber_ref == event.requestor_ref
            watches_domain = event.domain in (pref.domains or [])
            if is_requestor or watches_domain:
                subscribers.append(pref)
        return subscribers

    async def _send_email(
        self,
        to_email: str,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        event: WorkflowEvent,
    ) -> Optional[str]:
        """Send an email notification."""
        template = EMAIL_TEMPLATES.get(event_type)
        if not template:
            logger.warning(f"No email template for event type: {event_type}")
            return None

        subject = template["subject"].format(**context)
        body = template["body"].format(**context)

        log = NotificationLog(
            channel=NotificationChannel.EMAIL.value,
            event_type=event_type.value,
            recipient=to_email,
            request_domain=event.domain,
            request_id=event.request_id,
            subject=subject,
            body=body,
            status="pending",
        )
        self.db.add(log)
        self.db.flush()

        try:
            await self._deliver_email(to_email, subject, body)
            log.status = "sent"
            log.sent_at = datetime.utcnow()
        except Exception as e:
            logger.exception(f"Failed to send email to {to_email}")
            log.status = "failed"
            log.error_message = str(e)
        log.attempts = (log.attempts or 0) + 1

        self.db.commit()
        return str(log.id)

    async def _deliver_email(self, to_email: str, subject: str, body: str) -> None:
        """Actually deliver the email via SMTP."""
        if not self.settings.smtp_host:
            logger.warning("SMTP not configured, skipping email delivery")
            return

        msg = MIMEMultipart()
        msg["From"] = f"{self.settings.smtp_from_name} <{self.settings.smtp_from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        await aiosmtplib.send(
            msg,
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            username=self.settings.smtp_user,
            password=self.settings.smtp_password,
            use_tls=self.settings.smtp_use_tls,
        )

    async def _send_webhook(
        self,
        webhook: WebhookConfig,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        event: WorkflowEvent,
    ) -> Optional[str]:
        """Send a webhook notification."""
        if webhook.payload_template:
            try:
                template = Template(webhook.payload_template)
                payload = json.loads(template.render(**context))
            except Exception as e:
                logger.warning(f"Failed to render webhook template for {webhook.name}: {e}")
                payload = self._build_default_webhook_payload(event_type, context)
        else:
            payload = self._build_default_webhook_payload(event_type, context)

        log = NotificationLog(
            channel=NotificationChannel.WEBHOOK.value,
            event_type=event_type.value,
            recipient=webhook.name,
            webhook_id=webhook.id,
            request_domain=event.domain,
            request_id=event.request_id,
            payload=payload,
            status="pending",
        )
        self.db.add(log)
        self.db.flush()

        try:
            await self._deliver_webhook(webhook, payload)
            log.status = "sent"
            log.sent_at = datetime.utcnow()
            webhook.last_triggered_at = datetime.utcnow()
            webhook.failure_count = 0
            webhook.last_error = None
        except Exception as e:
            logger.exception(f"Failed to send webhook to {webhook.url}")
            log.status = "failed"
            log.error_message = str(e)
            webhook.failure_count = (webhook.failure_count or 0) + 1
            webhook.last_error = str(e)
        log.attempts = (log.attempts or 0) + 1

        self.db.commit()
        return str(log.id)

    async def _deliver_webhook(self, webhook: WebhookConfig, payload: Dict[str, Any]) -> None:
        """Actually deliver the webhook."""
        headers = dict(webhook.headers or {})
        headers["Content-Type"] = "application/json"

        if webhook.auth_type == "bearer":
            headers["Authorization"] = f"Bearer {webhook.auth_value}"
        elif webhook.auth_type == "basic":
            encoded = base64.b64encode(webhook.auth_value.encode()).decode()
            headers["Authorization"] = f"Basic {encoded}"
        elif webhook.auth_type == "header":
            # auth_value is JSON: {"name": ..., "value": ...}
            try:
                auth = json.loads(webhook.auth_value)
                headers[auth["name"]] = auth["value"]
            except (ValueError, KeyError, TypeError):
                logger.warning(f"Ignoring malformed header auth on webhook {webhook.name}")

        async with httpx.AsyncClient(timeout=self.settings.webhook_timeout) as client:
            if (webhook.method or "POST").upper() == "PUT":
                response = await client.put(webhook.url, json=payload, headers=headers)
            else:
                response = await client.post(webhook.url, json=payload, headers=headers)

            response.raise_for_status()

    def _build_default_webhook_payload(
        self,
        event_type: NotificationEventType,
        context: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Build default webhook payload."""
        return {
            "event": event_type.value,
            "timestamp": datetime.utcnow().isoformat(),
            "data": context,
        }

    def _build_event_context(self, event: WorkflowEvent) -> Dict[str, Any]:
        """Build template context for a workflow event."""
        portal = self.settings.portal_url.rstrip("/")
        return {
            "domain": event.domain,
            "domain_title": event.domain.capitalize(),
            "request_id": event.request_id,
            "previous_status": event.previous_status,
            "new_status": event.new_status,
            "actor_name": event.actor_name,
            "actor_role": event.actor_role,
            "action": event.action,
            "comments": event.comments or "None",
            "requestor_ref": event.requestor_ref or "N/A",
            "occurred_at": event.occurred_at.isoformat(),
            "request_url": f"{portal}/{event.domain}/{event.request_id}",
        }
