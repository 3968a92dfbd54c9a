"""Celery tasks for notification delivery.

The API process only enqueues; rendering, SMTP and webhook calls happen here.
"""

import asyncio
import logging
from typing import Any, Dict, List

from requestflow.core.workflow.definitions import load_routing_table
from requestflow.core.workflow.events import WorkflowEvent
from requestflow.db.session import SessionLocal
from requestflow.services.notifications import NotificationService
from requestflow.workers.celery_app import celery_app, settings

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60, ignore_result=True)
def deliver_workflow_event(self, event_data: Dict[str, Any]) -> List[str]:
    """
    Deliver the notifications for one committed workflow transition.

    Args:
        event_data: WorkflowEvent.to_dict() output

    Returns:
        Notification log IDs
    """
    event = WorkflowEvent.from_dict(event_data)
    db = SessionLocal()
    try:
        service = NotificationService(
            db,
            settings=settings,
            routing_table=load_routing_table(settings.routing_config_path),
        )
        notification_ids = asyncio.run(service.notify_event(event))

        logger.info(
            f"Delivered {len(notification_ids)} notifications for "
            f"{event.domain}/{event.request_id} ({event.action})"
        )
        return notification_ids

    except Exception as e:
        db.rollback()
        logger.exception(f"Notification delivery failed for {event.domain}/{event.request_id}")
        raise self.retry(exc=e)

    finally:
        db.close()
