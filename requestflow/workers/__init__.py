"""Celery workers for RequestFlow."""

from requestflow.workers.celery_app import celery_app
from requestflow.workers.notification_tasks import deliver_workflow_event

__all__ = [
    "celery_app",
    "deliver_workflow_event",
]
