"""Celery application for RequestFlow background work."""

from celery import Celery
from celery.signals import setup_logging

from requestflow.core.config import get_settings
from requestflow.core.logging import configure_from_settings

settings = get_settings()

celery_app = Celery(
    "requestflow",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=["requestflow.workers.notification_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_routes={
        "requestflow.workers.notification_tasks.deliver_workflow_event": {"queue": "notifications"},
    },
    task_default_queue="default",
    # Publishing runs beside committed transitions; it must not block
    task_publish_retry=False,
    task_ignore_result=True,
    broker_connection_timeout=2,
)


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_from_settings(settings)
