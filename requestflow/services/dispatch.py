"""Notification hand-off.

The engine calls a NotificationDispatcher after every committed transition.
Dispatchers must return quickly: delivery and its retries happen in the
Celery worker, never in the request path.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import lru_cache, partial
from typing import Optional

from requestflow.core.config import Settings
from requestflow.core.workflow.events import WorkflowEvent
from requestflow.core.workflow.states import WorkflowAction

logger = logging.getLogger(__name__)


class NotificationDispatcher(ABC):
    """Receives committed workflow transitions. Return values are ignored."""

    @abstractmethod
    def notify_approval(self, event: WorkflowEvent) -> None:
        """A step was approved, or the request moved through admin processing."""

    @abstractmethod
    def notify_rejection(self, event: WorkflowEvent) -> None:
        """The request was rejected."""

    def notify_cancellation(self, event: WorkflowEvent) -> None:
        """The request was cancelled. Treated like a rejection unless overridden."""
        self.notify_rejection(event)


def dispatch_event(dispatcher: NotificationDispatcher, event: WorkflowEvent) -> None:
    """Route an event to the dispatcher method matching its action."""
    action = WorkflowAction(event.action)
    if action == WorkflowAction.REJECT:
        dispatcher.notify_rejection(event)
    elif action == WorkflowAction.CANCEL:
        dispatcher.notify_cancellation(event)
    else:
        dispatcher.notify_approval(event)


@lru_cache
def _publisher() -> ThreadPoolExecutor:
    """Process-wide pool that talks to the broker off the request thread."""
    return ThreadPoolExecutor(max_workers=2, thread_name_prefix="notification-publisher")


class CeleryNotificationDispatcher(NotificationDispatcher):
    """
    Enqueues delivery on the notifications queue.

    Publishing runs on a background executor with publish retries disabled,
    so a slow or unreachable broker never holds up the caller. An event that
    cannot be queued is logged and dropped.
    """

    def __init__(self, queue: str = "notifications", executor: Optional[Executor] = None):
        self.queue = queue
        self.executor = executor or _publisher()

    def _enqueue(self, event: WorkflowEvent) -> Future:
        future = self.executor.submit(self._publish, event)
        future.add_done_callback(partial(self._report_failure, event))
        return future

    def _publish(self, event: WorkflowEvent) -> None:
        from requestflow.workers.notification_tasks import deliver_workflow_event

        deliver_workflow_event.apply_async(
            args=[event.to_dict()],
            queue=self.queue,
            retry=False,
        )
        logger.debug(f"Queued {event.action} notification for {event.domain}/{event.request_id}")

    def _report_failure(self, event: WorkflowEvent, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error(
                f"Could not queue {event.action} notification for "
                f"{event.domain}/{event.request_id}: {error}"
            )

    def notify_approval(self, event: WorkflowEvent) -> None:
        self._enqueue(event)

    def notify_rejection(self, event: WorkflowEvent) -> None:
        self._enqueue(event)

    def notify_cancellation(self, event: WorkflowEvent) -> None:
        self._enqueue(event)


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Logs events instead of delivering them."""

    def _log(self, kind: str, event: WorkflowEvent) -> None:
        logger.info(
            f"{kind} notification for {event.domain}/{event.request_id}: "
            f"{event.previous_status} -> {event.new_status} by {event.actor_name} ({event.actor_role})"
        )

    def notify_approval(self, event: WorkflowEvent) -> None:
        self._log("Approval", event)

    def notify_rejection(self, event: WorkflowEvent) -> None:
        self._log("Rejection", event)

    def notify_cancellation(self, event: WorkflowEvent) -> None:
        self._log("Cancellation", event)


def get_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Build the dispatcher selected by ``settings.notification_backend``.

    Raises:
        ValueError: On an unknown backend name
    """
    backend = (settings.notification_backend or "").lower()
    if backend == "celery":
        return CeleryNotificationDispatcher()
    if backend in ("log", "logging"):
        return LoggingNotificationDispatcher()
    raise ValueError(f"Unknown notification backend: {settings.notification_backend}")
