"""Workflow engine.

Performs actions on requests: loads the request under a row lock, validates
the transition, checks the actor's permission, writes the new status and its
ledger entry in one transaction and hands a WorkflowEvent to the notification
dispatcher once the transaction has committed.
"""

import logging
from typing import List, NamedTuple, Optional

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from requestflow.core.errors import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    WorkflowError,
)
from requestflow.core.rbac.checker import PermissionAuthority
from requestflow.db.models.request import WorkflowRequest
from requestflow.services.dispatch import NotificationDispatcher, dispatch_event

from .definitions import DEFAULT_ROUTING_TABLE, RoutingTable
from .events import WorkflowEvent
from .ledger import ApprovalLedger
from .machine import PlannedTransition, WorkflowStateMachine
from .states import Domain, WorkflowAction

logger = logging.getLogger(__name__)


class Actor(NamedTuple):
    """The already-authenticated caller performing an action."""
    name: str
    role: str


class WorkflowEngine:
    """
    Applies workflow actions to persisted requests.

    Handles:
    - Action and domain validation
    - Transition validation against the routing table
    - Permission checks through a PermissionAuthority
    - Atomic status update plus ledger entry
    - Notification hand-off after commit
    """

    def __init__(
        self,
        db: Session,
        permission_authority: PermissionAuthority,
        dispatcher: NotificationDispatcher,
        routing_table: RoutingTable = DEFAULT_ROUTING_TABLE,
    ):
        """
        Initialize the workflow engine.

        Args:
            db: Database session; the engine commits or rolls it back
            permission_authority: Answers role/permission questions
            dispatcher: Receives an event for every committed transition
            routing_table: Per-domain workflow definitions
        """
        self.db = db
        self.permission_authority = permission_authority
        self.dispatcher = dispatcher
        self.routing_table = routing_table
        self.ledger = ApprovalLedger(db)

    def perform_action(
        self,
        domain: str,
        request_id: str,
        action: str,
        actor: Actor,
        comments: Optional[str] = None,
        *,
        expected_status: Optional[str] = None,
    ) -> WorkflowRequest:
        """
        Perform an action on a request.

        Args:
            domain: Request domain
            request_id: Request id within the domain
            action: approve, reject, cancel, process or complete
            actor: Name and role of the caller
            comments: Free-text comments; required when rejecting
            expected_status: Status the caller believes the request is in

        Returns:
            The updated request

        Raises:
            ValidationError: Unknown domain or action, or a rejection without comments
            NotFoundError: If the request does not exist
            ConflictError: If the request changed underneath the caller
            InvalidTransitionError: If the action is not legal from the current status
            AuthorizationError: If the actor's role lacks the required permission
            PersistenceError: If the store fails
        """
        domain_enum = self._parse_domain(domain)
        action_enum = self._parse_action(action)
        comments = comments.strip() if comments else None

        if action_enum == WorkflowAction.REJECT and not comments:
            raise ValidationError.for_field("comments", "Comments are required when rejecting a request")

        request = self._load_for_update(domain_enum, request_id)
        try:
            if expected_status is not None and request.status != expected_status:
                raise ConflictError(
                    f"Request {domain_enum.value}/{request_id} is '{request.status}', "
                    f"expected '{expected_status}'",
                    details={"current_status": request.status, "expected_status": expected_status},
                )

            machine = WorkflowStateMachine(
                domain_enum,
                request.status,
                request.attributes,
                table=self.routing_table,
            )
            planned = machine.plan(action_enum)
            self._authorize(actor, planned, domain_enum, request_id)
            self._apply(request, planned, actor, comments)
        except WorkflowError:
            self.db.rollback()
            raise

        event = WorkflowEvent(
            domain=request.domain,
            request_id=request.id,
            previous_status=planned.from_status,
            new_status=planned.to_status,
            actor_name=actor.name,
            actor_role=actor.role,
            action=planned.action.value,
            comments=comments,
            requestor_ref=request.requestor_ref,
        )
        self._dispatch(event)
        return request

    def available_actions(self, domain: str, request_id: str, actor: Actor) -> List[WorkflowAction]:
        """Actions the actor could legally perform on the request right now."""
        domain_enum = self._parse_domain(domain)
        request = self.get_request(domain_enum, request_id)
        machine = WorkflowStateMachine(
            domain_enum,
            request.status,
            request.attributes,
            table=self.routing_table,
        )
        available = []
        for action in machine.get_available_actions():
            planned = machine.plan(action)
            if self.permission_authority.has_permission(actor.role, planned.required_permission):
                available.append(action)
        return available

    def get_request(self, domain: str, request_id: str) -> WorkflowRequest:
        """Get a request by domain and id.

        Raises:
            NotFoundError: If the request does not exist
        """
        domain_enum = self._parse_domain(domain)
        request = self.db.query(WorkflowRequest).filter(
            and_(
                WorkflowRequest.domain == domain_enum.value,
                WorkflowRequest.id == request_id,
            )
        ).first()
        if not request:
            raise NotFoundError(f"{domain_enum.value.capitalize()} request {request_id} not found")
        return request

    def _parse_domain(self, domain: str) -> Domain:
        try:
            parsed = Domain(domain)
        except ValueError:
            raise ValidationError.for_field("domain", f"Unknown request domain: {domain}")
        if parsed not in self.routing_table:
            raise ValidationError.for_field("domain", f"No workflow configured for domain: {domain}")
        return parsed

    def _parse_action(self, action: str) -> WorkflowAction:
        try:
            return WorkflowAction(action)
        except ValueError:
            raise ValidationError.for_field("action", f"Unknown action: {action}")

    def _load_for_update(self, domain: Domain, request_id: str) -> WorkflowRequest:
        try:
            request = self.db.query(WorkflowRequest).filter(
                and_(
                    WorkflowRequest.domain == domain.value,
                    WorkflowRequest.id == request_id,
                )
            ).with_for_update().first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to load {domain.value} request {request_id}")
            raise PersistenceError(f"Failed to load {domain.value} request {request_id}") from e

        if not request:
            self.db.rollback()
            raise NotFoundError(f"{domain.value.capitalize()} request {request_id} not found")
        return request

    def _authorize(
        self,
        actor: Actor,
        planned: PlannedTransition,
        domain: Domain,
        request_id: str,
    ) -> None:
        if not self.permission_authority.has_permission(actor.role, planned.required_permission):
            logger.warning(
                f"Denied {planned.action.value} on {domain.value}/{request_id} for "
                f"{actor.name} ({actor.role}): requires {planned.required_permission}"
            )
            raise AuthorizationError(actor.role, planned.required_permission)

    def _apply(
        self,
        request: WorkflowRequest,
        planned: PlannedTransition,
        actor: Actor,
        comments: Optional[str],
    ) -> None:
        """Write the status and its ledger row, then commit."""
        request.status = planned.to_status
        self.ledger.append(
            request,
            step_role=planned.step_role,
            actor_name=actor.name,
            actor_role=actor.role,
            action=planned.action.value,
            from_status=planned.from_status,
            result_status=planned.to_status,
            comments=comments,
        )

        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            logger.info(
                f"Concurrent update on {request.domain}/{request.id} while performing "
                f"{planned.action.value}"
            )
            raise ConflictError(
                f"Request {request.domain}/{request.id} was modified concurrently; reload and retry",
                details={"action": planned.action.value},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(
                f"Failed to persist {planned.action.value} on {request.domain}/{request.id} "
                f"({planned.from_status} -> {planned.to_status}) by {actor.name}"
            )
            raise PersistenceError(
                f"Failed to persist {planned.action.value} on {request.domain}/{request.id}"
            ) from e

        logger.info(
            f"{request.domain}/{request.id}: {planned.from_status} -> {planned.to_status} "
            f"({planned.action.value} by {actor.name}, {actor.role})"
        )

    def _dispatch(self, event: WorkflowEvent) -> None:
        try:
            dispatch_event(self.dispatcher, event)
        except Exception:
            logger.exception(
                f"Notification dispatch failed for {event.domain}/{event.request_id} ({event.action})"
            )
