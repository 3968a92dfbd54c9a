"""Workflow state machine.

Validates an action against a request's current status and plans the
transition. Permission checks and persistence happen in the engine; the
machine never touches the database.
"""

from typing import Any, Dict, List, NamedTuple, Optional

from requestflow.core.errors import InvalidTransitionError

from .definitions import DEFAULT_ROUTING_TABLE, RoutingTable, WorkflowDefinition
from .routing import next_processing_status, next_status
from .states import PROCESSING_ACTIONS, STEP_ACTIONS, Domain, WorkflowAction


class PlannedTransition(NamedTuple):
    """Outcome of validating an action against a status."""
    action: WorkflowAction
    from_status: str
    to_status: str
    step_role: str
    required_permission: str


class WorkflowStateMachine:
    """
    State machine for one request.

    Holds the request's domain, status and attributes and answers which
    actions are legal and where they lead.
    """

    def __init__(
        self,
        domain: Domain,
        current_status: str,
        attributes: Optional[Dict[str, Any]] = None,
        *,
        table: RoutingTable = DEFAULT_ROUTING_TABLE,
    ):
        self.domain = Domain(domain)
        self.status = current_status
        self.attributes = attributes or {}
        self.table = table
        self.definition: WorkflowDefinition = table.get(self.domain)

    @property
    def is_terminal(self) -> bool:
        """Check if the current status has no further transitions."""
        return self.definition.is_terminal(self.status)

    @property
    def is_pending(self) -> bool:
        return self.definition.is_pending(self.status)

    def can_perform(self, action: WorkflowAction) -> bool:
        """Check if an action is legal from the current status, ignoring permissions."""
        try:
            self.plan(action)
        except InvalidTransitionError:
            return False
        return True

    def get_available_actions(self) -> List[WorkflowAction]:
        """Get actions that are legal from the current status."""
        return [action for action in WorkflowAction if self.can_perform(action)]

    def plan(self, action: WorkflowAction) -> PlannedTransition:
        """
        Plan a transition.

        Args:
            action: The action to perform

        Returns:
            The planned transition with its target status and required permission

        Raises:
            InvalidTransitionError: If the action is not legal from the current status
        """
        action = WorkflowAction(action)

        if action in STEP_ACTIONS:
            if action == WorkflowAction.APPROVE:
                return self._plan_approve()
            return self._plan_reject()
        if action in PROCESSING_ACTIONS:
            if action == WorkflowAction.PROCESS:
                return self._plan_process()
            return self._plan_complete()
        return self._plan_cancel()

    def _illegal(self, action: WorkflowAction, reason: str = "") -> InvalidTransitionError:
        message = f"Cannot {action.value} a {self.domain.value} request in status '{self.status}'"
        if reason:
            message = f"{message}: {reason}"
        return InvalidTransitionError(message, self.status, action.value)

    def _current_step(self, action: WorkflowAction):
        step = self.definition.step_for(self.status)
        if step is None:
            raise self._illegal(action, "request is not awaiting approval")
        return step

    def _plan_approve(self) -> PlannedTransition:
        step = self._current_step(WorkflowAction.APPROVE)
        return PlannedTransition(
            action=WorkflowAction.APPROVE,
            from_status=self.status,
            to_status=next_status(self.domain, self.status, self.attributes, self.table),
            step_role=step.role,
            required_permission=step.permission,
        )

    def _plan_reject(self) -> PlannedTransition:
        step = self._current_step(WorkflowAction.REJECT)
        return PlannedTransition(
            action=WorkflowAction.REJECT,
            from_status=self.status,
            to_status=self.definition.rejected_status,
            step_role=step.role,
            required_permission=step.permission,
        )

    def _plan_cancel(self) -> PlannedTransition:
        if self.status not in self.definition.cancellable_statuses:
            raise self._illegal(WorkflowAction.CANCEL)
        step = self.definition.step_for(self.status)
        return PlannedTransition(
            action=WorkflowAction.CANCEL,
            from_status=self.status,
            to_status=self.definition.cancelled_status,
            step_role=step.role if step else "Requestor",
            required_permission=self.definition.cancel_permission or f"{self.domain.value}:cancel",
        )

    def _processing_permission(self) -> str:
        return self.definition.processing_permission or f"{self.domain.value}:process"

    def _plan_process(self) -> PlannedTransition:
        if not self.definition.has_processing_phase or self.status != self.definition.approved_status:
            raise self._illegal(WorkflowAction.PROCESS)
        return PlannedTransition(
            action=WorkflowAction.PROCESS,
            from_status=self.status,
            to_status=self.definition.processing_status,
            step_role=self.definition.processing_role or "Admin",
            required_permission=self._processing_permission(),
        )

    def _plan_complete(self) -> PlannedTransition:
        return PlannedTransition(
            action=WorkflowAction.COMPLETE,
            from_status=self.status,
            to_status=next_processing_status(self.domain, self.status, self.attributes, self.table),
            step_role=self.definition.processing_role or "Admin",
            required_permission=self._processing_permission(),
        )
