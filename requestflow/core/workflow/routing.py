"""Routing rule evaluator.

Pure functions over the routing table: no I/O, no clock, same inputs always
give the same status.
"""

from typing import Any, Dict, Optional

from requestflow.core.errors import InvalidTransitionError

from .definitions import DEFAULT_ROUTING_TABLE, RoutingTable, WorkflowDefinition
from .states import Domain, WorkflowAction


def _first_active_step(
    definition: WorkflowDefinition,
    start: int,
    attributes: Dict[str, Any],
) -> Optional[str]:
    """Walk the chain from ``start``, returning the first step not skipped."""
    for step in definition.steps[start:]:
        if not step.is_skipped(attributes):
            return step.status
    return None


def next_status(
    domain: Domain,
    current_status: str,
    attributes: Optional[Dict[str, Any]] = None,
    table: RoutingTable = DEFAULT_ROUTING_TABLE,
) -> str:
    """
    Compute the status a request moves to when its current step is approved.

    Args:
        domain: Request domain
        current_status: Pending status being cleared
        attributes: Request attributes evaluated by skip predicates
        table: Routing table to consult

    Returns:
        The next pending status, or the domain's approved status once the
        chain is exhausted

    Raises:
        InvalidTransitionError: If ``current_status`` is not a pending status
    """
    definition = table.get(domain)
    index = definition.step_index(current_status)
    if index < 0:
        raise InvalidTransitionError(
            f"Cannot approve a {Domain(domain).value} request in status '{current_status}'",
            current_status,
            WorkflowAction.APPROVE.value,
        )

    upcoming = _first_active_step(definition, index + 1, attributes or {})
    return upcoming if upcoming is not None else definition.approved_status


def initial_status(
    domain: Domain,
    attributes: Optional[Dict[str, Any]] = None,
    table: RoutingTable = DEFAULT_ROUTING_TABLE,
) -> str:
    """First pending status a newly submitted request enters."""
    definition = table.get(domain)
    first = _first_active_step(definition, 0, attributes or {})
    return first if first is not None else definition.approved_status


def next_processing_status(
    domain: Domain,
    current_status: str,
    attributes: Optional[Dict[str, Any]] = None,
    table: RoutingTable = DEFAULT_ROUTING_TABLE,
) -> str:
    """
    Compute the status a request moves to when its current admin stage completes.

    Args:
        domain: Request domain
        current_status: Processing status being completed
        attributes: Request attributes evaluated by stage skip predicates
        table: Routing table to consult

    Returns:
        The next processing stage, or the domain's completed status

    Raises:
        InvalidTransitionError: If ``current_status`` is not a processing status
    """
    definition = table.get(domain)
    chain = definition.processing_chain
    if current_status not in chain or not definition.completed_status:
        raise InvalidTransitionError(
            f"Cannot complete a {Domain(domain).value} request in status '{current_status}'",
            current_status,
            WorkflowAction.COMPLETE.value,
        )

    attributes = attributes or {}
    start = chain.index(current_status)
    for stage in definition.processing_stages[start:]:
        if not stage.is_skipped(attributes):
            return stage.status
    return definition.completed_status
