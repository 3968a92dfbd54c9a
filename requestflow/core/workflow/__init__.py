"""Approval workflow for RequestFlow.

Implements the per-domain approval chains:
PENDING (1..n) -> APPROVED -> PROCESSING -> COMPLETED,
with REJECTED and CANCELLED as exits from the pending chain.

Import the engine from ``requestflow.core.workflow.engine``.
"""

from .states import (
    Domain,
    WorkflowAction,
    TravelStatus,
    TransportStatus,
    AccommodationStatus,
    VisaStatus,
    ClaimStatus,
    status_enum,
    parse_status,
    is_valid_status,
)
from .definitions import (
    StepDefinition,
    WorkflowDefinition,
    RoutingTable,
    DEFAULT_ROUTING_TABLE,
    load_routing_table,
)
from .routing import next_status, initial_status
from .machine import WorkflowStateMachine, PlannedTransition
from .events import WorkflowEvent

__all__ = [
    "Domain",
    "WorkflowAction",
    "TravelStatus",
    "TransportStatus",
    "AccommodationStatus",
    "VisaStatus",
    "ClaimStatus",
    "status_enum",
    "parse_status",
    "is_valid_status",
    "StepDefinition",
    "WorkflowDefinition",
    "RoutingTable",
    "DEFAULT_ROUTING_TABLE",
    "load_routing_table",
    "next_status",
    "initial_status",
    "WorkflowStateMachine",
    "PlannedTransition",
    "WorkflowEvent",
]
