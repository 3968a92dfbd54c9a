"""Routing rule table: one workflow definition per request domain.

Routing is data. Each domain lists its pending approval steps in order,
optionally with a skip predicate, followed by the statuses reachable once
the chain is exhausted.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import yaml

from .rules import Predicate, condition, predicate_from_dict, skip_unless
from .states import (
    Domain,
    TravelStatus,
    TransportStatus,
    AccommodationStatus,
    VisaStatus,
    ClaimStatus,
    status_enum,
)


# Travel requests need HOD sign-off only for these travel types or above this cost
HOD_REQUIRED_TRAVEL_TYPES = ("Overseas", "Home Leave Passage")
HOD_COST_THRESHOLD = 1000

# Flights for these travel types are only processed once the visa is issued
VISA_REQUIRED_TRAVEL_TYPES = ("Overseas", "Home Leave Passage")


@dataclass(frozen=True)
class StepDefinition:
    """A pending approval checkpoint."""

    status: str
    role: str
    permission: str
    skip_when: Optional[Predicate] = None

    def is_skipped(self, attributes: Dict[str, Any]) -> bool:
        return self.skip_when is not None and self.skip_when.evaluate(attributes)


@dataclass(frozen=True)
class ProcessingStage:
    """An admin stage entered after the processing status, in order."""

    status: str
    skip_when: Optional[Predicate] = None

    def is_skipped(self, attributes: Dict[str, Any]) -> bool:
        return self.skip_when is not None and self.skip_when.evaluate(attributes)


@dataclass(frozen=True)
class WorkflowDefinition:
    """Workflow shape of one request domain."""

    domain: Domain
    steps: Tuple[StepDefinition, ...]
    approved_status: str
    rejected_status: str = "Rejected"
    cancelled_status: str = "Cancelled"
    draft_status: Optional[str] = None
    processing_status: Optional[str] = None
    completed_status: Optional[str] = None
    processing_role: Optional[str] = None
    processing_permission: Optional[str] = None
    cancel_permission: Optional[str] = None
    processing_stages: Tuple[ProcessingStage, ...] = field(default_factory=tuple)

    @property
    def pending_statuses(self) -> Tuple[str, ...]:
        """Pending statuses in chain order."""
        return tuple(step.status for step in self.steps)

    @property
    def processing_chain(self) -> Tuple[str, ...]:
        """Statuses from which ``complete`` is legal, in order."""
        if not self.processing_status:
            return ()
        return (self.processing_status, *(stage.status for stage in self.processing_stages))

    @property
    def post_approval_statuses(self) -> FrozenSet[str]:
        statuses = {self.approved_status, *self.processing_chain}
        if self.completed_status:
            statuses.add(self.completed_status)
        return frozenset(statuses)

    @property
    def terminal_statuses(self) -> FrozenSet[str]:
        """Statuses with no outgoing transition at all."""
        statuses = {self.rejected_status, self.cancelled_status}
        if self.completed_status:
            statuses.add(self.completed_status)
        return frozenset(statuses)

    @property
    def cancellable_statuses(self) -> FrozenSet[str]:
        statuses = set(self.pending_statuses)
        if self.draft_status:
            statuses.add(self.draft_status)
        return frozenset(statuses)

    @property
    def has_processing_phase(self) -> bool:
        """True when an approved request must be picked up before it is processed."""
        return bool(self.processing_status) and self.processing_status != self.approved_status

    def is_pending(self, status: str) -> bool:
        return status in self.pending_statuses

    def is_terminal(self, status: str) -> bool:
        return status in self.terminal_statuses

    def step_for(self, status: str) -> Optional[StepDefinition]:
        """Get the step whose pending status is ``status``."""
        for step in self.steps:
            if step.status == status:
                return step
        return None

    def step_index(self, status: str) -> int:
        """Position of a pending status in the chain, -1 if not pending."""
        for index, step in enumerate(self.steps):
            if step.status == status:
                return index
        return -1

    def all_statuses(self) -> FrozenSet[str]:
        statuses = set(self.pending_statuses) | self.post_approval_statuses | self.terminal_statuses
        if self.draft_status:
            statuses.add(self.draft_status)
        return frozenset(statuses)

    def validate(self) -> None:
        """Check every status named here exists in the domain's enumeration.

        Raises:
            ValueError: On an unknown status or an empty chain
        """
        if not self.steps:
            raise ValueError(f"Workflow for {self.domain.value} has no approval steps")
        known = {member.value for member in status_enum(self.domain)}
        unknown = sorted(self.all_statuses() - known)
        if unknown:
            raise ValueError(
                f"Workflow for {self.domain.value} names unknown statuses: {', '.join(unknown)}"
            )
        if len(set(self.pending_statuses)) != len(self.steps):
            raise ValueError(f"Workflow for {self.domain.value} repeats a pending status")
        if self.processing_stages and not (self.processing_status and self.completed_status):
            raise ValueError(
                f"Workflow for {self.domain.value} has processing stages but no processing "
                f"or completed status"
            )
        if len(set(self.processing_chain)) != len(self.processing_chain):
            raise ValueError(f"Workflow for {self.domain.value} repeats a processing status")


def _standard_chain(
    domain: Domain,
    focal: str,
    manager: str,
    hod: str,
    hod_skip: Optional[Predicate] = None,
) -> Tuple[StepDefinition, ...]:
    prefix = domain.value
    return (
        StepDefinition(focal, "Department Focal", f"{prefix}:approve_focal"),
        StepDefinition(manager, "Line Manager", f"{prefix}:approve_manager"),
        StepDefinition(hod, "HOD", f"{prefix}:approve_hod", skip_when=hod_skip),
    )


TRAVEL_WORKFLOW = WorkflowDefinition(
    domain=Domain.TRAVEL,
    steps=_standard_chain(
        Domain.TRAVEL,
        TravelStatus.PENDING_DEPARTMENT_FOCAL.value,
        TravelStatus.PENDING_LINE_MANAGER.value,
        TravelStatus.PENDING_HOD.value,
        hod_skip=skip_unless(
            condition("travel_type", "in", list(HOD_REQUIRED_TRAVEL_TYPES)),
            condition("estimated_cost", "gt", HOD_COST_THRESHOLD),
        ),
    ),
    approved_status=TravelStatus.APPROVED.value,
    draft_status=TravelStatus.DRAFT.value,
    processing_status=TravelStatus.PROCESSING_FLIGHTS.value,
    completed_status=TravelStatus.PROCESSED.value,
    processing_role="Ticketing Admin",
    processing_permission="travel:process",
    cancel_permission="travel:cancel",
    # After flights: room assignment when requested, then visa for international trips
    processing_stages=(
        ProcessingStage(
            TravelStatus.PROCESSING_ACCOMMODATION.value,
            skip_when=skip_unless(condition("has_accommodation_request", "eq", True)),
        ),
        ProcessingStage(
            TravelStatus.AWAITING_VISA.value,
            skip_when=skip_unless(condition("travel_type", "in", list(VISA_REQUIRED_TRAVEL_TYPES))),
        ),
    ),
)

TRANSPORT_WORKFLOW = WorkflowDefinition(
    domain=Domain.TRANSPORT,
    steps=_standard_chain(
        Domain.TRANSPORT,
        TransportStatus.PENDING_DEPARTMENT_FOCAL.value,
        TransportStatus.PENDING_LINE_MANAGER.value,
        TransportStatus.PENDING_HOD.value,
    ),
    approved_status=TransportStatus.APPROVED.value,
    draft_status=TransportStatus.DRAFT.value,
    processing_status=TransportStatus.PROCESSING.value,
    completed_status=TransportStatus.COMPLETED.value,
    processing_role="Transport Admin",
    processing_permission="transport:process",
    cancel_permission="transport:cancel",
)

ACCOMMODATION_WORKFLOW = WorkflowDefinition(
    domain=Domain.ACCOMMODATION,
    steps=_standard_chain(
        Domain.ACCOMMODATION,
        AccommodationStatus.PENDING_DEPARTMENT_FOCAL.value,
        AccommodationStatus.PENDING_LINE_MANAGER.value,
        AccommodationStatus.PENDING_HOD.value,
    ),
    approved_status=AccommodationStatus.APPROVED.value,
    draft_status=AccommodationStatus.DRAFT.value,
    processing_status=AccommodationStatus.PROCESSING.value,
    completed_status=AccommodationStatus.COMPLETED.value,
    processing_role="Accommodation Admin",
    processing_permission="accommodation:process",
    cancel_permission="accommodation:cancel",
)

VISA_WORKFLOW = WorkflowDefinition(
    domain=Domain.VISA,
    steps=(
        StepDefinition(VisaStatus.PENDING_DEPARTMENT_FOCAL.value, "Department Focal", "visa:approve_focal"),
        StepDefinition(VisaStatus.PENDING_LINE_MANAGER_HOD.value, "Line Manager/HOD", "visa:approve_manager"),
    ),
    # Fully approved applications land directly with the visa admin
    approved_status=VisaStatus.PROCESSING.value,
    draft_status=VisaStatus.DRAFT.value,
    processing_status=VisaStatus.PROCESSING.value,
    completed_status=VisaStatus.PROCESSED.value,
    processing_role="Visa Admin",
    processing_permission="visa:process",
    cancel_permission="visa:cancel",
)

CLAIM_WORKFLOW = WorkflowDefinition(
    domain=Domain.CLAIM,
    steps=(
        StepDefinition(ClaimStatus.PENDING_VERIFICATION.value, "Department Focal", "claim:verify"),
        StepDefinition(ClaimStatus.PENDING_HOD.value, "HOD", "claim:approve_hod"),
        StepDefinition(ClaimStatus.PENDING_FINANCE.value, "Finance", "claim:approve_finance"),
    ),
    approved_status=ClaimStatus.APPROVED.value,
    processing_status=ClaimStatus.PROCESSING.value,
    completed_status=ClaimStatus.PROCESSED.value,
    processing_role="Claims Admin",
    processing_permission="claim:process",
    cancel_permission="claim:cancel",
)


class RoutingTable:
    """Workflow definitions keyed by domain."""

    def __init__(self, definitions: List[WorkflowDefinition]):
        self._definitions: Dict[Domain, WorkflowDefinition] = {}
        for definition in definitions:
            definition.validate()
            self._definitions[definition.domain] = definition

    def get(self, domain: Domain) -> WorkflowDefinition:
        """Get the workflow definition for a domain.

        Raises:
            KeyError: If the domain has no definition
        """
        return self._definitions[Domain(domain)]

    def __contains__(self, domain: object) -> bool:
        try:
            return Domain(domain) in self._definitions
        except ValueError:
            return False

    def domains(self) -> List[Domain]:
        return list(self._definitions.keys())

    def with_overrides(self, overrides: Dict[str, Any]) -> "RoutingTable":
        """Return a copy with per-domain overrides applied.

        Overrides map a domain name to a mapping with optional ``skip`` (status
        -> predicate dict, or null to remove the predicate) and ``roles`` (status
        -> role name) entries.
        """
        definitions = []
        for domain, definition in self._definitions.items():
            override = overrides.get(domain.value) or {}
            definitions.append(_apply_override(definition, override))
        return RoutingTable(definitions)


def _apply_override(definition: WorkflowDefinition, override: Dict[str, Any]) -> WorkflowDefinition:
    if not isinstance(override, dict):
        raise TypeError(
            f"Routing override for {definition.domain.value} must be a mapping, "
            f"got {type(override).__name__}"
        )

    skips = override.get("skip", {}) or {}
    roles = override.get("roles", {}) or {}
    known = set(definition.pending_statuses)
    unknown = sorted((set(skips) | set(roles)) - known)
    if unknown:
        raise ValueError(
            f"Routing override for {definition.domain.value} names non-pending statuses: "
            f"{', '.join(unknown)}"
        )

    steps = []
    for step in definition.steps:
        if step.status in skips:
            raw = skips[step.status]
            step = replace(step, skip_when=predicate_from_dict(raw) if raw else None)
        if step.status in roles:
            step = replace(step, role=roles[step.status])
        steps.append(step)
    return replace(definition, steps=tuple(steps))


DEFAULT_ROUTING_TABLE = RoutingTable([
    TRAVEL_WORKFLOW,
    TRANSPORT_WORKFLOW,
    ACCOMMODATION_WORKFLOW,
    VISA_WORKFLOW,
    CLAIM_WORKFLOW,
])


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_routing_overrides(config_path: str) -> Dict[str, Any]:
    """Load routing overrides from a YAML file.

    Args:
        config_path: Path to the routing configuration file

    Returns:
        Overrides dictionary keyed by domain name

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is invalid YAML
        TypeError: If the root is not a mapping
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Routing configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Routing configuration root must be a mapping, got {type(config).__name__}"
        )

    config = _expand_env_vars(config)

    unknown = sorted(set(config) - {d.value for d in Domain})
    if unknown:
        raise ValueError(f"Unknown domains in routing configuration: {', '.join(unknown)}")

    return config


def load_routing_table(config_path: Optional[str] = None) -> RoutingTable:
    """Build the routing table, applying a YAML override file when given."""
    if not config_path:
        return DEFAULT_ROUTING_TABLE
    return DEFAULT_ROUTING_TABLE.with_overrides(load_routing_overrides(config_path))
