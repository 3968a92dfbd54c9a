"""Request domains, per-domain status enumerations and workflow actions.

Status lifecycle shared by every domain:

    ┌────────┐
    │ DRAFT  │ (optional, external submission)
    └───┬────┘
        │ submit (external)
    ┌───▼──────────┐   reject   ┌──────────┐
    │ PENDING  1..n│───────────►│ REJECTED │
    └───┬──────────┘            └──────────┘
        │ approve (routing table, skip predicates)
        │                cancel ┌───────────┐
        │ ─────────────────────►│ CANCELLED │
    ┌───▼──────┐                └───────────┘
    │ APPROVED │ (may itself be a processing status)
    └───┬──────┘
        │ process
    ┌───▼────────┐
    │ PROCESSING │
    └───┬────────┘
        │ complete
    ┌───▼──────┐
    │ COMPLETED│
    └──────────┘

Values are the strings stored in the ``status`` column.
"""

from enum import Enum
from typing import Dict, Type


class Domain(str, Enum):
    """Request domains handled by the platform."""

    TRAVEL = "travel"
    TRANSPORT = "transport"
    VISA = "visa"
    ACCOMMODATION = "accommodation"
    CLAIM = "claim"


class WorkflowAction(str, Enum):
    """Actions a caller can perform on a request."""

    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"

    # Admin processing phase
    PROCESS = "process"
    COMPLETE = "complete"


# Actions that clear (or refuse) an approval step
STEP_ACTIONS = frozenset([WorkflowAction.APPROVE, WorkflowAction.REJECT])

# Actions performed by a domain admin after approval
PROCESSING_ACTIONS = frozenset([WorkflowAction.PROCESS, WorkflowAction.COMPLETE])


class TravelStatus(str, Enum):
    """Travel request form (TRF) statuses."""

    DRAFT = "Draft"
    PENDING_DEPARTMENT_FOCAL = "Pending Department Focal"
    PENDING_LINE_MANAGER = "Pending Line Manager"
    PENDING_HOD = "Pending HOD"
    APPROVED = "Approved"
    PROCESSING_FLIGHTS = "Processing Flights"
    PROCESSING_ACCOMMODATION = "Processing Accommodation"
    AWAITING_VISA = "Awaiting Visa"
    PROCESSED = "TRF Processed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class TransportStatus(str, Enum):
    """Transport request statuses."""

    DRAFT = "Draft"
    PENDING_DEPARTMENT_FOCAL = "Pending Department Focal"
    PENDING_LINE_MANAGER = "Pending Line Manager"
    PENDING_HOD = "Pending HOD"
    APPROVED = "Approved"
    PROCESSING = "Processing with Transport Admin"
    COMPLETED = "Completed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class AccommodationStatus(str, Enum):
    """Accommodation request statuses."""

    DRAFT = "Draft"
    PENDING_DEPARTMENT_FOCAL = "Pending Department Focal"
    PENDING_LINE_MANAGER = "Pending Line Manager"
    PENDING_HOD = "Pending HOD"
    APPROVED = "Approved"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class VisaStatus(str, Enum):
    """Visa application statuses.

    A visa application that clears its approval chain goes straight to the
    visa admin, so there is no separate ``Approved`` status.
    """

    DRAFT = "Draft"
    PENDING_DEPARTMENT_FOCAL = "Pending Department Focal"
    PENDING_LINE_MANAGER_HOD = "Pending Line Manager/HOD"
    PROCESSING = "Processing with Visa Admin"
    PROCESSED = "Processed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class ClaimStatus(str, Enum):
    """Expense claim statuses."""

    PENDING_VERIFICATION = "Pending Verification"
    PENDING_HOD = "Pending HOD Approval"
    PENDING_FINANCE = "Pending Finance Approval"
    APPROVED = "Approved"
    PROCESSING = "Processing with Claims Admin"
    PROCESSED = "Processed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


DOMAIN_STATUSES: Dict[Domain, Type[Enum]] = {
    Domain.TRAVEL: TravelStatus,
    Domain.TRANSPORT: TransportStatus,
    Domain.ACCOMMODATION: AccommodationStatus,
    Domain.VISA: VisaStatus,
    Domain.CLAIM: ClaimStatus,
}


def status_enum(domain: Domain) -> Type[Enum]:
    """Get the closed status enumeration for a domain."""
    return DOMAIN_STATUSES[Domain(domain)]


def parse_status(domain: Domain, value: str) -> Enum:
    """Parse a stored status string into the domain's enum.

    Raises:
        ValueError: If the value is not a status of that domain
    """
    return status_enum(domain)(value)


def is_valid_status(domain: Domain, value: str) -> bool:
    """Check if a status string belongs to the domain's enumeration."""
    try:
        parse_status(domain, value)
    except ValueError:
        return False
    return True
