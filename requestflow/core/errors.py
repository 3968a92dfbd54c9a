"""Workflow error taxonomy.

Every error carries the HTTP status it is surfaced as, so the API layer can
render any of them without knowing the concrete class.
"""

from typing import Any, Dict, Optional


class WorkflowError(Exception):
    """Base class for all errors raised by the workflow engine."""

    status_code: int = 500
    error_code: str = "workflow_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Render as the API error body."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(WorkflowError):
    """Raised when a request id does not resolve to a record."""

    status_code = 404
    error_code = "not_found"


class ValidationError(WorkflowError):
    """Raised for malformed actions or missing required fields."""

    status_code = 400
    error_code = "validation_error"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, details={"fields": {field: message}})


class InvalidTransitionError(WorkflowError):
    """Raised when an action is not legal from the current status."""

    status_code = 400
    error_code = "invalid_transition"

    def __init__(self, message: str, from_status: str, action: str):
        super().__init__(message, details={"current_status": from_status, "action": action})
        self.from_status = from_status
        self.action = action


class AuthorizationError(WorkflowError):
    """Raised when the actor lacks the permission for a step."""

    status_code = 403
    error_code = "forbidden"

    def __init__(self, actor_role: str, required_permission: str):
        super().__init__(
            f"Permission denied: role '{actor_role}' requires {required_permission}",
            details={"required_permission": required_permission, "actor_role": actor_role},
        )
        self.actor_role = actor_role
        self.required_permission = required_permission


class ConflictError(WorkflowError):
    """Raised when a concurrent transition won the race. Callers may retry."""

    status_code = 409
    error_code = "conflict"


class PersistenceError(WorkflowError):
    """Raised when the underlying store fails."""

    status_code = 500
    error_code = "persistence_error"


class LedgerImmutableError(WorkflowError):
    """Raised when something attempts to modify or delete a ledger row."""

    status_code = 500
    error_code = "ledger_immutable"
