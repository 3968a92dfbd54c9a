"""Permission model for RequestFlow RBAC.

Permissions are ``resource:action`` strings. The resource is the request
domain; the action names the approval step or operation being performed.

Examples:
  - travel:approve_focal
  - claim:verify
  - visa:process
  - transport:cancel
"""

from enum import Enum
from typing import NamedTuple, FrozenSet


class Resource(str, Enum):
    """Resources that can be protected by permissions: the request domains."""

    TRAVEL = "travel"
    TRANSPORT = "transport"
    VISA = "visa"
    ACCOMMODATION = "accommodation"
    CLAIM = "claim"


class Action(str, Enum):
    """Actions that can be performed on a domain's requests."""

    READ = "read"

    # Approval steps
    VERIFY = "verify"                     # Claim verification
    APPROVE_FOCAL = "approve_focal"       # Department focal
    APPROVE_MANAGER = "approve_manager"   # Line manager
    APPROVE_HOD = "approve_hod"           # Head of department
    APPROVE_FINANCE = "approve_finance"   # Finance

    # Lifecycle
    CANCEL = "cancel"
    PROCESS = "process"                   # Domain admin processing


class Permission(NamedTuple):
    """A permission is a combination of resource and action."""
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"

    @classmethod
    def from_string(cls, perm_str: str) -> "Permission":
        """Parse a permission string like 'travel:approve_hod'."""
        parts = perm_str.split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid permission format: {perm_str}")
        return cls(Resource(parts[0]), Action(parts[1]))


_COMMON_ACTIONS = frozenset([Action.READ, Action.CANCEL, Action.PROCESS])

# Maps each domain to the actions its workflow uses
PERMISSION_MATRIX: dict[Resource, FrozenSet[Action]] = {
    Resource.TRAVEL: _COMMON_ACTIONS | {
        Action.APPROVE_FOCAL, Action.APPROVE_MANAGER, Action.APPROVE_HOD,
    },
    Resource.TRANSPORT: _COMMON_ACTIONS | {
        Action.APPROVE_FOCAL, Action.APPROVE_MANAGER, Action.APPROVE_HOD,
    },
    Resource.ACCOMMODATION: _COMMON_ACTIONS | {
        Action.APPROVE_FOCAL, Action.APPROVE_MANAGER, Action.APPROVE_HOD,
    },
    Resource.VISA: _COMMON_ACTIONS | {
        Action.APPROVE_FOCAL, Action.APPROVE_MANAGER,
    },
    Resource.CLAIM: _COMMON_ACTIONS | {
        Action.VERIFY, Action.APPROVE_HOD, Action.APPROVE_FINANCE,
    },
}


def _generate_permission_definitions() -> dict[str, Permission]:
    """Generate all valid permission combinations from the matrix."""
    permissions = {}
    for resource, actions in PERMISSION_MATRIX.items():
        for action in actions:
            perm = Permission(resource, action)
            permissions[str(perm)] = perm
    return permissions


# All valid permissions as a dictionary: "resource:action" -> Permission
PERMISSION_DEFINITIONS = _generate_permission_definitions()


def is_valid_permission(perm_str: str) -> bool:
    """Check if a permission string is valid."""
    return perm_str in PERMISSION_DEFINITIONS


def get_permissions_for_resource(resource: Resource) -> list[str]:
    """Get all valid permission strings for a resource."""
    return [
        str(Permission(resource, action))
        for action in PERMISSION_MATRIX.get(resource, set())
    ]


def get_all_permissions() -> list[str]:
    """Get all valid permission strings."""
    return list(PERMISSION_DEFINITIONS.keys())
