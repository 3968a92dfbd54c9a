"""Default role definitions for RequestFlow.

Each approval checkpoint has a role whose permissions let it clear that
step in every domain that has it. Domain admins process approved requests.
"""

from typing import Dict, List
from .permissions import Resource, Action, Permission


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


def _for_every_domain(action: Action) -> str:
    return f"*:{action.value}"


ADMIN_PERMISSIONS = [
    "*:*"  # Global wildcard - all permissions
]

REQUESTOR_PERMISSIONS = [
    _for_every_domain(Action.READ),
    _for_every_domain(Action.CANCEL),
]

DEPARTMENT_FOCAL_PERMISSIONS = [
    _for_every_domain(Action.READ),
    _for_every_domain(Action.APPROVE_FOCAL),
] + _build_permissions(
    (Resource.CLAIM, Action.VERIFY),
)

LINE_MANAGER_PERMISSIONS = [
    _for_every_domain(Action.READ),
    _for_every_domain(Action.APPROVE_MANAGER),
]

HOD_PERMISSIONS = [
    _for_every_domain(Action.READ),
    _for_every_domain(Action.APPROVE_HOD),
] + _build_permissions(
    # Visa has a combined line manager / HOD step
    (Resource.VISA, Action.APPROVE_MANAGER),
)

FINANCE_PERMISSIONS = _build_permissions(
    (Resource.CLAIM, Action.READ),
    (Resource.CLAIM, Action.APPROVE_FINANCE),
)


def _admin_for(resource: Resource) -> List[str]:
    return _build_permissions(
        (resource, Action.READ),
        (resource, Action.PROCESS),
        (resource, Action.CANCEL),
    )


# Default roles configuration
DEFAULT_ROLES: Dict[str, dict] = {
    "admin": {
        "name": "Admin",
        "description": "Full system access with all permissions",
        "permissions": ADMIN_PERMISSIONS,
        "is_system": True,
    },
    "requestor": {
        "name": "Requestor",
        "description": "Submits requests, follows their progress and can cancel them",
        "permissions": REQUESTOR_PERMISSIONS,
        "is_system": True,
    },
    "department_focal": {
        "name": "Department Focal",
        "description": "First approval checkpoint; verifies expense claims",
        "permissions": DEPARTMENT_FOCAL_PERMISSIONS,
        "is_system": True,
    },
    "line_manager": {
        "name": "Line Manager",
        "description": "Line manager approval checkpoint",
        "permissions": LINE_MANAGER_PERMISSIONS,
        "is_system": True,
    },
    "hod": {
        "name": "HOD",
        "description": "Head of department approval checkpoint",
        "permissions": HOD_PERMISSIONS,
        "is_system": True,
    },
    "finance": {
        "name": "Finance",
        "description": "Final approval of expense claims",
        "permissions": FINANCE_PERMISSIONS,
        "is_system": True,
    },
    "ticketing_admin": {
        "name": "Ticketing Admin",
        "description": "Books flights for approved travel requests",
        "permissions": _admin_for(Resource.TRAVEL),
        "is_system": True,
    },
    "transport_admin": {
        "name": "Transport Admin",
        "description": "Processes approved transport requests",
        "permissions": _admin_for(Resource.TRANSPORT),
        "is_system": True,
    },
    "accommodation_admin": {
        "name": "Accommodation Admin",
        "description": "Assigns rooms for approved accommodation requests",
        "permissions": _admin_for(Resource.ACCOMMODATION),
        "is_system": True,
    },
    "visa_admin": {
        "name": "Visa Admin",
        "description": "Handles embassy processing of approved visa applications",
        "permissions": _admin_for(Resource.VISA),
        "is_system": True,
    },
    "claims_admin": {
        "name": "Claims Admin",
        "description": "Reimburses approved expense claims",
        "permissions": _admin_for(Resource.CLAIM),
        "is_system": True,
    },
}


def get_default_role_permissions(role_key: str) -> List[str]:
    """Get permissions for a default role by key."""
    if role_key not in DEFAULT_ROLES:
        raise ValueError(f"Unknown role: {role_key}")
    return DEFAULT_ROLES[role_key]["permissions"]


def default_role_table() -> Dict[str, List[str]]:
    """Role name -> permissions, as consumed by StaticPermissionAuthority."""
    return {config["name"]: list(config["permissions"]) for config in DEFAULT_ROLES.values()}
