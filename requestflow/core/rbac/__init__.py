"""RBAC (Role-Based Access Control) module for RequestFlow.

This module defines the permission model, role definitions, and the
permission authority consulted by the workflow engine.
"""

from .permissions import Permission, Resource, Action, PERMISSION_DEFINITIONS
from .checker import (
    PermissionChecker,
    PermissionAuthority,
    StaticPermissionAuthority,
    RolePermissionAuthority,
)

__all__ = [
    "Permission",
    "Resource",
    "Action",
    "PERMISSION_DEFINITIONS",
    "PermissionChecker",
    "PermissionAuthority",
    "StaticPermissionAuthority",
    "RolePermissionAuthority",
]
