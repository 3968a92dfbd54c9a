"""Permission checking for RequestFlow.

The workflow engine never looks at sessions or users. It receives an
already-resolved actor role and asks a PermissionAuthority whether that role
holds a permission.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from .permissions import Permission


class PermissionChecker:
    """Checks a set of granted permission strings, honouring wildcards."""

    def __init__(self, user_permissions: Iterable[str]):
        """
        Initialize with a role's permissions list.

        Args:
            user_permissions: List of permission strings from the role
        """
        self.permissions = set(user_permissions)

    def has_permission(self, permission: Union[str, Permission]) -> bool:
        """Check for a permission, exact or through a wildcard."""
        perm_str = str(permission) if isinstance(permission, Permission) else permission

        if perm_str in self.permissions:
            return True

        # Global admin wildcard
        if "*:*" in self.permissions:
            return True

        if ":" in perm_str:
            resource, action = perm_str.split(":", 1)
            # resource:* grants all actions on the resource
            if f"{resource}:*" in self.permissions:
                return True
            # *:action grants the action on every resource
            if f"*:{action}" in self.permissions:
                return True

        return False

    def has_any_permission(self, permissions: List[Union[str, Permission]]) -> bool:
        """Check if the role has any of the given permissions."""
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: List[Union[str, Permission]]) -> bool:
        """Check if the role has all of the given permissions."""
        return all(self.has_permission(p) for p in permissions)


class PermissionAuthority(ABC):
    """Answers "can a role perform this permission"."""

    @abstractmethod
    def has_permission(self, actor_role: str, permission_name: str) -> bool:
        """Return True if the role holds the permission."""


class StaticPermissionAuthority(PermissionAuthority):
    """Permission authority backed by an in-memory role table."""

    def __init__(self, role_permissions: Dict[str, List[str]]):
        self._checkers = {
            role.strip(): PermissionChecker(perms) for role, perms in role_permissions.items()
        }

    def has_permission(self, actor_role: str, permission_name: str) -> bool:
        checker = self._checkers.get((actor_role or "").strip())
        if checker is None:
            return False
        return checker.has_permission(permission_name)


class RolePermissionAuthority(PermissionAuthority):
    """Permission authority backed by the ``roles`` table."""

    def __init__(self, db: Session):
        self.db = db
        self._cache: Dict[str, Optional[PermissionChecker]] = {}

    def has_permission(self, actor_role: str, permission_name: str) -> bool:
        checker = self._checker_for(actor_role)
        if checker is None:
            return False
        return checker.has_permission(permission_name)

    def _checker_for(self, actor_role: str) -> Optional[PermissionChecker]:
        from requestflow.db.models.role import Role

        name = (actor_role or "").strip()
        if name not in self._cache:
            role = self.db.query(Role).filter(Role.name == name).first()
            self._cache[name] = PermissionChecker(role.permissions or []) if role else None
        return self._cache[name]
