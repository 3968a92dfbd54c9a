"""Database seeding for RequestFlow.

Creates the default system roles.
"""

from sqlalchemy.orm import Session

from requestflow.db.models import Role
from requestflow.core.rbac.roles import DEFAULT_ROLES


def seed_default_roles(db: Session) -> dict[str, Role]:
    """
    Create the default roles.

    Roles are idempotent - if they already exist, returns existing roles.

    Args:
        db: Database session

    Returns:
        Dict mapping role key to Role object
    """
    created_roles = {}

    for role_key, role_config in DEFAULT_ROLES.items():
        existing = db.query(Role).filter(Role.name == role_config["name"]).first()

        if existing:
            created_roles[role_key] = existing
            continue

        role = Role(
            name=role_config["name"],
            description=role_config["description"],
            permissions=list(role_config["permissions"]),
            is_system=role_config["is_system"],
        )
        db.add(role)
        created_roles[role_key] = role

    db.flush()
    return created_roles
