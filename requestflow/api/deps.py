from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from requestflow.core.config import Settings, get_settings
from requestflow.core.rbac import PermissionAuthority, RolePermissionAuthority
from requestflow.core.workflow.definitions import RoutingTable, load_routing_table
from requestflow.core.workflow.engine import WorkflowEngine
from requestflow.db.session import SessionLocal
from requestflow.services.dispatch import NotificationDispatcher, get_dispatcher


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_routing_table() -> RoutingTable:
    """Routing table, with the configured YAML overrides applied once per process."""
    return load_routing_table(get_settings().routing_config_path)


def get_permission_authority(db: Session = Depends(get_db)) -> PermissionAuthority:
    """Permission authority backed by the roles table."""
    return RolePermissionAuthority(db)


def get_notification_dispatcher(
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    return get_dispatcher(settings)


def get_workflow_engine(
    db: Session = Depends(get_db),
    permission_authority: PermissionAuthority = Depends(get_permission_authority),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    routing_table: RoutingTable = Depends(get_routing_table),
) -> WorkflowEngine:
    """Workflow engine bound to the request's database session."""
    return WorkflowEngine(db, permission_authority, dispatcher, routing_table=routing_table)
