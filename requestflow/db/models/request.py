"""Workflow request model.

One row per request, keyed by ``(domain, id)`` so every domain keeps its own
id namespace.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, Integer
from sqlalchemy.orm import validates

from requestflow.db.base import Base


class WorkflowRequest(Base):
    """
    A request moving through its domain's approval workflow.

    ``version`` is the optimistic-concurrency counter: every UPDATE is
    conditioned on the version that was read, so a write based on a stale
    read matches no rows and fails.
    """
    __tablename__ = "workflow_requests"

    domain = Column(String(32), primary_key=True)
    id = Column(String(64), primary_key=True)

    # Workflow state
    status = Column(String(64), nullable=False, index=True)

    # Who submitted the request; never changes
    requestor_ref = Column(String(255), nullable=False, index=True)

    # Routing-relevant fields (travel_type, estimated_cost, department, ...)
    attributes = Column(JSON, nullable=False, default=dict)

    version = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    @validates("requestor_ref")
    def _validate_requestor_ref(self, key, value):
        current = self.requestor_ref
        if current is not None and value != current:
            raise ValueError(f"requestor_ref of {self.domain}/{self.id} cannot be changed")
        return value

    def __repr__(self) -> str:
        return f"<WorkflowRequest {self.domain}/{self.id} [{self.status}]>"

