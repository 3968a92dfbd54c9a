"""Approval ledger model.

Append-only record of every workflow transition.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, Index, ForeignKeyConstraint, event

from requestflow.core.errors import LedgerImmutableError
from requestflow.db.base import Base


class ApprovalStep(Base):
    """
    One ledger entry per successful transition.

    Rows are never updated or deleted. The ORM guards below enforce this
    for application code; migration 0002 adds database triggers.
    """
    __tablename__ = "approval_steps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_domain = Column(String(32), nullable=False)
    request_id = Column(String(64), nullable=False)

    # Checkpoint being cleared and who cleared it
    step_role = Column(String(100), nullable=False)
    actor_name = Column(String(255), nullable=False)
    actor_role = Column(String(100), nullable=False)

    # Transition details
    action = Column(String(32), nullable=False)
    from_status = Column(String(64), nullable=False)
    result_status = Column(String(64), nullable=False)

    # Required for rejections
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        ForeignKeyConstraint(
            ["request_domain", "request_id"],
            ["workflow_requests.domain", "workflow_requests.id"],
        ),
        Index("ix_approval_steps_request", "request_domain", "request_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ApprovalStep {self.request_domain}/{self.request_id} {self.from_status} -> {self.result_status}>"


@event.listens_for(ApprovalStep, "before_update")
def _prevent_update(mapper, connection, target: ApprovalStep) -> None:
    raise LedgerImmutableError(f"Approval step {target.id} is immutable and cannot be updated")


@event.listens_for(ApprovalStep, "before_delete")
def _prevent_delete(mapper, connection, target: ApprovalStep) -> None:
    raise LedgerImmutableError(f"Approval step {target.id} is immutable and cannot be deleted")
