"""Approval ledger.

Append-only history of workflow transitions. The ledger adds rows to the
caller's session and never commits; the engine commits the status update and
the ledger row together.
"""

from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from requestflow.db.models.approval import ApprovalStep
from requestflow.db.models.request import WorkflowRequest


class ApprovalLedger:
    """Reads and appends approval steps. There is no update or delete API."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        request: WorkflowRequest,
        *,
        step_role: str,
        actor_name: str,
        actor_role: str,
        action: str,
        from_status: str,
        result_status: str,
        comments: Optional[str] = None,
    ) -> ApprovalStep:
        """
        Add one ledger row for a transition of ``request``.

        Args:
            request: The request being transitioned
            step_role: Role of the checkpoint being cleared
            actor_name: Display name of the actor
            actor_role: Role the actor acted as
            action: Action performed
            from_status: Status before the transition
            result_status: Status after the transition
            comments: Free-text comments (always present for rejections)

        Returns:
            The pending ApprovalStep row
        """
        step = ApprovalStep(
            request_domain=request.domain,
            request_id=request.id,
            step_role=step_role,
            actor_name=actor_name,
            actor_role=actor_role,
            action=action,
            from_status=from_status,
            result_status=result_status,
            comments=comments,
        )
        self.db.add(step)
        return step

    def _filter(self, domain: str, request_id: str):
        return and_(
            ApprovalStep.request_domain == domain,
            ApprovalStep.request_id == request_id,
        )

    def list_steps(self, domain: str, request_id: str) -> List[ApprovalStep]:
        """Get the steps of a request in the order they happened."""
        return (
            self.db.query(ApprovalStep)
            .filter(self._filter(domain, request_id))
            .order_by(ApprovalStep.created_at, ApprovalStep.id)
            .all()
        )

    def count(self, domain: str, request_id: str) -> int:
        return (
            self.db.query(func.count(ApprovalStep.id))
            .filter(self._filter(domain, request_id))
            .scalar()
        )
