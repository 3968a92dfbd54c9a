"""Tests for concurrent actions on the same request."""

import pytest

from requestflow.core.errors import ConflictError
from requestflow.core.workflow.engine import WorkflowEngine
from requestflow.core.workflow.ledger import ApprovalLedger
from requestflow.db.models import WorkflowRequest

from tests.factories import create_request


def test_second_writer_gets_conflict(session_factory, permission_authority, dispatcher, focal):
    """Two approvers act on the same step; only the first transition is recorded."""
    setup = session_factory()
    trf = create_request(setup, attributes={"travel_type": "Domestic"}, commit=True)
    request_id = trf.id
    setup.close()

    session_a = session_factory()
    session_b = session_factory()
    try:
        # B reads the request before A's approval lands
        session_b.get(WorkflowRequest, ("travel", request_id))

        engine_a = WorkflowEngine(session_a, permission_authority, dispatcher)
        engine_b = WorkflowEngine(session_b, permission_authority, dispatcher)

        engine_a.perform_action("travel", request_id, "approve", focal)

        with pytest.raises(ConflictError):
            engine_b.perform_action("travel", request_id, "approve", focal)
    finally:
        session_a.close()
        session_b.close()

    check = session_factory()
    try:
        assert check.get(WorkflowRequest, ("travel", request_id)).status == "Pending Line Manager"
        assert ApprovalLedger(check).count("travel", request_id) == 1
    finally:
        check.close()
    assert len(dispatcher.calls) == 1
