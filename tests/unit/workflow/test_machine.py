"""Tests for the workflow state machine."""

import pytest

from requestflow.core.errors import InvalidTransitionError
from requestflow.core.workflow.machine import WorkflowStateMachine
from requestflow.core.workflow.states import PROCESSING_ACTIONS, STEP_ACTIONS, WorkflowAction


class TestPlan:

    @pytest.mark.parametrize("domain,status,action", [
        ("travel", "Pending Department Focal", WorkflowAction.APPROVE),
        ("travel", "Pending Department Focal", WorkflowAction.REJECT),
        ("claim", "Approved", WorkflowAction.PROCESS),
        ("visa", "Processing with Visa Admin", WorkflowAction.COMPLETE),
        ("transport", "Pending Line Manager", WorkflowAction.CANCEL),
    ])
    def test_plans_requested_action(self, domain, status, action):
        planned = WorkflowStateMachine(domain, status).plan(action)

        assert planned.action == action
        assert planned.from_status == status

    def test_action_groups_cover_every_action(self):
        assert STEP_ACTIONS.isdisjoint(PROCESSING_ACTIONS)
        assert STEP_ACTIONS | PROCESSING_ACTIONS | {WorkflowAction.CANCEL} == set(WorkflowAction)


class TestApproveAndReject:
    """approve and reject are only legal from pending statuses."""

    def test_plan_approve(self):
        machine = WorkflowStateMachine("travel", "Pending Department Focal", {})
        planned = machine.plan(WorkflowAction.APPROVE)

        assert planned.from_status == "Pending Department Focal"
        assert planned.to_status == "Pending Line Manager"
        assert planned.step_role == "Department Focal"
        assert planned.required_permission == "travel:approve_focal"

    def test_plan_reject_uses_step_permission(self):
        machine = WorkflowStateMachine("claim", "Pending Finance Approval")
        planned = machine.plan(WorkflowAction.REJECT)

        assert planned.to_status == "Rejected"
        assert planned.step_role == "Finance"
        assert planned.required_permission == "claim:approve_finance"

    @pytest.mark.parametrize("status", [
        "Draft", "Approved", "Processing Flights", "Awaiting Visa",
        "TRF Processed", "Rejected", "Cancelled",
    ])
    @pytest.mark.parametrize("action", [WorkflowAction.APPROVE, WorkflowAction.REJECT])
    def test_not_from_non_pending(self, status, action):
        machine = WorkflowStateMachine("travel", status, {})
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.plan(action)
        assert exc_info.value.from_status == status
        assert exc_info.value.action == action.value

    def test_visa_processing_rejects_approve(self):
        machine = WorkflowStateMachine("visa", "Processing with Visa Admin")
        with pytest.raises(InvalidTransitionError):
            machine.plan(WorkflowAction.APPROVE)


class TestCancel:

    @pytest.mark.parametrize("status", [
        "Draft", "Pending Department Focal", "Pending Line Manager", "Pending HOD",
    ])
    def test_cancellable(self, status):
        planned = WorkflowStateMachine("travel", status).plan(WorkflowAction.CANCEL)
        assert planned.to_status == "Cancelled"
        assert planned.required_permission == "travel:cancel"

    @pytest.mark.parametrize("status", ["Approved", "Rejected", "Cancelled", "TRF Processed"])
    def test_not_cancellable(self, status):
        with pytest.raises(InvalidTransitionError):
            WorkflowStateMachine("travel", status).plan(WorkflowAction.CANCEL)

    def test_claims_have_no_draft(self):
        with pytest.raises(InvalidTransitionError):
            WorkflowStateMachine("claim", "Draft").plan(WorkflowAction.CANCEL)


class TestProcessing:
    """process and complete move post-approval statuses forward."""

    def test_process_from_approved(self):
        planned = WorkflowStateMachine("transport", "Approved").plan(WorkflowAction.PROCESS)
        assert planned.to_status == "Processing with Transport Admin"
        assert planned.step_role == "Transport Admin"
        assert planned.required_permission == "transport:process"

    def test_complete_from_processing(self):
        planned = WorkflowStateMachine("claim", "Processing with Claims Admin").plan(WorkflowAction.COMPLETE)
        assert planned.to_status == "Processed"
        assert planned.required_permission == "claim:process"

    def test_visa_has_no_separate_process_step(self):
        machine = WorkflowStateMachine("visa", "Processing with Visa Admin")
        with pytest.raises(InvalidTransitionError):
            machine.plan(WorkflowAction.PROCESS)
        assert machine.plan(WorkflowAction.COMPLETE).to_status == "Processed"

    def test_complete_on_completed_request(self):
        with pytest.raises(InvalidTransitionError):
            WorkflowStateMachine("travel", "TRF Processed").plan(WorkflowAction.COMPLETE)

    def test_process_from_pending(self):
        with pytest.raises(InvalidTransitionError):
            WorkflowStateMachine("travel", "Pending HOD").plan(WorkflowAction.PROCESS)

    @pytest.mark.parametrize("attributes,expected", [
        ({"travel_type": "Domestic"}, "TRF Processed"),
        ({"travel_type": "Domestic", "has_accommodation_request": True}, "Processing Accommodation"),
        ({"travel_type": "Overseas"}, "Awaiting Visa"),
        ({"travel_type": "Home Leave Passage", "has_accommodation_request": True}, "Processing Accommodation"),
    ])
    def test_complete_flights_routes_to_next_stage(self, attributes, expected):
        planned = WorkflowStateMachine("travel", "Processing Flights", attributes).plan(WorkflowAction.COMPLETE)
        assert planned.to_status == expected
        assert planned.required_permission == "travel:process"

    def test_complete_accommodation_then_visa(self):
        attributes = {"travel_type": "Overseas", "has_accommodation_request": True}
        machine = WorkflowStateMachine("travel", "Processing Accommodation", attributes)
        assert machine.plan(WorkflowAction.COMPLETE).to_status == "Awaiting Visa"

    def test_complete_awaiting_visa(self):
        machine = WorkflowStateMachine("travel", "Awaiting Visa", {"travel_type": "Overseas"})
        assert machine.plan(WorkflowAction.COMPLETE).to_status == "TRF Processed"
        assert machine.get_available_actions() == [WorkflowAction.COMPLETE]

    @pytest.mark.parametrize("status", ["Processing Accommodation", "Awaiting Visa"])
    def test_no_process_from_later_stages(self, status):
        with pytest.raises(InvalidTransitionError):
            WorkflowStateMachine("travel", status).plan(WorkflowAction.PROCESS)


class TestAvailableActions:

    def test_pending(self):
        machine = WorkflowStateMachine("travel", "Pending Line Manager")
        assert set(machine.get_available_actions()) == {
            WorkflowAction.APPROVE, WorkflowAction.REJECT, WorkflowAction.CANCEL,
        }
        assert machine.is_pending

    def test_draft(self):
        machine = WorkflowStateMachine("accommodation", "Draft")
        assert machine.get_available_actions() == [WorkflowAction.CANCEL]

    def test_approved(self):
        machine = WorkflowStateMachine("claim", "Approved")
        assert machine.get_available_actions() == [WorkflowAction.PROCESS]
        assert not machine.is_terminal

    def test_terminal(self):
        machine = WorkflowStateMachine("claim", "Rejected")
        assert machine.get_available_actions() == []
        assert machine.is_terminal
