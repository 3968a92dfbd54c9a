"""End-to-end approval chains against the seeded role table."""

import pytest

from requestflow.core.errors import AuthorizationError, InvalidTransitionError
from requestflow.core.rbac import RolePermissionAuthority
from requestflow.core.workflow.engine import Actor, WorkflowEngine
from requestflow.db.seed import seed_default_roles

from tests.factories import create_request


@pytest.fixture
def engine(db_session, dispatcher):
    seed_default_roles(db_session)
    db_session.commit()
    return WorkflowEngine(db_session, RolePermissionAuthority(db_session), dispatcher)


class TestTravelScenario:

    def test_domestic_trip_skips_hod(self, engine, db_session, focal, line_manager):
        trf = create_request(
            db_session,
            attributes={"travel_type": "Domestic", "estimated_cost": 200},
            commit=True,
        )
        assert trf.status == "Pending Department Focal"

        engine.perform_action("travel", trf.id, "approve", focal)
        assert trf.status == "Pending Line Manager"
        assert engine.ledger.count("travel", trf.id) == 1

        engine.perform_action("travel", trf.id, "approve", line_manager)
        assert trf.status == "Approved"
        assert engine.ledger.count("travel", trf.id) == 2

        with pytest.raises(InvalidTransitionError):
            engine.perform_action("travel", trf.id, "approve", line_manager)
        assert engine.ledger.count("travel", trf.id) == 2

    def test_overseas_trip_needs_hod_then_ticketing(self, engine, db_session, focal, line_manager, hod):
        trf = create_request(db_session, attributes={"travel_type": "Overseas"}, commit=True)

        engine.perform_action("travel", trf.id, "approve", focal)
        engine.perform_action("travel", trf.id, "approve", line_manager)
        assert trf.status == "Pending HOD"

        engine.perform_action("travel", trf.id, "approve", hod)
        assert trf.status == "Approved"

        ticketing = Actor(name="Tan Ticketing", role="Ticketing Admin")
        engine.perform_action("travel", trf.id, "process", ticketing)
        assert trf.status == "Processing Flights"
        engine.perform_action("travel", trf.id, "complete", ticketing)
        assert trf.status == "Awaiting Visa"
        engine.perform_action("travel", trf.id, "complete", ticketing)
        assert trf.status == "TRF Processed"

        roles = [step.step_role for step in engine.ledger.list_steps("travel", trf.id)]
        assert roles == ["Department Focal", "Line Manager", "HOD"] + ["Ticketing Admin"] * 3

    def test_domestic_trip_with_room_goes_through_accommodation(
        self, engine, db_session, focal, line_manager
    ):
        trf = create_request(
            db_session,
            attributes={"travel_type": "Domestic", "has_accommodation_request": True},
            commit=True,
        )
        engine.perform_action("travel", trf.id, "approve", focal)
        engine.perform_action("travel", trf.id, "approve", line_manager)

        ticketing = Actor(name="Tan Ticketing", role="Ticketing Admin")
        engine.perform_action("travel", trf.id, "process", ticketing)
        engine.perform_action("travel", trf.id, "complete", ticketing)
        assert trf.status == "Processing Accommodation"
        engine.perform_action("travel", trf.id, "complete", ticketing)
        assert trf.status == "TRF Processed"

        with pytest.raises(InvalidTransitionError):
            engine.perform_action("travel", trf.id, "complete", ticketing)


class TestClaimScenario:

    def test_three_step_claim(self, engine, db_session, focal, hod, finance, dispatcher):
        claim = create_request(db_session, domain="claim", attributes={"amount": 120}, commit=True)
        assert claim.status == "Pending Verification"

        engine.perform_action("claim", claim.id, "approve", focal)
        assert claim.status == "Pending HOD Approval"

        with pytest.raises(AuthorizationError):
            engine.perform_action("claim", claim.id, "approve", finance)

        engine.perform_action("claim", claim.id, "approve", hod)
        engine.perform_action("claim", claim.id, "approve", finance)
        assert claim.status == "Approved"

        assert [event.new_status for event in dispatcher.events] == [
            "Pending HOD Approval", "Pending Finance Approval", "Approved",
        ]


class TestVisaScenario:

    def test_approval_lands_with_visa_admin(self, engine, db_session, focal, hod):
        visa = create_request(db_session, domain="visa", commit=True)

        engine.perform_action("visa", visa.id, "approve", focal)
        assert visa.status == "Pending Line Manager/HOD"
        engine.perform_action("visa", visa.id, "approve", hod)
        assert visa.status == "Processing with Visa Admin"

        with pytest.raises(InvalidTransitionError):
            engine.perform_action("visa", visa.id, "process", Actor("Vera Visa", "Visa Admin"))

        engine.perform_action("visa", visa.id, "complete", Actor("Vera Visa", "Visa Admin"))
        assert visa.status == "Processed"


class TestCancellation:

    def test_requestor_cancels_pending_transport(self, engine, db_session, requestor, dispatcher):
        request = create_request(db_session, domain="transport", commit=True)

        engine.perform_action("transport", request.id, "cancel", requestor, "Trip called off")

        assert request.status == "Cancelled"
        assert dispatcher.calls[-1][0] == "cancellation"
        with pytest.raises(InvalidTransitionError):
            engine.perform_action("transport", request.id, "cancel", requestor)
