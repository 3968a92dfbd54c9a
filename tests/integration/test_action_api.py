"""Tests for the workflow action HTTP API."""

from fastapi.testclient import TestClient

from tests.factories import create_request


def _action(client, domain, request_id, **body):
    return client.post(f"/api/{domain}/{request_id}/action", json=body)


class TestPerformAction:
    """Test POST /api/{domain}/{request_id}/action."""

    def test_approve(self, client: TestClient, db_session, dispatcher):
        trf = create_request(db_session, attributes={"travel_type": "Domestic"}, commit=True)

        response = _action(
            client, "travel", trf.id,
            action="approve", approverRole="Department Focal", approverName="Fatimah Focal",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == f"Travel request {trf.id} approved"
        assert data["status"] == "Pending Line Manager"
        assert data["request"]["version"] == 2
        assert len(dispatcher.calls) == 1

    def test_reject(self, client: TestClient, db_session):
        claim = create_request(db_session, domain="claim", commit=True)

        response = _action(
            client, "claim", claim.id,
            action="reject", approverRole="Department Focal", approverName="Fatimah Focal",
            comments="Receipt missing",
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Rejected"
        assert response.json()["message"] == f"Claim request {claim.id} rejected"

    def test_reject_without_comments(self, client: TestClient, db_session):
        trf = create_request(db_session, commit=True)

        response = _action(
            client, "travel", trf.id,
            action="reject", approverRole="Department Focal", approverName="Fatimah Focal",
            comments="   ",
        )

        assert response.status_code == 400
        assert "comments" in response.json()["details"]["fields"]

    def test_wrong_role(self, client: TestClient, db_session, dispatcher):
        trf = create_request(db_session, commit=True)

        response = _action(
            client, "travel", trf.id,
            action="approve", approverRole="Line Manager", approverName="Lim Manager",
        )

        assert response.status_code == 403
        assert response.json()["details"]["required_permission"] == "travel:approve_focal"
        assert dispatcher.calls == []

    def test_unknown_request(self, client: TestClient):
        response = _action(
            client, "travel", "TRF-99999",
            action="approve", approverRole="Department Focal", approverName="Fatimah Focal",
        )
        assert response.status_code == 404
        assert "not found" in response.json()["error"]

    def test_unknown_domain(self, client: TestClient):
        response = _action(
            client, "ferry", "X-1",
            action="approve", approverRole="Department Focal", approverName="Fatimah Focal",
        )
        assert response.status_code == 400
        assert "domain" in response.json()["details"]["fields"]

    def test_unknown_action(self, client: TestClient, db_session):
        trf = create_request(db_session, commit=True)
        response = _action(
            client, "travel", trf.id,
            action="escalate", approverRole="Department Focal", approverName="Fatimah Focal",
        )
        assert response.status_code == 400
        assert "action" in response.json()["details"]["fields"]

    def test_missing_approver_name(self, client: TestClient, db_session):
        trf = create_request(db_session, commit=True)
        response = _action(client, "travel", trf.id, action="approve", approverRole="Department Focal")

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Invalid request"
        assert "approverName" in data["details"]["fields"]

    def test_illegal_transition(self, client: TestClient, db_session):
        trf = create_request(db_session, status="Approved", commit=True)
        response = _action(
            client, "travel", trf.id,
            action="approve", approverRole="Admin", approverName="Ada Admin",
        )
        assert response.status_code == 400
        assert response.json()["details"]["current_status"] == "Approved"

    def test_stale_expected_status(self, client: TestClient, db_session):
        trf = create_request(db_session, commit=True)
        response = _action(
            client, "travel", trf.id,
            action="approve", approverRole="Line Manager", approverName="Lim Manager",
            expectedStatus="Pending Line Manager",
        )
        assert response.status_code == 409
        assert response.json()["details"]["current_status"] == "Pending Department Focal"


class TestRequestViews:
    """Test the read endpoints."""

    def test_get_request(self, client: TestClient, db_session):
        visa = create_request(db_session, domain="visa", requestor_ref="emp-7", commit=True)

        response = client.get(f"/api/visa/{visa.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Pending Department Focal"
        assert data["requestor_ref"] == "emp-7"

    def test_get_missing_request(self, client: TestClient):
        assert client.get("/api/visa/VISA-00000").status_code == 404

    def test_history(self, client: TestClient, db_session):
        trf = create_request(db_session, attributes={"travel_type": "Domestic"}, commit=True)
        _action(
            client, "travel", trf.id,
            action="approve", approverRole="Department Focal", approverName="Fatimah Focal",
        )
        _action(
            client, "travel", trf.id,
            action="approve", approverRole="Line Manager", approverName="Lim Manager",
            comments="OK",
        )

        response = client.get(f"/api/travel/{trf.id}/history")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Approved"
        assert [step["status"] for step in data["steps"]] == ["Pending Line Manager", "Approved"]
        assert data["steps"][1]["step_role"] == "Line Manager"
        assert data["steps"][1]["comments"] == "OK"
        assert "date" in data["steps"][0]
