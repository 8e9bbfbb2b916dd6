"""Route tests for the FastAPI application."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from talentbridge.constants import QUOTE_REQUESTS_TABLE
from talentbridge.errors import PersistenceError
from talentbridge.main import app, build_services, get_services
from tests.conftest import CANDIDATE_ID, EMPLOYER_ID


CANDIDATE_HEADERS = {"X-User-Id": CANDIDATE_ID, "X-User-Role": "candidate"}
EMPLOYER_HEADERS = {"X-User-Id": EMPLOYER_ID, "X-User-Role": "employer"}
STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}


@pytest.fixture
def client(db):
    app.dependency_overrides[get_services] = lambda: build_services(db)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSession:

    def test_health_check(self, client):
        assert client.get("/").json() == {"status": "ok"}

    def test_missing_headers_is_401(self, client):
        assert client.get(f"/candidates/{CANDIDATE_ID}").status_code == 401

    def test_unknown_role_is_401(self, client):
        response = client.get(f"/candidates/{CANDIDATE_ID}", headers={"X-User-Id": "x", "X-User-Role": "ghost"})
        assert response.status_code == 401


class TestErrorMapping:

    def test_incomplete_submission_is_422_with_missing(self, client, seed_candidate):
        seed_candidate(skills=[])

        response = client.post(f"/candidates/{CANDIDATE_ID}/submit", headers=CANDIDATE_HEADERS)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "incomplete_profile"
        assert body["missing"] == ["skills", "idDocument", "educationDocument", "cvDocument"]

    def test_forbidden_is_403(self, client, seed_candidate):
        seed_candidate()

        response = client.get(f"/candidates/{CANDIDATE_ID}", headers=EMPLOYER_HEADERS)

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_unknown_quote_is_404(self, client):
        response = client.get("/quote-requests/nope", headers=STAFF_HEADERS)

        assert response.status_code == 404
        assert response.json()["detail"] == "Quote request with ID nope not found"

    def test_duplicate_quote_is_409(self, client, db, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer()
        url = f"/candidates/{CANDIDATE_ID}/quote-requests"

        first = client.post(url, json={"employer_id": EMPLOYER_ID}, headers=EMPLOYER_HEADERS)
        second = client.post(url, json={"employer_id": EMPLOYER_ID}, headers=EMPLOYER_HEADERS)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["quote_id"] == first.json()["id"]
        assert len(db.rows(QUOTE_REQUESTS_TABLE)) == 1

    def test_persistence_failure_is_503(self, client):
        services = Mock()
        services.verification.get_candidate.side_effect = PersistenceError("Failed to get candidates by ID")
        app.dependency_overrides[get_services] = lambda: services

        response = client.get(f"/candidates/{CANDIDATE_ID}", headers=STAFF_HEADERS)

        assert response.status_code == 503
        assert response.json()["error"] == "persistence_error"


class TestQuoteFlow:

    def test_full_flow_over_http(self, client, seed_candidate, seed_employer):
        """Request, approve, select and pay through the routes."""
        seed_candidate()
        seed_employer()

        quote = client.post(
            f"/candidates/{CANDIDATE_ID}/quote-requests",
            json={"employer_id": EMPLOYER_ID},
            headers=EMPLOYER_HEADERS
        ).json()

        approved = client.post(
            f"/quote-requests/{quote['id']}/resolve",
            json={"decision": "approved"},
            headers=STAFF_HEADERS
        ).json()
        assert approved["options"][0]["total"] == "€10,000.00"

        option_id = approved["options"][0]["id"]
        selected = client.post(
            f"/quote-requests/{quote['id']}/select-option",
            json={"option_id": option_id},
            headers=EMPLOYER_HEADERS
        ).json()
        assert selected["selected_option_id"] == option_id

        paid = client.post(f"/quote-requests/{quote['id']}/pay", headers=EMPLOYER_HEADERS)
        assert paid.status_code == 200
        assert paid.json()["quote"]["status"] == "paid"
        assert paid.json()["relation"]["status"] == "hired"

    def test_locked_drag_is_422(self, client, seed_candidate, seed_employer):
        seed_candidate()
        seed_employer()
        client.post(
            f"/candidates/{CANDIDATE_ID}/quote-requests",
            json={"employer_id": EMPLOYER_ID},
            headers=EMPLOYER_HEADERS
        )

        response = client.put(
            f"/candidates/{CANDIDATE_ID}/status",
            json={"employer_id": EMPLOYER_ID, "status": "shortlisted"},
            headers=EMPLOYER_HEADERS
        )

        assert response.status_code == 422
        assert response.json()["error"] == "locked_by_quote"


class TestAnonymisation:

    def test_relation_listing_hides_contact_details(self, client, seed_candidate, seed_relation):
        seed_candidate()
        seed_relation()

        cards = client.get(f"/employers/{EMPLOYER_ID}/relations", headers=EMPLOYER_HEADERS).json()

        candidate = cards[0]["candidate"]
        assert candidate["first_name"] == "Ana"
        assert "email" not in candidate
        assert "phone" not in candidate

    def test_audit_log_is_staff_only(self, client):
        assert client.get("/audit-logs", headers=EMPLOYER_HEADERS).status_code == 403
        assert client.get("/audit-logs", headers=STAFF_HEADERS).status_code == 200
