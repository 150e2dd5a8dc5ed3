"""
Tests for the onboarding wizard API.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeOnboardingClient
from contested.web.app import app
from onboarding import api


@pytest.fixture
def backend():
    return FakeOnboardingClient(session_id="abc", response={"userType": "athlete", "recommendations": ["Post weekly"]})


@pytest.fixture
def client(backend):
    app.dependency_overrides[api.get_onboarding_client] = lambda: backend
    yield TestClient(app)
    app.dependency_overrides.clear()
    api.wizards.clear()


def _create(client, **body) -> dict:
    response = client.post("/onboarding/wizards", json=body)
    assert response.status_code == 201
    return response.json()


class TestWizardLifecycle:
    """Creating, reading and discarding wizards."""

    def test_create_starts_at_welcome_with_session(self, client):
        view = _create(client)
        assert view["step"] == "WELCOME"
        assert view["session_id"] == "abc"
        assert view["show_navigation"] is False
        assert view["progress"] == 0

    def test_create_with_user_type_starts_at_basic_profile(self, client):
        view = _create(client, user_type="business", session_id="given")
        assert view["step"] == "BASIC_PROFILE"
        assert view["title"] == "Business Profile"
        assert [f["id"] for f in view["fields"]] == ["name", "email", "phone"]

    def test_session_failure_reported_as_toast(self, client, backend):
        backend.session_error = "Unable to start a new session. Please try again."
        view = _create(client)
        assert view["session_id"] is None
        assert view["toasts"][0]["title"] == "Connection Error"

        backend.session_error = None
        response = client.post(f"/onboarding/wizards/{view['wizard_id']}/session")
        assert response.json()["session_id"] == "abc"

    def test_unknown_wizard_is_404(self, client):
        assert client.get("/onboarding/wizards/nope").status_code == 404

    def test_delete_discards_wizard(self, client):
        wizard_id = _create(client)["wizard_id"]
        assert client.delete(f"/onboarding/wizards/{wizard_id}").json() == {"success": True}
        assert client.get(f"/onboarding/wizards/{wizard_id}").status_code == 404

    def test_options(self, client):
        options = client.get("/onboarding/options").json()
        assert options["user_types"] == ["athlete", "business"]


class TestWizardNavigation:
    """Step transitions over HTTP."""

    def test_begin_and_select_user_type(self, client):
        wizard_id = _create(client)["wizard_id"]
        assert client.post(f"/onboarding/wizards/{wizard_id}/begin").json()["step"] == "USER_TYPE_SELECTION"

        view = client.post(f"/onboarding/wizards/{wizard_id}/user-type", json={"user_type": "athlete"}).json()
        assert view["step"] == "BASIC_PROFILE"
        assert view["user_type"] == "athlete"

    def test_next_with_missing_fields_is_400(self, client):
        wizard_id = _create(client, user_type="athlete")["wizard_id"]
        response = client.post(f"/onboarding/wizards/{wizard_id}/next")
        assert response.status_code == 400
        assert set(response.json()["detail"]["errors"]) == {"name", "email"}

    def test_next_without_user_type_is_400(self, client):
        wizard_id = _create(client)["wizard_id"]
        client.post(f"/onboarding/wizards/{wizard_id}/begin")

        response = client.post(f"/onboarding/wizards/{wizard_id}/next")

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Select an account type"
        assert "userType" in response.json()["detail"]["errors"]
        assert client.get(f"/onboarding/wizards/{wizard_id}").json()["step"] == "USER_TYPE_SELECTION"

    def test_fill_and_advance(self, client):
        wizard_id = _create(client, user_type="athlete")["wizard_id"]
        client.put(f"/onboarding/wizards/{wizard_id}/fields/name", json={"value": "Jane Doe"})
        view = client.put(f"/onboarding/wizards/{wizard_id}/fields/email", json={"value": "jane@x.com"}).json()
        assert view["values"] == {"name": "Jane Doe", "email": "jane@x.com"}

        view = client.post(f"/onboarding/wizards/{wizard_id}/next").json()
        assert view["step"] == "ATHLETE_DETAILS"

        view = client.post(f"/onboarding/wizards/{wizard_id}/back").json()
        assert view["step"] == "BASIC_PROFILE"

    def test_unknown_field_is_400(self, client):
        wizard_id = _create(client, user_type="business")["wizard_id"]
        response = client.put(f"/onboarding/wizards/{wizard_id}/fields/sport", json={"value": "soccer"})
        assert response.status_code == 400


class TestWizardSubmit:
    """Submission over HTTP."""

    def _walk(self, client, wizard_id, athlete_sections):
        for _ in range(6):
            view = client.get(f"/onboarding/wizards/{wizard_id}").json()
            section = {
                "BASIC_PROFILE": "basicProfile",
                "ATHLETE_DETAILS": "athleteDetails",
                "BRAND_VALUES": "brandValues",
                "GOALS": "goals",
                "AUDIENCE_INFO": "audienceInfo",
                "COMPENSATION": "compensation",
            }[view["step"]]
            values = {k.value: v for k, v in athlete_sections.items()}[section]
            for field_id, value in values.items():
                client.put(f"/onboarding/wizards/{wizard_id}/fields/{field_id}", json={"value": value})
            assert client.post(f"/onboarding/wizards/{wizard_id}/next").status_code == 200

    def test_full_submission(self, client, backend, athlete_sections):
        wizard_id = _create(client, user_type="athlete")["wizard_id"]
        self._walk(client, wizard_id, athlete_sections)

        review = client.get(f"/onboarding/wizards/{wizard_id}/review").json()
        assert review["user_type"] == "athlete"
        assert "athleteDetails" in [s["section"] for s in review["sections"]]

        client.put(f"/onboarding/wizards/{wizard_id}/fields/terms_accepted", json={"value": True})
        response = client.post(f"/onboarding/wizards/{wizard_id}/submit")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["result"] == {"userType": "athlete", "recommendations": ["Post weekly"]}
        assert body["wizard"]["step"] == "COMPLETE"
        assert body["wizard"]["recommendations"] == ["Post weekly"]
        assert len(backend.submitted) == 1

    def test_missing_terms_is_400(self, client, athlete_sections):
        wizard_id = _create(client, user_type="athlete")["wizard_id"]
        self._walk(client, wizard_id, athlete_sections)

        response = client.post(f"/onboarding/wizards/{wizard_id}/submit")
        assert response.status_code == 400
        assert "terms_accepted" in response.json()["detail"]["errors"]

    def test_upstream_failure_is_502_and_stays_on_review(self, client, backend, athlete_sections):
        backend.submit_error = "Failed to submit your profile. Please try again."
        wizard_id = _create(client, user_type="athlete")["wizard_id"]
        self._walk(client, wizard_id, athlete_sections)
        client.put(f"/onboarding/wizards/{wizard_id}/fields/terms_accepted", json={"value": True})

        response = client.post(f"/onboarding/wizards/{wizard_id}/submit")
        assert response.status_code == 502
        assert response.json()["detail"]["message"] == "Submission Error"
        assert client.get(f"/onboarding/wizards/{wizard_id}").json()["step"] == "REVIEW_SUBMIT"

    def test_submit_already_running_is_409(self, client, backend, athlete_sections):
        wizard_id = _create(client, user_type="athlete")["wizard_id"]
        self._walk(client, wizard_id, athlete_sections)
        client.put(f"/onboarding/wizards/{wizard_id}/fields/terms_accepted", json={"value": True})
        api.wizards[wizard_id].is_submitting = True

        response = client.post(f"/onboarding/wizards/{wizard_id}/submit")

        assert response.status_code == 409
        assert response.json()["detail"]["message"] == "Submission in progress"
        assert backend.submitted == []
