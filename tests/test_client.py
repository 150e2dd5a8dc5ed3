"""
Tests for the onboarding HTTP client.

Requests are served by httpx.MockTransport; nothing leaves the process.
"""

import json

import httpx
import pytest

from conftest import run
from onboarding.client import SESSION_PATH, SUBMISSION_PATH, OnboardingClient
from onboarding.errors import SessionCreationError, SubmissionError
from onboarding.wizard import OnboardingWizard


def _client(handler) -> OnboardingClient:
    return OnboardingClient("http://api.test/", transport=httpx.MockTransport(handler))


async def _call(client: OnboardingClient, method: str, *args):
    async with client:
        return await getattr(client, method)(*args)


class TestCreateSession:
    """POST /api/chat/session."""

    def test_returns_session_id(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"sessionId": "a1b2c3", "message": "Session created successfully"})

        assert run(_call(_client(handler), "create_session")) == "a1b2c3"
        assert seen[0].method == "POST"
        assert seen[0].url.path == SESSION_PATH

    def test_http_error_raises_session_error(self):
        client = _client(lambda request: httpx.Response(500, json={"message": "boom"}))
        with pytest.raises(SessionCreationError, match="Unable to start a new session"):
            run(_call(client, "create_session"))

    def test_transport_error_raises_session_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SessionCreationError):
            run(_call(_client(handler), "create_session"))

    def test_missing_id_raises(self):
        client = _client(lambda request: httpx.Response(200, json={"message": "ok"}))
        with pytest.raises(SessionCreationError, match="no session ID"):
            run(_call(client, "create_session"))

    @pytest.mark.parametrize("body", [["x"], "sess", 42, None])
    def test_non_object_body_raises_session_error(self, body):
        client = _client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(SessionCreationError, match="Unable to start a new session"):
            run(_call(client, "create_session"))

    def test_non_object_body_is_a_toast_in_the_wizard(self):
        client = _client(lambda request: httpx.Response(200, json=["x"]))
        wizard = OnboardingWizard(client)

        run(wizard.start())

        assert wizard.session_id is None
        assert wizard.toasts[-1].title == "Connection Error"


class TestSubmitProfile:
    """POST /api/personalized-onboarding."""

    def test_posts_body_and_returns_json(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"userType": "athlete", "recommendations": ["Post weekly"]})

        body = {"sessionId": "abc", "userType": "athlete", "basicProfile": {"name": "Jane"}}
        result = run(_call(_client(handler), "submit_profile", body))

        assert result == {"userType": "athlete", "recommendations": ["Post weekly"]}
        assert seen[0].url.path == SUBMISSION_PATH
        assert json.loads(seen[0].content) == body

    def test_status_error_carries_status_code(self):
        client = _client(lambda request: httpx.Response(503))
        with pytest.raises(SubmissionError) as exc_info:
            run(_call(client, "submit_profile", {"sessionId": "abc"}))
        assert exc_info.value.status_code == 503

    def test_invalid_json_raises_submission_error(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(SubmissionError) as exc_info:
            run(_call(client, "submit_profile", {"sessionId": "abc"}))
        assert exc_info.value.status_code is None

    def test_single_attempt_only(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        with pytest.raises(SubmissionError):
            run(_call(_client(handler), "submit_profile", {"sessionId": "abc"}))
        assert len(calls) == 1


class TestClientConfig:
    """Construction from settings."""

    def test_from_settings_uses_configured_base_url(self):
        client = OnboardingClient.from_settings()
        assert client.base_url == "http://api.test"
        assert client.timeout is None

    def test_trailing_slash_is_stripped(self):
        assert OnboardingClient("http://api.test/").base_url == "http://api.test"
