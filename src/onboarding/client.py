"""
HTTP client for the external onboarding endpoints.

Two request/response calls, both unretried:
- POST /api/chat/session            -> {"sessionId": str}
- POST /api/personalized-onboarding -> {"recommendations"?, "campaign"?, "userType"}
"""

import logging

import httpx

from .errors import SessionCreationError, SubmissionError

logger = logging.getLogger(__name__)

SESSION_PATH = "/api/chat/session"
SUBMISSION_PATH = "/api/personalized-onboarding"


class OnboardingClient:
    """
    Async client for session creation and profile submission.

    No timeout is applied unless one is given; a hung request stays pending
    until the transport gives up.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls) -> "OnboardingClient":
        from contested.config import settings

        return cls(
            settings.contested_api_base_url,
            timeout=settings.contested_request_timeout,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "OnboardingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def create_session(self) -> str:
        """Start a backend session; returns its opaque id."""
        try:
            response = await self._get_client().post(SESSION_PATH, json={})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Session creation failed with status {e.response.status_code}")
            raise SessionCreationError("Unable to start a new session. Please try again.") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Session creation failed: {e}")
            raise SessionCreationError("Unable to start a new session. Please try again.") from e

        if not isinstance(payload, dict):
            logger.error(f"Session endpoint returned {type(payload).__name__}, expected an object")
            raise SessionCreationError("Unable to start a new session. Please try again.")

        session_id = payload.get("sessionId")
        if not session_id:
            raise SessionCreationError("Session endpoint returned no session ID")

        logger.info(f"Created onboarding session {session_id}")
        return session_id

    async def submit_profile(self, body: dict) -> dict:
        """Send the onboarding payload; returns the decoded response."""
        try:
            response = await self._get_client().post(SUBMISSION_PATH, json=body)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Onboarding submission failed with status {status}")
            raise SubmissionError(
                "Failed to submit your profile. Please try again.", status_code=status
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Onboarding submission failed: {e}")
            raise SubmissionError("Failed to submit your profile. Please try again.") from e
