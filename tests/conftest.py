"""
Pytest configuration and fixtures for Contested onboarding tests.
"""

import asyncio
import os

import pytest
from unittest.mock import MagicMock

# Set test environment before importing contested modules
os.environ["CONTESTED_ENV"] = "development"
os.environ["CONTESTED_API_BASE_URL"] = "http://api.test"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)

from onboarding.errors import SessionCreationError, SubmissionError
from onboarding.steps import SectionKey


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class FakeOnboardingClient:
    """Stands in for OnboardingClient; records every call it receives."""

    def __init__(self, session_id="sess-123", response=None, session_error=None, submit_error=None):
        self.session_id = session_id
        self.response = response if response is not None else {"userType": "athlete"}
        self.session_error = session_error
        self.submit_error = submit_error
        self.session_calls = 0
        self.submitted: list[dict] = []

    async def create_session(self) -> str:
        self.session_calls += 1
        if self.session_error:
            raise SessionCreationError(self.session_error)
        return self.session_id

    async def submit_profile(self, body: dict) -> dict:
        self.submitted.append(body)
        if self.submit_error:
            raise SubmissionError(self.submit_error, status_code=500)
        return self.response


@pytest.fixture
def fake_client():
    return FakeOnboardingClient()


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.maybe_single.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def athlete_sections():
    """A fully valid athlete profile, keyed by section."""
    return {
        SectionKey.BASIC_PROFILE: {
            "name": "Jane Doe",
            "email": "jane@x.com",
            "phone": "555-123-4567",
        },
        SectionKey.ATHLETE_DETAILS: {
            "sport": "basketball",
            "position": "Guard",
            "university": "State University",
            "eligibility_status": "NCAA",
            "dob": "2003-04-05",
        },
        SectionKey.BUSINESS_DETAILS: {},
        SectionKey.BRAND_VALUES: {"values": ["authenticity", "community"], "has_partnered_before": True},
        SectionKey.GOALS: {"goals": ["income", "exposure"]},
        SectionKey.AUDIENCE_INFO: {"audience_size": "5k-10k", "social_links": "@janedoe"},
        SectionKey.COMPENSATION: {"compensation_goals": "mixed"},
    }


@pytest.fixture
def business_sections():
    """A fully valid business profile, keyed by section."""
    return {
        SectionKey.BASIC_PROFILE: {"name": "Acme Corporation", "email": "team@acme.com"},
        SectionKey.ATHLETE_DETAILS: {},
        SectionKey.BUSINESS_DETAILS: {
            "account_type": "product",
            "industry": "retail",
            "business_size": "11-50",
            "zip_code": "32601",
        },
        SectionKey.BRAND_VALUES: {"values": ["innovation"], "has_partnered_before": True},
        SectionKey.GOALS: {"goals": ["awareness", "content"]},
        SectionKey.AUDIENCE_INFO: {"audience_goals": ["gen_z", "students"], "campaign_vibe": "fun"},
        SectionKey.COMPENSATION: {"budget_range": 5000},
    }
