"""
Onboarding Payload Definition.

FormData is the contract between the wizard and the personalized onboarding
endpoint. It is a tagged union keyed by userType: each variant carries only
the sections relevant to its branch and rejects the other branch's section.
"""

import logging
from typing import Annotated, Any, Literal, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import PreconditionError, SubmissionError
from .steps import SectionKey, UserType

logger = logging.getLogger(__name__)


class _FormDataBase(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    basic_profile: dict[str, Any] = Field(default_factory=dict, alias="basicProfile")
    brand_values: dict[str, Any] = Field(default_factory=dict, alias="brandValues")
    goals: dict[str, Any] = Field(default_factory=dict)
    audience_info: dict[str, Any] = Field(default_factory=dict, alias="audienceInfo")
    compensation: dict[str, Any] | None = None


class AthleteFormData(_FormDataBase):
    """Athlete branch: no businessDetails section exists."""
    user_type: Literal["athlete"] = Field(default="athlete", alias="userType")
    athlete_details: dict[str, Any] = Field(default_factory=dict, alias="athleteDetails")


class BusinessFormData(_FormDataBase):
    """Business branch: no athleteDetails section exists."""
    user_type: Literal["business"] = Field(default="business", alias="userType")
    business_details: dict[str, Any] = Field(default_factory=dict, alias="businessDetails")


FormData = Annotated[Union[AthleteFormData, BusinessFormData], Field(discriminator="user_type")]

_form_data_adapter = TypeAdapter(FormData)


def parse_form_data(data: dict) -> AthleteFormData | BusinessFormData:
    """Validate a wire-format dict into the matching FormData variant."""
    return _form_data_adapter.validate_python(data)


def build_form_data(
    user_type: UserType | str,
    sections: dict[SectionKey, dict[str, Any]],
) -> AthleteFormData | BusinessFormData:
    """
    Assemble the typed FormData for a user type from wizard sections.

    Only this branch's sections are read; compensation is left out when empty.
    """
    user_type = UserType(user_type)

    def section(key: SectionKey) -> dict[str, Any]:
        return dict(sections.get(key) or {})

    common = {
        "basicProfile": section(SectionKey.BASIC_PROFILE),
        "brandValues": section(SectionKey.BRAND_VALUES),
        "goals": section(SectionKey.GOALS),
        "audienceInfo": section(SectionKey.AUDIENCE_INFO),
        "compensation": section(SectionKey.COMPENSATION) or None,
    }

    if user_type == UserType.ATHLETE:
        return AthleteFormData(athleteDetails=section(SectionKey.ATHLETE_DETAILS), **common)
    return BusinessFormData(businessDetails=section(SectionKey.BUSINESS_DETAILS), **common)


def build_submission_body(session_id: str, form_data: AthleteFormData | BusinessFormData) -> dict:
    """Wire body for POST /api/personalized-onboarding."""
    body = {"sessionId": session_id}
    body.update(form_data.model_dump(by_alias=True))
    if body.get("compensation") is None:
        body.pop("compensation", None)
    return body


class SubmissionResult(BaseModel):
    """Response of the personalized onboarding endpoint; extra keys are kept."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    user_type: str = Field(alias="userType")
    recommendations: list[str] | None = None
    campaign: dict[str, Any] | None = None

    def to_dict(self) -> dict:
        """The response as received (unset optional keys stay absent)."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ProfileSubmitter(Protocol):
    async def submit_profile(self, body: dict) -> dict: ...


async def submit_onboarding(
    client: ProfileSubmitter,
    session_id: str | None,
    user_type: UserType | str | None,
    sections: dict[SectionKey, dict[str, Any]],
) -> SubmissionResult:
    """
    Send the accumulated form data once.

    Raises PreconditionError before any network call when the session or
    user type is missing, SubmissionError when the endpoint fails.
    No retries.
    """
    if not session_id or not user_type:
        raise PreconditionError("Missing session ID or user type")

    form_data = build_form_data(user_type, sections)
    body = build_submission_body(session_id, form_data)

    logger.info(f"Submitting {form_data.user_type} onboarding for session {session_id}")
    response = await client.submit_profile(body)

    try:
        return SubmissionResult.model_validate(response)
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        logger.error(f"Malformed onboarding response for session {session_id}: {e}")
        raise SubmissionError("Unexpected response from onboarding service") from e
