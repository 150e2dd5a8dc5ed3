"""
Onboarding Wizard - one user's run through the flow.

Composes the step table, validation, transition function and submission
orchestrator around a WizardState. Every failure is turned into a Toast and
the wizard stays interactive; nothing is raised out of the user-facing
methods except programmer errors (unknown field ids, bad user types).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from .errors import (
    FieldValidationError,
    OnboardingError,
    PreconditionError,
    SessionCreationError,
    SubmissionError,
    TransitionError,
)
from .forms import (
    FieldDefinition,
    ensure_valid,
    fields_for_step,
    format_review_value,
    option_label,
    validate,
    visible_fields,
)
from .payload import ProfileSubmitter, submit_onboarding
from .state import WizardState
from .steps import (
    ONBOARDING_FLOW,
    Direction,
    SectionKey,
    StepGraph,
    StepInfo,
    UserType,
    WizardStep,
    has_navigation,
    next_step,
    progress,
    section_for_step,
    step_info,
)

logger = logging.getLogger(__name__)

SUBMISSION_IN_PROGRESS = "Submission in progress"


@dataclass(frozen=True)
class Toast:
    """User-visible notification."""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class SessionSource(ProfileSubmitter, Protocol):
    async def create_session(self) -> str: ...


SECTION_TITLES = {
    SectionKey.BASIC_PROFILE: "Basic Profile",
    SectionKey.ATHLETE_DETAILS: "Athlete Details",
    SectionKey.BUSINESS_DETAILS: "Business Details",
    SectionKey.BRAND_VALUES: "Brand Values",
    SectionKey.GOALS: "Goals",
    SectionKey.AUDIENCE_INFO: "Audience Info",
    SectionKey.COMPENSATION: "Compensation",
}

_SECTION_STEPS = {section_for_step(step): step for step in WizardStep if section_for_step(step)}


class OnboardingWizard:
    """
    Drives a single onboarding run.

    The session id and completion callback are passed in explicitly and the
    state is discarded with the wizard; nothing is read from ambient storage.
    """

    def __init__(
        self,
        client: SessionSource,
        *,
        session_id: str | None = None,
        user_type: UserType | str | None = None,
        on_complete: Callable[[dict], Any] | None = None,
        notify: Callable[[Toast], Any] | None = None,
        graph: StepGraph = ONBOARDING_FLOW,
    ):
        self.client = client
        self.state = WizardState.start(user_type=user_type, session_id=session_id)
        self.on_complete = on_complete
        self.graph = graph
        self.toasts: list[Toast] = []
        self._notify = notify
        self.is_submitting = False

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def step(self) -> WizardStep:
        return self.state.current_step

    @property
    def user_type(self) -> UserType | None:
        return self.state.user_type

    @property
    def session_id(self) -> str | None:
        return self.state.session_id

    @property
    def errors(self) -> dict[str, str]:
        return dict(self.state.field_errors)

    def info(self) -> StepInfo:
        return step_info(self.step, self.user_type)

    def progress(self) -> int:
        return progress(self.step, self.user_type, self.graph)

    def shows_navigation(self) -> bool:
        return has_navigation(self.step)

    def current_fields(self) -> list[FieldDefinition]:
        """Fields to render now; hidden conditional fields are left out."""
        fields = fields_for_step(self.step, self.user_type)
        return visible_fields(fields, self.state.current_data())

    def review_summary(self) -> list[dict]:
        """
        Sections relevant to this user, formatted for the review screen.

        Empty sections are skipped.
        """
        summary = []
        for key in self.state.relevant_sections():
            data = self.state.sections.get(key) or {}
            if not data:
                continue
            fields = {f.id: f for f in fields_for_step(_SECTION_STEPS[key], self.user_type)}
            rows = []
            for field_id, value in data.items():
                field = fields.get(field_id)
                if field is not None and field.options:
                    if isinstance(value, list):
                        value = [option_label(field, v) for v in value]
                    else:
                        value = option_label(field, value)
                rows.append({
                    "field": field_id,
                    "label": field.label if field else field_id,
                    "value": format_review_value(value),
                })
            summary.append({"section": key.value, "title": SECTION_TITLES[key], "rows": rows})
        return summary

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def notify(self, title: str, description: str, variant: str = "default") -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.toasts.append(toast)
        if variant == "destructive":
            logger.warning(f"{title}: {description}")
        else:
            logger.info(f"{title}: {description}")
        if self._notify is not None:
            self._notify(toast)
        return toast

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Obtain a session unless one was supplied."""
        if not self.session_id:
            await self.ensure_session()

    async def ensure_session(self) -> bool:
        """Create a session if missing. Failure is reported, not raised."""
        if self.session_id:
            return True
        try:
            self.state.session_id = await self.client.create_session()
        except SessionCreationError as e:
            self.notify("Connection Error", str(e), "destructive")
            return False
        self.state.touch()
        return True

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def begin(self) -> WizardStep:
        """Leave the welcome screen."""
        if self.step == WizardStep.WELCOME:
            self._move(Direction.FORWARD)
        return self.step

    def select_user_type(self, user_type: UserType | str) -> WizardStep:
        """
        Choose athlete or business and advance to BasicProfile.

        Choosing a different type than before clears the sections that
        depend on it.
        """
        if self.step not in (WizardStep.WELCOME, WizardStep.USER_TYPE_SELECTION):
            self.notify(
                "Account Type Locked",
                "Go back to the account type step to change it.",
                "destructive",
            )
            return self.step

        if self.state.set_user_type(user_type):
            logger.info(f"User type changed to {self.user_type.value}; dependent sections reset")

        self.state.current_step = WizardStep.USER_TYPE_SELECTION
        self._move(Direction.FORWARD)
        return self.step

    def update_field(self, field_id: str, value: Any) -> None:
        """Store a value for a field on the current step and clear its error."""
        known = {f.id for f in fields_for_step(self.step, self.user_type)}
        if field_id not in known:
            raise KeyError(f"Field {field_id!r} is not on step {self.step.name}")
        self.state.set_value(field_id, value)

    def validate_current_step(self) -> dict[str, str]:
        fields = fields_for_step(self.step, self.user_type)
        errors = validate(fields, self.state.current_data())
        self.state.field_errors = errors
        return dict(errors)

    def next(self) -> dict[str, str]:
        """
        Validate the current step and move forward.

        Returns the field errors; a non-empty result means the wizard stayed put.
        """
        if self.step == WizardStep.REVIEW_SUBMIT:
            self.notify("Review", "Submit your profile to finish onboarding.")
            return {}

        # Every step after this one depends on the user type
        if self.step == WizardStep.USER_TYPE_SELECTION and self.user_type is None:
            message = "Select an account type to continue."
            self.state.field_errors = {"userType": message}
            self.notify("Select an account type", message, "destructive")
            return dict(self.state.field_errors)

        errors = self.validate_current_step()
        if errors:
            self.notify(
                "Validation Error",
                "Please fill in all required fields correctly.",
                "destructive",
            )
            return errors

        self._move(Direction.FORWARD)
        return {}

    def back(self) -> WizardStep:
        if self.step == WizardStep.COMPLETE or self.is_submitting:
            return self.step
        self._move(Direction.BACKWARD)
        return self.step

    def _move(self, direction: Direction) -> None:
        try:
            self.state.current_step = next_step(self.step, self.user_type, direction, self.graph)
        except TransitionError as e:
            self.notify("Navigation Error", str(e), "destructive")
            return
        self.state.field_errors = {}
        self.state.touch()

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def submit(self) -> dict | None:
        """
        Submit once from the review step.

        Returns the response payload on success, None otherwise. On failure
        the wizard stays on ReviewSubmit with all form data intact.
        """
        if self.is_submitting:
            self.notify(SUBMISSION_IN_PROGRESS, "Your profile is already being submitted.")
            return None
        if self.step != WizardStep.REVIEW_SUBMIT:
            self.notify("Error", "Review your profile before submitting.", "destructive")
            return None

        try:
            ensure_valid(fields_for_step(self.step, self.user_type), self.state.review)
        except FieldValidationError as e:
            self.state.field_errors = e.errors
            self.notify("Validation Error", list(e.errors.values())[0], "destructive")
            return None

        self.is_submitting = True
        try:
            result = await submit_onboarding(
                self.client,
                self.state.session_id,
                self.state.user_type,
                self.state.sections,
            )
        except PreconditionError as e:
            self.notify("Error", str(e), "destructive")
            return None
        except SubmissionError as e:
            self.notify("Submission Error", str(e), "destructive")
            return None
        except OnboardingError as e:
            logger.exception("Unexpected onboarding failure")
            self.notify("Submission Error", str(e), "destructive")
            return None
        finally:
            self.is_submitting = False

        self.state.recommendations = list(result.recommendations or [])
        self.state.campaign = result.campaign
        self.state.submitted = True
        self._move(Direction.FORWARD)
        self.notify("Profile Submitted", "Your profile has been successfully created!")

        data = result.to_dict()
        if self.on_complete is not None:
            self.on_complete(data)
        return data
