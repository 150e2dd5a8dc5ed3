"""Onboarding error types."""


class OnboardingError(Exception):
    """Base exception for onboarding wizard errors."""
    pass


class FieldValidationError(OnboardingError):
    """One or more fields on the current step failed validation."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("Please fill in all required fields correctly.")


class SessionCreationError(OnboardingError):
    """The external session endpoint could not be reached or failed."""
    pass


class SubmissionError(OnboardingError):
    """The personalized onboarding endpoint failed or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PreconditionError(OnboardingError):
    """Submission attempted without a session, a user type, or off the review step."""
    pass


class TransitionError(OnboardingError):
    """The requested step transition is not possible for this user type."""
    pass
