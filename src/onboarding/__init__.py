"""
Contested Onboarding Wizard.

Steers a new user through account-type selection and profile collection,
then submits everything once to the personalized onboarding endpoint.

Flow:
1. Welcome, UserTypeSelection - choose athlete or business
2. BasicProfile - shared contact details
3. AthleteDetails | BusinessDetails - the branch for the chosen type
4. BrandValues, Goals, AudienceInfo, Compensation - shared steps, type-specific fields
5. ReviewSubmit - terms acceptance and the single submission
6. Complete
"""

from .steps import Direction, SectionKey, UserType, WizardStep, next_step
from .state import WizardState
from .payload import AthleteFormData, BusinessFormData, SubmissionResult
from .wizard import OnboardingWizard, Toast

__all__ = [
    "Direction",
    "SectionKey",
    "UserType",
    "WizardStep",
    "next_step",
    "WizardState",
    "AthleteFormData",
    "BusinessFormData",
    "SubmissionResult",
    "OnboardingWizard",
    "Toast",
]
