"""
Onboarding API Endpoints.

Hosts wizard instances for a thin frontend. Each POST /onboarding/wizards
creates one instance held in memory; DELETE (or a restart) discards it.
"""

import logging
import secrets
from dataclasses import asdict
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .client import OnboardingClient
from .forms import FieldDefinition, get_form_options
from .steps import UserType
from .wizard import SUBMISSION_IN_PROGRESS, OnboardingWizard, SessionSource, Toast

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

# Live wizard instances by id
wizards: dict[str, OnboardingWizard] = {}


@lru_cache
def _default_client() -> OnboardingClient:
    return OnboardingClient.from_settings()


def get_onboarding_client() -> SessionSource:
    """Client used for session creation and submission (overridable in tests)."""
    return _default_client()


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateWizardRequest(BaseModel):
    """Optional context supplied by a signed-in caller."""
    user_type: UserType | None = None
    session_id: str | None = None


class UserTypeRequest(BaseModel):
    user_type: UserType


class FieldUpdateRequest(BaseModel):
    value: Any = None


class WizardView(BaseModel):
    """Everything a frontend needs to render the current step."""
    wizard_id: str
    step: str
    step_index: int
    title: str
    description: str
    user_type: str | None
    session_id: str | None
    progress: int
    show_navigation: bool
    fields: list[FieldDefinition] = Field(default_factory=list)
    values: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    toasts: list[dict] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    campaign: dict | None = None


class SubmitResponse(BaseModel):
    success: bool
    wizard: WizardView
    result: dict | None = None


# =============================================================================
# Helpers
# =============================================================================


def _get_wizard(wizard_id: str) -> OnboardingWizard:
    wizard = wizards.get(wizard_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Wizard not found")
    return wizard


def _drain_toasts(wizard: OnboardingWizard) -> list[Toast]:
    toasts, wizard.toasts = wizard.toasts, []
    return toasts


def _view(wizard_id: str, wizard: OnboardingWizard) -> WizardView:
    info = wizard.info()
    return WizardView(
        wizard_id=wizard_id,
        step=wizard.step.name,
        step_index=int(wizard.step),
        title=info.title,
        description=info.description,
        user_type=wizard.user_type.value if wizard.user_type else None,
        session_id=wizard.session_id,
        progress=wizard.progress(),
        show_navigation=wizard.shows_navigation(),
        fields=wizard.current_fields(),
        values=dict(wizard.state.current_data()),
        errors=wizard.errors,
        toasts=[asdict(t) for t in _drain_toasts(wizard)],
        recommendations=wizard.state.recommendations,
        campaign=wizard.state.campaign,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/options")
async def get_options():
    """Option lists for every select/multi-select field."""
    return get_form_options()


@router.post("/wizards", response_model=WizardView, status_code=201)
async def create_wizard(
    request: CreateWizardRequest,
    client: SessionSource = Depends(get_onboarding_client),
) -> WizardView:
    """Start a wizard; creates a backend session unless one is supplied."""
    wizard = OnboardingWizard(
        client,
        session_id=request.session_id,
        user_type=request.user_type,
    )
    await wizard.start()

    wizard_id = secrets.token_urlsafe(16)
    wizards[wizard_id] = wizard
    logger.info(f"Started onboarding wizard {wizard_id} at {wizard.step.name}")
    return _view(wizard_id, wizard)


@router.get("/wizards/{wizard_id}", response_model=WizardView)
async def get_wizard(wizard_id: str) -> WizardView:
    return _view(wizard_id, _get_wizard(wizard_id))


@router.delete("/wizards/{wizard_id}")
async def discard_wizard(wizard_id: str):
    """Drop a wizard and its in-memory form data."""
    _get_wizard(wizard_id)
    del wizards[wizard_id]
    return {"success": True}


@router.post("/wizards/{wizard_id}/begin", response_model=WizardView)
async def begin(wizard_id: str) -> WizardView:
    wizard = _get_wizard(wizard_id)
    wizard.begin()
    return _view(wizard_id, wizard)


@router.post("/wizards/{wizard_id}/user-type", response_model=WizardView)
async def select_user_type(wizard_id: str, request: UserTypeRequest) -> WizardView:
    wizard = _get_wizard(wizard_id)
    wizard.select_user_type(request.user_type)
    return _view(wizard_id, wizard)


@router.put("/wizards/{wizard_id}/fields/{field_id}", response_model=WizardView)
async def update_field(wizard_id: str, field_id: str, request: FieldUpdateRequest) -> WizardView:
    wizard = _get_wizard(wizard_id)
    try:
        wizard.update_field(field_id, request.value)
    except KeyError:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown field {field_id} for step {wizard.step.name}",
        )
    return _view(wizard_id, wizard)


@router.post("/wizards/{wizard_id}/next", response_model=WizardView)
async def go_next(wizard_id: str) -> WizardView:
    """Validate and advance. Validation failures return 400 with the field errors."""
    wizard = _get_wizard(wizard_id)
    errors = wizard.next()
    if errors:
        toasts = _drain_toasts(wizard)
        message = toasts[-1].title if toasts else "Validation Error"
        raise HTTPException(status_code=400, detail={"message": message, "errors": errors})
    return _view(wizard_id, wizard)


@router.post("/wizards/{wizard_id}/back", response_model=WizardView)
async def go_back(wizard_id: str) -> WizardView:
    wizard = _get_wizard(wizard_id)
    wizard.back()
    return _view(wizard_id, wizard)


@router.post("/wizards/{wizard_id}/session", response_model=WizardView)
async def retry_session(wizard_id: str) -> WizardView:
    """Retry session creation after a failed start."""
    wizard = _get_wizard(wizard_id)
    await wizard.ensure_session()
    return _view(wizard_id, wizard)


@router.get("/wizards/{wizard_id}/review")
async def get_review(wizard_id: str):
    wizard = _get_wizard(wizard_id)
    return {
        "user_type": wizard.user_type.value if wizard.user_type else None,
        "sections": wizard.review_summary(),
    }


@router.post("/wizards/{wizard_id}/submit", response_model=SubmitResponse)
async def submit(wizard_id: str) -> SubmitResponse:
    """
    Submit the profile once.

    Precondition and validation failures return 400, upstream failures 502
    and a submit that is already running 409; the wizard stays on the review
    step.
    """
    wizard = _get_wizard(wizard_id)
    result = await wizard.submit()

    if result is None:
        toasts = _drain_toasts(wizard)
        last = toasts[-1] if toasts else Toast("Submission Error", "Submission failed", "destructive")
        if last.title == SUBMISSION_IN_PROGRESS:
            status = 409
        elif last.title == "Submission Error":
            status = 502
        else:
            status = 400
        raise HTTPException(
            status_code=status,
            detail={"message": last.title, "description": last.description, "errors": wizard.errors},
        )

    return SubmitResponse(success=True, wizard=_view(wizard_id, wizard), result=result)
