"""
Onboarding Forms - Field model, step field tables and validation.

Fields are declarative and stateless: they are rebuilt from (step, user type)
on every call and never persisted. Validation turns the fields of one step
plus that step's section data into a map of field id -> message.
"""

import logging
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import FieldValidationError
from .steps import UserType, WizardStep

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    BOOLEAN = "boolean"
    SLIDER = "slider"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    TEL = "tel"
    EMAIL = "email"
    PASSWORD = "password"


# Field types whose value is a list of option ids
MULTI_VALUE_TYPES = {FieldType.MULTI_SELECT}


class FieldOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str | None = None
    color: str | None = None  # "amber" marks regulated industries


class ConditionalRule(BaseModel):
    """Show a field only when another field in the same section matches."""
    model_config = ConfigDict(frozen=True)

    field: str
    value: Any


class FieldDefinition(BaseModel):
    """A single form input."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: FieldType
    label: str
    required: bool = False
    description: str | None = None
    tooltip: str | None = None
    placeholder: str | None = None
    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    options: list[FieldOption] = Field(default_factory=list)
    conditional: ConditionalRule | None = None
    default_value: Any = None


def _options(*pairs: tuple[str, str]) -> list[FieldOption]:
    return [FieldOption(id=option_id, label=label) for option_id, label in pairs]


# =============================================================================
# Option Lists
# =============================================================================

SPORT_OPTIONS = _options(
    ("football", "Football"),
    ("basketball", "Basketball"),
    ("soccer", "Soccer"),
    ("baseball", "Baseball"),
    ("track", "Track & Field"),
    ("other", "Other"),
)

ELIGIBILITY_OPTIONS = _options(
    ("NCAA", "NCAA"),
    ("NAIA", "NAIA"),
    ("NJCAA", "NJCAA"),
    ("Other", "Other"),
)

ACCOUNT_TYPE_OPTIONS = [
    FieldOption(id="product", label="Product-based Business",
                description="We sell physical or digital products"),
    FieldOption(id="service", label="Service-based Business",
                description="We provide services to customers"),
]

# Regulated industries carry extra NIL restrictions
REGULATED_INDUSTRIES = {"cannabis", "gambling", "alcohol", "tobacco", "adult"}

INDUSTRY_OPTIONS = [
    FieldOption(id=option_id, label=label,
                color="amber" if option_id in REGULATED_INDUSTRIES else None)
    for option_id, label in [
        ("retail", "Retail"),
        ("food", "Food & Beverage"),
        ("tech", "Technology"),
        ("fitness", "Fitness & Health"),
        ("apparel", "Apparel & Fashion"),
        ("entertainment", "Entertainment"),
        ("cannabis", "Cannabis"),
        ("gambling", "Gambling"),
        ("alcohol", "Alcohol"),
        ("tobacco", "Tobacco"),
        ("adult", "Adult Content"),
        ("other", "Other"),
    ]
]

BUSINESS_SIZE_OPTIONS = _options(
    ("1-10", "1-10 employees"),
    ("11-50", "11-50 employees"),
    ("51-200", "51-200 employees"),
    ("201-500", "201-500 employees"),
    ("500+", "500+ employees"),
)

VALUE_OPTIONS = _options(
    ("authenticity", "Authenticity"),
    ("innovation", "Innovation"),
    ("community", "Community"),
    ("sustainability", "Sustainability"),
    ("diversity", "Diversity & Inclusion"),
    ("excellence", "Excellence"),
    ("education", "Education"),
    ("wellness", "Health & Wellness"),
    ("social_impact", "Social Impact"),
)

ATHLETE_GOAL_OPTIONS = _options(
    ("income", "Generate Income"),
    ("exposure", "Gain Exposure"),
    ("career", "Career Advancement"),
    ("product", "Access to Products/Services"),
    ("community", "Community Impact"),
    ("network", "Networking Opportunities"),
)

PREFERRED_INDUSTRY_OPTIONS = _options(
    ("fitness", "Fitness"),
    ("fashion", "Fashion"),
    ("food", "Food & Beverage"),
    ("tech", "Tech"),
    ("lifestyle", "Lifestyle"),
    ("education", "Education"),
    ("entertainment", "Entertainment"),
    ("sports", "Sports Equipment"),
)

BUSINESS_GOAL_OPTIONS = _options(
    ("awareness", "Brand Awareness"),
    ("content", "Content Creation"),
    ("activation", "Local Activation"),
    ("event", "Event Presence"),
    ("conversion", "Conversion Performance"),
)

AUDIENCE_SIZE_OPTIONS = _options(
    ("under1k", "Under 1,000 followers"),
    ("1k-5k", "1,000 - 5,000 followers"),
    ("5k-10k", "5,000 - 10,000 followers"),
    ("10k-50k", "10,000 - 50,000 followers"),
    ("50k-100k", "50,000 - 100,000 followers"),
    ("100k-plus", "Over 100,000 followers"),
)

TARGET_AUDIENCE_OPTIONS = _options(
    ("gen_z", "Gen Z (18-24)"),
    ("millennials", "Millennials (25-40)"),
    ("gen_x", "Gen X (41-56)"),
    ("families", "Families"),
    ("students", "College Students"),
    ("sports_fans", "Sports Fans"),
    ("local", "Local Community"),
)

CAMPAIGN_VIBE_OPTIONS = _options(
    ("fun", "Fun & Energetic"),
    ("authentic", "Authentic & Relatable"),
    ("professional", "Professional & Polished"),
    ("educational", "Educational & Informative"),
    ("inspirational", "Inspirational"),
)

COMPENSATION_GOAL_OPTIONS = _options(
    ("paid", "Paid partnerships only"),
    ("product", "Product/service exchanges acceptable"),
    ("mixed", "Mix of paid and product exchanges"),
    ("flexible", "Flexible, depends on opportunity"),
)

BUDGET_MIN = 0
BUDGET_MAX = 100000

PHONE_PATTERN = r"[0-9]{3}-[0-9]{3}-[0-9]{4}"
ZIP_CODE_PATTERN = r"\d{5}"

TERMS_FIELD = FieldDefinition(
    id="terms_accepted",
    type=FieldType.CHECKBOX,
    label="I agree to the Terms of Service and Privacy Policy",
    required=True,
)


# =============================================================================
# Step Field Tables
# =============================================================================

def _basic_profile_fields(athlete: bool) -> list[FieldDefinition]:
    return [
        FieldDefinition(
            id="name",
            type=FieldType.TEXT,
            label="Full Name" if athlete else "Business Name",
            required=True,
            placeholder="John Doe" if athlete else "Acme Corporation",
            tooltip=(
                "Enter your full legal name" if athlete
                else "Enter your official business name as it appears on legal documents"
            ),
        ),
        FieldDefinition(
            id="email",
            type=FieldType.EMAIL,
            label="Email Address",
            required=True,
            placeholder="email@example.com",
        ),
        FieldDefinition(
            id="phone",
            type=FieldType.TEL,
            label="Phone Number",
            placeholder="555-123-4567",
            pattern=PHONE_PATTERN,
        ),
    ]


def _athlete_details_fields() -> list[FieldDefinition]:
    return [
        FieldDefinition(id="sport", type=FieldType.SELECT, label="Primary Sport",
                        required=True, options=SPORT_OPTIONS),
        FieldDefinition(id="sport_other", type=FieldType.TEXT, label="Which sport?",
                        required=True, conditional=ConditionalRule(field="sport", value="other")),
        FieldDefinition(id="position", type=FieldType.TEXT, label="Position/Role",
                        placeholder="Quarterback, Forward, etc."),
        FieldDefinition(id="university", type=FieldType.TEXT, label="University/Organization",
                        required=True, placeholder="University of Example"),
        FieldDefinition(id="eligibility_status", type=FieldType.SELECT, label="Eligibility Status",
                        required=True, options=ELIGIBILITY_OPTIONS),
        FieldDefinition(id="dob", type=FieldType.DATE, label="Date of Birth", required=True),
    ]


def _business_details_fields() -> list[FieldDefinition]:
    return [
        FieldDefinition(id="account_type", type=FieldType.RADIO, label="Product or Service?",
                        required=True, options=ACCOUNT_TYPE_OPTIONS),
        FieldDefinition(id="industry", type=FieldType.SELECT, label="Industry", required=True,
                        options=INDUSTRY_OPTIONS,
                        tooltip="Some industries have special regulations for NIL partnerships"),
        FieldDefinition(id="business_size", type=FieldType.SELECT, label="Business Size",
                        required=True, options=BUSINESS_SIZE_OPTIONS),
        FieldDefinition(id="zip_code", type=FieldType.TEXT, label="Zip Code", required=True,
                        pattern=ZIP_CODE_PATTERN, placeholder="12345"),
    ]


def _brand_values_fields(athlete: bool) -> list[FieldDefinition]:
    return [
        FieldDefinition(
            id="values",
            type=FieldType.MULTI_SELECT,
            label="Personal Values" if athlete else "Brand Values",
            description="Select values that align with you",
            required=True,
            options=VALUE_OPTIONS,
        ),
        FieldDefinition(
            id="has_partnered_before",
            type=FieldType.BOOLEAN,
            label=(
                "Have you worked with brands before?" if athlete
                else "Have you partnered with athletes before?"
            ),
            required=True,
        ),
    ]


def _goals_fields(athlete: bool) -> list[FieldDefinition]:
    if athlete:
        return [
            FieldDefinition(id="goals", type=FieldType.MULTI_SELECT, label="Partnership Goals",
                            description="What do you hope to achieve?", required=True,
                            options=ATHLETE_GOAL_OPTIONS),
            FieldDefinition(id="preferred_industries", type=FieldType.MULTI_SELECT,
                            label="Preferred Industries", options=PREFERRED_INDUSTRY_OPTIONS),
        ]
    return [
        FieldDefinition(id="goals", type=FieldType.MULTI_SELECT, label="Campaign Goals",
                        description="What do you hope to achieve?", required=True,
                        options=BUSINESS_GOAL_OPTIONS),
        FieldDefinition(id="target_schools_sports", type=FieldType.TEXTAREA,
                        label="Target Schools/Sports",
                        description="Any specific schools, teams, or sports you want to target?",
                        placeholder="e.g., University of Florida football, NCAA Division I basketball"),
    ]


def _audience_fields(athlete: bool) -> list[FieldDefinition]:
    if athlete:
        return [
            FieldDefinition(id="audience_size", type=FieldType.SELECT, label="Audience Size",
                            required=True, options=AUDIENCE_SIZE_OPTIONS),
            FieldDefinition(id="social_links", type=FieldType.TEXT, label="Social Media Handles",
                            placeholder="@yourhandle",
                            description="Add your primary social media handle"),
        ]
    return [
        FieldDefinition(id="audience_goals", type=FieldType.MULTI_SELECT, label="Target Audience",
                        description="Who do you want to reach?", required=True,
                        options=TARGET_AUDIENCE_OPTIONS),
        FieldDefinition(id="campaign_vibe", type=FieldType.SELECT, label="Campaign Vibe",
                        required=True, options=CAMPAIGN_VIBE_OPTIONS),
    ]


def _compensation_fields(athlete: bool) -> list[FieldDefinition]:
    if athlete:
        return [
            FieldDefinition(id="compensation_goals", type=FieldType.SELECT,
                            label="Compensation Goals", required=True,
                            options=COMPENSATION_GOAL_OPTIONS),
        ]
    return [
        FieldDefinition(id="budget_range", type=FieldType.SLIDER, label="Budget Range",
                        required=True, min=BUDGET_MIN, max=BUDGET_MAX),
    ]


def fields_for_step(step: WizardStep, user_type: UserType | str | None) -> list[FieldDefinition]:
    """
    Ordered fields rendered on a step for a user type.

    Branch steps return [] for the other user type, and steps that collect
    nothing (Welcome, UserTypeSelection, Complete) always return [].
    """
    user_type = UserType(user_type) if user_type else None
    athlete = user_type == UserType.ATHLETE

    if step == WizardStep.BASIC_PROFILE:
        return _basic_profile_fields(athlete)
    if step == WizardStep.ATHLETE_DETAILS:
        return _athlete_details_fields() if user_type == UserType.ATHLETE else []
    if step == WizardStep.BUSINESS_DETAILS:
        return _business_details_fields() if user_type == UserType.BUSINESS else []
    if step == WizardStep.BRAND_VALUES:
        return _brand_values_fields(athlete)
    if step == WizardStep.GOALS:
        return _goals_fields(athlete)
    if step == WizardStep.AUDIENCE_INFO:
        return _audience_fields(athlete)
    if step == WizardStep.COMPENSATION:
        return _compensation_fields(athlete)
    if step == WizardStep.REVIEW_SUBMIT:
        return [TERMS_FIELD]
    return []


# =============================================================================
# Validation
# =============================================================================

def is_visible(field: FieldDefinition, section_data: dict[str, Any]) -> bool:
    """Apply a field's conditional rule against its own section."""
    rule = field.conditional
    if rule is None:
        return True
    actual = section_data.get(rule.field)
    if isinstance(rule.value, (list, tuple, set)):
        return actual in rule.value
    return actual == rule.value


def visible_fields(
    fields: list[FieldDefinition], section_data: dict[str, Any]
) -> list[FieldDefinition]:
    return [f for f in fields if is_visible(f, section_data)]


def _is_empty(value: Any) -> bool:
    # Mirrors the browser check: None, "", 0, False and empty collections are all "missing"
    return not value


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_as_text(v) for v in value)
    return str(value)


def validate(fields: list[FieldDefinition], section_data: dict[str, Any] | None) -> dict[str, str]:
    """
    Validate one step's section data.

    Returns {field_id: message}; empty when the step is valid. Hidden
    conditional fields are skipped. Patterns match anywhere in the value.
    """
    section_data = section_data or {}
    errors: dict[str, str] = {}

    for field in fields:
        if not is_visible(field, section_data):
            continue

        value = section_data.get(field.id)

        if _is_empty(value):
            if field.required:
                errors[field.id] = f"{field.label} is required"
            continue

        if field.pattern and not re.search(field.pattern, _as_text(value)):
            errors[field.id] = f"Invalid format for {field.label}"

    if errors:
        logger.debug(f"Validation failed for fields: {sorted(errors)}")
    return errors


def ensure_valid(fields: list[FieldDefinition], section_data: dict[str, Any] | None) -> None:
    """Raise FieldValidationError carrying every field error, if any."""
    errors = validate(fields, section_data)
    if errors:
        raise FieldValidationError(errors)


def clear_field_error(errors: dict[str, str], field_id: str) -> dict[str, str]:
    """Copy of `errors` without `field_id`; other entries untouched."""
    return {k: v for k, v in errors.items() if k != field_id}


# =============================================================================
# Display Helpers
# =============================================================================

def format_review_value(value: Any) -> str:
    """Format a stored value for the review screen."""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if value is None or value == "":
        return "-"
    return str(value)


def option_label(field: FieldDefinition, option_id: Any) -> str:
    """Human label for a stored option id, falling back to the id itself."""
    for option in field.options:
        if option.id == option_id:
            return option.label
    return str(option_id)


# =============================================================================
# API Response Helpers
# =============================================================================

def _dump(options: list[FieldOption]) -> list[dict]:
    return [o.model_dump(exclude_none=True) for o in options]


def get_form_options() -> dict:
    """
    Get all option lists for frontend rendering.

    Keys are grouped by the step that uses them.
    """
    return {
        "user_types": [t.value for t in UserType],
        "sports": _dump(SPORT_OPTIONS),
        "eligibility_statuses": _dump(ELIGIBILITY_OPTIONS),
        "account_types": _dump(ACCOUNT_TYPE_OPTIONS),
        "industries": _dump(INDUSTRY_OPTIONS),
        "regulated_industries": sorted(REGULATED_INDUSTRIES),
        "business_sizes": _dump(BUSINESS_SIZE_OPTIONS),
        "values": _dump(VALUE_OPTIONS),
        "athlete_goals": _dump(ATHLETE_GOAL_OPTIONS),
        "business_goals": _dump(BUSINESS_GOAL_OPTIONS),
        "preferred_industries": _dump(PREFERRED_INDUSTRY_OPTIONS),
        "audience_sizes": _dump(AUDIENCE_SIZE_OPTIONS),
        "target_audiences": _dump(TARGET_AUDIENCE_OPTIONS),
        "campaign_vibes": _dump(CAMPAIGN_VIBE_OPTIONS),
        "compensation_goals": _dump(COMPENSATION_GOAL_OPTIONS),
        "budget_range": {"min": BUDGET_MIN, "max": BUDGET_MAX},
    }
