"""
Onboarding State Management.

Holds the single step / user type / form data triple owned by one wizard
instance. State lives in memory for the lifetime of the wizard; to_dict and
from_dict exist so a host (e.g. the API router) can snapshot it.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any
import json

from .steps import (
    BRANCH_SECTIONS,
    TYPE_DEPENDENT_SECTIONS,
    SectionKey,
    UserType,
    WizardStep,
    initial_step,
    section_for_step,
)


def _empty_sections() -> dict[SectionKey, dict[str, Any]]:
    return {key: {} for key in SectionKey}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class WizardState:
    """
    Main wizard state.

    Sections are created empty at wizard start and mutated field by field.
    Only the sections relevant to the chosen user type are ever populated.
    """
    current_step: WizardStep = WizardStep.WELCOME
    user_type: UserType | None = None
    session_id: str | None = None

    # FormData, keyed by section
    sections: dict[SectionKey, dict[str, Any]] = field(default_factory=_empty_sections)

    # Review step values (terms acceptance); not part of the submitted payload
    review: dict[str, Any] = field(default_factory=dict)

    # Transient, recomputed on every validation pass
    field_errors: dict[str, str] = field(default_factory=dict)

    # Filled from the submission response
    recommendations: list[str] = field(default_factory=list)
    campaign: dict | None = None
    submitted: bool = False

    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        """Set timestamps if not provided."""
        now = _utc_now()
        if not self.created_at:
            self.created_at = now
        if not self.updated_at:
            self.updated_at = now

    @classmethod
    def start(cls, user_type: UserType | str | None = None, session_id: str | None = None) -> "WizardState":
        """Fresh state; skips to BasicProfile when the user type is pre-supplied."""
        user_type = UserType(user_type) if user_type else None
        return cls(
            current_step=initial_step(user_type),
            user_type=user_type,
            session_id=session_id,
        )

    def touch(self) -> None:
        self.updated_at = _utc_now()

    # -------------------------------------------------------------------------
    # Section access
    # -------------------------------------------------------------------------

    def current_section(self) -> SectionKey | None:
        return section_for_step(self.current_step)

    def section_data(self, key: SectionKey | None) -> dict[str, Any]:
        if key is None:
            return self.review
        return self.sections.setdefault(key, {})

    def current_data(self) -> dict[str, Any]:
        """Values backing the current step (review values on ReviewSubmit)."""
        return self.section_data(self.current_section())

    def set_value(self, field_id: str, value: Any) -> None:
        """Write a value into the current step's section and drop its error."""
        self.current_data()[field_id] = value
        self.field_errors.pop(field_id, None)
        self.touch()

    def set_user_type(self, user_type: UserType | str) -> bool:
        """
        Record the user type.

        Returns True if it changed from a previous choice, in which case the
        type-dependent sections are reset.
        """
        user_type = UserType(user_type)
        changed = self.user_type is not None and self.user_type != user_type
        if changed:
            for key in TYPE_DEPENDENT_SECTIONS:
                self.sections[key] = {}
        self.user_type = user_type
        self.field_errors = {}
        self.touch()
        return changed

    def relevant_sections(self) -> list[SectionKey]:
        """Sections that belong to the current user type, in flow order."""
        if self.user_type is None:
            return [SectionKey.BASIC_PROFILE]
        excluded = {s for t, s in BRANCH_SECTIONS.items() if t != self.user_type}
        return [key for key in SectionKey if key not in excluded]

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize state to dict for JSON storage."""
        data = asdict(self)
        data["current_step"] = self.current_step.name
        data["user_type"] = self.user_type.value if self.user_type else None
        data["sections"] = {key.value: dict(values) for key, values in self.sections.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "WizardState":
        """Deserialize state from dict."""
        data = dict(data)
        if "current_step" in data:
            data["current_step"] = WizardStep[data["current_step"]]
        if data.get("user_type"):
            data["user_type"] = UserType(data["user_type"])
        if "sections" in data:
            sections = _empty_sections()
            for key, values in data["sections"].items():
                sections[SectionKey(key)] = dict(values)
            data["sections"] = sections
        return cls(**data)

    def to_json(self) -> str:
        """Serialize state to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "WizardState":
        """Deserialize state from JSON string."""
        return cls.from_dict(json.loads(json_str))
