"""
Onboarding Steps - Step table and transition function.

The wizard flow is a declarative graph of forward edges. A step either has a
single successor or branches on the user type; branches rejoin further down.
Backward navigation is derived from the same forward edges, so Back always
mirrors Next for a given user type.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from .errors import TransitionError

logger = logging.getLogger(__name__)


class UserType(str, Enum):
    """Account type chosen at the type-selection step."""
    ATHLETE = "athlete"
    BUSINESS = "business"


class WizardStep(IntEnum):
    """Wizard steps. Not every user visits every step."""
    WELCOME = 0
    USER_TYPE_SELECTION = 1
    BASIC_PROFILE = 2
    BUSINESS_DETAILS = 3
    ATHLETE_DETAILS = 4
    BRAND_VALUES = 5
    GOALS = 6
    AUDIENCE_INFO = 7
    COMPENSATION = 8
    REVIEW_SUBMIT = 9
    COMPLETE = 10


class SectionKey(str, Enum):
    """FormData sections. Values are the wire (camelCase) names."""
    BASIC_PROFILE = "basicProfile"
    ATHLETE_DETAILS = "athleteDetails"
    BUSINESS_DETAILS = "businessDetails"
    BRAND_VALUES = "brandValues"
    GOALS = "goals"
    AUDIENCE_INFO = "audienceInfo"
    COMPENSATION = "compensation"


class Direction(str, Enum):
    """Which way a navigation move goes along the flow."""
    FORWARD = "forward"
    BACKWARD = "backward"


# Sections whose fields or meaning depend on the user type.
# Switching user type clears these.
TYPE_DEPENDENT_SECTIONS = (
    SectionKey.ATHLETE_DETAILS,
    SectionKey.BUSINESS_DETAILS,
    SectionKey.GOALS,
    SectionKey.AUDIENCE_INFO,
    SectionKey.COMPENSATION,
)

# Section owned by each branch; the other branch's section stays empty.
BRANCH_SECTIONS = {
    UserType.ATHLETE: SectionKey.ATHLETE_DETAILS,
    UserType.BUSINESS: SectionKey.BUSINESS_DETAILS,
}


# =============================================================================
# Step Graph
# =============================================================================

Successor = WizardStep | Mapping[UserType, WizardStep]


@dataclass(frozen=True)
class StepGraph:
    """
    Forward edges of a wizard flow.

    Build with StepGraph.builder(); the start step has no predecessor and the
    terminal step has no successor.
    """
    start: WizardStep
    terminal: WizardStep
    edges: Mapping[WizardStep, Successor] = field(default_factory=dict)

    @classmethod
    def builder(cls, start: WizardStep) -> "StepGraphBuilder":
        return StepGraphBuilder(start)

    def path(self, user_type: UserType | str | None) -> list[WizardStep]:
        """
        Ordered steps visited by a user of this type.

        Without a user type the path stops at the first branching step.
        """
        user_type = _coerce_user_type(user_type)
        steps = [self.start]
        seen = {self.start}
        current = self.start

        while current != self.terminal:
            successor = self.edges.get(current)
            if successor is None:
                raise TransitionError(f"Step {current.name} has no successor")
            if isinstance(successor, Mapping):
                if user_type is None:
                    break
                successor = successor[user_type]
            if successor in seen:
                raise TransitionError(f"Flow loops back to {successor.name}")
            steps.append(successor)
            seen.add(successor)
            current = successor

        return steps

    def forward(self, current: WizardStep, user_type: UserType | str | None) -> WizardStep:
        if current == self.terminal:
            return current

        steps = self._path_containing(current, user_type)
        idx = steps.index(current)
        if idx + 1 >= len(steps):
            raise TransitionError(
                f"A user type is required to continue past {current.name}"
            )
        return steps[idx + 1]

    def backward(self, current: WizardStep, user_type: UserType | str | None) -> WizardStep:
        if current in (self.start, self.terminal):
            return current

        steps = self._path_containing(current, user_type)
        return steps[steps.index(current) - 1]

    def _path_containing(
        self, current: WizardStep, user_type: UserType | str | None
    ) -> list[WizardStep]:
        steps = self.path(user_type)
        if current not in steps:
            who = _coerce_user_type(user_type)
            raise TransitionError(
                f"Step {current.name} is not on the "
                f"{who.value if who else 'untyped'} path"
            )
        return steps

    def steps(self) -> set[WizardStep]:
        """Every step that appears anywhere in the graph."""
        found = {self.start, self.terminal}
        for source, successor in self.edges.items():
            found.add(source)
            if isinstance(successor, Mapping):
                found.update(successor.values())
            else:
                found.add(successor)
        return found


class StepGraphBuilder:
    """Fluent builder: then() appends a step, branch() forks by user type."""

    def __init__(self, start: WizardStep):
        self._start = start
        self._edges: dict[WizardStep, Successor] = {}
        self._tails: list[WizardStep] = [start]

    def then(self, step: WizardStep) -> "StepGraphBuilder":
        # A step following a branch rejoins every open tail
        for tail in self._tails:
            self._edges[tail] = step
        self._tails = [step]
        return self

    def branch(self, targets: Mapping[UserType, WizardStep]) -> "StepGraphBuilder":
        if len(self._tails) != 1:
            raise ValueError("Rejoin the previous branch before branching again")
        if set(targets) != set(UserType):
            raise ValueError("A branch needs one target per user type")
        self._edges[self._tails[0]] = dict(targets)
        self._tails = list(dict.fromkeys(targets.values()))
        return self

    def build(self) -> StepGraph:
        if len(self._tails) != 1:
            raise ValueError("Flow must end on a single terminal step")
        return StepGraph(start=self._start, terminal=self._tails[0], edges=dict(self._edges))


ONBOARDING_FLOW = (
    StepGraph.builder(WizardStep.WELCOME)
    .then(WizardStep.USER_TYPE_SELECTION)
    .then(WizardStep.BASIC_PROFILE)
    .branch({
        UserType.ATHLETE: WizardStep.ATHLETE_DETAILS,
        UserType.BUSINESS: WizardStep.BUSINESS_DETAILS,
    })
    .then(WizardStep.BRAND_VALUES)
    .then(WizardStep.GOALS)
    .then(WizardStep.AUDIENCE_INFO)
    .then(WizardStep.COMPENSATION)
    .then(WizardStep.REVIEW_SUBMIT)
    .then(WizardStep.COMPLETE)
    .build()
)


# =============================================================================
# Transition Function
# =============================================================================

def next_step(
    current: WizardStep,
    user_type: UserType | str | None,
    direction: Direction | str,
    graph: StepGraph = ONBOARDING_FLOW,
) -> WizardStep:
    """
    Compute the step reached from `current` in the given direction.

    Raises TransitionError when the move is impossible for this user type
    (e.g. branching without a user type, or standing on the other branch).
    """
    direction = Direction(direction)
    if direction == Direction.FORWARD:
        target = graph.forward(current, user_type)
    else:
        target = graph.backward(current, user_type)
    logger.debug(f"Transition {current.name} -> {target.name} ({direction.value})")
    return target


def path_for(user_type: UserType | str | None, graph: StepGraph = ONBOARDING_FLOW) -> list[WizardStep]:
    """Ordered steps a user of this type visits."""
    return graph.path(user_type)


def initial_step(user_type: UserType | str | None = None) -> WizardStep:
    """Welcome, or BasicProfile when the user type is already known."""
    return WizardStep.BASIC_PROFILE if user_type else WizardStep.WELCOME


def has_navigation(step: WizardStep) -> bool:
    """Whether Next/Back controls are shown on this step."""
    return step not in (
        WizardStep.WELCOME,
        WizardStep.USER_TYPE_SELECTION,
        WizardStep.COMPLETE,
    )


def progress(
    step: WizardStep,
    user_type: UserType | str | None,
    graph: StepGraph = ONBOARDING_FLOW,
) -> int:
    """Percentage of the flow completed when standing on `step`."""
    total = max(len(path_for(t, graph)) for t in UserType)
    steps = path_for(user_type, graph)
    if step not in steps:
        return 0
    return round(steps.index(step) / (total - 1) * 100)


# =============================================================================
# Sections & Headings
# =============================================================================

_STEP_SECTIONS = {
    WizardStep.BASIC_PROFILE: SectionKey.BASIC_PROFILE,
    WizardStep.ATHLETE_DETAILS: SectionKey.ATHLETE_DETAILS,
    WizardStep.BUSINESS_DETAILS: SectionKey.BUSINESS_DETAILS,
    WizardStep.BRAND_VALUES: SectionKey.BRAND_VALUES,
    WizardStep.GOALS: SectionKey.GOALS,
    WizardStep.AUDIENCE_INFO: SectionKey.AUDIENCE_INFO,
    WizardStep.COMPENSATION: SectionKey.COMPENSATION,
}


def section_for_step(step: WizardStep) -> SectionKey | None:
    """FormData section a step writes into (None for non-form steps)."""
    return _STEP_SECTIONS.get(step)


@dataclass(frozen=True)
class StepInfo:
    title: str
    description: str


def step_info(step: WizardStep, user_type: UserType | str | None) -> StepInfo:
    """Heading shown above a step."""
    athlete = _coerce_user_type(user_type) == UserType.ATHLETE

    if step == WizardStep.WELCOME:
        return StepInfo(
            "Welcome to Contested",
            "Let's personalize your experience to find the perfect partnerships",
        )
    if step == WizardStep.USER_TYPE_SELECTION:
        return StepInfo("Who are you?", "Select your account type to customize your experience")
    if step == WizardStep.BASIC_PROFILE:
        return StepInfo(
            "Athlete Profile" if athlete else "Business Profile",
            "Let's start with the basics",
        )
    if step == WizardStep.ATHLETE_DETAILS:
        return StepInfo("Sports Background", "Tell us about your athletic career")
    if step == WizardStep.BUSINESS_DETAILS:
        return StepInfo("Business Details", "Tell us more about your business")
    if step == WizardStep.BRAND_VALUES:
        return StepInfo("Values & Experience", "What values matter to you?")
    if step == WizardStep.GOALS:
        return StepInfo("Partnership Goals", "What do you hope to achieve?")
    if step == WizardStep.AUDIENCE_INFO:
        if athlete:
            return StepInfo("Audience & Reach", "Tell us about your followers")
        return StepInfo("Target Audience", "Who do you want to reach?")
    if step == WizardStep.COMPENSATION:
        if athlete:
            return StepInfo("Compensation Expectations", "What are your compensation goals?")
        return StepInfo("Budget Information", "What's your budget for athlete partnerships?")
    if step == WizardStep.REVIEW_SUBMIT:
        return StepInfo("Review & Submit", "Let's check everything before finalizing")
    return StepInfo("Profile Complete!", "Your personalized profile is ready")


def dashboard_route(user_type: UserType | str | None) -> str:
    """Destination a caller routes to once onboarding completes."""
    user_type = _coerce_user_type(user_type)
    if user_type is None:
        return "/"
    return f"/{user_type.value}/dashboard"


def _coerce_user_type(user_type: UserType | str | None) -> UserType | None:
    if user_type is None or user_type == "":
        return None
    return UserType(user_type)
