"""Dashboard-level assessment models.

These records summarize a household's situation for display: overall status,
one concrete next action, progress toward all bills being current, upcoming
deadlines, consequence timelines and crisis alerts. ResourceAssessment is
the narrower severity classification used only to pick emergency assistance
resources.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .bills import PriorityCategory


# =============================================================================
# ENUMERATIONS
# =============================================================================

class DashboardStatus(str, Enum):
    """Overall household status, most severe first."""
    CRISIS = "crisis"
    URGENT = "urgent"
    CAUTION = "caution"
    STABLE = "stable"
    COMFORTABLE = "comfortable"


class NextActionPriority(str, Enum):
    IMMEDIATE = "immediate"
    HIGH = "high"
    MEDIUM = "medium"


class ProgressCategory(str, Enum):
    SURVIVAL_SECURED = "survival_secured"  # Every critical bill is current
    ALL_CURRENT = "all_current"
    IN_PROGRESS = "in_progress"


class AlertType(str, Enum):
    BUDGET_CRISIS = "budget_crisis"
    UTILITY_SHUTOFF = "utility_shutoff"
    HOUSING_RISK = "housing_risk"
    TRANSPORTATION_RISK = "transportation_risk"


class AlertSeverity(str, Enum):
    """Alert urgency, most severe first."""
    EMERGENCY = "emergency"
    CRITICAL = "critical"
    WARNING = "warning"

    @property
    def rank(self) -> int:
        return {
            AlertSeverity.EMERGENCY: 3,
            AlertSeverity.CRITICAL: 2,
            AlertSeverity.WARNING: 1,
        }[self]


class ResourceSeverity(str, Enum):
    """Severity used to select emergency assistance resources."""
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"


class ResponseTimeframe(str, Enum):
    IMMEDIATE = "immediate"
    WITHIN_WEEK = "within_week"
    WITHIN_MONTH = "within_month"


# =============================================================================
# INPUT FROM CRISIS TRIAGE
# =============================================================================

class TriageVerdict(BaseModel):
    """Verdict handed over by an external crisis-triage step.

    Actions are plain strings such as
    ``"Pay electric: $183 today - Power shutoff"``; the first one becomes the
    dashboard's next action.
    """

    model_config = {"frozen": True}

    is_crisis: bool = False
    actions: list[str] = Field(default_factory=list)
    help_resources: list[str] = Field(default_factory=list)


# =============================================================================
# DASHBOARD COMPONENTS
# =============================================================================

class NextAction(BaseModel):
    """The single most important thing to do next."""

    model_config = {"frozen": True}

    action: str
    amount: Decimal
    deadline: date
    days_until: int
    consequence: str
    priority: NextActionPriority
    resource_link: Optional[str] = None


class ProgressMilestone(BaseModel):
    """How close the household is to having every bill current."""

    model_config = {"frozen": True}

    description: str
    current_count: int
    total_count: int
    next_milestone: str
    weeks_to_stability: Optional[int] = Field(
        default=None,
        description="None when the timeline is unclear",
    )
    timeline_to_stability: str
    weekly_progress: str
    encouragement: str
    category: ProgressCategory


class Deadline(BaseModel):
    """An unpaid bill and what happens if it is missed."""

    model_config = {"frozen": True}

    bill_id: str
    bill_name: str
    amount: Decimal
    due_date: date
    days_until: int
    consequence: str
    payment_possible: bool


class ConsequenceEvent(BaseModel):
    """What happens to one unpaid bill, and when."""

    model_config = {"frozen": True}

    bill_id: str
    bill_name: str
    amount: Decimal
    deadline: date
    days_until: int
    consequence: str
    severity: PriorityCategory
    can_prevent: bool
    prevention_cost: Decimal


class ConsequenceTimeline(BaseModel):
    """Consequence events grouped by how soon they happen.

    ``this_week`` includes the ``urgent`` events; ``next_week`` covers days 8
    to 14 and ``this_month`` days 15 to 30.
    """

    model_config = {"frozen": True}

    urgent: list[ConsequenceEvent] = Field(default_factory=list)
    this_week: list[ConsequenceEvent] = Field(default_factory=list)
    next_week: list[ConsequenceEvent] = Field(default_factory=list)
    this_month: list[ConsequenceEvent] = Field(default_factory=list)

    @property
    def this_week_total(self) -> Decimal:
        return sum((e.amount for e in self.this_week), Decimal("0"))

    @property
    def next_week_total(self) -> Decimal:
        return sum((e.amount for e in self.next_week), Decimal("0"))

    @property
    def this_month_total(self) -> Decimal:
        return sum((e.amount for e in self.this_month), Decimal("0"))


class CrisisAlert(BaseModel):
    """A situation that needs attention today."""

    model_config = {"frozen": True}

    alert_type: AlertType
    severity: AlertSeverity
    description: str
    immediate_action: str
    bill_id: Optional[str] = None
    resources: list[str] = Field(default_factory=list)


class AvailableMoney(BaseModel):
    """Income, protected needs and what is left for bills."""

    model_config = {"frozen": True}

    total_income: Decimal
    essential_needs: Decimal
    available_for_bills: Decimal


class ResourceAssessment(BaseModel):
    """Severity, needs and assistance resources for a household in trouble."""

    model_config = {"frozen": True}

    severity: ResourceSeverity
    primary_needs: list[str] = Field(default_factory=list)
    timeframe: ResponseTimeframe
    recommended_resources: list[str] = Field(default_factory=list)
    action_plan: list[str] = Field(default_factory=list)


class DashboardAssessment(BaseModel):
    """Everything the dashboard shows, computed from one snapshot."""

    model_config = {"frozen": True}

    status: DashboardStatus
    status_explanation: str
    primary_needs: list[str] = Field(default_factory=list)
    next_action: NextAction
    progress: ProgressMilestone
    upcoming_deadlines: list[Deadline] = Field(default_factory=list, max_length=5)
    crisis_alerts: list[CrisisAlert] = Field(default_factory=list)
    consequence_timeline: ConsequenceTimeline = Field(default_factory=ConsequenceTimeline)
    urgent_actions: list[str] = Field(default_factory=list)
    available_money: AvailableMoney
    resource_assessment: ResourceAssessment
    generated_at: datetime


__all__ = [
    "DashboardStatus",
    "NextActionPriority",
    "ProgressCategory",
    "AlertType",
    "AlertSeverity",
    "ResourceSeverity",
    "ResponseTimeframe",
    "TriageVerdict",
    "NextAction",
    "ProgressMilestone",
    "Deadline",
    "ConsequenceEvent",
    "ConsequenceTimeline",
    "CrisisAlert",
    "AvailableMoney",
    "ResourceAssessment",
    "DashboardAssessment",
]
