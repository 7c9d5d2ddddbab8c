"""Bill and payment plan data models.

Bills arrive from the caller with balance, due date and risk metadata. The
priority scorer fills in ``priority_score``, ``priority_level`` and
``priority_breakdown``; the budget-bill integrator turns scored bills into an
IntegratedPaymentPlan.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from .budget import SafetyLevel


# Minimum payment assumed when a bill does not state one: min(balance, 50)
DEFAULT_MINIMUM_PAYMENT = Decimal("50")

# Days until due assumed when a bill carries no due date information
DEFAULT_DAYS_UNTIL_DUE = 30


# =============================================================================
# ENUMERATIONS
# =============================================================================

class BillType(str, Enum):
    """What a bill pays for. Drives the base priority score."""
    HOUSING = "housing"                # Rent, mortgage, property tax
    UTILITIES = "utilities"            # Electric, gas, water, internet
    DEBT = "debt"                      # Credit cards, loans
    INSURANCE = "insurance"            # Health, auto, life insurance
    TRANSPORTATION = "transportation"  # Car payment, public transport
    HEALTHCARE = "healthcare"          # Medical bills, prescriptions
    EDUCATION = "education"            # Student loans, tuition
    FOOD = "food"
    PERSONAL = "personal"              # Clothing, personal care
    ENTERTAINMENT = "entertainment"    # Subscriptions, memberships
    SAVINGS = "savings"
    OTHER = "other"


class PriorityCategory(str, Enum):
    """Coarse urgency bucket used by the dashboard."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort weight, higher is more urgent."""
        return {
            PriorityCategory.CRITICAL: 4,
            PriorityCategory.HIGH: 3,
            PriorityCategory.MEDIUM: 2,
            PriorityCategory.LOW: 1,
        }[self]


class PriorityLevel(str, Enum):
    """Label derived from a numeric priority score."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MINIMAL = "minimal"

    @property
    def label(self) -> str:
        """Display label, e.g. "Critical"."""
        return self.value.capitalize()

    def to_category(self) -> PriorityCategory:
        """Map onto the four dashboard buckets (MINIMAL folds into LOW)."""
        if self == PriorityLevel.MINIMAL:
            return PriorityCategory.LOW
        return PriorityCategory(self.value)


class BillStatus(str, Enum):
    """Lifecycle state of a bill. Only ACTIVE bills are allocated money."""
    ACTIVE = "active"
    PAID = "paid"
    DISPUTED = "disputed"
    CANCELLED = "cancelled"


def as_date(value: Union[date, datetime]) -> date:
    """Reduce a datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


# =============================================================================
# BILL MODELS
# =============================================================================

class PriorityBreakdown(BaseModel):
    """Components of a bill's additive priority score."""

    model_config = {"frozen": True}

    base_score: int
    due_date_modifier: int
    essential_modifier: int
    late_fee_modifier: int
    interest_modifier: int
    days_until_due: int
    raw_score: int
    score: int

    @property
    def was_clamped(self) -> bool:
        """True when the reported score is below the additive sum."""
        return self.score < self.raw_score


class Bill(BaseModel):
    """An overdue or upcoming household bill."""

    model_config = {"frozen": True}

    id: str
    name: str
    current_balance: Decimal = Field(ge=0)
    minimum_payment: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Defaults to min(current_balance, 50) when not supplied",
    )
    days_overdue: int = Field(default=0, ge=0)
    days_until_due: Optional[int] = None
    due_date: Optional[date] = None
    shutoff_date: Optional[date] = Field(
        default=None,
        description="Announced shutoff, eviction or repossession date",
    )
    last_payment_date: Optional[date] = None
    category: Optional[PriorityCategory] = None
    bill_type: BillType = BillType.OTHER
    is_essential: bool = False
    status: BillStatus = BillStatus.ACTIVE
    late_fee: Decimal = Field(default=Decimal("0"), ge=0)
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Annual interest rate in percent (e.g. 24.99)",
    )

    # Risk flags
    shutoff_risk: bool = False
    repossession_risk: bool = False
    late_fee_accruing: bool = False

    # Filled in by the priority scorer
    priority_score: Optional[int] = None
    priority_level: Optional[PriorityLevel] = None
    priority_breakdown: Optional[PriorityBreakdown] = None

    def model_post_init(self, __context) -> None:
        """Apply the min(balance, 50) minimum payment default."""
        if self.minimum_payment is None:
            object.__setattr__(
                self,
                "minimum_payment",
                min(self.current_balance, DEFAULT_MINIMUM_PAYMENT),
            )

    @property
    def is_current(self) -> bool:
        """A bill with nothing owed is current."""
        return self.current_balance == 0

    @property
    def is_scored(self) -> bool:
        """Whether the priority scorer has processed this bill."""
        return self.priority_score is not None

    @property
    def effective_category(self) -> PriorityCategory:
        """Caller-supplied category, else one derived from the priority level."""
        if self.category is not None:
            return self.category
        if self.priority_level is not None:
            return self.priority_level.to_category()
        return PriorityCategory.LOW

    @property
    def has_due_information(self) -> bool:
        """Whether a due date, days until due or days overdue was supplied."""
        return (
            self.due_date is not None
            or self.days_until_due is not None
            or self.days_overdue > 0
        )

    def days_until(self, as_of: Union[date, datetime]) -> int:
        """Days from ``as_of`` until the bill is due (negative when overdue)."""
        if self.due_date is not None:
            return (self.due_date - as_date(as_of)).days
        if self.days_until_due is not None:
            return self.days_until_due
        if self.days_overdue > 0:
            return -self.days_overdue
        return DEFAULT_DAYS_UNTIL_DUE


# =============================================================================
# PAYMENT PLAN MODELS
# =============================================================================

class PaymentRecommendation(BaseModel):
    """Amount to pay toward one bill this month, and why."""

    model_config = {"frozen": True}

    bill_id: str
    bill_name: str
    recommended_payment: Decimal
    priority_reason: str
    budget_impact: SafetyLevel
    is_affordable: bool = True
    is_partial: bool = False


class IntegratedPaymentPlan(BaseModel):
    """Payment plan that respects both bill priority and budget safety."""

    model_config = {"frozen": True}

    total_monthly_payment: Decimal
    available_budget: Decimal
    total_minimum_payments: Decimal
    safety_level: SafetyLevel
    recommendations: list[PaymentRecommendation] = Field(default_factory=list)
    unaffordable_bills: list[Bill] = Field(default_factory=list)
    emergency_actions: list[str] = Field(default_factory=list)
    is_viable: bool

    @property
    def remaining_budget(self) -> Decimal:
        """Budget left after every recommended payment."""
        return self.available_budget - self.total_monthly_payment


__all__ = [
    "DEFAULT_MINIMUM_PAYMENT",
    "DEFAULT_DAYS_UNTIL_DUE",
    "BillType",
    "PriorityCategory",
    "PriorityLevel",
    "BillStatus",
    "as_date",
    "PriorityBreakdown",
    "Bill",
    "PaymentRecommendation",
    "IntegratedPaymentPlan",
]
