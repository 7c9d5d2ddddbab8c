"""Budget protection data models.

This module provides the income, essential-expense and budget result
structures used by the budget calculator and the payment plan validator:
- Income sources and their payment frequencies
- Essential expense categories with seasonal variations
- The BudgetCalculation result with its 12-month breakdown
- Payment validation results and safety levels
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..exceptions import InvalidInputError
from .audit import AuditEntry


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Frequency(str, Enum):
    """How often an income or expense amount recurs."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"
    IRREGULAR = "irregular"  # Treated as already monthly


class Flexibility(str, Enum):
    """Whether an essential expense amount moves month to month."""
    FIXED = "fixed"
    VARIABLE = "variable"


class SafetyLevel(str, Enum):
    """How much slack a budget keeps after a payment, worst first."""
    CRITICAL = "critical"
    DANGEROUS = "dangerous"
    TIGHT = "tight"
    MODERATE = "moderate"
    COMFORTABLE = "comfortable"


# =============================================================================
# FREQUENCY CONVERSION
# =============================================================================

WEEKS_IN_YEAR = Decimal("52")
BIWEEKLY_PERIODS_IN_YEAR = Decimal("26")
MONTHS_IN_YEAR = Decimal("12")
QUARTERS_PER_MONTH = Decimal("3")


def to_monthly(amount: Decimal, frequency: Frequency) -> Decimal:
    """Convert an amount paid at the given frequency to its exact monthly equivalent."""
    if frequency == Frequency.WEEKLY:
        return amount * WEEKS_IN_YEAR / MONTHS_IN_YEAR
    if frequency == Frequency.BIWEEKLY:
        return amount * BIWEEKLY_PERIODS_IN_YEAR / MONTHS_IN_YEAR
    if frequency == Frequency.QUARTERLY:
        return amount / QUARTERS_PER_MONTH
    if frequency == Frequency.ANNUALLY:
        return amount / MONTHS_IN_YEAR
    # MONTHLY and IRREGULAR
    return amount


# =============================================================================
# INCOME MODELS
# =============================================================================

class IncomeSource(BaseModel):
    """A source of household income."""

    model_config = {"frozen": True}

    id: str
    name: str
    amount: Decimal = Field(ge=0)
    frequency: Frequency = Frequency.MONTHLY
    stability: Decimal = Field(
        default=Decimal("1.0"),
        ge=0,
        le=1,
        description="Likelihood the income arrives as stated (1.0 = fully reliable)",
    )
    is_active: bool = True


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class SeasonalVariation(BaseModel):
    """A recurring seasonal change to an expense (e.g. winter heating)."""

    model_config = {"frozen": True}

    affected_months: frozenset[int]
    adjustment_factor: Decimal = Field(ge=0)
    reason: Optional[str] = None

    @field_validator("affected_months")
    @classmethod
    def validate_months(cls, v: frozenset[int]) -> frozenset[int]:
        """Months must be calendar months 1..12."""
        invalid = sorted(m for m in v if m < 1 or m > 12)
        if invalid:
            raise ValueError(f"Months must be between 1 and 12, got {invalid}")
        return v


class ExpenseCategory(BaseModel):
    """An essential expense category such as housing, food or utilities."""

    model_config = {"frozen": True}

    key: str
    minimum_amount: Decimal = Field(ge=0)
    actual_amount: Optional[Decimal] = Field(default=None, ge=0)
    frequency: Frequency = Frequency.MONTHLY
    flexibility: Flexibility = Flexibility.FIXED
    seasonal_variations: list[SeasonalVariation] = Field(default_factory=list)

    @property
    def effective_amount(self) -> Decimal:
        """Actual spending when known, otherwise the survival minimum."""
        if self.actual_amount is not None:
            return self.actual_amount
        return self.minimum_amount

    @property
    def monthly_amount(self) -> Decimal:
        """Effective amount converted to a monthly figure."""
        return to_monthly(self.effective_amount, self.frequency)


class SpecialCircumstances(BaseModel):
    """Household circumstances that enlarge the emergency cushion."""

    model_config = {"frozen": True}

    dependents: int = Field(default=0, ge=0)


class EssentialExpenses(BaseModel):
    """All essential expense categories of a household, keyed by category key."""

    model_config = {"frozen": True}

    categories: dict[str, ExpenseCategory] = Field(default_factory=dict)
    special_circumstances: SpecialCircumstances = Field(default_factory=SpecialCircumstances)

    @model_validator(mode="after")
    def validate_keys(self) -> "EssentialExpenses":
        """Each mapping key must match its category's own key."""
        for key, category in self.categories.items():
            if key != category.key:
                raise ValueError(
                    f"Category stored under '{key}' declares key '{category.key}'"
                )
        return self

    @classmethod
    def from_categories(
        cls,
        categories: list[ExpenseCategory],
        dependents: int = 0,
    ) -> "EssentialExpenses":
        """Build from a list, rejecting duplicate keys."""
        mapping: dict[str, ExpenseCategory] = {}
        for category in categories:
            if category.key in mapping:
                raise InvalidInputError(
                    f"Duplicate expense category key: {category.key}",
                    field="categories",
                    value=category.key,
                    constraint="Category keys must be unique",
                )
            mapping[category.key] = category
        return cls(
            categories=mapping,
            special_circumstances=SpecialCircumstances(dependents=dependents),
        )


# =============================================================================
# BUDGET CALCULATION RESULTS
# =============================================================================

class PaycheckProtection(BaseModel):
    """Amount to set aside from one income source's paycheck."""

    model_config = {"frozen": True}

    source_id: str
    source_name: str
    frequency: Frequency
    amount: Decimal


class ProtectedAmounts(BaseModel):
    """Protected amount expressed per pay period."""

    model_config = {"frozen": True}

    weekly: Decimal
    biweekly: Decimal
    monthly: Decimal
    per_paycheck: list[PaycheckProtection] = Field(default_factory=list)


class MonthBreakdown(BaseModel):
    """Projected essential expenses for one calendar month."""

    model_config = {"frozen": True}

    month: int = Field(ge=1, le=12)
    total: Decimal
    categories: dict[str, Decimal] = Field(default_factory=dict)


class BudgetCalculation(BaseModel):
    """Complete budget protection result for one snapshot.

    ``protected_amount`` is always exactly ``total_monthly_expenses +
    emergency_cushion`` and ``available_for_debt`` is never negative.
    """

    model_config = {"frozen": True}

    total_monthly_income: Decimal
    total_monthly_expenses: Decimal
    emergency_cushion: Decimal
    protected_amount: Decimal
    available_for_debt: Decimal = Field(ge=0)
    protected_amounts: ProtectedAmounts
    monthly_breakdown: list[MonthBreakdown]
    income_stability: Decimal
    critical_months: list[int] = Field(default_factory=list)
    calculated_at: datetime
    audit_log: list[AuditEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_invariants(self) -> "BudgetCalculation":
        """Check the protected amount identity and the month layout."""
        if self.protected_amount != self.total_monthly_expenses + self.emergency_cushion:
            raise ValueError(
                "protected_amount must equal total_monthly_expenses + emergency_cushion"
            )
        months = [entry.month for entry in self.monthly_breakdown]
        if months != list(range(1, 13)):
            raise ValueError("monthly_breakdown must hold months 1 through 12 in order")
        return self

    @property
    def essential_needs_ratio(self) -> Decimal:
        """Protected amount as a share of income (0 when there is no income)."""
        if self.total_monthly_income <= 0:
            return Decimal("0")
        return self.protected_amount / self.total_monthly_income

    @property
    def available_ratio(self) -> Decimal:
        """Money available for debt as a share of income (0 when there is no income)."""
        if self.total_monthly_income <= 0:
            return Decimal("0")
        return self.available_for_debt / self.total_monthly_income

    @property
    def monthly_shortfall(self) -> Decimal:
        """How far the protected amount exceeds income (0 when it does not)."""
        return max(Decimal("0"), self.protected_amount - self.total_monthly_income)


class PaymentValidationDetails(BaseModel):
    """Numbers behind a payment validation verdict."""

    model_config = {"frozen": True}

    proposed_monthly_payment: Decimal
    available_for_debt: Decimal
    emergency_cushion_required: Decimal
    minimum_buffer_required: Decimal


class PaymentValidationResult(BaseModel):
    """Safety verdict for a proposed debt payment."""

    model_config = {"frozen": True}

    is_affordable: bool
    has_emergency_buffer: bool
    safety_level: SafetyLevel
    max_safe_payment: Decimal
    remaining_after_payment: Decimal
    warnings: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    details: PaymentValidationDetails


__all__ = [
    "Frequency",
    "Flexibility",
    "SafetyLevel",
    "to_monthly",
    "IncomeSource",
    "SeasonalVariation",
    "ExpenseCategory",
    "SpecialCircumstances",
    "EssentialExpenses",
    "PaycheckProtection",
    "ProtectedAmounts",
    "MonthBreakdown",
    "BudgetCalculation",
    "PaymentValidationDetails",
    "PaymentValidationResult",
]
