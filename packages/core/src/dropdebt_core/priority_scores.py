"""Bill priority scoring tables.

A bill's priority score is additive:

    score = base score for its type
          + due date modifier
          + essential modifier
          + late fee modifier
          + interest modifier

The sum can exceed the nominal 0-99 range (housing due today and essential
is 95 + 12 + 10 = 117); clamping is applied by the scorer.
"""

from decimal import Decimal
from typing import NamedTuple

from .models import BillType, PriorityLevel


# =============================================================================
# BASE SCORES BY BILL TYPE
# =============================================================================

BILL_TYPE_BASE_SCORES = {
    BillType.HOUSING: 95,         # Rent, mortgage
    BillType.UTILITIES: 90,       # Essential services
    BillType.DEBT: 85,            # Interest and fees accrue
    BillType.INSURANCE: 80,
    BillType.TRANSPORTATION: 75,
    BillType.HEALTHCARE: 85,
    BillType.EDUCATION: 70,
    BillType.FOOD: 80,
    BillType.PERSONAL: 60,
    BillType.ENTERTAINMENT: 50,
    BillType.SAVINGS: 65,
    BillType.OTHER: 55,
}


def get_base_score(bill_type: BillType) -> int:
    """Base priority score for a bill type."""
    return BILL_TYPE_BASE_SCORES[bill_type]


# =============================================================================
# PRIORITY RANGES
# =============================================================================

class PriorityRange(NamedTuple):
    """Lowest score that earns a priority level. Ranges are open-ended upward."""
    level: PriorityLevel
    minimum: int


# Highest first; a score takes the first range whose minimum it meets
PRIORITY_RANGES = (
    PriorityRange(PriorityLevel.CRITICAL, 90),
    PriorityRange(PriorityLevel.HIGH, 80),
    PriorityRange(PriorityLevel.MEDIUM, 70),
    PriorityRange(PriorityLevel.LOW, 60),
    PriorityRange(PriorityLevel.MINIMAL, 0),
)


def get_priority_level(score: int) -> PriorityLevel:
    """Map a score to its level. Unclamped scores above 99 are still CRITICAL."""
    for priority_range in PRIORITY_RANGES:
        if score >= priority_range.minimum:
            return priority_range.level
    return PriorityLevel.MINIMAL


def get_priority_label(score: int) -> str:
    """Display label for a score, e.g. "Critical"."""
    return get_priority_level(score).label


# =============================================================================
# MODIFIERS
# =============================================================================

DUE_DATE_MODIFIERS = {
    "overdue": 15,
    "today": 12,
    "tomorrow": 10,
    "this_week": 8,     # Within 7 days
    "next_week": 5,     # Within 14 days
    "this_month": 3,    # Within 30 days
    "next_month": 1,    # Within 60 days
    "future": 0,
}

ESSENTIAL_MODIFIER = 10

LATE_FEE_MODIFIERS = {
    "high": 8,      # Over $50
    "medium": 5,    # $20 - $50
    "low": 2,       # $5 - $20
    "none": 0,
}

INTEREST_MODIFIERS = {
    "high": 6,      # Over 20%
    "medium": 4,    # 10% - 20%
    "low": 2,       # 5% - 10%
    "none": 0,
}


def get_due_date_modifier(days_until_due: int) -> int:
    """Urgency boost by days until due (negative means overdue)."""
    if days_until_due < 0:
        return DUE_DATE_MODIFIERS["overdue"]
    if days_until_due == 0:
        return DUE_DATE_MODIFIERS["today"]
    if days_until_due == 1:
        return DUE_DATE_MODIFIERS["tomorrow"]
    if days_until_due <= 7:
        return DUE_DATE_MODIFIERS["this_week"]
    if days_until_due <= 14:
        return DUE_DATE_MODIFIERS["next_week"]
    if days_until_due <= 30:
        return DUE_DATE_MODIFIERS["this_month"]
    if days_until_due <= 60:
        return DUE_DATE_MODIFIERS["next_month"]
    return DUE_DATE_MODIFIERS["future"]


def get_essential_modifier(is_essential: bool) -> int:
    return ESSENTIAL_MODIFIER if is_essential else 0


def get_late_fee_modifier(late_fee: Decimal) -> int:
    """Boost by late fee amount in dollars."""
    if late_fee > 50:
        return LATE_FEE_MODIFIERS["high"]
    if late_fee >= 20:
        return LATE_FEE_MODIFIERS["medium"]
    if late_fee >= 5:
        return LATE_FEE_MODIFIERS["low"]
    return LATE_FEE_MODIFIERS["none"]


def get_interest_modifier(interest_rate: Decimal) -> int:
    """Boost by annual interest rate in percent."""
    if interest_rate > 20:
        return INTEREST_MODIFIERS["high"]
    if interest_rate >= 10:
        return INTEREST_MODIFIERS["medium"]
    if interest_rate >= 5:
        return INTEREST_MODIFIERS["low"]
    return INTEREST_MODIFIERS["none"]


__all__ = [
    "BILL_TYPE_BASE_SCORES",
    "PRIORITY_RANGES",
    "PriorityRange",
    "DUE_DATE_MODIFIERS",
    "ESSENTIAL_MODIFIER",
    "LATE_FEE_MODIFIERS",
    "INTEREST_MODIFIERS",
    "get_base_score",
    "get_priority_level",
    "get_priority_label",
    "get_due_date_modifier",
    "get_essential_modifier",
    "get_late_fee_modifier",
    "get_interest_modifier",
]
