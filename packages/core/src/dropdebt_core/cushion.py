"""Emergency cushion estimation.

The cushion is money reserved above essential expenses before anything is
considered available for debt:

    cushion = max(floor, income_rate * income)
    cushion += dependents * per_dependent
    cushion += variable_expense_rate * monthly amount, per VARIABLE category
    cushion *= seasonal_multiplier, if any category is significantly seasonal
    cushion = min(cushion, cap)
"""

from decimal import Decimal
from typing import Optional

import structlog

from .config import CushionSettings
from .expenses import ExpenseAggregator
from .models import EssentialExpenses, Flexibility

logger = structlog.get_logger()


class EmergencyCushionEstimator:
    """Derive a safety buffer from income, dependents and expense variability."""

    def __init__(self, settings: Optional[CushionSettings] = None):
        self.settings = settings or CushionSettings()
        self.aggregator = ExpenseAggregator(
            seasonal_threshold=self.settings.seasonal_threshold,
        )

    def estimate(self, expenses: EssentialExpenses, monthly_income: Decimal) -> Decimal:
        """Emergency cushion for a household, never above the configured cap."""
        s = self.settings
        cushion = max(s.floor, monthly_income * s.income_rate)

        dependents = expenses.special_circumstances.dependents
        cushion += dependents * s.per_dependent

        for category in expenses.categories.values():
            if category.flexibility == Flexibility.VARIABLE:
                cushion += category.monthly_amount * s.variable_expense_rate

        seasonal = self.aggregator.has_significant_seasonal_variation(expenses)
        if seasonal:
            cushion *= s.seasonal_multiplier

        capped = min(cushion, s.cap)
        if capped < cushion:
            logger.debug("cushion_capped", uncapped=str(cushion), cap=str(s.cap))
        return capped


__all__ = ["EmergencyCushionEstimator"]
