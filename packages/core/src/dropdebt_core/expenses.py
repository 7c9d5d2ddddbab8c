"""Essential expense aggregation and the 12-month seasonal projection."""

from decimal import Decimal

from .models import EssentialExpenses, ExpenseCategory, MonthBreakdown

MONTHS = range(1, 13)

MONTH_ABBREVIATIONS = {
    1: "Jan", 2: "Feb", 3: "Mar", 4: "Apr", 5: "May", 6: "Jun",
    7: "Jul", 8: "Aug", 9: "Sep", 10: "Oct", 11: "Nov", 12: "Dec",
}

# |adjustment_factor - 1| above which a variation counts as significant
DEFAULT_SEASONAL_THRESHOLD = Decimal("0.2")


class ExpenseAggregator:
    """Sum essential expenses and project them across the calendar year."""

    def __init__(self, seasonal_threshold: Decimal = DEFAULT_SEASONAL_THRESHOLD):
        self.seasonal_threshold = seasonal_threshold

    def total_monthly_expenses(self, expenses: EssentialExpenses) -> Decimal:
        """Sum of every category's monthly amount."""
        return sum(
            (category.monthly_amount for category in expenses.categories.values()),
            Decimal("0"),
        )

    def category_amount_for_month(self, category: ExpenseCategory, month: int) -> Decimal:
        """Category amount in one month, with every matching variation stacked."""
        base = category.monthly_amount
        amount = base
        for variation in category.seasonal_variations:
            if month in variation.affected_months:
                amount += base * (variation.adjustment_factor - 1)
        return amount

    def monthly_breakdown(self, expenses: EssentialExpenses) -> list[MonthBreakdown]:
        """Projected expenses for months 1..12, in order.

        Each month starts at the flat monthly total and every seasonal
        variation covering it adds ``base * (factor - 1)``.
        """
        flat_total = self.total_monthly_expenses(expenses)
        breakdown = []
        for month in MONTHS:
            categories = {
                key: self.category_amount_for_month(category, month)
                for key, category in expenses.categories.items()
            }
            total = flat_total + sum(
                (categories[key] - category.monthly_amount
                 for key, category in expenses.categories.items()),
                Decimal("0"),
            )
            breakdown.append(MonthBreakdown(month=month, total=total, categories=categories))
        return breakdown

    def is_significantly_seasonal(self, category: ExpenseCategory) -> bool:
        """True if any variation moves the category by more than the threshold."""
        return any(
            abs(variation.adjustment_factor - 1) > self.seasonal_threshold
            for variation in category.seasonal_variations
        )

    def has_significant_seasonal_variation(self, expenses: EssentialExpenses) -> bool:
        return any(
            self.is_significantly_seasonal(category)
            for category in expenses.categories.values()
        )


def format_months(months: list[int]) -> str:
    """Render month numbers as "Jan, Feb"."""
    return ", ".join(MONTH_ABBREVIATIONS[m] for m in sorted(months))


__all__ = [
    "ExpenseAggregator",
    "MONTH_ABBREVIATIONS",
    "format_months",
]
