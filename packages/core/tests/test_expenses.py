"""Tests for expense aggregation and the emergency cushion."""

from decimal import Decimal

import pytest

from dropdebt_core.config import CushionSettings
from dropdebt_core.cushion import EmergencyCushionEstimator
from dropdebt_core.expenses import ExpenseAggregator, format_months
from dropdebt_core.models import (
    EssentialExpenses,
    ExpenseCategory,
    Flexibility,
    Frequency,
    SeasonalVariation,
)


@pytest.fixture
def aggregator() -> ExpenseAggregator:
    """Create an expense aggregator with default threshold."""
    return ExpenseAggregator()


@pytest.fixture
def seasonal_expenses() -> EssentialExpenses:
    """Rent plus heating that spikes in winter."""
    return EssentialExpenses.from_categories([
        ExpenseCategory(key="rent", minimum_amount=Decimal("1000")),
        ExpenseCategory(
            key="heating",
            minimum_amount=Decimal("100"),
            flexibility=Flexibility.VARIABLE,
            seasonal_variations=[
                SeasonalVariation(
                    affected_months={1, 2},
                    adjustment_factor=Decimal("1.5"),
                    reason="Winter heating",
                ),
                SeasonalVariation(
                    affected_months={1},
                    adjustment_factor=Decimal("1.2"),
                    reason="January cold snap",
                ),
            ],
        ),
    ])


class TestExpenseTotals:
    """Tests for monthly totals."""

    def test_total_uses_monthly_equivalents(self, aggregator):
        """Weekly food and monthly rent are summed as monthly amounts."""
        expenses = EssentialExpenses.from_categories([
            ExpenseCategory(key="rent", minimum_amount=Decimal("900")),
            ExpenseCategory(
                key="food",
                minimum_amount=Decimal("90"),
                frequency=Frequency.WEEKLY,
            ),
        ])
        assert aggregator.total_monthly_expenses(expenses) == Decimal("1290")

    def test_empty_expenses(self, aggregator):
        """No categories means no expenses."""
        assert aggregator.total_monthly_expenses(EssentialExpenses()) == Decimal("0")


class TestMonthlyBreakdown:
    """Tests for the 12-month seasonal projection."""

    def test_twelve_months_in_order(self, aggregator, seasonal_expenses):
        """The breakdown always covers January through December."""
        breakdown = aggregator.monthly_breakdown(seasonal_expenses)
        assert [entry.month for entry in breakdown] == list(range(1, 13))

    def test_variations_stack_additively(self, aggregator, seasonal_expenses):
        """Two variations on January both add to the flat total."""
        breakdown = aggregator.monthly_breakdown(seasonal_expenses)

        # January: 1100 + 100 * 0.5 + 100 * 0.2
        assert breakdown[0].total == Decimal("1170.0")
        assert breakdown[1].total == Decimal("1150.0")
        assert breakdown[2].total == Decimal("1100")

    def test_categories_sum_to_total(self, aggregator, seasonal_expenses):
        """Per-category amounts add up to each month's total."""
        for entry in aggregator.monthly_breakdown(seasonal_expenses):
            assert sum(entry.categories.values()) == entry.total

    def test_category_amount_for_month(self, aggregator, seasonal_expenses):
        """Heating in January carries both adjustments."""
        heating = seasonal_expenses.categories["heating"]
        assert aggregator.category_amount_for_month(heating, 1) == Decimal("170.0")
        assert aggregator.category_amount_for_month(heating, 7) == Decimal("100")


class TestSeasonality:
    """Tests for significant seasonal variation."""

    @pytest.mark.parametrize(
        "factor,expected",
        [("1.2", False), ("0.8", False), ("1.25", True), ("0.7", True)],
    )
    def test_threshold_is_exclusive(self, aggregator, factor, expected):
        """Only variations beyond 20% count as significant."""
        category = ExpenseCategory(
            key="utilities",
            minimum_amount=Decimal("100"),
            seasonal_variations=[
                SeasonalVariation(affected_months={7}, adjustment_factor=Decimal(factor)),
            ],
        )
        assert aggregator.is_significantly_seasonal(category) is expected

    def test_format_months(self):
        """Month numbers render as sorted abbreviations."""
        assert format_months([2, 1, 12]) == "Jan, Feb, Dec"


class TestEmergencyCushion:
    """Tests for EmergencyCushionEstimator."""

    def test_floor_applies_at_low_income(self):
        """Low incomes get the $100 floor."""
        estimator = EmergencyCushionEstimator()
        assert estimator.estimate(EssentialExpenses(), Decimal("1000")) == Decimal("100")

    def test_income_rate(self):
        """Five percent of income when above the floor."""
        estimator = EmergencyCushionEstimator()
        assert estimator.estimate(EssentialExpenses(), Decimal("4000")) == Decimal("200.00")

    def test_dependents_and_variable_expenses(self):
        """Dependents add $50 each and variable categories add 10%."""
        expenses = EssentialExpenses.from_categories(
            [
                ExpenseCategory(
                    key="food",
                    minimum_amount=Decimal("300"),
                    flexibility=Flexibility.VARIABLE,
                ),
            ],
            dependents=2,
        )
        estimator = EmergencyCushionEstimator()

        # 200 + 2 * 50 + 300 * 0.10
        assert estimator.estimate(expenses, Decimal("4000")) == Decimal("330")

    def test_seasonal_multiplier(self, seasonal_expenses):
        """Significant seasonality multiplies the cushion by 1.2."""
        estimator = EmergencyCushionEstimator()

        # (max(100, 2000 * 0.05) + 100 * 0.10) * 1.2
        assert estimator.estimate(seasonal_expenses, Decimal("2000")) == Decimal("132")

    def test_cap_regardless_of_income(self):
        """The cushion never exceeds $500 by default."""
        estimator = EmergencyCushionEstimator()
        for income in ("10000", "20000", "1000000"):
            assert estimator.estimate(EssentialExpenses(), Decimal(income)) == Decimal("500")

    def test_cap_is_configurable(self):
        """A higher configured cap lets the cushion grow."""
        estimator = EmergencyCushionEstimator(CushionSettings(cap=Decimal("750")))
        assert estimator.estimate(EssentialExpenses(), Decimal("20000")) == Decimal("750")
