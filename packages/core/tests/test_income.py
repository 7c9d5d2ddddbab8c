"""Tests for income normalization."""

from decimal import Decimal

import pytest

from dropdebt_core.exceptions import InvalidInputError
from dropdebt_core.income import IncomeNormalizer, ensure_frequency
from dropdebt_core.models import Frequency, IncomeSource


@pytest.fixture
def normalizer() -> IncomeNormalizer:
    """Create an income normalizer."""
    return IncomeNormalizer()


@pytest.fixture
def household_sources() -> list[IncomeSource]:
    """A steady job plus less reliable gig work."""
    return [
        IncomeSource(
            id="job",
            name="Warehouse job",
            amount=Decimal("3000"),
            frequency=Frequency.MONTHLY,
        ),
        IncomeSource(
            id="gig",
            name="Delivery app",
            amount=Decimal("1000"),
            frequency=Frequency.MONTHLY,
            stability=Decimal("0.6"),
        ),
    ]


class TestMonthlyAmounts:
    """Tests for per-source monthly amounts."""

    def test_stability_discounts_income(self, normalizer: IncomeNormalizer):
        """Adjusted income is the monthly amount times stability."""
        source = IncomeSource(
            id="gig",
            name="Gig work",
            amount=Decimal("1000"),
            stability=Decimal("0.8"),
        )
        assert normalizer.monthly_amount(source) == Decimal("1000")
        assert normalizer.adjusted_monthly_amount(source) == Decimal("800.0")

    def test_inactive_source_contributes_nothing(self, normalizer: IncomeNormalizer):
        """Inactive sources are excluded."""
        source = IncomeSource(
            id="old",
            name="Former job",
            amount=Decimal("2000"),
            is_active=False,
        )
        assert normalizer.adjusted_monthly_amount(source) == Decimal("0")

    def test_weekly_source(self, normalizer: IncomeNormalizer):
        """Weekly pay uses the exact 52/12 conversion."""
        source = IncomeSource(
            id="w",
            name="Weekly pay",
            amount=Decimal("600"),
            frequency=Frequency.WEEKLY,
        )
        assert normalizer.monthly_amount(source) == Decimal("2600")


class TestTotals:
    """Tests for total income and stability."""

    def test_total_monthly_income(self, normalizer, household_sources):
        """Total income sums stability-adjusted amounts."""
        assert normalizer.total_monthly_income(household_sources) == Decimal("3600.0")

    def test_income_stability_weighted_average(self, normalizer, household_sources):
        """Stability is weighted by unadjusted monthly income."""
        # (3000 * 1.0 + 1000 * 0.6) / 4000 = 0.9
        assert normalizer.income_stability(household_sources) == Decimal("0.90")

    def test_income_stability_without_active_income(self, normalizer):
        """No active income gives a stability of 0."""
        sources = [
            IncomeSource(id="a", name="Old job", amount=Decimal("1000"), is_active=False),
        ]
        assert normalizer.income_stability(sources) == Decimal("0")

    def test_inactive_sources_ignored_in_stability(self, normalizer, household_sources):
        """Inactive sources do not dilute stability."""
        sources = household_sources + [
            IncomeSource(
                id="old",
                name="Old job",
                amount=Decimal("5000"),
                stability=Decimal("0.1"),
                is_active=False,
            ),
        ]
        assert normalizer.income_stability(sources) == Decimal("0.90")


class TestValidation:
    """Tests for input validation."""

    def test_empty_sources_rejected(self, normalizer):
        """An empty income list is invalid input."""
        with pytest.raises(InvalidInputError) as exc_info:
            normalizer.validate_sources([])
        assert exc_info.value.field == "income_sources"

    def test_duplicate_ids_rejected(self, normalizer, household_sources):
        """Source ids must be unique."""
        with pytest.raises(InvalidInputError):
            normalizer.validate_sources(household_sources + [household_sources[0]])

    def test_ensure_frequency_accepts_values(self):
        """Known frequency strings are coerced."""
        assert ensure_frequency("biweekly") == Frequency.BIWEEKLY
        assert ensure_frequency(Frequency.WEEKLY) == Frequency.WEEKLY

    def test_ensure_frequency_rejects_unknown(self):
        """Unknown frequencies raise InvalidInputError."""
        with pytest.raises(InvalidInputError) as exc_info:
            ensure_frequency("fortnightly")
        assert exc_info.value.value == "fortnightly"
