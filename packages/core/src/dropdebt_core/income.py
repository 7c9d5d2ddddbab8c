"""Income normalization.

Converts income sources paid at different frequencies into one canonical
monthly figure. Each active source's monthly equivalent is discounted by its
stability factor before summing; inactive sources are ignored everywhere.
"""

from decimal import Decimal
from typing import Iterable

import structlog

from .exceptions import InvalidInputError
from .models import Frequency, IncomeSource, to_monthly

logger = structlog.get_logger()

STABILITY_PLACES = Decimal("0.01")


def ensure_frequency(value: object, field: str = "frequency") -> Frequency:
    """Coerce a value to a Frequency, rejecting anything unknown."""
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(value)
    except ValueError as e:
        raise InvalidInputError(
            f"Unknown payment frequency: {value!r}",
            field=field,
            value=value,
            constraint=f"One of {[f.value for f in Frequency]}",
        ) from e


class IncomeNormalizer:
    """Normalize household income sources to monthly amounts."""

    def monthly_amount(self, source: IncomeSource) -> Decimal:
        """Unadjusted monthly equivalent of one source."""
        return to_monthly(source.amount, ensure_frequency(source.frequency))

    def adjusted_monthly_amount(self, source: IncomeSource) -> Decimal:
        """Monthly equivalent discounted by the source's stability (0 if inactive)."""
        if not source.is_active:
            return Decimal("0")
        return self.monthly_amount(source) * source.stability

    def validate_sources(self, sources: list[IncomeSource]) -> None:
        """Reject an empty list or duplicate source ids.

        Raises:
            InvalidInputError: If the list cannot be normalized.
        """
        if not sources:
            raise InvalidInputError(
                "At least one income source is required",
                field="income_sources",
                constraint="Must not be empty",
            )
        seen: set[str] = set()
        for source in sources:
            if source.id in seen:
                raise InvalidInputError(
                    f"Duplicate income source id: {source.id}",
                    field="income_sources",
                    value=source.id,
                    constraint="Source ids must be unique",
                )
            seen.add(source.id)

    def total_monthly_income(self, sources: Iterable[IncomeSource]) -> Decimal:
        """Stability-adjusted monthly income across active sources."""
        return sum(
            (self.adjusted_monthly_amount(source) for source in sources),
            Decimal("0"),
        )

    def income_stability(self, sources: Iterable[IncomeSource]) -> Decimal:
        """Income-weighted average stability of the active sources.

        Weights are the unadjusted monthly amounts. Returns 0 when no active
        source brings in any money.
        """
        active = [s for s in sources if s.is_active]
        total = sum((self.monthly_amount(s) for s in active), Decimal("0"))
        if total <= 0:
            return Decimal("0")

        weighted = sum(
            (s.stability * self.monthly_amount(s) for s in active),
            Decimal("0"),
        )
        stability = (weighted / total).quantize(STABILITY_PLACES)
        logger.debug("income_stability_assessed", sources=len(active), stability=str(stability))
        return stability


__all__ = ["IncomeNormalizer", "ensure_frequency"]
