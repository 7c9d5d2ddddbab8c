"""Payment plan safety validation.

Checks a proposed debt payment against a BudgetCalculation and classifies how
much slack it leaves. A payment the household cannot afford is a normal
result (``is_affordable=False``, safety CRITICAL), not an error.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

import structlog

from .exceptions import InvalidInputError
from .expenses import format_months
from .income import ensure_frequency
from .models import (
    BudgetCalculation,
    Frequency,
    PaymentValidationDetails,
    PaymentValidationResult,
    SafetyLevel,
    to_monthly,
)

logger = structlog.get_logger()

# Share of the cushion that must remain for has_emergency_buffer
MINIMUM_BUFFER_RATE = Decimal("0.5")
# Share of available funds considered a safe payment
MAX_SAFE_PAYMENT_RATE = Decimal("0.8")
# Share of available funds suggested when a payment is dangerous
SAFER_PAYMENT_RATE = Decimal("0.7")
# Below this much available, always suggest an expense review
EXPENSE_REVIEW_THRESHOLD = Decimal("200")

DANGEROUS_CUSHION_RATE = Decimal("0.25")
TIGHT_CUSHION_RATE = Decimal("0.5")


def classify_safety(remaining: Decimal, emergency_cushion: Decimal) -> SafetyLevel:
    """Safety level of the money left after a payment, first match wins."""
    if remaining < 0:
        return SafetyLevel.CRITICAL
    if remaining < emergency_cushion * DANGEROUS_CUSHION_RATE:
        return SafetyLevel.DANGEROUS
    if remaining < emergency_cushion * TIGHT_CUSHION_RATE:
        return SafetyLevel.TIGHT
    if remaining < emergency_cushion:
        return SafetyLevel.MODERATE
    return SafetyLevel.COMFORTABLE


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


class PaymentPlanValidator:
    """Classify a proposed payment's safety and explain the verdict."""

    def validate(
        self,
        budget: BudgetCalculation,
        proposed_payment: Union[Decimal, int, str],
        frequency: Frequency = Frequency.MONTHLY,
    ) -> PaymentValidationResult:
        """
        Validate a proposed payment against the budget.

        Args:
            budget: Result of BudgetCalculator.calculate
            proposed_payment: Payment amount per period
            frequency: How often the payment is made

        Returns:
            PaymentValidationResult with safety level, warnings and suggestions

        Raises:
            InvalidInputError: If the payment is not a finite non-negative
                number or the frequency is unknown
        """
        frequency = ensure_frequency(frequency)
        try:
            payment = Decimal(str(proposed_payment))
        except (InvalidOperation, ValueError) as e:
            raise InvalidInputError(
                "Proposed payment must be a number",
                field="proposed_payment",
                value=str(proposed_payment),
                constraint="Must be a number",
            ) from e
        if not payment.is_finite():
            raise InvalidInputError(
                "Proposed payment must be a finite number",
                field="proposed_payment",
                value=str(proposed_payment),
                constraint="Must be finite",
            )
        if payment < 0:
            raise InvalidInputError(
                "Proposed payment cannot be negative",
                field="proposed_payment",
                value=str(payment),
                constraint="Must be >= 0",
            )

        monthly_payment = to_monthly(payment, frequency)
        available = budget.available_for_debt
        cushion = budget.emergency_cushion

        remaining = available - monthly_payment
        minimum_buffer = cushion * MINIMUM_BUFFER_RATE
        max_safe_payment = max(Decimal("0"), available * MAX_SAFE_PAYMENT_RATE)
        safety_level = classify_safety(remaining, cushion)

        result = PaymentValidationResult(
            is_affordable=remaining >= 0,
            has_emergency_buffer=remaining >= minimum_buffer,
            safety_level=safety_level,
            max_safe_payment=max_safe_payment,
            remaining_after_payment=max(Decimal("0"), remaining),
            warnings=self._warnings(monthly_payment, remaining, budget, safety_level),
            suggestions=self._suggestions(max_safe_payment, budget, safety_level),
            details=PaymentValidationDetails(
                proposed_monthly_payment=monthly_payment,
                available_for_debt=available,
                emergency_cushion_required=cushion,
                minimum_buffer_required=minimum_buffer,
            ),
        )

        logger.info(
            "payment_validated",
            proposed_monthly_payment=str(monthly_payment),
            available_for_debt=str(available),
            safety_level=safety_level.value,
            is_affordable=result.is_affordable,
        )
        return result

    def _warnings(
        self,
        monthly_payment: Decimal,
        remaining: Decimal,
        budget: BudgetCalculation,
        safety_level: SafetyLevel,
    ) -> list[str]:
        warnings: list[str] = []

        if safety_level == SafetyLevel.CRITICAL:
            warnings.append(
                f"CRITICAL: This payment plan would leave you {_money(abs(remaining))} "
                "short of covering essential needs. This plan is not possible with "
                "your current budget."
            )
            warnings.append(
                "You need to either reduce the payment amount or find additional "
                "income before proceeding."
            )
        elif safety_level == SafetyLevel.DANGEROUS:
            reduction = monthly_payment - budget.available_for_debt * SAFER_PAYMENT_RATE
            warnings.append(
                f"DANGEROUS: This payment would leave only {_money(remaining)} for "
                "unexpected expenses. One car repair or medical bill could create a "
                "financial emergency."
            )
            warnings.append(
                f"Consider reducing your payment by {_money(reduction)} to maintain "
                "a safety buffer."
            )
        elif safety_level == SafetyLevel.TIGHT:
            warnings.append(
                f"CAUTION: This payment is manageable but tight, leaving "
                f"{_money(remaining)} buffer. Budget carefully and avoid unexpected "
                "expenses."
            )

        if budget.critical_months:
            warnings.append(
                f"Additional caution needed in {format_months(budget.critical_months)} "
                "due to seasonal expense increases."
            )

        return warnings

    def _suggestions(
        self,
        max_safe_payment: Decimal,
        budget: BudgetCalculation,
        safety_level: SafetyLevel,
    ) -> list[str]:
        suggestions: list[str] = []

        if safety_level == SafetyLevel.CRITICAL:
            suggestions.append(
                f"Try a payment of {_money(max_safe_payment)} instead to maintain "
                "essential needs coverage."
            )
            suggestions.append(
                "Consider contacting creditors to negotiate lower minimum payments "
                "or payment plans."
            )
            suggestions.append(
                "Look into local assistance programs for utilities, food, or housing "
                "if available."
            )
        elif safety_level == SafetyLevel.DANGEROUS:
            safer_payment = budget.available_for_debt * SAFER_PAYMENT_RATE
            suggestions.append(
                f"A payment of {_money(safer_payment)} would be safer while still "
                "making meaningful progress."
            )
            suggestions.append(
                "Build a small emergency fund before increasing payment amounts."
            )
        elif safety_level == SafetyLevel.TIGHT:
            suggestions.append(
                "This payment is workable if you budget carefully and avoid "
                "discretionary spending."
            )
            suggestions.append(
                "Consider starting with this amount and increasing gradually as your "
                "situation improves."
            )

        if budget.available_for_debt < EXPENSE_REVIEW_THRESHOLD:
            suggestions.append(
                "Review your essential expenses to see if any can be reduced to free "
                "up more funds for debt payments."
            )

        return suggestions


__all__ = ["PaymentPlanValidator", "classify_safety"]
