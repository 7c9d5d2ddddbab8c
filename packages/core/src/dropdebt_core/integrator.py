"""Budget-constrained payment allocation.

BudgetBillIntegrator spends the money available for debt across scored bills,
most urgent first, and reports what cannot be funded:

1. Essential bills scoring at or above the critical threshold get their
   minimum payment, or are flagged for immediate creditor contact.
2. Every bill scoring between the high and critical thresholds gets its
   minimum payment, a partial payment of whatever is left, or a deferment
   suggestion.
3. Optionally, bills neither pass considered get their minimum from any
   leftover budget.

The allocator never spends more than the available budget.
"""

from decimal import Decimal
from typing import Optional

import structlog

from .config import AllocationSettings, EngineSettings
from .exceptions import InvalidInputError
from .models import (
    Bill,
    BillStatus,
    BudgetCalculation,
    IntegratedPaymentPlan,
    PaymentRecommendation,
    SafetyLevel,
)
from .validator import classify_safety

logger = structlog.get_logger()

CRITICAL_REASON = "Critical essential service - must pay to avoid shutoff/eviction"
HIGH_REASON = "High priority - prevents credit damage or significant late fees"
PARTIAL_REASON = "Partial payment - all available budget allocated"
UNCOVERED_REASON = "Lower priority - funded from remaining budget"

CREDIT_COUNSELING_ACTION = "Contact non-profit credit counseling service for budget crisis assistance"
LOCAL_ASSISTANCE_ACTION = "Look into local emergency assistance programs for utilities and housing"
DEBT_RELIEF_ACTION = "Consider bankruptcy consultation - bills may be unsustainable"

# Total minimums above this multiple of the budget call for debt relief advice
DEBT_RELIEF_MULTIPLE = Decimal("2")
PLAN_DANGEROUS_CUSHION_RATE = Decimal("0.5")


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


class BudgetBillIntegrator:
    """Build payment plans that respect both bill priority and budget safety."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    @property
    def allocation(self) -> AllocationSettings:
        return self.settings.allocation

    def create_plan(self, bills: list[Bill], budget: BudgetCalculation) -> IntegratedPaymentPlan:
        """
        Allocate the budget available for debt across scored bills.

        Args:
            bills: Bills already processed by PriorityScorer
            budget: Result of BudgetCalculator.calculate

        Returns:
            IntegratedPaymentPlan; unfundable bills are reported in the plan

        Raises:
            InvalidInputError: If an active bill has no priority score
        """
        active = [bill for bill in bills if bill.status == BillStatus.ACTIVE]
        for bill in active:
            if bill.priority_score is None:
                raise InvalidInputError(
                    f"Bill {bill.id} has not been scored",
                    field="priority_score",
                    value=bill.id,
                    constraint="Score bills with PriorityScorer before allocating",
                )

        available = budget.available_for_debt
        cushion = budget.emergency_cushion
        critical_threshold = self.allocation.critical_threshold
        high_threshold = self.allocation.high_threshold

        remaining = available
        recommendations: list[PaymentRecommendation] = []
        unaffordable: list[Bill] = []
        actions: list[str] = []

        total_minimum = sum((bill.minimum_payment for bill in active), Decimal("0"))

        # Pass 1: essential bills at critical priority
        critical_bills = _by_score([
            bill for bill in active
            if bill.is_essential and bill.priority_score >= critical_threshold
        ])
        for bill in critical_bills:
            minimum = bill.minimum_payment
            if remaining >= minimum:
                recommendations.append(self._recommend(bill, minimum, CRITICAL_REASON, remaining, cushion))
                remaining -= minimum
            else:
                unaffordable.append(bill)
                actions.append(
                    f"Contact {bill.name} immediately - cannot afford minimum payment "
                    f"of {_money(minimum)}"
                )

        # Pass 2: high priority bills, essential or not
        high_bills = _by_score([
            bill for bill in active
            if high_threshold <= bill.priority_score < critical_threshold
        ])
        for bill in high_bills:
            minimum = bill.minimum_payment
            if remaining >= minimum:
                recommendations.append(self._recommend(bill, minimum, HIGH_REASON, remaining, cushion))
                remaining -= minimum
            elif (
                remaining >= self.allocation.partial_payment_floor
                and bill.current_balance > self.allocation.partial_balance_floor
            ):
                recommendations.append(PaymentRecommendation(
                    bill_id=bill.id,
                    bill_name=bill.name,
                    recommended_payment=remaining,
                    priority_reason=PARTIAL_REASON,
                    budget_impact=SafetyLevel.TIGHT,
                    is_partial=True,
                ))
                remaining = Decimal("0")
            else:
                unaffordable.append(bill)
                actions.append(f"Cannot afford {bill.name} - consider payment plan or deferment")

        # Pass 3 (opt-in): bills neither pass considered
        if self.allocation.allocate_uncovered_bills:
            handled = {r.bill_id for r in recommendations} | {b.id for b in unaffordable}
            uncovered = _by_score([bill for bill in active if bill.id not in handled])
            for bill in uncovered:
                minimum = bill.minimum_payment
                if 0 < minimum <= remaining:
                    recommendations.append(self._recommend(bill, minimum, UNCOVERED_REASON, remaining, cushion))
                    remaining -= minimum

        if unaffordable:
            actions.append(CREDIT_COUNSELING_ACTION)
            actions.append(LOCAL_ASSISTANCE_ACTION)
            if total_minimum > available * DEBT_RELIEF_MULTIPLE:
                actions.append(DEBT_RELIEF_ACTION)

        total_payment = sum((r.recommended_payment for r in recommendations), Decimal("0"))
        is_viable = all(not bill.is_essential for bill in unaffordable)
        safety_level = self._plan_safety(total_payment, budget, bool(unaffordable))

        plan = IntegratedPaymentPlan(
            total_monthly_payment=total_payment,
            available_budget=available,
            total_minimum_payments=total_minimum,
            safety_level=safety_level,
            recommendations=recommendations,
            unaffordable_bills=unaffordable,
            emergency_actions=actions,
            is_viable=is_viable,
        )

        logger.info(
            "payment_plan_created",
            bills=len(active),
            recommendations=len(recommendations),
            unaffordable=len(unaffordable),
            total_monthly_payment=str(total_payment),
            available_budget=str(available),
            safety_level=safety_level.value,
            is_viable=is_viable,
        )
        if not is_viable:
            logger.warning(
                "essential_bills_unfunded",
                bill_ids=[b.id for b in unaffordable if b.is_essential],
            )
        return plan

    def _recommend(
        self,
        bill: Bill,
        payment: Decimal,
        reason: str,
        remaining: Decimal,
        cushion: Decimal,
    ) -> PaymentRecommendation:
        return PaymentRecommendation(
            bill_id=bill.id,
            bill_name=bill.name,
            recommended_payment=payment,
            priority_reason=reason,
            budget_impact=classify_safety(remaining - payment, cushion),
        )

    def _plan_safety(
        self,
        total_payment: Decimal,
        budget: BudgetCalculation,
        has_unaffordable: bool,
    ) -> SafetyLevel:
        if has_unaffordable:
            return SafetyLevel.CRITICAL

        remaining = budget.available_for_debt - total_payment
        if remaining < 0:
            return SafetyLevel.CRITICAL
        if remaining < budget.emergency_cushion * PLAN_DANGEROUS_CUSHION_RATE:
            return SafetyLevel.DANGEROUS
        return SafetyLevel.MODERATE

    def crisis_recommendations(self, total_required: Decimal, available: Decimal) -> list[str]:
        """Advice for when required payments exceed the available budget."""
        shortfall = total_required - available

        if shortfall > available:
            return [
                "EMERGENCY: Your bills exceed your available budget by more than 100%",
                "Contact 211 (dial 2-1-1) for immediate crisis assistance and resource referrals",
                "Apply for emergency utility assistance and food assistance programs immediately",
                "Consider bankruptcy consultation - this level of debt may be legally unsustainable",
            ]
        return [
            f"Your bills exceed budget by {_money(shortfall)} - negotiation required",
            "Contact creditors to negotiate payment plans or temporary forbearance",
            "Prioritize essential services (utilities, housing) to prevent shutoffs",
            "Look into local emergency assistance for gap funding",
        ]


def _by_score(bills: list[Bill]) -> list[Bill]:
    """Highest score first, ties in input order."""
    return sorted(bills, key=lambda b: b.priority_score, reverse=True)


__all__ = ["BudgetBillIntegrator"]
