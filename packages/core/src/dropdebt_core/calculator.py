"""Budget protection calculation.

BudgetCalculator combines income normalization, expense aggregation and the
emergency cushion into a BudgetCalculation: how much money must be protected
for survival needs, and how much is left for overdue debts.

Every step is recorded in the result's audit log so the numbers can be
explained to the household or a counselor.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

import structlog

from .config import EngineSettings
from .cushion import EmergencyCushionEstimator
from .exceptions import InvalidInputError
from .expenses import ExpenseAggregator
from .income import IncomeNormalizer, ensure_frequency
from .models import (
    AuditEntry,
    BudgetCalculation,
    EssentialExpenses,
    Frequency,
    IncomeSource,
    MonthBreakdown,
    PaycheckProtection,
    ProtectedAmounts,
)
from .models.budget import BIWEEKLY_PERIODS_IN_YEAR, MONTHS_IN_YEAR, WEEKS_IN_YEAR

logger = structlog.get_logger()

CENTS = Decimal("0.01")
APPROXIMATE_DAYS_IN_MONTH = Decimal("30")
SECONDS_PER_DAY = 24 * 60 * 60


class BudgetCalculator:
    """
    Calculate protected amounts and money available for debt.

    The calculator holds only settings; each call builds its own audit trail,
    so one instance can be shared freely.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """
        Initialize calculator.

        Args:
            settings: Engine settings (default: loaded from the environment)
        """
        self.settings = settings or EngineSettings()
        self.income = IncomeNormalizer()
        self.expenses = ExpenseAggregator(
            seasonal_threshold=self.settings.cushion.seasonal_threshold,
        )
        self.cushion = EmergencyCushionEstimator(self.settings.cushion)

    def _log_step(
        self,
        audit_log: list[AuditEntry],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        audit_log.append(entry)
        logger.debug(
            "calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def calculate(
        self,
        income_sources: list[IncomeSource],
        expenses: EssentialExpenses,
        now: datetime,
    ) -> BudgetCalculation:
        """
        Calculate the budget protection for one household.

        Args:
            income_sources: All income sources (inactive ones are ignored)
            expenses: Essential expense categories and special circumstances
            now: Calculation time, recorded on the result

        Returns:
            BudgetCalculation with per-paycheck protection, the 12-month
            breakdown and a full audit trail

        Raises:
            InvalidInputError: If the income list is empty or has duplicate ids
        """
        self.income.validate_sources(income_sources)
        audit_log: list[AuditEntry] = []

        # Step 1: Income
        total_income = self.income.total_monthly_income(income_sources)
        active = [s for s in income_sources if s.is_active]
        self._log_step(
            audit_log,
            step="total_monthly_income",
            input_value=", ".join(
                f"{s.id}={s.amount}/{s.frequency.value}@{s.stability}" for s in active
            ) or "no active sources",
            output_value=str(total_income),
            source="Monthly equivalents weighted by stability",
            notes=f"{len(income_sources) - len(active)} inactive source(s) excluded",
        )

        # Step 2: Essential expenses
        total_expenses = self.expenses.total_monthly_expenses(expenses)
        self._log_step(
            audit_log,
            step="total_monthly_expenses",
            input_value=", ".join(
                f"{key}={c.monthly_amount}" for key, c in expenses.categories.items()
            ) or "no categories",
            output_value=str(total_expenses),
            source="Actual amount when known, otherwise minimum",
        )

        # Step 3: Emergency cushion
        emergency_cushion = self.cushion.estimate(expenses, total_income)
        self._log_step(
            audit_log,
            step="emergency_cushion",
            input_value=(
                f"income={total_income}, "
                f"dependents={expenses.special_circumstances.dependents}"
            ),
            output_value=str(emergency_cushion),
            source="Emergency cushion rules",
            notes=f"cap={self.settings.cushion.cap}",
        )

        # Step 4: Protected amount and funds for debt
        protected_amount = total_expenses + emergency_cushion
        available_for_debt = max(Decimal("0"), total_income - protected_amount)
        self._log_step(
            audit_log,
            step="protected_amount",
            input_value=f"expenses={total_expenses}, cushion={emergency_cushion}",
            output_value=str(protected_amount),
            source="Expenses + cushion",
        )
        self._log_step(
            audit_log,
            step="available_for_debt",
            input_value=f"income={total_income}, protected={protected_amount}",
            output_value=str(available_for_debt),
            source="max(0, income - protected)",
        )

        # Step 5: Per-paycheck protection
        protected_amounts = self._per_paycheck_protection(
            protected_amount, income_sources, total_income
        )
        self._log_step(
            audit_log,
            step="per_paycheck_protection",
            input_value=f"protected={protected_amount}",
            output_value=f"weekly={protected_amounts.weekly}, biweekly={protected_amounts.biweekly}",
            source="Protected amount spread over pay periods",
        )

        # Step 6: Seasonal breakdown and critical months
        breakdown = self.expenses.monthly_breakdown(expenses)
        critical_months = self._critical_months(breakdown, total_income, emergency_cushion)
        self._log_step(
            audit_log,
            step="critical_months",
            input_value=f"threshold={self.settings.critical_month_threshold}",
            output_value=str(critical_months),
            source="income - month expenses - cushion below threshold",
        )

        # Step 7: Income stability
        stability = self.income.income_stability(income_sources)
        self._log_step(
            audit_log,
            step="income_stability",
            input_value=f"active_sources={len(active)}",
            output_value=str(stability),
            source="Income-weighted average stability",
        )

        result = BudgetCalculation(
            total_monthly_income=total_income,
            total_monthly_expenses=total_expenses,
            emergency_cushion=emergency_cushion,
            protected_amount=protected_amount,
            available_for_debt=available_for_debt,
            protected_amounts=protected_amounts,
            monthly_breakdown=breakdown,
            income_stability=stability,
            critical_months=critical_months,
            calculated_at=now,
            audit_log=audit_log,
        )

        logger.info(
            "budget_calculated",
            total_monthly_income=str(total_income),
            protected_amount=str(protected_amount),
            available_for_debt=str(available_for_debt),
            critical_months=critical_months,
        )

        return result

    def _per_paycheck_protection(
        self,
        protected_amount: Decimal,
        income_sources: list[IncomeSource],
        total_income: Decimal,
    ) -> ProtectedAmounts:
        """Split the protected amount across pay periods and income sources."""
        weekly = protected_amount * MONTHS_IN_YEAR / WEEKS_IN_YEAR
        biweekly = protected_amount * MONTHS_IN_YEAR / BIWEEKLY_PERIODS_IN_YEAR

        per_paycheck = []
        for source in income_sources:
            if not source.is_active:
                continue

            if source.frequency == Frequency.WEEKLY:
                share = weekly
            elif source.frequency == Frequency.BIWEEKLY:
                share = biweekly
            elif total_income <= 0:
                share = Decimal("0")
            elif source.frequency == Frequency.MONTHLY:
                share = protected_amount * (self.income.monthly_amount(source) / total_income)
            else:
                # IRREGULAR, QUARTERLY, ANNUALLY: proportional slice of one payment
                share = source.amount * (protected_amount / total_income)

            per_paycheck.append(PaycheckProtection(
                source_id=source.id,
                source_name=source.name,
                frequency=source.frequency,
                amount=share.quantize(CENTS),
            ))

        return ProtectedAmounts(
            weekly=weekly,
            biweekly=biweekly,
            monthly=protected_amount,
            per_paycheck=per_paycheck,
        )

    def _critical_months(
        self,
        breakdown: list[MonthBreakdown],
        total_income: Decimal,
        emergency_cushion: Decimal,
    ) -> list[int]:
        threshold = self.settings.critical_month_threshold
        return [
            entry.month
            for entry in breakdown
            if total_income - entry.total - emergency_cushion < threshold
        ]

    def available_for_pay_period(
        self,
        budget: BudgetCalculation,
        start: Union[date, datetime],
        end: Union[date, datetime],
        frequency: Frequency,
    ) -> Decimal:
        """
        Money available for debt within one pay period.

        Weekly, biweekly and monthly periods take a fixed share of the monthly
        figure; other frequencies pro-rate it by the days in the period.

        Raises:
            InvalidInputError: If the period ends before it starts
        """
        frequency = ensure_frequency(frequency)
        if end < start:
            raise InvalidInputError(
                "Pay period end is before its start",
                field="end",
                value=str(end),
                constraint=f"Must be on or after {start}",
            )

        available = budget.available_for_debt
        if frequency == Frequency.WEEKLY:
            period_available = available / 4
        elif frequency == Frequency.BIWEEKLY:
            period_available = available / 2
        elif frequency == Frequency.MONTHLY:
            period_available = available
        else:
            days = _days_between(start, end)
            period_available = available / APPROXIMATE_DAYS_IN_MONTH * days

        return max(Decimal("0"), period_available)


def _days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """Whole days in a period, counting any partial day as a full one."""
    delta = end - start
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


__all__ = ["BudgetCalculator"]
