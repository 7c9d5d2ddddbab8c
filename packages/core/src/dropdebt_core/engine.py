"""One-call evaluation of a financial snapshot.

RecommendationEngine wires the budget calculator, payment validator,
priority scorer, payment allocator and crisis aggregator together:

    engine = RecommendationEngine()
    report = engine.evaluate(snapshot, now=datetime(2026, 10, 18, 9, 0))
    print(report.dashboard.next_action.action)
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

import structlog

from .calculator import BudgetCalculator
from .config import EngineSettings
from .crisis import CrisisAggregator
from .integrator import BudgetBillIntegrator
from .models import (
    FinancialSnapshot,
    Frequency,
    RecommendationReport,
    TriageVerdict,
)
from .priority import PriorityScorer
from .resources import EmergencyResourceAdvisor
from .validator import PaymentPlanValidator

logger = structlog.get_logger()


class RecommendationEngine:
    """Facade running every engine component over one snapshot."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.calculator = BudgetCalculator(self.settings)
        self.validator = PaymentPlanValidator()
        self.scorer = PriorityScorer(self.settings)
        self.integrator = BudgetBillIntegrator(self.settings)
        self.aggregator = CrisisAggregator(self.settings, EmergencyResourceAdvisor())

    def evaluate(
        self,
        snapshot: FinancialSnapshot,
        now: datetime,
        triage: Optional[TriageVerdict] = None,
        proposed_payment: Optional[Union[Decimal, int, str]] = None,
        frequency: Frequency = Frequency.MONTHLY,
    ) -> RecommendationReport:
        """
        Evaluate a snapshot end to end.

        Args:
            snapshot: Income, expenses and bills of the household
            now: Evaluation time, used for due dates and timestamps
            triage: Verdict of an external crisis-triage step, if any
            proposed_payment: Payment to validate, if any
            frequency: Frequency of the proposed payment

        Returns:
            RecommendationReport

        Raises:
            InvalidInputError: If the snapshot or proposed payment is invalid
        """
        logger.info(
            "evaluation_started",
            income_sources=len(snapshot.income_sources),
            expense_categories=len(snapshot.expenses.categories),
            bills=len(snapshot.bills),
        )

        budget = self.calculator.calculate(snapshot.income_sources, snapshot.expenses, now=now)

        validation = None
        if proposed_payment is not None:
            validation = self.validator.validate(budget, proposed_payment, frequency)

        scored_bills = self.scorer.score_bills(snapshot.bills, now)
        plan = self.integrator.create_plan(scored_bills, budget)

        crisis_recommendations: list[str] = []
        if plan.total_minimum_payments > plan.available_budget:
            crisis_recommendations = self.integrator.crisis_recommendations(
                plan.total_minimum_payments, plan.available_budget
            )

        dashboard = self.aggregator.assess(
            scored_bills,
            budget,
            now,
            triage=triage,
            dependents=snapshot.dependents,
        )

        return RecommendationReport(
            budget=budget,
            payment_validation=validation,
            scored_bills=scored_bills,
            payment_plan=plan,
            crisis_recommendations=crisis_recommendations,
            dashboard=dashboard,
        )


__all__ = ["RecommendationEngine"]
