"""Combined result of one full engine evaluation."""

from typing import Optional

from pydantic import BaseModel, Field

from .bills import Bill, IntegratedPaymentPlan
from .budget import BudgetCalculation, PaymentValidationResult
from .dashboard import DashboardAssessment


class RecommendationReport(BaseModel):
    """Budget, bill priorities, payment plan and dashboard for one snapshot."""

    model_config = {"frozen": True}

    budget: BudgetCalculation
    payment_validation: Optional[PaymentValidationResult] = None
    scored_bills: list[Bill] = Field(default_factory=list)
    payment_plan: IntegratedPaymentPlan
    crisis_recommendations: list[str] = Field(
        default_factory=list,
        description="Filled when minimum payments exceed the available budget",
    )
    dashboard: DashboardAssessment


__all__ = ["RecommendationReport"]
