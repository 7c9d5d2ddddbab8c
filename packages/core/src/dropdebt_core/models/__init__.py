"""Data models for dropdebt-core.

This package provides the immutable records passed into and returned from
the engine:
- Income, essential expenses and budget results (budget.py)
- Bills, priority breakdowns and payment plans (bills.py)
- Dashboard assessments, alerts, consequence timelines and resource
  assessments (dashboard.py)
- Calculation audit trail (audit.py)
- The FinancialSnapshot input bundle (snapshot.py)
- The combined RecommendationReport (report.py)
"""

from dropdebt_core.models.audit import AuditEntry
from dropdebt_core.models.bills import (
    DEFAULT_DAYS_UNTIL_DUE,
    DEFAULT_MINIMUM_PAYMENT,
    Bill,
    BillStatus,
    BillType,
    IntegratedPaymentPlan,
    PaymentRecommendation,
    PriorityBreakdown,
    PriorityCategory,
    PriorityLevel,
    as_date,
)
from dropdebt_core.models.budget import (
    BudgetCalculation,
    EssentialExpenses,
    ExpenseCategory,
    Flexibility,
    Frequency,
    IncomeSource,
    MonthBreakdown,
    PaycheckProtection,
    PaymentValidationDetails,
    PaymentValidationResult,
    ProtectedAmounts,
    SafetyLevel,
    SeasonalVariation,
    SpecialCircumstances,
    to_monthly,
)
from dropdebt_core.models.dashboard import (
    AlertSeverity,
    AlertType,
    AvailableMoney,
    ConsequenceEvent,
    ConsequenceTimeline,
    CrisisAlert,
    DashboardAssessment,
    DashboardStatus,
    Deadline,
    NextAction,
    NextActionPriority,
    ProgressCategory,
    ProgressMilestone,
    ResourceAssessment,
    ResourceSeverity,
    ResponseTimeframe,
    TriageVerdict,
)
from dropdebt_core.models.report import RecommendationReport
from dropdebt_core.models.snapshot import FinancialSnapshot

__all__ = [
    # Audit
    "AuditEntry",
    # Budget
    "Frequency",
    "Flexibility",
    "SafetyLevel",
    "to_monthly",
    "IncomeSource",
    "SeasonalVariation",
    "ExpenseCategory",
    "SpecialCircumstances",
    "EssentialExpenses",
    "PaycheckProtection",
    "ProtectedAmounts",
    "MonthBreakdown",
    "BudgetCalculation",
    "PaymentValidationDetails",
    "PaymentValidationResult",
    # Bills
    "DEFAULT_MINIMUM_PAYMENT",
    "DEFAULT_DAYS_UNTIL_DUE",
    "BillType",
    "PriorityCategory",
    "PriorityLevel",
    "BillStatus",
    "as_date",
    "PriorityBreakdown",
    "Bill",
    "PaymentRecommendation",
    "IntegratedPaymentPlan",
    # Dashboard
    "DashboardStatus",
    "NextActionPriority",
    "ProgressCategory",
    "AlertType",
    "AlertSeverity",
    "ResourceSeverity",
    "ResponseTimeframe",
    "TriageVerdict",
    "NextAction",
    "ProgressMilestone",
    "Deadline",
    "ConsequenceEvent",
    "ConsequenceTimeline",
    "CrisisAlert",
    "AvailableMoney",
    "ResourceAssessment",
    "DashboardAssessment",
    # Snapshot and report
    "FinancialSnapshot",
    "RecommendationReport",
]
