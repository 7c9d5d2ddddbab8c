"""Dashboard crisis aggregation.

CrisisAggregator combines scored bills, the budget calculation and an
optional crisis-triage verdict into one DashboardAssessment: overall status,
a single concrete next action, progress toward all bills being current,
upcoming deadlines, consequence timelines, crisis alerts and assistance
resources.
"""

import math
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import structlog

from .config import EngineSettings
from .consequences import ConsequenceTracker
from .models import (
    AlertSeverity,
    AlertType,
    AvailableMoney,
    Bill,
    BillStatus,
    BillType,
    BudgetCalculation,
    CrisisAlert,
    DashboardAssessment,
    DashboardStatus,
    Deadline,
    NextAction,
    NextActionPriority,
    PriorityCategory,
    ProgressCategory,
    ProgressMilestone,
    TriageVerdict,
    as_date,
)
from .resources import DIAL_211, HUD_ASSISTANCE, LIHEAP, EmergencyResourceAdvisor

logger = structlog.get_logger()

URGENT_DAYS = 3

# Crisis alert thresholds
SHUTOFF_ALERT_DAYS = 3
SHUTOFF_EMERGENCY_DAYS = 1
SEVERELY_OVERDUE_DAYS = 30

MAX_DEADLINES = 5
WEEKS_PER_MONTH = 4
UNCLEAR_TIMELINE_WEEKS = 52
BILLS_PER_WEEK_FAST = 2
BILLS_PER_WEEK_STEADY = 1
BILLS_PER_WEEK_SLOW = Decimal("0.5")
HALFWAY_RATIO = Decimal("0.5")
TRIAGE_DEADLINE_FALLBACK_DAYS = 7
# Next action deadline for a payable bill with no due information
NEXT_ACTION_FALLBACK_DAYS = 7

ENCOURAGEMENT = {
    ProgressCategory.ALL_CURRENT: "Outstanding progress - all bills are now current",
    ProgressCategory.SURVIVAL_SECURED: "Great work - essential services are secure",
}
HALFWAY_ENCOURAGEMENT = "Over halfway there - momentum is building"
EARLY_ENCOURAGEMENT = "Keep going - securing essential services first"

DEFAULT_ACTION = "Build emergency fund"
DEFAULT_ACTION_AMOUNT = Decimal("50")
DEFAULT_ACTION_DAYS = 30
DEFAULT_ACTION_CONSEQUENCE = "Improve financial stability"
GENERIC_CONSEQUENCE = "Service disruption"

BUDGET_CRISIS_ACTION = "Call 2-1-1 for emergency assistance today"

STATUS_EXPLANATIONS = {
    DashboardStatus.CRISIS: "Essential needs exceed income. Emergency assistance needed immediately.",
    DashboardStatus.URGENT: "Critical bills due within days. Immediate action required to avoid shutoffs.",
    DashboardStatus.CAUTION: "Tight budget requires careful management. Focus on critical bills only.",
    DashboardStatus.STABLE: "Bills are manageable with current income. Stay on payment plan.",
    DashboardStatus.COMFORTABLE: "Good financial margin. Consider building emergency fund or extra payments.",
}

# Checked in order against the lowercased bill name
CONSEQUENCE_KEYWORDS = (
    ("electric", "Power shutoff"),
    ("gas", "Gas disconnection"),
    ("water", "Water shutoff"),
    ("rent", "Eviction process"),
    ("car", "Vehicle repossession"),
)

UTILITY_KEYWORDS = ("electric", "gas", "water", "heat")
HOUSING_KEYWORDS = ("rent", "mortgage")
VEHICLE_KEYWORDS = ("car", "auto")

AMOUNT_PATTERN = re.compile(r"\$(\d+(?:\.\d{2})?)")


def consequence_for(bill: Bill) -> str:
    """Plain-language consequence of missing a bill, by name keyword."""
    name = bill.name.lower()
    for keyword, consequence in CONSEQUENCE_KEYWORDS:
        if keyword in name:
            return consequence
    return GENERIC_CONSEQUENCE


def _name_has(bill: Bill, keywords: tuple[str, ...]) -> bool:
    name = bill.name.lower()
    return any(keyword in name for keyword in keywords)


def _is_unpaid(bill: Bill) -> bool:
    return bill.current_balance > 0


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


def _days_overdue(bill: Bill, today: date) -> int:
    """Stated days overdue, or those implied by a past due date if larger."""
    return max(bill.days_overdue, -bill.days_until(today))


class CrisisAggregator:
    """Build the dashboard-level assessment for one household."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        advisor: Optional[EmergencyResourceAdvisor] = None,
        tracker: Optional[ConsequenceTracker] = None,
    ):
        self.settings = settings or EngineSettings()
        self.advisor = advisor or EmergencyResourceAdvisor()
        self.tracker = tracker or ConsequenceTracker()

    def assess(
        self,
        bills: list[Bill],
        budget: BudgetCalculation,
        now: datetime,
        triage: Optional[TriageVerdict] = None,
        dependents: int = 0,
    ) -> DashboardAssessment:
        """
        Assess the household's situation.

        Args:
            bills: Scored bills (categories fall back to priority levels)
            budget: Result of BudgetCalculator.calculate
            now: Assessment time; due dates are measured from its date
            triage: Verdict of an external crisis-triage step, if any
            dependents: Number of dependents in the household

        Returns:
            DashboardAssessment
        """
        today = as_date(now)
        triage = triage or TriageVerdict()

        alerts = self.crisis_alerts(bills, budget, today)
        status = self.status(bills, budget, today, triage)
        resource_assessment = self.advisor.assess(
            total_income=budget.total_monthly_income,
            total_expenses=budget.protected_amount,
            available_for_debt=budget.available_for_debt,
            required_payments=sum(
                (b.minimum_payment for b in bills
                 if _is_unpaid(b) and b.status == BillStatus.ACTIVE),
                Decimal("0"),
            ),
            has_dependents=dependents > 0,
            utility_shutoff_risk=any(a.alert_type == AlertType.UTILITY_SHUTOFF for a in alerts),
            eviction_risk=any(a.alert_type == AlertType.HOUSING_RISK for a in alerts),
        )
        timeline = self.tracker.create_timeline(bills, today)

        assessment = DashboardAssessment(
            status=status,
            status_explanation=STATUS_EXPLANATIONS[status],
            primary_needs=resource_assessment.primary_needs,
            next_action=self.next_action(bills, budget, today, status, triage, alerts),
            progress=self.progress(bills, budget),
            upcoming_deadlines=self.upcoming_deadlines(bills, budget, today),
            crisis_alerts=alerts,
            consequence_timeline=timeline,
            urgent_actions=self.tracker.urgent_actions(timeline),
            available_money=AvailableMoney(
                total_income=budget.total_monthly_income,
                essential_needs=budget.protected_amount,
                available_for_bills=budget.available_for_debt,
            ),
            resource_assessment=resource_assessment,
            generated_at=now,
        )

        logger.info(
            "dashboard_assessed",
            status=status.value,
            alerts=len(alerts),
            next_action=assessment.next_action.action,
            resource_severity=resource_assessment.severity.value,
        )
        return assessment

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status(
        self,
        bills: list[Bill],
        budget: BudgetCalculation,
        today: date,
        triage: TriageVerdict,
    ) -> DashboardStatus:
        """Overall status, first matching rule wins."""
        if budget.protected_amount > budget.total_monthly_income or triage.is_crisis:
            return DashboardStatus.CRISIS

        if any(
            bill.effective_category == PriorityCategory.CRITICAL
            and bill.days_until(today) <= URGENT_DAYS
            for bill in bills
        ):
            return DashboardStatus.URGENT

        ratio = budget.available_ratio
        if ratio < self.settings.caution_ratio:
            return DashboardStatus.CAUTION

        if all(not _is_unpaid(bill) for bill in bills) and ratio > self.settings.comfortable_ratio:
            return DashboardStatus.COMFORTABLE

        return DashboardStatus.STABLE

    # -------------------------------------------------------------------------
    # Next action
    # -------------------------------------------------------------------------

    def next_action(
        self,
        bills: list[Bill],
        budget: BudgetCalculation,
        today: date,
        status: DashboardStatus,
        triage: TriageVerdict,
        alerts: list[CrisisAlert],
    ) -> NextAction:
        """The one thing to do next."""
        if triage.actions:
            return self._triage_action(triage, bills, today)

        if status == DashboardStatus.CRISIS:
            crisis_alert = next(
                (a for a in alerts if a.alert_type == AlertType.BUDGET_CRISIS),
                None,
            )
            if crisis_alert is not None:
                return NextAction(
                    action=crisis_alert.immediate_action,
                    amount=Decimal("0"),
                    deadline=today,
                    days_until=0,
                    consequence=crisis_alert.description,
                    priority=NextActionPriority.IMMEDIATE,
                    resource_link=crisis_alert.resources[0] if crisis_alert.resources else None,
                )

        available = budget.available_for_debt
        payable = [
            bill for bill in bills
            if _is_unpaid(bill) and bill.current_balance <= available
        ]
        if payable:
            bill = max(payable, key=lambda b: b.effective_category.rank)
            if bill.has_due_information:
                days = max(0, bill.days_until(today))
            else:
                days = NEXT_ACTION_FALLBACK_DAYS
            return NextAction(
                action=f"Pay {bill.name}",
                amount=bill.current_balance,
                deadline=bill.due_date or today + timedelta(days=days),
                days_until=days,
                consequence=consequence_for(bill),
                priority=(
                    NextActionPriority.IMMEDIATE
                    if bill.effective_category == PriorityCategory.CRITICAL
                    else NextActionPriority.HIGH
                ),
            )

        return NextAction(
            action=DEFAULT_ACTION,
            amount=DEFAULT_ACTION_AMOUNT,
            deadline=today + timedelta(days=DEFAULT_ACTION_DAYS),
            days_until=DEFAULT_ACTION_DAYS,
            consequence=DEFAULT_ACTION_CONSEQUENCE,
            priority=NextActionPriority.MEDIUM,
        )

    def _triage_action(self, triage: TriageVerdict, bills: list[Bill], today: date) -> NextAction:
        """Parse "Action: $amount ... - consequence" from the first triage action."""
        text = triage.actions[0]
        match = AMOUNT_PATTERN.search(text)
        parts = text.split(" - ")

        unpaid = [bill for bill in bills if _is_unpaid(bill)]
        if unpaid:
            nearest = min(unpaid, key=lambda b: b.days_until(today))
            days = max(0, nearest.days_until(today))
            deadline = nearest.due_date or today + timedelta(days=days)
        else:
            days = TRIAGE_DEADLINE_FALLBACK_DAYS
            deadline = today + timedelta(days=days)

        return NextAction(
            action=text.split(":")[0].strip(),
            amount=Decimal(match.group(1)) if match else Decimal("0"),
            deadline=deadline,
            days_until=days,
            consequence=parts[1].strip() if len(parts) > 1 else GENERIC_CONSEQUENCE,
            priority=NextActionPriority.IMMEDIATE,
            resource_link=triage.help_resources[0] if triage.help_resources else None,
        )

    # -------------------------------------------------------------------------
    # Progress and deadlines
    # -------------------------------------------------------------------------

    def progress(self, bills: list[Bill], budget: BudgetCalculation) -> ProgressMilestone:
        """How many bills are current and how long until all of them are."""
        total = len(bills)
        current = sum(1 for bill in bills if not _is_unpaid(bill))
        critical_unpaid = [
            bill for bill in bills
            if bill.effective_category == PriorityCategory.CRITICAL and _is_unpaid(bill)
        ]

        if current == total:
            category = ProgressCategory.ALL_CURRENT
        elif not critical_unpaid:
            category = ProgressCategory.SURVIVAL_SECURED
        else:
            category = ProgressCategory.IN_PROGRESS

        if critical_unpaid:
            next_milestone = f"All critical bills current after {len(critical_unpaid)} more payments"
        elif current < total:
            next_milestone = f"All bills current after {total - current} more payments"
        else:
            next_milestone = "All bills current - focus on building emergency fund"

        outstanding = sum((bill.current_balance for bill in bills), Decimal("0"))
        available = budget.available_for_debt
        weeks: Optional[int] = None
        if available > 0:
            weeks = math.ceil(outstanding / (available / WEEKS_PER_MONTH))
            if weeks >= UNCLEAR_TIMELINE_WEEKS:
                weeks = None

        return ProgressMilestone(
            description=f"{current} of {total} bills current",
            current_count=current,
            total_count=total,
            next_milestone=next_milestone,
            weeks_to_stability=weeks,
            timeline_to_stability=(
                f"All bills current in {weeks} weeks"
                if weeks is not None
                else "Timeline unclear - need budget help"
            ),
            weekly_progress=self._weekly_progress(bills, available),
            encouragement=self._encouragement(category, current, total),
            category=category,
        )

    def _weekly_progress(self, bills: list[Bill], available: Decimal) -> str:
        """Pace at which bills become current with a quarter of the monthly budget."""
        weekly = available / WEEKS_PER_MONTH
        if weekly <= 0:
            return "No funds available - emergency assistance needed"

        unpaid = [bill for bill in bills if _is_unpaid(bill)]
        if not unpaid:
            return "All bills current - maintain momentum"

        outstanding = sum((bill.current_balance for bill in unpaid), Decimal("0"))
        average_bill = outstanding / len(unpaid)
        bills_per_week = weekly / average_bill
        if bills_per_week >= BILLS_PER_WEEK_FAST:
            return f"Paying off {math.floor(bills_per_week)} bills per week at current rate"
        if bills_per_week >= BILLS_PER_WEEK_STEADY:
            return "1 bill becomes current each week"
        if bills_per_week >= BILLS_PER_WEEK_SLOW:
            return "1 bill becomes current every 2 weeks"
        return "1 bill becomes current each month"

    def _encouragement(self, category: ProgressCategory, current: int, total: int) -> str:
        if category in ENCOURAGEMENT:
            return ENCOURAGEMENT[category]
        if current > total * HALFWAY_RATIO:
            return HALFWAY_ENCOURAGEMENT
        return EARLY_ENCOURAGEMENT

    def upcoming_deadlines(
        self,
        bills: list[Bill],
        budget: BudgetCalculation,
        today: date,
    ) -> list[Deadline]:
        """The next unpaid bills, soonest (or most overdue) first."""
        deadlines = []
        for bill in bills:
            if not _is_unpaid(bill):
                continue
            days = bill.days_until(today)
            deadlines.append(Deadline(
                bill_id=bill.id,
                bill_name=bill.name,
                amount=bill.current_balance,
                due_date=bill.due_date or today + timedelta(days=days),
                days_until=days,
                consequence=consequence_for(bill),
                payment_possible=bill.current_balance <= budget.available_for_debt,
            ))
        deadlines.sort(key=lambda d: d.days_until)
        return deadlines[:MAX_DEADLINES]

    # -------------------------------------------------------------------------
    # Crisis alerts
    # -------------------------------------------------------------------------

    def crisis_alerts(
        self,
        bills: list[Bill],
        budget: BudgetCalculation,
        today: date,
    ) -> list[CrisisAlert]:
        """Situations that need attention today, most severe first."""
        alerts: list[CrisisAlert] = []

        shortfall = budget.monthly_shortfall
        if shortfall > 0:
            alerts.append(CrisisAlert(
                alert_type=AlertType.BUDGET_CRISIS,
                severity=AlertSeverity.EMERGENCY,
                description=f"Essential needs exceed income by ${shortfall:.0f}/month",
                immediate_action=BUDGET_CRISIS_ACTION,
                resources=[DIAL_211],
            ))

        for bill in bills:
            if not _is_unpaid(bill):
                continue
            if not (bill.bill_type == BillType.UTILITIES or _name_has(bill, UTILITY_KEYWORDS)):
                continue
            days = bill.days_until(today)
            if days > SHUTOFF_ALERT_DAYS and not bill.shutoff_risk:
                continue
            if days < 0:
                timing = f"{-days} days overdue"
            else:
                timing = f"shutoff in {days} days"
            alerts.append(CrisisAlert(
                alert_type=AlertType.UTILITY_SHUTOFF,
                severity=(
                    AlertSeverity.EMERGENCY
                    if days <= SHUTOFF_EMERGENCY_DAYS
                    else AlertSeverity.CRITICAL
                ),
                description=f"{bill.name} {timing} - {_money(bill.current_balance)} due",
                immediate_action=f"Pay {_money(bill.minimum_payment)} today to prevent shutoff",
                bill_id=bill.id,
                resources=[LIHEAP],
            ))

        housing = next(
            (bill for bill in bills
             if _is_unpaid(bill)
             and _name_has(bill, HOUSING_KEYWORDS)
             and _days_overdue(bill, today) > SEVERELY_OVERDUE_DAYS),
            None,
        )
        if housing is not None:
            alerts.append(CrisisAlert(
                alert_type=AlertType.HOUSING_RISK,
                severity=AlertSeverity.CRITICAL,
                description=(
                    f"{housing.name} is {_days_overdue(housing, today)} days overdue"
                    " - eviction risk"
                ),
                immediate_action="Contact landlord/lender today to negotiate payment plan",
                bill_id=housing.id,
                resources=[HUD_ASSISTANCE, DIAL_211],
            ))

        vehicle = next(
            (bill for bill in bills
             if _is_unpaid(bill)
             and _name_has(bill, VEHICLE_KEYWORDS)
             and (_days_overdue(bill, today) > SEVERELY_OVERDUE_DAYS or bill.repossession_risk)),
            None,
        )
        if vehicle is not None:
            alerts.append(CrisisAlert(
                alert_type=AlertType.TRANSPORTATION_RISK,
                severity=AlertSeverity.CRITICAL,
                description=(
                    f"{vehicle.name} is {_days_overdue(vehicle, today)} days overdue"
                    " - repo risk"
                ),
                immediate_action="Call lender today - partial payment may prevent repo",
                bill_id=vehicle.id,
                resources=[DIAL_211],
            ))

        alerts.sort(key=lambda a: a.severity.rank, reverse=True)
        return alerts


__all__ = ["CrisisAggregator", "consequence_for", "STATUS_EXPLANATIONS"]
