"""Tests for the dashboard crisis aggregator."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from dropdebt_core import BudgetCalculator, CrisisAggregator, EngineSettings
from dropdebt_core.crisis import STATUS_EXPLANATIONS, consequence_for
from dropdebt_core.models import (
    AlertSeverity,
    AlertType,
    Bill,
    BillType,
    BudgetCalculation,
    DashboardStatus,
    EssentialExpenses,
    ExpenseCategory,
    IncomeSource,
    NextActionPriority,
    PriorityCategory,
    PriorityLevel,
    ProgressCategory,
    ResourceSeverity,
    TriageVerdict,
)

NOW = datetime(2026, 10, 18, 9, 0)
TODAY = date(2026, 10, 18)


def _budget(income: str, expenses: str) -> BudgetCalculation:
    return BudgetCalculator().calculate(
        [IncomeSource(id="job", name="Job", amount=Decimal(income))],
        EssentialExpenses.from_categories([
            ExpenseCategory(key="essentials", minimum_amount=Decimal(expenses)),
        ]),
        now=NOW,
    )


def _bill(bill_id: str, name: str, balance: str, days: int, **kwargs) -> Bill:
    return Bill(
        id=bill_id,
        name=name,
        current_balance=Decimal(balance),
        due_date=TODAY + timedelta(days=days),
        **kwargs,
    )


@pytest.fixture
def aggregator() -> CrisisAggregator:
    return CrisisAggregator(EngineSettings())


@pytest.fixture
def budget() -> BudgetCalculation:
    """Income 2800, protected 2100, 700 available (25% of income)."""
    return _budget("2800", "1960")


@pytest.fixture
def card_bill() -> Bill:
    return _bill("visa", "Visa", "300", 20, category=PriorityCategory.HIGH)


class TestStatus:
    """Tests for the overall dashboard status."""

    def test_quarter_of_income_is_stable(self, aggregator, budget, card_bill):
        """25% available with no urgent bills is STABLE."""
        assessment = aggregator.assess([card_bill], budget, NOW)

        assert assessment.status == DashboardStatus.STABLE
        assert assessment.status_explanation == STATUS_EXPLANATIONS[DashboardStatus.STABLE]

    def test_caution_ratio_is_configurable(self, budget, card_bill):
        """Raising the caution ratio to 30% makes the same household CAUTION."""
        aggregator = CrisisAggregator(EngineSettings(caution_ratio=Decimal("0.3")))
        assessment = aggregator.assess([card_bill], budget, NOW)

        assert assessment.status == DashboardStatus.CAUTION

    def test_low_ratio_is_caution(self, aggregator, card_bill):
        """Under 20% of income available is CAUTION."""
        budget = _budget("2800", "2300")
        assert aggregator.assess([card_bill], budget, NOW).status == DashboardStatus.CAUTION

    def test_shortfall_is_crisis(self, aggregator):
        """Protected needs above income is CRISIS."""
        budget = _budget("1800", "2000")
        assessment = aggregator.assess([], budget, NOW)

        assert assessment.status == DashboardStatus.CRISIS
        assert assessment.status_explanation.startswith("Essential needs exceed income")

    def test_triage_crisis_overrides(self, aggregator, budget):
        """A crisis triage verdict forces CRISIS."""
        assessment = aggregator.assess([], budget, NOW, triage=TriageVerdict(is_crisis=True))
        assert assessment.status == DashboardStatus.CRISIS

    def test_critical_bill_due_soon_is_urgent(self, aggregator, budget, card_bill):
        """A critical bill due within three days is URGENT."""
        electric = _bill(
            "electric", "Electric", "120", 3, category=PriorityCategory.CRITICAL
        )
        assessment = aggregator.assess([card_bill, electric], budget, NOW)
        assert assessment.status == DashboardStatus.URGENT

    def test_critical_category_from_priority_level(self, aggregator, budget):
        """Scored bills without a category use their priority level."""
        electric = _bill("electric", "Electric", "120", 1, priority_level=PriorityLevel.CRITICAL)
        assessment = aggregator.assess([electric], budget, NOW)
        assert assessment.status == DashboardStatus.URGENT

    def test_all_current_with_margin_is_comfortable(self, aggregator):
        """No balances and over 30% available is COMFORTABLE."""
        budget = _budget("4000", "2000")
        paid = _bill("phone", "Phone", "0", 10)
        assessment = aggregator.assess([paid], budget, NOW)

        assert assessment.status == DashboardStatus.COMFORTABLE
        assert assessment.progress.category == ProgressCategory.ALL_CURRENT


class TestNextAction:
    """Tests for choosing the single next action."""

    def test_budget_crisis_action(self, aggregator):
        """In a budget crisis the next action is calling 2-1-1."""
        budget = _budget("1800", "2000")
        action = aggregator.assess([], budget, NOW).next_action

        assert action.action == "Call 2-1-1 for emergency assistance today"
        assert action.amount == Decimal("0")
        assert action.deadline == TODAY
        assert action.consequence == "Essential needs exceed income by $300/month"
        assert action.priority == NextActionPriority.IMMEDIATE
        assert action.resource_link == "dial-211"

    def test_triage_action_parsed(self, aggregator, budget):
        """The first triage action is parsed into action, amount and consequence."""
        triage = TriageVerdict(
            actions=["Pay electric bill: $183.50 today - Power shutoff"],
            help_resources=["liheap"],
        )
        electric = _bill("electric", "Electric", "183.50", 2)
        action = aggregator.assess([electric], budget, NOW, triage=triage).next_action

        assert action.action == "Pay electric bill"
        assert action.amount == Decimal("183.50")
        assert action.consequence == "Power shutoff"
        assert action.deadline == TODAY + timedelta(days=2)
        assert action.days_until == 2
        assert action.priority == NextActionPriority.IMMEDIATE
        assert action.resource_link == "liheap"

    def test_triage_action_without_bills(self, aggregator, budget):
        """Without unpaid bills the triage deadline is a week out."""
        triage = TriageVerdict(actions=["Call your landlord today"])
        action = aggregator.assess([], budget, NOW, triage=triage).next_action

        assert action.action == "Call your landlord today"
        assert action.amount == Decimal("0")
        assert action.deadline == TODAY + timedelta(days=7)
        assert action.resource_link is None

    def test_most_urgent_payable_bill(self, aggregator, budget, card_bill):
        """The highest-category bill that fits the budget is paid first."""
        electric = _bill("electric", "Electric", "120", 9, category=PriorityCategory.CRITICAL)
        rent = _bill("rent", "Rent", "2000", 5, category=PriorityCategory.CRITICAL)
        action = aggregator.assess([card_bill, rent, electric], budget, NOW).next_action

        assert action.action == "Pay Electric"
        assert action.amount == Decimal("120")
        assert action.days_until == 9
        assert action.consequence == "Power shutoff"
        assert action.priority == NextActionPriority.IMMEDIATE

    def test_first_bill_wins_ties(self, aggregator, budget, card_bill):
        """Among equally urgent bills the first listed wins."""
        phone = _bill("phone", "Phone", "80", 4, category=PriorityCategory.HIGH)
        action = aggregator.assess([card_bill, phone], budget, NOW).next_action

        assert action.action == "Pay Visa"
        assert action.priority == NextActionPriority.HIGH
        assert action.consequence == "Service disruption"

    def test_bill_without_due_information_gets_a_week(self, aggregator, budget):
        """A payable bill with no due information is given a 7 day deadline."""
        phone = Bill(id="phone", name="Phone", current_balance=Decimal("80"))
        action = aggregator.assess([phone], budget, NOW).next_action

        assert action.action == "Pay Phone"
        assert action.days_until == 7
        assert action.deadline == TODAY + timedelta(days=7)

    def test_stated_days_until_due_kept(self, aggregator, budget):
        """Supplied days until due are used as given."""
        phone = Bill(id="phone", name="Phone", current_balance=Decimal("80"), days_until_due=12)
        action = aggregator.assess([phone], budget, NOW).next_action

        assert action.days_until == 12
        assert action.deadline == TODAY + timedelta(days=12)

    def test_default_action(self, aggregator, budget):
        """With nothing to pay the next action is building an emergency fund."""
        action = aggregator.assess([], budget, NOW).next_action

        assert action.action == "Build emergency fund"
        assert action.amount == Decimal("50")
        assert action.days_until == 30
        assert action.priority == NextActionPriority.MEDIUM


class TestProgress:
    """Tests for progress toward stability."""

    def test_counts_and_timeline(self, aggregator, budget, card_bill):
        """420 outstanding at 175 a week takes 3 weeks."""
        phone = _bill("phone", "Phone", "120", 4)
        paid = _bill("gym", "Gym", "0", 4)
        progress = aggregator.assess([card_bill, phone, paid], budget, NOW).progress

        assert progress.description == "1 of 3 bills current"
        assert progress.next_milestone == "All bills current after 2 more payments"
        assert progress.weeks_to_stability == 3
        assert progress.timeline_to_stability == "All bills current in 3 weeks"
        assert progress.category == ProgressCategory.SURVIVAL_SECURED
        assert progress.weekly_progress == "1 bill becomes current every 2 weeks"
        assert progress.encouragement == "Great work - essential services are secure"

    def test_critical_bills_outstanding(self, aggregator, budget):
        """Unpaid critical bills keep progress in progress."""
        rent = _bill("rent", "Rent", "900", 5, category=PriorityCategory.CRITICAL)
        progress = aggregator.assess([rent], budget, NOW).progress

        assert progress.category == ProgressCategory.IN_PROGRESS
        assert progress.next_milestone == "All critical bills current after 1 more payments"
        assert progress.weekly_progress == "1 bill becomes current each month"
        assert progress.encouragement == "Keep going - securing essential services first"

    def test_unclear_timeline(self, aggregator, card_bill):
        """No money for debt means no timeline."""
        budget = _budget("1800", "2000")
        progress = aggregator.assess([card_bill], budget, NOW).progress

        assert progress.weeks_to_stability is None
        assert progress.timeline_to_stability == "Timeline unclear - need budget help"
        assert progress.weekly_progress == "No funds available - emergency assistance needed"

    def test_all_current_milestone(self, aggregator, budget):
        """Everything paid points at the emergency fund."""
        progress = aggregator.assess([], budget, NOW).progress
        assert progress.next_milestone == "All bills current - focus on building emergency fund"
        assert progress.weekly_progress == "All bills current - maintain momentum"
        assert progress.encouragement == "Outstanding progress - all bills are now current"

    @pytest.mark.parametrize(
        "balances,expected",
        [
            (["50", "50"], "Paying off 3 bills per week at current rate"),
            (["150"], "1 bill becomes current each week"),
        ],
    )
    def test_weekly_pace(self, aggregator, budget, balances, expected):
        """175 a week against the average unpaid balance sets the pace."""
        bills = [
            _bill(f"bill-{i}", f"Bill {i}", balance, 10)
            for i, balance in enumerate(balances)
        ]
        assert aggregator.assess(bills, budget, NOW).progress.weekly_progress == expected

    def test_over_halfway_with_critical_bill_left(self, aggregator, budget):
        """Most bills current but a critical one outstanding."""
        bills = [_bill(f"paid-{i}", "Gym", "0", 5) for i in range(3)]
        bills.append(_bill("rent", "Rent", "900", 5, category=PriorityCategory.CRITICAL))
        progress = aggregator.assess(bills, budget, NOW).progress

        assert progress.category == ProgressCategory.IN_PROGRESS
        assert progress.encouragement == "Over halfway there - momentum is building"


class TestDeadlines:
    """Tests for upcoming deadlines."""

    def test_capped_at_five_soonest(self, aggregator, budget):
        """Only the five soonest unpaid bills are listed, overdue first."""
        bills = [
            _bill(f"bill-{days}", f"Bill {days}", "50", days)
            for days in (12, 3, 8, -2, 20, 1, 30)
        ]
        deadlines = aggregator.assess(bills, budget, NOW).upcoming_deadlines

        assert [d.days_until for d in deadlines] == [-2, 1, 3, 8, 12]

    def test_payment_possible(self, aggregator, budget):
        """Bills over the available budget are marked not payable."""
        bills = [
            _bill("small", "Phone", "100", 5),
            _bill("large", "Rent", "900", 6),
        ]
        deadlines = aggregator.assess(bills, budget, NOW).upcoming_deadlines

        assert [d.payment_possible for d in deadlines] == [True, False]
        assert deadlines[1].consequence == "Eviction process"

    def test_paid_bills_excluded(self, aggregator, budget):
        paid = _bill("paid", "Phone", "0", 2)
        assert aggregator.assess([paid], budget, NOW).upcoming_deadlines == []


class TestCrisisAlerts:
    """Tests for crisis alerts."""

    def test_budget_crisis_alert(self, aggregator):
        """A $300 shortfall raises an emergency alert."""
        budget = _budget("1800", "2000")
        alerts = aggregator.assess([], budget, NOW).crisis_alerts

        assert len(alerts) == 1
        assert alerts[0].alert_type == AlertType.BUDGET_CRISIS
        assert alerts[0].severity == AlertSeverity.EMERGENCY
        assert alerts[0].description == "Essential needs exceed income by $300/month"

    def test_alerts_sorted_by_severity(self, aggregator, budget):
        """Emergency alerts come before critical ones."""
        electric = _bill(
            "electric", "Electric", "120", 2,
            bill_type=BillType.UTILITIES, minimum_payment=Decimal("60"),
        )
        gas = Bill(id="gas", name="Gas bill", current_balance=Decimal("90"), days_overdue=5)
        rent = Bill(id="rent", name="Rent", current_balance=Decimal("1800"), days_overdue=45)

        alerts = aggregator.assess([electric, rent, gas], budget, NOW).crisis_alerts

        assert [a.bill_id for a in alerts] == ["gas", "electric", "rent"]
        gas_alert, electric_alert, rent_alert = alerts
        assert gas_alert.severity == AlertSeverity.EMERGENCY
        assert gas_alert.description == "Gas bill 5 days overdue - $90.00 due"
        assert electric_alert.severity == AlertSeverity.CRITICAL
        assert electric_alert.description == "Electric shutoff in 2 days - $120.00 due"
        assert electric_alert.immediate_action == "Pay $60.00 today to prevent shutoff"
        assert electric_alert.resources == ["liheap"]
        assert rent_alert.alert_type == AlertType.HOUSING_RISK
        assert rent_alert.resources == ["hud-assistance", "dial-211"]

    def test_distant_utility_without_risk_flag(self, aggregator, budget):
        """Utilities due later raise no alert unless flagged for shutoff."""
        later = _bill("water", "Water", "60", 10)
        flagged = _bill("heat", "Heating oil", "200", 10, shutoff_risk=True)

        alerts = aggregator.assess([later, flagged], budget, NOW).crisis_alerts
        assert [a.bill_id for a in alerts] == ["heat"]

    def test_vehicle_repossession_risk(self, aggregator, budget):
        """A flagged car loan raises a transportation alert."""
        car = _bill("car", "Auto loan", "400", 10, repossession_risk=True)
        alerts = aggregator.assess([car], budget, NOW).crisis_alerts

        assert [a.alert_type for a in alerts] == [AlertType.TRANSPORTATION_RISK]
        assert alerts[0].immediate_action == "Call lender today - partial payment may prevent repo"

    def test_overdue_from_due_date_raises_housing_alert(self, aggregator, budget):
        """Overdue days implied by a past due date count toward eviction risk."""
        rent = _bill("rent", "Rent", "1200", -47)
        assessment = aggregator.assess([rent], budget, NOW)

        housing = [a for a in assessment.crisis_alerts if a.alert_type == AlertType.HOUSING_RISK]
        assert len(housing) == 1
        assert housing[0].description == "Rent is 47 days overdue - eviction risk"
        assert "housing_assistance" in assessment.primary_needs

    def test_overdue_from_due_date_raises_vehicle_alert(self, aggregator, budget):
        """A car loan due 31 days ago is at risk of repossession."""
        car = _bill("car", "Car loan", "400", -31)
        alerts = aggregator.assess([car], budget, NOW).crisis_alerts

        assert [a.alert_type for a in alerts] == [AlertType.TRANSPORTATION_RISK]
        assert alerts[0].description == "Car loan is 31 days overdue - repo risk"

    def test_recent_due_date_raises_no_housing_alert(self, aggregator, budget):
        """Thirty days overdue is not yet severe."""
        rent = _bill("rent", "Rent", "1200", -30)
        alerts = aggregator.assess([rent], budget, NOW).crisis_alerts
        assert AlertType.HOUSING_RISK not in [a.alert_type for a in alerts]

    def test_alerts_feed_resource_assessment(self, aggregator, budget):
        """A shutoff alert makes the resource assessment critical."""
        electric = _bill("electric", "Electric", "120", 1, bill_type=BillType.UTILITIES)
        assessment = aggregator.assess([electric], budget, NOW)

        assert assessment.resource_assessment.severity == ResourceSeverity.CRITICAL
        assert assessment.primary_needs == ["utility_assistance"]


class TestAssessment:
    """Tests for the full assessment."""

    def test_available_money(self, aggregator, budget):
        money = aggregator.assess([], budget, NOW).available_money

        assert money.total_income == Decimal("2800")
        assert money.essential_needs == Decimal("2100")
        assert money.available_for_bills == Decimal("700")

    def test_deterministic(self, aggregator, budget, card_bill):
        """Same inputs and time give identical assessments."""
        first = aggregator.assess([card_bill], budget, NOW)
        second = aggregator.assess([card_bill], budget, NOW)

        assert first == second
        assert first.generated_at == NOW

    def test_consequence_timeline(self, aggregator, budget, card_bill):
        """Announced shutoffs show up in the timeline and urgent actions."""
        electric = _bill(
            "electric", "Electric", "120", 2,
            shutoff_date=TODAY + timedelta(days=2),
        )
        assessment = aggregator.assess([card_bill, electric], budget, NOW)

        assert [e.bill_id for e in assessment.consequence_timeline.urgent] == ["electric"]
        assert assessment.urgent_actions[0].startswith("URGENT: Pay Electric $120.00 within 2 days")

    def test_consequence_keywords(self):
        """Consequences follow name keywords in order."""
        assert consequence_for(Bill(id="a", name="Water utility", current_balance=Decimal("1"))) == "Water shutoff"
        assert consequence_for(Bill(id="b", name="Car note", current_balance=Decimal("1"))) == "Vehicle repossession"
        assert consequence_for(Bill(id="c", name="Phone", current_balance=Decimal("1"))) == "Service disruption"
