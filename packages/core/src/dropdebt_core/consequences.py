"""Consequence timelines for unpaid bills.

ConsequenceTracker estimates when each unpaid bill turns into a real-world
consequence (shutoff, eviction, repossession, collections) and groups the
events by how soon they happen. An announced ``shutoff_date`` is used as is;
otherwise the date is estimated from the bill's kind and how long ago it was
last paid.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import NamedTuple, Optional, Union

import structlog

from .models import (
    Bill,
    BillStatus,
    ConsequenceEvent,
    ConsequenceTimeline,
    PriorityCategory,
    as_date,
)

logger = structlog.get_logger()

URGENT_DAYS = 3
THIS_WEEK_DAYS = 7
NEXT_WEEK_DAYS = 14
THIS_MONTH_DAYS = 30
# Events further out than this are left off the timeline
HORIZON_DAYS = 90
# Offset used when the kind of bill has no grace period
DEFAULT_CONSEQUENCE_DAYS = 30

NO_DEADLINES_MESSAGE = "No urgent payment deadlines this week"


class ConsequenceRule(NamedTuple):
    """How one kind of bill escalates once it goes unpaid."""
    kind: str
    keywords: tuple[str, ...]
    grace_days: Optional[int]  # None: fixed offset from today
    consequence: str


# Checked in order against the lowercased bill name. Cards and medical bills
# come before cars so "credit card" and "medical care" are not car loans.
CONSEQUENCE_RULES = (
    ConsequenceRule("electric", ("electric", "power"), 45,
                    "Power will be shut off - reconnection fee required"),
    ConsequenceRule("gas", ("gas",), 45,
                    "Gas service disconnected - no heating/cooking"),
    ConsequenceRule("water", ("water", "sewer"), 45,
                    "Water service shut off - reconnection fee required"),
    ConsequenceRule("rent", ("rent",), 30,
                    "Eviction notice posted - court proceedings begin"),
    ConsequenceRule("mortgage", ("mortgage",), 120,
                    "Foreclosure process initiated - home at risk"),
    ConsequenceRule("credit_card", ("credit", "card"), None,
                    "Late fees added - credit score damage"),
    ConsequenceRule("medical", ("medical", "hospital", "doctor"), None,
                    "Account sent to collections - credit damage"),
    ConsequenceRule("car", ("car", "auto", "vehicle"), 60,
                    "Vehicle repossession - transportation lost"),
    ConsequenceRule("insurance", ("insurance",), None,
                    "Coverage cancelled - no protection from claims"),
    ConsequenceRule("phone", ("phone", "cell", "mobile"), None,
                    "Service disconnected - communication lost"),
)

CRITICAL_FALLBACK_CONSEQUENCE = "Service disconnection or legal action"
FALLBACK_CONSEQUENCE = "Late fees and credit damage"


def rule_for(bill: Bill) -> Optional[ConsequenceRule]:
    """The first rule whose keywords appear in the bill name, if any."""
    name = bill.name.lower()
    for rule in CONSEQUENCE_RULES:
        if any(keyword in name for keyword in rule.keywords):
            return rule
    return None


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


def _short_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


class ConsequenceTracker:
    """Build consequence timelines and the payments that prevent them."""

    def create_timeline(
        self,
        bills: list[Bill],
        now: Union[date, datetime],
    ) -> ConsequenceTimeline:
        """
        Estimate a consequence for every unpaid bill and group by timeframe.

        Args:
            bills: Bills to consider; paid and inactive bills are skipped
            now: Reference time; offsets are counted from its date

        Returns:
            ConsequenceTimeline with events soonest first in each group
        """
        today = as_date(now)
        events = []
        for bill in bills:
            if bill.current_balance <= 0 or bill.status != BillStatus.ACTIVE:
                continue
            event = self.event_for(bill, today)
            if event is not None:
                events.append(event)
        events.sort(key=lambda e: e.days_until)

        timeline = ConsequenceTimeline(
            urgent=[e for e in events if e.days_until <= URGENT_DAYS],
            this_week=[e for e in events if e.days_until <= THIS_WEEK_DAYS],
            next_week=[
                e for e in events
                if THIS_WEEK_DAYS < e.days_until <= NEXT_WEEK_DAYS
            ],
            this_month=[
                e for e in events
                if NEXT_WEEK_DAYS < e.days_until <= THIS_MONTH_DAYS
            ],
        )

        logger.info(
            "consequence_timeline_created",
            events=len(events),
            urgent=len(timeline.urgent),
            this_week_total=str(timeline.this_week_total),
        )
        return timeline

    def event_for(self, bill: Bill, today: date) -> Optional[ConsequenceEvent]:
        """The bill's consequence event, or None when beyond the horizon."""
        rule = rule_for(bill)
        deadline = bill.shutoff_date or self.estimate_deadline(bill, rule, today)
        days_until = max(0, (deadline - today).days)
        if days_until > HORIZON_DAYS:
            return None

        severity = bill.effective_category
        if rule is not None:
            consequence = rule.consequence
        elif severity == PriorityCategory.CRITICAL:
            consequence = CRITICAL_FALLBACK_CONSEQUENCE
        else:
            consequence = FALLBACK_CONSEQUENCE

        return ConsequenceEvent(
            bill_id=bill.id,
            bill_name=bill.name,
            amount=bill.current_balance,
            deadline=deadline,
            days_until=days_until,
            consequence=consequence,
            severity=severity,
            can_prevent=days_until > 0,
            prevention_cost=bill.current_balance,
        )

    def estimate_deadline(
        self,
        bill: Bill,
        rule: Optional[ConsequenceRule],
        today: date,
    ) -> date:
        """Grace period left since the last payment, at least one day."""
        if rule is None or rule.grace_days is None:
            return today + timedelta(days=DEFAULT_CONSEQUENCE_DAYS)
        days_since_payment = 0
        if bill.last_payment_date is not None:
            days_since_payment = (today - bill.last_payment_date).days
        return today + timedelta(days=max(1, rule.grace_days - days_since_payment))

    def urgent_actions(self, timeline: ConsequenceTimeline) -> list[str]:
        """Payments to make this week, urgent ones first."""
        actions = [
            f"URGENT: Pay {e.bill_name} {_money(e.amount)} within {e.days_until} days"
            f" to prevent {e.consequence}"
            for e in timeline.urgent
        ]
        urgent_ids = {e.bill_id for e in timeline.urgent}
        actions.extend(
            f"This week: Pay {e.bill_name} {_money(e.amount)} by {_short_date(e.deadline)}"
            f" to prevent {e.consequence}"
            for e in timeline.this_week
            if e.bill_id not in urgent_ids
        )
        return actions or [NO_DEADLINES_MESSAGE]


__all__ = ["ConsequenceTracker", "CONSEQUENCE_RULES", "rule_for"]
