"""Bill priority scoring.

PriorityScorer assigns each bill an urgency score and level from its type,
due date, essential flag, late fee and interest rate. Scored bills are new
copies; the input bills are never modified.
"""

from datetime import date, datetime
from typing import Optional, Union

import structlog

from .config import EngineSettings
from .models import Bill, PriorityBreakdown
from .priority_scores import (
    get_base_score,
    get_due_date_modifier,
    get_essential_modifier,
    get_interest_modifier,
    get_late_fee_modifier,
    get_priority_level,
)

logger = structlog.get_logger()


class PriorityScorer:
    """Score and rank bills by urgency."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def breakdown(self, bill: Bill, as_of: Union[date, datetime]) -> PriorityBreakdown:
        """Every component of a bill's score, with the raw and reported totals."""
        days_until_due = bill.days_until(as_of)
        base = get_base_score(bill.bill_type)
        due_date = get_due_date_modifier(days_until_due)
        essential = get_essential_modifier(bill.is_essential)
        late_fee = get_late_fee_modifier(bill.late_fee)
        interest = get_interest_modifier(bill.interest_rate)

        raw_score = base + due_date + essential + late_fee + interest
        score = raw_score
        if self.settings.clamp_priority_scores:
            score = max(0, min(raw_score, self.settings.max_priority_score))

        return PriorityBreakdown(
            base_score=base,
            due_date_modifier=due_date,
            essential_modifier=essential,
            late_fee_modifier=late_fee,
            interest_modifier=interest,
            days_until_due=days_until_due,
            raw_score=raw_score,
            score=score,
        )

    def score_bill(self, bill: Bill, as_of: Union[date, datetime]) -> Bill:
        """Return a copy of the bill with score, level and breakdown filled in."""
        breakdown = self.breakdown(bill, as_of)
        level = get_priority_level(breakdown.score)

        if breakdown.was_clamped:
            logger.debug(
                "priority_score_clamped",
                bill_id=bill.id,
                raw_score=breakdown.raw_score,
                score=breakdown.score,
            )

        return bill.model_copy(update={
            "priority_score": breakdown.score,
            "priority_level": level,
            "priority_breakdown": breakdown,
        })

    def score_bills(self, bills: list[Bill], as_of: Union[date, datetime]) -> list[Bill]:
        """Score every bill, keeping input order."""
        scored = [self.score_bill(bill, as_of) for bill in bills]
        logger.info("bills_scored", count=len(scored))
        return scored

    def rank_bills(self, bills: list[Bill], as_of: Union[date, datetime]) -> list[Bill]:
        """Score every bill and sort by score, highest first (stable)."""
        return sorted(
            self.score_bills(bills, as_of),
            key=lambda b: b.priority_score,
            reverse=True,
        )


__all__ = ["PriorityScorer"]
