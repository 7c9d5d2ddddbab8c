"""Audit trail models for calculation transparency.

Each step of a budget calculation is recorded so the household (or a
counselor helping them) can see exactly how the protected amount and the
money available for debt were derived.
"""

from typing import Optional

from pydantic import BaseModel


class AuditEntry(BaseModel):
    """Single recorded calculation step.

    Entries carry no wall-clock timestamp; the owning result records the
    injected calculation time once, so identical inputs give identical trails.

    Attributes:
        step: Name of the calculation step (e.g., "total_monthly_income")
        input_value: Values the step consumed
        output_value: Value the step produced
        source: Rule or data source applied
        notes: Additional context
    """

    model_config = {"frozen": True}

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


__all__ = ["AuditEntry"]
