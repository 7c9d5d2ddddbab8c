"""Financial snapshot: everything the engine needs for one evaluation."""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..exceptions import InvalidInputError
from .bills import Bill
from .budget import EssentialExpenses, IncomeSource


class FinancialSnapshot(BaseModel):
    """Income sources, essential expenses and bills of one household.

    Identifiers must be unique within each collection.
    """

    model_config = {"frozen": True}

    income_sources: list[IncomeSource] = Field(min_length=1)
    expenses: EssentialExpenses = Field(default_factory=EssentialExpenses)
    bills: list[Bill] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "FinancialSnapshot":
        """Reject duplicate income source and bill identifiers."""
        for label, ids in (
            ("income source", [s.id for s in self.income_sources]),
            ("bill", [b.id for b in self.bills]),
        ):
            seen: set[str] = set()
            for item_id in ids:
                if item_id in seen:
                    raise ValueError(f"Duplicate {label} id: {item_id}")
                seen.add(item_id)
        return self

    @property
    def dependents(self) -> int:
        return self.expenses.special_circumstances.dependents

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FinancialSnapshot":
        """Build a snapshot from raw (e.g. JSON-decoded) data.

        Raises:
            InvalidInputError: If any part of the data fails validation.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = e.errors()
            first = errors[0] if errors else {}
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise InvalidInputError(
                f"Invalid financial snapshot: {first.get('msg', str(e))}",
                field=location or None,
                value=first.get("input") if not isinstance(first.get("input"), dict) else None,
                constraint=first.get("type"),
                details={"error_count": e.error_count()},
            ) from e


__all__ = ["FinancialSnapshot"]
