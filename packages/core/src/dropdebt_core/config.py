"""Configuration system for the DropDebt engine.

This module provides Pydantic Settings-based configuration with environment
variable support. Every default reproduces the engine's documented behavior,
so an empty environment yields the standard calculation.

Usage:
    from dropdebt_core.config import load_settings

    # Load from environment variables and .env file
    settings = load_settings()

    # Access cushion settings
    print(settings.cushion.cap)

    # Override specific settings
    settings = load_settings(clamp_priority_scores=False)
"""

from decimal import Decimal
from typing import Any

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class CushionSettings(BaseSettings):
    """Emergency cushion estimation settings.

    Environment Variables:
        DROPDEBT_CUSHION_FLOOR: Minimum cushion in dollars
        DROPDEBT_CUSHION_INCOME_RATE: Share of monthly income reserved
        DROPDEBT_CUSHION_PER_DEPENDENT: Extra cushion per dependent
        DROPDEBT_CUSHION_VARIABLE_EXPENSE_RATE: Share of each variable expense added
        DROPDEBT_CUSHION_SEASONAL_MULTIPLIER: Multiplier for seasonal households
        DROPDEBT_CUSHION_SEASONAL_THRESHOLD: |factor - 1| above which a variation counts
        DROPDEBT_CUSHION_CAP: Hard ceiling on the cushion, regardless of income
    """

    model_config = SettingsConfigDict(
        env_prefix="DROPDEBT_CUSHION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    floor: Decimal = Field(
        default=Decimal("100"),
        ge=0,
        description="Minimum cushion in dollars",
    )
    income_rate: Decimal = Field(
        default=Decimal("0.05"),
        ge=0,
        le=1,
        description="Share of monthly income reserved as cushion",
    )
    per_dependent: Decimal = Field(
        default=Decimal("50"),
        ge=0,
        description="Additional cushion per dependent",
    )
    variable_expense_rate: Decimal = Field(
        default=Decimal("0.10"),
        ge=0,
        le=1,
        description="Share of each variable expense category added to the cushion",
    )
    seasonal_multiplier: Decimal = Field(
        default=Decimal("1.2"),
        ge=1,
        description="Cushion multiplier when expenses are significantly seasonal",
    )
    seasonal_threshold: Decimal = Field(
        default=Decimal("0.2"),
        ge=0,
        description="Minimum |adjustment_factor - 1| for a significant seasonal variation",
    )
    cap: Decimal = Field(
        default=Decimal("500"),
        gt=0,
        description="Hard ceiling on the cushion regardless of income",
    )

    @model_validator(mode="after")
    def validate_cap(self) -> "CushionSettings":
        """Ensure the cap is not below the floor."""
        if self.cap < self.floor:
            raise ValueError(
                f"Cushion cap ({self.cap}) cannot be below the cushion floor ({self.floor})"
            )
        return self


class AllocationSettings(BaseSettings):
    """Payment allocation settings for the bill integrator.

    Environment Variables:
        DROPDEBT_ALLOCATION_CRITICAL_THRESHOLD: Score for the essential first pass
        DROPDEBT_ALLOCATION_HIGH_THRESHOLD: Lowest score considered by the second pass
        DROPDEBT_ALLOCATION_PARTIAL_PAYMENT_FLOOR: Smallest partial payment worth making
        DROPDEBT_ALLOCATION_PARTIAL_BALANCE_FLOOR: Balance above which partial payments apply
        DROPDEBT_ALLOCATION_ALLOCATE_UNCOVERED_BILLS: Fund bills the two passes skip
    """

    model_config = SettingsConfigDict(
        env_prefix="DROPDEBT_ALLOCATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    critical_threshold: int = Field(
        default=90,
        ge=0,
        description="Priority score at or above which essential bills are paid first",
    )
    high_threshold: int = Field(
        default=70,
        ge=0,
        description="Priority score at or above which bills enter the second pass",
    )
    partial_payment_floor: Decimal = Field(
        default=Decimal("25"),
        ge=0,
        description="Smallest remaining budget that can be offered as a partial payment",
    )
    partial_balance_floor: Decimal = Field(
        default=Decimal("100"),
        ge=0,
        description="Balance a bill must exceed to receive a partial payment",
    )
    allocate_uncovered_bills: bool = Field(
        default=False,
        description="Fund bills below the second-pass threshold from leftover budget",
    )

    @model_validator(mode="after")
    def validate_thresholds(self) -> "AllocationSettings":
        """Ensure the pass thresholds are ordered."""
        if self.high_threshold > self.critical_threshold:
            raise ValueError(
                f"high_threshold ({self.high_threshold}) cannot exceed "
                f"critical_threshold ({self.critical_threshold})"
            )
        return self


class EngineSettings(BaseSettings):
    """Root configuration for the DropDebt engine.

    Environment Variables:
        DROPDEBT_CRITICAL_MONTH_THRESHOLD: Monthly slack below which a month is critical
        DROPDEBT_CAUTION_RATIO: Available share of income below which status is CAUTION
        DROPDEBT_COMFORTABLE_RATIO: Available share of income above which status can be COMFORTABLE
        DROPDEBT_CLAMP_PRIORITY_SCORES: Clamp priority scores to max_priority_score
        DROPDEBT_MAX_PRIORITY_SCORE: Upper bound of the priority score range

    Example:
        settings = EngineSettings(
            cushion=CushionSettings(cap=Decimal("750")),
            allocation=AllocationSettings(allocate_uncovered_bills=True),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="DROPDEBT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    critical_month_threshold: Decimal = Field(
        default=Decimal("100"),
        description="Funds for debt below this amount mark a month as critical",
    )
    caution_ratio: Decimal = Field(
        default=Decimal("0.2"),
        ge=0,
        le=1,
        description="Available-for-debt share of income below which status is CAUTION",
    )
    comfortable_ratio: Decimal = Field(
        default=Decimal("0.3"),
        ge=0,
        le=1,
        description="Share of income above which a debt-free household is COMFORTABLE",
    )
    clamp_priority_scores: bool = Field(
        default=True,
        description="Clamp additive priority scores to max_priority_score",
    )
    max_priority_score: int = Field(
        default=99,
        gt=0,
        description="Upper bound of the priority score range",
    )

    cushion: CushionSettings = Field(default_factory=CushionSettings)
    allocation: AllocationSettings = Field(default_factory=AllocationSettings)

    @field_validator("max_priority_score")
    @classmethod
    def validate_max_priority_score(cls, v: int) -> int:
        """Keep the ceiling at or above the CRITICAL label minimum."""
        if v < 90:
            raise ValueError(f"max_priority_score must be at least 90, got {v}")
        return v

    @model_validator(mode="after")
    def validate_status_ratios(self) -> "EngineSettings":
        """CAUTION must end at or below where COMFORTABLE begins."""
        if self.caution_ratio > self.comfortable_ratio:
            raise ValueError(
                f"caution_ratio ({self.caution_ratio}) cannot exceed "
                f"comfortable_ratio ({self.comfortable_ratio})"
            )
        return self


def load_settings(**overrides: Any) -> EngineSettings:
    """Load engine settings from the environment, applying overrides.

    Raises:
        ConfigurationError: If the environment or overrides hold invalid values.
    """
    try:
        return EngineSettings(**overrides)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid engine settings: {first.get('msg', str(e))}",
            config_key=location or None,
            expected=first.get("type"),
            actual=first.get("input"),
            details={"error_count": e.error_count()},
        ) from e


__all__ = [
    "CushionSettings",
    "AllocationSettings",
    "EngineSettings",
    "load_settings",
]
