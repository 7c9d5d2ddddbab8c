"""Custom exceptions for the DropDebt engine.

This module provides the exception hierarchy used by the calculation engine.
All exceptions inherit from DropDebtError, making it easy to catch every
engine-specific error in one place.

Only genuine input problems are raised. A household that cannot cover its
bills is a normal result (``is_affordable=False``, ``is_viable=False``, an
elevated severity), never an exception.

Example:
    try:
        budget = calculator.calculate(income_sources, expenses, now=now)
    except InvalidInputError as e:
        logger.warning("rejected_snapshot", field=e.field, reason=e.message)
        raise
    except DropDebtError as e:
        logger.error(f"Calculation failed: {e}")
"""

from typing import Any, Optional


class DropDebtError(Exception):
    """Base exception for all DropDebt engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise DropDebtError("Something went wrong", details={"code": 500})
        DropDebtError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize DropDebtError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the caller can fix the problem and retry.
                Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class InvalidInputError(DropDebtError):
    """Error raised when a financial snapshot cannot be processed.

    Raised before any computation starts, for negative amounts, unknown
    payment frequencies, an empty income list, duplicate identifiers, or
    bills that reach the allocator without a priority score.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.

    Example:
        >>> raise InvalidInputError(
        ...     "Proposed payment cannot be negative",
        ...     field="proposed_payment",
        ...     value="-10",
        ...     constraint="Must be >= 0",
        ... )
        InvalidInputError: Proposed payment cannot be negative
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize InvalidInputError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by correcting the
                input. Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ConfigurationError(DropDebtError):
    """Error raised when engine settings are invalid.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Cushion cap is below the cushion floor",
        ...     config_key="DROPDEBT_CUSHION_CAP",
        ...     expected=">= 100",
        ...     actual="50",
        ... )
        ConfigurationError: Cushion cap is below the cushion floor
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed at runtime.
                Defaults to False.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "DropDebtError",
    "InvalidInputError",
    "ConfigurationError",
]
