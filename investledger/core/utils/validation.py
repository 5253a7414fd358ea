"""
Validation utilities for core domain models.

Provides consistent validation across the application. Checks that feed a
user-facing form go through `RuleCollector` so every violated rule is
reported in one round trip.
"""

import math
from datetime import date
from typing import Any

from investledger.core.enums import Category
from investledger.core.exceptions.ledger import ValidationError


class RuleCollector:
    """Accumulates violated rules and raises them together."""

    def __init__(self) -> None:
        self.reasons: list[str] = []

    def require(self, condition: bool, reason: str) -> bool:
        """Record `reason` when `condition` is false. Returns the condition."""
        if not condition:
            self.reasons.append(reason)
        return condition

    def raise_if_failed(self) -> None:
        """Raise ValidationError listing every recorded reason."""
        if self.reasons:
            raise ValidationError(self.reasons)


def is_number(value: Any) -> bool:
    """Check that a value is a finite real number (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def coerce_category(value: Any) -> Category | None:
    """Return the Category for a value, or None if it is not a known category."""
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        try:
            return Category.from_string(value)
        except ValueError:
            return None
    return None


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a numeric value is zero or positive.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if not is_number(value) or value < 0:
        raise ValidationError(f"{param_name} must be non-negative, got {value}")
    return value


def validate_date(value: Any, param_name: str = "date") -> date:
    """Validate that a value is a calendar date.

    Raises:
        ValidationError: If value is not a date
    """
    if not isinstance(value, date):
        raise ValidationError(f"{param_name} must be a date, got {type(value).__name__}")
    return value
