"""
Divestment kind and holding entry mode enumerations.
"""

from enum import StrEnum


class DivestmentKind(StrEnum):
    """
    Allowed divestment kinds.

    A total divestment liquidates the whole holding, a partial one
    liquidates a slice of its current value.
    """

    TOTAL = "total"
    PARTIAL = "partial"

    @property
    def removes_holding(self) -> bool:
        """Check if confirming this kind deletes the holding."""
        return self == self.TOTAL


class EntryMode(StrEnum):
    """
    Allowed holding entry modes.

    DIRECT: cost basis supplied by the caller.
    DERIVED: cost basis derived from current value and a performance percentage.
    """

    DIRECT = "direct"
    DERIVED = "derived"

    @property
    def is_existing_position(self) -> bool:
        """Check if the mode registers a position bought before tracking began."""
        return self == self.DERIVED
