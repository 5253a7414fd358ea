"""
Core enumerations for the investment ledger.

This module provides centralized enumerations for domain concepts
like holding categories, entry modes and divestment kinds.
"""

from .categories import Category
from .divestment_kinds import DivestmentKind, EntryMode

__all__ = ["Category", "DivestmentKind", "EntryMode"]
