"""
Error Types.

All failures the game reports to the player derive from FireSyncError so the
console can catch them in one place.
"""


class FireSyncError(Exception):
    """Base class for game errors."""


class LoadError(FireSyncError):
    """Catalogue source missing, unreadable, or holding a malformed record."""


class ScoreError(FireSyncError):
    """Balance score is undefined for a record (falloff + recoil == 0)."""


class ConfigError(FireSyncError):
    """Configuration file unreadable or holding invalid values."""


class ValidationError(FireSyncError):
    """Menu or weapon selection outside the valid range."""


class AffordabilityError(FireSyncError):
    """Selected weapon costs more than the current budget."""

    def __init__(self, message: str, price: int, budget: int):
        super().__init__(message)
        self.price = price
        self.budget = budget
