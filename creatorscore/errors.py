"""
Exception hierarchy for the creator scoring engine.
"""


class CreatorScoreError(Exception):
    """Base exception for creator scoring errors."""


class MetricsContractError(CreatorScoreError, ValueError):
    """Raised when scoring input is missing, malformed or out of range."""


class CreatorNotFoundError(CreatorScoreError):
    """Raised when no platform data is available for a creator."""
