"""
Creator Score - deterministic composite scoring for social media creators.

Turns raw per-platform metrics into normalized metrics, a point-based
composite score with a tier, and an alternate niche score that favors small,
highly engaged audiences.
"""

from typing import Iterable, Optional

__version__ = "1.0.0"
__author__ = "Creator Score Team"

from .errors import CreatorScoreError, MetricsContractError, CreatorNotFoundError
from .models.config import ScoringConfig, TierBand
from .models.schemas import (
    CompositeScore,
    CreatorTier,
    NormalizedMetrics,
    PlatformData,
    ScoreBreakdown,
    ScoringResult,
)
from .scoring.normalizer import DataNormalizer, PlatformInput
from .scoring.composite_scorer import CompositeScorer, MetricsInput
from .scoring.niche_scorer import NicheScorer
from .engine import CreatorScoringEngine
from .storage.supabase_client import SupabaseClient

_default_config = ScoringConfig()


def normalize_data(platforms: Iterable[PlatformInput]) -> NormalizedMetrics:
    """Normalize platform data with the default configuration."""
    return DataNormalizer(_default_config).normalize_data(platforms)


def calculate_composite_score(
    metrics: MetricsInput, platforms_data: Iterable[PlatformInput]
) -> CompositeScore:
    """Composite score with the default configuration."""
    return CompositeScorer(_default_config).calculate_composite_score(metrics, platforms_data)


def calculate_niche_score(metrics: MetricsInput, niche_factor: Optional[float] = None) -> float:
    """Niche score with the default configuration."""
    return NicheScorer(_default_config).calculate_niche_score(metrics, niche_factor)


def determine_tier(score: float, total_reach: int) -> CreatorTier:
    """Tier for a score/reach pair with the default configuration."""
    return CompositeScorer(_default_config).determine_tier(score, total_reach)


__all__ = [
    "CreatorScoreError",
    "MetricsContractError",
    "CreatorNotFoundError",
    "ScoringConfig",
    "TierBand",
    "CompositeScore",
    "CreatorTier",
    "NormalizedMetrics",
    "PlatformData",
    "ScoreBreakdown",
    "ScoringResult",
    "DataNormalizer",
    "CompositeScorer",
    "NicheScorer",
    "CreatorScoringEngine",
    "SupabaseClient",
    "normalize_data",
    "calculate_composite_score",
    "calculate_niche_score",
    "determine_tier",
]
