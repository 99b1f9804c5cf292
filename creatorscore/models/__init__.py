"""Pydantic models for data validation and serialization."""

from .schemas import (
    CreatorTier,
    PlatformPost,
    PlatformProfile,
    PlatformData,
    AudienceQuality,
    ContentFrequency,
    PlatformDistribution,
    NormalizedMetrics,
    ScoreBreakdown,
    CompositeScore,
    CampaignRequirements,
    ScoringResult,
)
from .config import ScoringConfig, TierBand

__all__ = [
    "CreatorTier",
    "PlatformPost",
    "PlatformProfile",
    "PlatformData",
    "AudienceQuality",
    "ContentFrequency",
    "PlatformDistribution",
    "NormalizedMetrics",
    "ScoreBreakdown",
    "CompositeScore",
    "CampaignRequirements",
    "ScoringResult",
    "ScoringConfig",
    "TierBand",
]
