"""
Immutable scoring configuration.

Every threshold the normalizer and scorers use lives here so tests and
callers can score against overridden values without touching module state.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .schemas import CreatorTier

Anchors = Tuple[Tuple[float, float], ...]


class TierBand(BaseModel):
    """Minimum score and reach a creator needs to reach a tier."""

    model_config = ConfigDict(frozen=True)

    tier: CreatorTier
    min_score: float = Field(..., ge=0)
    min_reach: int = Field(..., ge=0)


class ScoringConfig(BaseModel):
    """Configuration for normalization and scoring."""

    model_config = ConfigDict(frozen=True)

    # Component caps, in points. overall_score is the sum of the components.
    engagement_cap: float = Field(25.0, gt=0)
    followers_cap: float = Field(25.0, gt=0)
    growth_cap: float = Field(20.0, gt=0)
    consistency_cap: float = Field(30.0, gt=0)

    # (engagement rate %, points)
    engagement_anchors: Anchors = (
        (0.0, 0.0), (0.5, 6.0), (1.0, 10.0), (2.0, 14.0),
        (3.0, 17.0), (5.0, 20.0), (7.0, 23.0), (10.0, 25.0),
    )
    # (total reach, points); interpolated on log10(reach + 1)
    followers_anchors: Anchors = (
        (0, 0.0), (500, 5.0), (1_000, 8.0), (5_000, 11.0), (10_000, 14.0),
        (50_000, 17.0), (100_000, 20.0), (500_000, 23.0), (1_000_000, 25.0),
    )
    # (growth rate %, points)
    growth_anchors: Anchors = (
        (-25.0, 0.0), (-5.0, 4.0), (0.0, 8.0), (5.0, 12.0),
        (10.0, 16.0), (15.0, 18.0), (20.0, 20.0),
    )
    # (posts per week, points)
    frequency_anchors: Anchors = (
        (0.0, 0.0), (1.0, 6.0), (3.0, 9.0), (5.0, 12.0), (7.0, 15.0),
    )
    consistency_weight: float = 15.0

    # Frequency damping by days since the last post: (days, multiplier)
    recency_damping: Tuple[Tuple[float, float], ...] = ((30.0, 0.5), (14.0, 0.8))

    tier_bands: Tuple[TierBand, ...] = (
        TierBand(tier=CreatorTier.PLATINUM, min_score=85, min_reach=300_000),
        TierBand(tier=CreatorTier.GOLD, min_score=70, min_reach=50_000),
        TierBand(tier=CreatorTier.SILVER, min_score=55, min_reach=15_000),
        TierBand(tier=CreatorTier.BRONZE, min_score=40, min_reach=3_000),
    )

    platform_weights: Mapping[str, float] = Field(validate_default=True, default_factory=lambda: {
        'instagram': 0.35,
        'tiktok': 0.35,
        'twitter': 0.20,
    })
    default_platform_weight: float = 0.25
    # Raw engagement differs per platform; rates are scaled to the instagram baseline.
    platform_engagement_factors: Mapping[str, float] = Field(validate_default=True, default_factory=lambda: {
        'instagram': 1.0,
        'tiktok': 0.6,
        'twitter': 2.5,
    })

    lookback_days: int = Field(30, ge=1, le=30)
    growth_min_posts: int = 5
    growth_clamp: float = 50.0

    niche_target_engagement_rate: float = Field(5.0, gt=0)
    niche_reach_threshold: int = Field(10_000, gt=0)
    niche_penalty_rate: float = Field(0.05, gt=0)
    niche_base_score: float = 10.0
    default_niche_factor: float = Field(5.0, gt=0)

    @field_validator(
        'engagement_anchors', 'followers_anchors', 'growth_anchors', 'frequency_anchors'
    )
    @classmethod
    def validate_anchors(cls, v):
        """Anchors must be sorted by x and non-decreasing in y."""
        if len(v) < 2:
            raise ValueError('At least two anchors are required')
        for (x0, y0), (x1, y1) in zip(v, v[1:]):
            if x1 <= x0:
                raise ValueError('Anchor x values must be strictly increasing')
            if y1 < y0:
                raise ValueError('Anchor y values must be non-decreasing')
        return v

    @field_validator('platform_weights', 'platform_engagement_factors')
    @classmethod
    def freeze_mappings(cls, v):
        """Per-platform tables are read-only once the config is built."""
        if any(value < 0 for value in v.values()):
            raise ValueError('Platform weights and factors must be non-negative')
        return MappingProxyType(dict(v))

    @field_validator('tier_bands')
    @classmethod
    def validate_tier_bands(cls, v):
        """Bands run from the highest tier down with non-increasing gates."""
        for upper, lower in zip(v, v[1:]):
            if lower.min_score > upper.min_score or lower.min_reach > upper.min_reach:
                raise ValueError('Tier bands must be ordered from highest to lowest')
        return v

    @model_validator(mode='after')
    def validate_caps(self):
        """Curves may not award more than their component cap."""
        curves = (
            (self.engagement_anchors, self.engagement_cap, 'engagement'),
            (self.followers_anchors, self.followers_cap, 'followers'),
            (self.growth_anchors, self.growth_cap, 'growth'),
        )
        for anchors, cap, name in curves:
            if anchors[-1][1] > cap:
                raise ValueError(f'{name} anchors exceed the {name} cap of {cap}')
        if self.consistency_weight + self.frequency_anchors[-1][1] > self.consistency_cap:
            raise ValueError('consistency weight and frequency anchors exceed the consistency cap')
        return self

    @property
    def max_score(self) -> float:
        """Sum of the component caps."""
        return self.engagement_cap + self.followers_cap + self.growth_cap + self.consistency_cap
