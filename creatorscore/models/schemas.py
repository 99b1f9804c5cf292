"""
Pydantic models for raw platform data, normalized metrics and scores.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..utils.parsers import extract_hashtags, extract_mentions, parse_human_number


def _ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so timestamps from any source compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_count(value: Any) -> Any:
    """Accept human-readable counters such as '1.2K' from scraped payloads."""
    if isinstance(value, str):
        parsed = parse_human_number(value)
        if parsed is None:
            raise ValueError(f'Invalid count: {value!r}')
        return parsed
    return value


class CreatorTier(str, Enum):
    """Discrete quality bracket derived from score and reach."""

    EMERGING = 'emerging'
    BRONZE = 'bronze'
    SILVER = 'silver'
    GOLD = 'gold'
    PLATINUM = 'platinum'

    @property
    def rank(self) -> int:
        """Position of the tier, EMERGING being 0."""
        return list(CreatorTier).index(self)


# Raw input. Unknown fields are dropped here and never reach the scorer.

class PlatformPost(BaseModel):
    """A single post with its engagement counters."""

    model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True)

    id: str
    likes: int = Field(..., ge=0, validation_alias=AliasChoices('likes', 'like_count', 'likesCount'))
    comments: int = Field(..., ge=0, validation_alias=AliasChoices('comments', 'comment_count', 'commentsCount'))
    shares: int = Field(0, ge=0, validation_alias=AliasChoices('shares', 'share_count', 'sharesCount'))
    views: int = Field(0, ge=0, validation_alias=AliasChoices('views', 'view_count', 'viewsCount'))
    timestamp: datetime = Field(..., validation_alias=AliasChoices('timestamp', 'created_at', 'createdAt'))
    media_type: Optional[str] = Field(None, validation_alias=AliasChoices('media_type', 'mediaType'))
    caption: Optional[str] = Field(None, validation_alias=AliasChoices('caption', 'content', 'text'))
    hashtags: List[str] = Field(default_factory=list)
    mentions: List[str] = Field(default_factory=list)

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v):
        """Post ids arrive as strings or integers depending on the platform."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('likes', 'comments', 'shares', 'views', mode='before')
    @classmethod
    def validate_counts(cls, v):
        if v is None:
            return 0
        return _parse_count(v)

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v):
        return _ensure_utc(v)

    @model_validator(mode='before')
    @classmethod
    def derive_tags(cls, values):
        """Fill hashtags and mentions from the caption when not provided."""
        if not isinstance(values, dict):
            return values
        caption = values.get('caption') or values.get('content') or values.get('text')
        if caption and not values.get('hashtags'):
            values = {**values, 'hashtags': extract_hashtags(caption)}
        if caption and not values.get('mentions'):
            values = {**values, 'mentions': extract_mentions(caption)}
        return values


class PlatformProfile(BaseModel):
    """Profile-level counters for one platform."""

    model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True)

    username: Optional[str] = Field(None, validation_alias=AliasChoices('username', 'handle'))
    follower_count: int = Field(
        0, ge=0, validation_alias=AliasChoices('follower_count', 'followers', 'followerCount')
    )
    following_count: int = Field(
        0, ge=0, validation_alias=AliasChoices('following_count', 'following', 'followingCount')
    )
    post_count: Optional[int] = Field(None, ge=0, validation_alias=AliasChoices('post_count', 'postCount'))
    is_verified: bool = Field(False, validation_alias=AliasChoices('is_verified', 'verified', 'isVerified'))

    @field_validator('follower_count', 'following_count', 'post_count', mode='before')
    @classmethod
    def validate_counts(cls, v, info):
        if v is None:
            return None if info.field_name == 'post_count' else 0
        return _parse_count(v)


class PlatformData(BaseModel):
    """One platform's raw feed for a creator, as supplied by ingestion."""

    model_config = ConfigDict(frozen=True, extra='ignore', populate_by_name=True)

    platform: str = Field(..., min_length=1)
    profile: PlatformProfile = Field(default_factory=PlatformProfile)
    posts: List[PlatformPost] = Field(default_factory=list)
    last_updated: datetime = Field(..., validation_alias=AliasChoices('last_updated', 'lastUpdated'))

    @field_validator('platform')
    @classmethod
    def validate_platform(cls, v):
        """Normalize platform identifiers to lower case."""
        v = v.strip().lower()
        if not v:
            raise ValueError('Platform must not be empty')
        return v

    @field_validator('last_updated')
    @classmethod
    def validate_last_updated(cls, v):
        return _ensure_utc(v)

    @property
    def follower_count(self) -> int:
        return self.profile.follower_count


# Normalized metrics. Strict shape: every field is required to be well formed.

_STRICT = ConfigDict(frozen=True, extra='forbid', allow_inf_nan=False)


class AudienceQuality(BaseModel):
    """Audience quality indicators; overall_score is the canonical 0-100 measure."""

    model_config = _STRICT

    overall_score: float = Field(..., ge=0, le=100)
    authenticity: float = Field(..., ge=0, le=1)
    engagement: float = Field(..., ge=0, le=1)
    demographics: float = Field(..., ge=0, le=1)


class ContentFrequency(BaseModel):
    """Posting cadence over the look-back window."""

    model_config = _STRICT

    posts_per_week: float = Field(..., ge=0)
    last_post_date: Optional[datetime] = None

    @field_validator('last_post_date')
    @classmethod
    def validate_last_post_date(cls, v):
        return _ensure_utc(v) if v is not None else v


class PlatformDistribution(BaseModel):
    """How a creator's audience is spread across platforms."""

    model_config = _STRICT

    platform_weights: Dict[str, float] = Field(default_factory=dict)
    diversity_score: float = Field(0.0, ge=0, le=1)
    cross_platform_synergy: float = Field(0.0, ge=0, le=1)
    primary_platform: Optional[str] = None

    @field_validator('platform_weights')
    @classmethod
    def validate_weights(cls, v):
        if any(weight < 0 for weight in v.values()):
            raise ValueError('Platform weights must be non-negative')
        return v


class NormalizedMetrics(BaseModel):
    """Platform-agnostic metrics derived from a creator's platform data."""

    model_config = _STRICT

    total_reach: int = Field(..., ge=0)
    average_engagement_rate: float = Field(..., ge=0)
    content_consistency: float = Field(..., ge=0, le=1)
    audience_quality: AudienceQuality
    growth_rate: float
    content_frequency: ContentFrequency
    platform_distribution: PlatformDistribution = Field(default_factory=PlatformDistribution)


# Scores

class ScoreBreakdown(BaseModel):
    """Additive point contribution of each scoring component."""

    model_config = ConfigDict(frozen=True)

    engagement: float = Field(..., ge=0)
    followers: float = Field(..., ge=0)
    growth: float = Field(..., ge=0)
    consistency: float = Field(..., ge=0)

    @property
    def total(self) -> float:
        return self.engagement + self.followers + self.growth + self.consistency


class CompositeScore(BaseModel):
    """Weighted, tiered quality score for a creator."""

    model_config = ConfigDict(frozen=True)

    overall_score: float = Field(..., ge=0)
    breakdown: ScoreBreakdown
    tier: CreatorTier
    explanation: str = Field(..., min_length=1)
    confidence: float = Field(1.0, ge=0, le=1)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return self.model_dump(mode='json')


class CampaignRequirements(BaseModel):
    """Minimums a campaign expects from a creator."""

    min_reach: Optional[int] = Field(None, ge=0)
    min_engagement: Optional[float] = Field(None, ge=0)
    required_platforms: Optional[int] = Field(None, ge=0)


class ScoringResult(BaseModel):
    """Everything computed for one creator in one scoring pass."""

    model_config = ConfigDict(frozen=True)

    creator_id: str
    metrics: NormalizedMetrics
    score: CompositeScore
    niche_score: Optional[float] = None
    scored_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for database storage."""
        return {
            'creator_id': self.creator_id,
            'overall_score': self.score.overall_score,
            'tier': self.score.tier.value,
            'breakdown': self.score.breakdown.model_dump(mode='json'),
            'explanation': self.score.explanation,
            'confidence': self.score.confidence,
            'niche_score': self.niche_score,
            'metrics': self.metrics.model_dump(mode='json'),
            'scored_at': self.scored_at.isoformat(),
        }
