"""
Composite scorer: turns normalized metrics into a point-based, tiered score.

Each component is scored on its own curve and capped independently; the
overall score is the plain sum of the components, so the caps carry the
weighting:

    engagement   0-25   average engagement rate
    followers    0-25   total reach, on a log scale
    growth       0-20   growth rate, never negative
    consistency  0-30   posting regularity plus posting frequency
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ..errors import MetricsContractError
from ..models.config import ScoringConfig
from ..models.schemas import (
    CampaignRequirements,
    CompositeScore,
    CreatorTier,
    NormalizedMetrics,
    PlatformData,
    ScoreBreakdown,
)
from ..utils.parsers import interpolate
from .normalizer import PlatformInput, coerce_platform_data, reference_time

MetricsInput = Union[NormalizedMetrics, Dict[str, Any]]


def coerce_metrics(metrics: MetricsInput) -> NormalizedMetrics:
    """
    Validate metrics handed to a scorer.

    Raises:
        MetricsContractError: if required fields are missing or malformed
    """
    if isinstance(metrics, NormalizedMetrics):
        return metrics
    if not isinstance(metrics, dict):
        raise MetricsContractError(
            f'Expected NormalizedMetrics or dict, got {type(metrics).__name__}'
        )
    try:
        return NormalizedMetrics.model_validate(metrics)
    except ValidationError as e:
        raise MetricsContractError(f'Invalid normalized metrics: {e}') from e


class CompositeScorer:
    """Scores creators from normalized metrics."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize scorer.

        Args:
            config: Scoring configuration (defaults to ScoringConfig())
        """
        self.config = config or ScoringConfig()
        self._followers_anchors = tuple(
            (math.log10(reach + 1), points) for reach, points in self.config.followers_anchors
        )

    def calculate_composite_score(
        self,
        metrics: MetricsInput,
        platforms_data: Iterable[PlatformInput],
        as_of: Optional[datetime] = None,
    ) -> CompositeScore:
        """
        Calculate a creator's composite score.

        Args:
            metrics: Normalized metrics for the creator
            platforms_data: The platform data the metrics were derived from
            as_of: Time recency and staleness are measured against; defaults
                to the newest snapshot in platforms_data

        Returns:
            CompositeScore with breakdown, tier, explanation and confidence

        Raises:
            MetricsContractError: if metrics or platform data are malformed
        """
        metrics = coerce_metrics(metrics)
        platforms = coerce_platform_data(platforms_data)
        if as_of is not None and as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=timezone.utc)
        now = as_of or reference_time(platforms)

        breakdown = self.calculate_score_breakdown(metrics, now)
        overall_score = self.compute_overall_score(breakdown)
        tier = self.determine_tier(overall_score, metrics.total_reach)

        score = CompositeScore(
            overall_score=overall_score,
            breakdown=breakdown,
            tier=tier,
            explanation=self.explain(breakdown, overall_score, tier),
            confidence=self.calculate_confidence(platforms, metrics, now),
        )
        logger.debug(f"Composite score {score.overall_score} ({score.tier.value})")
        return score

    def calculate_score_breakdown(
        self, metrics: NormalizedMetrics, now: Optional[datetime] = None
    ) -> ScoreBreakdown:
        """Score every component, rounded to two decimals."""
        return ScoreBreakdown(
            engagement=round(self.score_engagement(metrics.average_engagement_rate), 2),
            followers=round(self.score_followers(metrics.total_reach), 2),
            growth=round(self.score_growth(metrics.growth_rate), 2),
            consistency=round(self.score_consistency(metrics, now), 2),
        )

    def score_engagement(self, engagement_rate: float) -> float:
        """
        Map engagement rate (percent) to engagement points.

        Piecewise-linear through the configured anchors: 0% -> 0, 0.5% -> 6,
        5% -> 20, 10% and above -> 25.
        """
        points = interpolate(self.config.engagement_anchors, max(0.0, engagement_rate))
        return min(self.config.engagement_cap, max(0.0, points))

    def score_followers(self, total_reach: int) -> float:
        """Map total reach to follower points with diminishing returns."""
        points = interpolate(self._followers_anchors, math.log10(max(0, total_reach) + 1))
        return min(self.config.followers_cap, max(0.0, points))

    def score_growth(self, growth_rate: float) -> float:
        """Map growth rate to points; decline scores low but never below 0."""
        points = interpolate(self.config.growth_anchors, growth_rate)
        return min(self.config.growth_cap, max(0.0, points))

    def score_frequency(self, posts_per_week: float) -> float:
        return max(0.0, interpolate(self.config.frequency_anchors, max(0.0, posts_per_week)))

    def recency_multiplier(self, last_post_date: Optional[datetime], now: Optional[datetime]) -> float:
        """Damping applied to frequency points when the last post is old."""
        if last_post_date is None or now is None:
            return 1.0

        days_since = (now - last_post_date).total_seconds() / 86400
        for threshold, multiplier in self.config.recency_damping:
            if days_since > threshold:
                return multiplier
        return 1.0

    def score_consistency(self, metrics: NormalizedMetrics, now: Optional[datetime] = None) -> float:
        """Regularity points plus frequency points damped by recency."""
        frequency = metrics.content_frequency
        regularity = metrics.content_consistency * self.config.consistency_weight
        cadence = self.score_frequency(frequency.posts_per_week) * self.recency_multiplier(
            frequency.last_post_date, now
        )
        return min(self.config.consistency_cap, max(0.0, regularity + cadence))

    def compute_overall_score(self, breakdown: ScoreBreakdown) -> float:
        """Sum of component points, clamped to [0, max score]."""
        return round(max(0.0, min(self.config.max_score, breakdown.total)), 2)

    def determine_tier(self, score: float, total_reach: int) -> CreatorTier:
        """
        Assign a tier from score and reach.

        Both gates of a band must pass; a creator with a perfect score and a
        tiny audience stays low, as does a huge audience with a poor score.
        """
        for band in self.config.tier_bands:
            if score >= band.min_score and total_reach >= band.min_reach:
                return band.tier
        return CreatorTier.EMERGING

    def explain(self, breakdown: ScoreBreakdown, overall_score: float, tier: CreatorTier) -> str:
        """Short summary of what drove the score."""
        if overall_score <= 0:
            return (
                f"No measurable engagement, reach, growth or consistency; "
                f"scored 0/{self.config.max_score:g} ({tier.value})"
            )

        components = {
            'engagement': (breakdown.engagement, self.config.engagement_cap),
            'followers': (breakdown.followers, self.config.followers_cap),
            'growth': (breakdown.growth, self.config.growth_cap),
            'consistency': (breakdown.consistency, self.config.consistency_cap),
        }
        ratios = {name: points / cap for name, (points, cap) in components.items()}
        strongest = max(ratios, key=ratios.get)
        weakest = min(ratios, key=ratios.get)

        def describe(name: str) -> str:
            points, cap = components[name]
            return f"{name} ({points:g}/{cap:g})"

        return (
            f"Scored {overall_score:g}/{self.config.max_score:g} ({tier.value}): "
            f"driven by {describe(strongest)}, held back by {describe(weakest)}"
        )

    def calculate_confidence(
        self,
        platforms_data: Iterable[PlatformData],
        metrics: NormalizedMetrics,
        now: Optional[datetime] = None,
    ) -> float:
        """How much the score can be trusted given the amount and age of data."""
        platforms = list(platforms_data)
        confidence = 1.0

        total_posts = sum(len(data.posts) for data in platforms)
        if total_posts < 5:
            confidence *= 0.6
        elif total_posts < 10:
            confidence *= 0.8
        elif total_posts < 20:
            confidence *= 0.9

        if len(platforms) == 1:
            confidence *= 0.85

        if platforms and now is not None:
            oldest_update = min(data.last_updated for data in platforms)
            days_since_update = (now - oldest_update).total_seconds() / 86400
            if days_since_update > 30:
                confidence *= 0.7
            elif days_since_update > 7:
                confidence *= 0.9

        if metrics.content_consistency < 0.3:
            confidence *= 0.9

        if metrics.audience_quality.authenticity < 0.5:
            confidence *= 0.8

        return round(max(0.3, confidence), 4)

    def calculate_campaign_score(
        self,
        metrics: MetricsInput,
        requirements: Union[CampaignRequirements, Dict[str, Any]],
    ) -> float:
        """
        Score how well a creator fits a campaign's minimums.

        Args:
            metrics: Normalized metrics for the creator
            requirements: Campaign minimums

        Returns:
            Fit score between 0 and 100
        """
        metrics = coerce_metrics(metrics)
        if not isinstance(requirements, CampaignRequirements):
            try:
                requirements = CampaignRequirements.model_validate(requirements)
            except ValidationError as e:
                raise MetricsContractError(f'Invalid campaign requirements: {e}') from e

        score = 100.0
        min_reach = requirements.min_reach or 0
        min_engagement = requirements.min_engagement or 0.0

        if metrics.total_reach < min_reach:
            score -= 30
        if metrics.average_engagement_rate < min_engagement:
            score -= 25
        if requirements.required_platforms:
            platform_count = len(metrics.platform_distribution.platform_weights)
            if platform_count < requirements.required_platforms:
                score -= 20

        if metrics.total_reach > min_reach * 2:
            score += 10
        if metrics.average_engagement_rate > min_engagement * 1.5:
            score += 10

        return max(0.0, min(100.0, score))
