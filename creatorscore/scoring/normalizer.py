"""
Metrics normalizer: maps raw per-platform feeds to platform-agnostic metrics.
"""

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger
from pydantic import ValidationError

from ..errors import MetricsContractError
from ..models.config import ScoringConfig
from ..models.schemas import (
    AudienceQuality,
    ContentFrequency,
    NormalizedMetrics,
    PlatformData,
    PlatformDistribution,
    PlatformPost,
)
from ..utils.parsers import calculate_engagement_rate, safe_divide

PlatformInput = Union[PlatformData, Dict[str, Any]]


def coerce_platform_data(platforms: Iterable[PlatformInput]) -> List[PlatformData]:
    """
    Validate loosely-typed platform payloads into PlatformData records.

    Args:
        platforms: PlatformData instances or raw dictionaries

    Returns:
        List of PlatformData

    Raises:
        MetricsContractError: if a payload is missing required fields or
            carries invalid values
    """
    if platforms is None:
        raise MetricsContractError('Platform data must be a sequence, got None')

    coerced = []
    for index, item in enumerate(platforms):
        if isinstance(item, PlatformData):
            coerced.append(item)
            continue
        try:
            coerced.append(PlatformData.model_validate(item))
        except ValidationError as e:
            raise MetricsContractError(f'Invalid platform data at index {index}: {e}') from e
    return coerced


def reference_time(platforms: Sequence[PlatformData]) -> Optional[datetime]:
    """Snapshot time of a platform set: the newest update or post timestamp."""
    candidates = [data.last_updated for data in platforms]
    candidates.extend(post.timestamp for data in platforms for post in data.posts)
    return max(candidates) if candidates else None


def _sorted_posts(posts: Iterable[PlatformPost]) -> List[PlatformPost]:
    return sorted(posts, key=lambda post: (post.timestamp, post.id))


def _mean(values: Sequence[float]) -> float:
    return safe_divide(math.fsum(values), len(values))


def _pstdev(values: Sequence[float]) -> float:
    mean = _mean(values)
    return math.sqrt(_mean([(value - mean) ** 2 for value in values]))


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class DataNormalizer:
    """Normalizes per-platform raw metrics into a single NormalizedMetrics record."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize normalizer.

        Args:
            config: Scoring configuration (defaults to ScoringConfig())
        """
        self.config = config or ScoringConfig()

    def normalize_data(self, platforms: Iterable[PlatformInput]) -> NormalizedMetrics:
        """
        Normalize a creator's platform feeds.

        Args:
            platforms: PlatformData records or raw dictionaries, one per platform

        Returns:
            NormalizedMetrics

        Raises:
            MetricsContractError: if no platform data is given or a payload is invalid
        """
        platforms_data = coerce_platform_data(platforms)
        if not platforms_data:
            raise MetricsContractError('No platform data provided for normalization')

        metrics = NormalizedMetrics(
            total_reach=self.calculate_total_reach(platforms_data),
            average_engagement_rate=self.calculate_weighted_engagement(platforms_data),
            content_consistency=self.calculate_content_consistency(platforms_data),
            audience_quality=self.assess_audience_quality(platforms_data),
            growth_rate=self.calculate_growth_rate(platforms_data),
            content_frequency=self.analyze_content_frequency(platforms_data),
            platform_distribution=self.analyze_platform_distribution(platforms_data),
        )

        logger.debug(
            f"Normalized {len(platforms_data)} platforms: reach={metrics.total_reach}, "
            f"engagement={metrics.average_engagement_rate:.2f}%"
        )
        return metrics

    def calculate_total_reach(self, platforms_data: Sequence[PlatformData]) -> int:
        """Sum of follower counts across platforms."""
        return sum(data.follower_count for data in platforms_data)

    def post_engagement_rates(self, data: PlatformData) -> List[float]:
        """
        Per-post engagement rates in percent, oldest post first.

        Posts are measured against followers, falling back to the post's views
        when the profile has no follower count.
        """
        rates = []
        for post in _sorted_posts(data.posts):
            audience = data.follower_count or post.views
            rates.append(calculate_engagement_rate(post.likes, post.comments, post.shares, audience))
        return rates

    def platform_engagement_rate(self, data: PlatformData) -> float:
        """Mean post engagement scaled to the baseline platform."""
        factor = self.config.platform_engagement_factors.get(data.platform, 1.0)
        return _mean(self.post_engagement_rates(data)) * factor

    def calculate_weighted_engagement(self, platforms_data: Sequence[PlatformData]) -> float:
        """Weighted mean engagement rate over platforms that have posts."""
        weighted_sum = []
        total_weight = []

        for data in platforms_data:
            if not data.posts:
                continue
            weight = self.config.platform_weights.get(data.platform, self.config.default_platform_weight)
            weighted_sum.append(self.platform_engagement_rate(data) * weight)
            total_weight.append(weight)

        return safe_divide(math.fsum(weighted_sum), math.fsum(total_weight))

    def analyze_content_frequency(self, platforms_data: Sequence[PlatformData]) -> ContentFrequency:
        """Posts per week inside the look-back window ending at the snapshot time."""
        all_posts = [post for data in platforms_data for post in data.posts]
        if not all_posts:
            return ContentFrequency(posts_per_week=0.0, last_post_date=None)

        now = reference_time(platforms_data)
        window_start = now - timedelta(days=self.config.lookback_days)
        in_window = sum(1 for post in all_posts if post.timestamp >= window_start)
        weeks = self.config.lookback_days / 7

        return ContentFrequency(
            posts_per_week=max(0.0, safe_divide(in_window, weeks)),
            last_post_date=max(post.timestamp for post in all_posts),
        )

    def calculate_posting_consistency(self, posts: Sequence[PlatformPost]) -> float:
        """
        Regularity of the posting cadence.

        Returns 1 - coefficient of variation of the intervals between posts,
        clamped to [0, 1]; 0 with fewer than two distinct posting times.
        """
        ordered = _sorted_posts(posts)
        if len(ordered) < 2:
            return 0.0

        intervals = [
            (later.timestamp - earlier.timestamp).total_seconds()
            for earlier, later in zip(ordered, ordered[1:])
        ]
        mean_interval = _mean(intervals)
        if mean_interval <= 0:
            return 0.0

        cv = _pstdev(intervals) / mean_interval
        return _clamp(1 - cv)

    def calculate_content_type_consistency(self, posts: Sequence[PlatformPost]) -> float:
        """1 - normalized entropy of media types; a single type scores 1."""
        if not posts:
            return 0.0

        counts = Counter(post.media_type or 'unknown' for post in posts)
        if len(counts) == 1:
            return 1.0

        total = len(posts)
        entropy = -math.fsum((n / total) * math.log2(n / total) for n in counts.values())
        return _clamp(1 - entropy / math.log2(len(counts)))

    def calculate_content_consistency(self, platforms_data: Sequence[PlatformData]) -> float:
        """Mean of posting and media-type consistency across platforms with history."""
        scores = []
        for data in platforms_data:
            if len(data.posts) < 2:
                continue
            posting = self.calculate_posting_consistency(data.posts)
            content_type = self.calculate_content_type_consistency(data.posts)
            scores.append((posting + content_type) / 2)

        return _clamp(_mean(scores))

    def calculate_growth_rate(self, platforms_data: Sequence[PlatformData]) -> float:
        """
        Estimate growth from engagement trend.

        Compares mean engagement of the newest third of posts with the oldest
        third, per platform with enough history, clamped and averaged.
        """
        growth_rates = []
        clamp = self.config.growth_clamp

        for data in platforms_data:
            rates = self.post_engagement_rates(data)
            if len(rates) < self.config.growth_min_posts:
                continue

            older = rates[:len(rates) // 3]
            recent = rates[-math.ceil(len(rates) / 3):]
            older_mean = _mean(older)
            growth = safe_divide((_mean(recent) - older_mean) * 100, older_mean)
            growth_rates.append(_clamp(growth, -clamp, clamp))

        return _mean(growth_rates)

    def calculate_authenticity(self, platforms_data: Sequence[PlatformData]) -> float:
        """Penalize suspicious engagement patterns; floor at 0.3."""
        score = 1.0

        for data in platforms_data:
            if not data.posts:
                continue
            rates = self.post_engagement_rates(data)
            rate = _mean(rates)

            # Extremely high engagement can mean bought interactions
            if rate > 20:
                score *= 0.8
            if data.follower_count > 10_000 and rate < 0.5:
                score *= 0.7
            # Near-identical engagement on every post suggests automation
            if len(rates) >= 2 and safe_divide(_pstdev(rates) ** 2, _mean(rates) + 1) < 0.1:
                score *= 0.9

        if any(data.profile.is_verified for data in platforms_data):
            score = min(1.0, score + 0.1)

        return max(0.3, score)

    def calculate_hashtag_consistency(self, posts: Sequence[PlatformPost]) -> float:
        """Share of hashtag usage taken by the top ten tags, scaled to [0, 1]."""
        hashtags = [tag for post in posts for tag in post.hashtags]
        if not hashtags:
            return 0.5

        top = sum(count for _, count in Counter(hashtags).most_common(10))
        return min(1.0, top / len(hashtags) * 2)

    def calculate_engagement_stability(self, rates: Sequence[float]) -> float:
        """Stability of a three-post moving average of engagement."""
        active = [rate for rate in rates if rate > 0]
        if len(active) < 3:
            return 0.5

        moving = [(a + b + c) / 3 for a, b, c in zip(active, active[1:], active[2:])]
        cv = _pstdev(moving) / (_mean(moving) + 1)
        return _clamp(1 - cv)

    def assess_audience_quality(self, platforms_data: Sequence[PlatformData]) -> AudienceQuality:
        """Blend authenticity, engagement and relevance into a 0-100 quality score."""
        with_posts = [data for data in platforms_data if data.posts]
        if not with_posts:
            return AudienceQuality(overall_score=0.0, authenticity=0.0, engagement=0.0, demographics=0.0)

        authenticity = self.calculate_authenticity(with_posts)
        engagement = _clamp(self.calculate_weighted_engagement(with_posts) / 10)

        # Relevance stands in for demographics until audience data is ingested
        relevance = [
            0.5 * self.calculate_hashtag_consistency(data.posts)
            + 0.5 * self.calculate_engagement_stability(self.post_engagement_rates(data))
            for data in with_posts
        ]
        demographics = _clamp(_mean(relevance))

        overall = authenticity * 35 + engagement * 40 + demographics * 25
        return AudienceQuality(
            overall_score=_clamp(overall, 0.0, 100.0),
            authenticity=authenticity,
            engagement=engagement,
            demographics=demographics,
        )

    def analyze_platform_distribution(self, platforms_data: Sequence[PlatformData]) -> PlatformDistribution:
        """Audience share per platform, its diversity and the primary platform."""
        raw_weights: Dict[str, float] = {}
        for data in platforms_data:
            score = data.follower_count * (1 + self.platform_engagement_rate(data) / 100)
            raw_weights[data.platform] = raw_weights.get(data.platform, 0.0) + score

        platforms = sorted(raw_weights)
        total = math.fsum(raw_weights.values())
        if total > 0:
            weights = {platform: raw_weights[platform] / total for platform in platforms}
        else:
            weights = {platform: 1 / len(platforms) for platform in platforms}

        diversity = 0.0
        if len(platforms) > 1:
            entropy = -math.fsum(w * math.log(w) for w in weights.values() if w > 0)
            diversity = _clamp(entropy / math.log(len(platforms)))

        primary = max(platforms, key=lambda platform: weights[platform])
        return PlatformDistribution(
            platform_weights=weights,
            diversity_score=diversity,
            cross_platform_synergy=self.calculate_cross_platform_synergy(platforms_data),
            primary_platform=primary,
        )

    def calculate_cross_platform_synergy(self, platforms_data: Sequence[PlatformData]) -> float:
        """
        How well a creator's platforms reinforce each other.

        Sums a bonus for one username on every platform, cross-promotion
        mentions of the creator's other handles (0.1 each, at most 0.3 per
        platform) and same-day posting correlation, capped at 1.
        """
        if len(platforms_data) < 2:
            return 0.0

        usernames = [(data.profile.username or '').lower() for data in platforms_data]
        branding = 0.3 if usernames[0] and all(name == usernames[0] for name in usernames) else 0.0

        cross_promotion = 0.0
        for data in platforms_data:
            other_handles = [
                (other.profile.username or '').lower()
                for other in platforms_data
                if other.platform != data.platform and other.profile.username
            ]
            mentions = [mention.lower() for post in data.posts for mention in post.mentions]
            cross_mentions = sum(
                1 for mention in mentions if any(handle in mention for handle in other_handles)
            )
            cross_promotion += min(cross_mentions * 0.1, 0.3)

        return min(1.0, branding + cross_promotion + self.calculate_posting_time_correlation(platforms_data))

    def calculate_posting_time_correlation(self, platforms_data: Sequence[PlatformData]) -> float:
        """Share of posting days with more than one post, scaled to 0.4."""
        posts_by_day = Counter(post.timestamp.date() for data in platforms_data for post in data.posts)
        if len(platforms_data) < 2 or not posts_by_day:
            return 0.0

        shared_days = sum(1 for count in posts_by_day.values() if count > 1)
        return shared_days / len(posts_by_day) * 0.4
