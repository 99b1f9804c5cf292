"""
Shared fixtures for creator scoring tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from creatorscore.models.schemas import (
    AudienceQuality,
    ContentFrequency,
    NormalizedMetrics,
    PlatformData,
    PlatformDistribution,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def metrics_factory():
    """Build NormalizedMetrics with sensible defaults."""

    def build(
        total_reach=10000,
        average_engagement_rate=5.0,
        content_consistency=0.8,
        audience_quality=80.0,
        authenticity=0.8,
        growth_rate=5.0,
        posts_per_week=5.0,
        last_post_date=NOW,
        platform_weights=None,
    ):
        return NormalizedMetrics(
            total_reach=total_reach,
            average_engagement_rate=average_engagement_rate,
            content_consistency=content_consistency,
            audience_quality=AudienceQuality(
                overall_score=audience_quality,
                authenticity=authenticity,
                engagement=0.8,
                demographics=0.7,
            ),
            growth_rate=growth_rate,
            content_frequency=ContentFrequency(
                posts_per_week=posts_per_week,
                last_post_date=last_post_date,
            ),
            platform_distribution=PlatformDistribution(
                platform_weights=platform_weights or {'tiktok': 1.0},
                diversity_score=0.5,
                primary_platform='tiktok',
            ),
        )

    return build


@pytest.fixture
def tiktok_data():
    """One tiktok feed with ten identical posts, two days apart."""
    posts = [
        {
            'id': str(i),
            'likes': 100,
            'comments': 10,
            'shares': 5,
            'timestamp': NOW - timedelta(days=2 * i),
        }
        for i in range(10)
    ]
    return [
        PlatformData(
            platform='tiktok',
            profile={'username': 'creator', 'follower_count': 10000},
            posts=posts,
            last_updated=NOW,
        )
    ]
