"""
Tests for the scoring engine.
"""

import pytest
from unittest.mock import Mock
from datetime import datetime, timedelta, timezone

from creatorscore.engine import CreatorScoringEngine
from creatorscore.errors import CreatorNotFoundError, CreatorScoreError, MetricsContractError
from creatorscore.models.schemas import CreatorTier, ScoringResult

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_payload(platform='instagram', followers=20000, likes=800, posts=10):
    return {
        'platform': platform,
        'profile': {'username': 'creator', 'follower_count': followers},
        'posts': [
            {
                'id': f'{platform}-{i}',
                'likes': likes + i,
                'comments': likes // 10,
                'timestamp': (NOW - timedelta(days=3 * i)).isoformat(),
                'media_type': 'video',
            }
            for i in range(posts)
        ],
        'last_updated': NOW.isoformat(),
    }


class TestScorePlatformData:
    """Test scoring payloads already in hand."""

    def setup_method(self):
        """Setup test instance."""
        self.engine = CreatorScoringEngine()

    def test_score_platform_data(self):
        """Test a full normalize and score pass."""
        result = self.engine.score_platform_data('creator-1', [make_payload()])

        assert isinstance(result, ScoringResult)
        assert result.creator_id == 'creator-1'
        assert result.metrics.total_reach == 20000
        assert 0 <= result.score.overall_score <= 100
        assert result.score.tier == self.engine.scorer.determine_tier(result.score.overall_score, 20000)
        assert result.niche_score is not None

    def test_without_niche_score(self):
        """Test the niche score can be skipped."""
        result = self.engine.score_platform_data('creator-1', [make_payload()], include_niche=False)

        assert result.niche_score is None

    def test_as_of_pins_scored_at(self):
        """Test results scored as of a fixed time are reproducible."""
        first = self.engine.score_platform_data('creator-1', [make_payload()], as_of=NOW)
        second = self.engine.score_platform_data('creator-1', [make_payload()], as_of=NOW)

        assert first == second
        assert first.scored_at == NOW

    def test_invalid_payload(self):
        """Test malformed payloads raise a contract error."""
        with pytest.raises(MetricsContractError):
            self.engine.score_platform_data('creator-1', [{'platform': 'instagram'}])

    def test_to_dict(self):
        """Test results flatten for storage."""
        data = self.engine.score_platform_data('creator-1', [make_payload()], as_of=NOW).to_dict()

        assert data['creator_id'] == 'creator-1'
        assert data['tier'] in [tier.value for tier in CreatorTier]
        assert set(data['breakdown']) == {'engagement', 'followers', 'growth', 'consistency'}
        assert data['scored_at'] == NOW.isoformat()


class TestScoreCreator:
    """Test fetching, scoring and persisting creators."""

    def setup_method(self):
        """Setup test instance."""
        self.source = Mock()
        self.sink = Mock()
        self.source.get_platform_data.return_value = [make_payload()]
        self.sink.save_score.return_value = True
        self.engine = CreatorScoringEngine(source=self.source, sink=self.sink)

    def test_score_creator(self):
        """Test a creator is fetched, scored and saved."""
        result = self.engine.score_creator('creator-1')

        assert result.creator_id == 'creator-1'
        self.source.get_platform_data.assert_called_once_with('creator-1')
        self.sink.save_score.assert_called_once_with(result)

    def test_save_failure_still_returns_result(self):
        """Test a failed save does not lose the score."""
        self.sink.save_score.return_value = False

        result = self.engine.score_creator('creator-1')

        assert result.creator_id == 'creator-1'

    def test_creator_not_found(self):
        """Test a creator without platform data."""
        self.source.get_platform_data.return_value = []

        with pytest.raises(CreatorNotFoundError):
            self.engine.score_creator('missing')

        self.sink.save_score.assert_not_called()

    def test_no_source(self):
        """Test scoring by id needs a source."""
        with pytest.raises(CreatorScoreError):
            CreatorScoringEngine().score_creator('creator-1')

    def test_score_creators_batch(self):
        """Test one failing creator does not stop the batch."""
        def get_platform_data(creator_id):
            return [] if creator_id == 'missing' else [make_payload()]

        self.source.get_platform_data.side_effect = get_platform_data

        results = self.engine.score_creators(['creator-1', 'missing', 'creator-2'])

        assert results['success'] is False
        assert results['total_creators'] == 3
        assert results['successful'] == 2
        assert results['failed'] == 1
        assert [r['success'] for r in results['results']] == [True, False, True]
        assert results['results'][1]['creator_id'] == 'missing'
        assert self.sink.save_score.call_count == 2


class TestCompareCreators:
    """Test picking the best creator per metric."""

    def setup_method(self):
        """Setup test instance."""
        self.engine = CreatorScoringEngine()

    def test_compare_creators(self):
        """Test each category names a creator."""
        micro = self.engine.score_platform_data('micro', [make_payload(followers=5000, likes=600)])
        macro = self.engine.score_platform_data('macro', [make_payload(followers=800000, likes=4000)])

        comparison = CreatorScoringEngine.compare_creators([micro, macro])

        assert comparison['best_reach'] == 'macro'
        assert comparison['best_engagement'] == 'micro'
        assert set(comparison) == {
            'best_overall', 'best_engagement', 'best_reach', 'best_growth', 'most_consistent'
        }

    def test_compare_nothing(self):
        """Test comparing an empty list."""
        with pytest.raises(MetricsContractError):
            CreatorScoringEngine.compare_creators([])


class TestScoreCreatorsByTier:
    """Test rescoring every creator in a tier."""

    def setup_method(self):
        """Setup test instance."""
        self.source = Mock()
        self.source.get_platform_data.return_value = [make_payload()]
        self.source.get_creator_ids_by_tier.return_value = ['creator-1', 'creator-2']
        self.engine = CreatorScoringEngine(source=self.source)

    def test_score_creators_by_tier(self):
        """Test creators listed under a tier are fetched and scored."""
        results = self.engine.score_creators_by_tier('gold', limit=10)

        self.source.get_creator_ids_by_tier.assert_called_once_with(CreatorTier.GOLD, limit=10)
        assert results['success'] is True
        assert results['total_creators'] == 2
        assert [r['creator_id'] for r in results['results']] == ['creator-1', 'creator-2']

    def test_empty_tier(self):
        """Test a tier without creators yields an empty batch."""
        self.source.get_creator_ids_by_tier.return_value = []

        results = self.engine.score_creators_by_tier(CreatorTier.PLATINUM)

        assert results['total_creators'] == 0
        assert results['success'] is True
        self.source.get_platform_data.assert_not_called()

    def test_source_without_tier_listing(self):
        """Test a source that cannot list creators by tier."""
        source = Mock(spec=['get_platform_data'])
        engine = CreatorScoringEngine(source=source)

        with pytest.raises(CreatorScoreError):
            engine.score_creators_by_tier(CreatorTier.GOLD)
