"""
Scoring engine: pulls platform data for a creator, scores it and hands the
result to a sink.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from loguru import logger

from .errors import CreatorNotFoundError, CreatorScoreError, MetricsContractError
from .models.config import ScoringConfig
from .models.schemas import CreatorTier, ScoringResult
from .scoring.composite_scorer import CompositeScorer
from .scoring.niche_scorer import NicheScorer
from .scoring.normalizer import DataNormalizer, PlatformInput, coerce_platform_data


class PlatformDataSource(Protocol):
    """Supplies raw per-platform payloads for a creator."""

    def get_platform_data(self, creator_id: str) -> List[PlatformInput]:
        ...


class CreatorIndex(Protocol):
    """Lists creators last scored into a tier."""

    def get_creator_ids_by_tier(self, tier: CreatorTier, limit: int = 100) -> List[str]:
        ...


class ScoreSink(Protocol):
    """Persists a scoring result against a creator id."""

    def save_score(self, result: ScoringResult) -> bool:
        ...


class CreatorScoringEngine:
    """Runs normalize -> score for creators and forwards results to storage."""

    def __init__(
        self,
        source: Optional[PlatformDataSource] = None,
        sink: Optional[ScoreSink] = None,
        config: Optional[ScoringConfig] = None,
    ):
        """
        Initialize engine.

        Args:
            source: Where platform data is read from
            sink: Where scores are written to (optional)
            config: Scoring configuration shared by every component
        """
        self.config = config or ScoringConfig()
        self.source = source
        self.sink = sink
        self.normalizer = DataNormalizer(self.config)
        self.scorer = CompositeScorer(self.config)
        self.niche_scorer = NicheScorer(self.config)

        logger.info("Creator scoring engine initialized")

    def score_platform_data(
        self,
        creator_id: str,
        platforms: Iterable[PlatformInput],
        include_niche: bool = True,
        niche_factor: Optional[float] = None,
        as_of: Optional[datetime] = None,
    ) -> ScoringResult:
        """
        Score a creator from platform payloads already in hand.

        Args:
            creator_id: Creator identifier
            platforms: One payload per platform
            include_niche: Whether to compute the niche score as well
            niche_factor: Reach penalty sensitivity for the niche score
            as_of: Time recency is measured against

        Returns:
            ScoringResult

        Raises:
            MetricsContractError: if the payloads are invalid
        """
        platforms_data = coerce_platform_data(platforms)
        metrics = self.normalizer.normalize_data(platforms_data)
        score = self.scorer.calculate_composite_score(metrics, platforms_data, as_of=as_of)
        niche_score = (
            self.niche_scorer.calculate_niche_score(metrics, niche_factor) if include_niche else None
        )

        return ScoringResult(
            creator_id=creator_id,
            metrics=metrics,
            score=score,
            niche_score=niche_score,
            scored_at=as_of or datetime.now(timezone.utc),
        )

    def score_creator(
        self,
        creator_id: str,
        include_niche: bool = True,
        niche_factor: Optional[float] = None,
    ) -> ScoringResult:
        """
        Fetch, score and persist a single creator.

        Raises:
            CreatorNotFoundError: if the source has no platform data
            MetricsContractError: if the platform data is invalid
        """
        if self.source is None:
            raise CreatorScoreError("No platform data source configured")

        logger.info(f"Scoring creator: {creator_id}")
        try:
            payloads = self.source.get_platform_data(creator_id)
            if not payloads:
                raise CreatorNotFoundError(f"No platform data available for creator: {creator_id}")

            result = self.score_platform_data(creator_id, payloads, include_niche, niche_factor)

            if self.sink is not None and not self.sink.save_score(result):
                logger.warning(f"Score for creator {creator_id} was not persisted")

            logger.info(
                f"Scored creator {creator_id}: {result.score.overall_score} "
                f"({result.score.tier.value}), {len(payloads)} platforms"
            )
            return result

        except Exception as e:
            logger.error(f"Scoring failed for creator {creator_id}: {e}")
            raise

    def score_creators(
        self,
        creator_ids: Sequence[str],
        include_niche: bool = True,
        niche_factor: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Score a batch of creators. A failing creator does not stop the batch.

        Returns:
            Dictionary with batch results
        """
        logger.info(f"Starting batch scoring for {len(creator_ids)} creators")

        results: Dict[str, Any] = {
            'success': True,
            'total_creators': len(creator_ids),
            'successful': 0,
            'failed': 0,
            'results': [],
        }

        for creator_id in creator_ids:
            try:
                result = self.score_creator(creator_id, include_niche, niche_factor)
                results['results'].append({'success': True, **result.to_dict()})
                results['successful'] += 1
            except Exception as e:
                results['results'].append({
                    'success': False,
                    'creator_id': creator_id,
                    'error': str(e),
                })
                results['failed'] += 1

        results['success'] = results['failed'] == 0

        logger.info(
            f"Completed batch scoring: {results['successful']} successful, {results['failed']} failed"
        )
        return results

    def score_creators_by_tier(
        self,
        tier: CreatorTier,
        limit: int = 100,
        include_niche: bool = True,
        niche_factor: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Rescore every creator last scored into a tier.

        The source must also list creators by tier (see CreatorIndex).

        Returns:
            Dictionary with batch results

        Raises:
            CreatorScoreError: if the source cannot list creators by tier
        """
        lister = getattr(self.source, 'get_creator_ids_by_tier', None)
        if lister is None:
            raise CreatorScoreError("Platform data source cannot list creators by tier")

        tier = CreatorTier(tier)
        creator_ids = lister(tier, limit=limit)
        logger.info(f"Rescoring {len(creator_ids)} creators in tier {tier.value}")
        return self.score_creators(creator_ids, include_niche, niche_factor)

    @staticmethod
    def compare_creators(results: Sequence[ScoringResult]) -> Dict[str, str]:
        """
        Pick the best creator for each headline metric.

        Returns:
            Creator id per category; ties go to the earliest result

        Raises:
            MetricsContractError: if no results are given
        """
        if not results:
            raise MetricsContractError("No creators to compare")

        def best(metric: Callable[[ScoringResult], float]) -> str:
            return max(results, key=metric).creator_id

        return {
            'best_overall': best(lambda r: r.score.overall_score),
            'best_engagement': best(lambda r: r.metrics.average_engagement_rate),
            'best_reach': best(lambda r: r.metrics.total_reach),
            'best_growth': best(lambda r: r.metrics.growth_rate),
            'most_consistent': best(lambda r: r.metrics.content_consistency),
        }
