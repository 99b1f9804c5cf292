"""
Niche scorer: favors small, highly engaged audiences over raw reach.
"""

import math
from typing import Optional

from loguru import logger

from ..errors import MetricsContractError
from ..models.config import ScoringConfig
from .composite_scorer import MetricsInput, coerce_metrics


class NicheScorer:
    """Scores creators for niche / micro-influencer campaigns."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def calculate_niche_score(self, metrics: MetricsInput, niche_factor: Optional[float] = None) -> float:
        """
        Calculate a 0-100 niche score.

        The raw score rewards engagement, audience quality and consistency.
        Past the niche reach threshold it is damped by
        ``1 / (1 + niche_factor * penalty_rate * log10(reach / threshold))``,
        so a larger audience never scores higher than a smaller one with the
        same engagement, and scores strictly lower once past the threshold.

        Args:
            metrics: Normalized metrics for the creator
            niche_factor: Reach penalty sensitivity; higher penalizes large
                audiences harder (defaults to the configured factor)

        Returns:
            Niche score between 0 and 100

        Raises:
            MetricsContractError: if metrics are malformed or niche_factor
                is not a finite positive number
        """
        metrics = coerce_metrics(metrics)
        if niche_factor is None:
            niche_factor = self.config.default_niche_factor
        if isinstance(niche_factor, bool) or not isinstance(niche_factor, (int, float)):
            raise MetricsContractError(f'Niche factor must be a number, got {niche_factor!r}')
        if not math.isfinite(niche_factor) or niche_factor <= 0:
            raise MetricsContractError(f'Niche factor must be a finite positive number, got {niche_factor}')

        raw = self.raw_score(metrics)
        score = raw * self.reach_multiplier(metrics.total_reach, niche_factor)
        score = round(max(0.0, min(100.0, score)), 2)

        logger.debug(f"Niche score {score} (raw {raw:.2f}, reach {metrics.total_reach})")
        return score

    def raw_score(self, metrics) -> float:
        """Engagement, quality and consistency bonuses before the reach penalty."""
        engagement_bonus = min(
            30.0,
            metrics.average_engagement_rate / self.config.niche_target_engagement_rate * 20,
        )
        quality_bonus = metrics.audience_quality.overall_score * 0.4
        consistency_bonus = metrics.content_consistency * 20

        return engagement_bonus + quality_bonus + consistency_bonus + self.config.niche_base_score

    def reach_multiplier(self, total_reach: int, niche_factor: float) -> float:
        """1 up to the niche threshold, then strictly decreasing with reach."""
        threshold = self.config.niche_reach_threshold
        if total_reach <= threshold:
            return 1.0

        decades_over = math.log10(total_reach / threshold)
        return 1 / (1 + niche_factor * self.config.niche_penalty_rate * decades_over)
