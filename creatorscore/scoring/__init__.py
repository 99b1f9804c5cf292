"""Normalization and scoring components."""

from .normalizer import DataNormalizer, coerce_platform_data, reference_time
from .composite_scorer import CompositeScorer, coerce_metrics
from .niche_scorer import NicheScorer

__all__ = [
    "DataNormalizer",
    "CompositeScorer",
    "NicheScorer",
    "coerce_platform_data",
    "coerce_metrics",
    "reference_time",
]
