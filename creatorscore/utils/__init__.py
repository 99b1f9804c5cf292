"""Parsing and numeric helpers."""

from .parsers import (
    parse_human_number,
    extract_hashtags,
    extract_mentions,
    safe_divide,
    calculate_engagement_rate,
    interpolate,
)

__all__ = [
    "parse_human_number",
    "extract_hashtags",
    "extract_mentions",
    "safe_divide",
    "calculate_engagement_rate",
    "interpolate",
]
