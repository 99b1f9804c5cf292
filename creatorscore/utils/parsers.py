"""
Parsing and numeric helpers shared by the normalizer and the scorers.
"""

import math
import re
from bisect import bisect_right
from typing import List, Optional, Sequence, Tuple


def parse_human_number(text: str) -> Optional[int]:
    """
    Parse human-readable numbers (1.2M, 5.4K, etc.) to integers.

    Args:
        text: String containing human-readable number

    Returns:
        Parsed integer or None if parsing fails

    Examples:
        "1.2M" -> 1200000
        "5.4K" -> 5400
        "1,234" -> 1234
        "12.3K followers" -> 12300
    """
    if not text or not isinstance(text, str):
        return None

    text = text.replace(',', '').strip()
    if not text:
        return None

    match = re.match(r'^([\d.]+)\s*([KMB]?)\b', text, re.IGNORECASE)
    if not match:
        return None

    number_str, suffix = match.groups()
    try:
        number = float(number_str)
    except ValueError:
        return None

    multipliers = {'K': 1_000, 'M': 1_000_000, 'B': 1_000_000_000}
    number *= multipliers.get(suffix.upper(), 1)

    return int(round(number))


def extract_hashtags(text: str) -> List[str]:
    """
    Extract lower-cased hashtags from a caption.

    Args:
        text: Caption text

    Returns:
        List of hashtags (without #)
    """
    if not text or not isinstance(text, str):
        return []

    return [tag.lower() for tag in re.findall(r'#(\w+)', text)]


def extract_mentions(text: str) -> List[str]:
    """Extract mentions (without @) from a caption."""
    if not text or not isinstance(text, str):
        return []

    return re.findall(r'@(\w+)', text)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` for a zero or non-finite denominator or result."""
    if not denominator or not math.isfinite(denominator):
        return default

    result = numerator / denominator
    return result if math.isfinite(result) else default


def calculate_engagement_rate(likes: int, comments: int, shares: int, audience: int) -> float:
    """
    Calculate an engagement rate percentage.

    Args:
        likes: Number of likes
        comments: Number of comments
        shares: Number of shares
        audience: Followers or views the interactions are measured against

    Returns:
        Engagement rate in percent (may exceed 100), 0 when audience is empty
    """
    if not audience or audience <= 0:
        return 0.0

    interactions = (likes or 0) + (comments or 0) + (shares or 0)
    return safe_divide(interactions * 100.0, audience)


def interpolate(anchors: Sequence[Tuple[float, float]], x: float) -> float:
    """
    Piecewise-linear interpolation through sorted ``(x, y)`` anchors.

    Values below the first anchor take the first ``y``; values above the
    last anchor take the last ``y``. Every anchor is hit exactly.
    """
    if not anchors:
        return 0.0

    xs = [point[0] for point in anchors]
    if x <= xs[0]:
        return float(anchors[0][1])
    if x >= xs[-1]:
        return float(anchors[-1][1])

    index = bisect_right(xs, x) - 1
    x0, y0 = anchors[index]
    x1, y1 = anchors[index + 1]
    if x == x0:
        return float(y0)

    return y0 + (x - x0) * (y1 - y0) / (x1 - x0)
