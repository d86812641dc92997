"""Confidence scoring shared by provider adapters.

Adapters turn their native signal into a ``relevance`` in ``[0, 1]`` and
then blend it with how well the returned name matches the query.
"""

import re

from placeresolver.core.geocoding.constants import RANK_DECAY

_WORDS = re.compile(r"[\s,]+")


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def rank_factor(rank: int) -> float:
    """Multiplier for the ``rank``-th result (0 = first)."""
    return clamp(1.0 - RANK_DECAY * rank)


def match_confidence(query: str, result_name: str, relevance: float) -> float:
    """Score how well a provider result matches the query.

    Args:
        query: Text sent to the provider
        result_name: Name returned by the provider
        relevance: Provider-native relevance on the ``[0, 1]`` scale

    Returns:
        Confidence in ``[0, 0.95]``
    """
    relevance = clamp(relevance)
    query_lower = query.lower().strip()
    result_lower = result_name.lower()

    if not query_lower:
        return 0.0

    # Whole query appears in the result name
    if query_lower in result_lower:
        return round(min(0.95, relevance * 0.95), 4)

    query_words = [w for w in _WORDS.split(query_lower) if w]
    result_words = [w for w in _WORDS.split(result_lower) if w]

    matching = [
        q for q in query_words if any(r in q or q in r for r in result_words)
    ]
    base = (len(matching) / len(query_words)) * relevance

    # Single-word query matching a whole token, e.g. "tahoe"
    if len(query_words) == 1 and query_words[0] in result_words:
        return round(min(0.9, base + 0.2), 4)

    return round(min(0.85, base), 4)
