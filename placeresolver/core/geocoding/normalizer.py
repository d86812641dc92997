"""Query text normalization.

``normalize`` produces cache keys. ``extract_landmark`` and
``preprocess_query`` produce the text actually sent to providers.
"""

import re
from typing import Optional

from placeresolver.core.geocoding.constants import (
    FUZZY_MAX_VARIATIONS,
    PROXIMITY_PATTERNS,
    TRAVEL_WORDS,
)

_WHITESPACE = re.compile(r"\s+")


def normalize(raw: str) -> str:
    """Canonicalize query text into a stable cache key.

    Lower-cases, trims, and collapses internal whitespace runs to a single
    space. Idempotent.

    Args:
        raw: Query text as given

    Returns:
        Normalized key
    """
    return _WHITESPACE.sub(" ", raw.strip().lower())


def cache_key(query: str, preferred_country: Optional[str] = None) -> str:
    """Build the cache key for a query.

    The preferred country changes what providers return, so it is part of
    the key when set.
    """
    key = normalize(query)
    if preferred_country:
        key = f"{key}|country={normalize(preferred_country)}"
    return key


def extract_landmark(query: str) -> Optional[str]:
    """Extract the place from proximity phrasings like "near Disney World".

    Args:
        query: Raw query text

    Returns:
        The wrapped place, or None if the query is not a proximity phrase
    """
    for pattern in PROXIMITY_PATTERNS:
        match = pattern.search(query)
        if match:
            landmark = match.group(1).strip()
            if landmark:
                return landmark
    return None


def preprocess_query(query: str) -> str:
    """Remove travel filler words that do not help providers.

    Falls back to the trimmed query when nothing else is left.
    """
    processed = _WHITESPACE.sub(" ", TRAVEL_WORDS.sub(" ", query)).strip(" ,")
    return processed or query.strip()


def provider_text(query: str) -> str:
    """Text sent to providers for a raw query."""
    return preprocess_query(extract_landmark(query) or query)


def typo_variations(query: str) -> list[str]:
    """Spacing variations for compound place names.

    "san francisco" → "sanfrancisco"; "sanfrancisco" → "sanfranc isco", ...

    Args:
        query: Raw query text

    Returns:
        Up to FUZZY_MAX_VARIATIONS distinct variations, original excluded
    """
    query = query.strip()
    variations: list[str] = []

    if " " in query:
        variations.append(_WHITESPACE.sub("", query))
    elif len(query) > 6:
        for i in range(3, 6):
            if len(query) > i:
                variations.append(f"{query[:-i]} {query[-i:]}")

    # dict.fromkeys keeps first-seen order
    unique = [v for v in dict.fromkeys(variations) if v != query]
    return unique[:FUZZY_MAX_VARIATIONS]
