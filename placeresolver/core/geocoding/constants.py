"""Tunable constants for geocoding resolution.

Defaults here mirror the values in ``placeresolver.core.config.Settings``
and are used when components are constructed without settings.
"""

import re

# Alternatives
MAX_ALTERNATIVES = 5
MIN_CONFIDENCE_THRESHOLD = 0.4

# A result at or above this confidence stops the provider chain early
ACCEPTANCE_THRESHOLD = 0.5

# Candidates closer than this are decided by provider priority
TIE_EPSILON = 0.05

# Alternatives closer than this (in degrees, on both axes) are duplicates
DEDUPE_DEGREES = 0.1

# Cache
CACHE_EXPIRY_SECONDS = 24 * 60 * 60
MAX_CACHE_SIZE = 1000
CLEANUP_RATIO = 0.8

# Provider calls
REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_RESULTS = 5

# Fuzzy resolution
FUZZY_RETRY_BELOW = 0.7
FUZZY_ACCEPT_ABOVE = 0.6
FUZZY_MAX_VARIATIONS = 3
FUZZY_MAX_RESULTS = 5

# Phrasings that wrap the actual place ("vacation home near Disney World")
PROXIMITY_PATTERNS = [
    re.compile(r"\bnear\s+(.+)", re.I),
    re.compile(r"\bclose\s+to\s+(.+)", re.I),
    re.compile(r"\baround\s+(.+)", re.I),
    re.compile(r"\bby\s+(.+)", re.I),
]

# Travel filler words that do not help providers match a place
TRAVEL_WORDS = re.compile(
    r"\b(vacation|rental|airbnb|hotel|stay|trip|visit|near|around|close to)\b",
    re.I,
)

# Nominatim OSM class/type → place type
NOMINATIM_CITY_TYPES = {"city", "town", "village", "hamlet", "municipality"}
NOMINATIM_NEIGHBORHOOD_TYPES = {"neighbourhood", "suburb", "quarter"}
NOMINATIM_POI_CLASSES = {"tourism", "historic", "leisure", "amenity", "aeroway"}

# Mapbox place_type → place type
MAPBOX_PLACE_TYPES = {
    "country": "country",
    "region": "region",
    "district": "region",
    "place": "city",
    "locality": "city",
    "neighborhood": "neighborhood",
    "poi": "poi",
    "address": "address",
    "postcode": "address",
}

# Mapbox has no absolute score; a base per place type, scaled by rank
MAPBOX_TYPE_CONFIDENCE = {
    "poi": 0.9,
    "city": 0.85,
    "region": 0.8,
    "country": 0.8,
    "neighborhood": 0.75,
    "address": 0.6,
}

# Google has no score at all; results are consistently high quality
GOOGLE_BASE_RELEVANCE = 0.9
GOOGLE_PARTIAL_MATCH_PENALTY = 0.15

# Each rank below the first costs this much confidence
RANK_DECAY = 0.1
