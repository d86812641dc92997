"""Tests for query normalization and provider text preparation."""

import pytest

from placeresolver.core.geocoding.normalizer import (
    cache_key,
    extract_landmark,
    normalize,
    preprocess_query,
    provider_text,
    typo_variations,
)


class TestNormalize:
    """Cache key normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Austin, Texas", "austin, texas"),
            ("  Disney   World ", "disney world"),
            ("LAKE\tTAHOE\n", "lake tahoe"),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test case folding, trimming and whitespace collapsing."""
        assert normalize(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["  Austin,  TX ", "NEAR\t\tTahoe", "São  Paulo", "already normal"]
    )
    def test_normalize_is_idempotent(self, raw):
        """Test normalizing twice equals normalizing once."""
        assert normalize(normalize(raw)) == normalize(raw)

    def test_equivalent_queries_share_a_key(self):
        """Test case and spacing variants map to one cache key."""
        assert cache_key("Austin,  TX") == cache_key("  austin, tx")

    def test_preferred_country_is_part_of_key(self):
        """Test country preference separates cache keys."""
        assert cache_key("Paris") != cache_key("Paris", "US")
        assert cache_key("Paris", "us") == cache_key("paris", " US ")
        assert cache_key("Paris", "US") == "paris|country=us"


class TestProviderText:
    """Landmark extraction and filler removal."""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("vacation rental near Disney World", "Disney World"),
            ("cabins close to Lake Tahoe", "Lake Tahoe"),
            ("hotels around Austin", "Austin"),
            ("stay by the Golden Gate Bridge", "the Golden Gate Bridge"),
        ],
    )
    def test_extract_landmark(self, query, expected):
        """Test proximity phrasings yield the wrapped place."""
        assert extract_landmark(query) == expected

    def test_extract_landmark_without_proximity_phrase(self):
        """Test plain queries have no landmark."""
        assert extract_landmark("Austin, Texas") is None

    def test_preprocess_removes_travel_words(self):
        """Test filler words are dropped and whitespace collapsed."""
        assert preprocess_query("Tahoe vacation rental") == "Tahoe"
        assert preprocess_query("airbnb in Austin, ") == "in Austin"

    def test_preprocess_keeps_query_when_nothing_remains(self):
        """Test a query made only of filler words is kept as is."""
        assert preprocess_query("  hotel ") == "hotel"

    def test_provider_text(self):
        """Test landmark extraction then filler removal."""
        assert provider_text("vacation rental near Disney World") == "Disney World"
        assert provider_text("Austin, Texas") == "Austin, Texas"


class TestTypoVariations:
    """Spacing variations used by fuzzy resolution."""

    def test_multi_word_query_joins_words(self):
        """Test spaces are removed from multi-word queries."""
        assert typo_variations("san francisco") == ["sanfrancisco"]

    def test_compound_word_is_split(self):
        """Test long single words are split near the end."""
        assert typo_variations("sanfrancisco") == [
            "sanfranci sco",
            "sanfranc isco",
            "sanfran cisco",
        ]

    def test_short_word_has_no_variations(self):
        """Test short single words are left alone."""
        assert typo_variations("austin") == []
