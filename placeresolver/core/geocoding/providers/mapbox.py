"""Mapbox Places adapter (structured places)."""

from typing import Any, Optional

from geopy.geocoders import MapBox
from geopy.location import Location

from placeresolver.core.geocoding.constants import (
    MAPBOX_PLACE_TYPES,
    MAPBOX_TYPE_CONFIDENCE,
)
from placeresolver.core.geocoding.models import (
    Coordinates,
    PlaceComponents,
    PlaceMatch,
    PlaceType,
    ResolveOptions,
)
from placeresolver.core.geocoding.providers.base import GeocodingProvider
from placeresolver.core.geocoding.scoring import clamp, match_confidence, rank_factor


class MapboxProvider(GeocodingProvider):
    """Mapbox adapter.

    Mapbox gives no absolute confidence. It is inferred from the result's
    rank and place type, scaled by ``relevance`` when the feature has one.
    """

    name = "mapbox"

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize the Mapbox adapter.

        Args:
            api_key: Mapbox access token; without it the adapter is disabled
            **kwargs: Passed to GeocodingProvider
        """
        super().__init__(**kwargs)
        self.api_key = api_key

    def is_configured(self) -> bool:
        return bool(self.api_key) or self._geocoder is not None

    def _build_geocoder(self) -> MapBox:
        return MapBox(api_key=self.api_key, timeout=self.timeout)

    def _search(self, text: str, options: ResolveOptions) -> Any:
        params: dict[str, Any] = {"exactly_one": False}
        if options.preferred_country:
            params["country"] = options.preferred_country.lower()
        if options.bias_location:
            params["proximity"] = (options.bias_location.lat, options.bias_location.lng)
        return self.geocoder.geocode(text, **params)

    @staticmethod
    def _place_type(feature: dict[str, Any]) -> PlaceType:
        place_types = feature.get("place_type") or ["place"]
        return PlaceType(MAPBOX_PLACE_TYPES.get(place_types[0], "city"))

    @staticmethod
    def _components(feature: dict[str, Any]) -> PlaceComponents:
        values: dict[str, Optional[str]] = {}
        # The feature itself may be the city or region it describes
        entries = [feature, *(feature.get("context") or [])]
        for item in entries:
            category = str(item.get("id", "")).split(".")[0]
            text = item.get("text")
            if category == "place":
                values.setdefault("city", text)
            elif category == "region":
                values.setdefault("state", text)
            elif category == "country":
                values.setdefault("country", text)
                short_code = item.get("short_code") or (item.get("properties") or {}).get(
                    "short_code"
                )
                if short_code:
                    values.setdefault("country_code", short_code.upper())
            elif category == "neighborhood":
                values.setdefault("neighborhood", text)
            elif category == "postcode":
                values.setdefault("postal_code", text)
        return PlaceComponents(**values)

    def _to_match(self, location: Location, rank: int, text: str) -> PlaceMatch:
        feature = location.raw
        lng, lat = feature["center"]
        place_type = self._place_type(feature)
        relevance = clamp(float(feature.get("relevance", 1.0)))
        inferred = MAPBOX_TYPE_CONFIDENCE[place_type.value] * rank_factor(rank) * relevance
        display_name = feature["place_name"]
        return PlaceMatch(
            display_name=display_name,
            coordinates=Coordinates(lat=float(lat), lng=float(lng)),
            raw_confidence=match_confidence(text, display_name, inferred),
            place_type=place_type,
            components=self._components(feature),
        )
