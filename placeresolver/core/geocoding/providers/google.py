"""Google Geocoding API adapter (commercial, billed per call)."""

from typing import Any, Optional

from geopy.geocoders import GoogleV3
from geopy.location import Location

from placeresolver.core.geocoding.constants import (
    GOOGLE_BASE_RELEVANCE,
    GOOGLE_PARTIAL_MATCH_PENALTY,
)
from placeresolver.core.geocoding.models import (
    Coordinates,
    PlaceComponents,
    PlaceMatch,
    PlaceType,
    ResolveOptions,
)
from placeresolver.core.geocoding.providers.base import GeocodingProvider
from placeresolver.core.geocoding.scoring import match_confidence, rank_factor

# Half-size of the bounds used to bias results, in degrees
BIAS_BOUNDS_DEGREES = 0.1

_POI_TYPES = {
    "point_of_interest",
    "establishment",
    "tourist_attraction",
    "amusement_park",
    "natural_feature",
    "park",
    "airport",
}
_ADDRESS_TYPES = {"street_address", "route", "premise", "subpremise", "intersection"}


class GoogleProvider(GeocodingProvider):
    """Google adapter.

    Disabled by default because every call is billed. Google returns no
    score, so confidence starts from a fixed provider quality, is reduced
    for lower ranks and partial matches, then blended with name matching.
    """

    name = "google"

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize the Google adapter.

        Args:
            api_key: Google Geocoding API key; without it the adapter is disabled
            **kwargs: Passed to GeocodingProvider
        """
        kwargs.setdefault("enabled", False)
        super().__init__(**kwargs)
        self.api_key = api_key

    def is_configured(self) -> bool:
        return bool(self.api_key) or self._geocoder is not None

    def _build_geocoder(self) -> GoogleV3:
        return GoogleV3(api_key=self.api_key, timeout=self.timeout)

    def _search(self, text: str, options: ResolveOptions) -> Any:
        params: dict[str, Any] = {"exactly_one": False}
        if options.preferred_country:
            params["region"] = options.preferred_country.lower()
        if options.bias_location:
            lat, lng = options.bias_location.lat, options.bias_location.lng
            params["bounds"] = [
                (lat - BIAS_BOUNDS_DEGREES, lng - BIAS_BOUNDS_DEGREES),
                (lat + BIAS_BOUNDS_DEGREES, lng + BIAS_BOUNDS_DEGREES),
            ]
        return self.geocoder.geocode(text, **params)

    @staticmethod
    def _place_type(result: dict[str, Any]) -> PlaceType:
        types = set(result.get("types") or [])
        if "neighborhood" in types or "sublocality" in types:
            return PlaceType.NEIGHBORHOOD
        if types & _POI_TYPES:
            return PlaceType.POI
        if "country" in types:
            return PlaceType.COUNTRY
        if types & {"administrative_area_level_1", "administrative_area_level_2"}:
            return PlaceType.REGION
        if types & _ADDRESS_TYPES:
            return PlaceType.ADDRESS
        return PlaceType.CITY

    @staticmethod
    def _components(result: dict[str, Any]) -> PlaceComponents:
        values: dict[str, Optional[str]] = {}
        for component in result.get("address_components") or []:
            types = component.get("types") or []
            if "locality" in types:
                values.setdefault("city", component["long_name"])
            elif "administrative_area_level_1" in types:
                values.setdefault("state", component["long_name"])
            elif "country" in types:
                values.setdefault("country", component["long_name"])
                values.setdefault("country_code", component.get("short_name"))
            elif "neighborhood" in types:
                values.setdefault("neighborhood", component["long_name"])
            elif "postal_code" in types:
                values.setdefault("postal_code", component["long_name"])
        return PlaceComponents(**values)

    def _to_match(self, location: Location, rank: int, text: str) -> PlaceMatch:
        result = location.raw
        point = result["geometry"]["location"]
        relevance = GOOGLE_BASE_RELEVANCE * rank_factor(rank)
        if result.get("partial_match"):
            relevance -= GOOGLE_PARTIAL_MATCH_PENALTY
        display_name = result["formatted_address"]
        return PlaceMatch(
            display_name=display_name,
            coordinates=Coordinates(lat=float(point["lat"]), lng=float(point["lng"])),
            raw_confidence=match_confidence(text, display_name, relevance),
            place_type=self._place_type(result),
            components=self._components(result),
        )
