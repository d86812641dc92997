"""OpenStreetMap Nominatim adapter (free, open data)."""

from typing import Any, Optional

from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim
from geopy.location import Location

from placeresolver.core.geocoding.constants import (
    NOMINATIM_CITY_TYPES,
    NOMINATIM_NEIGHBORHOOD_TYPES,
    NOMINATIM_POI_CLASSES,
)
from placeresolver.core.geocoding.models import (
    Coordinates,
    PlaceComponents,
    PlaceMatch,
    PlaceType,
    ResolveOptions,
)
from placeresolver.core.geocoding.providers.base import GeocodingProvider
from placeresolver.core.geocoding.scoring import clamp, match_confidence

# Ask for more than needed; the best match is often not the first
NOMINATIM_FETCH_LIMIT = 10

# Half-size of the viewbox used to bias results, in degrees
BIAS_BOX_DEGREES = 0.5


class NominatimProvider(GeocodingProvider):
    """Nominatim adapter.

    Confidence comes from OSM ``importance`` (already in ``[0, 1]``),
    blended with how well the display name matches the query. Nominatim's
    usage policy allows one request per second, enforced with geopy's
    RateLimiter.
    """

    name = "nominatim"

    def __init__(
        self,
        user_agent: str = "placeresolver/0.1",
        domain: str = "nominatim.openstreetmap.org",
        min_delay_seconds: float = 1.0,
        **kwargs: Any,
    ) -> None:
        """Initialize the Nominatim adapter.

        Args:
            user_agent: User agent required by the Nominatim usage policy
            domain: Nominatim host
            min_delay_seconds: Minimum delay between calls, 0 disables
            **kwargs: Passed to GeocodingProvider
        """
        super().__init__(**kwargs)
        self.user_agent = user_agent
        self.domain = domain
        self.min_delay_seconds = min_delay_seconds
        self._rate_limited_geocode: Optional[RateLimiter] = None

    def _build_geocoder(self) -> Nominatim:
        return Nominatim(
            user_agent=self.user_agent, domain=self.domain, timeout=self.timeout
        )

    def _geocode(self, *args: Any, **kwargs: Any) -> Any:
        if self.min_delay_seconds <= 0:
            return self.geocoder.geocode(*args, **kwargs)
        if self._rate_limited_geocode is None:
            # No retries here: the chain moves on to the next provider instead
            self._rate_limited_geocode = RateLimiter(
                self.geocoder.geocode,
                min_delay_seconds=self.min_delay_seconds,
                max_retries=0,
                swallow_exceptions=False,
            )
        return self._rate_limited_geocode(*args, **kwargs)

    def _search(self, text: str, options: ResolveOptions) -> Any:
        params: dict[str, Any] = {
            "exactly_one": False,
            "limit": max(options.max_results, NOMINATIM_FETCH_LIMIT),
            "addressdetails": True,
            "namedetails": True,
        }
        if options.preferred_country:
            params["country_codes"] = options.preferred_country.lower()
        if options.bias_location:
            lat, lng = options.bias_location.lat, options.bias_location.lng
            params["viewbox"] = [
                (lat - BIAS_BOX_DEGREES, lng - BIAS_BOX_DEGREES),
                (lat + BIAS_BOX_DEGREES, lng + BIAS_BOX_DEGREES),
            ]
        return self._geocode(text, **params)

    @staticmethod
    def _place_type(raw: dict[str, Any]) -> PlaceType:
        osm_class = raw.get("class", "")
        osm_type = raw.get("addresstype") or raw.get("type", "")

        if osm_type in NOMINATIM_CITY_TYPES:
            return PlaceType.CITY
        if osm_type in NOMINATIM_NEIGHBORHOOD_TYPES:
            return PlaceType.NEIGHBORHOOD
        if osm_type in {"state", "region", "province", "county"}:
            return PlaceType.REGION
        if osm_type == "country":
            return PlaceType.COUNTRY
        if osm_class in NOMINATIM_POI_CLASSES:
            return PlaceType.POI
        if osm_class in {"highway", "building"} or osm_type in {"road", "house"}:
            return PlaceType.ADDRESS
        if osm_class == "boundary":
            return PlaceType.REGION
        return PlaceType.CITY

    @staticmethod
    def _components(raw: dict[str, Any]) -> PlaceComponents:
        address = raw.get("address") or {}
        country_code = address.get("country_code")
        return PlaceComponents(
            city=address.get("city") or address.get("town") or address.get("village"),
            state=address.get("state"),
            country=address.get("country"),
            country_code=country_code.upper() if country_code else None,
            postal_code=address.get("postcode"),
            neighborhood=address.get("neighbourhood") or address.get("suburb"),
        )

    def _to_match(self, location: Location, rank: int, text: str) -> PlaceMatch:
        raw = location.raw
        display_name = raw["display_name"]
        importance = raw.get("importance")
        importance = clamp(float(importance)) if importance is not None else 0.5
        return PlaceMatch(
            display_name=display_name,
            coordinates=Coordinates(lat=float(raw["lat"]), lng=float(raw["lon"])),
            raw_confidence=match_confidence(text, display_name, importance),
            place_type=self._place_type(raw),
            components=self._components(raw),
        )
