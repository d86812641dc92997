"""Data models for geocoding resolution.

Values that leave the service (``GeocodeResult`` and its parts) are frozen
pydantic models. Provider output and cache bookkeeping are plain
dataclasses.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from placeresolver.core.geocoding.constants import DEFAULT_MAX_RESULTS


class PlaceType(StrEnum):
    """Category of a resolved place."""

    CITY = "city"
    NEIGHBORHOOD = "neighborhood"
    REGION = "region"
    COUNTRY = "country"
    POI = "poi"
    ADDRESS = "address"


class Coordinates(BaseModel):
    """A WGS84 point."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    def is_near(self, other: "Coordinates", degrees: float) -> bool:
        """Check whether both axes differ by less than ``degrees``."""
        return abs(self.lat - other.lat) < degrees and abs(self.lng - other.lng) < degrees


class PlaceComponents(BaseModel):
    """Administrative components of a place. All optional."""

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    state: str | None = None
    country: str | None = None
    country_code: str | None = None
    postal_code: str | None = None
    neighborhood: str | None = None


class Alternative(BaseModel):
    """A lower-ranked interpretation of the query."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    coordinates: Coordinates
    confidence: float = Field(..., ge=0, le=1)


class GeocodeResult(BaseModel):
    """The resolved place for one query."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., description="Query as given by the caller")
    display_name: str
    coordinates: Coordinates
    confidence: float = Field(..., ge=0, le=1)
    type: PlaceType
    components: PlaceComponents = Field(default_factory=PlaceComponents)
    providers: tuple[str, ...] = ()
    alternatives: tuple[Alternative, ...] = ()
    suggestion: str | None = Field(
        default=None, description="Spelling variation that produced this result"
    )


@dataclass(frozen=True)
class PlaceMatch:
    """One match from a provider, confidence already on the shared scale."""

    display_name: str
    coordinates: Coordinates
    raw_confidence: float
    place_type: PlaceType = PlaceType.CITY
    components: PlaceComponents = field(default_factory=PlaceComponents)


@dataclass(frozen=True)
class ProviderResult:
    """A provider's best match plus any further matches from the same call."""

    provider: str
    priority: int
    display_name: str
    coordinates: Coordinates
    raw_confidence: float
    place_type: PlaceType = PlaceType.CITY
    components: PlaceComponents = field(default_factory=PlaceComponents)
    raw_alternatives: tuple[PlaceMatch, ...] = ()

    @classmethod
    def from_matches(
        cls, provider: str, priority: int, matches: list[PlaceMatch]
    ) -> "ProviderResult":
        """Build a result from matches ordered best first.

        Args:
            provider: Provider name
            priority: Provider priority (1 = tried first)
            matches: Non-empty list, best match first

        Returns:
            ProviderResult for the first match carrying the rest as alternatives
        """
        best, *rest = matches
        return cls(
            provider=provider,
            priority=priority,
            display_name=best.display_name,
            coordinates=best.coordinates,
            raw_confidence=best.raw_confidence,
            place_type=best.place_type,
            components=best.components,
            raw_alternatives=tuple(rest),
        )


@dataclass
class CacheEntry:
    """A cached result. Owned and mutated only by ``GeocodeCache``."""

    result: GeocodeResult
    timestamp: float
    hit_count: int = 0
    sequence: int = 0


@dataclass(frozen=True)
class CacheStats:
    """Read-only cache counters."""

    size: int
    total_hits: int


@dataclass(frozen=True)
class ResolveOptions:
    """Per-call resolution options."""

    include_alternatives: bool = False
    max_results: int = DEFAULT_MAX_RESULTS
    preferred_country: str | None = None
    bias_location: Coordinates | None = None

    def __post_init__(self) -> None:
        """Validate options."""
        if self.max_results <= 0:
            raise ValueError(f"max_results must be positive, got {self.max_results}")
