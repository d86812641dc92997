"""Best-result selection and alternatives assembly."""

from collections.abc import Sequence

from placeresolver.core.geocoding.constants import (
    DEDUPE_DEGREES,
    MAX_ALTERNATIVES,
    MIN_CONFIDENCE_THRESHOLD,
    TIE_EPSILON,
)
from placeresolver.core.geocoding.errors import NoResultsError
from placeresolver.core.geocoding.models import (
    Alternative,
    GeocodeResult,
    ProviderResult,
)
from placeresolver.core.geocoding.scoring import clamp
from placeresolver.core.logging import get_logger

logger = get_logger(__name__)


class Disambiguator:
    """Pick one result from provider candidates and rank the rest."""

    def __init__(
        self,
        min_confidence_threshold: float = MIN_CONFIDENCE_THRESHOLD,
        max_alternatives: int = MAX_ALTERNATIVES,
        tie_epsilon: float = TIE_EPSILON,
        dedupe_degrees: float = DEDUPE_DEGREES,
    ) -> None:
        """Initialize the disambiguator.

        Args:
            min_confidence_threshold: Floor for alternatives (best one kept regardless)
            max_alternatives: Cap on returned alternatives
            tie_epsilon: Confidence gap treated as a tie, decided by provider priority
            dedupe_degrees: Alternatives closer than this to a kept place are dropped
        """
        self.min_confidence_threshold = min_confidence_threshold
        self.max_alternatives = max_alternatives
        self.tie_epsilon = tie_epsilon
        self.dedupe_degrees = dedupe_degrees

    def select(self, candidates: Sequence[ProviderResult], query: str) -> GeocodeResult:
        """Choose the best candidate and build the final result.

        Args:
            candidates: Provider results in chain order
            query: Original caller query, stored on the result

        Returns:
            GeocodeResult for the winner with ranked alternatives

        Raises:
            NoResultsError: No candidates
        """
        if not candidates:
            raise NoResultsError()

        winner = self._pick_winner(candidates)
        others = [c for c in candidates if c is not winner]

        result = GeocodeResult(
            query=query,
            display_name=winner.display_name,
            coordinates=winner.coordinates,
            confidence=clamp(winner.raw_confidence),
            type=winner.place_type,
            components=winner.components,
            providers=(winner.provider, *(c.provider for c in others)),
            alternatives=tuple(self._alternatives(winner, others)),
        )
        logger.info(
            "geocode_selected",
            display_name=result.display_name,
            confidence=result.confidence,
            providers=list(result.providers),
            alternatives=len(result.alternatives),
        )
        return result

    def _pick_winner(self, candidates: Sequence[ProviderResult]) -> ProviderResult:
        best_confidence = max(clamp(c.raw_confidence) for c in candidates)
        contenders = [
            (position, c)
            for position, c in enumerate(candidates)
            if clamp(c.raw_confidence) >= best_confidence - self.tie_epsilon
        ]
        # Higher priority (lower number) wins near-ties; chain order after that
        _, winner = min(contenders, key=lambda item: (item[1].priority, item[0]))
        return winner

    def _alternatives(
        self, winner: ProviderResult, others: list[ProviderResult]
    ) -> list[Alternative]:
        pool: list[Alternative] = []
        for candidate in [winner, *others]:
            if candidate is not winner:
                pool.append(
                    Alternative(
                        display_name=candidate.display_name,
                        coordinates=candidate.coordinates,
                        confidence=clamp(candidate.raw_confidence),
                    )
                )
            pool.extend(
                Alternative(
                    display_name=match.display_name,
                    coordinates=match.coordinates,
                    confidence=clamp(match.raw_confidence),
                )
                for match in candidate.raw_alternatives
            )

        # Stable sort keeps provider order among equal confidences
        pool.sort(key=lambda alt: alt.confidence, reverse=True)

        unique: list[Alternative] = []
        for alt in pool:
            if alt.coordinates.is_near(winner.coordinates, self.dedupe_degrees):
                continue
            if any(alt.coordinates.is_near(kept.coordinates, self.dedupe_degrees) for kept in unique):
                continue
            unique.append(alt)

        confident = [a for a in unique if a.confidence >= self.min_confidence_threshold]
        if not confident and unique:
            confident = unique[:1]
        return confident[: self.max_alternatives]
