# birdspot/services/ranking.py
import math
from typing import Optional, Sequence

from ..schemas.records import Location, MatchedSpecies, RankedLocation, RankOutcome, RankStatus
from ..utils.geo import EARTH_RADIUS_KM, RADIUS_TOLERANCE_KM, Coordinate, distance_km

MAX_DISPLAY_KM = 8.0


def _distance_or_inf(loc: Location, reference: Optional[Coordinate], earth_radius_km: float) -> float:
    if reference is None or loc.coord is None:
        return math.inf
    return distance_km(reference, loc.coord, earth_radius_km)


def rank_and_filter(
    locations: Sequence[Location],
    reference: Optional[Coordinate],
    species: Optional[Sequence[tuple[MatchedSpecies, ...]]] = None,
    *,
    max_display_km: Optional[float] = MAX_DISPLAY_KM,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> RankOutcome:
    """
    Sorts locations nearest first and drops those beyond `max_display_km`.

    `reference=None` stands for an invalid reference point: every distance is
    infinite. `max_display_km=None` disables the filter, in which case
    unknown-distance locations are kept at the end.
    `species`, when given, is aligned with `locations` (see match_observations).
    """
    if not locations:
        return RankOutcome(RankStatus.NO_CANDIDATES, 0, [], max_display_km)

    if species is None:
        species = [()] * len(locations)
    elif len(species) != len(locations):
        raise ValueError("species must be aligned with locations")

    ranked = [
        RankedLocation(loc, _distance_or_inf(loc, reference, earth_radius_km), tuple(sp))
        for loc, sp in zip(locations, species)
    ]
    # sorted() is stable; inf compares greater than every finite distance
    ranked = sorted(ranked, key=lambda r: r.distance_km)

    if max_display_km is not None:
        limit = max_display_km + RADIUS_TOLERANCE_KM
        ranked = [r for r in ranked if math.isfinite(r.distance_km) and r.distance_km <= limit]

    status = RankStatus.OK if ranked else RankStatus.ALL_FILTERED
    return RankOutcome(status, len(locations), ranked, max_display_km)


def outcome_message(outcome: RankOutcome) -> str:
    if outcome.status is RankStatus.NO_CANDIDATES:
        return "No nearby hotspots found. Try increasing the distance parameter."
    if outcome.status is RankStatus.ALL_FILTERED:
        radius = f"{outcome.max_display_km:g} km" if outcome.max_display_km is not None else "range"
        return f"Hotspots were found, but none within {radius}."
    return f"{len(outcome.locations)} of {outcome.total_candidates} hotspots nearby."
