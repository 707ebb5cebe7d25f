# birdspot/services/hotspots.py
from typing import Any, Iterable, Optional

from ..core.config import settings
from ..schemas.records import RankOutcome
from ..utils.geo import Coordinate
from .matching import match_observations
from .normalize import normalize_location, normalize_observation
from .ranking import rank_and_filter


def enrich_and_rank(
    raw_locations: Iterable[Any],
    raw_observations: Iterable[Any],
    reference: Optional[Coordinate],
    *,
    match_radius_km: float | None = None,
    max_display_km: float | None = None,
    earth_radius_km: float | None = None,
    filter_by_distance: bool = True,
) -> RankOutcome:
    """
    Full pass: normalize -> match -> dedup -> rank/filter.
    Radii default to the configured values; the raw inputs are only read.
    """
    earth = earth_radius_km if earth_radius_km is not None else settings.earth_radius_km
    match_r = match_radius_km if match_radius_km is not None else settings.match_radius_km
    display_r = max_display_km if max_display_km is not None else settings.max_display_km

    locations = [normalize_location(r) for r in (raw_locations or [])]
    observations = [normalize_observation(r) for r in (raw_observations or [])]

    species = match_observations(observations, locations, match_radius_km=match_r, earth_radius_km=earth)
    return rank_and_filter(
        locations,
        reference,
        species,
        max_display_km=display_r if filter_by_distance else None,
        earth_radius_km=earth,
    )
