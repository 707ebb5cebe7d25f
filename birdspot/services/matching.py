# birdspot/services/matching.py
"""
Attributes observations to hotspots.

An observation goes to the hotspot whose id it carries; failing that, to the
nearest hotspot within `match_radius_km` of its own coordinate; failing that,
nowhere. Each hotspot keeps the first sighting per species key.
"""
import logging
from typing import Iterable, Literal, Optional, Sequence

import numpy as np

from ..schemas.records import Location, MatchedSpecies, Observation
from ..utils.geo import EARTH_RADIUS_KM, RADIUS_TOLERANCE_KM, distances_km

logger = logging.getLogger(__name__)

MATCH_RADIUS_KM = 0.5


class SpeciesTally:
    """Ordered, first-wins set of species keyed by `Observation.species_key`."""

    def __init__(self):
        self._by_key: dict[str, MatchedSpecies] = {}

    def add(self, obs: Observation, how: Literal["id", "proximity", "hotspot"] = "id") -> bool:
        key, name = obs.species_key, obs.display_name
        if not key or not name or key in self._by_key:
            return False
        self._by_key[key] = MatchedSpecies(
            key=key,
            name=name,
            scientific_name=obs.scientific_name,
            obs_dt=obs.obs_dt,
            how=how,
        )
        return True

    def __len__(self):
        return len(self._by_key)

    def __contains__(self, key):
        return key in self._by_key

    def as_tuple(self) -> tuple[MatchedSpecies, ...]:
        return tuple(self._by_key.values())


class _NearestIndex:
    """Vectorized nearest-hotspot lookup over the hotspots with a known coordinate."""

    def __init__(self, locations: Sequence[Location], earth_radius_km: float):
        self.positions = [i for i, loc in enumerate(locations) if loc.coord is not None]
        self.ids = [locations[i].id for i in self.positions]
        self.lats = np.array([locations[i].coord.lat for i in self.positions], dtype=float)
        self.lngs = np.array([locations[i].coord.lng for i in self.positions], dtype=float)
        self.earth_radius_km = earth_radius_km

    def nearest(self, obs: Observation, radius_km: float) -> Optional[int]:
        if obs.coord is None or not self.positions:
            return None
        d = distances_km(obs.coord, self.lats, self.lngs, self.earth_radius_km)
        best = float(d.min())
        if best > radius_km + RADIUS_TOLERANCE_KM:
            return None
        tied = np.flatnonzero(d == best)
        if len(tied) == 1:
            return self.positions[int(tied[0])]
        # equal distances: lowest non-empty id, then scan order
        pick = min(tied, key=lambda k: (self.ids[k] == "", self.ids[k], k))
        return self.positions[int(pick)]


def build_id_index(locations: Sequence[Location]) -> dict[str, int]:
    index: dict[str, int] = {}
    for i, loc in enumerate(locations):
        if not loc.id:
            continue
        if loc.id in index:
            logger.warning("duplicate hotspot id %s (positions %d, %d); keeping the later one",
                           loc.id, index[loc.id], i)
        index[loc.id] = i
    return index


def match_observations(
    observations: Iterable[Observation],
    locations: Sequence[Location],
    *,
    match_radius_km: float = MATCH_RADIUS_KM,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> list[tuple[MatchedSpecies, ...]]:
    """
    Returns one species tuple per location, aligned with `locations`.
    Inputs are left untouched.
    """
    by_id = build_id_index(locations)
    nearest = _NearestIndex(locations, earth_radius_km)
    tallies = [SpeciesTally() for _ in locations]

    matched = dropped = 0
    for obs in observations:
        if obs.species_key is None:
            dropped += 1
            continue

        if obs.location_id and obs.location_id in by_id:
            tallies[by_id[obs.location_id]].add(obs, how="id")
            matched += 1
            continue

        pos = nearest.nearest(obs, match_radius_km)
        if pos is not None:
            tallies[pos].add(obs, how="proximity")
            matched += 1
        else:
            dropped += 1
            logger.debug("observation %s (loc %r) matched no hotspot", obs.species_key, obs.location_id)

    logger.info("matched %d observations to %d hotspots, dropped %d", matched, len(locations), dropped)
    return [t.as_tuple() for t in tallies]


def species_for_hotspot(observations: Iterable[Observation]) -> list[MatchedSpecies]:
    """Species list for observations already scoped to one hotspot."""
    tally = SpeciesTally()
    for obs in observations:
        tally.add(obs, how="hotspot")
    return list(tally.as_tuple())
