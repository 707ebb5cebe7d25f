# birdspot/schemas/records.py
# Internal records used by the matching/ranking core (plain dataclasses, not API models).
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

from ..utils.geo import Coordinate

UNKNOWN_HOTSPOT = "Unknown hotspot"


@dataclass(frozen=True)
class Location:
    id: str = ""
    name: str = UNKNOWN_HOTSPOT
    coord: Optional[Coordinate] = None
    num_species_all_time: Optional[int] = None
    latest_obs_dt: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Observation:
    common_name: Optional[str] = None
    scientific_name: Optional[str] = None
    species_code: Optional[str] = None
    location_id: str = ""
    coord: Optional[Coordinate] = None
    obs_dt: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        return self.common_name or self.scientific_name or self.species_code

    @property
    def species_key(self) -> Optional[str]:
        """Dedup key: species code when present, else the display name."""
        return self.species_code or self.display_name


@dataclass(frozen=True)
class MatchedSpecies:
    key: str
    name: str
    scientific_name: Optional[str] = None
    obs_dt: Optional[str] = None
    how: Literal["id", "proximity", "hotspot"] = "id"


@dataclass(frozen=True)
class RankedLocation:
    location: Location
    distance_km: float = math.inf
    species: tuple[MatchedSpecies, ...] = ()


class RankStatus(str, Enum):
    OK = "ok"
    NO_CANDIDATES = "no_candidates"
    ALL_FILTERED = "all_filtered"


@dataclass(frozen=True)
class RankOutcome:
    status: RankStatus
    total_candidates: int
    locations: list[RankedLocation]
    max_display_km: Optional[float] = None
