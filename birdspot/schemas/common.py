import math
from pydantic import BaseModel

from .records import MatchedSpecies, RankedLocation, RankOutcome, RankStatus
from ..utils.geo import format_distance

class SpeciesOut(BaseModel):
    name: str
    key: str
    sci_name: str | None = None
    obs_dt: str | None = None
    matched_by: str

    @classmethod
    def from_record(cls, sp: MatchedSpecies) -> "SpeciesOut":
        return cls(name=sp.name, key=sp.key, sci_name=sp.scientific_name, obs_dt=sp.obs_dt, matched_by=sp.how)

class HotspotOut(BaseModel):
    loc_id: str
    name: str
    lat: float | None = None
    lng: float | None = None
    distance_km: float | None = None
    distance_text: str = ""
    num_species_all_time: int | None = None
    latest_obs_dt: str | None = None
    species: list[SpeciesOut] = []

    @classmethod
    def from_ranked(cls, r: RankedLocation) -> "HotspotOut":
        loc = r.location
        finite = math.isfinite(r.distance_km)
        return cls(
            loc_id=loc.id,
            name=loc.name,
            lat=loc.coord.lat if loc.coord else None,
            lng=loc.coord.lng if loc.coord else None,
            distance_km=r.distance_km if finite else None,
            distance_text=format_distance(r.distance_km),
            num_species_all_time=loc.num_species_all_time,
            latest_obs_dt=loc.latest_obs_dt,
            species=[SpeciesOut.from_record(s) for s in r.species],
        )

class RankedHotspotsResponse(BaseModel):
    status: RankStatus
    total_candidates: int
    max_display_km: float | None = None
    message: str
    hotspots: list[HotspotOut] = []

    @classmethod
    def from_outcome(cls, outcome: RankOutcome, message: str) -> "RankedHotspotsResponse":
        return cls(
            status=outcome.status,
            total_candidates=outcome.total_candidates,
            max_display_km=outcome.max_display_km,
            message=message,
            hotspots=[HotspotOut.from_ranked(r) for r in outcome.locations],
        )

class HotspotSpeciesResponse(BaseModel):
    loc_id: str
    species: list[SpeciesOut] = []
