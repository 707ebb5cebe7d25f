# birdspot/services/normalize.py
"""
Canonicalizes eBird-ish records whose field names vary between endpoints
(and between hand-written fixtures): lat/latitude, locId/loc_id/locid, ...

Each logical attribute maps to an ordered tuple of accepted source names;
the first one holding a usable value wins.
"""
import logging
from typing import Any, Mapping, Optional

from ..schemas.records import Location, Observation, UNKNOWN_HOTSPOT
from ..utils.geo import Coordinate
from ..utils.time import clean_obs_dt

logger = logging.getLogger(__name__)

LOCATION_FIELDS: dict[str, tuple[str, ...]] = {
    "lat": ("lat", "latitude"),
    "lng": ("lng", "longitude"),
    "id": ("locId", "loc_id", "locid"),
    "name": ("locName", "name"),
    "num_species": ("numSpeciesAllTime",),
    "latest_obs_dt": ("latestObsDt",),
}

OBSERVATION_FIELDS: dict[str, tuple[str, ...]] = {
    "common_name": ("comName", "comname"),
    "scientific_name": ("sciName",),
    "species_code": ("speciesCode", "species_code"),
    "location_id": ("locId", "loc_id", "locationId"),
    "lat": ("lat", "latitude"),
    "lng": ("lng", "longitude"),
    "obs_dt": ("obsDt",),
}


def pick(raw: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    try:
        text = str(value).strip()
    except ValueError:
        # int too large to render (sys.get_int_max_str_digits)
        return None
    return text or None


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def normalize_location(raw: Any) -> Location:
    """
    Never raises: a record that is not a mapping, or whose coordinate cannot be
    read, comes back with coord=None and whatever else could be salvaged.
    """
    if not isinstance(raw, Mapping):
        logger.debug("location record is not a mapping: %r", type(raw).__name__)
        return Location()

    f = LOCATION_FIELDS
    return Location(
        id=_as_text(pick(raw, f["id"])) or "",
        name=_as_text(pick(raw, f["name"])) or UNKNOWN_HOTSPOT,
        coord=Coordinate.parse(pick(raw, f["lat"]), pick(raw, f["lng"])),
        num_species_all_time=_as_int(pick(raw, f["num_species"])),
        latest_obs_dt=clean_obs_dt(pick(raw, f["latest_obs_dt"])),
        raw=dict(raw),
    )


def normalize_observation(raw: Any) -> Observation:
    if not isinstance(raw, Mapping):
        logger.debug("observation record is not a mapping: %r", type(raw).__name__)
        return Observation()

    f = OBSERVATION_FIELDS
    return Observation(
        common_name=_as_text(pick(raw, f["common_name"])),
        scientific_name=_as_text(pick(raw, f["scientific_name"])),
        species_code=_as_text(pick(raw, f["species_code"])),
        location_id=_as_text(pick(raw, f["location_id"])) or "",
        coord=Coordinate.parse(pick(raw, f["lat"]), pick(raw, f["lng"])),
        obs_dt=clean_obs_dt(pick(raw, f["obs_dt"])),
    )
