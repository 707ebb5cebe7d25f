import math

import pytest

from birdspot.utils.geo import EARTH_RADIUS_KM, Coordinate

KM_PER_DEG_LAT = EARTH_RADIUS_KM * math.pi / 180


def north_of(origin: Coordinate, km: float) -> Coordinate:
    """Point `km` due north of origin along its meridian."""
    return Coordinate(origin.lat + km / KM_PER_DEG_LAT, origin.lng)


def hotspot(loc_id, coord, name=None, **extra):
    rec = {"locId": loc_id, "locName": name or f"Hotspot {loc_id}", **extra}
    if coord is not None:
        rec["lat"], rec["lng"] = coord.lat, coord.lng
    return rec


@pytest.fixture
def ref():
    return Coordinate(40.7128, -74.0060)
