import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

EARTH_RADIUS_KM = 6371.0
# slack for radius comparisons; haversine rounding lands a hair past exact radii
RADIUS_TOLERANCE_KM = 1e-9


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return f if math.isfinite(f) else None


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    @classmethod
    def parse(cls, lat, lng) -> Optional["Coordinate"]:
        """
        Builds a Coordinate from loosely typed values (numbers or numeric strings).
        Returns None (unknown) when either side is missing, non-finite or out of range.
        """
        la, lo = _to_float(lat), _to_float(lng)
        if la is None or lo is None:
            return None
        if not (-90.0 <= la <= 90.0 and -180.0 <= lo <= 180.0):
            return None
        return cls(la, lo)


def distance_km(a: Coordinate, b: Coordinate, earth_radius_km: float = EARTH_RADIUS_KM) -> float:
    """
    Great-circle (haversine) distance in km between two known coordinates.
    """
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # clamp: rounding can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return earth_radius_km * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distances_km(origin: Coordinate, lats: np.ndarray, lngs: np.ndarray,
                 earth_radius_km: float = EARTH_RADIUS_KM) -> np.ndarray:
    """
    Haversine from one origin to many points at once (arrays in degrees).
    """
    lat1 = math.radians(origin.lat)
    lat2 = np.radians(lats)
    dlat = lat2 - lat1
    dlon = np.radians(lngs - origin.lng)
    h = np.sin(dlat / 2) ** 2 + math.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    return earth_radius_km * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def format_distance(km: float) -> str:
    return f"{km:.1f} km" if math.isfinite(km) else ""
