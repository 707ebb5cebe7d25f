# birdspot/services/ebird.py
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..core.config import settings
from ..utils.http import get_json

logger = logging.getLogger(__name__)


class EBirdError(Exception):
    pass


class EBirdNotConfigured(EBirdError):
    def __init__(self):
        super().__init__("Server-side API key not configured.")


class EBirdFetchFailed(EBirdError):
    def __init__(self):
        super().__init__("Internal server error during fetch to eBird.")


class EBirdUpstreamError(EBirdError):
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"eBird API Error: {status_code}. Details: {detail}...")


def _headers() -> Dict[str, str]:
    """X-eBirdApiToken header; the key never leaves the server."""
    if not settings.ebird_api_key:
        logger.error("EBIRD_API_KEY is not set in environment variables.")
        raise EBirdNotConfigured()
    return {"X-eBirdApiToken": settings.ebird_api_key}


async def _fetch(path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    headers = _headers()
    url = f"{settings.ebird_base}{path}"
    clean = {k: v for k, v in (params or {}).items() if v is not None}
    try:
        data = await get_json(url, headers=headers, params=clean, timeout=settings.ebird_timeout)
    except httpx.HTTPStatusError as e:
        body = e.response.text[:200]
        logger.warning("eBird %s -> %s", path, e.response.status_code)
        raise EBirdUpstreamError(e.response.status_code, body) from e
    except httpx.RequestError as e:
        logger.exception("eBird request failed: %s", path)
        raise EBirdFetchFailed() from e

    if not isinstance(data, list):
        # eBird answers lists; anything else is treated as "no records"
        logger.warning("eBird %s returned %s, expected a list", path, type(data).__name__)
        return []
    return data


async def nearby_hotspots(lat: float, lng: float, dist_km: float | None = None,
                          max_results: int | None = None) -> List[Dict[str, Any]]:
    """
    GET /ref/hotspot/geo — hotspots around a point (raw eBird records).
    """
    return await _fetch("/ref/hotspot/geo", {
        "lat": lat,
        "lng": lng,
        "dist": dist_km if dist_km is not None else settings.search_dist_km,
        "maxResults": max_results if max_results is not None else settings.search_max_results,
        "fmt": "json",
    })


async def hotspot_recent_observations(loc_id: str, max_results: int | None = None) -> List[Dict[str, Any]]:
    """
    GET /data/obs/hotspot/recent/{locId} — recent observations at one hotspot.
    """
    return await _fetch(f"/data/obs/hotspot/recent/{quote(loc_id, safe='')}", {"maxResults": max_results})


async def recent_observations_near(lat: float, lng: float, max_results: int | None = None) -> List[Dict[str, Any]]:
    """
    GET /data/obs/geo/recent — recent observations around a point.
    """
    return await _fetch("/data/obs/geo/recent", {"lat": lat, "lng": lng, "maxResults": max_results})
