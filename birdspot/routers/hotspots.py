# birdspot/routers/hotspots.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from ..core.config import settings
from ..schemas.common import HotspotSpeciesResponse, RankedHotspotsResponse, SpeciesOut
from ..schemas.hotspot_requests import RankRequest
from ..services import ebird
from ..services.hotspots import enrich_and_rank
from ..services.matching import species_for_hotspot
from ..services.normalize import normalize_observation
from ..services.ranking import outcome_message
from ..utils.geo import Coordinate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["hotspots"])

MISSING_LAT_LNG = "Missing required latitude or longitude parameters."


# -------- helpers comunes --------
def _upstream_to_http(e: ebird.EBirdError) -> HTTPException:
    if isinstance(e, ebird.EBirdUpstreamError):
        return HTTPException(status_code=e.status_code, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))

def _require_point(lat: Optional[float], lng: Optional[float]):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail=MISSING_LAT_LNG)


@router.get("/_ping", response_class=PlainTextResponse)
def ping():
    return "ok"


# =========================
# PROXIES
# =========================
@router.get("/hotspots")
async def hotspots(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    dist: Optional[float] = None,
    maxResults: Optional[int] = Query(None, ge=1),
):
    _require_point(lat, lng)
    try:
        return await ebird.nearby_hotspots(lat, lng, dist, maxResults)
    except ebird.EBirdError as e:
        raise _upstream_to_http(e) from e


@router.get("/hotspotSpecies", response_model=HotspotSpeciesResponse)
async def hotspot_species(locId: Optional[str] = None, maxResults: Optional[int] = Query(None, ge=1)):
    logger.info("/api/hotspotSpecies locId=%s maxResults=%s", locId, maxResults)
    if not locId or not locId.strip():
        raise HTTPException(status_code=400, detail="Missing required locId parameter.")
    try:
        raw = await ebird.hotspot_recent_observations(locId.strip(), maxResults or settings.species_max_results)
    except ebird.EBirdError as e:
        raise _upstream_to_http(e) from e

    species = species_for_hotspot(normalize_observation(r) for r in raw)
    return HotspotSpeciesResponse(loc_id=locId.strip(), species=[SpeciesOut.from_record(s) for s in species])


@router.get("/recentObservations")
async def recent_observations(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    maxResults: Optional[int] = Query(None, ge=1),
):
    logger.info("/api/recentObservations lat=%s lng=%s maxResults=%s", lat, lng, maxResults)
    _require_point(lat, lng)
    try:
        return await ebird.recent_observations_near(lat, lng, maxResults)
    except ebird.EBirdError as e:
        raise _upstream_to_http(e) from e


# =========================
# RANKED + ENRICHED
# =========================
@router.get("/nearby", response_model=RankedHotspotsResponse)
async def nearby(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    dist: Optional[float] = None,
    maxResults: Optional[int] = Query(None, ge=1),
    obsMaxResults: Optional[int] = Query(None, ge=1),
):
    _require_point(lat, lng)
    tasks = [
        asyncio.create_task(ebird.nearby_hotspots(lat, lng, dist, maxResults)),
        asyncio.create_task(ebird.recent_observations_near(lat, lng, obsMaxResults or settings.obs_max_results)),
    ]
    try:
        raw_hotspots, raw_obs = await asyncio.gather(*tasks)
    except ebird.EBirdError as e:
        raise _upstream_to_http(e) from e
    finally:
        # a failed feed must not leave its sibling running
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    outcome = enrich_and_rank(raw_hotspots, raw_obs, Coordinate.parse(lat, lng))
    logger.info("/api/nearby %s: %d/%d hotspots", outcome.status.value,
                len(outcome.locations), outcome.total_candidates)
    return RankedHotspotsResponse.from_outcome(outcome, outcome_message(outcome))


@router.post("/rank", response_model=RankedHotspotsResponse)
def rank(q: RankRequest):
    outcome = enrich_and_rank(
        q.locations,
        q.observations,
        Coordinate.parse(q.lat, q.lng),
        match_radius_km=q.match_radius_km,
        max_display_km=q.max_display_km,
        filter_by_distance=q.filter_by_distance,
    )
    return RankedHotspotsResponse.from_outcome(outcome, outcome_message(outcome))
