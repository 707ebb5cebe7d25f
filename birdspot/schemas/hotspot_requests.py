# birdspot/schemas/hotspot_requests.py
from pydantic import BaseModel, Field
from typing import Any, Optional

class RankRequest(BaseModel):
    # reference point; null or out-of-range degrades to "every distance unknown"
    lat: Optional[float] = None
    lng: Optional[float] = None
    locations: list[Any] = Field(default_factory=list, description="raw hotspot records")
    observations: list[Any] = Field(default_factory=list, description="raw observation records")
    match_radius_km: Optional[float] = Field(None, ge=0)
    max_display_km: Optional[float] = Field(None, ge=0)
    filter_by_distance: bool = True
