# birdspot/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path

class Settings(BaseSettings):
    app_name: str = Field(default="Birdspot Hotspot API", alias="APP_NAME")
    app_env: str = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Keys
    ebird_api_key: str | None = Field(default=None, alias="EBIRD_API_KEY")

    # Bases
    ebird_base: str = Field(default="https://api.ebird.org/v2", alias="EBIRD_BASE")
    ebird_timeout: float = Field(default=30.0, alias="EBIRD_TIMEOUT")

    # Geo (km)
    earth_radius_km: float = Field(default=6371.0, gt=0, alias="EARTH_RADIUS_KM")
    match_radius_km: float = Field(default=0.5, ge=0, alias="MATCH_RADIUS_KM")
    max_display_km: float = Field(default=8.0, ge=0, alias="MAX_DISPLAY_KM")

    # Search defaults passed to eBird
    search_dist_km: float = Field(default=25, alias="SEARCH_DIST_KM")
    search_max_results: int = Field(default=10, alias="SEARCH_MAX_RESULTS")
    species_max_results: int = Field(default=200, alias="SPECIES_MAX_RESULTS")
    obs_max_results: int = Field(default=100, alias="OBS_MAX_RESULTS")

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),  # birdspot/.env
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

settings = Settings()
