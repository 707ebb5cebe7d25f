import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.config import settings
from .routers import hotspots

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
logger.debug("eBird key configured: %s", bool(settings.ebird_api_key))

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],      # ajusta para producción
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(hotspots.router)

@app.get("/")
def root():
    return {"name": settings.app_name, "env": settings.app_env, "message": "OK"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("birdspot.main:app", host="0.0.0.0", port=3000)
