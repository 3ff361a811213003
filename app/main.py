import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.routes_api import router as api_router
from app.api.routes_ui import router as ui_router
from app.core.config import get_settings
from app.services.tmdb import TMDBClient

load_dotenv()

# Fails fast when TMDB_API_KEY is missing
settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Application lifespan context manager."""
    client = TMDBClient(settings)
    app.state.tmdb_client = client
    try:
        yield
    finally:
        try:
            await client.aclose()
        except Exception as e:
            logger.error(f"Error closing TMDB client: {e}")


app = FastAPI(
    title="Movie Explorer",
    description="Browse trending and popular movies and TV shows from TMDB",
    version="0.1.0",
    lifespan=app_lifespan,
)

# Mount static files
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# The API router goes first: the UI's /{media_type}/{media_id} route would
# otherwise shadow /api/*
app.include_router(api_router, prefix="/api")
app.include_router(ui_router)
