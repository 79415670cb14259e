"""FastAPI backend for the listing trust checker."""

import logging
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from listingtrust.config import get_settings

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

settings = get_settings()

app = FastAPI(
    title="Listing Trust API",
    description="Compares product-page claims against merchant policies and returns a trust verdict.",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
cors_origins = settings.cors_origin_list
cors_origin_regex = settings.cors_origin_regex
logger.info("CORS configured for origins: %s", cors_origins)
if cors_origin_regex:
    logger.info("CORS origin regex: %s", cors_origin_regex)

if settings.offline:
    logger.info("Mode: offline, only the built-in test URLs are analyzed.")
else:
    logger.info(
        "Mode: live, agent API URL %s",
        "configured" if settings.agent_api_url else "*** NOT SET, analyses will fail ***",
    )
cors_kw: dict = {
    "allow_origins": cors_origins,
    "allow_credentials": True,
    "allow_methods": ["*"],
    "allow_headers": ["*"],
}
if cors_origin_regex:
    cors_kw["allow_origin_regex"] = cors_origin_regex
app.add_middleware(CORSMiddleware, **cors_kw)


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------
class HealthResponse(BaseModel):
    status: str
    mode: str


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok", mode=settings.listingtrust_mode)


@app.get("/api/")
async def root():
    """API root."""
    return {"message": "Listing Trust API", "version": app.version}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
from backend.routes import analyze, fetch_page  # noqa: E402

app.include_router(analyze.router, prefix="/api", tags=["analyze"])
app.include_router(fetch_page.router, prefix="/api", tags=["preview"])
