"""Raw page fetch for the client-side preview."""

import logging

from fastapi import APIRouter, Depends, Request

from listingtrust.config import Settings, get_settings
from listingtrust.ingest import fetch_page_html
from listingtrust.pipeline import validate_url
from listingtrust.schemas.models import PageFetchResult

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/fetch-page", response_model=PageFetchResult, response_model_exclude_none=True)
async def fetch_page(request: Request, settings: Settings = Depends(get_settings)):
    """Return ``{blocked: false, html}`` or ``{blocked: true}``; never an error status."""
    try:
        body = await request.json()
    except ValueError:
        return PageFetchResult(blocked=True)

    url = body.get("url") if isinstance(body, dict) else None
    url = url.strip() if isinstance(url, str) else ""
    if validate_url(url):
        return PageFetchResult(blocked=True)

    return await fetch_page_html(url, timeout=settings.page_fetch_timeout_seconds)
