"""
Notebox Backend — Web Index Route
===================================

What:  GET / serves the single-page HTML client.
How:   Reads templates/index.html with aiofiles on each request so the page can
       be edited without restarting; a read failure is answered with 500.
"""

import logging
from pathlib import Path

import aiofiles
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Web"])

INDEX_TEMPLATE = Path(__file__).resolve().parent.parent / "templates" / "index.html"


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index() -> HTMLResponse:
    try:
        async with aiofiles.open(INDEX_TEMPLATE, mode="r", encoding="utf-8") as f:
            html = await f.read()
    except OSError as e:
        logger.error("Failed to load template %s: %s", INDEX_TEMPLATE, str(e))
        return HTMLResponse("Failed to load template", status_code=500)

    return HTMLResponse(html)
