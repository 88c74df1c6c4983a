"""Dashboard pages. The pages are static; all data comes from the JSON API."""

import os
from fastapi import APIRouter
from fastapi.responses import FileResponse

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")

router = APIRouter()


@router.get("/", include_in_schema=False)
async def dashboard():
    return FileResponse(os.path.join(STATIC_DIR, "index.html"), media_type="text/html")


@router.get("/code/{code}", include_in_schema=False)
async def link_stats_page(code: str):
    return FileResponse(os.path.join(STATIC_DIR, "stats.html"), media_type="text/html")
