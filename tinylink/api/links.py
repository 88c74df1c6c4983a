from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ..database import get_db
from ..schemas import LinkCreate, LinkResponse, DeleteResponse, ErrorResponse
from ..services import links as link_service
from ..config import settings

router = APIRouter()

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}

@router.post(
    "/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def shorten_link(
    link_in: LinkCreate,
    db: AsyncSession = Depends(get_db)
):
    link = await link_service.create_short_link(db, link_in.destination, link_in.code)
    return link_service.to_response(link, settings.BASE_URL)

@router.get("/links", response_model=List[LinkResponse])
async def list_links(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    links = await link_service.list_links(db, search)
    return [link_service.to_response(link, settings.BASE_URL) for link in links]

@router.get("/links/{code}", response_model=LinkResponse, responses=ERROR_RESPONSES)
async def get_link_stats(
    code: str,
    db: AsyncSession = Depends(get_db)
):
    link = await link_service.get_link(db, code)
    return link_service.to_response(link, settings.BASE_URL)

@router.delete("/links/{code}", response_model=DeleteResponse, responses=ERROR_RESPONSES)
async def delete_link(
    code: str,
    db: AsyncSession = Depends(get_db)
):
    await link_service.delete_link(db, code)
    return DeleteResponse(ok=True)
