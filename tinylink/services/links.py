import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..exceptions import CodeGenerationError, DuplicateCodeError, InvalidCodeError
from ..models import Link
from ..schemas import LinkResponse
from ..utils import ROUTE_NAMES, generate_random_code, is_valid_code, normalize_url

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


def build_short_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/{code}"


def to_response(link: Link, base_url: str) -> LinkResponse:
    return LinkResponse(
        code=link.code,
        short_url=build_short_url(base_url, link.code),
        original_url=link.original_url,
        click_count=link.click_count,
        last_clicked_at=link.last_clicked_at,
        created_at=link.created_at,
    )


async def create_short_link(db: AsyncSession, url: Optional[str], code: Optional[str] = None) -> Link:
    """Validate the request and store a new link.

    A caller-chosen code is used as is and a clash surfaces as
    ``DuplicateCodeError``. Otherwise random codes are tried until one
    inserts cleanly, at most ``MAX_CODE_ATTEMPTS`` times.
    """
    original_url = normalize_url(url)

    custom_code = code.strip() if code else ""
    if custom_code:
        if not is_valid_code(custom_code):
            raise InvalidCodeError()
        if custom_code in ROUTE_NAMES:
            raise DuplicateCodeError()
        link = await crud.create_link(db, custom_code, original_url)
        logger.info(f"Created link {link.code} -> {link.original_url}")
        return link

    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        candidate = generate_random_code()
        if candidate in ROUTE_NAMES:
            continue
        try:
            link = await crud.create_link(db, candidate, original_url)
        except DuplicateCodeError:
            logger.warning(f"Generated code {candidate} already taken (attempt {attempt}/{MAX_CODE_ATTEMPTS})")
            continue
        logger.info(f"Created link {link.code} -> {link.original_url}")
        return link

    logger.error(f"Could not find a free code after {MAX_CODE_ATTEMPTS} attempts")
    raise CodeGenerationError()


async def get_link(db: AsyncSession, code: str) -> Link:
    return await crud.get_link_by_code(db, code)


async def list_links(db: AsyncSession, search: Optional[str] = None) -> List[Link]:
    return await crud.list_links(db, search)


async def delete_link(db: AsyncSession, code: str) -> None:
    await crud.delete_link(db, code)
    logger.info(f"Deleted link {code}")
