import logging

from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..exceptions import LinkNotFoundError
from ..models import Link

logger = logging.getLogger(__name__)

# Paths browsers and crawlers request on their own; never resolved as codes
RESERVED_PATHS = frozenset({"favicon.ico", "robots.txt"})


def is_reserved(code: str) -> bool:
    return code in RESERVED_PATHS


async def resolve_redirect(db: AsyncSession, code: str) -> Link:
    """Count a visit to ``code`` and return the link to send the visitor to.

    Raises ``LinkNotFoundError`` for reserved paths without touching the
    store, and for unknown codes. Store failures propagate as
    ``StoreUnavailableError`` with nothing recorded.
    """
    if is_reserved(code):
        raise LinkNotFoundError()
    return await crud.record_click_and_fetch(db, code)
