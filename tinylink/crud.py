import logging
from typing import List, Optional

from sqlalchemy import select, update, delete, or_, case, bindparam, DateTime
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import DuplicateCodeError, LinkNotFoundError, StoreUnavailableError
from .models import Link, utcnow

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

# asyncpg raises plain OSError subclasses when it cannot connect at all
STORE_ERRORS = (SQLAlchemyError, OSError)


async def _store_error(db: AsyncSession, operation: str, code: Optional[str]) -> StoreUnavailableError:
    logger.exception(f"Store failure during {operation} (code={code})")
    try:
        await db.rollback()
    except STORE_ERRORS:
        # The connection is gone; the database discards the open transaction itself
        logger.warning(f"Rollback after failed {operation} did not reach the store")
    return StoreUnavailableError()


async def create_link(db: AsyncSession, code: str, original_url: str) -> Link:
    # The unique constraint on links.code is the duplicate check; no SELECT first.
    link = Link(code=code, original_url=original_url, click_count=0)
    db.add(link)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateCodeError() from e
    except STORE_ERRORS as e:
        raise await _store_error(db, "create", code) from e
    return link


async def get_link_by_code(db: AsyncSession, code: str) -> Link:
    try:
        result = await db.execute(select(Link).where(Link.code == code))
        link = result.scalar_one_or_none()
        await db.commit()
    except STORE_ERRORS as e:
        raise await _store_error(db, "get", code) from e
    if link is None:
        raise LinkNotFoundError()
    return link


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


async def list_links(db: AsyncSession, search: Optional[str] = None) -> List[Link]:
    stmt = select(Link)
    term = (search or "").strip()
    if term:
        pattern = f"%{_escape_like(term)}%"
        stmt = stmt.where(
            or_(
                Link.code.ilike(pattern, escape=LIKE_ESCAPE),
                Link.original_url.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    stmt = stmt.order_by(Link.created_at.desc())

    try:
        result = await db.execute(stmt)
        links = list(result.scalars().all())
        await db.commit()
    except STORE_ERRORS as e:
        raise await _store_error(db, "list", None) from e
    return links


async def delete_link(db: AsyncSession, code: str) -> None:
    try:
        result = await db.execute(delete(Link).where(Link.code == code))
        await db.commit()
    except STORE_ERRORS as e:
        raise await _store_error(db, "delete", code) from e
    if result.rowcount == 0:
        raise LinkNotFoundError()


async def record_click_and_fetch(db: AsyncSession, code: str) -> Link:
    """Count one click on ``code`` and return the row as it stands after the increment.

    A single ``UPDATE ... RETURNING`` does the read, the increment and the
    timestamp write under the row lock, so concurrent clicks on the same code
    serialize in the database and none is lost. The returned ``original_url``
    comes from that same statement: a row deleted concurrently is simply not
    matched, and nothing is written.
    """
    now = bindparam("now", utcnow(), type_=DateTime(timezone=True))
    # Never move last_clicked_at backwards or before created_at, even when
    # another instance with a skewed clock committed first.
    last_clicked_at = case(
        (Link.last_clicked_at > now, Link.last_clicked_at),
        (Link.created_at > now, Link.created_at),
        else_=now,
    )
    stmt = (
        update(Link)
        .where(Link.code == code)
        .values(click_count=Link.click_count + 1, last_clicked_at=last_clicked_at)
        .returning(Link)
        .execution_options(synchronize_session=False, populate_existing=True)
    )

    try:
        result = await db.execute(stmt)
        link = result.scalar_one_or_none()
        await db.commit()
    except STORE_ERRORS as e:
        raise await _store_error(db, "record_click", code) from e

    if link is None:
        raise LinkNotFoundError()
    return link
