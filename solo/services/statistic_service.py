"""
Statistic service — per-blog counters.

None of these functions opens a transaction; they run inside the caller's,
so a failure here rolls back whatever the caller already did.
"""
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from solo.exceptions import NotFoundError
from solo.models import Statistic

logger = logging.getLogger(__name__)


async def get_statistic(db: AsyncSession, blog_id: int) -> Statistic | None:
    return await db.get(Statistic, blog_id)


async def _get_or_create(db: AsyncSession, blog_id: int) -> Statistic:
    statistic = await db.get(Statistic, blog_id)
    if statistic is None:
        statistic = Statistic(
            blog_id=blog_id,
            article_count=0,
            published_article_count=0,
            comment_count=0,
            view_count=0,
        )
        db.add(statistic)
        await db.flush()
        logger.debug("Created statistic row for blog_id=%s", blog_id)
    return statistic


async def _adjust(db: AsyncSession, blog_id: int, **deltas: int) -> None:
    # Counters are changed in SQL; a Statistic loaded in this session is stale afterwards.
    values = {name: getattr(Statistic, name) + delta for name, delta in deltas.items()}
    result = await db.execute(
        update(Statistic)
        .where(Statistic.blog_id == blog_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount < 1:
        raise NotFoundError("statistic", blog_id)


async def inc_article_count(db: AsyncSession, blog_id: int, published: bool = True) -> None:
    """Count a new article; creates the blog's statistic row on first use."""
    await _get_or_create(db, blog_id)
    deltas = {"article_count": 1}
    if published:
        deltas["published_article_count"] = 1
    await _adjust(db, blog_id, **deltas)


async def dec_article_count(db: AsyncSession, blog_id: int, published: bool = True) -> None:
    """
    Uncount a removed article.

    Raises NotFoundError when the blog has no statistic row.
    """
    deltas = {"article_count": -1}
    if published:
        deltas["published_article_count"] = -1
    await _adjust(db, blog_id, **deltas)


async def inc_comment_count(db: AsyncSession, blog_id: int, count: int = 1) -> None:
    await _get_or_create(db, blog_id)
    await _adjust(db, blog_id, comment_count=count)


async def dec_comment_count(db: AsyncSession, blog_id: int, count: int = 1) -> None:
    await _adjust(db, blog_id, comment_count=-count)


async def adjust_published_article_count(db: AsyncSession, blog_id: int, delta: int) -> None:
    """Move an article in (+1) or out (-1) of the published count on a status change."""
    await _adjust(db, blog_id, published_article_count=delta)
