"""
Comment service — comments hang off a live article.

Comments are created one at a time and only ever removed in bulk, when
the article they belong to is removed.
"""
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from solo.exceptions import NotFoundError
from solo.models import Article, Comment
from solo.schemas import CommentCreate
from solo.services import statistic_service


async def add_comment(
    db: AsyncSession,
    article_id: int,
    data: CommentCreate,
) -> Comment:
    """
    Append a new comment to the article identified by *article_id*.

    Bumps the article's and the blog's comment counters.  Raises
    NotFoundError when the article does not exist.
    """
    article = await db.get(Article, article_id)
    if article is None:
        raise NotFoundError("article", article_id)

    comment = Comment(
        content=data.content,
        author_name=data.author_name,
        article_id=article_id,
        blog_id=article.blog_id,
    )
    db.add(comment)
    article.comment_count += 1
    await db.flush()
    await statistic_service.inc_comment_count(db, article.blog_id)
    return comment


async def get_article_comments(db: AsyncSession, article_id: int) -> list[Comment]:
    result = await db.execute(
        select(Comment).where(Comment.article_id == article_id).order_by(Comment.id)
    )
    return list(result.scalars().all())


async def remove_article_comments(db: AsyncSession, article_id: int) -> int:
    """Delete every comment of *article_id* in one statement; return how many."""
    result = await db.execute(
        delete(Comment)
        .where(Comment.article_id == article_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
