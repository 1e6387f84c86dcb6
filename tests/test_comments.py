"""
Collaborator tests — comment, statistic and user services called directly
with a session, the way the article service calls them.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from solo.exceptions import NotFoundError
from solo.schemas import ArticleCreate, CommentCreate, UserCreate
from solo.services import comment_service, statistic_service, user_service

BLOG_ID = 1


@pytest.mark.asyncio
async def test_add_comment_bumps_counters(service, session_factory, author):
    article = await service.add_article(
        ArticleCreate(author_id=author.id, blog_id=BLOG_ID, title="Commentable", path="/c")
    )
    async with session_factory() as session, session.begin():
        comment = await comment_service.add_comment(
            session, article.id, CommentCreate(content="Great!", author_name="Reader")
        )
    assert comment.id is not None
    assert comment.article_id == article.id
    assert comment.blog_id == BLOG_ID

    assert (await service.get_article(article.id)).comment_count == 1
    async with session_factory() as session:
        statistic = await statistic_service.get_statistic(session, BLOG_ID)
    assert statistic.comment_count == 1


@pytest.mark.asyncio
async def test_add_comment_nonexistent_article(session_factory):
    async with session_factory() as session:
        with pytest.raises(NotFoundError) as exc_info:
            await comment_service.add_comment(
                session, 99999, CommentCreate(content="Ghost", author_name="Nobody")
            )
    assert exc_info.value.resource == "article"


@pytest.mark.asyncio
async def test_remove_article_comments_returns_count(service, session_factory, author):
    article = await service.add_article(
        ArticleCreate(author_id=author.id, blog_id=BLOG_ID, title="Busy", path="/busy")
    )
    async with session_factory() as session, session.begin():
        for i in range(3):
            await comment_service.add_comment(
                session, article.id, CommentCreate(content=str(i), author_name="Reader")
            )

    async with session_factory() as session, session.begin():
        assert await comment_service.remove_article_comments(session, article.id) == 3

    async with session_factory() as session:
        assert await comment_service.get_article_comments(session, article.id) == []


@pytest.mark.asyncio
async def test_dec_article_count_requires_statistic_row(session_factory):
    async with session_factory() as session:
        with pytest.raises(NotFoundError) as exc_info:
            await statistic_service.dec_article_count(session, 77)
    assert exc_info.value.resource == "statistic"
    assert exc_info.value.resource_id == 77


@pytest.mark.asyncio
async def test_inc_article_count_creates_statistic_row(session_factory):
    async with session_factory() as session, session.begin():
        await statistic_service.inc_article_count(session, 5, published=False)

    async with session_factory() as session:
        statistic = await statistic_service.get_statistic(session, 5)
    assert statistic.article_count == 1
    assert statistic.published_article_count == 0


@pytest.mark.asyncio
async def test_create_user_duplicate_username(session_factory, author):
    async with session_factory() as session:
        with pytest.raises(IntegrityError):
            await user_service.create_user(session, UserCreate(username="admin", blog_id=BLOG_ID))
        await session.rollback()


@pytest.mark.asyncio
async def test_get_user_not_found(session_factory):
    async with session_factory() as session:
        assert await user_service.get_user(session, 99999) is None
