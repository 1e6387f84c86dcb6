"""
Article service — admin console operations on the Article aggregate.

Design notes
------------
- ``ArticleService`` owns its sessions: every mutating operation runs in
  exactly one transaction (``session.begin()``), committed when the block
  exits normally and rolled back on any exception.  Errors reach the
  caller unchanged; nothing is retried.
- Writes (add / update / remove) are serialized on the service's lock.
  The module-level ``article_service`` has one lock for the process; tests
  and callers needing another scope construct their own service.
- Reads (list / get) take no lock and may observe in-flight writes.
- The console list is cached per (blog, page) with the cache-aside pattern
  and purged after every committed write to that blog.  Reads take no lock,
  so a page read before a write commits is not cached once that write has
  purged the blog (see ``CacheManager.set_article_list``).
- Collaborators (``user_service``, ``statistic_service``,
  ``comment_service``) receive the operation's session and never commit.
"""
import asyncio
import logging
import re
from contextlib import asynccontextmanager

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import load_only

from solo.cache import cache
from solo.config import settings
from solo.database import async_session
from solo.exceptions import NotFoundError
from solo.instrumentation import count_queries
from solo.models import Article, ArticleStatus
from solo.pagination import new_pagination, offset, page_count
from solo.schemas import ArticleCreate, ArticleListItem, ArticlePage, ArticlePatch
from solo.services import comment_service, statistic_service, user_service

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tag normalization
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"[\u4e00-\u9fa5\w&+\-.]+")
# Full-width comma, ideographic comma, full-width semicolon, semicolon.
_TAG_DELIMITERS = ("，", "、", "；", ";")

# Columns loaded for the console list; article bodies are never needed there.
_LIST_COLUMNS = (
    Article.id,
    Article.created_at,
    Article.author_id,
    Article.title,
    Article.tags,
    Article.path,
    Article.topped,
    Article.view_count,
    Article.comment_count,
)


def normalize_tag_str(tag_str: str) -> str:
    """
    Return *tag_str* as a clean comma-joined tag list.

    Whitespace is removed, the CJK and semicolon delimiter variants become
    commas, and each tag is kept once (first occurrence, case-sensitive)
    provided it contains at least one CJK ideograph, word character, ``&``,
    ``+``, ``-`` or ``.``.  Normalizing a normalized string is a no-op.
    """
    tag_str = _WHITESPACE_RE.sub("", tag_str)
    for delimiter in _TAG_DELIMITERS:
        tag_str = tag_str.replace(delimiter, ",")

    tags: list[str] = []
    for tag in tag_str.split(","):
        if tag in tags:
            continue
        if not _TAG_RE.search(tag):
            continue
        tags.append(tag)
    return ",".join(tags)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ArticleService:
    """Console CRUD for articles; see the module docstring for the rules."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lock: asyncio.Lock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._lock = lock if lock is not None else asyncio.Lock()

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @asynccontextmanager
    async def _transaction(self, operation: str):
        """Yield a session inside one transaction, logging the outcome."""
        async with self._session_factory() as session:
            with count_queries() as counter:
                try:
                    async with session.begin():
                        yield session
                except Exception as exc:
                    logger.warning("%s rolled back: %r", operation, exc)
                    raise
            logger.debug("%s committed (%d queries)", operation, counter.count)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_article(self, data: ArticleCreate) -> Article:
        """
        Persist a new article and return it with its assigned id.

        The author's article count and the blog's statistics are bumped in
        the same transaction.  Raises NotFoundError for an unknown author.
        """
        tags = normalize_tag_str(data.tags)
        published = data.status == ArticleStatus.PUBLISHED

        async with self._lock, self._transaction("add article") as session:
            author = await user_service.get_user(session, data.author_id)
            if author is None:
                raise NotFoundError("user", data.author_id)

            article = Article(**data.model_dump(exclude={"tags"}), tags=tags)
            session.add(article)
            await session.flush()
            await session.refresh(article)

            author.article_count += 1
            await statistic_service.inc_article_count(session, data.blog_id, published=published)

        await cache.invalidate_article_list(article.blog_id)
        logger.info("Added article id=%s blog_id=%s", article.id, article.blog_id)
        return article

    async def remove_article(self, article_id: int) -> None:
        """
        Remove an article together with everything that counts it.

        In one transaction: decrement the author's article count, delete
        the article, decrement the statistics of the article's blog and
        bulk-delete the article's comments.  Raises NotFoundError when the
        article or its author is missing; any failure leaves the database
        untouched.
        """
        async with self._lock, self._transaction("remove article") as session:
            article = await session.get(Article, article_id)
            if article is None:
                raise NotFoundError("article", article_id)
            author = await user_service.get_user(session, article.author_id)
            if author is None:
                raise NotFoundError("user", article.author_id)
            blog_id = article.blog_id

            author.article_count -= 1
            await session.flush()

            await session.execute(
                delete(Article)
                .where(Article.id == article_id)
                .execution_options(synchronize_session=False)
            )
            await statistic_service.dec_article_count(
                session, blog_id, published=article.status == ArticleStatus.PUBLISHED
            )

            comments = await comment_service.get_article_comments(session, article_id)
            if comments:
                removed = await comment_service.remove_article_comments(session, article_id)
                await statistic_service.dec_comment_count(session, blog_id, removed)

        await cache.invalidate_article_list(blog_id)
        logger.info("Removed article id=%s blog_id=%s", article_id, blog_id)

    async def update_article(self, article_id: int, patch: ArticlePatch) -> Article:
        """
        Apply *patch* to an existing article and return the updated row.

        Existence is checked before any transaction is opened; a missing
        article raises NotFoundError and writes nothing.  A status change
        moves the article in or out of the blog's published count.
        """
        values = patch.changes()
        if "tags" in values:
            values["tags"] = normalize_tag_str(values["tags"])

        async with self._lock:
            if not await self._exists(article_id):
                raise NotFoundError(
                    "article",
                    article_id,
                    message=f"not found article [id={article_id}] to update",
                )

            async with self._transaction("update article") as session:
                article = await session.get(Article, article_id)
                if article is None:
                    raise NotFoundError("article", article_id)
                was_published = article.status == ArticleStatus.PUBLISHED

                if values:
                    await session.execute(
                        update(Article)
                        .where(Article.id == article_id)
                        .values(**values)
                        .execution_options(synchronize_session=False)
                    )
                    await session.refresh(article)

                is_published = article.status == ArticleStatus.PUBLISHED
                if is_published != was_published:
                    await statistic_service.adjust_published_article_count(
                        session, article.blog_id, 1 if is_published else -1
                    )

        await cache.invalidate_article_list(article.blog_id)
        logger.info("Updated article id=%s fields=%s", article_id, sorted(values))
        return article

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_articles(self, page: int, blog_id: int) -> ArticlePage:
        """
        Return one console page of *blog_id*'s published articles.

        Pinned articles come first, then the newest.  Two statements are
        issued on a cache miss: a COUNT and the projected page SELECT.
        """
        page = max(page, 1)
        page_size = settings.ARTICLE_LIST_PAGE_SIZE

        cache_key = cache.article_list_key(blog_id, page)
        cached = await cache.get(cache_key)
        if cached:
            return ArticlePage.model_validate(cached)
        generation = cache.article_list_generation(blog_id)

        criteria = (
            Article.status == ArticleStatus.PUBLISHED,
            Article.blog_id == blog_id,
        )
        async with self._session_factory() as session:
            count_q = select(func.count()).select_from(Article).where(*criteria)
            total: int = (await session.execute(count_q)).scalar_one()

            articles_q = (
                select(Article)
                .options(load_only(*_LIST_COLUMNS))
                .where(*criteria)
                .order_by(Article.topped.desc(), Article.id.desc())
                .offset(offset(page, page_size))
                .limit(page_size)
            )
            result = await session.execute(articles_q)
            items = [ArticleListItem.model_validate(a) for a in result.scalars().all()]

        pagination = new_pagination(
            page,
            page_size,
            page_count(total, page_size),
            settings.ARTICLE_LIST_WINDOW_SIZE,
            total,
        )
        response = ArticlePage(items=items, pagination=pagination)
        await cache.set_article_list(
            blog_id,
            page,
            response.model_dump(mode="json"),
            generation,
            ttl=settings.CACHE_TTL_LIST,
        )
        return response

    async def get_article(self, article_id: int) -> Article | None:
        """Return the article, or None when no row has *article_id*."""
        async with self._session_factory() as session:
            return await session.get(Article, article_id)

    async def _exists(self, article_id: int) -> bool:
        async with self._session_factory() as session:
            count_q = select(func.count()).select_from(Article).where(Article.id == article_id)
            return (await session.execute(count_q)).scalar_one() > 0


# Module-level singleton: one write lock for the whole process.
article_service = ArticleService(async_session)
