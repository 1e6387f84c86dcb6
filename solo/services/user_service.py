"""
User service — author records referenced by articles.

``article_count`` is maintained by the article service; nothing here
touches it after creation.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from solo.models import User
from solo.schemas import UserCreate


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    """Return the user identified by *user_id*, or None."""
    return await db.get(User, user_id)


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """
    Create a new user with an article count of zero.

    Username uniqueness is enforced by the database; the IntegrityError
    propagates to the caller.
    """
    user = User(username=data.username, blog_id=data.blog_id, article_count=0)
    db.add(user)
    await db.flush()
    return user
