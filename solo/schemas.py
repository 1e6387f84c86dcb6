from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from solo.exceptions import ValidationError
from solo.models import ArticleStatus
from solo.pagination import Pagination


# --- User ---

class UserCreate(BaseModel):
    username: str = Field(max_length=100)
    blog_id: int


# --- Comment ---

class CommentCreate(BaseModel):
    content: str
    author_name: str = Field(max_length=150)


# --- Article ---

class ArticleCreate(BaseModel):
    author_id: int
    blog_id: int
    title: str = Field(max_length=300)
    abstract: str | None = None
    content: str = ""
    tags: str = ""  # raw user input, normalized by the service
    path: str = Field(max_length=350)
    topped: bool = False
    status: ArticleStatus = ArticleStatus.PUBLISHED
    commentable: bool = True


class ArticlePatch(BaseModel):
    """
    Fields to change on an existing article.

    Only fields that were explicitly set are written (read them with
    ``model_dump(exclude_unset=True)``), so ``topped=False`` or
    ``view_count=0`` are real updates.  ``abstract`` is the only field that
    may be cleared with ``None``.
    """

    title: str | None = Field(None, max_length=300)
    abstract: str | None = None
    content: str | None = None
    tags: str | None = None
    path: str | None = Field(None, max_length=350)
    topped: bool | None = None
    status: ArticleStatus | None = None
    view_count: int | None = Field(None, ge=0)
    comment_count: int | None = Field(None, ge=0)
    commentable: bool | None = None

    @field_validator(
        "title", "content", "tags", "path", "topped", "status",
        "view_count", "comment_count", "commentable",
    )
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValidationError(f"{info.field_name} may not be null", field=info.field_name)
        return value

    def changes(self) -> dict:
        """The explicitly supplied fields and their new values."""
        return self.model_dump(exclude_unset=True)


class ArticleListItem(BaseModel):
    """Console list projection of an article (no body content)."""

    id: int
    created_at: datetime
    author_id: int
    title: str
    tags: str
    path: str
    topped: bool
    view_count: int
    comment_count: int
    model_config = ConfigDict(from_attributes=True)


class ArticlePage(BaseModel):
    items: list[ArticleListItem] = []
    pagination: Pagination
