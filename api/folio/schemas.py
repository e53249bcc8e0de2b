from __future__ import annotations

from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, computed_field

from .models import CommentAuthorRole, CommentStatus, PostStatus, Role


# ============================================================================
# BASE SCHEMAS
# ============================================================================


class Problem(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs."""

    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: str | None = None
    code: str | None = None  # VALIDATION, AUTHORIZATION, NOT_FOUND, STORAGE


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Generic offset-paginated response."""

    items: list[T]
    total: int
    page: int
    pages: int


# ============================================================================
# HEALTH
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"
    uptime_s: float | None = None


# ============================================================================
# USER SCHEMAS
# ============================================================================


class User(BaseModel):
    """User as seen by administrators."""

    id: int
    name: str
    email: str
    role: Role
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def is_admin(self) -> bool:
        """Legacy boolean view of the role, derived for older clients."""
        return self.role == Role.admin


class UserUpdate(BaseModel):
    """Update user request (admin only)."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: str | None = Field(default=None, max_length=255)
    role: Role | None = None


# ============================================================================
# POST SCHEMAS
# ============================================================================


class GalleryImage(BaseModel):
    id: int
    path: str
    position: int

    model_config = ConfigDict(from_attributes=True)


class PostSummary(BaseModel):
    """Post as it appears in listings."""

    id: int
    slug: str
    title: str
    category: str
    author: str
    cover_image: str | None = None
    read_time: int
    status: PostStatus
    views: int
    likes: int
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def is_published(self) -> bool:
        """Derived from status; never stored."""
        return self.status == PostStatus.published


class Post(PostSummary):
    """Full post with content and gallery."""

    content: str
    author_image: str | None = None
    author_linkedin: str | None = None
    linkedin_followers: int
    gallery: list[GalleryImage] = []


class PostCreate(BaseModel):
    """Create post request."""

    title: str = Field(..., min_length=2, max_length=200)
    content: str = Field(..., min_length=5)
    category: str = Field(..., min_length=2, max_length=50)
    author: str = Field(..., min_length=2, max_length=100)
    author_image: str | None = Field(default=None, max_length=500)
    author_linkedin: HttpUrl | None = None
    linkedin_followers: int = Field(default=0, ge=0)
    cover_image: str | None = Field(default=None, max_length=500)
    # Only draft or published at creation; trash is reached by transition
    status: Literal["draft", "published"] = "draft"
    gallery: list[str] = Field(default_factory=list, max_length=50)


class PostUpdate(BaseModel):
    """Update post request. Status is changed only through the status endpoint."""

    title: str | None = Field(default=None, min_length=2, max_length=200)
    content: str | None = Field(default=None, min_length=5)
    category: str | None = Field(default=None, min_length=2, max_length=50)
    author: str | None = Field(default=None, min_length=2, max_length=100)
    author_image: str | None = Field(default=None, max_length=500)
    author_linkedin: HttpUrl | None = None
    linkedin_followers: int | None = Field(default=None, ge=0)
    cover_image: str | None = Field(default=None, max_length=500)
    add_gallery: list[str] = Field(default_factory=list, max_length=50)


class StatusChange(BaseModel):
    """Status transition request.

    Plain string: unknown values are rejected by the state machine, not here.
    """

    status: str


class StatusResponse(BaseModel):
    id: int
    status: str
    changed: bool


class DeletePostResponse(BaseModel):
    id: int
    permanently_deleted: bool


class DuplicatePostResponse(BaseModel):
    new_id: int
    title: str
    slug: str


class BulkPublishRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1, max_length=500)
    is_published: bool


class BulkItemResult(BaseModel):
    id: int
    result: Literal["updated", "not_found", "skipped"]


class BulkPublishResponse(BaseModel):
    """
    Result of a bulk publish/unpublish.

    `count` is the number of rows actually updated; `submitted` is the number
    of distinct ids received.
    """

    count: int
    submitted: int
    status: PostStatus
    results: list[BulkItemResult]


class LikeResponse(BaseModel):
    id: int
    likes: int


# ============================================================================
# COMMENT SCHEMAS
# ============================================================================


class Comment(BaseModel):
    """Comment on a post."""

    id: int
    post_id: int
    parent_id: int | None = None
    depth: int
    name: str
    content: str
    status: CommentStatus
    author_role: CommentAuthorRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentAdmin(Comment):
    """Comment with moderation-only fields."""

    email: str


class CommentCreate(BaseModel):
    """Create comment request. Any client-supplied status is ignored."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: int | None = None

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class CommentCreated(BaseModel):
    id: int
    status: CommentStatus
    message: str = "Comment submitted successfully! It will appear after moderation."


# ============================================================================
# AUDIT
# ============================================================================


class AuditLogEntry(BaseModel):
    """Audit log entry."""

    id: int
    actor_id: int | None = None
    action: str
    target_type: str | None = None
    target_id: str | None = None
    note: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
