from __future__ import annotations

import enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .db import Base


# ============================================================================
# ENUMERATIONS
# ============================================================================


class Role(str, enum.Enum):
    viewer = "viewer"
    editor = "editor"
    admin = "admin"


class PostStatus(str, enum.Enum):
    draft = "draft"
    published = "published"
    trash = "trash"


class CommentStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    trash = "trash"


class CommentAuthorRole(str, enum.Enum):
    visitor = "visitor"
    admin = "admin"


def _enum_column_type(enum_cls: type[enum.Enum], name: str) -> Enum:
    # VARCHAR + CHECK, no native enum type
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


# ============================================================================
# CORE ENTITIES
# ============================================================================


class User(Base):
    """Account that can act on content. Credential handling lives elsewhere."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    credential = Column(String(255), nullable=True)  # Opaque, owned by the auth service
    role = Column(
        _enum_column_type(Role, "user_role"),
        nullable=False,
        default=Role.viewer,
        server_default=Role.viewer.value,
        index=True,
    )

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())


class Post(Base):
    """Blog post. `status` is the only publication flag stored."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)

    # Content
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    cover_image = Column(String(500), nullable=True)
    read_time = Column(Integer, nullable=False, default=1)

    # Author metadata
    author = Column(String(100), nullable=False)
    author_image = Column(String(500), nullable=True)
    author_linkedin = Column(String(500), nullable=True)
    linkedin_followers = Column(Integer, nullable=False, default=0)

    # Lifecycle
    status = Column(
        _enum_column_type(PostStatus, "post_status"),
        nullable=False,
        default=PostStatus.draft,
        server_default=PostStatus.draft.value,
        index=True,
    )

    # Counters (incremented in place, never read-modify-write)
    views = Column(Integer, nullable=False, default=0, server_default="0")
    likes = Column(Integer, nullable=False, default=0, server_default="0")

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    # Relationships
    gallery = relationship(
        "GalleryImage",
        back_populates="post",
        order_by="GalleryImage.position, GalleryImage.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_posts_status_created", status, created_at.desc()),
    )


class GalleryImage(Base):
    """Image exclusively owned by a post; removed with it."""

    __tablename__ = "gallery_images"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    post_id = Column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    path = Column(String(500), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    post = relationship("Post", back_populates="gallery")


class Comment(Base):
    """Threaded comment on a post. Replies are bound to the same post."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    post_id = Column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id = Column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    depth = Column(Integer, nullable=False, default=0)  # 0 = top-level

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    status = Column(
        _enum_column_type(CommentStatus, "comment_status"),
        nullable=False,
        default=CommentStatus.pending,
        server_default=CommentStatus.pending.value,
        index=True,
    )
    author_role = Column(
        _enum_column_type(CommentAuthorRole, "comment_author_role"),
        nullable=False,
        default=CommentAuthorRole.visitor,
        server_default=CommentAuthorRole.visitor.value,
    )

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    # Relationships
    post = relationship("Post", back_populates="comments")
    parent = relationship(
        "Comment",
        remote_side=[id],
        back_populates="replies",
    )
    replies = relationship(
        "Comment",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_comments_post_created", post_id, created_at.desc()),
    )


class AuditLog(Base):
    """Audit log for moderation and administration actions."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    actor_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    action = Column(String(100), nullable=False, index=True)
    target_type = Column(String(20), nullable=True)
    target_id = Column(String(50), nullable=True, index=True)
    note = Column(Text, nullable=True)  # Additional context, e.g. "draft -> trash"

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    __table_args__ = (
        Index("ix_audit_logs_actor_created", actor_id, created_at.desc()),
    )
