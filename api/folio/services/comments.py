"""Comment intake and public comment reads."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import unit_of_work
from ..errors import NotFoundError, ValidationError
from ..models import CommentAuthorRole, CommentStatus, PostStatus
from ..settings import FOLIO_COMMENT_MAX_DEPTH
from .lifecycle import ContentKind
from .moderation import ContentPage, query_content
from .roles import Capability, Principal, has_capability

logger = logging.getLogger(__name__)


def _require_published_post(db: Session, post_id: int) -> None:
    status = db.query(models.Post.status).filter(models.Post.id == post_id).scalar()
    if status != PostStatus.published:
        raise NotFoundError("Post not found")


def create_comment(
    db: Session,
    post_id: int,
    payload: schemas.CommentCreate,
    actor: Principal | None = None,
) -> models.Comment:
    """
    Accept a new comment into the moderation queue.

    Comments always start as pending, whatever the client sent. A reply must
    point at a comment of the same post and stay within the depth limit.
    """
    _require_published_post(db, post_id)

    depth = 0
    if payload.parent_id is not None:
        parent = db.query(models.Comment).filter(models.Comment.id == payload.parent_id).first()
        if parent is None or parent.post_id != post_id:
            raise ValidationError("Invalid parent comment")
        if parent.depth >= FOLIO_COMMENT_MAX_DEPTH:
            raise ValidationError(
                f"Cannot reply to comment at maximum depth ({FOLIO_COMMENT_MAX_DEPTH})"
            )
        depth = parent.depth + 1

    author_role = (
        CommentAuthorRole.admin
        if has_capability(actor, Capability.MANAGE_CONTENT)
        else CommentAuthorRole.visitor
    )

    with unit_of_work(db):
        comment = models.Comment(
            post_id=post_id,
            parent_id=payload.parent_id,
            depth=depth,
            name=payload.name.strip(),
            email=payload.email.strip(),
            content=payload.content.strip(),
            status=CommentStatus.pending,
            author_role=author_role,
        )
        db.add(comment)

    logger.info(f"Comment {comment.id} queued for moderation on post {post_id}")
    return comment


def list_public_comments(
    db: Session, post_id: int, page: int = 1, limit: int = 50
) -> ContentPage:
    """Approved comments of a published post, newest first."""
    _require_published_post(db, post_id)
    return query_content(
        db,
        ContentKind.comment,
        CommentStatus.approved.value,
        page=page,
        limit=limit,
        post_id=post_id,
    )
