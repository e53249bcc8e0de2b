"""
Structural consequences of lifecycle events: hard deletes and duplication.

Gallery images and comments reference their post with ON DELETE CASCADE, so
removing a post row removes its children in the same statement. Soft delete
(moving to trash) never touches children.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.orm import Session

from .. import models
from ..db import unit_of_work
from ..errors import InvalidTransitionError, NotFoundError
from ..models import CommentStatus, PostStatus
from ..utils.audit import log_moderation_action
from .lifecycle import set_post_status
from .posts import get_post, unique_slug
from .roles import Capability, Principal, require_capability

logger = logging.getLogger(__name__)


@dataclass
class DeleteResult:
    id: int
    permanently_deleted: bool


def hard_delete_post(
    db: Session, post_id: int, actor: Principal | None, force: bool = False
) -> None:
    """
    Permanently remove a post with its gallery and comments.

    Allowed when the post is already in trash, or with `force=True`, which is
    recorded separately in the audit log.
    """
    require_capability(actor, Capability.MANAGE_CONTENT)

    status = db.query(models.Post.status).filter(models.Post.id == post_id).scalar()
    if status is None:
        raise NotFoundError("Post not found")
    if status != PostStatus.trash and not force:
        raise InvalidTransitionError(
            "Post must be in trash before it can be permanently deleted"
        )

    with unit_of_work(db):
        db.execute(delete(models.Post).where(models.Post.id == post_id))
        log_moderation_action(
            db=db,
            actor_id=actor.id,
            action="force_delete_post" if status != PostStatus.trash else "hard_delete_post",
            target_type="post",
            target_id=post_id,
            note=f"deleted from {status.value}",
        )
    db.expire_all()

    if status != PostStatus.trash:
        logger.warning(f"Post {post_id} force-deleted from {status.value} by user {actor.id}")
    else:
        logger.info(f"Post {post_id} permanently deleted by user {actor.id}")


def delete_post(
    db: Session, post_id: int, actor: Principal | None, force: bool = False
) -> DeleteResult:
    """
    Delete entry point for posts.

    A post outside trash is moved to trash (soft delete) unless `force` is
    given; a post already in trash, or a forced delete, is removed for good.
    """
    require_capability(actor, Capability.MANAGE_CONTENT)

    status = db.query(models.Post.status).filter(models.Post.id == post_id).scalar()
    if status is None:
        raise NotFoundError("Post not found")

    if status == PostStatus.trash or force:
        hard_delete_post(db, post_id, actor, force=force)
        return DeleteResult(id=post_id, permanently_deleted=True)

    set_post_status(db, post_id, PostStatus.trash, actor)
    return DeleteResult(id=post_id, permanently_deleted=False)


# Room for "-copy-<epoch ms>" plus a "-N" collision suffix within posts.slug
SLUG_MAX_LENGTH = 255
DUPLICATE_SUFFIX_RESERVE = 30


def duplicate_slug(db: Session, original_slug: str) -> str:
    timestamp = int(time.time() * 1000)
    base = original_slug[: SLUG_MAX_LENGTH - DUPLICATE_SUFFIX_RESERVE].rstrip("-") or "post"
    return unique_slug(db, f"{base}-copy-{timestamp}")


def duplicate_post(db: Session, post_id: int, actor: Principal | None) -> models.Post:
    """
    Copy a post and its gallery into a new draft.

    The copy is always a draft with fresh counters, whatever the source
    status, and gets a `{slug}-copy-{timestamp}` slug. Post and gallery rows
    are written in one transaction.
    """
    require_capability(actor, Capability.MANAGE_CONTENT)
    source = get_post(db, post_id)

    with unit_of_work(db):
        copy = models.Post(
            title=f"Copy of {source.title}"[:200],
            content=source.content,
            category=source.category,
            author=source.author,
            author_image=source.author_image,
            author_linkedin=source.author_linkedin,
            linkedin_followers=source.linkedin_followers,
            cover_image=source.cover_image,
            read_time=source.read_time,
            slug=duplicate_slug(db, source.slug),
            status=PostStatus.draft,
            views=0,
            likes=0,
        )
        db.add(copy)
        db.flush()
        db.add_all(
            models.GalleryImage(post_id=copy.id, path=image.path, position=image.position)
            for image in source.gallery
        )
        log_moderation_action(
            db=db,
            actor_id=actor.id,
            action="duplicate_post",
            target_type="post",
            target_id=copy.id,
            note=f"copied from post {post_id}",
        )

    logger.info(f"Post {post_id} duplicated as {copy.id} by user {actor.id}")
    return get_post(db, copy.id)


def collect_comment_subtree(db: Session, root_id: int) -> list[int]:
    """
    Ids of a comment and all of its descendants, breadth first.

    One query per tree level, no recursion.
    """
    collected = [root_id]
    seen = {root_id}
    frontier = [root_id]
    while frontier:
        children = [
            row[0]
            for row in db.query(models.Comment.id)
            .filter(models.Comment.parent_id.in_(frontier))
            .all()
        ]
        frontier = [child for child in children if child not in seen]
        seen.update(frontier)
        collected.extend(frontier)
    return collected


def delete_comment(db: Session, comment_id: int, actor: Principal | None) -> int:
    """
    Permanently delete a trashed comment and its whole reply subtree.

    Returns the number of comments removed.
    """
    require_capability(actor, Capability.MANAGE_CONTENT)

    status = (
        db.query(models.Comment.status).filter(models.Comment.id == comment_id).scalar()
    )
    if status is None:
        raise NotFoundError("Comment not found")
    if status != CommentStatus.trash:
        raise InvalidTransitionError(
            "Comment must be in trash before it can be permanently deleted"
        )

    with unit_of_work(db):
        subtree = collect_comment_subtree(db, comment_id)
        db.execute(delete(models.Comment).where(models.Comment.id.in_(subtree)))
        log_moderation_action(
            db=db,
            actor_id=actor.id,
            action="delete_comment",
            target_type="comment",
            target_id=comment_id,
            note=f"removed {len(subtree)} comment(s) including replies",
        )
    db.expire_all()

    logger.info(f"Comment {comment_id} deleted with {len(subtree) - 1} repl(ies) by user {actor.id}")
    return len(subtree)
