"""Post authoring and public read paths."""

from __future__ import annotations

import logging
import math
import re

from slugify import slugify
from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..db import unit_of_work
from ..errors import NotFoundError
from ..models import PostStatus
from ..settings import WORDS_PER_MINUTE
from .roles import Capability, Principal, require_capability

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")

# Fields a PostUpdate may overwrite. Status is changed only through the state machine.
EDITABLE_FIELDS = (
    "title",
    "content",
    "category",
    "author",
    "author_image",
    "author_linkedin",
    "linkedin_followers",
    "cover_image",
)


def calculate_read_time(content: str) -> int:
    """Reading time in minutes, HTML tags stripped, at least one minute."""
    words = _TAG_RE.sub(" ", content).split()
    return max(1, math.ceil(len(words) / WORDS_PER_MINUTE))


def slug_exists(db: Session, slug: str, exclude_post_id: int | None = None) -> bool:
    query = db.query(models.Post.id).filter(models.Post.slug == slug)
    if exclude_post_id is not None:
        query = query.filter(models.Post.id != exclude_post_id)
    return query.first() is not None


def unique_slug(db: Session, base: str, exclude_post_id: int | None = None) -> str:
    """
    Return `base`, or `base-N` with the first free N.

    `exclude_post_id` lets a post keep its own slug while being edited.
    """
    slug = base
    counter = 1
    while slug_exists(db, slug, exclude_post_id):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def slug_for_title(db: Session, title: str, exclude_post_id: int | None = None) -> str:
    base = slugify(title, max_length=50, word_boundary=True) or "post"
    return unique_slug(db, base, exclude_post_id)


def add_gallery_images(db: Session, post: models.Post, paths: list[str]) -> list[models.GalleryImage]:
    """Append gallery rows after the post's current last position."""
    start = max((image.position for image in post.gallery), default=-1) + 1
    images = [
        models.GalleryImage(post_id=post.id, path=path, position=start + offset)
        for offset, path in enumerate(paths)
    ]
    db.add_all(images)
    return images


def get_post(db: Session, post_id: int) -> models.Post:
    post = (
        db.query(models.Post)
        .options(selectinload(models.Post.gallery))
        .filter(models.Post.id == post_id)
        .first()
    )
    if post is None:
        raise NotFoundError("Post not found")
    return post


def create_post(db: Session, payload: schemas.PostCreate, actor: Principal | None) -> models.Post:
    """
    Create a post and its gallery in one transaction.

    New posts are drafts unless the creator explicitly asks for `published`.
    """
    require_capability(actor, Capability.MANAGE_CONTENT)

    with unit_of_work(db):
        post = models.Post(
            title=payload.title,
            content=payload.content,
            category=payload.category,
            author=payload.author,
            author_image=payload.author_image,
            author_linkedin=str(payload.author_linkedin) if payload.author_linkedin else None,
            linkedin_followers=payload.linkedin_followers,
            cover_image=payload.cover_image,
            read_time=calculate_read_time(payload.content),
            slug=slug_for_title(db, payload.title),
            status=PostStatus(payload.status),
        )
        db.add(post)
        db.flush()  # Get the post ID without committing
        add_gallery_images(db, post, payload.gallery)

    logger.info(f"Post {post.id} created as {post.status.value} by user {actor.id}")
    return get_post(db, post.id)


def update_post(
    db: Session, post_id: int, payload: schemas.PostUpdate, actor: Principal | None
) -> models.Post:
    """Edit content fields. Never changes status."""
    require_capability(actor, Capability.MANAGE_CONTENT)
    post = get_post(db, post_id)

    changes = payload.model_dump(include=set(EDITABLE_FIELDS), exclude_unset=True)
    changes = {field: value for field, value in changes.items() if value is not None}

    with unit_of_work(db):
        for field, value in changes.items():
            if field == "author_linkedin":
                value = str(value)
            setattr(post, field, value)
        if "title" in changes:
            post.slug = slug_for_title(db, changes["title"], exclude_post_id=post.id)
        if "content" in changes:
            post.read_time = calculate_read_time(changes["content"])
        if payload.add_gallery:
            add_gallery_images(db, post, payload.add_gallery)

    db.expire_all()
    return get_post(db, post_id)


def get_public_post(db: Session, post_id: int) -> models.Post:
    """
    Fetch a published post for readers and count the view.

    The counter is bumped with an in-place UPDATE.
    """
    post = get_post(db, post_id)
    if post.status != PostStatus.published:
        raise NotFoundError("Post not found")

    with unit_of_work(db):
        db.execute(
            update(models.Post)
            .where(models.Post.id == post_id)
            .values(views=models.Post.views + 1)
            .execution_options(synchronize_session=False)
        )
    db.expire_all()
    return get_post(db, post_id)


def like_post(db: Session, post_id: int) -> int:
    """Increment likes in place on a published post; returns the new count."""
    status = (
        db.query(models.Post.status).filter(models.Post.id == post_id).scalar()
    )
    if status != PostStatus.published:
        raise NotFoundError("Post not found")

    with unit_of_work(db):
        db.execute(
            update(models.Post)
            .where(models.Post.id == post_id)
            .values(likes=models.Post.likes + 1)
            .execution_options(synchronize_session=False)
        )
    return db.query(models.Post.likes).filter(models.Post.id == post_id).scalar()


def list_categories(db: Session) -> list[str]:
    """Distinct categories of published posts."""
    rows = (
        db.query(models.Post.category)
        .filter(models.Post.status == PostStatus.published)
        .distinct()
        .order_by(models.Post.category.asc())
        .all()
    )
    return [row[0] for row in rows]
