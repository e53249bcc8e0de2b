"""
Read side of moderation: filtered, searched and paginated content listings.

For posts, the "all" filter leaves trash out so deleted items stay out of
default views. For comments, "all" is every status.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from .. import models
from ..errors import ValidationError
from ..models import PostStatus
from ..settings import FOLIO_MAX_PAGE_SIZE
from .lifecycle import ContentKind, parse_status
from .roles import Capability, Principal, require_capability

ALL = "all"

SEARCH_COLUMNS = {
    ContentKind.post: (models.Post.title, models.Post.content, models.Post.category),
    ContentKind.comment: (models.Comment.content, models.Comment.name, models.Comment.email),
}


@dataclass
class ContentPage:
    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def validate_paging(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if limit < 1 or limit > FOLIO_MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {FOLIO_MAX_PAGE_SIZE}")


def _apply_status_filter(query: Query, kind: ContentKind, status_filter: str) -> Query:
    if kind == ContentKind.post:
        if status_filter == ALL:
            return query.filter(models.Post.status != PostStatus.trash)
        return query.filter(models.Post.status == parse_status(kind, status_filter))

    if status_filter == ALL:
        return query
    return query.filter(models.Comment.status == parse_status(kind, status_filter))


def _apply_search(query: Query, kind: ContentKind, search: str | None) -> Query:
    if not search or not search.strip():
        return query
    # Escape LIKE wildcards so the term is matched literally
    term = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{term}%"
    return query.filter(
        or_(*(column.ilike(pattern, escape="\\") for column in SEARCH_COLUMNS[kind]))
    )


def query_content(
    db: Session,
    kind: ContentKind,
    status_filter: str = ALL,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
    category: str | None = None,
    post_id: int | None = None,
) -> ContentPage:
    """
    Unauthenticated listing primitive shared by the admin queue and the
    public listings. Callers decide who may see which filter.
    """
    try:
        kind = ContentKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown content kind {kind!r}")
    validate_paging(page, limit)

    model = models.Post if kind == ContentKind.post else models.Comment
    query = db.query(model)
    query = _apply_status_filter(query, kind, status_filter)
    query = _apply_search(query, kind, search)

    if category and kind == ContentKind.post:
        query = query.filter(models.Post.category.ilike(f"%{category.strip()}%"))
    if post_id is not None and kind == ContentKind.comment:
        query = query.filter(models.Comment.post_id == post_id)

    total = query.order_by(None).count()
    items = (
        query.order_by(model.created_at.desc(), model.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ContentPage(items=items, total=total, page=page, limit=limit)


def list_content(
    db: Session,
    kind: ContentKind | str,
    status_filter: str = ALL,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
    actor: Principal | None = None,
) -> ContentPage:
    """Moderation queue listing; requires MANAGE_CONTENT."""
    require_capability(actor, Capability.MANAGE_CONTENT)
    return query_content(db, kind, status_filter, search, page, limit)


def list_published_posts(
    db: Session,
    search: str | None = None,
    category: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> ContentPage:
    """Public feed: published posts only."""
    return query_content(
        db,
        ContentKind.post,
        PostStatus.published.value,
        search,
        page,
        limit,
        category=category,
    )
