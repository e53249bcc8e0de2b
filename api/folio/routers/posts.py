"""Public blog endpoints: published posts only."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..deps import Paging, get_db, get_paging
from ..pagination import create_page_response
from ..services import moderation, posts

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get("", response_model=schemas.Page[schemas.PostSummary])
def list_posts(
    search: str | None = Query(None, max_length=200),
    category: str | None = Query(None, max_length=50),
    paging: Paging = Depends(get_paging),
    db: Session = Depends(get_db),
) -> schemas.Page[schemas.PostSummary]:
    """
    Published posts, newest first.

    `search` matches title, content and category; `category` is a partial,
    case-insensitive match.
    """
    result = moderation.list_published_posts(
        db, search=search, category=category, page=paging.page, limit=paging.limit
    )
    return create_page_response(result, schemas.PostSummary.model_validate)


@router.get("/categories", response_model=list[str])
def list_categories(db: Session = Depends(get_db)) -> list[str]:
    """Distinct categories of published posts."""
    return posts.list_categories(db)


@router.get("/{id}", response_model=schemas.Post)
def get_post(id: int, db: Session = Depends(get_db)) -> schemas.Post:
    """Get a published post by ID. Each call counts as one view."""
    post = posts.get_public_post(db, id)
    return schemas.Post.model_validate(post)


@router.post("/{id}/like", response_model=schemas.LikeResponse)
def like_post(id: int, db: Session = Depends(get_db)) -> schemas.LikeResponse:
    likes = posts.like_post(db, id)
    return schemas.LikeResponse(id=id, likes=likes)
