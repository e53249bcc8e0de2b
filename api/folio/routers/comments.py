"""Public comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import get_current_principal_optional
from ..deps import Paging, get_db, get_paging
from ..pagination import create_page_response
from ..services import comments
from ..services.roles import Principal

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("/post/{post_id}", response_model=schemas.Page[schemas.Comment])
def list_comments(
    post_id: int,
    paging: Paging = Depends(get_paging),
    db: Session = Depends(get_db),
) -> schemas.Page[schemas.Comment]:
    """Approved comments of a published post."""
    result = comments.list_public_comments(db, post_id, page=paging.page, limit=paging.limit)
    return create_page_response(result, schemas.Comment.model_validate)


@router.post(
    "/post/{post_id}",
    response_model=schemas.CommentCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: int,
    payload: schemas.CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_current_principal_optional),
) -> schemas.CommentCreated:
    """
    Submit a comment or a reply.

    New comments are held as pending until a moderator approves them.
    """
    comment = comments.create_comment(db, post_id, payload, principal)
    return schemas.CommentCreated(id=comment.id, status=comment.status)
