"""Admin and moderation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import get_current_principal
from ..deps import Paging, get_db, get_paging
from ..pagination import create_page_response
from ..services import bulk, cascade, lifecycle, moderation, posts, users
from ..services.lifecycle import ContentKind
from ..services.roles import Principal

router = APIRouter(prefix="/admin", tags=["Admin"])


# ============================================================================
# POSTS
# ============================================================================


@router.get("/posts", response_model=schemas.Page[schemas.PostSummary])
def list_posts(
    status_filter: str = Query(moderation.ALL, alias="status"),
    search: str | None = Query(None, max_length=200),
    paging: Paging = Depends(get_paging),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.Page[schemas.PostSummary]:
    """
    Moderation queue for posts.

    `status=all` lists drafts and published posts; trash is only shown when
    asked for explicitly.
    """
    result = moderation.list_content(
        db, ContentKind.post, status_filter, search, paging.page, paging.limit, principal
    )
    return create_page_response(result, schemas.PostSummary.model_validate)


@router.post("/posts", response_model=schemas.Post, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: schemas.PostCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.Post:
    post = posts.create_post(db, payload, principal)
    return schemas.Post.model_validate(post)


@router.put("/posts/bulk-publish", response_model=schemas.BulkPublishResponse)
def bulk_publish(
    payload: schemas.BulkPublishRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.BulkPublishResponse:
    """
    Publish or unpublish many posts at once.

    Unknown ids and trashed posts are reported per id; `count` is the number of
    posts actually changed.
    """
    result = bulk.bulk_set_post_published(db, payload.ids, payload.is_published, principal)
    return schemas.BulkPublishResponse(
        count=result.count,
        submitted=result.submitted,
        status=result.status,
        results=[
            schemas.BulkItemResult(id=item.id, result=item.result) for item in result.results
        ],
    )


@router.patch("/posts/{id}", response_model=schemas.Post)
def update_post(
    id: int,
    payload: schemas.PostUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.Post:
    """Edit post content. Status changes go through PUT /admin/posts/{id}/status."""
    post = posts.update_post(db, id, payload, principal)
    return schemas.Post.model_validate(post)


@router.put("/posts/{id}/status", response_model=schemas.StatusResponse)
def set_post_status(
    id: int,
    payload: schemas.StatusChange,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.StatusResponse:
    result = lifecycle.set_post_status(db, id, payload.status, principal)
    return schemas.StatusResponse(id=result.id, status=result.status.value, changed=result.changed)


@router.delete("/posts/{id}", response_model=schemas.DeletePostResponse)
def delete_post(
    id: int,
    force: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.DeletePostResponse:
    """
    Delete a post.

    A post outside trash is moved to trash. A post already in trash, or any
    post with `force=true`, is removed for good with its gallery and comments.
    """
    result = cascade.delete_post(db, id, principal, force=force)
    return schemas.DeletePostResponse(id=result.id, permanently_deleted=result.permanently_deleted)


@router.post(
    "/posts/{id}/duplicate",
    response_model=schemas.DuplicatePostResponse,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_post(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.DuplicatePostResponse:
    copy = cascade.duplicate_post(db, id, principal)
    return schemas.DuplicatePostResponse(new_id=copy.id, title=copy.title, slug=copy.slug)


# ============================================================================
# COMMENTS
# ============================================================================


@router.get("/comments", response_model=schemas.Page[schemas.CommentAdmin])
def list_comments(
    status_filter: str = Query(moderation.ALL, alias="status"),
    search: str | None = Query(None, max_length=200),
    paging: Paging = Depends(get_paging),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.Page[schemas.CommentAdmin]:
    result = moderation.list_content(
        db, ContentKind.comment, status_filter, search, paging.page, paging.limit, principal
    )
    return create_page_response(result, schemas.CommentAdmin.model_validate)


@router.put("/comments/{id}/status", response_model=schemas.StatusResponse)
def set_comment_status(
    id: int,
    payload: schemas.StatusChange,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.StatusResponse:
    result = lifecycle.set_comment_status(db, id, payload.status, principal)
    return schemas.StatusResponse(id=result.id, status=result.status.value, changed=result.changed)


@router.delete("/comments/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> None:
    """Permanently delete a trashed comment together with all of its replies."""
    cascade.delete_comment(db, id, principal)


# ============================================================================
# USERS & AUDIT
# ============================================================================


@router.get("/users", response_model=schemas.Page[schemas.User])
def list_users(
    paging: Paging = Depends(get_paging),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.Page[schemas.User]:
    result = users.list_users(db, principal, paging.page, paging.limit)
    return create_page_response(result, schemas.User.model_validate)


@router.patch("/users/{id}", response_model=schemas.User)
def update_user(
    id: int,
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.User:
    """Update a user's name, email or role (admin only)."""
    user = users.update_user(db, id, payload, principal)
    return schemas.User.model_validate(user)


@router.delete("/users/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> None:
    users.delete_user(db, id, principal)


@router.get("/audit-log", response_model=schemas.Page[schemas.AuditLogEntry])
def get_audit_log(
    action: str | None = Query(None, max_length=100),
    paging: Paging = Depends(get_paging),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> schemas.Page[schemas.AuditLogEntry]:
    result = users.list_audit_log(db, principal, action, paging.page, paging.limit)
    return create_page_response(result, schemas.AuditLogEntry.model_validate)
