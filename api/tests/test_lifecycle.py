"""Post and comment status transitions."""

import pytest
from sqlalchemy.orm import Session

from folio import schemas
from folio.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from folio.models import AuditLog, Comment, CommentStatus, Post, PostStatus
from folio.services.lifecycle import (
    COMMENT_TRANSITIONS,
    POST_TRANSITIONS,
    set_comment_status,
    set_post_status,
)
from folio.services.roles import Principal


@pytest.mark.parametrize("current,target", sorted(POST_TRANSITIONS))
def test_allowed_post_transitions(db: Session, make_post, admin_principal, current, target):
    post = make_post(status=current)

    result = set_post_status(db, post.id, target.value, admin_principal)

    assert result.changed is True
    assert result.previous == current
    db.expire_all()
    stored = db.get(Post, post.id)
    assert stored.status == target
    assert schemas.PostSummary.model_validate(stored).is_published == (target == PostStatus.published)


@pytest.mark.parametrize("current,target", sorted(COMMENT_TRANSITIONS))
def test_allowed_comment_transitions(
    db: Session, make_post, make_comment, admin_principal, current, target
):
    comment = make_comment(make_post(status=PostStatus.published), status=current)

    result = set_comment_status(db, comment.id, target, admin_principal)

    assert result.changed is True
    db.expire_all()
    assert db.get(Comment, comment.id).status == target


def test_trash_cannot_go_straight_to_published(db: Session, make_post, admin_principal):
    post = make_post(status=PostStatus.trash)

    with pytest.raises(InvalidTransitionError):
        set_post_status(db, post.id, "published", admin_principal)

    db.expire_all()
    assert db.get(Post, post.id).status == PostStatus.trash


def test_trash_comment_cannot_be_approved(db: Session, make_post, make_comment, admin_principal):
    comment = make_comment(make_post(), status=CommentStatus.trash)
    with pytest.raises(InvalidTransitionError):
        set_comment_status(db, comment.id, "approved", admin_principal)


@pytest.mark.parametrize("status", list(PostStatus))
def test_same_status_is_a_noop(db: Session, make_post, admin_principal, status):
    post = make_post(status=status)

    result = set_post_status(db, post.id, status.value, admin_principal)

    assert result.changed is False
    assert result.status == status
    assert db.query(AuditLog).count() == 0


def test_unknown_status_is_validation_error_even_without_capability(
    db: Session, make_post, viewer_principal
):
    post = make_post()

    with pytest.raises(ValidationError) as excinfo:
        set_post_status(db, post.id, "archived", viewer_principal)
    assert not isinstance(excinfo.value, InvalidTransitionError)

    with pytest.raises(ValidationError):
        set_post_status(db, post.id, "archived", None)


def test_comment_status_vocabulary_is_separate(db: Session, make_post, make_comment, admin_principal):
    comment = make_comment(make_post())
    with pytest.raises(ValidationError):
        set_comment_status(db, comment.id, "published", admin_principal)


def test_viewer_cannot_change_status(db: Session, make_post, viewer_principal):
    post = make_post()

    with pytest.raises(AuthorizationError):
        set_post_status(db, post.id, "published", viewer_principal)

    db.expire_all()
    assert db.get(Post, post.id).status == PostStatus.draft


def test_legacy_admin_flag_can_change_status(db: Session, make_post, admin):
    post = make_post()
    result = set_post_status(db, post.id, "published", Principal(id=admin.id, is_admin=True))
    assert result.status == PostStatus.published


def test_missing_post_is_not_found(db: Session, admin_principal):
    with pytest.raises(NotFoundError):
        set_post_status(db, 9999, "published", admin_principal)


def test_authorization_is_checked_before_lookup(db: Session, viewer_principal):
    with pytest.raises(AuthorizationError):
        set_post_status(db, 9999, "published", viewer_principal)


def test_transition_is_audited(db: Session, make_post, admin_principal):
    post = make_post()

    set_post_status(db, post.id, "published", admin_principal)

    entry = db.query(AuditLog).one()
    assert entry.action == "set_post_status"
    assert entry.actor_id == admin_principal.id
    assert entry.target_id == str(post.id)
    assert entry.note == "draft -> published"


def test_viewer_cannot_moderate_comment(db: Session, make_post, make_comment, viewer_principal):
    comment = make_comment(make_post(status=PostStatus.published))

    with pytest.raises(AuthorizationError):
        set_comment_status(db, comment.id, "approved", viewer_principal)

    db.expire_all()
    assert db.get(Comment, comment.id).status == CommentStatus.pending
    assert db.query(AuditLog).count() == 0
