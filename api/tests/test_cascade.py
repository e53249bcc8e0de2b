"""Hard delete, duplication and comment subtree removal."""

import pytest
from sqlalchemy.orm import Session

from folio.errors import AuthorizationError, InvalidTransitionError, NotFoundError
from folio.models import AuditLog, Comment, CommentStatus, GalleryImage, Post, PostStatus
from folio.services.cascade import (
    collect_comment_subtree,
    delete_comment,
    delete_post,
    duplicate_post,
    hard_delete_post,
)


def test_hard_delete_removes_gallery_and_comments(
    db: Session, make_post, make_comment, admin_principal
):
    post = make_post(status=PostStatus.trash, gallery=3)
    root = make_comment(post)
    make_comment(post, parent=root)
    other = make_post(gallery=1)
    make_comment(other)

    hard_delete_post(db, post.id, admin_principal)

    assert db.get(Post, post.id) is None
    assert db.query(GalleryImage).filter(GalleryImage.post_id == post.id).count() == 0
    assert db.query(Comment).filter(Comment.post_id == post.id).count() == 0
    # Other posts are untouched
    assert db.query(GalleryImage).count() == 1
    assert db.query(Comment).count() == 1


@pytest.mark.parametrize("status", [PostStatus.draft, PostStatus.published])
def test_hard_delete_requires_trash(db: Session, make_post, admin_principal, status):
    post = make_post(status=status)

    with pytest.raises(InvalidTransitionError):
        hard_delete_post(db, post.id, admin_principal)

    db.expire_all()
    assert db.get(Post, post.id).status == status


def test_delete_post_outside_trash_is_soft(db: Session, make_post, admin_principal):
    post = make_post(status=PostStatus.published, gallery=2)

    result = delete_post(db, post.id, admin_principal)

    assert result.permanently_deleted is False
    db.expire_all()
    assert db.get(Post, post.id).status == PostStatus.trash
    assert db.query(GalleryImage).count() == 2


def test_delete_post_in_trash_is_permanent(db: Session, make_post, admin_principal):
    post = make_post(status=PostStatus.trash)

    result = delete_post(db, post.id, admin_principal)

    assert result.permanently_deleted is True
    assert db.get(Post, post.id) is None


def test_force_delete_is_audited_separately(db: Session, make_post, admin_principal):
    post = make_post(status=PostStatus.published)

    result = delete_post(db, post.id, admin_principal, force=True)

    assert result.permanently_deleted is True
    assert db.get(Post, post.id) is None
    entry = db.query(AuditLog).one()
    assert entry.action == "force_delete_post"
    assert entry.note == "deleted from published"


def test_delete_missing_post(db: Session, admin_principal):
    with pytest.raises(NotFoundError):
        delete_post(db, 12345, admin_principal)


def test_viewer_cannot_delete(db: Session, make_post, viewer_principal):
    post = make_post(status=PostStatus.trash)

    with pytest.raises(AuthorizationError):
        delete_post(db, post.id, viewer_principal)
    with pytest.raises(AuthorizationError):
        hard_delete_post(db, post.id, viewer_principal, force=True)

    assert db.get(Post, post.id) is not None


def test_duplicate_published_post_is_a_draft(db: Session, make_post, admin_principal):
    source = make_post(status=PostStatus.published, gallery=3)
    source.views = 42
    source.likes = 7
    db.commit()

    copy = duplicate_post(db, source.id, admin_principal)

    assert copy.id != source.id
    assert copy.status == PostStatus.draft
    assert copy.title == f"Copy of {source.title}"
    assert copy.slug != source.slug
    assert copy.slug.startswith(f"{source.slug}-copy-")
    assert copy.views == 0
    assert copy.likes == 0

    source_images = {image.id for image in source.gallery}
    copied_images = {image.id for image in copy.gallery}
    assert len(copy.gallery) == len(source.gallery) == 3
    assert source_images.isdisjoint(copied_images)
    assert [image.path for image in copy.gallery] == [image.path for image in source.gallery]

    db.expire_all()
    assert db.get(Post, source.id).status == PostStatus.published


def test_duplicate_missing_post(db: Session, admin_principal):
    with pytest.raises(NotFoundError):
        duplicate_post(db, 404, admin_principal)


def test_delete_comment_removes_reply_chain(db: Session, make_post, make_comment, admin_principal):
    post = make_post(status=PostStatus.published)
    root = make_comment(post, status=CommentStatus.trash)
    child = make_comment(post, parent=root)
    grandchild = make_comment(post, parent=child)
    great_grandchild = make_comment(post, parent=grandchild)
    sibling = make_comment(post)

    assert set(collect_comment_subtree(db, root.id)) == {
        root.id,
        child.id,
        grandchild.id,
        great_grandchild.id,
    }

    removed = delete_comment(db, root.id, admin_principal)

    assert removed == 4
    remaining = [c.id for c in db.query(Comment).all()]
    assert remaining == [sibling.id]


def test_delete_comment_requires_trash(db: Session, make_post, make_comment, admin_principal):
    comment = make_comment(make_post(), status=CommentStatus.approved)

    with pytest.raises(InvalidTransitionError):
        delete_comment(db, comment.id, admin_principal)

    assert db.get(Comment, comment.id) is not None


def test_duplicate_of_long_slug_fits_column(db: Session, make_post, admin_principal):
    source = make_post()
    source.slug = "a" * 250
    db.commit()

    copy = duplicate_post(db, source.id, admin_principal)
    second = duplicate_post(db, copy.id, admin_principal)

    for duplicated in (copy, second):
        assert len(duplicated.slug) <= 255
        assert duplicated.slug.startswith("a" * 225 + "-copy-")


def test_viewer_cannot_duplicate(db: Session, make_post, viewer_principal):
    source = make_post(gallery=2)
    posts_before = db.query(Post).count()

    with pytest.raises(AuthorizationError):
        duplicate_post(db, source.id, viewer_principal)

    db.expire_all()
    assert db.query(Post).count() == posts_before
    assert db.query(GalleryImage).count() == 2
    assert db.query(AuditLog).count() == 0


def test_viewer_cannot_delete_comment(db: Session, make_post, make_comment, viewer_principal):
    post = make_post(status=PostStatus.published)
    root = make_comment(post, status=CommentStatus.trash)
    reply = make_comment(post, parent=root)

    with pytest.raises(AuthorizationError):
        delete_comment(db, root.id, viewer_principal)

    db.expire_all()
    assert {c.id for c in db.query(Comment).all()} == {root.id, reply.id}
    assert db.query(AuditLog).count() == 0
