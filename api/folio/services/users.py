"""User administration: role changes, removal and the audit trail."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import unit_of_work
from ..errors import NotFoundError, ValidationError
from ..utils.audit import log_moderation_action
from .moderation import ContentPage, validate_paging
from .roles import (
    Capability,
    Principal,
    ensure_not_self,
    ensure_not_self_demotion,
    require_capability,
)

logger = logging.getLogger(__name__)


def _get_user(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(
    db: Session, actor: Principal | None, page: int = 1, limit: int = 10
) -> ContentPage:
    require_capability(actor, Capability.MANAGE_USERS)
    validate_paging(page, limit)

    query = db.query(models.User)
    total = query.count()
    items = (
        query.order_by(models.User.created_at.desc(), models.User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ContentPage(items=items, total=total, page=page, limit=limit)


def update_user(
    db: Session, user_id: int, payload: schemas.UserUpdate, actor: Principal | None
) -> models.User:
    """
    Edit a user's name, email or role.

    An administrator cannot take away their own admin role; another
    administrator has to do it.
    """
    require_capability(actor, Capability.MANAGE_USERS)
    ensure_not_self_demotion(user_id, payload.role, actor)
    user = _get_user(db, user_id)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = changes["email"].strip().lower()
        taken = (
            db.query(models.User.id)
            .filter(models.User.email == changes["email"], models.User.id != user_id)
            .first()
        )
        if taken is not None:
            raise ValidationError("Email already in use")

    previous_role = user.role
    with unit_of_work(db):
        for field, value in changes.items():
            setattr(user, field, value)
        note = None
        if "role" in changes and changes["role"] != previous_role:
            note = f"{previous_role.value} -> {changes['role'].value}"
        log_moderation_action(
            db=db,
            actor_id=actor.id,
            action="update_user",
            target_type="user",
            target_id=user_id,
            note=note,
        )

    if note:
        logger.info(f"User {user_id} role changed ({note}) by user {actor.id}")
    return user


def delete_user(db: Session, user_id: int, actor: Principal | None) -> None:
    require_capability(actor, Capability.MANAGE_USERS)
    ensure_not_self(user_id, actor)
    user = _get_user(db, user_id)

    with unit_of_work(db):
        email = user.email
        db.delete(user)
        log_moderation_action(
            db=db,
            actor_id=actor.id,
            action="delete_user",
            target_type="user",
            target_id=user_id,
            note=email,
        )

    logger.info(f"User {user_id} deleted by user {actor.id}")


def list_audit_log(
    db: Session,
    actor: Principal | None,
    action: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> ContentPage:
    """Audit entries, newest first, optionally narrowed to one action name."""
    require_capability(actor, Capability.MANAGE_USERS)
    validate_paging(page, limit)

    query = db.query(models.AuditLog)
    if action:
        query = query.filter(models.AuditLog.action == action)
    total = query.count()
    items = (
        query.order_by(models.AuditLog.created_at.desc(), models.AuditLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ContentPage(items=items, total=total, page=page, limit=limit)
