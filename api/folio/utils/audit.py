"""Audit logging utility for moderation and administration actions."""

from __future__ import annotations

from sqlalchemy.orm import Session

from .. import models


def log_moderation_action(
    db: Session,
    actor_id: int | None,
    action: str,
    target_type: str | None = None,
    target_id: int | str | None = None,
    note: str | None = None,
) -> models.AuditLog:
    """
    Record a moderation action in the audit log.

    The entry is only added to the session: it is committed together with the
    change it describes by the caller's unit of work, so an action that rolls
    back leaves no audit trace either.

    Args:
        db: Database session
        actor_id: ID of the user performing the action
        action: Action name (e.g., "set_post_status", "force_delete_post")
        target_type: Type of target ("post", "comment", "user")
        target_id: ID of the target entity
        note: Additional context, e.g. "draft -> published"

    Returns:
        The pending AuditLog entry
    """
    audit_entry = models.AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        note=note,
    )
    db.add(audit_entry)
    return audit_entry
