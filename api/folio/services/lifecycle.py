"""
Content state machine for posts and comments.

Transition tables are fixed. A status change is validated in this order:
unknown target (VALIDATION) -> capability (AUTHORIZATION) -> lookup
(NOT_FOUND) -> same status (no-op) -> table membership (VALIDATION).
Nothing is written until every check has passed.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from .. import models
from ..db import unit_of_work
from ..errors import InvalidTransitionError, NotFoundError, ValidationError
from ..models import CommentStatus, PostStatus
from ..utils.audit import log_moderation_action
from .roles import Capability, Principal, require_capability

logger = logging.getLogger(__name__)


class ContentKind(str, enum.Enum):
    post = "post"
    comment = "comment"


POST_TRANSITIONS: frozenset[tuple[PostStatus, PostStatus]] = frozenset(
    {
        (PostStatus.draft, PostStatus.published),
        (PostStatus.published, PostStatus.draft),
        (PostStatus.draft, PostStatus.trash),
        (PostStatus.published, PostStatus.trash),
        (PostStatus.trash, PostStatus.draft),  # restore
    }
)

COMMENT_TRANSITIONS: frozenset[tuple[CommentStatus, CommentStatus]] = frozenset(
    {
        (CommentStatus.pending, CommentStatus.approved),
        (CommentStatus.approved, CommentStatus.pending),
        (CommentStatus.pending, CommentStatus.trash),
        (CommentStatus.approved, CommentStatus.trash),
        (CommentStatus.trash, CommentStatus.pending),  # restore
    }
)


@dataclass(frozen=True)
class KindRules:
    model: type
    status_enum: type[enum.Enum]
    transitions: frozenset
    capability: Capability
    label: str


RULES: dict[ContentKind, KindRules] = {
    ContentKind.post: KindRules(
        model=models.Post,
        status_enum=PostStatus,
        transitions=POST_TRANSITIONS,
        capability=Capability.MANAGE_CONTENT,
        label="Post",
    ),
    ContentKind.comment: KindRules(
        model=models.Comment,
        status_enum=CommentStatus,
        transitions=COMMENT_TRANSITIONS,
        capability=Capability.MANAGE_CONTENT,
        label="Comment",
    ),
}


@dataclass
class TransitionResult:
    id: int
    status: enum.Enum
    previous: enum.Enum
    changed: bool


def parse_status(kind: ContentKind, raw: object) -> enum.Enum:
    """Map a raw status value onto the kind's closed enumeration."""
    rules = RULES[kind]
    if isinstance(raw, rules.status_enum):
        return raw
    try:
        return rules.status_enum(raw)
    except ValueError:
        allowed = ", ".join(s.value for s in rules.status_enum)
        raise ValidationError(f"Invalid {kind.value} status {raw!r}; expected one of: {allowed}")


def is_allowed(kind: ContentKind, current: enum.Enum, target: enum.Enum) -> bool:
    return (current, target) in RULES[kind].transitions


def ensure_transition(kind: ContentKind, current: enum.Enum, target: enum.Enum) -> None:
    if not is_allowed(kind, current, target):
        raise InvalidTransitionError(
            f"{RULES[kind].label} cannot move from {current.value} to {target.value}"
        )


def set_status(
    db: Session,
    kind: ContentKind,
    entity_id: int,
    target: object,
    actor: Principal | None,
) -> TransitionResult:
    """
    Move a post or comment to `target`.

    Re-requesting the current status succeeds without writing anything, so
    client retries are harmless.
    """
    rules = RULES[kind]
    target_status = parse_status(kind, target)
    require_capability(actor, rules.capability)

    entity = db.query(rules.model).filter(rules.model.id == entity_id).first()
    if entity is None:
        raise NotFoundError(f"{rules.label} not found")

    current = entity.status
    if current == target_status:
        return TransitionResult(id=entity.id, status=current, previous=current, changed=False)

    ensure_transition(kind, current, target_status)

    with unit_of_work(db):
        entity.status = target_status
        log_moderation_action(
            db=db,
            actor_id=actor.id,
            action=f"set_{kind.value}_status",
            target_type=kind.value,
            target_id=entity.id,
            note=f"{current.value} -> {target_status.value}",
        )

    logger.info(f"{rules.label} {entity_id}: {current.value} -> {target_status.value} by user {actor.id}")
    return TransitionResult(id=entity_id, status=target_status, previous=current, changed=True)


def set_post_status(
    db: Session, post_id: int, target: object, actor: Principal | None
) -> TransitionResult:
    return set_status(db, ContentKind.post, post_id, target, actor)


def set_comment_status(
    db: Session, comment_id: int, target: object, actor: Principal | None
) -> TransitionResult:
    return set_status(db, ContentKind.comment, comment_id, target, actor)
