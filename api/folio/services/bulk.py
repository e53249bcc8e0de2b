"""Bulk publish/unpublish of posts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from sqlalchemy import update
from sqlalchemy.orm import Session

from .. import models
from ..db import unit_of_work
from ..errors import ValidationError
from ..models import PostStatus
from ..utils.audit import log_moderation_action
from .roles import Capability, Principal, require_capability

logger = logging.getLogger(__name__)

BulkOutcome = Literal["updated", "not_found", "skipped"]


@dataclass
class BulkItem:
    id: int
    result: BulkOutcome


@dataclass
class BulkResult:
    """
    Outcome of a batch command.

    `count` is the number of rows the UPDATE actually changed, not the
    number of ids submitted.
    """

    status: PostStatus
    submitted: int
    count: int = 0
    results: list[BulkItem] = field(default_factory=list)


def bulk_set_post_published(
    db: Session, ids: list[int], is_published: bool, actor: Principal | None
) -> BulkResult:
    """
    Publish or unpublish many posts with one UPDATE.

    The capability is checked once for the whole batch; there is no per-id
    permission check. Unknown ids are reported as `not_found`. Trashed posts
    are `skipped`: trash is only left through restore, and this command never
    moves anything into trash.
    """
    require_capability(actor, Capability.MANAGE_CONTENT)
    if not ids:
        raise ValidationError("At least one post id is required")

    # Preserve submission order, drop duplicates
    unique_ids = list(dict.fromkeys(ids))
    target = PostStatus.published if is_published else PostStatus.draft
    result = BulkResult(status=target, submitted=len(unique_ids))

    with unit_of_work(db):
        current = dict(
            db.query(models.Post.id, models.Post.status)
            .filter(models.Post.id.in_(unique_ids))
            .all()
        )
        eligible = [
            post_id
            for post_id in unique_ids
            if post_id in current and current[post_id] != PostStatus.trash
        ]
        updated = 0
        if eligible:
            updated = db.execute(
                update(models.Post)
                .where(models.Post.id.in_(eligible))
                .where(models.Post.status != PostStatus.trash)
                .values(status=target)
                .execution_options(synchronize_session=False)
            ).rowcount
            log_moderation_action(
                db=db,
                actor_id=actor.id,
                action="bulk_set_post_published",
                target_type="post",
                target_id=None,
                note=f"{target.value}: {','.join(str(i) for i in eligible)}"[:1000],
            )
    db.expire_all()

    eligible_set = set(eligible)
    for post_id in unique_ids:
        if post_id in eligible_set:
            outcome: BulkOutcome = "updated"
        elif post_id in current:
            outcome = "skipped"
        else:
            outcome = "not_found"
        result.results.append(BulkItem(id=post_id, result=outcome))
    result.count = updated

    logger.info(
        f"Bulk {target.value}: {result.count} of {result.submitted} post(s) updated by user {actor.id}"
    )
    return result
