"""
Role resolution and capability checks.

Every mutating service calls `require_capability` before touching storage;
it is the single gate between an actor and the content lifecycle.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import AuthorizationError
from ..models import Role

if TYPE_CHECKING:
    from .. import models

logger = logging.getLogger(__name__)


class Capability(str, enum.Enum):
    VIEW = "VIEW"
    COMMENT = "COMMENT"
    MANAGE_CONTENT = "MANAGE_CONTENT"
    MANAGE_USERS = "MANAGE_USERS"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.viewer: frozenset({Capability.VIEW, Capability.COMMENT}),
    Role.editor: frozenset(
        {Capability.VIEW, Capability.COMMENT, Capability.MANAGE_CONTENT}
    ),
    Role.admin: frozenset(
        {
            Capability.VIEW,
            Capability.COMMENT,
            Capability.MANAGE_CONTENT,
            Capability.MANAGE_USERS,
        }
    ),
}


@dataclass(frozen=True)
class Principal:
    """
    Acting principal as handed over by the capability-check collaborator.

    `role` is authoritative when present. Records from older schemas only
    carry `is_admin`; those are resolved through the legacy fallback.
    """

    id: int
    is_admin: bool | None = None
    role: Role | str | None = None

    @classmethod
    def from_user(cls, user: "models.User") -> "Principal":
        return cls(id=user.id, role=user.role)


def resolve_role(principal: Principal) -> Role:
    """
    Compute the effective role of a principal.

    - A non-null `role` wins, whatever `is_admin` says.
    - Without a role, `is_admin=True` is admin-equivalent, anything else is a viewer.
    - Unknown role strings resolve to viewer rather than granting anything.
    """
    if principal.role is not None:
        try:
            return Role(principal.role)
        except ValueError:
            logger.warning(
                f"resolve_role: unknown role {principal.role!r} for principal {principal.id}, treating as viewer"
            )
            return Role.viewer

    return Role.admin if principal.is_admin else Role.viewer


def resolve_capabilities(principal: Principal | None) -> frozenset[Capability]:
    if principal is None:
        return frozenset()
    return ROLE_CAPABILITIES[resolve_role(principal)]


def has_capability(principal: Principal | None, capability: Capability) -> bool:
    return capability in resolve_capabilities(principal)


def require_capability(principal: Principal | None, capability: Capability) -> None:
    """Raise AuthorizationError unless the principal holds `capability`."""
    if not has_capability(principal, capability):
        actor = principal.id if principal is not None else "anonymous"
        logger.info(f"require_capability: {actor} lacks {capability.value}")
        raise AuthorizationError(f"{capability.value} capability required")


def ensure_not_self_demotion(
    target_user_id: int, new_role: Role | None, actor: Principal
) -> None:
    """
    An admin editing their own record may not drop their admin role.

    Raises AuthorizationError for a self-demotion attempt.
    """
    if target_user_id != actor.id or new_role is None:
        return
    if resolve_role(actor) == Role.admin and new_role != Role.admin:
        logger.warning(f"ensure_not_self_demotion: admin {actor.id} tried to demote themselves to {new_role.value}")
        raise AuthorizationError("You cannot remove your own admin role")


def ensure_not_self(target_user_id: int, actor: Principal) -> None:
    """Administrators cannot delete their own account."""
    if target_user_id == actor.id:
        raise AuthorizationError("You cannot delete your own account")
