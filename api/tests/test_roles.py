"""Role resolution and capability checks."""

import pytest

from folio.errors import AuthorizationError
from folio.models import Role
from folio.services.roles import (
    Capability,
    Principal,
    ensure_not_self,
    ensure_not_self_demotion,
    has_capability,
    require_capability,
    resolve_capabilities,
    resolve_role,
)


@pytest.mark.parametrize(
    "principal,expected",
    [
        (Principal(id=1, role="admin"), Role.admin),
        (Principal(id=1, role="editor"), Role.editor),
        (Principal(id=1, role=Role.viewer), Role.viewer),
        # Role wins over the legacy flag in both directions
        (Principal(id=1, is_admin=True, role="viewer"), Role.viewer),
        (Principal(id=1, is_admin=False, role="admin"), Role.admin),
        # Legacy records without a role
        (Principal(id=1, is_admin=True), Role.admin),
        (Principal(id=1, is_admin=False), Role.viewer),
        (Principal(id=1), Role.viewer),
        # Unknown role strings never grant anything
        (Principal(id=1, role="superuser"), Role.viewer),
        (Principal(id=1, is_admin=True, role="superuser"), Role.viewer),
    ],
)
def test_resolve_role(principal, expected):
    assert resolve_role(principal) == expected


def test_capabilities_by_role():
    viewer = resolve_capabilities(Principal(id=1, role="viewer"))
    editor = resolve_capabilities(Principal(id=1, role="editor"))
    admin = resolve_capabilities(Principal(id=1, role="admin"))

    assert viewer == {Capability.VIEW, Capability.COMMENT}
    assert Capability.MANAGE_CONTENT in editor
    assert Capability.MANAGE_USERS not in editor
    assert admin == set(Capability)


def test_anonymous_has_no_capabilities():
    assert resolve_capabilities(None) == frozenset()
    assert not has_capability(None, Capability.VIEW)


def test_require_capability_raises_for_missing_capability():
    with pytest.raises(AuthorizationError):
        require_capability(Principal(id=1, role="viewer"), Capability.MANAGE_CONTENT)
    with pytest.raises(AuthorizationError):
        require_capability(None, Capability.MANAGE_CONTENT)

    # Legacy admin flag is enough on its own
    require_capability(Principal(id=1, is_admin=True), Capability.MANAGE_USERS)


def test_self_demotion_is_refused():
    me = Principal(id=7, role="admin")
    with pytest.raises(AuthorizationError):
        ensure_not_self_demotion(7, Role.editor, me)

    ensure_not_self_demotion(7, Role.admin, me)
    ensure_not_self_demotion(7, None, me)
    ensure_not_self_demotion(8, Role.viewer, me)


def test_self_delete_is_refused():
    with pytest.raises(AuthorizationError):
        ensure_not_self(3, Principal(id=3, role="admin"))
    ensure_not_self(4, Principal(id=3, role="admin"))
