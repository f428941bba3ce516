"""
Tests for the permission evaluator
"""

import itertools

import pytest

from vtn.core.errors import Forbidden
from vtn.core.identity import AuthRole, Identity
from vtn.core.permissions import Action, EntityKind, authorize, can_write_ven_scoped, is_allowed

VEN_IDS = ["ven-1", "ven-2", "ven-3"]

ROLE_POOL = [
    AuthRole.business(),
    AuthRole.user_manager(),
    AuthRole.ven_manager(),
    AuthRole.ven("ven-1"),
    AuthRole.ven("ven-2"),
]

WRITES = [Action.CREATE, Action.UPDATE, Action.DELETE]


def all_identities():
    """Every non-empty combination of the role pool"""
    for size in range(1, len(ROLE_POOL) + 1):
        for roles in itertools.combinations(ROLE_POOL, size):
            yield Identity("client", roles)


class TestVenScopedWrite:
    def test_write_allowed_iff_manager_or_holding_ven(self):
        for identity in all_identities():
            for ven_id in VEN_IDS:
                expected = identity.is_ven_manager() or ven_id in identity.held_ven_ids()
                assert can_write_ven_scoped(identity, ven_id) == expected, (identity, ven_id)

    def test_missing_ven_id_only_for_managers(self):
        assert can_write_ven_scoped(Identity("c", [AuthRole.ven_manager()]), None)
        assert not can_write_ven_scoped(Identity("c", [AuthRole.ven("ven-1")]), None)

    def test_resource_actions_follow_write_rule(self):
        for identity in all_identities():
            for ven_id in VEN_IDS:
                expected = can_write_ven_scoped(identity, ven_id)
                for action in Action:
                    assert is_allowed(identity, EntityKind.RESOURCE, action, ven_id) == expected


class TestProgramsAndEvents:
    @pytest.mark.parametrize("kind", [EntityKind.PROGRAM, EntityKind.EVENT])
    def test_anyone_reads(self, kind):
        for identity in all_identities():
            assert is_allowed(identity, kind, Action.READ)

    @pytest.mark.parametrize("kind", [EntityKind.PROGRAM, EntityKind.EVENT])
    def test_only_business_writes(self, kind):
        for identity in all_identities():
            for action in WRITES:
                assert is_allowed(identity, kind, action) == identity.is_business()


class TestReports:
    def test_ven_creates_and_updates(self):
        ven = Identity("c", [AuthRole.ven("ven-1")])
        business = Identity("c", [AuthRole.business()])
        for action in (Action.CREATE, Action.UPDATE):
            assert is_allowed(ven, EntityKind.REPORT, action)
            assert not is_allowed(business, EntityKind.REPORT, action)

    def test_business_deletes(self):
        assert is_allowed(Identity("c", [AuthRole.business()]), EntityKind.REPORT, Action.DELETE)
        assert not is_allowed(Identity("c", [AuthRole.ven("ven-1")]), EntityKind.REPORT, Action.DELETE)


class TestVens:
    def test_read(self):
        assert is_allowed(Identity("c", [AuthRole.business()]), EntityKind.VEN, Action.READ, "ven-2")
        assert is_allowed(Identity("c", [AuthRole.ven_manager()]), EntityKind.VEN, Action.READ, "ven-2")
        ven = Identity("c", [AuthRole.ven("ven-1")])
        assert is_allowed(ven, EntityKind.VEN, Action.READ, "ven-1")
        assert not is_allowed(ven, EntityKind.VEN, Action.READ, "ven-2")
        assert not is_allowed(Identity("c", [AuthRole.user_manager()]), EntityKind.VEN, Action.READ, "ven-1")

    def test_only_ven_manager_writes(self):
        for identity in all_identities():
            for action in WRITES:
                assert is_allowed(identity, EntityKind.VEN, action, "ven-1") == identity.is_ven_manager()


class TestCredentials:
    def test_only_user_manager(self):
        for identity in all_identities():
            for action in Action:
                assert is_allowed(identity, EntityKind.CREDENTIAL, action) == identity.is_user_manager()


class TestAuthorize:
    def test_raises_forbidden(self):
        with pytest.raises(Forbidden) as exc_info:
            authorize(Identity("c", [AuthRole.ven("ven-1")]), EntityKind.RESOURCE, Action.UPDATE, "ven-2")
        assert exc_info.value.status_code == 403

    def test_passes_when_allowed(self):
        authorize(Identity("c", [AuthRole.ven("ven-1")]), EntityKind.RESOURCE, Action.UPDATE, "ven-1")
