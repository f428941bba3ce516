"""
Tests for the identity and role model
"""

import pytest

from vtn.core.errors import Unauthorized
from vtn.core.identity import AuthRole, Identity, RoleKind


class TestAuthRole:
    def test_ven_role_requires_id(self):
        with pytest.raises(ValueError):
            AuthRole(RoleKind.VEN)

    def test_non_ven_role_rejects_id(self):
        with pytest.raises(ValueError):
            AuthRole(RoleKind.BUSINESS, "ven-1")

    def test_claim_round_trip(self):
        for role in (AuthRole.business(), AuthRole.ven_manager(), AuthRole.user_manager(), AuthRole.ven("ven-1")):
            assert AuthRole.from_claim(role.to_claim()) == role

    def test_ven_claim_carries_id(self):
        assert AuthRole.ven("ven-1").to_claim() == {"role": "VEN", "id": "ven-1"}
        assert AuthRole.business().to_claim() == {"role": "BUSINESS"}

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            AuthRole.from_claim({"role": "ADMIN"})


class TestIdentity:
    def test_held_ven_ids(self):
        identity = Identity("c", [AuthRole.ven("ven-1"), AuthRole.ven("ven-2"), AuthRole.business()])
        assert identity.held_ven_ids() == frozenset({"ven-1", "ven-2"})

    def test_held_ven_ids_empty_without_ven_role(self):
        identity = Identity("c", [AuthRole.business(), AuthRole.ven_manager()])
        assert identity.held_ven_ids() == frozenset()

    def test_role_predicates(self):
        identity = Identity("c", [AuthRole.ven_manager(), AuthRole.ven("ven-1")])
        assert identity.is_ven_manager()
        assert identity.is_ven()
        assert not identity.is_business()
        assert not identity.is_user_manager()
        assert identity.has_role(RoleKind.VEN)

    def test_ven_manager_is_not_business(self):
        assert not Identity("c", [AuthRole.ven_manager()]).is_business()

    def test_from_claims(self):
        identity = Identity.from_claims({
            "sub": "client-1",
            "roles": [{"role": "BUSINESS"}, {"role": "VEN", "id": "ven-9"}],
        })
        assert identity.subject == "client-1"
        assert identity.roles == (AuthRole.business(), AuthRole.ven("ven-9"))

    @pytest.mark.parametrize("claims", [
        {"roles": [{"role": "BUSINESS"}]},
        {"sub": "client-1"},
        {"sub": "client-1", "roles": []},
        {"sub": "client-1", "roles": [{"role": "VEN"}]},
        {"sub": "client-1", "roles": [{"role": "ROOT"}]},
        {"sub": "client-1", "roles": ["BUSINESS"]},
    ])
    def test_from_claims_rejects_malformed(self, claims):
        with pytest.raises(Unauthorized):
            Identity.from_claims(claims)
