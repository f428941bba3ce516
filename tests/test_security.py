"""
Tests for token issuing/verification and secret hashing
"""

from datetime import timedelta

import pytest

from vtn.core.errors import Unauthorized
from vtn.core.identity import AuthRole
from vtn.core.security import TokenManager, hash_secret, verify_secret


class TestTokenManager:
    def test_round_trip_keeps_roles(self, token_manager):
        roles = [AuthRole.business(), AuthRole.ven("ven-1"), AuthRole.ven("ven-2")]
        identity = token_manager.decode(token_manager.create_token("client-1", roles))

        assert identity.subject == "client-1"
        assert list(identity.roles) == roles
        assert identity.held_ven_ids() == frozenset({"ven-1", "ven-2"})

    def test_expired_token(self, token_manager):
        token = token_manager.create_token("client-1", [AuthRole.business()], expires_delta=timedelta(seconds=-30))
        with pytest.raises(Unauthorized):
            token_manager.decode(token)

    def test_foreign_signature(self, token_manager):
        other = TokenManager(secret_key="another-secret-key-that-is-long-enough-for-hs256")
        token = other.create_token("client-1", [AuthRole.business()])
        with pytest.raises(Unauthorized):
            token_manager.decode(token)

    def test_foreign_issuer(self):
        secret = "shared-secret-key-that-is-long-enough-for-hs256"
        token = TokenManager(secret_key=secret, issuer="someone-else").create_token("client-1", [AuthRole.business()])
        with pytest.raises(Unauthorized):
            TokenManager(secret_key=secret).decode(token)

    def test_garbage(self, token_manager):
        with pytest.raises(Unauthorized):
            token_manager.decode("not-a-token")


class TestSecretHashing:
    def test_verify(self):
        hashed = hash_secret("secret-secret")
        assert hashed != "secret-secret"
        assert verify_secret("secret-secret", hashed)
        assert not verify_secret("other-secret", hashed)
