"""
Notebox Backend — Token Service Unit Tests
============================================

What:  Tests for session token issuing and verification.
How:   Signs tokens with python-jose directly where a test needs a token the
       service would never issue itself.

What we test:
    ✅ Issued token verifies back to the same user id
    ✅ Expiry is `expire_hours` after the issue instant
    ✅ Expired, foreign-secret, wrong-algorithm and garbage tokens are rejected
    ✅ Tokens without a usable user_id claim are rejected
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from notebox.exceptions import UnauthorizedError
from notebox.services.token_service import TokenService

SECRET = "unit-test-secret-with-enough-length-0123456789"


class TestTokenIssue:

    def setup_method(self):
        self.service = TokenService(secret=SECRET, expire_hours=24)

    def test_round_trip_returns_user_id(self):
        token = self.service.issue(42)
        claim = self.service.verify(token)
        assert claim.user_id == 42

    def test_expiry_is_lifetime_after_issue(self):
        now = datetime.now(timezone.utc).replace(microsecond=0)
        claim = self.service.verify(self.service.issue(7, now=now))
        assert claim.expires_at == now + timedelta(hours=24)

    def test_token_is_hs256_by_default(self):
        token = self.service.issue(1)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService(secret="")


class TestTokenVerify:

    def setup_method(self):
        self.service = TokenService(secret=SECRET)

    def test_expired_token(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = self.service.issue(1, now=issued)

        with pytest.raises(UnauthorizedError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.message == "Token has expired"

    def test_token_signed_with_other_secret(self):
        other = TokenService(secret="a-completely-different-secret-value-xyz")
        token = other.issue(1)

        with pytest.raises(UnauthorizedError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.message == "Invalid token"

    def test_token_with_unexpected_algorithm(self):
        token = TokenService(secret=SECRET, algorithm="HS512").issue(1)
        with pytest.raises(UnauthorizedError):
            self.service.verify(token)

    def test_garbage_token(self):
        with pytest.raises(UnauthorizedError):
            self.service.verify("not.a.token")

    def test_tampered_token(self):
        token = self.service.issue(1)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(UnauthorizedError):
            self.service.verify(tampered)

    def test_missing_exp_rejected(self):
        token = jwt.encode({"user_id": 1}, SECRET, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            self.service.verify(token)

    @pytest.mark.parametrize("user_id", [None, "1", 1.5, True])
    def test_unusable_user_id_rejected(self, user_id):
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        payload = {"exp": exp}
        if user_id is not None:
            payload["user_id"] = user_id
        token = jwt.encode(payload, SECRET, algorithm="HS256")

        with pytest.raises(UnauthorizedError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.message == "Invalid token"
