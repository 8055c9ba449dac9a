"""
DiscoverHealth Backend — Password Hashing & Cookie Signing Tests
==================================================================

What we test:
    ✅ Hashes are salted and verify only the right password
    ✅ Unknown users (no hash) and corrupt hashes verify as False
    ✅ Signed cookies round-trip; tampered or foreign ones are rejected
"""

import pytest

from discoverhealth.services.security import PasswordHasher, SessionCookieSigner


class TestPasswordHasher:

    @pytest.mark.asyncio
    async def test_hash_is_not_plaintext_and_salted(self, fast_hasher):
        first = await fast_hasher.hash("longpassword1")
        second = await fast_hasher.hash("longpassword1")
        assert "longpassword1" not in first
        assert first != second

    @pytest.mark.asyncio
    async def test_verify(self, fast_hasher):
        stored = await fast_hasher.hash("longpassword1")
        assert await fast_hasher.verify("longpassword1", stored) is True
        assert await fast_hasher.verify("longpassword2", stored) is False

    @pytest.mark.asyncio
    async def test_verify_without_hash_is_false(self, fast_hasher):
        assert await fast_hasher.verify("longpassword1", None) is False

    @pytest.mark.asyncio
    async def test_verify_corrupt_hash_is_false(self, fast_hasher):
        assert await fast_hasher.verify("longpassword1", "not-a-hash") is False

    @pytest.mark.asyncio
    async def test_hash_records_configured_rounds(self):
        stored = await PasswordHasher(rounds=1234).hash("longpassword1")
        assert stored.startswith("$pbkdf2-sha256$1234$")


class TestSessionCookieSigner:

    def setup_method(self):
        self.signer = SessionCookieSigner("a-sufficiently-long-secret")

    def test_round_trip(self):
        signed = self.signer.sign("token123")
        assert signed != "token123"
        assert self.signer.unsign(signed) == "token123"

    def test_tampered_value_rejected(self):
        signed = self.signer.sign("token123")
        assert self.signer.unsign("token124" + signed[len("token123"):]) is None

    def test_unsigned_value_rejected(self):
        assert self.signer.unsign("token123") is None

    def test_other_secret_rejected(self):
        signed = SessionCookieSigner("another-long-secret-value").sign("token123")
        assert self.signer.unsign(signed) is None
