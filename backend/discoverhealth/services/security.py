"""
DiscoverHealth Backend — Password Hashing & Cookie Signing
============================================================

What:  The two cryptographic primitives of the auth layer.
How:
    PasswordHasher      passlib CryptContext with pbkdf2_sha256. Hash and
                        verify run in Starlette's threadpool because they are
                        deliberately slow and CPU bound.
    SessionCookieSigner itsdangerous Signer (HMAC) over the opaque session
                        token. The cookie value is "<token>.<signature>"; a
                        value whose signature does not verify is rejected
                        before the session store is queried.
Who:   UserService (hash/verify), SessionMiddleware (sign/unsign).
"""

import logging
from typing import Optional

from itsdangerous import BadSignature, Signer
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class PasswordHasher:
    """
    Salted, slow one-way hashing of passwords.

    `verify` compares digests in constant time (passlib). When the user does
    not exist, `verify(password, None)` still burns one hash worth of CPU so
    response time does not reveal whether the username is registered.
    """

    def __init__(self, rounds: int):
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__rounds=rounds,
        )

    async def hash(self, password: str) -> str:
        return await run_in_threadpool(self._context.hash, password)

    async def verify(self, password: str, password_hash: Optional[str]) -> bool:
        if password_hash is None:
            await run_in_threadpool(self._context.dummy_verify)
            return False
        try:
            return await run_in_threadpool(self._context.verify, password, password_hash)
        except ValueError:
            # Stored value is not a recognizable hash
            logger.error("Unrecognized password hash format in users table")
            return False


class SessionCookieSigner:
    """Signs session tokens for the cookie and verifies them on the way back."""

    SALT = "discoverhealth.session"

    def __init__(self, secret: str):
        self._signer = Signer(secret, salt=self.SALT)

    def sign(self, token: str) -> str:
        return self._signer.sign(token).decode("utf-8")

    def unsign(self, value: str) -> Optional[str]:
        """Return the token, or None when the value was not signed by us."""
        try:
            return self._signer.unsign(value).decode("utf-8")
        except BadSignature:
            return None
