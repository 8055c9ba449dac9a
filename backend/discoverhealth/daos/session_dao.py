"""
DiscoverHealth Backend — Server-Side Session Store
====================================================

What:  Persists login sessions in the `sessions` table, keyed by an opaque
       random token.
Who:   UserService (create on login, destroy on logout) and SessionMiddleware
       (resolve and renew on every request).

Expiry:
    All expiry comparisons happen in SQL against the current UTC time, so a
    row past `expires_at` is never returned even if it has not been purged
    yet. Expired rows are removed lazily on lookup and in bulk at startup.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select, update

from discoverhealth.database import Database
from discoverhealth.models.session import SessionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionData:
    """Request-scoped copy of a session: everything handlers may read."""
    token: str
    user_id: int
    username: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionDAO:
    """Accessor for session rows."""

    def __init__(self, database: Database):
        self.database = database

    async def create(self, user_id: int, username: str, max_age: int) -> SessionData:
        token = secrets.token_urlsafe(32)
        now = _utcnow()
        async with self.database.session() as session:
            session.add(
                SessionRecord(
                    token=token,
                    user_id=user_id,
                    username=username,
                    created_at=now,
                    expires_at=now + timedelta(seconds=max_age),
                )
            )
        return SessionData(token=token, user_id=user_id, username=username)

    async def get(self, token: str) -> Optional[SessionData]:
        """Return the live session for `token`, or None if absent or expired."""
        now = _utcnow()
        async with self.database.session() as session:
            result = await session.execute(
                select(SessionRecord).where(
                    SessionRecord.token == token,
                    SessionRecord.expires_at > now,
                )
            )
            record = result.scalar_one_or_none()
            if record is None:
                await session.execute(
                    delete(SessionRecord).where(
                        SessionRecord.token == token,
                        SessionRecord.expires_at <= now,
                    )
                )
                return None
            return SessionData(
                token=record.token,
                user_id=record.user_id,
                username=record.username,
            )

    async def touch(self, token: str, max_age: int) -> bool:
        """Slide the expiry of a live session forward; False if it is gone."""
        now = _utcnow()
        async with self.database.session() as session:
            result = await session.execute(
                update(SessionRecord)
                .where(SessionRecord.token == token, SessionRecord.expires_at > now)
                .values(expires_at=now + timedelta(seconds=max_age))
            )
            return result.rowcount > 0

    async def destroy(self, token: str) -> None:
        async with self.database.session() as session:
            await session.execute(delete(SessionRecord).where(SessionRecord.token == token))

    async def purge_expired(self) -> int:
        async with self.database.session() as session:
            result = await session.execute(
                delete(SessionRecord).where(SessionRecord.expires_at <= _utcnow())
            )
            purged = result.rowcount or 0
        if purged:
            logger.info("Purged %d expired sessions", purged)
        return purged
