"""
DiscoverHealth Backend — User Data Access
===========================================

What:  Parameterized reads and writes against the `users` table.
Who:   UserService.
"""

import logging
from typing import Optional

from sqlalchemy import select

from discoverhealth.database import Database
from discoverhealth.models.user import User

logger = logging.getLogger(__name__)


class UserDAO:
    """Accessor for user rows."""

    def __init__(self, database: Database):
        self.database = database

    async def create(self, username: str, password_hash: str) -> int:
        """
        Insert a user and return its id.

        Raises:
            sqlalchemy.exc.IntegrityError: the username is already taken
        """
        async with self.database.session() as session:
            user = User(username=username, password_hash=password_hash)
            session.add(user)
            await session.flush()  # Assigns the id inside the transaction
            return user.id

    async def get_by_username(self, username: str) -> Optional[User]:
        async with self.database.session() as session:
            result = await session.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
