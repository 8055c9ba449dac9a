"""
DiscoverHealth Backend — User Service (Signup, Login, Logout, Status)
======================================================================

What:  Account and session lifecycle.
How:   Validates credentials, hashes/verifies passwords through
       PasswordHasher, persists users through UserDAO and sessions through
       SessionDAO.
Who:   /users route handlers.

Session State Machine:
    Anonymous ──(login success)──▶ Authenticated ──(logout | expiry)──▶ Anonymous
    A failed login leaves the caller Anonymous.

Error Handling Strategy:
    ValidationError      malformed username / password (before any storage call)
    ConflictError        UNIQUE violation on users.username
    AuthenticationError  unknown user or wrong password (same message for both)
    StorageError         any other SQLAlchemy failure (details logged only)
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from discoverhealth.daos.session_dao import SessionDAO, SessionData
from discoverhealth.daos.user_dao import UserDAO
from discoverhealth.exceptions import AuthenticationError, ConflictError, StorageError
from discoverhealth.schemas.user import UserStatus
from discoverhealth.services.security import PasswordHasher
from discoverhealth.services.validation import validate_password, validate_username

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic layer for accounts and sessions.

    Responsibilities:
        - signup(): validate, hash, insert
        - login(): validate, verify, open a session
        - logout(): close the current session (idempotent)
        - status(): describe the current session without touching storage
    """

    def __init__(
        self,
        user_dao: UserDAO,
        session_dao: SessionDAO,
        hasher: PasswordHasher,
        session_max_age: int,
    ):
        self.user_dao = user_dao
        self.session_dao = session_dao
        self.hasher = hasher
        self.session_max_age = session_max_age

    async def signup(self, username: Optional[str], password: Optional[str]) -> int:
        """
        Register a new account.

        Returns:
            The new user id.

        Raises:
            ValidationError: bad username or password
            ConflictError: username already taken (no row is created)
            StorageError: database failure
        """
        username = validate_username(username)
        password = validate_password(password)

        password_hash = await self.hasher.hash(password)
        try:
            user_id = await self.user_dao.create(username, password_hash)
        except IntegrityError:
            logger.info("Signup rejected: username '%s' already exists", username)
            raise ConflictError()
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e), exc_info=True)
            raise StorageError(context={"operation": "signup", "error_type": type(e).__name__})

        logger.info("User created: id=%s username='%s'", user_id, username)
        return user_id

    async def login(
        self,
        username: Optional[str],
        password: Optional[str],
        previous: Optional[SessionData] = None,
    ) -> SessionData:
        """
        Verify credentials and open a new session.

        Any session the caller already holds is destroyed first, so a token
        issued before login never becomes an authenticated one.

        Raises:
            ValidationError: malformed username or password
            AuthenticationError: unknown user or wrong password
            StorageError: database failure
        """
        username = validate_username(username)
        password = validate_password(password)

        try:
            user = await self.user_dao.get_by_username(username)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise StorageError(context={"operation": "login", "error_type": type(e).__name__})

        verified = await self.hasher.verify(password, user.password_hash if user else None)
        if user is None or not verified:
            logger.warning("Failed login for username '%s'", username)
            raise AuthenticationError()

        try:
            if previous is not None:
                await self.session_dao.destroy(previous.token)
            session = await self.session_dao.create(user.id, user.username, self.session_max_age)
        except SQLAlchemyError as e:
            logger.error("Database error creating session: %s", str(e), exc_info=True)
            raise StorageError(context={"operation": "login", "error_type": type(e).__name__})

        logger.info("User logged in: id=%s username='%s'", user.id, user.username)
        return session

    async def logout(self, session: Optional[SessionData]) -> None:
        """Destroy the session if there is one; a no-op otherwise."""
        if session is None:
            return
        try:
            await self.session_dao.destroy(session.token)
        except SQLAlchemyError as e:
            logger.error("Database error during logout: %s", str(e), exc_info=True)
            raise StorageError(context={"operation": "logout", "error_type": type(e).__name__})
        logger.info("User logged out: id=%s", session.user_id)

    def status(self, session: Optional[SessionData]) -> UserStatus:
        if session is None:
            return UserStatus(logged_in=False)
        return UserStatus(logged_in=True, username=session.username)
