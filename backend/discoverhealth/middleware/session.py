"""
DiscoverHealth Backend — Session Middleware
=============================================

What:  Resolves the session cookie into `request.state.session` and writes the
       cookie back on the response.
How:   The cookie holds "<token>.<signature>". A valid signature and a live row
       in the sessions table yield a SessionData; anything else yields None.
Who:   Route handlers read `request.state.session` (see routes/deps.py); the
       login and logout handlers replace it.
When:  After logging, before the routers.

Response phase:
    handler replaced the session   → set cookie for the new one, or delete it
    live session left untouched    → slide expiry, re-issue cookie
    cookie present but unusable    → delete it

Cookie attributes: HttpOnly, SameSite=Strict, Path=/, Max-Age from settings,
Secure when SESSION_COOKIE_SECURE is on.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from discoverhealth.config import Settings
from discoverhealth.daos.session_dao import SessionDAO, SessionData
from discoverhealth.exceptions import StorageError
from discoverhealth.middleware.request_id import request_id_var
from discoverhealth.services.security import SessionCookieSigner

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """Server-side sessions keyed by a signed cookie."""

    def __init__(
        self,
        app,
        sessions: SessionDAO,
        signer: SessionCookieSigner,
        settings: Settings,
    ):
        super().__init__(app)
        self.sessions = sessions
        self.signer = signer
        self.cookie_name = settings.session_cookie_name
        self.max_age = settings.session_max_age
        self.secure = settings.session_cookie_secure

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        raw_cookie = request.cookies.get(self.cookie_name)

        try:
            loaded = await self._load(raw_cookie)
        except SQLAlchemyError as e:
            logger.error("Session lookup failed: %s", str(e), exc_info=True)
            return self._storage_error()

        request.state.session = loaded
        response = await call_next(request)
        current: Optional[SessionData] = getattr(request.state, "session", None)

        # ── Handler logged in or out ──────────────────────────────────────
        if current is not loaded:
            if current is not None:
                self._set_cookie(response, current)
            elif raw_cookie is not None:
                self._delete_cookie(response)
            return response

        # ── Untouched live session: rolling expiry ────────────────────────
        if loaded is not None:
            try:
                alive = await self.sessions.touch(loaded.token, self.max_age)
            except SQLAlchemyError as e:
                logger.error("Session renewal failed: %s", str(e), exc_info=True)
                return response
            if alive:
                self._set_cookie(response, loaded)
            else:
                self._delete_cookie(response)
        elif raw_cookie is not None:
            self._delete_cookie(response)

        return response

    async def _load(self, raw_cookie: Optional[str]) -> Optional[SessionData]:
        if not raw_cookie:
            return None
        token = self.signer.unsign(raw_cookie)
        if token is None:
            logger.debug("Rejected session cookie with bad signature")
            return None
        return await self.sessions.get(token)

    def _set_cookie(self, response: Response, session: SessionData) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=self.signer.sign(session.token),
            max_age=self.max_age,
            path="/",
            httponly=True,
            samesite="strict",
            secure=self.secure,
        )

    def _delete_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            samesite="strict",
            secure=self.secure,
        )

    @staticmethod
    def _storage_error() -> JSONResponse:
        exc = StorageError()
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": "An internal error occurred. Please try again later.",
                "details": None,
                "request_id": request_id_var.get(""),
            },
        )
