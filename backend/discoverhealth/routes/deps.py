"""
DiscoverHealth Backend — Route Dependencies
=============================================

What:  FastAPI dependencies shared by the routers.
How:   The service graph built in create_app() lives on app.state; the current
       session is whatever SessionMiddleware resolved for this request.

    get_services     → Services container
    current_session  → SessionData or None
    require_login    → SessionData, or AuthorizationError (401)
"""

from typing import Optional

from fastapi import Depends, Request

from discoverhealth.daos.session_dao import SessionData
from discoverhealth.exceptions import AuthorizationError
from discoverhealth.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def current_session(request: Request) -> Optional[SessionData]:
    return getattr(request.state, "session", None)


def require_login(session: Optional[SessionData] = Depends(current_session)) -> SessionData:
    """Gate for mutating routes: runs after JSON decoding, before type and field rules."""
    if session is None:
        raise AuthorizationError()
    return session
