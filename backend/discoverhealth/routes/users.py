"""
DiscoverHealth Backend — User Route Handlers
==============================================

What:  Account creation and the session lifecycle.
How:   Handlers delegate to UserService. Login and logout replace
       request.state.session; SessionMiddleware turns that into Set-Cookie on
       the way out.

    POST /users/signup
    POST /users/login
    POST /users/logout
    GET  /users/user
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from discoverhealth.daos.session_dao import SessionData
from discoverhealth.routes.deps import current_session, get_services
from discoverhealth.schemas.common import ErrorResponse, MessageResponse
from discoverhealth.schemas.user import Credentials, LoginResponse, SignupResponse, UserStatus
from discoverhealth.services import Services

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/signup",
    status_code=201,
    response_model=SignupResponse,
    responses={400: {"description": "Invalid input or username taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def signup(
    credentials: Credentials,
    services: Services = Depends(get_services),
) -> SignupResponse:
    user_id = await services.users.signup(credentials.username, credentials.password)
    return SignupResponse(id=user_id)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed credentials", "model": ErrorResponse},
        401: {"description": "Invalid username or password", "model": ErrorResponse},
    },
    summary="Log in and receive a session cookie",
)
async def login(
    credentials: Credentials,
    request: Request,
    previous: Optional[SessionData] = Depends(current_session),
    services: Services = Depends(get_services),
) -> LoginResponse:
    session = await services.users.login(credentials.username, credentials.password, previous)
    request.state.session = session
    return LoginResponse(username=session.username)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="End the current session",
    description="Always succeeds; calling it without a session is a no-op.",
)
async def logout(
    request: Request,
    session: Optional[SessionData] = Depends(current_session),
    services: Services = Depends(get_services),
) -> MessageResponse:
    await services.users.logout(session)
    request.state.session = None
    return MessageResponse(message="Logout successful")


@router.get(
    "/user",
    response_model=UserStatus,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="Who is logged in",
)
async def user_status(
    session: Optional[SessionData] = Depends(current_session),
    services: Services = Depends(get_services),
) -> UserStatus:
    return services.users.status(session)
