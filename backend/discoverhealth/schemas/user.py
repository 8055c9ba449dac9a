"""
DiscoverHealth Backend — User & Session Schemas
=================================================

What:  Request bodies for signup/login and the responses of the /users routes.

Request fields are Optional on purpose: presence, character class and length
are business rules checked by UserService, which reports them as 400
validation errors with the failing field.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Body of POST /users/signup and POST /users/login."""
    username: Optional[str] = Field(default=None, description="Letters, digits and underscore")
    password: Optional[str] = Field(default=None, description="At least 8 characters")


class SignupResponse(BaseModel):
    id: int = Field(description="New user identifier")
    message: str = Field(default="User created successfully")


class LoginResponse(BaseModel):
    username: str
    message: str = Field(default="Login successful")


class UserStatus(BaseModel):
    """
    What:  Result of GET /users/user.
    How:   Serialized with the camelCase alias the browser client expects:
           {"loggedIn": true, "username": "alice"} or {"loggedIn": false}.
    """
    model_config = ConfigDict(populate_by_name=True)

    logged_in: bool = Field(alias="loggedIn")
    username: Optional[str] = None
