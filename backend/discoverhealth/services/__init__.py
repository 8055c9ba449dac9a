"""
DiscoverHealth Backend — Services Layer
=========================================

What:  Business logic between routes (HTTP) and DAOs (persistence).
How:   Services receive their DAOs and helpers at construction. build_services()
       wires the whole graph from one Settings and one Database handle; the
       result lives on app.state for the lifetime of the process.

Service Inventory:
    - UserService:      signup, login, logout, status
    - ResourceService:  search by region, create, recommend
    - ReviewService:    create review
    - validation:       input rules and HTML sanitization
    - security:         PasswordHasher, SessionCookieSigner
"""

from dataclasses import dataclass

from discoverhealth.config import Settings
from discoverhealth.daos import ResourceDAO, ReviewDAO, SessionDAO, UserDAO
from discoverhealth.database import Database
from discoverhealth.services.resource_service import ResourceService
from discoverhealth.services.review_service import ReviewService
from discoverhealth.services.security import PasswordHasher, SessionCookieSigner
from discoverhealth.services.user_service import UserService


@dataclass(frozen=True)
class Services:
    """Process-wide, stateless service objects handed to the routing layer."""
    users: UserService
    resources: ResourceService
    reviews: ReviewService
    sessions: SessionDAO
    cookie_signer: SessionCookieSigner


def build_services(settings: Settings, database: Database) -> Services:
    resource_dao = ResourceDAO(database)
    session_dao = SessionDAO(database)
    return Services(
        users=UserService(
            user_dao=UserDAO(database),
            session_dao=session_dao,
            hasher=PasswordHasher(settings.password_hash_rounds),
            session_max_age=settings.session_max_age,
        ),
        resources=ResourceService(resource_dao),
        reviews=ReviewService(ReviewDAO(database), resource_dao),
        sessions=session_dao,
        cookie_signer=SessionCookieSigner(settings.session_secret),
    )
