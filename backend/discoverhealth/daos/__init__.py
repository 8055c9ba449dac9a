"""
DiscoverHealth Backend — Data Access Package
=============================================

One accessor per table. Each is constructed with the shared `Database`
handle and runs every call inside its own transaction:

    - user_dao.py:      UserDAO      (users)
    - resource_dao.py:  ResourceDAO  (healthcare_resources)
    - review_dao.py:    ReviewDAO    (reviews)
    - session_dao.py:   SessionDAO   (sessions, the server-side session store)

DAOs let SQLAlchemy exceptions propagate; services translate them.
"""

from discoverhealth.daos.user_dao import UserDAO
from discoverhealth.daos.resource_dao import ResourceDAO, NewResource
from discoverhealth.daos.review_dao import ReviewDAO
from discoverhealth.daos.session_dao import SessionDAO, SessionData

__all__ = [
    "UserDAO",
    "ResourceDAO",
    "NewResource",
    "ReviewDAO",
    "SessionDAO",
    "SessionData",
]
