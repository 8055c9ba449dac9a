"""ORM models. Importing this package registers every table on Base.metadata."""

from discoverhealth.models.user import User
from discoverhealth.models.resource import HealthcareResource
from discoverhealth.models.review import Review
from discoverhealth.models.session import SessionRecord

__all__ = ["User", "HealthcareResource", "Review", "SessionRecord"]
