"""
DiscoverHealth Backend — Review Service
=========================================

What:  Creation of reviews on existing resources.
Who:   POST /resources/{id}/reviews.

Order of checks:
    1. Review text (400 when blank), no storage access
    2. Resource existence (404), checked explicitly rather than inferred
       from a foreign-key failure
    3. Insert of the sanitized text with the session's user id
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from discoverhealth.daos.resource_dao import ResourceDAO
from discoverhealth.daos.review_dao import ReviewDAO
from discoverhealth.daos.session_dao import SessionData
from discoverhealth.exceptions import NotFoundError, StorageError
from discoverhealth.services.validation import validate_review

logger = logging.getLogger(__name__)


class ReviewService:
    """Business logic layer for reviews."""

    def __init__(self, review_dao: ReviewDAO, resource_dao: ResourceDAO):
        self.review_dao = review_dao
        self.resource_dao = resource_dao

    async def create(self, resource_id: int, text: Optional[str], session: SessionData) -> int:
        """
        Returns:
            The new review id.

        Raises:
            ValidationError: empty or oversized text
            NotFoundError: unknown resource
            StorageError: database failure
        """
        review = validate_review(text)

        try:
            if not await self.resource_dao.exists(resource_id):
                raise NotFoundError(resource="resource", resource_id=resource_id)
            review_id = await self.review_dao.create(resource_id, session.user_id, review)
        except SQLAlchemyError as e:
            logger.error(
                "Database error creating review for %s: %s", resource_id, str(e), exc_info=True
            )
            raise StorageError(context={"operation": "create_review", "resource_id": resource_id})

        logger.info("Review %s added to resource %s by user %s", review_id, resource_id, session.user_id)
        return review_id
