"""
DiscoverHealth Backend — Review Data Access
=============================================

What:  Inserts into the `reviews` table.
Who:   ReviewService.
"""

import logging

from discoverhealth.database import Database
from discoverhealth.models.review import Review

logger = logging.getLogger(__name__)


class ReviewDAO:
    """Accessor for review rows."""

    def __init__(self, database: Database):
        self.database = database

    async def create(self, resource_id: int, user_id: int, text: str) -> int:
        """
        Insert a review and return its id.

        `text` must already be trimmed and sanitized by the caller.
        """
        async with self.database.session() as session:
            review = Review(resource_id=resource_id, user_id=user_id, review=text)
            session.add(review)
            await session.flush()
            return review.id
