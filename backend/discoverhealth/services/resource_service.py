"""
DiscoverHealth Backend — Resource Service
===========================================

What:  Search, creation and recommendation of healthcare resources.
Who:   /resources route handlers.

Flow (POST /resources):
    ┌──────────┐    ┌──────────────────┐    ┌──────────────┐
    │  Route   │───▶│ validate_resource│───▶│ ResourceDAO  │
    │ (+gate)  │    │ (first bad field)│    │   .create    │
    └──────────┘    └──────────────────┘    └──────────────┘

Recommendations are a single conditional UPDATE; "0 rows affected" is the
not-found signal, so there is no window between an existence check and the
increment.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from discoverhealth.daos.resource_dao import ResourceDAO
from discoverhealth.daos.session_dao import SessionData
from discoverhealth.exceptions import NotFoundError, StorageError
from discoverhealth.schemas.resource import ResourceCreate, ResourceResponse
from discoverhealth.services.validation import validate_region, validate_resource

logger = logging.getLogger(__name__)


class ResourceService:
    """Business logic layer for healthcare resources."""

    def __init__(self, resource_dao: ResourceDAO):
        self.resource_dao = resource_dao

    async def search_by_region(self, region: Optional[str]) -> List[ResourceResponse]:
        """
        Exact-match lookup on region.

        Returns:
            Matching resources (possibly empty), oldest first.
        """
        region = validate_region(region)
        try:
            rows = await self.resource_dao.find_by_region(region)
        except SQLAlchemyError as e:
            logger.error("Database error searching region '%s': %s", region, str(e), exc_info=True)
            raise StorageError(context={"operation": "search", "region": region})
        return [ResourceResponse.model_validate(row) for row in rows]

    async def create(self, payload: ResourceCreate, session: SessionData) -> int:
        """
        Validate, sanitize and store a new resource.

        Raises:
            ValidationError: first failing field; nothing is persisted
            StorageError: database failure
        """
        resource = validate_resource(payload)
        try:
            resource_id = await self.resource_dao.create(resource)
        except SQLAlchemyError as e:
            logger.error("Database error creating resource: %s", str(e), exc_info=True)
            raise StorageError(context={"operation": "create_resource", "user_id": session.user_id})

        logger.info(
            "Resource %s '%s' created in region '%s' by user %s",
            resource_id, resource.name, resource.region, session.user_id,
        )
        return resource_id

    async def recommend(self, resource_id: int) -> None:
        """
        Add one recommendation.

        Raises:
            NotFoundError: no resource has this id (nothing changes)
            StorageError: database failure
        """
        try:
            updated = await self.resource_dao.increment_recommendations(resource_id)
        except SQLAlchemyError as e:
            logger.error("Database error recommending %s: %s", resource_id, str(e), exc_info=True)
            raise StorageError(context={"operation": "recommend", "resource_id": resource_id})

        if not updated:
            raise NotFoundError(resource="resource", resource_id=resource_id)
        logger.info("Resource %s recommended", resource_id)
