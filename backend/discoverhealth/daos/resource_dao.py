"""
DiscoverHealth Backend — Healthcare Resource Data Access
==========================================================

What:  Parameterized reads and writes against `healthcare_resources`.
Who:   ResourceService (search, create, recommend) and ReviewService
       (existence check before inserting a review).

Concurrency:
    `increment_recommendations` is one UPDATE statement. The database applies
    `recommendations + 1` to the current row value, so concurrent calls never
    lose an increment, and the affected row count doubles as the existence
    check.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import select, update

from discoverhealth.database import Database
from discoverhealth.models.resource import HealthcareResource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewResource:
    """Validated, sanitized values for a resource insert."""
    name: str
    category: str
    country: str
    region: str
    lat: float
    lon: float
    description: str = ""


class ResourceDAO:
    """Accessor for healthcare resource rows."""

    def __init__(self, database: Database):
        self.database = database

    async def find_by_region(self, region: str) -> List[HealthcareResource]:
        """Exact match on region, oldest first."""
        async with self.database.session() as session:
            result = await session.execute(
                select(HealthcareResource)
                .where(HealthcareResource.region == region)
                .order_by(HealthcareResource.id)
            )
            return list(result.scalars().all())

    async def create(self, resource: NewResource) -> int:
        async with self.database.session() as session:
            row = HealthcareResource(
                name=resource.name,
                category=resource.category,
                country=resource.country,
                region=resource.region,
                lat=resource.lat,
                lon=resource.lon,
                description=resource.description,
                recommendations=0,
            )
            session.add(row)
            await session.flush()
            return row.id

    async def increment_recommendations(self, resource_id: int) -> bool:
        """
        Add exactly one recommendation.

        Returns:
            True when a row was updated, False when no resource has that id.
        """
        async with self.database.session() as session:
            result = await session.execute(
                update(HealthcareResource)
                .where(HealthcareResource.id == resource_id)
                .values(recommendations=HealthcareResource.recommendations + 1)
            )
            return result.rowcount > 0

    async def exists(self, resource_id: int) -> bool:
        async with self.database.session() as session:
            result = await session.execute(
                select(HealthcareResource.id).where(HealthcareResource.id == resource_id)
            )
            return result.scalar_one_or_none() is not None
