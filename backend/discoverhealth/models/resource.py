"""
DiscoverHealth Backend — Healthcare Resource SQLAlchemy Model
===============================================================

What:  ORM model for the `healthcare_resources` table.
Who:   ResourceDAO (search, insert, recommend) and ReviewDAO (existence check).

Table Design:
    - region: indexed; every search is an exact match on this column
    - lat / lon: plain floats, range-checked by the service before insert
    - description: stored already HTML-escaped
    - recommendations: starts at 0 and only changes through a single
      `recommendations = recommendations + 1` statement
"""

from sqlalchemy import Float, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from discoverhealth.database import Base


class HealthcareResource(Base):
    """
    A clinic, pharmacy, support group or other resource shown on the map.

    Query Patterns:
        - Search: SELECT ... WHERE region = :region ORDER BY id
        - Recommend: UPDATE ... SET recommendations = recommendations + 1 WHERE id = :id
        - Existence: SELECT id ... WHERE id = :id
    """

    __tablename__ = "healthcare_resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    region: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Exact-match lookup key for searches",
    )

    lat: Mapped[float] = mapped_column(Float, nullable=False, comment="Latitude, -90..90")
    lon: Mapped[float] = mapped_column(Float, nullable=False, comment="Longitude, -180..180")

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
        comment="HTML-escaped free text",
    )

    recommendations: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    def __repr__(self) -> str:
        return (
            f"<HealthcareResource(id={self.id}, name='{self.name}', "
            f"region='{self.region}', recommendations={self.recommendations})>"
        )
