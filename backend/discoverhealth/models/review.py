"""
DiscoverHealth Backend — Review SQLAlchemy Model
==================================================

What:  ORM model for the `reviews` table.
Who:   ReviewDAO (insert).

Reviews are immutable after creation. Both foreign keys are enforced by the
database; the service still checks that the resource exists first so the
client gets a 404 rather than a constraint failure.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from discoverhealth.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("healthcare_resources.id"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )

    review: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Trimmed, HTML-escaped review text",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, resource_id={self.resource_id}, user_id={self.user_id})>"
