"""
DiscoverHealth Backend — User SQLAlchemy Model
================================================

What:  ORM model for the `users` table.
Who:   UserDAO (insert on signup, lookup on login).

Table Design:
    - username: UNIQUE; the constraint, not an application pre-check, is what
      rejects duplicates, so two concurrent signups cannot both succeed
    - password_hash: passlib hash string (algorithm, rounds, salt and digest
      in one field); plaintext is never stored
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from discoverhealth.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created on signup, read on login. Never updated or deleted.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Login name: letters, digits and underscore",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted one-way hash (passlib format)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
