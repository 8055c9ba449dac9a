"""
DiscoverHealth Backend — Login Session SQLAlchemy Model
=========================================================

What:  ORM model for the `sessions` table (server-side session store).
Who:   SessionDAO.

Table Design:
    - token: opaque random value; the cookie carries it signed, the table
      holds it raw
    - user_id / username: copied at login so resolving a session needs no
      join against users
    - expires_at: pushed forward on every authenticated request (sliding
      expiry); rows past it are treated as absent and purged
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from discoverhealth.database import Base


class SessionRecord(Base):
    __tablename__ = "sessions"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )
    username: Mapped[str] = mapped_column(String(50), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<SessionRecord(user_id={self.user_id}, expires_at='{self.expires_at}')>"
