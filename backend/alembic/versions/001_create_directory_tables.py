"""Create directory tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, healthcare_resources, reviews and sessions.
How:   Portable column types only, so the same revision runs on SQLite and
       PostgreSQL. Index names match SQLAlchemy's ix_<table>_<column>
       convention used by Base.metadata.create_all().

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "username",
            sa.String(50),
            nullable=False,
            comment="Login name: letters, digits and underscore",
        ),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="Salted one-way hash (passlib format)",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "healthcare_resources",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column(
            "region",
            sa.String(100),
            nullable=False,
            comment="Exact-match lookup key for searches",
        ),
        sa.Column("lat", sa.Float(), nullable=False, comment="Latitude, -90..90"),
        sa.Column("lon", sa.Float(), nullable=False, comment="Longitude, -180..180"),
        sa.Column(
            "description",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="HTML-escaped free text",
        ),
        sa.Column(
            "recommendations",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Every search is WHERE region = :region
    op.create_index("ix_healthcare_resources_region", "healthcare_resources", ["region"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "review",
            sa.Text(),
            nullable=False,
            comment="Trimmed, HTML-escaped review text",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["resource_id"], ["healthcare_resources.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reviews_resource_id", "reviews", ["resource_id"])

    op.create_table(
        "sessions",
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("token"),
    )
    # Startup purge: DELETE ... WHERE expires_at <= now
    op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"])


def downgrade() -> None:
    """Drop all directory tables, children first. All data is lost."""
    op.drop_index("ix_sessions_expires_at", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("ix_reviews_resource_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("ix_healthcare_resources_region", table_name="healthcare_resources")
    op.drop_table("healthcare_resources")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
