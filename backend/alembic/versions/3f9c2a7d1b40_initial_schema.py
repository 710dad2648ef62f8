"""initial_schema

Revision ID: 3f9c2a7d1b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("clock_timestamp()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("photo", sa.String(length=512), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    # Case-insensitive uniqueness for both login identifiers
    op.create_index("uq_users_username_lower", "users", [sa.text("lower(username)")], unique=True)
    op.create_index("uq_users_email_lower", "users", [sa.text("lower(email)")], unique=True)

    op.create_table(
        "tours",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("distance", sa.Float(), nullable=False),
        sa.Column("photo", sa.String(length=512), nullable=True),
        sa.Column("desc", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("max_group_size", sa.Integer(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("ratings_average", sa.Float(), nullable=False),
        sa.Column("ratings_quantity", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("title", name="tours_title_key"),
    )
    op.create_index(op.f("ix_tours_city"), "tours", ["city"], unique=False)
    op.create_index(op.f("ix_tours_featured"), "tours", ["featured"], unique=False)

    op.create_table(
        "reviews",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("tour_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("review_text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tour_id", "user_id", name="uq_reviews_tour_user"),
    )
    op.create_index(op.f("ix_reviews_tour_id"), "reviews", ["tour_id"], unique=False)
    op.create_index(op.f("ix_reviews_user_id"), "reviews", ["user_id"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column("tour_id", sa.UUID(), nullable=True),
        sa.Column("tour_name", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("guest_size", sa.Integer(), nullable=False),
        sa.Column("book_at", sa.Date(), nullable=False),
        sa.Column("total_price", sa.Numeric(precision=10, scale=2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookings_tour_id"), "bookings", ["tour_id"], unique=False)
    op.create_index(op.f("ix_bookings_user_id"), "bookings", ["user_id"], unique=False)

    op.create_table(
        "experiences",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("destination", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("group_size", sa.Integer(), nullable=False),
        sa.Column("budget_range", sa.String(length=20), nullable=False),
        sa.Column("categories", postgresql.JSONB(astext_type=sa.Text()), server_default="[]", nullable=False),
        sa.Column("itinerary", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("tips", sa.Text(), nullable=True),
        sa.Column("best_time_to_visit", sa.String(length=255), nullable=True),
        sa.Column("transportation", sa.Text(), nullable=True),
        sa.Column("total_cost", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("images", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("tags", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column("author_avatar", sa.String(length=512), nullable=False),
        sa.Column("author_id", sa.UUID(), nullable=True),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_experiences_author_id"), "experiences", ["author_id"], unique=False)
    op.create_index(op.f("ix_experiences_budget_range"), "experiences", ["budget_range"], unique=False)
    op.create_index(op.f("ix_experiences_destination"), "experiences", ["destination"], unique=False)
    op.create_index(op.f("ix_experiences_is_published"), "experiences", ["is_published"], unique=False)

    # likedBy membership; the composite key rejects a second like by the same user
    op.create_table(
        "experience_likes",
        sa.Column("experience_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("clock_timestamp()"), nullable=False),
        sa.ForeignKeyConstraint(["experience_id"], ["experiences.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("experience_id", "user_id"),
    )


def downgrade() -> None:
    op.drop_table("experience_likes")
    op.drop_index(op.f("ix_experiences_is_published"), table_name="experiences")
    op.drop_index(op.f("ix_experiences_destination"), table_name="experiences")
    op.drop_index(op.f("ix_experiences_budget_range"), table_name="experiences")
    op.drop_index(op.f("ix_experiences_author_id"), table_name="experiences")
    op.drop_table("experiences")
    op.drop_index(op.f("ix_bookings_user_id"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_tour_id"), table_name="bookings")
    op.drop_table("bookings")
    op.drop_index(op.f("ix_reviews_user_id"), table_name="reviews")
    op.drop_index(op.f("ix_reviews_tour_id"), table_name="reviews")
    op.drop_table("reviews")
    op.drop_index(op.f("ix_tours_featured"), table_name="tours")
    op.drop_index(op.f("ix_tours_city"), table_name="tours")
    op.drop_table("tours")
    op.drop_index("uq_users_email_lower", table_name="users")
    op.drop_index("uq_users_username_lower", table_name="users")
    op.drop_table("users")
