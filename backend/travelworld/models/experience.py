"""Experience model — user-submitted trip write-ups with likes and views."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travelworld.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BUDGET_RANGES = ("budget", "mid-range", "luxury")

CATEGORIES = (
    "adventure",
    "cultural",
    "nature",
    "food",
    "photography",
    "solo-travel",
    "family",
    "romantic",
    "budget",
    "luxury",
)

DEFAULT_AUTHOR_NAME = "Anonymous User"
DEFAULT_AUTHOR_AVATAR = "/api/placeholder/32/32"


class Experience(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A published travel experience with itinerary and image gallery."""

    __tablename__ = "experiences"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    destination: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    budget_range: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    categories: Mapped[list] = mapped_column(JSONB, nullable=False, server_default="[]")
    itinerary: Mapped[list] = mapped_column(JSON, nullable=False, server_default="[]")
    tips: Mapped[str | None] = mapped_column(Text, nullable=True)
    best_time_to_visit: Mapped[str | None] = mapped_column(String(255), nullable=True)
    transportation: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, server_default="[]")
    tags: Mapped[list] = mapped_column(JSON, nullable=False, server_default="[]")

    author_name: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_AUTHOR_NAME)
    author_avatar: Mapped[str] = mapped_column(String(512), nullable=False, default=DEFAULT_AUTHOR_AVATAR)
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # GeoJSON point, stored as [longitude, latitude]
    longitude: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    # Relationships
    likers: Mapped[list["ExperienceLike"]] = relationship(
        back_populates="experience",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExperienceLike.created_at",
    )

    @property
    def liked_by(self) -> list[str]:
        return [str(like.user_id) for like in self.likers]

    @property
    def author(self) -> dict:
        return {
            "name": self.author_name,
            "avatar": self.author_avatar,
            "userId": str(self.author_id) if self.author_id else None,
        }

    @property
    def location(self) -> dict:
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    def __repr__(self) -> str:
        return f"<Experience(id={self.id}, title={self.title!r}, destination={self.destination!r})>"


class ExperienceLike(Base):
    """Membership row of an experience's ``likedBy`` set."""

    __tablename__ = "experience_likes"

    experience_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("experiences.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.clock_timestamp())

    experience: Mapped["Experience"] = relationship(back_populates="likers")

    def __repr__(self) -> str:
        return f"<ExperienceLike(experience_id={self.experience_id}, user_id={self.user_id})>"


def default_author(display_name: str | None = None, user_id: uuid.UUID | None = None) -> dict:
    """Author fields for a new experience; anonymous when no user is known."""
    return {
        "author_name": (display_name or "").strip() or DEFAULT_AUTHOR_NAME,
        "author_avatar": DEFAULT_AUTHOR_AVATAR,
        "author_id": user_id,
    }


def is_liked_by(experience: Experience, user_id: uuid.UUID | str | None) -> bool:
    """Return whether ``user_id`` is in the experience's ``likedBy`` set."""
    if user_id is None:
        return False
    return str(user_id) in experience.liked_by
