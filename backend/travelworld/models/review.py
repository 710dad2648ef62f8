"""Review model — one rating per user per tour."""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travelworld.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

REVIEW_UNIQUE_CONSTRAINT = "uq_reviews_tour_user"


class Review(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user's rating and comment on a tour."""

    __tablename__ = "reviews"

    tour_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    review_text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    tour: Mapped["Tour"] = relationship(back_populates="reviews")  # type: ignore[name-defined]  # noqa: F821
    user: Mapped["User"] = relationship(back_populates="reviews")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        UniqueConstraint("tour_id", "user_id", name=REVIEW_UNIQUE_CONSTRAINT),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, tour_id={self.tour_id}, user_id={self.user_id}, rating={self.rating})>"
