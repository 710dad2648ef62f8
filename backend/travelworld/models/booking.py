"""Booking model — a user's reservation on a tour."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travelworld.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation with the tour name and price captured at booking time."""

    __tablename__ = "bookings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    tour_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("tours.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    tour_name: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    guest_size: Mapped[int] = mapped_column(Integer, nullable=False)
    book_at: Mapped[date] = mapped_column(Date, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="bookings")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user_id={self.user_id}, tour_id={self.tour_id}, book_at={self.book_at})>"
