"""Tour model — bookable products with derived rating rollups."""

from decimal import Decimal

from sqlalchemy import Boolean, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from travelworld.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Tour(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guided tour that users can review and book."""

    __tablename__ = "tours"

    title: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    distance: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    photo: Mapped[str | None] = mapped_column(String(512), nullable=True)
    desc: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Derived from the review set; written only by the aggregation layer
    ratings_average: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    ratings_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    reviews: Mapped[list["Review"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="tour",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Review.created_at.desc()",
    )

    @property
    def position(self) -> dict | None:
        """Map marker position, or None while the tour has no coordinates."""
        if self.lat is None or self.lng is None:
            return None
        return {"lat": self.lat, "lng": self.lng}

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, title={self.title!r}, city={self.city!r})>"
