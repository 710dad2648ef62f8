"""SQLAlchemy models for Travel World.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from travelworld.models.booking import Booking
from travelworld.models.experience import Experience, ExperienceLike
from travelworld.models.review import Review
from travelworld.models.tour import Tour
from travelworld.models.user import User

__all__ = [
    "Booking",
    "Experience",
    "ExperienceLike",
    "Review",
    "Tour",
    "User",
]
