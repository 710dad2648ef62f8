"""Unit tests for request schema validation and identifier parsing."""

import uuid
from datetime import date, timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from travelworld.errors import InvalidIdentifier
from travelworld.schemas.booking import BookingCreate
from travelworld.schemas.experience import ExperienceCreate
from travelworld.services.common import parse_object_id


def _experience(**overrides) -> dict:
    data = {
        "title": "Ha Long Bay",
        "destination": "Vietnam",
        "description": "Overnight junk cruise.",
        "budgetRange": "mid-range",
        "itinerary": [{"day": 1, "activities": "Cruise"}],
    }
    data.update(overrides)
    return data


class TestExperienceCreate:
    def test_blank_itinerary_days_dropped(self):
        body = ExperienceCreate.model_validate(
            _experience(
                itinerary=[
                    {"day": 1, "activities": "Cruise"},
                    {"day": 2, "activities": "   "},
                    {"day": 3},
                ]
            )
        )
        assert [d.day for d in body.itinerary] == [1]

    def test_categories_and_tags_deduplicated(self):
        body = ExperienceCreate.model_validate(
            _experience(categories=["food", "food", "nature"], tags=["boat", "boat"])
        )
        assert body.categories == ["food", "nature"]
        assert body.tags == ["boat"]

    def test_defaults(self):
        body = ExperienceCreate.model_validate(_experience())
        assert body.duration == 1
        assert body.group_size == 1
        assert body.is_published is True
        assert body.coordinates is None

    def test_unknown_category(self):
        with pytest.raises(PydanticValidationError):
            ExperienceCreate.model_validate(_experience(categories=["skydiving"]))

    def test_coordinates_need_two_values(self):
        with pytest.raises(PydanticValidationError):
            ExperienceCreate.model_validate(_experience(coordinates=[1.0]))


class TestBookingCreate:
    def _booking(self, book_at: date) -> dict:
        return {
            "tourId": str(uuid.uuid4()),
            "fullName": "Sam",
            "phone": "0123456789",
            "guestSize": 1,
            "bookAt": book_at.isoformat(),
        }

    def test_today_allowed(self):
        assert BookingCreate.model_validate(self._booking(date.today())).book_at == date.today()

    def test_past_rejected(self):
        with pytest.raises(PydanticValidationError, match="past"):
            BookingCreate.model_validate(self._booking(date.today() - timedelta(days=1)))


class TestParseObjectId:
    def test_valid(self):
        value = uuid.uuid4()
        assert parse_object_id(str(value)) == value
        assert parse_object_id(value) is value

    def test_invalid(self):
        with pytest.raises(InvalidIdentifier, match="Invalid tour ID format"):
            parse_object_id("12345", "tour")
