"""Unit tests for rating aggregation helpers (no database)."""

from decimal import Decimal

import pytest

from travelworld.services.aggregation import rating_distribution, round_rating, summarize_ratings


class TestRoundRating:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (4.25, 4.3),
            (4.24, 4.2),
            (Decimal("13") / 3, 4.3),
            (5, 5.0),
        ],
    )
    def test_half_up_to_one_decimal(self, value, expected):
        assert round_rating(value) == expected


class TestSummarizeRatings:
    def test_empty(self):
        assert summarize_ratings([]) == (0.0, 0)

    def test_average_and_count(self):
        assert summarize_ratings([4, 5]) == (4.5, 2)

    def test_accepts_generators(self):
        assert summarize_ratings(r for r in (1, 2, 2)) == (1.7, 3)


class TestRatingDistribution:
    def test_every_star_present(self):
        assert rating_distribution([]) == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}

    def test_counts(self):
        assert rating_distribution([5, 5, 3, 1]) == {"1": 1, "2": 0, "3": 1, "4": 0, "5": 2}
