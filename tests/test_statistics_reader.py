"""
Tests for Statistics Reader

Terminal-ride counting, late cancellation window, no-show attribution and
the hidden-rating policy.
"""

from datetime import timedelta

import pytest

from ridetrust.errors import NotFoundError
from ridetrust.models import User
from ridetrust.services.statistics_reader import (
    StatisticsReader,
    is_late_cancellation,
    summarize_ratings,
    summarize_rides,
)
from tests.fakes import NOW, FakeRatingStore, FakeRideStore, FakeUserStore, make_rating, make_ride


WINDOW = timedelta(hours=24)


class TestLateCancellation:

    def test_inside_window_is_late(self):
        ride = make_ride(
            "r1", "rider", "pax", status="cancelled",
            cancelled_by="rider", cancelled_at=NOW - timedelta(hours=23),
        )
        assert is_late_cancellation(ride, WINDOW)

    def test_window_boundary_is_late(self):
        ride = make_ride(
            "r1", "rider", "pax", status="cancelled",
            cancelled_by="rider", cancelled_at=NOW - timedelta(hours=24),
        )
        assert is_late_cancellation(ride, WINDOW)

    def test_outside_window_is_not_late(self):
        ride = make_ride(
            "r1", "rider", "pax", status="cancelled",
            cancelled_by="rider", cancelled_at=NOW - timedelta(hours=25),
        )
        assert not is_late_cancellation(ride, WINDOW)

    def test_no_cancellation(self):
        assert not is_late_cancellation(make_ride("r1", "rider", "pax"), WINDOW)


class TestSummarizeRides:

    def test_counts_per_role(self):
        rides = [
            make_ride("r1", "u1", "p1"),
            make_ride("r2", "u1", "p2"),
            make_ride("r3", "d1", "u1"),
            make_ride("r4", "u1", "p3", status="cancelled", cancelled_by="u1"),
        ]

        counts = summarize_rides("u1", rides, WINDOW)

        assert counts["total_rides_as_rider"] == 3
        assert counts["total_rides_as_passenger"] == 1
        assert counts["completed_rides_as_rider"] == 2
        assert counts["completed_rides_as_passenger"] == 1
        assert counts["cancellations"] == 1
        assert counts["late_cancellations"] == 0

    def test_non_terminal_rides_ignored(self):
        rides = [
            make_ride("r1", "u1", "p1", status="pending"),
            make_ride("r2", "u1", "p1", status="matched"),
            make_ride("r3", "u1", "p1", status="ongoing"),
        ]

        counts = summarize_rides("u1", rides, WINDOW)

        assert counts["total_rides_as_rider"] == 0
        assert counts["completed_rides_as_rider"] == 0

    def test_late_cancellation_is_subset_of_cancellations(self):
        rides = [
            make_ride(
                "r1", "u1", "p1", status="cancelled",
                cancelled_by="u1", cancelled_at=NOW - timedelta(hours=2),
            ),
            make_ride(
                "r2", "u1", "p1", status="cancelled",
                cancelled_by="u1", cancelled_at=NOW - timedelta(days=3),
            ),
        ]

        counts = summarize_rides("u1", rides, WINDOW)

        assert counts["cancellations"] == 2
        assert counts["late_cancellations"] == 1

    def test_cancelled_by_other_participant_not_charged(self):
        rides = [make_ride("r1", "u1", "p1", status="cancelled", cancelled_by="p1")]

        counts = summarize_rides("u1", rides, WINDOW)

        assert counts["cancellations"] == 0
        assert counts["total_rides_as_rider"] == 1

    def test_no_show_charged_to_absent_participant(self):
        """The rider cancels because the passenger never appeared."""
        rides = [
            make_ride(
                "r1", "rider", "pax", status="cancelled",
                cancelled_by="rider", category="no_show",
            )
        ]

        rider_counts = summarize_rides("rider", rides, WINDOW)
        pax_counts = summarize_rides("pax", rides, WINDOW)

        assert rider_counts["no_shows"] == 0
        assert rider_counts["cancellations"] == 0
        assert pax_counts["no_shows"] == 1
        assert pax_counts["cancellations"] == 0


class TestSummarizeRatings:

    def test_hidden_ratings_excluded_from_average_by_default(self):
        ratings = [
            make_rating("r1", "a", "u1", 5),
            make_rating("r2", "b", "u1", 4),
            make_rating("r3", "c", "u1", 1, is_visible=False),
        ]

        summary = summarize_ratings(ratings, include_hidden_in_average=False)

        assert summary["average_rating"] == 4.5
        assert summary["total_ratings"] == 3
        assert summary["visible_ratings"] == 2

    def test_hidden_ratings_included_when_configured(self):
        ratings = [
            make_rating("r1", "a", "u1", 5),
            make_rating("r2", "b", "u1", 1, is_visible=False),
        ]

        summary = summarize_ratings(ratings, include_hidden_in_average=True)

        assert summary["average_rating"] == 3.0

    def test_all_hidden_gives_zero_average(self):
        ratings = [make_rating("r1", "a", "u1", 5, is_visible=False)]

        summary = summarize_ratings(ratings, include_hidden_in_average=False)

        assert summary["average_rating"] == 0.0
        assert summary["total_ratings"] == 1

    def test_empty(self):
        assert summarize_ratings([], include_hidden_in_average=False) == {
            "average_rating": 0.0,
            "total_ratings": 0,
            "visible_ratings": 0,
        }


class TestStatisticsReader:

    @pytest.fixture
    def reader(self):
        users = FakeUserStore([User(uid="u1"), User(uid="newbie")])
        rides = FakeRideStore([
            make_ride("r1", "u1", "p1"),
            make_ride("r2", "d1", "u1", status="cancelled", cancelled_by="u1"),
        ])
        ratings = FakeRatingStore([
            make_rating("r1", "p1", "u1", 4),
            make_rating("r9", "u1", "p1", 1),
        ])
        return StatisticsReader(
            users, rides, ratings,
            late_cancellation_window_hours=24,
            include_hidden_in_average=False,
        )

    @pytest.mark.asyncio
    async def test_read(self, reader):
        stats = await reader.read("u1")

        assert stats.total_rides == 2
        assert stats.completed_rides == 1
        assert stats.cancellations == 1
        # Only ratings received by u1 count
        assert stats.total_ratings == 1
        assert stats.average_rating == 4.0

    @pytest.mark.asyncio
    async def test_user_without_history(self, reader):
        stats = await reader.read("newbie")

        assert stats.total_rides == 0
        assert stats.total_ratings == 0
        assert stats.average_rating == 0.0

    @pytest.mark.asyncio
    async def test_unknown_user(self, reader):
        with pytest.raises(NotFoundError):
            await reader.read("ghost")
