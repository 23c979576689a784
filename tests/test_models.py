"""
Tests for marathon tracker models.

Tests record parsing, serialization and model properties.
"""

import pytest
from datetime import date, datetime, timezone

from marathon_tracker.models import (
    ActivityType,
    CompletionStatus,
    DayName,
    Insight,
    InsightCategory,
    InsightSeverity,
    StravaActivity,
    WeeklySummary,
    WorkoutCompletion,
)


class TestWorkoutCompletion:
    """Tests for WorkoutCompletion model."""

    def test_from_dict_valid(self):
        """Test parsing a full wire-format record."""
        result = WorkoutCompletion.from_dict(
            {
                "id": "abc",
                "week": 3,
                "day": "wednesday",
                "status": "complete",
                "distance": "5.2 mi",
                "heartRate": "148",
                "effort": 6,
                "completedAt": "2024-01-17T07:30:00Z",
            }
        )

        assert result.id == "abc"
        assert result.week == 3
        assert result.day == DayName.WEDNESDAY
        assert result.status == CompletionStatus.COMPLETE
        assert result.distance == "5.2 mi"
        assert result.heart_rate == "148"
        assert result.effort == 6
        assert result.completed_at == "2024-01-17T07:30:00Z"
        assert result.is_complete

    def test_from_dict_defaults_to_incomplete(self):
        """Test status defaults to incomplete."""
        result = WorkoutCompletion.from_dict({"week": 1, "day": "Monday"})

        assert result.status == CompletionStatus.INCOMPLETE
        assert result.day == DayName.MONDAY
        assert result.effort is None

    def test_from_dict_accepts_snake_case(self):
        """Test attribute names work as keys too."""
        result = WorkoutCompletion.from_dict(
            {"week": 2, "day": "friday", "heart_rate": "140", "completed_at": "2024-01-12"}
        )

        assert result.heart_rate == "140"
        assert result.completed_at == "2024-01-12"

    def test_from_dict_invalid_week(self):
        """Test week outside the plan is rejected."""
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"week": 17, "day": "monday"})
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"week": 0, "day": "monday"})

    def test_from_dict_invalid_day_or_status(self):
        """Test unknown day and status are rejected."""
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"week": 1, "day": "funday"})
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"week": 1, "day": "monday", "status": "done"})

    def test_from_dict_missing_field(self):
        """Test missing week or day is rejected."""
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"day": "monday"})

    def test_from_dict_effort_range(self):
        """Test effort must be 1-10."""
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"week": 1, "day": "monday", "effort": 11})
        with pytest.raises(ValueError):
            WorkoutCompletion.from_dict({"week": 1, "day": "monday", "effort": "hard"})

    def test_to_dict_uses_wire_keys(self):
        """Test serialization uses camelCase and drops unset fields."""
        completion = WorkoutCompletion(
            week=4,
            day=DayName.SATURDAY,
            status=CompletionStatus.COMPLETE,
            heart_rate="150",
            completed_at="2024-01-27T08:00:00+00:00",
        )

        assert completion.to_dict() == {
            "week": 4,
            "day": "saturday",
            "status": "complete",
            "heartRate": "150",
            "completedAt": "2024-01-27T08:00:00+00:00",
        }

    def test_key(self):
        """Test identity is the plan slot."""
        completion = WorkoutCompletion(week=5, day=DayName.SUNDAY)
        assert completion.key == (5, DayName.SUNDAY)


class TestDayName:
    """Tests for DayName enum."""

    def test_from_date(self):
        """Test calendar dates map to weekdays."""
        assert DayName.from_date(date(2024, 1, 1)) == DayName.MONDAY
        assert DayName.from_date(date(2024, 1, 7)) == DayName.SUNDAY


class TestInsight:
    """Tests for Insight and severity ordering."""

    def test_severity_rank(self):
        """Test critical outranks warning outranks success outranks info."""
        ranks = [s.rank for s in (
            InsightSeverity.CRITICAL,
            InsightSeverity.WARNING,
            InsightSeverity.SUCCESS,
            InsightSeverity.INFO,
        )]
        assert ranks == [0, 1, 2, 3]

    def test_to_dict_omits_empty_extras(self):
        """Test optional fields are left out when unset."""
        insight = Insight(
            id="taper-week-14",
            category=InsightCategory.RECOMMENDATION,
            severity=InsightSeverity.INFO,
            title="Taper Time",
            message="Ease off.",
            created_at="2024-04-08T00:00:00+00:00",
            week=14,
        )

        data = insight.to_dict()
        assert data["category"] == "recommendation"
        assert data["week"] == 14
        assert "value" not in data
        assert "change" not in data


class TestWeeklySummary:
    """Tests for WeeklySummary model."""

    def test_duration_minutes(self):
        """Test seconds convert to minutes."""
        summary = WeeklySummary(week=1, total_duration=5400)
        assert summary.total_duration_minutes == 90.0


class TestActivityType:
    """Tests for ActivityType enum."""

    def test_from_strava_run(self):
        """Test mapping Strava run types."""
        assert ActivityType.from_strava("Run") == ActivityType.RUN
        assert ActivityType.from_strava("TrailRun") == ActivityType.RUN
        assert ActivityType.from_strava("VirtualRun") == ActivityType.RUN

    def test_from_strava_unknown(self):
        """Test unknown types map to OTHER."""
        assert ActivityType.from_strava("Yoga") == ActivityType.OTHER


class TestStravaActivity:
    """Tests for StravaActivity model."""

    def test_from_strava_api(self):
        """Test parsing an API activity."""
        activity = StravaActivity.from_strava_api(
            {
                "id": 42,
                "name": "Morning Run",
                "type": "Run",
                "start_date": "2024-01-08T12:00:00Z",
                "start_date_local": "2024-01-08T07:00:00Z",
                "distance": 8046.7,
                "moving_time": 2400,
                "total_elevation_gain": 30,
                "average_heartrate": 150.4,
            }
        )

        assert activity.activity_type == ActivityType.RUN
        assert activity.date == date(2024, 1, 8)
        assert activity.start_time == datetime(2024, 1, 8, 12, 0, tzinfo=timezone.utc)
        assert activity.distance_miles == 5.0
        assert activity.pace_per_mile == "8:00"

    def test_pace_zero_distance(self):
        """Test pace returns None for zero distance."""
        activity = StravaActivity(
            id=1,
            name="Test",
            activity_type=ActivityType.RUN,
            sport_type="Run",
            date=date(2024, 1, 1),
            start_time=datetime(2024, 1, 1, 8, 0),
            distance_miles=0,
            moving_time_seconds=1800,
            elevation_gain_feet=0,
        )

        assert activity.pace_per_mile is None
