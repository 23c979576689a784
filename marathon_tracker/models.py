"""Data models for marathon training tracking."""

from dataclasses import dataclass, asdict
from datetime import datetime, date
from typing import Optional
from enum import Enum


TOTAL_WEEKS = 16


class WorkoutCategory(Enum):
    """Training category of a planned workout."""

    SPEED = "speed"
    RECOVERY = "recovery"
    AEROBIC = "aerobic"
    TEMPO = "tempo"
    LONG = "long"
    REST = "rest"
    RACE = "race"


class WorkoutType(Enum):
    """Kind of session prescribed by the plan."""

    INTERVALS = "intervals"
    FARTLEK = "fartlek"
    HILLS = "hills"
    TEMPO = "tempo"
    RECOVERY = "recovery"
    AEROBIC = "aerobic"
    JOG = "jog"
    LONG = "long"
    REST = "rest"
    RACE = "race"


class DayName(Enum):
    """Days of a training week, Monday first."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def _missing_(cls, value):
        # lookups ignore case and surrounding whitespace
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def from_date(cls, day: date) -> "DayName":
        """Map a calendar date to its day of the week."""
        return list(cls)[day.weekday()]


DAY_NAMES = tuple(DayName)


class CompletionStatus(Enum):
    """How far a planned workout was carried out."""

    INCOMPLETE = "incomplete"
    PARTIAL = "partial"
    COMPLETE = "complete"


class Trend(Enum):
    """Direction of recent weekly training volume."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class InsightCategory(Enum):
    CONSISTENCY = "consistency"
    PERFORMANCE = "performance"
    RECOVERY = "recovery"
    MILESTONE = "milestone"
    TREND = "trend"
    RECOMMENDATION = "recommendation"


class InsightSeverity(Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank, most urgent first."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    InsightSeverity.CRITICAL: 0,
    InsightSeverity.WARNING: 1,
    InsightSeverity.SUCCESS: 2,
    InsightSeverity.INFO: 3,
}


class ActivityType(Enum):
    """Enumeration of supported activity types."""

    RUN = "run"
    WALK = "walk"
    RIDE = "ride"
    OTHER = "other"

    @classmethod
    def from_strava(cls, strava_type: str) -> "ActivityType":
        """Convert Strava activity type to internal type."""
        mapping = {
            "Run": cls.RUN,
            "TrailRun": cls.RUN,
            "VirtualRun": cls.RUN,
            "Walk": cls.WALK,
            "Hike": cls.WALK,
            "Ride": cls.RIDE,
            "VirtualRide": cls.RIDE,
        }
        return mapping.get(strava_type, cls.OTHER)


@dataclass(frozen=True)
class Workout:
    """A single planned session in the training calendar."""

    type: WorkoutType
    title: str
    details: str
    category: WorkoutCategory

    @property
    def is_rest(self) -> bool:
        return self.category == WorkoutCategory.REST


# (python attribute, wire key) for the optional free-text fields
_TEXT_FIELDS = (
    ("distance", "distance"),
    ("duration", "duration"),
    ("pace", "pace"),
    ("elevation", "elevation"),
    ("heart_rate", "heartRate"),
    ("weather", "weather"),
    ("notes", "notes"),
    ("date", "date"),
    ("completed_at", "completedAt"),
)


@dataclass
class WorkoutCompletion:
    """
    Logged result for one plan slot.

    Numeric fields are kept as the free text the user typed; the
    analytics parsers turn them into numbers.
    """

    week: int
    day: DayName
    status: CompletionStatus = CompletionStatus.INCOMPLETE
    id: Optional[str] = None
    distance: Optional[str] = None
    duration: Optional[str] = None
    pace: Optional[str] = None
    elevation: Optional[str] = None
    heart_rate: Optional[str] = None
    effort: Optional[int] = None
    weather: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[str] = None
    completed_at: Optional[str] = None

    @property
    def key(self) -> tuple:
        """Identity of the record: its (week, day) plan slot."""
        return (self.week, self.day)

    @property
    def is_complete(self) -> bool:
        return self.status == CompletionStatus.COMPLETE

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutCompletion":
        """
        Build a completion from a raw record.

        Accepts both the camelCase wire keys and the snake_case
        attribute names.

        Raises:
            ValueError: If week, day, status or effort are missing or
                out of range.
        """
        try:
            week = int(data["week"])
            day = DayName(str(data["day"]))
            status = CompletionStatus(
                str(data.get("status") or "incomplete").strip().lower()
            )
        except KeyError as e:
            raise ValueError(f"Completion record is missing field {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid completion record: {e}")

        if not 1 <= week <= TOTAL_WEEKS:
            raise ValueError(f"Week must be between 1 and {TOTAL_WEEKS}, got {week}")

        effort = data.get("effort")
        if effort is not None and effort != "":
            try:
                effort = int(effort)
            except (TypeError, ValueError):
                raise ValueError(f"Effort must be an integer, got {effort!r}")
            if not 1 <= effort <= 10:
                raise ValueError(f"Effort must be between 1 and 10, got {effort}")
        else:
            effort = None

        completion = cls(week=week, day=day, status=status, effort=effort)
        completion.id = data.get("id")

        for attr, wire_key in _TEXT_FIELDS:
            value = data.get(wire_key, data.get(attr))
            if value is not None:
                setattr(completion, attr, str(value))

        return completion

    def to_dict(self) -> dict:
        """Serialize using the wire keys, omitting unset fields."""
        data = {
            "id": self.id,
            "week": self.week,
            "day": self.day.value,
            "status": self.status.value,
            "effort": self.effort,
        }
        for attr, wire_key in _TEXT_FIELDS:
            data[wire_key] = getattr(self, attr)

        return {k: v for k, v in data.items() if v is not None}


@dataclass
class WeeklySummary:
    """
    Aggregated results for one plan week.

    Distance is in miles, duration in seconds and pace in seconds
    per mile.
    """

    week: int
    planned_workouts: int = 0
    completed_workouts: int = 0
    adherence_rate: float = 0.0
    total_distance: float = 0.0
    total_duration: int = 0
    avg_pace: float = 0.0
    avg_heart_rate: Optional[float] = None
    avg_effort: Optional[float] = None
    intensity_score: float = 0.0
    recovery_days: int = 0

    @property
    def total_duration_minutes(self) -> float:
        return self.total_duration / 60

    def to_dict(self) -> dict:
        return {
            "week": self.week,
            "plannedWorkouts": self.planned_workouts,
            "completedWorkouts": self.completed_workouts,
            "adherenceRate": self.adherence_rate,
            "totalDistance": self.total_distance,
            "totalDuration": self.total_duration,
            "avgPace": self.avg_pace,
            "avgHeartRate": self.avg_heart_rate,
            "avgEffort": self.avg_effort,
            "intensityScore": self.intensity_score,
            "recoveryDays": self.recovery_days,
        }


@dataclass
class TrainingMetrics:
    """Whole-history training statistics as of the current week."""

    current_streak: int = 0
    longest_streak: int = 0
    total_distance: float = 0.0
    total_duration: int = 0
    total_workouts: int = 0
    avg_weekly_distance: float = 0.0
    avg_weekly_duration: float = 0.0
    adherence_rate: float = 0.0
    pace_improvement: float = 0.0
    consistency_score: float = 100.0
    weekly_trend: Trend = Trend.STABLE

    def to_dict(self) -> dict:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "totalDistance": self.total_distance,
            "totalDuration": self.total_duration,
            "totalWorkouts": self.total_workouts,
            "avgWeeklyDistance": self.avg_weekly_distance,
            "avgWeeklyDuration": self.avg_weekly_duration,
            "adherenceRate": self.adherence_rate,
            "paceImprovement": self.pace_improvement,
            "consistencyScore": self.consistency_score,
            "weeklyTrend": self.weekly_trend.value,
        }


@dataclass
class WindowStats:
    """Totals for one trailing window."""

    distance: float = 0.0
    duration: int = 0
    workouts: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RollingStats:
    """Trailing 7, 14 and 28 day totals keyed by completion time."""

    last_7_days: WindowStats
    last_14_days: WindowStats
    last_28_days: WindowStats

    def to_dict(self) -> dict:
        return {
            "last7Days": self.last_7_days.to_dict(),
            "last14Days": self.last_14_days.to_dict(),
            "last28Days": self.last_28_days.to_dict(),
        }


@dataclass
class Insight:
    """A rule-triggered observation about the training log."""

    id: str
    category: InsightCategory
    severity: InsightSeverity
    title: str
    message: str
    created_at: str
    value: Optional[float] = None
    change: Optional[float] = None
    week: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "value": self.value,
            "change": self.change,
            "week": self.week,
            "createdAt": self.created_at,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class StravaActivity:
    """Represents an activity from Strava."""

    id: int
    name: str
    activity_type: ActivityType
    sport_type: str
    date: date
    start_time: datetime
    distance_miles: float
    moving_time_seconds: int
    elevation_gain_feet: float
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[int] = None

    @property
    def moving_time_minutes(self) -> float:
        """Moving time converted to minutes."""
        return self.moving_time_seconds / 60

    @property
    def pace_per_mile(self) -> Optional[str]:
        """Calculate pace as min:sec per mile."""
        if self.distance_miles == 0:
            return None

        pace_seconds = self.moving_time_seconds / self.distance_miles
        minutes = int(pace_seconds // 60)
        seconds = int(pace_seconds % 60)
        return f"{minutes}:{seconds:02d}"

    @classmethod
    def from_strava_api(cls, data: dict) -> "StravaActivity":
        """
        Create StravaActivity from Strava API response.

        The calendar date comes from the local start time so that runs
        land on the day the athlete ran them; ``start_time`` is the UTC
        start used for rolling windows.
        """
        local_start = datetime.fromisoformat(
            data["start_date_local"].replace("Z", "+00:00")
        )
        start = datetime.fromisoformat(
            data.get("start_date", data["start_date_local"]).replace("Z", "+00:00")
        )
        return cls(
            id=data["id"],
            name=data["name"],
            activity_type=ActivityType.from_strava(data["type"]),
            sport_type=data.get("sport_type", data["type"]),
            date=local_start.date(),
            start_time=start,
            distance_miles=round(data.get("distance", 0) / 1609.34, 2),
            moving_time_seconds=data.get("moving_time", 0),
            elevation_gain_feet=round(data.get("total_elevation_gain", 0) * 3.281, 1),
            average_heartrate=data.get("average_heartrate"),
            max_heartrate=data.get("max_heartrate"),
        )
