"""
Training log analyzer.

Turns a snapshot of workout completions into weekly summaries,
whole-plan training metrics and rolling window totals. Every function
here is a pure function of its arguments and never raises on sparse or
malformed logs: unknown weeks give zeroed summaries and unparseable
fields count as zero.
"""

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .models import (
    TOTAL_WEEKS,
    DAY_NAMES,
    DayName,
    RollingStats,
    TrainingMetrics,
    Trend,
    WeeklySummary,
    WindowStats,
    WorkoutCategory,
    WorkoutCompletion,
)
from .parsers import parse_distance, parse_duration, parse_heart_rate, parse_pace
from .plan import get_week_plan, planned_workout_count


logger = logging.getLogger(__name__)


# training load credited for each completed session
INTENSITY_WEIGHTS: Dict[WorkoutCategory, float] = {
    WorkoutCategory.SPEED: 3,
    WorkoutCategory.TEMPO: 2.5,
    WorkoutCategory.LONG: 2,
    WorkoutCategory.AEROBIC: 1.5,
    WorkoutCategory.RECOVERY: 0.5,
    WorkoutCategory.REST: 0,
    WorkoutCategory.RACE: 3,
}

TREND_THRESHOLD = 0.10
ROLLING_WINDOWS = (7, 14, 28)

Completions = Union[Mapping[Tuple[int, DayName], WorkoutCompletion], Iterable[WorkoutCompletion]]


def index_completions(completions: Completions) -> Dict[Tuple[int, DayName], WorkoutCompletion]:
    """
    Key a completion snapshot by plan slot.

    Accepts either a store snapshot (mapping) or a plain iterable of
    records; the key always comes from the record's own week and day.
    """
    records = completions.values() if isinstance(completions, Mapping) else completions
    return {c.key: c for c in records}


def compute_weekly_summary(week: int, completions: Completions) -> WeeklySummary:
    """
    Summarize one plan week.

    Parameters:
        week: Plan week number.
        completions: Completion snapshot.

    Returns:
        WeeklySummary for the week. Weeks missing from the plan give an
        all-zero summary.
    """
    week_plan = get_week_plan(week)
    if week_plan is None:
        return WeeklySummary(week=week)

    indexed = index_completions(completions)
    summary = WeeklySummary(week=week)

    total_distance = 0.0
    pace_total = pace_count = 0
    hr_total = hr_count = 0
    effort_total = effort_count = 0

    for day in DAY_NAMES:
        workout = week_plan[day]
        if workout.is_rest:
            summary.recovery_days += 1
            continue

        summary.planned_workouts += 1
        completion = indexed.get((week, day))
        if completion is None or not completion.is_complete:
            continue

        summary.completed_workouts += 1
        total_distance += parse_distance(completion.distance)
        summary.total_duration += parse_duration(completion.duration)

        # averages only count entries where the field was supplied
        pace = parse_pace(completion.pace)
        if pace > 0:
            pace_total += pace
            pace_count += 1

        heart_rate = parse_heart_rate(completion.heart_rate)
        if heart_rate > 0:
            hr_total += heart_rate
            hr_count += 1

        if completion.effort:
            effort_total += completion.effort
            effort_count += 1

        summary.intensity_score += INTENSITY_WEIGHTS.get(workout.category, 1)

    summary.total_distance = round(total_distance, 2)
    if summary.planned_workouts > 0:
        summary.adherence_rate = summary.completed_workouts / summary.planned_workouts * 100
    if pace_count:
        summary.avg_pace = pace_total / pace_count
    if hr_count:
        summary.avg_heart_rate = hr_total / hr_count
    if effort_count:
        summary.avg_effort = effort_total / effort_count

    return summary


def compute_weekly_summaries(completions: Completions, current_week: int) -> List[WeeklySummary]:
    """Summaries for weeks 1 through current_week, oldest first."""
    indexed = index_completions(completions)
    return [compute_weekly_summary(week, indexed) for week in range(1, current_week + 1)]


def _streaks(indexed: Mapping[Tuple[int, DayName], WorkoutCompletion], current_week: int) -> Tuple[int, int]:
    """
    Walk planned sessions backward from the end of current_week.

    Rest days are skipped; any other session that is not complete ends
    a run. Returns (most recent run, longest run).
    """
    runs: List[int] = []
    run = 0

    for week in range(min(current_week, TOTAL_WEEKS), 0, -1):
        week_plan = get_week_plan(week)
        if week_plan is None:
            continue

        for day in reversed(DAY_NAMES):
            if week_plan[day].is_rest:
                continue

            completion = indexed.get((week, day))
            if completion is not None and completion.is_complete:
                run += 1
            else:
                if run:
                    runs.append(run)
                run = 0

    if run:
        runs.append(run)

    if not runs:
        return 0, 0
    return runs[0], max(runs)


def _population_stddev(values: List[float]) -> float:
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def _classify_trend(weekly_distances: List[float]) -> Trend:
    if len(weekly_distances) < 3:
        return Trend.STABLE

    first, _, last = weekly_distances[-3:]
    change = last - first
    if change > first * TREND_THRESHOLD:
        return Trend.IMPROVING
    if change < -first * TREND_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


def _half_over_half_change(weekly_distances: List[float]) -> float:
    """Percent change of mean weekly distance, second half vs. first."""
    if len(weekly_distances) < 4:
        return 0.0

    mid = len(weekly_distances) // 2
    first_avg = sum(weekly_distances[:mid]) / mid
    second_avg = sum(weekly_distances[mid:]) / (len(weekly_distances) - mid)
    if first_avg <= 0:
        return 0.0
    return (second_avg - first_avg) / first_avg * 100


def compute_training_metrics(completions: Completions, current_week: int) -> TrainingMetrics:
    """
    Calculate whole-plan training metrics as of current_week.

    Parameters:
        completions: Completion snapshot.
        current_week: Plan week treated as "now" (1-16).

    Returns:
        TrainingMetrics with totals, streaks, adherence, trend and
        consistency score.
    """
    indexed = index_completions(completions)
    completed = [c for c in indexed.values() if c.is_complete]

    total_distance = round(sum(parse_distance(c.distance) for c in completed), 2)
    total_duration = sum(parse_duration(c.duration) for c in completed)
    total_workouts = len(completed)

    weekly_distances = [
        summary.total_distance for summary in compute_weekly_summaries(indexed, current_week)
    ]

    current_streak, longest_streak = _streaks(indexed, current_week)

    total_planned = sum(planned_workout_count(week) for week in range(1, current_week + 1))
    adherence_rate = total_workouts / total_planned * 100 if total_planned > 0 else 0.0

    peak = max(weekly_distances + [1])
    consistency_score = max(0.0, 100 - _population_stddev(weekly_distances) / peak * 100)

    return TrainingMetrics(
        current_streak=current_streak,
        longest_streak=longest_streak,
        total_distance=total_distance,
        total_duration=total_duration,
        total_workouts=total_workouts,
        avg_weekly_distance=total_distance / current_week if current_week > 0 else 0.0,
        avg_weekly_duration=total_duration / current_week if current_week > 0 else 0.0,
        adherence_rate=adherence_rate,
        pace_improvement=_half_over_half_change(weekly_distances),
        consistency_score=consistency_score,
        weekly_trend=_classify_trend(weekly_distances),
    )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Skipping unparseable completion time {value!r}")
        return None
    return _as_utc(parsed)


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps are taken to be UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def compute_rolling_stats(
    completions: Completions,
    training_start: Optional[date] = None,
    now: Optional[datetime] = None,
) -> RollingStats:
    """
    Total recent training by actual completion time.

    Windows cover [now - N days, now] inclusive for N in 7, 14 and 28,
    independent of plan week boundaries. Completions without a usable
    ``completed_at`` cannot be placed in time and are left out.

    Parameters:
        completions: Completion snapshot.
        training_start: Start of the plan. Windows are keyed on "now",
            so this is accepted for context only.
        now: Reference time, defaults to the current UTC time.
    """
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)

    timed = []
    for completion in index_completions(completions).values():
        if not completion.is_complete:
            continue
        completed_at = _parse_timestamp(completion.completed_at)
        if completed_at is not None:
            timed.append((completed_at, completion))

    windows = []
    for days in ROLLING_WINDOWS:
        start = now - timedelta(days=days)
        stats = WindowStats()
        distance = 0.0
        for completed_at, completion in timed:
            if start <= completed_at <= now:
                distance += parse_distance(completion.distance)
                stats.duration += parse_duration(completion.duration)
                stats.workouts += 1
        stats.distance = round(distance, 2)
        windows.append(stats)

    return RollingStats(
        last_7_days=windows[0],
        last_14_days=windows[1],
        last_28_days=windows[2],
    )
