"""
Insight generation.

Insights come from a fixed rule table: an ordered list of
(predicate, builder) pairs evaluated against an InsightContext. Every
rule whose predicate holds contributes one insight; the result is
sorted most urgent first and capped at MAX_INSIGHTS.

Adding an insight means adding a row to RULES.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from .models import (
    TOTAL_WEEKS,
    Insight,
    InsightCategory,
    InsightSeverity,
    TrainingMetrics,
    Trend,
    WeeklySummary,
)
from .analyzer import Completions


MAX_INSIGHTS = 6
DISTANCE_MILESTONES = (10, 25, 50, 100, 150, 200)
MILESTONE_BAND = 5
VOLUME_JUMP_PERCENT = 20
TAPER_START_WEEK = 14


@dataclass(frozen=True)
class InsightContext:
    """Everything a rule may look at."""

    completions: Completions
    current_week: int
    metrics: TrainingMetrics
    weekly_summaries: Sequence[WeeklySummary]
    created_at: str

    @property
    def this_week(self) -> Optional[WeeklySummary]:
        return self.weekly_summaries[-1] if self.weekly_summaries else None

    @property
    def last_week(self) -> Optional[WeeklySummary]:
        return self.weekly_summaries[-2] if len(self.weekly_summaries) >= 2 else None

    def insight(
        self,
        key: str,
        category: InsightCategory,
        severity: InsightSeverity,
        title: str,
        message: str,
        value: Optional[float] = None,
        change: Optional[float] = None,
        week: Optional[int] = None,
    ) -> Insight:
        # ids are stable within a week so dismissals stick across refreshes
        return Insight(
            id=f"{key}-week-{self.current_week}",
            category=category,
            severity=severity,
            title=title,
            message=message,
            created_at=self.created_at,
            value=value,
            change=change,
            week=week,
        )


def volume_change(context: InsightContext) -> float:
    """Percent change in distance from last week to this week, 0 if unknown."""
    this_week, last_week = context.this_week, context.last_week
    if this_week is None or last_week is None or last_week.total_distance <= 0:
        return 0.0
    return (this_week.total_distance - last_week.total_distance) / last_week.total_distance * 100


def reached_milestone(total_distance: float) -> Optional[int]:
    """First distance milestone the total has just crossed, if any."""
    for milestone in DISTANCE_MILESTONES:
        if milestone <= total_distance < milestone + MILESTONE_BAND:
            return milestone
    return None


# -----------------------------------------------------------------------------
# rule builders
# -----------------------------------------------------------------------------


def _excellent_adherence(ctx: InsightContext) -> Insight:
    rate = ctx.metrics.adherence_rate
    return ctx.insight(
        "adherence-excellent",
        InsightCategory.CONSISTENCY,
        InsightSeverity.SUCCESS,
        "Outstanding Consistency",
        f"You have completed {round(rate)}% of your planned workouts. "
        "That is elite-level commitment.",
        value=rate,
    )


def _good_adherence(ctx: InsightContext) -> Insight:
    rate = ctx.metrics.adherence_rate
    return ctx.insight(
        "adherence-good",
        InsightCategory.CONSISTENCY,
        InsightSeverity.INFO,
        "Good Training Consistency",
        f"{round(rate)}% of planned workouts completed. You are on track for race day.",
        value=rate,
    )


def _low_adherence(ctx: InsightContext) -> Insight:
    rate = ctx.metrics.adherence_rate
    return ctx.insight(
        "adherence-low",
        InsightCategory.CONSISTENCY,
        InsightSeverity.WARNING,
        "Training Consistency Slipping",
        f"Only {round(rate)}% of planned workouts completed. "
        "Try reshuffling your week to fit more sessions in.",
        value=rate,
    )


def _long_streak(ctx: InsightContext) -> Insight:
    streak = ctx.metrics.current_streak
    return ctx.insight(
        "streak-long",
        InsightCategory.MILESTONE,
        InsightSeverity.SUCCESS,
        f"{streak}-Workout Streak!",
        f"You have completed {streak} planned workouts in a row.",
        value=streak,
    )


def _building_streak(ctx: InsightContext) -> Insight:
    streak = ctx.metrics.current_streak
    return ctx.insight(
        "streak-building",
        InsightCategory.MILESTONE,
        InsightSeverity.INFO,
        "Building Momentum",
        f"{streak} workouts in a row so far. Keep it going!",
        value=streak,
    )


def _volume_rising(ctx: InsightContext) -> Insight:
    return ctx.insight(
        "trend-improving",
        InsightCategory.TREND,
        InsightSeverity.SUCCESS,
        "Training Volume Increasing",
        "Weekly distance is trending upward. Progressive overload is working.",
        change=ctx.metrics.pace_improvement,
    )


def _volume_falling(ctx: InsightContext) -> Insight:
    return ctx.insight(
        "trend-declining",
        InsightCategory.TREND,
        InsightSeverity.WARNING,
        "Volume Declining",
        "Your training volume has dropped recently. Make sure that is intentional.",
        change=ctx.metrics.pace_improvement,
    )


def _volume_jump(ctx: InsightContext) -> Insight:
    change = volume_change(ctx)
    return ctx.insight(
        "volume-jump",
        InsightCategory.RECOVERY,
        InsightSeverity.WARNING,
        "Big Volume Jump",
        f"This week's distance is {round(change)}% higher than last week. "
        "Watch for signs of fatigue.",
        change=change,
        week=ctx.current_week,
    )


def _recovery_check(ctx: InsightContext) -> Insight:
    return ctx.insight(
        "recovery-check",
        InsightCategory.RECOVERY,
        InsightSeverity.WARNING,
        "Recovery Check",
        "High intensity week with no rest day. Consider swapping in an easy day.",
        week=ctx.current_week,
    )


def _distance_milestone(ctx: InsightContext) -> Insight:
    milestone = reached_milestone(ctx.metrics.total_distance)
    return ctx.insight(
        f"distance-{milestone}",
        InsightCategory.MILESTONE,
        InsightSeverity.SUCCESS,
        f"{milestone} Miles Club!",
        f"You have logged over {milestone} miles of training.",
        value=milestone,
    )


def _race_week(ctx: InsightContext) -> Insight:
    return ctx.insight(
        "race-week",
        InsightCategory.RECOMMENDATION,
        InsightSeverity.INFO,
        "Race Week",
        "Focus on rest, hydration and mental preparation. Trust your training.",
        week=TOTAL_WEEKS,
    )


def _taper(ctx: InsightContext) -> Insight:
    return ctx.insight(
        "taper",
        InsightCategory.RECOMMENDATION,
        InsightSeverity.INFO,
        "Taper Time",
        "Cut back on volume but keep some intensity while your body absorbs "
        "months of training.",
        week=ctx.current_week,
    )


def _consistent_runner(ctx: InsightContext) -> Insight:
    score = ctx.metrics.consistency_score
    return ctx.insight(
        "consistency-score",
        InsightCategory.PERFORMANCE,
        InsightSeverity.SUCCESS,
        "Consistent Runner",
        f"Your training consistency score is {round(score)}%. "
        "Steady weeks are the best predictor of a good race.",
        value=score,
    )


Rule = Tuple[Callable[[InsightContext], bool], Callable[[InsightContext], Insight]]

RULES: List[Rule] = [
    (lambda c: c.metrics.adherence_rate >= 90, _excellent_adherence),
    (lambda c: 75 <= c.metrics.adherence_rate < 90, _good_adherence),
    (lambda c: c.metrics.adherence_rate < 60 and c.current_week > 2, _low_adherence),
    (lambda c: c.metrics.current_streak >= 7, _long_streak),
    (lambda c: 3 <= c.metrics.current_streak < 7, _building_streak),
    (lambda c: c.metrics.weekly_trend == Trend.IMPROVING, _volume_rising),
    (
        lambda c: c.metrics.weekly_trend == Trend.DECLINING
        and c.current_week < TAPER_START_WEEK,
        _volume_falling,
    ),
    (
        lambda c: c.current_week > 2
        and c.last_week is not None
        and volume_change(c) > VOLUME_JUMP_PERCENT,
        _volume_jump,
    ),
    (
        lambda c: c.this_week is not None
        and c.this_week.recovery_days < 1
        and c.this_week.intensity_score > 8,
        _recovery_check,
    ),
    (lambda c: reached_milestone(c.metrics.total_distance) is not None, _distance_milestone),
    (lambda c: c.current_week == TOTAL_WEEKS, _race_week),
    (lambda c: TAPER_START_WEEK <= c.current_week < TOTAL_WEEKS, _taper),
    (lambda c: c.metrics.consistency_score > 80, _consistent_runner),
]


def rank_insights(insights: List[Insight], limit: int = MAX_INSIGHTS) -> List[Insight]:
    """Stable sort by severity, most urgent first, then truncate."""
    return sorted(insights, key=lambda i: i.severity.rank)[:limit]


def generate_insights(
    completions: Completions,
    current_week: int,
    metrics: TrainingMetrics,
    weekly_summaries: Sequence[WeeklySummary],
    now: Optional[datetime] = None,
) -> List[Insight]:
    """
    Evaluate every rule and return the ranked insights.

    Parameters:
        completions: Completion snapshot.
        current_week: Plan week treated as "now".
        metrics: Output of compute_training_metrics.
        weekly_summaries: Weekly summaries, oldest first; the last entry
            is this week.
        now: Timestamp stamped on each insight, defaults to the current
            UTC time.

    Returns:
        At most MAX_INSIGHTS insights, sorted by severity.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    context = InsightContext(
        completions=completions,
        current_week=current_week,
        metrics=metrics,
        weekly_summaries=list(weekly_summaries),
        created_at=now.isoformat(),
    )

    insights = [build(context) for applies, build in RULES if applies(context)]
    return rank_insights(insights)
