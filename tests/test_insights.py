"""
Tests for the insight rule table.
"""

import pytest
from datetime import datetime, timezone

from marathon_tracker.models import (
    InsightCategory,
    InsightSeverity,
    TrainingMetrics,
    Trend,
    WeeklySummary,
)
from marathon_tracker.insights import (
    MAX_INSIGHTS,
    generate_insights,
    reached_milestone,
)


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _metrics(**overrides):
    # neutral defaults that trigger no rule
    values = dict(
        adherence_rate=65,
        current_streak=0,
        weekly_trend=Trend.STABLE,
        total_distance=0,
        consistency_score=50,
    )
    values.update(overrides)
    return TrainingMetrics(**values)


def _week(week, distance=0.0, recovery_days=1, intensity=0.0):
    return WeeklySummary(
        week=week,
        total_distance=distance,
        recovery_days=recovery_days,
        intensity_score=intensity,
    )


def _ids(current_week, metrics, summaries=()):
    return {i.id for i in generate_insights({}, current_week, metrics, list(summaries), now=NOW)}


class TestConsistencyRules:
    """Tests for adherence insights."""

    def test_excellent(self):
        """Test 90% and above is a success."""
        insights = generate_insights({}, 5, _metrics(adherence_rate=92), [], now=NOW)

        match = [i for i in insights if i.category == InsightCategory.CONSISTENCY]
        assert len(match) == 1
        assert match[0].severity == InsightSeverity.SUCCESS
        assert match[0].value == 92

    def test_good(self):
        """Test 75-90% is informational."""
        assert "adherence-good-week-5" in _ids(5, _metrics(adherence_rate=80))
        assert "adherence-good-week-5" not in _ids(5, _metrics(adherence_rate=90))

    def test_low_after_week_two(self):
        """Test under 60% warns only after week 2."""
        assert "adherence-low-week-3" in _ids(3, _metrics(adherence_rate=50))
        assert _ids(2, _metrics(adherence_rate=50)) == set()

    def test_middle_band_silent(self):
        """Test 60-75% produces nothing."""
        assert _ids(5, _metrics(adherence_rate=65)) == set()


class TestStreakRules:
    """Tests for streak insights."""

    def test_long_streak(self):
        insights = generate_insights({}, 5, _metrics(current_streak=7), [], now=NOW)
        assert insights[0].id == "streak-long-week-5"
        assert insights[0].severity == InsightSeverity.SUCCESS

    def test_building_streak(self):
        assert "streak-building-week-5" in _ids(5, _metrics(current_streak=4))

    def test_short_streak_silent(self):
        assert _ids(5, _metrics(current_streak=2)) == set()


class TestTrendRules:
    """Tests for volume trend insights."""

    def test_improving(self):
        insights = generate_insights(
            {}, 5, _metrics(weekly_trend=Trend.IMPROVING, pace_improvement=12.5), [], now=NOW
        )
        assert insights[0].category == InsightCategory.TREND
        assert insights[0].change == 12.5

    def test_declining_before_taper(self):
        """Test declining volume warns before week 14 only."""
        assert "trend-declining-week-10" in _ids(10, _metrics(weekly_trend=Trend.DECLINING))
        assert "trend-declining-week-14" not in _ids(14, _metrics(weekly_trend=Trend.DECLINING))


class TestRecoveryRules:
    """Tests for load and recovery insights."""

    def test_volume_jump(self):
        """Test a >20% week-over-week rise warns with the change attached."""
        insights = generate_insights(
            {}, 3, _metrics(), [_week(2, 10), _week(3, 13)], now=NOW
        )

        assert len(insights) == 1
        assert insights[0].id == "volume-jump-week-3"
        assert insights[0].change == pytest.approx(30)
        assert insights[0].week == 3

    def test_small_rise_silent(self):
        assert _ids(3, _metrics(), [_week(2, 10), _week(3, 11)]) == set()

    def test_jump_needs_prior_distance(self):
        """Test no jump is reported from a zero-distance week."""
        assert _ids(3, _metrics(), [_week(2, 0), _week(3, 10)]) == set()

    def test_jump_needs_week_three(self):
        assert _ids(2, _metrics(), [_week(1, 10), _week(2, 20)]) == set()

    def test_recovery_check(self):
        """Test a hard week with no rest day warns."""
        ids = _ids(5, _metrics(), [_week(5, 20, recovery_days=0, intensity=9)])
        assert ids == {"recovery-check-week-5"}

    def test_recovery_check_with_rest(self):
        assert _ids(5, _metrics(), [_week(5, 20, recovery_days=1, intensity=9)]) == set()


class TestMilestoneRules:
    """Tests for distance milestones."""

    def test_reached_milestone(self):
        """Test the band just past each milestone."""
        assert reached_milestone(9.9) is None
        assert reached_milestone(10) == 10
        assert reached_milestone(27) == 25
        assert reached_milestone(30) is None
        assert reached_milestone(204.9) == 200

    def test_fires_once(self):
        """Test at most one milestone insight per call."""
        insights = generate_insights({}, 5, _metrics(total_distance=52), [], now=NOW)

        milestones = [i for i in insights if i.category == InsightCategory.MILESTONE]
        assert len(milestones) == 1
        assert milestones[0].value == 50
        assert milestones[0].id == "distance-50-week-5"


class TestRecommendationRules:
    """Tests for taper and race week advice."""

    def test_race_week(self):
        insights = generate_insights({}, 16, _metrics(), [], now=NOW)
        assert [i.id for i in insights] == ["race-week-week-16"]
        assert insights[0].week == 16

    def test_taper(self):
        assert _ids(14, _metrics()) == {"taper-week-14"}
        assert _ids(15, _metrics()) == {"taper-week-15"}
        assert _ids(13, _metrics()) == set()


class TestPerformanceRules:
    """Tests for the consistency score insight."""

    def test_consistent_runner(self):
        assert "consistency-score-week-5" in _ids(5, _metrics(consistency_score=85))
        assert _ids(5, _metrics(consistency_score=80)) == set()


class TestRanking:
    """Tests for ordering and capping."""

    def test_sorted_and_capped(self):
        """Test warnings come first and the list is capped."""
        metrics = _metrics(
            adherence_rate=95,
            current_streak=8,
            weekly_trend=Trend.IMPROVING,
            total_distance=52,
            consistency_score=90,
        )
        summaries = [_week(14, 10), _week(15, 20, recovery_days=0, intensity=10)]

        insights = generate_insights({}, 15, metrics, summaries, now=NOW)

        assert len(insights) == MAX_INSIGHTS
        assert [i.severity for i in insights[:2]] == [InsightSeverity.WARNING] * 2
        assert all(i.severity == InsightSeverity.SUCCESS for i in insights[2:])
        # the informational taper insight is ranked last and cut
        assert "taper-week-15" not in {i.id for i in insights}

    def test_no_info_before_warning(self):
        """Test severity order holds for mixed output."""
        metrics = _metrics(adherence_rate=80, weekly_trend=Trend.DECLINING)
        insights = generate_insights({}, 10, metrics, [], now=NOW)

        ranks = [i.severity.rank for i in insights]
        assert ranks == sorted(ranks)
        assert insights[0].severity == InsightSeverity.WARNING

    def test_created_at(self):
        """Test insights are stamped with the reference time."""
        insights = generate_insights({}, 16, _metrics(), [], now=NOW)
        assert insights[0].created_at == NOW.isoformat()

    def test_fresh_plan(self):
        """Test a brand new log only praises the flat consistency score."""
        insights = generate_insights({}, 1, TrainingMetrics(), [_week(1)], now=NOW)
        assert [i.id for i in insights] == ["consistency-score-week-1"]
