"""
Dashboard JSON exporter.

Computes the analytics for a completion snapshot and writes them to
JSON files for a static dashboard or any other consumer.
"""

import json
import logging
from pathlib import Path
from typing import Any, Collection, List, Optional
from datetime import date, datetime

from .models import TrainingMetrics, WeeklySummary, RollingStats, Insight
from .analyzer import (
    Completions,
    compute_weekly_summaries,
    compute_training_metrics,
    compute_rolling_stats,
)
from .insights import generate_insights
from .plan import TRAINING_PLAN, current_week_and_day, days_until_race


logger = logging.getLogger(__name__)


class DateEncoder(json.JSONEncoder):
    """JSON encoder that handles date and datetime objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        return super().default(obj)


class DashboardExporter:
    """Exports training analytics to JSON files."""

    def __init__(self, output_dir: Path):
        """Initialize exporter with the output directory."""
        self._output_dir = output_dir

    def _ensure_dirs(self) -> None:
        """Create output directory if it doesn't exist."""
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def _write_json(self, filename: str, data: Any) -> None:
        """Write data to JSON file."""
        filepath = self._output_dir / filename
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, cls=DateEncoder)
        logger.info(f"Exported {filename}")

    def export_plan(self) -> None:
        """Export the full training calendar."""
        data = {
            str(week): {
                day.value: {
                    "type": workout.type.value,
                    "title": workout.title,
                    "details": workout.details,
                    "category": workout.category.value,
                }
                for day, workout in days.items()
            }
            for week, days in TRAINING_PLAN.items()
        }
        self._write_json("plan.json", data)

    def export_weekly_summaries(self, summaries: List[WeeklySummary]) -> None:
        self._write_json("weekly_summaries.json", [s.to_dict() for s in summaries])

    def export_training_metrics(self, metrics: TrainingMetrics) -> None:
        self._write_json("training_metrics.json", metrics.to_dict())

    def export_rolling_stats(self, rolling: RollingStats) -> None:
        self._write_json("rolling_stats.json", rolling.to_dict())

    def export_insights(self, insights: List[Insight]) -> None:
        self._write_json("insights.json", [i.to_dict() for i in insights])

    def export_all(
        self,
        completions: Completions,
        training_start: date,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
        dismissed: Collection[str] = (),
    ) -> None:
        """
        Compute and export every dashboard file.

        Parameters:
            completions: Completion snapshot.
            training_start: Monday the plan started.
            today: Calendar day used to locate the current week.
            now: Reference time for rolling windows and insight stamps.
            dismissed: Insight ids to leave out.
        """
        self._ensure_dirs()

        current_week, current_day = current_week_and_day(training_start, today)
        summaries = compute_weekly_summaries(completions, current_week)
        metrics = compute_training_metrics(completions, current_week)
        rolling = compute_rolling_stats(completions, training_start, now)
        insights = [
            i
            for i in generate_insights(completions, current_week, metrics, summaries, now)
            if i.id not in dismissed
        ]

        self._write_json(
            "status.json",
            {
                "trainingStart": training_start,
                "currentWeek": current_week,
                "currentDay": current_day.value,
                "daysUntilRace": days_until_race(training_start, today),
            },
        )
        self.export_plan()
        self.export_weekly_summaries(summaries)
        self.export_training_metrics(metrics)
        self.export_rolling_stats(rolling)
        self.export_insights(insights)

        logger.info(f"Export complete. Data written to {self._output_dir}")
