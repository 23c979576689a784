"""
Training log visualization.

Provides matplotlib charts of weekly volume, adherence and the mix of
completed workout categories.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .models import WeeklySummary, WorkoutCategory
from .analyzer import Completions, index_completions
from .plan import get_workout


logger = logging.getLogger(__name__)

# plot styling
plt.style.use("seaborn-v0_8-whitegrid")
COLORS = {
    "primary": "#2563eb",
    "secondary": "#64748b",
    "accent": "#f59e0b",
    "success": "#10b981",
}

CATEGORY_COLORS = {
    WorkoutCategory.SPEED: "#ef4444",
    WorkoutCategory.RECOVERY: "#3b82f6",
    WorkoutCategory.AEROBIC: "#10b981",
    WorkoutCategory.TEMPO: "#f59e0b",
    WorkoutCategory.LONG: "#8b5cf6",
    WorkoutCategory.REST: "#6b7280",
    WorkoutCategory.RACE: "#ec4899",
}


def _finish(output_path: Optional[Path], show: bool) -> None:
    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info(f"Saved plot to {output_path}")

    if show:
        plt.show()
    else:
        plt.close()


def plot_weekly_distance(
    summaries: List[WeeklySummary],
    output_path: Optional[Path] = None,
    show: bool = True,
) -> None:
    """
    Plot weekly distance with completed workout counts.

    Parameters:
        summaries: Weekly summaries, oldest first.
        output_path: Optional path to save the figure.
        show: Whether to display the plot.
    """
    if not summaries:
        logger.warning("No weekly data to plot")
        return

    fig, ax1 = plt.subplots(figsize=(12, 6))

    x = np.arange(len(summaries))
    miles = [s.total_distance for s in summaries]
    workouts = [s.completed_workouts for s in summaries]

    ax1.bar(x, miles, color=COLORS["primary"], alpha=0.8)
    ax1.set_xlabel("Week", fontsize=11)
    ax1.set_ylabel("Miles", color=COLORS["primary"], fontsize=11)
    ax1.tick_params(axis="y", labelcolor=COLORS["primary"])

    ax2 = ax1.twinx()
    ax2.plot(x, workouts, "o-", color=COLORS["accent"], linewidth=2, markersize=6)
    ax2.set_ylabel("Completed Workouts", color=COLORS["accent"], fontsize=11)
    ax2.tick_params(axis="y", labelcolor=COLORS["accent"])

    ax1.set_xticks(x)
    ax1.set_xticklabels([str(s.week) for s in summaries])
    ax1.set_title("Weekly Training Distance", fontsize=14, fontweight="bold")

    _finish(output_path, show)


def plot_adherence(
    summaries: List[WeeklySummary],
    output_path: Optional[Path] = None,
    show: bool = True,
) -> None:
    """
    Plot weekly adherence against the plan.

    Weeks at or above 75% are drawn in the success color.
    """
    if not summaries:
        logger.warning("No adherence data to plot")
        return

    fig, ax = plt.subplots(figsize=(12, 5))

    x = np.arange(len(summaries))
    rates = np.array([s.adherence_rate for s in summaries])
    colors = np.where(rates >= 75, COLORS["success"], COLORS["secondary"])

    ax.bar(x, rates, color=colors, alpha=0.85)
    ax.axhline(rates.mean(), color=COLORS["accent"], linestyle="--", linewidth=2,
               label=f"Average: {rates.mean():.0f}%")

    ax.set_ylim(0, 105)
    ax.set_xticks(x)
    ax.set_xticklabels([str(s.week) for s in summaries])
    ax.set_xlabel("Week", fontsize=11)
    ax.set_ylabel("Adherence (%)", fontsize=11)
    ax.set_title("Plan Adherence", fontsize=14, fontweight="bold")
    ax.legend()
    ax.grid(True, alpha=0.3, axis="y")

    _finish(output_path, show)


def plot_category_mix(
    completions: Completions,
    output_path: Optional[Path] = None,
    show: bool = True,
) -> None:
    """Pie chart of completed workouts by plan category."""
    counts: Counter = Counter()
    for completion in index_completions(completions).values():
        if not completion.is_complete:
            continue
        workout = get_workout(completion.week, completion.day)
        if workout is not None:
            counts[workout.category] += 1

    if not counts:
        logger.warning("No completed workouts to plot")
        return

    fig, ax = plt.subplots(figsize=(8, 8))

    categories = sorted(counts, key=lambda c: counts[c], reverse=True)
    ax.pie(
        [counts[c] for c in categories],
        labels=[c.value for c in categories],
        colors=[CATEGORY_COLORS[c] for c in categories],
        autopct="%1.0f%%",
        startangle=90,
    )
    ax.set_title("Completed Workouts by Category", fontsize=14, fontweight="bold")

    _finish(output_path, show)
