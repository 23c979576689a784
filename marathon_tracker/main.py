"""
Main entry point for the marathon training tracker.

Provides CLI interface for logging workouts, syncing runs from Strava,
showing training analytics, exporting them to JSON and charting them.
"""

import sys
import logging
import argparse
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List

import requests

from .config import AppConfig
from .models import CompletionStatus, Insight, WorkoutCompletion
from .store import CompletionStore
from .strava_client import StravaClient, run_oauth_flow, sync_activities
from .analyzer import (
    compute_weekly_summaries,
    compute_training_metrics,
    compute_rolling_stats,
)
from .insights import generate_insights
from .exporter import DashboardExporter
from .parsers import format_duration, format_pace
from .plan import current_week_and_day, days_until_race, get_workout
from .visualizations import plot_weekly_distance, plot_adherence, plot_category_mix


logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


SEVERITY_ICONS = {
    "critical": "🛑",
    "warning": "⚠️ ",
    "success": "✅",
    "info": "ℹ️ ",
}


def load_store(config: AppConfig) -> CompletionStore:
    """Open the completion log from the data directory."""
    return CompletionStore(config.paths.completions_file).load()


def current_insights(store: CompletionStore, config: AppConfig) -> List[Insight]:
    """Generate this week's insights, leaving out dismissed ones."""
    completions = store.get_all_completions()
    week, _ = current_week_and_day(config.training.training_start)
    summaries = compute_weekly_summaries(completions, week)
    metrics = compute_training_metrics(completions, week)
    dismissed = store.dismissed_insights
    return [
        i for i in generate_insights(completions, week, metrics, summaries)
        if i.id not in dismissed
    ]


def print_insights(insights: List[Insight]) -> None:
    if not insights:
        print("\n   No insights right now.")
        return

    for insight in insights:
        icon = SEVERITY_ICONS.get(insight.severity.value, "")
        print(f"\n   {icon} {insight.title}  [{insight.category.value}]")
        print(f"      {insight.message}")
        print(f"      id: {insight.id}")


def print_status(store: CompletionStore, config: AppConfig) -> None:
    """
    Print the training dashboard.

    Parameters:
        store: Completion log.
        config: Application configuration.
    """
    start = config.training.training_start
    completions = store.get_all_completions()
    week, day = current_week_and_day(start)
    summaries = compute_weekly_summaries(completions, week)
    metrics = compute_training_metrics(completions, week)
    rolling = compute_rolling_stats(completions, start)
    this_week = summaries[-1]

    print("\n" + "=" * 60)
    print("MARATHON TRAINING")
    print("=" * 60)

    today = get_workout(week, day)
    print(f"\n📅 Week {week}, {day.value.title()} ({days_until_race(start)} days to race)")
    if today is not None:
        print(f"   Today: {today.title} [{today.category.value}]")

    print("\n📊 THIS WEEK")
    print(
        f"   Workouts: {this_week.completed_workouts}/{this_week.planned_workouts} "
        f"({this_week.adherence_rate:.0f}%)"
    )
    print(f"   Distance: {this_week.total_distance} mi")
    print(f"   Time: {format_duration(this_week.total_duration)}")
    print(f"   Avg pace: {format_pace(this_week.avg_pace)}/mi")

    print("\n🏃 OVERALL")
    print(f"   Total workouts: {metrics.total_workouts}")
    print(f"   Total distance: {metrics.total_distance} mi")
    print(f"   Adherence: {metrics.adherence_rate:.0f}%")
    print(f"   Streak: {metrics.current_streak} (longest {metrics.longest_streak})")
    print(f"   Trend: {metrics.weekly_trend.value}")
    print(f"   Consistency: {metrics.consistency_score:.0f}/100")

    print("\n⏱  RECENT")
    for label, window in (
        ("7 days", rolling.last_7_days),
        ("14 days", rolling.last_14_days),
        ("28 days", rolling.last_28_days),
    ):
        print(f"   Last {label}: {window.workouts} runs, {window.distance} mi")

    print("\n💡 INSIGHTS")
    print_insights(current_insights(store, config))

    print("\n" + "=" * 60)


def cmd_status(args: argparse.Namespace, config: AppConfig) -> None:
    """Show the training dashboard."""
    print_status(load_store(config), config)


def cmd_log(args: argparse.Namespace, config: AppConfig) -> None:
    """Record or update a workout completion."""
    store = load_store(config)

    record = {
        "week": args.week,
        "day": args.day,
        "status": args.status,
        "distance": args.distance,
        "duration": args.duration,
        "pace": args.pace,
        "elevation": args.elevation,
        "heartRate": args.heart_rate,
        "effort": args.effort,
        "weather": args.weather,
        "notes": args.notes,
        "date": args.date,
    }
    completion = WorkoutCompletion.from_dict(record)

    if completion.status == CompletionStatus.COMPLETE:
        completion.completed_at = datetime.now(timezone.utc).isoformat()
        completion.date = completion.date or date.today().isoformat()

    store.upsert(completion)
    store.save()
    logger.info(f"Logged week {completion.week} {completion.day.value} as {completion.status.value}")


def cmd_clear(args: argparse.Namespace, config: AppConfig) -> None:
    """Remove a logged workout."""
    store = load_store(config)
    if store.delete(args.week, args.day):
        store.save()
        logger.info(f"Cleared week {args.week} {args.day}")
    else:
        logger.warning(f"Nothing logged for week {args.week} {args.day}")


def cmd_insights(args: argparse.Namespace, config: AppConfig) -> None:
    """Show current insights."""
    print_insights(current_insights(load_store(config), config))


def cmd_dismiss(args: argparse.Namespace, config: AppConfig) -> None:
    """Hide an insight."""
    store = load_store(config)
    store.dismiss_insight(args.insight_id)
    store.save()
    logger.info(f"Dismissed insight {args.insight_id}")


def cmd_sync(args: argparse.Namespace, config: AppConfig) -> None:
    """Pull runs from Strava into the log."""
    if config.strava is None or not config.strava.can_sync:
        logger.error("Strava not configured. Run 'auth' command first.")
        return

    store = load_store(config)
    client = StravaClient(config.strava)
    sync_activities(client, store, config.training.training_start)
    store.save()


def cmd_auth(args: argparse.Namespace, config: AppConfig) -> None:
    """Run Strava OAuth flow."""
    if config.strava is None:
        print("Set STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET in .env first")
        return

    run_oauth_flow(config.strava)


def cmd_export(args: argparse.Namespace, config: AppConfig) -> None:
    """Export analytics to JSON files."""
    store = load_store(config)
    output_dir = Path(args.output) if args.output else config.paths.output_dir

    exporter = DashboardExporter(output_dir)
    exporter.export_all(
        store.get_all_completions(),
        config.training.training_start,
        dismissed=store.dismissed_insights,
    )


def cmd_visualize(args: argparse.Namespace, config: AppConfig) -> None:
    """Generate charts."""
    store = load_store(config)
    completions = store.get_all_completions()
    week, _ = current_week_and_day(config.training.training_start)
    summaries = compute_weekly_summaries(completions, week)

    output_dir = config.paths.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    show = not args.no_show

    logger.info("Generating training charts...")
    plot_weekly_distance(summaries, output_dir / "weekly_distance.png", show)
    plot_adherence(summaries, output_dir / "adherence.png", show)
    plot_category_mix(completions, output_dir / "categories.png", show)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Marathon training tracker")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("status", help="Show the training dashboard")

    # log command
    log_parser = subparsers.add_parser("log", help="Log a workout")
    log_parser.add_argument("week", type=int, help="Plan week (1-16)")
    log_parser.add_argument("day", help="Day of the week, e.g. monday")
    log_parser.add_argument(
        "--status",
        choices=[s.value for s in CompletionStatus],
        default="complete",
        help="Completion status",
    )
    log_parser.add_argument("--distance", help="Distance in miles, e.g. 6.2")
    log_parser.add_argument("--duration", help="Duration as MM:SS, H:MM:SS or minutes")
    log_parser.add_argument("--pace", help="Pace per mile as M:SS")
    log_parser.add_argument("--elevation", help="Elevation gain")
    log_parser.add_argument("--heart-rate", help="Average heart rate")
    log_parser.add_argument("--effort", type=int, help="Perceived effort (1-10)")
    log_parser.add_argument("--weather", help="Weather conditions")
    log_parser.add_argument("--notes", help="Free-form notes")
    log_parser.add_argument("--date", help="Date run (YYYY-MM-DD)")

    # clear command
    clear_parser = subparsers.add_parser("clear", help="Remove a logged workout")
    clear_parser.add_argument("week", type=int)
    clear_parser.add_argument("day")

    subparsers.add_parser("insights", help="Show training insights")

    dismiss_parser = subparsers.add_parser("dismiss", help="Dismiss an insight")
    dismiss_parser.add_argument("insight_id")

    subparsers.add_parser("sync", help="Sync runs from Strava")
    subparsers.add_parser("auth", help="Run Strava OAuth flow")

    # export command
    export_parser = subparsers.add_parser("export", help="Export analytics as JSON")
    export_parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Custom output directory (default: output dir)",
    )

    # visualize command
    viz_parser = subparsers.add_parser("visualize", help="Generate charts")
    viz_parser.add_argument(
        "--no-show", action="store_true", help="Save plots without displaying"
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "status": cmd_status,
        "log": cmd_log,
        "clear": cmd_clear,
        "insights": cmd_insights,
        "dismiss": cmd_dismiss,
        "sync": cmd_sync,
        "auth": cmd_auth,
        "export": cmd_export,
        "visualize": cmd_visualize,
    }

    try:
        config = AppConfig.load()
        commands[args.command](args, config)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)
    except requests.RequestException as e:
        logger.error(f"Strava request failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
