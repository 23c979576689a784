"""
The fixed 16-week marathon training plan.

Provides read-only lookups into the plan table along with the
calendar arithmetic that maps a training start date onto plan weeks.
"""

from datetime import date, timedelta
from typing import Dict, Optional, Tuple, Union

from .models import (
    TOTAL_WEEKS,
    DAY_NAMES,
    DayName,
    Workout,
    WorkoutCategory,
    WorkoutType,
)


DRILLS_OR_STRIDES = "Drills – and/or – strides"
TEMPO_NOTE = "Go out easy, finish fast & strong"
TEMPO_NOTE_TAPER = "Go out easy, finish fast and strong"
DRILLS_OR_STRIDES_LATE = "Drills – and/or – Strides"


def _workout(kind: str, title: str, details: str, category: str) -> Workout:
    return Workout(
        type=WorkoutType(kind),
        title=title,
        details=details,
        category=WorkoutCategory(category),
    )


def _intervals(title: str, reps: str, goal: str) -> Workout:
    details = f"{reps}\n• 1-2min walk/jog between intervals\n• Goal: {goal}\n\n{DRILLS_OR_STRIDES}"
    return _workout("intervals", title, details, "speed")


def _fartlek(minutes: str, drills: str = DRILLS_OR_STRIDES) -> Workout:
    return _workout(
        "fartlek",
        f"{minutes}min Fartlek",
        f"{minutes}min: Fartlek – or – hill run\n\n{drills}",
        "speed",
    )


def _aerobic(minutes: str) -> Workout:
    return _workout(
        "aerobic",
        f"{minutes}min Aerobic",
        f"{minutes}min: Aerobic run\n\nStrides",
        "aerobic",
    )


def _jog(minutes: str) -> Workout:
    return _workout("jog", f"{minutes}min Jog", f"{minutes}min: Jog\n\nDrills", "aerobic")


def _long(minutes: str) -> Workout:
    return _workout("long", f"{minutes}min Long Run", f"{minutes}min: Long run", "long")


def _tempo(minutes: str, strides: bool = True, note: str = TEMPO_NOTE) -> Workout:
    details = f"{minutes}min: Tempo run\n{note}"
    if strides:
        details += f"\n\n{DRILLS_OR_STRIDES}"
    return _workout("tempo", f"{minutes}min Tempo", details, "tempo")


EASY_JOG = _workout(
    "recovery",
    "20-30min Jog",
    "20-30min: Jog – or – 30min: Cross-train\n\nStrength",
    "recovery",
)
REST_DAY = _workout("rest", "Rest", "Rest – or – Fun active play", "rest")


def _week(monday: Workout, wednesday: Workout, friday: Workout, saturday: Workout) -> Dict[DayName, Workout]:
    """Standard week: easy jogs Tue/Thu and a rest day on Sunday."""
    return {
        DayName.MONDAY: monday,
        DayName.TUESDAY: EASY_JOG,
        DayName.WEDNESDAY: wednesday,
        DayName.THURSDAY: EASY_JOG,
        DayName.FRIDAY: friday,
        DayName.SATURDAY: saturday,
        DayName.SUNDAY: REST_DAY,
    }


TRAINING_PLAN: Dict[int, Dict[DayName, Workout]] = {
    1: _week(
        _intervals("5min Intervals x3", "5min intervals X 3", "2 miles at 10K pace"),
        _aerobic("30-40"),
        _jog("40"),
        _long("60"),
    ),
    2: _week(_fartlek("30"), _aerobic("40-45"), _jog("40"), _tempo("40", strides=False)),
    3: _week(
        _workout(
            "hills",
            "45min Hilly Run",
            "45min: Hilly run\nQuicker on the uphills. Practice opening your "
            "stride, increasing turnover and relaxing legs on the downhills."
            f"\n\n{DRILLS_OR_STRIDES}",
            "speed",
        ),
        _aerobic("40-45"),
        _jog("40"),
        _long("60-70"),
    ),
    4: _week(
        _intervals("4min Intervals x4", "4min intervals X 4", "2-3 miles at 10K pace"),
        _aerobic("45-50"),
        _jog("45"),
        _tempo("50"),
    ),
    5: _week(_fartlek("45"), _aerobic("50-55"), _jog("45"), _long("90")),
    6: _week(_fartlek("50"), _aerobic("40-45"), _jog("45"), _tempo("55")),
    7: _week(
        _intervals("5-6min Intervals x4", "5-6min intervals X 4", "approx. 3 miles at 10K pace"),
        _aerobic("50-55"),
        _jog("50"),
        _long("100-120"),
    ),
    8: _week(_fartlek("40-45"), _aerobic("60"), _jog("50"), _long("60-90")),
    9: _week(_fartlek("40-45"), _aerobic("60"), _jog("50"), _tempo("55")),
    10: _week(
        _workout(
            "intervals",
            "8min Intervals x3",
            "8min intervals X 3\n• Goal: approx. 3 miles at 10K pace\n"
            f"• 1-2min walk/jog between intervals\n\n{DRILLS_OR_STRIDES}",
            "speed",
        ),
        _aerobic("70"),
        _jog("50-60"),
        _long("100-120"),
    ),
    11: _week(_fartlek("50-55", DRILLS_OR_STRIDES_LATE), _aerobic("70"), _jog("50-60"), _tempo("60")),
    12: _week(_fartlek("45-50", DRILLS_OR_STRIDES_LATE), _aerobic("60"), _jog("50-60"), _long("120")),
    13: _week(
        _intervals("5-6min Intervals x4", "5-6min intervals X 4", "approx. 3 miles at 10K pace"),
        _aerobic("75"),
        _jog("50-60"),
        _tempo("55", note=TEMPO_NOTE_TAPER),
    ),
    14: _week(_fartlek("45-50"), _aerobic("70"), _jog("50"), _long("90")),
    15: _week(_fartlek("45-50"), _aerobic("45-50"), _jog("40"), _tempo("45-50", note=TEMPO_NOTE_TAPER)),
    # race week: taper with two rest days before Sunday's marathon
    16: {
        DayName.MONDAY: _workout(
            "intervals",
            "4min Intervals x3",
            "4min intervals X 3\n• 2-3min walk/jog between intervals\n"
            f"• Stay relaxed, keeping some speed in taper\n\n{DRILLS_OR_STRIDES}",
            "speed",
        ),
        DayName.TUESDAY: EASY_JOG,
        DayName.WEDNESDAY: _aerobic("30"),
        DayName.THURSDAY: _workout("rest", "Rest", "Rest", "rest"),
        DayName.FRIDAY: _workout("jog", "30min Easy", "30min: Easy run\n\nStrides", "aerobic"),
        DayName.SATURDAY: _workout("rest", "Rest", "Rest", "rest"),
        DayName.SUNDAY: _workout(
            "race",
            "Marathon Day!",
            "Marathon Day!\n\nYou've trained for this. Trust your preparation "
            "and run YOUR race.",
            "race",
        ),
    },
}


def get_week_plan(week: int) -> Optional[Dict[DayName, Workout]]:
    """Return the day-to-workout mapping for a week, or None if out of range."""
    return TRAINING_PLAN.get(week)


def get_workout(week: int, day: Union[DayName, str]) -> Optional[Workout]:
    """
    Look up the workout planned for a slot.

    Parameters:
        week: Plan week (1-16).
        day: Day of the week, as a DayName or its name in any case.

    Returns:
        The planned Workout, or None for an unknown week or day.
    """
    week_plan = get_week_plan(week)
    if week_plan is None:
        return None

    try:
        return week_plan[DayName(day)]
    except ValueError:
        return None


def planned_workout_count(week: int) -> int:
    """Count the non-rest sessions in a week."""
    week_plan = get_week_plan(week)
    if week_plan is None:
        return 0
    return sum(1 for workout in week_plan.values() if not workout.is_rest)


def training_start_for(day: date) -> date:
    """Snap a date back to the Monday that starts its week."""
    return day - timedelta(days=day.weekday())


def current_week_and_day(training_start: date, today: Optional[date] = None) -> Tuple[int, DayName]:
    """
    Locate today in the training calendar.

    The week is clamped to the plan, so dates before the start map to
    week 1 and dates after race day map to week 16.
    """
    if today is None:
        today = date.today()

    days_elapsed = (today - training_start).days
    week = min(TOTAL_WEEKS, max(1, days_elapsed // 7 + 1))
    return week, DayName.from_date(today)


def race_day(training_start: date) -> date:
    return training_start + timedelta(days=TOTAL_WEEKS * 7 - 1)


def days_until_race(training_start: date, today: Optional[date] = None) -> int:
    if today is None:
        today = date.today()
    return max(0, (race_day(training_start) - today).days)


def slot_for_date(training_start: date, day: date) -> Optional[Tuple[int, DayName]]:
    """
    Map a calendar date to its (week, day) plan slot.

    Returns None for dates outside the 16 training weeks.
    """
    days_elapsed = (day - training_start).days
    if days_elapsed < 0 or days_elapsed >= TOTAL_WEEKS * 7:
        return None
    return days_elapsed // 7 + 1, DAY_NAMES[days_elapsed % 7]
