"""
Parsers for free-text workout metrics.

Users type distance, duration, pace and heart rate however they like
("3.1 mi", "45:30", "8:55/mi", "152 bpm"). Each parser pulls out the
first usable number and falls back to 0, so a garbled field never
stops the analytics from running.

Units: distance in miles, duration in seconds, pace in seconds per
mile, heart rate in beats per minute.
"""

import re
from typing import Optional


_NUMBER = re.compile(r"\d*\.?\d+")
_INTEGER = re.compile(r"\d+")
_LEADING_INTEGER = re.compile(r"^\s*(\d+)")
_CLOCK_HMS = re.compile(r"^\s*(\d+):(\d+):(\d+)")
_CLOCK_MS = re.compile(r"^\s*(\d+):(\d+)")
_PACE = re.compile(r"(\d+):(\d+)")


def parse_distance(text: Optional[str]) -> float:
    """Extract the first number from a distance entry, or 0."""
    if not text:
        return 0.0

    match = _NUMBER.search(text)
    return float(match.group()) if match else 0.0


def parse_duration(text: Optional[str]) -> int:
    """
    Convert a duration entry to seconds.

    "45:30" is minutes and seconds, "1:05:30" adds hours, and a bare
    number such as "45" or "45 min" counts as whole minutes.
    """
    if not text:
        return 0

    match = _CLOCK_HMS.match(text)
    if match:
        hours, minutes, seconds = (int(g) for g in match.groups())
        return hours * 3600 + minutes * 60 + seconds

    match = _CLOCK_MS.match(text)
    if match:
        minutes, seconds = (int(g) for g in match.groups())
        return minutes * 60 + seconds

    match = _LEADING_INTEGER.match(text)
    return int(match.group(1)) * 60 if match else 0


def parse_pace(text: Optional[str]) -> int:
    """Convert the first M:SS in a pace entry to seconds per mile, or 0."""
    if not text:
        return 0

    match = _PACE.search(text)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))
    return 0


def parse_heart_rate(text: Optional[str]) -> int:
    """Extract the first integer from a heart-rate entry, or 0."""
    if not text:
        return 0

    match = _INTEGER.search(text)
    return int(match.group()) if match else 0


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS, or M:SS under an hour."""
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_pace(seconds: float) -> str:
    if seconds <= 0:
        return "N/A"
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02d}"
