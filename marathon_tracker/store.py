"""
Local storage for the training log.

CompletionStore keeps one completion per (week, day) slot with upsert
semantics and persists the log as JSON. ExpiringStore is a small
key-value map with per-entry lifetimes, used for OAuth state nonces and
short-lived access tokens.
"""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from .models import DAY_NAMES, DayName, WorkoutCompletion


logger = logging.getLogger(__name__)

SlotKey = Tuple[int, DayName]


class CompletionStore:
    """In-memory completion log with optional JSON file backing."""

    def __init__(self, path: Optional[Path] = None):
        self._path = path
        self._completions: Dict[SlotKey, WorkoutCompletion] = {}
        self._dismissed: Set[str] = set()
        # records that failed validation, written back untouched on save
        self._invalid: List[dict] = []

    @staticmethod
    def _key(week: int, day: Union[DayName, str]) -> SlotKey:
        return (week, DayName(day))

    def get_all_completions(self) -> Dict[SlotKey, WorkoutCompletion]:
        """Return a snapshot of every stored completion."""
        return dict(self._completions)

    def get_completion(self, week: int, day: Union[DayName, str]) -> Optional[WorkoutCompletion]:
        return self._completions.get(self._key(week, day))

    def upsert(self, completion: WorkoutCompletion) -> WorkoutCompletion:
        """
        Store a completion, replacing any record for the same slot.

        The replaced record's id is kept; new slots get a fresh id.
        """
        existing = self._completions.get(completion.key)
        if existing is not None and existing.id:
            completion.id = existing.id
        elif not completion.id:
            completion.id = str(uuid.uuid4())

        self._completions[completion.key] = completion
        return completion

    def delete(self, week: int, day: Union[DayName, str]) -> bool:
        """Remove a slot's completion. Returns whether one existed."""
        return self._completions.pop(self._key(week, day), None) is not None

    def dismiss_insight(self, insight_id: str) -> None:
        self._dismissed.add(insight_id)

    @property
    def dismissed_insights(self) -> Set[str]:
        return set(self._dismissed)

    def __len__(self) -> int:
        return len(self._completions)

    def load(self) -> "CompletionStore":
        """
        Load the log from the backing file, if there is one.

        Records that fail validation are left out of the log with a
        warning but kept as-is, so saving never drops them from the file.
        """
        if self._path is None or not self._path.exists():
            return self

        with open(self._path) as f:
            data = json.load(f)

        for raw in data.get("completions", []):
            try:
                completion = WorkoutCompletion.from_dict(raw)
            except ValueError as e:
                logger.warning(f"Skipping invalid completion record: {e}")
                self._invalid.append(raw)
                continue
            self.upsert(completion)

        self._dismissed.update(data.get("dismissedInsights", []))
        logger.info(f"Loaded {len(self._completions)} completions from {self._path}")
        return self

    def save(self) -> None:
        """Write the log to the backing file."""
        if self._path is None:
            raise ValueError("CompletionStore has no backing file to save to")

        records = sorted(
            self._completions.values(), key=lambda c: (c.week, DAY_NAMES.index(c.day))
        )
        data = {
            "completions": [c.to_dict() for c in records] + self._invalid,
            "dismissedInsights": sorted(self._dismissed),
        }

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Saved {len(records)} completions to {self._path}")


class ExpiringStore:
    """
    Key-value map whose entries expire after a time-to-live.

    Expired entries are never returned and are dropped by sweep(),
    which also runs on every write.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        self.sweep()
        self._entries[key] = (value, self._clock() + ttl_seconds)

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def pop(self, key: str) -> Optional[Any]:
        """Remove and return a live entry."""
        value = self.get(key)
        self._entries.pop(key, None)
        return value

    def sweep(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
