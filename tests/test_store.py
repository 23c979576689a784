"""
Tests for the completion store and the expiring key-value store.
"""

import json

import pytest

from marathon_tracker.models import CompletionStatus, DayName, WorkoutCompletion
from marathon_tracker.store import CompletionStore, ExpiringStore


def _completion(week=1, day=DayName.MONDAY, **fields):
    return WorkoutCompletion(week=week, day=day, status=CompletionStatus.COMPLETE, **fields)


class TestCompletionStore:
    """Tests for CompletionStore."""

    def test_upsert_assigns_id(self):
        """Test new records get an id."""
        store = CompletionStore()
        saved = store.upsert(_completion())

        assert saved.id
        assert store.get_completion(1, "monday") is saved

    def test_upsert_replaces_and_keeps_id(self):
        """Test writing the same slot replaces the record but keeps its id."""
        store = CompletionStore()
        first = store.upsert(_completion(distance="3"))
        second = store.upsert(_completion(distance="5"))

        assert second.id == first.id
        assert store.get_completion(1, DayName.MONDAY).distance == "5"
        assert len(store) == 1

    def test_delete(self):
        """Test deleting a slot."""
        store = CompletionStore()
        store.upsert(_completion())

        assert store.delete(1, "monday") is True
        assert store.delete(1, "monday") is False
        assert store.get_completion(1, "monday") is None

    def test_snapshot_is_a_copy(self):
        """Test later writes do not change an earlier snapshot."""
        store = CompletionStore()
        store.upsert(_completion())
        snapshot = store.get_all_completions()

        store.upsert(_completion(day=DayName.TUESDAY))

        assert list(snapshot) == [(1, DayName.MONDAY)]

    def test_save_and_load(self, tmp_path):
        """Test the log and dismissed insights persist to JSON."""
        path = tmp_path / "data" / "completions.json"
        store = CompletionStore(path)
        saved = store.upsert(_completion(week=2, day=DayName.FRIDAY, heart_rate="150"))
        store.dismiss_insight("taper-week-14")
        store.save()

        loaded = CompletionStore(path).load()

        restored = loaded.get_completion(2, "friday")
        assert restored.id == saved.id
        assert restored.heart_rate == "150"
        assert loaded.dismissed_insights == {"taper-week-14"}

        raw = json.loads(path.read_text())
        assert raw["completions"][0]["heartRate"] == "150"

    def test_load_skips_invalid_records(self, tmp_path):
        """Test bad records are skipped rather than failing the load."""
        path = tmp_path / "completions.json"
        path.write_text(
            json.dumps(
                {
                    "completions": [
                        {"week": 1, "day": "monday", "status": "complete"},
                        {"week": 99, "day": "monday"},
                    ]
                }
            )
        )

        store = CompletionStore(path).load()
        assert len(store) == 1

    def test_load_missing_file(self, tmp_path):
        """Test a missing file gives an empty store."""
        store = CompletionStore(tmp_path / "nope.json").load()
        assert len(store) == 0

    def test_save_without_path(self):
        """Test saving an in-memory store is an error."""
        with pytest.raises(ValueError):
            CompletionStore().save()


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestExpiringStore:
    """Tests for ExpiringStore."""

    def test_get_before_and_after_expiry(self):
        """Test entries vanish once their lifetime passes."""
        clock = FakeClock()
        store = ExpiringStore(clock=clock)
        store.set("token", "abc", ttl_seconds=10)

        clock.now = 9
        assert store.get("token") == "abc"

        clock.now = 10
        assert store.get("token") is None

    def test_pop_is_single_use(self):
        """Test pop removes the entry."""
        store = ExpiringStore(clock=FakeClock())
        store.set("state", True, ttl_seconds=60)

        assert store.pop("state") is True
        assert store.pop("state") is None

    def test_sweep(self):
        """Test sweep drops only expired entries."""
        clock = FakeClock()
        store = ExpiringStore(clock=clock)
        store.set("short", 1, ttl_seconds=5)
        store.set("long", 2, ttl_seconds=50)

        clock.now = 6
        assert store.sweep() == 1
        assert len(store) == 1
        assert store.get("long") == 2


class TestCompletionStoreFile:
    """Tests for the JSON file layout."""

    def test_day_lookups_ignore_case(self):
        """Test capitalised day names reach the same slot."""
        store = CompletionStore()
        store.upsert(_completion())

        assert store.get_completion(1, "Monday") is not None
        assert store.delete(1, " MONDAY ") is True

    def test_invalid_records_survive_save(self, tmp_path):
        """Test a record that fails validation is written back untouched."""
        path = tmp_path / "completions.json"
        bad = {"week": 2, "day": "monday", "status": "complete", "effort": 11}
        path.write_text(
            json.dumps(
                {"completions": [{"week": 1, "day": "monday", "status": "complete"}, bad]}
            )
        )

        store = CompletionStore(path).load()
        assert len(store) == 1
        store.upsert(_completion(week=3))
        store.save()

        raw = json.loads(path.read_text())["completions"]
        assert len(raw) == 3
        assert bad in raw
        assert len(CompletionStore(path).load()) == 2

    def test_saved_in_calendar_order(self, tmp_path):
        """Test records are written by week then weekday."""
        path = tmp_path / "completions.json"
        store = CompletionStore(path)
        for day in (DayName.SUNDAY, DayName.FRIDAY, DayName.MONDAY, DayName.WEDNESDAY):
            store.upsert(_completion(day=day))
        store.upsert(_completion(week=2, day=DayName.MONDAY))
        store.save()

        raw = json.loads(path.read_text())["completions"]
        assert [(r["week"], r["day"]) for r in raw] == [
            (1, "monday"),
            (1, "wednesday"),
            (1, "friday"),
            (1, "sunday"),
            (2, "monday"),
        ]
