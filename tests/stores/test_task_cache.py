"""Tests for the task result cache."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from apidocgen.stores import TaskCache


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


def _result(label: str) -> dict:
    return {
        "status_message": label,
        "endpoints_found": 1,
        "file_by_file_results": [],
        "merged_documentation": {"paths": {"/x": {"get": {"summary": label}}}},
        "cache_hit": False,
    }


def test_task_cache_round_trip(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache" / "memory.json"
    cache = TaskCache(cache_path)
    cache.put("sig-1", _result("first"))

    assert cache.get("sig-1") == _result("first")

    reloaded = TaskCache(cache_path)
    assert reloaded.get("sig-1") == _result("first")
    assert reloaded.get("sig-2") is None


def test_task_cache_get_returns_private_copy() -> None:
    cache = TaskCache(None)
    cache.put("sig", _result("original"))

    fetched = cache.get("sig")
    assert fetched is not None
    fetched["merged_documentation"]["paths"].clear()

    assert cache.get("sig") == _result("original")


def test_task_cache_evicts_oldest_entry_beyond_capacity(tmp_path: Path) -> None:
    cache = TaskCache(tmp_path / "memory.json", capacity=3, clock=_Clock())
    for index in range(4):
        cache.put(f"sig-{index}", _result(str(index)))

    assert len(cache) == 3
    assert "sig-0" not in cache
    assert all(f"sig-{index}" in cache for index in (1, 2, 3))

    persisted = json.loads((tmp_path / "memory.json").read_text(encoding="utf-8"))
    assert sorted(persisted["entries"]) == ["sig-1", "sig-2", "sig-3"]


def test_task_cache_breaks_timestamp_ties_by_signature() -> None:
    fixed = datetime(2026, 1, 1, tzinfo=UTC)
    cache = TaskCache(None, capacity=2, clock=lambda: fixed)
    cache.put("bbb", _result("b"))
    cache.put("aaa", _result("a"))
    cache.put("ccc", _result("c"))

    assert "aaa" not in cache
    assert "bbb" in cache and "ccc" in cache


def test_task_cache_overwrite_refreshes_recorded_time() -> None:
    cache = TaskCache(None, capacity=2, clock=_Clock())
    cache.put("old", _result("old"))
    cache.put("middle", _result("middle"))
    cache.put("old", _result("old again"))
    cache.put("new", _result("new"))

    assert "middle" not in cache
    assert cache.get("old") == _result("old again")


def test_task_cache_reads_do_not_evict(tmp_path: Path) -> None:
    cache_path = tmp_path / "memory.json"
    seeded = TaskCache(cache_path, capacity=5, clock=_Clock())
    for index in range(4):
        seeded.put(f"sig-{index}", _result(str(index)))

    smaller = TaskCache(cache_path, capacity=2)
    assert len(smaller) == 4
    assert smaller.get("sig-0") is not None


def test_task_cache_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    cache_path = tmp_path / "memory.json"
    cache_path.write_text("{not json", encoding="utf-8")

    cache = TaskCache(cache_path)
    assert len(cache) == 0

    cache.put("sig", _result("fresh"))
    assert TaskCache(cache_path).get("sig") == _result("fresh")


def test_task_cache_ignores_other_versions(tmp_path: Path) -> None:
    cache_path = tmp_path / "memory.json"
    cache_path.write_text(
        json.dumps({"version": 99, "entries": {"sig": {"result": {}, "recorded_at": "x"}}}),
        encoding="utf-8",
    )

    assert TaskCache(cache_path).get("sig") is None


def test_task_cache_loads_lazily(tmp_path: Path) -> None:
    cache_path = tmp_path / "memory.json"
    cache = TaskCache(cache_path)

    TaskCache(cache_path).put("sig", _result("written later"))

    assert cache.get("sig") == _result("written later")


def test_task_cache_survives_write_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    cache = TaskCache(blocker / "memory.json")

    cache.put("sig", _result("kept in memory"))

    assert cache.get("sig") == _result("kept in memory")


def test_task_cache_clear_persists(tmp_path: Path) -> None:
    cache_path = tmp_path / "memory.json"
    cache = TaskCache(cache_path)
    cache.put("sig", _result("gone"))
    cache.clear()

    assert len(TaskCache(cache_path)) == 0


def test_task_cache_entries_are_newest_first() -> None:
    cache = TaskCache(None, clock=_Clock())
    cache.put("first", _result("1"))
    cache.put("second", _result("2"))

    assert [signature for signature, _ in cache.entries()] == ["second", "first"]


def test_task_cache_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        TaskCache(None, capacity=0)
