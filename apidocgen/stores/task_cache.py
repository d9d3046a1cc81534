"""Bounded persistent cache of task results keyed by task signature."""

from __future__ import annotations

import copy
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..logging import get_logger

_CACHE_VERSION = 1
DEFAULT_CAPACITY = 10


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TaskCache:
    """Stores the most recent task results, up to ``capacity`` entries.

    The backing file is loaded lazily on first access and rewritten in full
    after every ``put``. An unreadable file means an empty cache, and a failed
    write leaves the in-memory entries in place for the rest of the process.
    Passing ``path=None`` keeps everything in memory.
    """

    def __init__(
        self,
        path: Path | None,
        *,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self._path = path
        self._capacity = capacity
        self._clock = clock
        self._entries: Dict[str, Dict[str, object]] = {}
        self._loaded = False
        self.logger = get_logger("cache")

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, signature: str) -> Optional[Dict[str, object]]:
        self._ensure_loaded()
        entry = self._entries.get(signature)
        if entry is None:
            return None
        return copy.deepcopy(entry["result"])  # type: ignore[arg-type]

    def put(self, signature: str, result: Dict[str, object]) -> None:
        self._ensure_loaded()
        self._entries[signature] = {
            "result": copy.deepcopy(result),
            "recorded_at": _format_timestamp(self._clock()),
        }
        self.logger.info("Saved result for signature %s", signature[:10])
        self._evict()
        self._persist()

    def clear(self) -> None:
        self._ensure_loaded()
        self._entries.clear()
        self._persist()

    def entries(self) -> List[Tuple[str, str]]:
        """Return ``(signature, recorded_at)`` pairs, newest first."""
        self._ensure_loaded()
        ordered = sorted(self._entries.items(), key=_eviction_key, reverse=True)
        return [(signature, str(entry["recorded_at"])) for signature, entry in ordered]

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._entries)

    def __contains__(self, signature: object) -> bool:
        self._ensure_loaded()
        return signature in self._entries

    # ------------------------------------------------------------------
    # Internal helpers

    def _evict(self) -> None:
        overflow = len(self._entries) - self._capacity
        if overflow <= 0:
            return
        ordered = sorted(self._entries.items(), key=_eviction_key)
        for signature, _ in ordered[:overflow]:
            del self._entries[signature]
            self.logger.info("Pruned old entry %s", signature[:10])

    def _persist(self) -> None:
        if self._path is None:
            return
        payload = {"version": _CACHE_VERSION, "entries": self._entries}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
            )
        except (OSError, TypeError, ValueError) as exc:
            self.logger.warning("Failed to write task cache %s: %s", self._path, exc)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if self._path is not None:
            self._entries = self._load(self._path)

    def _load(self, path: Path) -> Dict[str, Dict[str, object]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            self.logger.warning("Ignoring unreadable task cache %s: %s", path, exc)
            return {}
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return {}
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return {}
        valid_entries: Dict[str, Dict[str, object]] = {}
        for signature, raw in entries.items():
            if not isinstance(signature, str) or not isinstance(raw, dict):
                continue
            if not isinstance(raw.get("result"), dict):
                continue
            if not isinstance(raw.get("recorded_at"), str):
                continue
            valid_entries[signature] = raw
        return valid_entries


def _format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _eviction_key(item: Tuple[str, Dict[str, object]]) -> Tuple[str, str]:
    # ISO-8601 UTC timestamps of a fixed shape sort chronologically as text.
    signature, entry = item
    return str(entry["recorded_at"]), signature


__all__ = ["DEFAULT_CAPACITY", "TaskCache"]
