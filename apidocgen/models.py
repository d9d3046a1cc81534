"""Core data models shared across apidocgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SourceKind(str, Enum):
    """Which source variant of a task is in effect."""

    ARCHIVE = "archive"
    REPOSITORY = "repository"
    FILES = "files"


@dataclass(frozen=True)
class InlineFile:
    """A file supplied directly with the task.

    ``raw`` holds the bytes the file arrived as when they are known; the
    signature is computed over them so undecodable input still fingerprints
    byte for byte.
    """

    path: str
    content: str
    raw: Optional[bytes] = None

    @property
    def content_bytes(self) -> bytes:
        return self.raw if self.raw is not None else self.content.encode("utf-8")


@dataclass
class TaskDescription:
    """Inputs of a documentation task.

    Several source fields may be populated at once; ``source`` resolves them
    with the fixed precedence archive, then repository, then inline files.
    ``search_patterns`` of ``None`` means "use the language defaults", which
    is a different input from an explicit empty list.
    """

    files: List[InlineFile] = field(default_factory=list)
    archive: Optional[bytes] = None
    repository_url: Optional[str] = None
    language: Optional[str] = None
    search_patterns: Optional[List[str]] = None
    existing_documentation: Optional[Dict[str, Any]] = None

    @property
    def source(self) -> SourceKind:
        if self.archive:
            return SourceKind.ARCHIVE
        if self.repository_url:
            return SourceKind.REPOSITORY
        return SourceKind.FILES


@dataclass(frozen=True)
class WorkItem:
    """One source file submitted for analysis."""

    path: str
    content: str

    @property
    def is_empty(self) -> bool:
        return not self.content or not self.content.strip()


class OutcomeStatus(str, Enum):
    """Settled state of a dispatched work item."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ItemOutcome:
    """Result of running the worker for a single work item."""

    item: WorkItem
    status: OutcomeStatus
    payload: Any = None
    error: Optional[str] = None


@dataclass
class FileResult:
    """Per-file summary reported back to the caller."""

    file_path: str
    language_detected: str
    endpoints_found: int = 0
    documentation: List[Dict[str, Any]] = field(default_factory=list)
    status: str = OutcomeStatus.SUCCESS.value
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file_path": self.file_path,
            "language_detected": self.language_detected,
            "endpoints_found": self.endpoints_found,
            "documentation": self.documentation,
            "status": self.status,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class TaskResult:
    """Outcome of a task, either freshly computed or replayed from the cache."""

    status_message: str
    endpoints_found: int
    file_by_file_results: List[Dict[str, Any]]
    merged_documentation: Dict[str, Any]
    cache_hit: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_message": self.status_message,
            "endpoints_found": self.endpoints_found,
            "file_by_file_results": self.file_by_file_results,
            "merged_documentation": self.merged_documentation,
            "cache_hit": self.cache_hit,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TaskResult":
        results = payload.get("file_by_file_results")
        documentation = payload.get("merged_documentation")
        return cls(
            status_message=str(payload.get("status_message", "")),
            endpoints_found=int(payload.get("endpoints_found") or 0),
            file_by_file_results=list(results) if isinstance(results, list) else [],
            merged_documentation=documentation if isinstance(documentation, dict) else {},
            cache_hit=bool(payload.get("cache_hit", False)),
        )


__all__ = [
    "FileResult",
    "InlineFile",
    "ItemOutcome",
    "OutcomeStatus",
    "SourceKind",
    "TaskDescription",
    "TaskResult",
    "WorkItem",
]
