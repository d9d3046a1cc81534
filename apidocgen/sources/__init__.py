"""Source discovery for documentation tasks."""

from __future__ import annotations

from typing import List

from ..git.remote import GitRemote
from ..logging import get_logger
from ..models import SourceKind, TaskDescription, WorkItem
from .archive import extract_archive
from .finder import find_code_files
from .patterns import language_from_path, resolve_patterns
from .repository import clone_repository


class SourceCollector:
    """Turns a task's effective source into work items."""

    def __init__(self, git: GitRemote | None = None) -> None:
        self.git = git or GitRemote()
        self.logger = get_logger("sources")

    def collect(self, task: TaskDescription) -> List[WorkItem]:
        patterns = resolve_patterns(task.language, task.search_patterns)
        source = task.source
        if source is SourceKind.ARCHIVE:
            self.logger.info("Mode: ZIP. Patterns: %s", ", ".join(patterns))
            return extract_archive(task.archive or b"", patterns)
        if source is SourceKind.REPOSITORY:
            self.logger.info("Mode: PROJECT. Analyzing repository %s", task.repository_url)
            return clone_repository(task.repository_url or "", patterns, self.git)
        self.logger.info("Mode: FILES. Analyzing %d inline file(s)", len(task.files))
        return [WorkItem(path=item.path, content=item.content) for item in task.files]


__all__ = [
    "SourceCollector",
    "clone_repository",
    "extract_archive",
    "find_code_files",
    "language_from_path",
    "resolve_patterns",
]
