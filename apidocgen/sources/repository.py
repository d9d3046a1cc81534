"""Git repository checkout."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import List, Sequence

from ..errors import DiscoveryError, GitError
from ..git.remote import GitRemote
from ..logging import get_logger
from ..models import WorkItem
from .finder import find_code_files

_LOGGER = get_logger("sources.repository")


def clone_repository(
    url: str, search_patterns: Sequence[str] | None, git: GitRemote
) -> List[WorkItem]:
    """Shallow-clone ``url`` into a scratch directory and collect matching files."""
    with tempfile.TemporaryDirectory(prefix="git-repo-") as scratch:
        target = Path(scratch) / "checkout"
        _LOGGER.info("Cloning %s into %s", url, target)
        try:
            git.clone(url, target)
        except GitError as exc:
            raise DiscoveryError(f"Failed to process git repo: {exc}") from exc
        return find_code_files(target, search_patterns)


__all__ = ["clone_repository"]
