"""Locate candidate source files inside an extracted code tree."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Iterator, List, Sequence, Set

from ..logging import get_logger
from ..models import WorkItem
from .patterns import CODE_FILE_SUFFIXES, FALLBACK_SEARCH_PATTERNS

_LOGGER = get_logger("sources.finder")

_EXCLUDED_DIRS = {
    "node_modules",
    "__pycache__",
    "venv",
    "vendor",
    "bower_components",
}


def find_code_files(base_dir: Path, search_patterns: Sequence[str] | None) -> List[WorkItem]:
    """Return work items for every code file matched by ``search_patterns``.

    Directory-style patterns are combined with each known code suffix;
    patterns that already name a code file are matched as given. Paths are
    relative to ``base_dir`` and the result is sorted by path.
    """
    base = base_dir.resolve()
    patterns = list(search_patterns) if search_patterns else list(FALLBACK_SEARCH_PATTERNS)

    matched: Set[str] = set()
    for glob_pattern in _expand_patterns(patterns):
        try:
            candidates = list(base.glob(glob_pattern))
        except ValueError as exc:
            _LOGGER.warning("Ignoring invalid search pattern %s: %s", glob_pattern, exc)
            continue
        for candidate in candidates:
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(base).as_posix()
            if _is_excluded(relative):
                continue
            matched.add(relative)

    _LOGGER.info("Found %d code file(s) in %s", len(matched), base)

    items: List[WorkItem] = []
    for relative in sorted(matched):
        try:
            content = (base / relative).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.warning("Could not read file %s: %s", relative, exc)
            continue
        items.append(WorkItem(path=relative, content=content))
    return items


def _expand_patterns(patterns: Sequence[str]) -> Iterator[str]:
    for raw in patterns:
        pattern = raw.strip().replace("\\", "/").lstrip("/")
        if ".." in PurePosixPath(pattern).parts:
            _LOGGER.warning("Ignoring search pattern outside the tree: %s", raw)
            continue
        if pattern.lower().endswith(CODE_FILE_SUFFIXES):
            yield pattern
            continue
        prefix = pattern.rstrip("/")
        for suffix in CODE_FILE_SUFFIXES:
            yield f"{prefix}/*{suffix}" if prefix else f"*{suffix}"


def _is_excluded(relative: str) -> bool:
    for part in PurePosixPath(relative).parts[:-1]:
        if part in _EXCLUDED_DIRS or part.startswith("."):
            return True
    return PurePosixPath(relative).name.startswith(".")


__all__ = ["find_code_files"]
