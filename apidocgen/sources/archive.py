"""Zip archive extraction."""

from __future__ import annotations

import io
import tempfile
import zipfile
from pathlib import Path
from typing import List, Sequence

from ..errors import DiscoveryError
from ..logging import get_logger
from ..models import WorkItem
from .finder import find_code_files

_LOGGER = get_logger("sources.archive")


def extract_archive(data: bytes, search_patterns: Sequence[str] | None) -> List[WorkItem]:
    """Unpack zip ``data`` into a scratch directory and collect matching files."""
    with tempfile.TemporaryDirectory(prefix="zip-extract-") as scratch:
        target = Path(scratch)
        _LOGGER.info("Unzipping %d byte archive into %s", len(data), target)
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                archive.extractall(target)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as exc:
            raise DiscoveryError(f"Failed to process zip file: {exc}") from exc
        return find_code_files(target, search_patterns)


__all__ = ["extract_archive"]
