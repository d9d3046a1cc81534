"""Deterministic fingerprints for documentation tasks."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Callable, Optional, Sequence

from .git.remote import UNRESOLVED_REVISION
from .logging import get_logger
from .models import SourceKind, TaskDescription

_LOGGER = get_logger("signature")

_NO_LANGUAGE = "<auto>"

# Field tags. Changing any of them invalidates every stored signature.
_TAG_LANGUAGE = b"lang"
_TAG_PATTERNS = b"patterns"
_TAG_ARCHIVE = b"archive"
_TAG_FILES = b"files"
_TAG_REPOSITORY = b"git"
_TAG_DOCUMENT = b"doc"
_TAG_NO_DOCUMENT = b"nodoc"

RevisionResolver = Callable[[str], str]


def compute_signature(
    task: TaskDescription, resolve_revision: Optional[RevisionResolver] = None
) -> str:
    """Return the SHA-256 hex digest identifying ``task``'s effective inputs.

    Only the source variant selected by ``task.source`` contributes. For a
    repository the current remote revision is folded in; when it cannot be
    resolved the ``UNRESOLVED_REVISION`` sentinel is used instead.
    """
    digest = hashlib.sha256()

    def _field(tag: bytes, value: bytes) -> None:
        digest.update(tag)
        digest.update(str(len(value)).encode("ascii"))
        digest.update(b":")
        digest.update(value)

    _field(_TAG_LANGUAGE, _encode(task.language or _NO_LANGUAGE))
    _field(_TAG_PATTERNS, _encode(_serialise_patterns(task.search_patterns)))

    source = task.source
    if source is SourceKind.ARCHIVE:
        _field(_TAG_ARCHIVE, task.archive or b"")
    elif source is SourceKind.REPOSITORY:
        url = task.repository_url or ""
        _field(_TAG_REPOSITORY, _encode(url))
        _field(_TAG_REPOSITORY, _encode(_resolve(url, resolve_revision)))
    else:
        ordered = sorted(task.files, key=lambda item: item.path)
        _field(_TAG_FILES, str(len(ordered)).encode("ascii"))
        for item in ordered:
            _field(_TAG_FILES, _encode(item.path))
            _field(_TAG_FILES, item.content_bytes)

    if task.existing_documentation is None:
        _field(_TAG_NO_DOCUMENT, b"")
    else:
        _field(_TAG_DOCUMENT, _encode(_canonical_json(task.existing_documentation)))

    return digest.hexdigest()


def _resolve(url: str, resolve_revision: Optional[RevisionResolver]) -> str:
    if resolve_revision is None:
        return UNRESOLVED_REVISION
    try:
        revision = resolve_revision(url)
    except Exception as exc:
        _LOGGER.warning("Could not resolve revision for %s (%s); using sentinel", url, exc)
        return UNRESOLVED_REVISION
    return revision or UNRESOLVED_REVISION


def _serialise_patterns(patterns: Optional[Sequence[str]]) -> str:
    if patterns is None:
        return "null"
    return _canonical_json(sorted({str(pattern) for pattern in patterns}))


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _encode(value: str) -> bytes:
    return value.encode("utf-8")


__all__ = ["RevisionResolver", "compute_signature"]
