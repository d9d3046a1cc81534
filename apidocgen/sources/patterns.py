"""Search patterns and language hints for source discovery."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple

DEFAULT_SEARCH_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "javascript": ("**/routes/**", "**/api/**", "server.js", "index.js", "app.js"),
    "typescript": (
        "**/routes/**",
        "**/api/**",
        "**/controller/**",
        "server.ts",
        "index.ts",
        "app.ts",
    ),
    "python": ("**/api/**", "**/routes/**", "app.py", "main.py", "views.py"),
    "java": ("**/src/**/controller/**", "**/src/**/api/**", "**/src/**/controllers/**"),
    "csharp": ("**/Controllers/**", "**/api/**"),
    "go": ("**/handlers/**", "**/api/**", "**/routes/**", "main.go", "server.go"),
    "ruby": ("**/app/controllers/**", "**/api/**", "config/routes.rb"),
    "php": (
        "**/app/Http/Controllers/**",
        "**/src/Controller/**",
        "**/api/**",
        "index.php",
        "routes/api.php",
    ),
    "cpp": ("**/routes/**", "**/api/**", "**/controller/**", "main.cpp", "server.cpp"),
    "c": ("**/routes/**", "**/api/**", "**/controller/**", "main.c", "server.c"),
}

FALLBACK_SEARCH_PATTERNS: Tuple[str, ...] = ("**/",)

CODE_FILE_SUFFIXES: Tuple[str, ...] = (
    ".js",
    ".py",
    ".go",
    ".java",
    ".ts",
    ".rb",
    ".php",
    ".cs",
    ".mjs",
    ".cjs",
)

_LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".go": "go",
    ".java": "java",
    ".ts": "typescript",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
}

DEFAULT_LANGUAGE = "javascript"


def resolve_patterns(language: Optional[str], search_patterns: Optional[Sequence[str]]) -> List[str]:
    """Return the patterns to search: explicit ones, else the language defaults."""
    if search_patterns:
        return [str(pattern) for pattern in search_patterns]
    key = (language or "").strip().lower()
    return list(DEFAULT_SEARCH_PATTERNS.get(key, FALLBACK_SEARCH_PATTERNS))


def language_from_path(path: str) -> Optional[str]:
    """Map a file name to a language name by its extension."""
    return _LANGUAGE_BY_SUFFIX.get(PurePosixPath(path).suffix.lower())


__all__ = [
    "CODE_FILE_SUFFIXES",
    "DEFAULT_LANGUAGE",
    "DEFAULT_SEARCH_PATTERNS",
    "FALLBACK_SEARCH_PATTERNS",
    "language_from_path",
    "resolve_patterns",
]
