"""Exception hierarchy shared across apidocgen components."""

from __future__ import annotations


class ApiDocGenError(RuntimeError):
    """Base class for errors raised by apidocgen."""


class ConfigurationError(ApiDocGenError):
    """Raised when the agent is not configured to reach its collaborators."""


class DiscoveryError(ApiDocGenError):
    """Raised when source files cannot be obtained for a task."""


class InferenceError(ApiDocGenError):
    """Raised when a single inference call fails."""


class GitError(ApiDocGenError):
    """Raised when a git command exits unsuccessfully."""


__all__ = [
    "ApiDocGenError",
    "ConfigurationError",
    "DiscoveryError",
    "GitError",
    "InferenceError",
]
