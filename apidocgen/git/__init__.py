"""Git command wrappers."""

from .remote import UNRESOLVED_REVISION, GitRemote

__all__ = ["GitRemote", "UNRESOLVED_REVISION"]
