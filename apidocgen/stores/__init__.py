"""Persistent stores used by the agent."""

from .task_cache import DEFAULT_CAPACITY, TaskCache

__all__ = ["DEFAULT_CAPACITY", "TaskCache"]
