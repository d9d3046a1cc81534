"""Remote repository access through the git CLI."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Iterable

from ..errors import GitError

UNRESOLVED_REVISION = "unresolved"


class GitRemote:
    """Resolves revisions of and clones remote repositories."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    def resolve_revision(self, url: str) -> str:
        """Return the commit id the remote HEAD currently points at."""
        output = self._run(["git", "ls-remote", url, "HEAD"], capture_output=True)
        for line in output.splitlines():
            parts = line.split()
            if parts:
                return parts[0]
        raise GitError(f"Remote {url} did not report a HEAD revision")

    def clone(self, url: str, destination: Path, *, depth: int | None = 1) -> Path:
        """Clone ``url`` into ``destination`` (shallow by default)."""
        args = ["git", "clone"]
        if depth is not None:
            args.append(f"--depth={depth}")
        args.extend([url, str(destination)])
        self._run(args)
        return destination

    # ------------------------------------------------------------------
    # Helpers

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> str:
        command = list(args)
        env = os.environ.copy()
        # Never block on a credential prompt inside the service.
        env.setdefault("GIT_TERMINAL_PROMPT", "0")
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                env=env,
                check=True,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:  # pragma: no cover - depends on environment
            raise GitError("Unable to locate the 'git' executable.") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip() or f"exit code {exc.returncode}"
            subcommand = command[1] if len(command) > 1 else "command"
            raise GitError(f"git {subcommand} failed: {detail}") from exc
        return completed.stdout if capture_output else ""


__all__ = ["GitRemote", "UNRESOLVED_REVISION"]
