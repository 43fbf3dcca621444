"""Protocols for the install pipeline's external collaborators.

Apps can provide any implementation (a different git frontend, a silent
progress reporter for scripts, fakes in tests). The library only requires
these interfaces.
"""

from pathlib import Path
from typing import Protocol
from typing import runtime_checkable


@runtime_checkable
class GitClientProtocol(Protocol):
    """Source-control operations needed to resolve formulas and versions."""

    def exists(self, url: str) -> bool:
        """Check whether a remote repository exists and is reachable."""
        ...

    def clone(self, url: str, directory: Path, options=None) -> None:
        """Clone url into directory.

        Args:
            url: Repository url
            directory: Target working copy directory (must not exist)
            options: Optional CloneOptions (depth, single branch, filter, ...)

        Raises:
            GitError: If the clone fails
        """
        ...

    def tags(self, url: str) -> list[str]:
        """Version tags of the repository, newest first, leading 'v' stripped."""
        ...


@runtime_checkable
class ProgressReporterProtocol(Protocol):
    """Byte-level progress of a download."""

    def start(self, description: str, total: int) -> None:
        ...

    def update(self, completed: int) -> None:
        """Set cumulative bytes completed (never above total)."""
        ...

    def finish(self, message: str) -> None:
        ...
