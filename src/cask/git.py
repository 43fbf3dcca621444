"""Git client backed by the `git` executable."""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import GitError

logger = logging.getLogger(__name__)

# Never block on credential prompts for private or missing repositories
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


@dataclass(frozen=True)
class CloneOptions:
    """Flags passed to `git clone`; None leaves git's default."""

    depth: int | None = None
    quiet: bool | None = None
    verbose: bool | None = None
    progress: bool | None = None
    single_branch: bool | None = None
    dissociate: bool | None = None
    filter: str | None = None

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.depth is not None:
            args += ["--depth", str(self.depth)]
        if self.quiet:
            args.append("--quiet")
        if self.verbose:
            args.append("--verbose")
        if self.progress:
            args.append("--progress")
        if self.single_branch:
            args.append("--single-branch")
        if self.dissociate:
            args.append("--dissociate")
        if self.filter:
            args.append(f"--filter={self.filter}")
        return args


class GitClient:
    """
    Run git commands for formula resolution.

    Example:
        >>> git = GitClient()
        >>> git.tags("https://github.com/axetroy/gpm.rs")
        ['0.1.12', '0.1.11', ...]
    """

    def __init__(self, executable: str = "git", timeout: int = 300):
        self.executable = executable
        self.timeout = timeout

    def _run(self, *args: str, capture: bool = True) -> subprocess.CompletedProcess[str]:
        command = [self.executable, *args]
        logger.debug(f"Running {' '.join(command)}")
        try:
            return subprocess.run(
                command,
                capture_output=capture,
                text=True,
                timeout=self.timeout,
                env={**os.environ, **_GIT_ENV},
            )
        except FileNotFoundError as e:
            raise GitError(f"git executable not found: {self.executable}") from e
        except subprocess.TimeoutExpired as e:
            raise GitError(
                f"git {args[0]} timed out after {self.timeout}s",
                context={"command": " ".join(command)},
            ) from e

    def exists(self, url: str) -> bool:
        """True if `git ls-remote` can reach the repository."""
        result = self._run("ls-remote", "--heads", url)
        return result.returncode == 0

    def clone(self, url: str, directory: Path, options: CloneOptions | None = None) -> None:
        options = options or CloneOptions()
        # Progress and verbose output goes straight to the terminal
        capture = not (options.progress or options.verbose)
        result = self._run("clone", *options.to_args(), url, str(directory), capture=capture)
        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            raise GitError(
                f"Failed to clone {url}: {detail or f'git exited with {result.returncode}'}",
                context={"url": url, "directory": str(directory)},
            )

    def tags(self, url: str) -> list[str]:
        """Tags of a remote repository sorted newest first, leading 'v' stripped."""
        result = self._run("ls-remote", "--tags", "--refs", "--sort=-version:refname", url)
        if result.returncode != 0:
            raise GitError(
                f"Failed to list tags of {url}: {result.stderr.strip()}",
                context={"url": url},
            )

        tags = []
        for line in result.stdout.splitlines():
            _, _, ref = line.partition("\t")
            if ref.startswith("refs/tags/"):
                tags.append(ref.removeprefix("refs/tags/").removeprefix("v"))
        return tags
