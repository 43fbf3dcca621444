"""Formula resolver - Resolve a package identifier to a formula.

Resolution order:
1. Explicit repository url (http/https only) -> clone it
2. Bundled formula in the built-in directory (<builtin>/<a>/<b>/.../Cask.toml)
3. Derived repository url https://<identifier>.git -> clone it

Clones are shallow, single-branch and tree-filtered. Persistent clones live in
formula/<hash>/repository; temporary clones are removed on every exit path.
"""

import logging
import re
import shutil
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import urlparse

from .exceptions import FormulaNotFoundError
from .exceptions import NotAFormulaError
from .exceptions import UnsupportedSchemeError
from .git import CloneOptions
from .git import GitClient
from .protocols import GitClientProtocol
from .schema import Formula
from .store import FORMULA_FILE_NAME
from .store import Store

logger = logging.getLogger(__name__)

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

PUBLISHING_HINT = (
    "It looks like the package does not support Cask\n"
    "If you are the package owner, see our documentation for how to publish a package:\n"
    "https://github.com/cask-pkg/cask.rs/blob/main/DESIGN.md#how-do-i-publish-package"
)


def formula_git_url(package_name: str) -> str:
    """Repository url of a package identifier: https://<identifier>.git."""
    return f"https://{package_name}.git"


def package_name_from_url(url: str) -> str:
    """Identifier for a repository url: https://github.com/a/b.git -> github.com/a/b."""
    parsed = urlparse(url)
    path = parsed.path.rstrip("/").removesuffix(".git")
    return f"{parsed.netloc}{path}"


@contextmanager
def _working_copy(directory: Path, temporary: bool) -> Iterator[Path]:
    """Yield a fresh clone directory; a temporary one is removed on exit."""
    if directory.exists():
        shutil.rmtree(directory)
    try:
        yield directory
    finally:
        if temporary and directory.exists():
            logger.debug(f"Removing temporary clone {directory}")
            shutil.rmtree(directory, ignore_errors=True)


class FormulaResolver:
    """
    Resolve package identifiers to formulas (with injected store and git client).

    Example:
        >>> resolver = FormulaResolver(store=Store.default())
        >>> formula = resolver.fetch("github.com/axetroy/gpm.rs")
        >>> formula.package.bin
        'gpm'
    """

    def __init__(
        self,
        store: Store,
        git: GitClientProtocol | None = None,
        builtin_dir: Path | None = None,
        verbose: bool = False,
    ):
        """Initialize resolver.

        Args:
            store: Store whose package directories hold persistent clones
            git: Git client (defaults to the git executable)
            builtin_dir: Directory of bundled formulas (defaults to store.builtin_formula_dir)
            verbose: Show git's own output instead of a progress display
        """
        self.store = store
        self.git = git or GitClient()
        self.builtin_dir = builtin_dir if builtin_dir is not None else store.builtin_formula_dir
        self.verbose = verbose

    def fetch(self, package_name: str, temp: bool = False) -> Formula:
        """
        Resolve a package identifier or repository url to a formula.

        Args:
            package_name: e.g. "github.com/axetroy/gpm.rs" or "https://github.com/axetroy/prune.v"
            temp: Clone into a temporary directory that is removed afterwards

        Returns:
            Loaded formula (repository set to the cloned url, "" for built-in)

        Raises:
            UnsupportedSchemeError: If the url scheme is not http/https
            FormulaNotFoundError: If no repository exists for the package
            NotAFormulaError: If the repository has no Cask.toml
            GitError: If cloning fails
        """
        logger.info(f"Fetching {package_name} formula...")

        if _URL_SCHEME.match(package_name):
            scheme = urlparse(package_name).scheme.lower()
            if scheme not in ("http", "https"):
                raise UnsupportedSchemeError(
                    f"Not support the protocol '{scheme}' of package address.",
                    context={"package": package_name, "scheme": scheme},
                )

            if not self.git.exists(package_name):
                raise FormulaNotFoundError(
                    f"The package '{package_name}' does not exist!",
                    context={"package": package_name},
                )
            return self._fetch_with_git_url(package_name_from_url(package_name), package_name, temp)

        formula = self.find_builtin(package_name)
        if formula is not None:
            return formula

        git_url = formula_git_url(package_name)
        if not self.git.exists(git_url):
            raise FormulaNotFoundError(
                f"can not found package {package_name}",
                context={"package": package_name, "url": git_url},
            )
        return self._fetch_with_git_url(package_name, git_url, temp)

    def find_builtin(self, package_name: str) -> Formula | None:
        """Bundled formula of a package, None if there is none."""
        if not self.builtin_dir.exists():
            return None

        formula_path = self.builtin_dir.joinpath(*package_name.split("/")) / FORMULA_FILE_NAME
        if not formula_path.exists():
            return None

        logger.debug(f"Found built-in formula {formula_path}")
        return Formula.from_file(formula_path, repository="")

    def _clone_dir(self, package_name: str, temp: bool) -> Path:
        if temp:
            return Path(tempfile.gettempdir()) / f"cask_formula_{int(time.time())}"
        return self.store.repository_dir(package_name)

    def _fetch_with_git_url(self, package_name: str, git_url: str, temp: bool) -> Formula:
        options = CloneOptions(
            depth=1,
            quiet=not self.verbose,
            verbose=self.verbose,
            progress=not self.verbose,
            single_branch=True,
            dissociate=True,
            filter="tree:0",
        )

        with _working_copy(self._clone_dir(package_name, temp), temporary=temp) as clone_dir:
            clone_dir.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Cloning {git_url} into {clone_dir}")
            self.git.clone(git_url, clone_dir, options)

            formula_path = clone_dir / FORMULA_FILE_NAME
            if not formula_path.exists():
                logger.warning(PUBLISHING_HINT)
                raise NotAFormulaError(
                    f"{package_name} is not a valid formula!",
                    context={"package": package_name, "url": git_url},
                )

            return Formula.from_file(formula_path, repository=git_url)


def fetch(store: Store, package_name: str, temp: bool = False, verbose: bool = False) -> Formula:
    """Resolve a formula with the default git client."""
    return FormulaResolver(store=store, verbose=verbose).fetch(package_name, temp=temp)
