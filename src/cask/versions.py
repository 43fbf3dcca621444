"""Version selection for a formula."""

import logging

from .exceptions import NoVersionsAvailableError
from .exceptions import UnknownVersionError
from .protocols import GitClientProtocol
from .schema import Formula

logger = logging.getLogger(__name__)


def available_versions(formula: Formula, git: GitClientProtocol | None = None) -> list[str]:
    """
    Versions of a package, newest first.

    package.versions when declared, otherwise the version tags of
    package.repository.

    Raises:
        GitError: If the remote tags cannot be listed
    """
    if formula.package.versions:
        return list(formula.package.versions)

    if git is None:
        from .git import GitClient

        git = GitClient()

    logger.debug(f"No versions declared by {formula.package.name}, listing tags of {formula.package.repository}")
    return git.tags(formula.package.repository)


def latest_version(formula: Formula, git: GitClientProtocol | None = None) -> str | None:
    versions = available_versions(formula, git=git)
    return versions[0] if versions else None


def select_version(formula: Formula, version: str | None = None, git: GitClientProtocol | None = None) -> str:
    """
    Resolve the version to install.

    Order: explicit version, then package.version, then the first declared
    version, then the newest remote tag. Explicit and default versions must be
    among the available versions.

    Raises:
        UnknownVersionError: If the requested or default version is not available
        NoVersionsAvailableError: If the package has no versions at all
    """
    name = formula.package.name
    requested = version or formula.package.version

    if requested:
        versions = available_versions(formula, git=git)
        if requested not in versions:
            raise UnknownVersionError(
                f"can not found version '{requested}' of formula '{name}'",
                context={"package": name, "version": requested},
            )
        return requested

    versions = available_versions(formula, git=git)
    if not versions:
        raise NoVersionsAvailableError(
            f"can not found any version of formula '{name}'",
            context={"package": name},
        )
    return versions[0]
