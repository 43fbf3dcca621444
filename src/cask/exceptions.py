"""Cask-specific exceptions.

Every failure of the install pipeline surfaces as a CaskError subclass with a
message naming the package and the offending input.
"""


class CaskError(Exception):
    """Base exception for cask operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (package, url, path, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class FormulaNotFoundError(CaskError):
    """Formula file or package repository does not exist."""


class FormulaParseError(CaskError):
    """Formula is not a well-formed TOML document."""


class FormulaSchemaError(CaskError):
    """Formula is missing required fields or has invalid values."""


class UnsupportedSchemeError(CaskError):
    """Package address uses a protocol other than http/https."""


class NoHomeError(CaskError):
    """Home directory of the current user cannot be resolved."""


class NotAFormulaError(CaskError):
    """Cloned repository has no Cask.toml at its root."""


class UnsupportedPlatformError(CaskError):
    """Package has no resource for the host OS and architecture."""


class UnknownVersionError(CaskError):
    """Requested version is not provided by the formula."""


class NoVersionsAvailableError(CaskError):
    """Formula declares no versions and the repository has no tags."""


class TemplateError(CaskError):
    """Template is malformed or references an unknown placeholder."""


class DownloadError(CaskError):
    """Download of a resource failed."""


class NoContentLengthError(DownloadError):
    """Server response carries no Content-Length."""


class ChecksumMismatchError(CaskError):
    """Downloaded resource does not match the expected SHA-256 digest."""


class BinaryNotFoundError(CaskError):
    """Archive has no entry for the package binary."""


class SymlinkError(CaskError):
    """Publication link could not be created."""


class GitError(CaskError):
    """A git command failed."""


class CaskIOError(CaskError):
    """Filesystem or other unexpected failure."""
