"""cask - Install precompiled binary tools from declarative formulas.

Public API: formula model and loader, resolver, target/version selection,
download and extraction steps, and the install pipeline over a store.
"""

from .downloader import download
from .downloader import verify_checksum
from .exceptions import BinaryNotFoundError
from .exceptions import CaskError
from .exceptions import CaskIOError
from .exceptions import ChecksumMismatchError
from .exceptions import DownloadError
from .exceptions import FormulaNotFoundError
from .exceptions import FormulaParseError
from .exceptions import FormulaSchemaError
from .exceptions import GitError
from .exceptions import NoContentLengthError
from .exceptions import NoHomeError
from .exceptions import NotAFormulaError
from .exceptions import NoVersionsAvailableError
from .exceptions import SymlinkError
from .exceptions import TemplateError
from .exceptions import UnknownVersionError
from .exceptions import UnsupportedPlatformError
from .exceptions import UnsupportedSchemeError
from .extractor import extract_binary
from .git import CloneOptions
from .git import GitClient
from .host import HostPlatform
from .host import detect_host
from .installer import install_package
from .installer import uninstall_package
from .protocols import GitClientProtocol
from .protocols import ProgressReporterProtocol
from .resolver import FormulaResolver
from .resolver import fetch
from .schema import CaskRecord
from .schema import Formula
from .schema import Package
from .schema import Platform
from .schema import ResourceTargetDetail
from .schema import ResourceTargetExecutable
from .schema import load_formula
from .store import Store
from .store import package_hash
from .store import strip_generated_header
from .target import DownloadTarget
from .target import resolve_download_target
from .target import select_target
from .template import render_template
from .versions import select_version

__all__ = [
    # Formula
    "Formula",
    "Package",
    "Platform",
    "ResourceTargetDetail",
    "ResourceTargetExecutable",
    "CaskRecord",
    "load_formula",
    # Resolution
    "FormulaResolver",
    "fetch",
    # Selection and rendering
    "HostPlatform",
    "detect_host",
    "select_target",
    "select_version",
    "render_template",
    "resolve_download_target",
    "DownloadTarget",
    # Download and extraction
    "download",
    "verify_checksum",
    "extract_binary",
    # Installation
    "install_package",
    "uninstall_package",
    "Store",
    "package_hash",
    "strip_generated_header",
    # Collaborators
    "GitClient",
    "CloneOptions",
    "GitClientProtocol",
    "ProgressReporterProtocol",
    # Exceptions
    "CaskError",
    "FormulaNotFoundError",
    "FormulaParseError",
    "FormulaSchemaError",
    "UnsupportedSchemeError",
    "NoHomeError",
    "NotAFormulaError",
    "UnsupportedPlatformError",
    "UnknownVersionError",
    "NoVersionsAvailableError",
    "TemplateError",
    "DownloadError",
    "NoContentLengthError",
    "ChecksumMismatchError",
    "BinaryNotFoundError",
    "SymlinkError",
    "GitError",
    "CaskIOError",
]

__version__ = "0.1.0"
