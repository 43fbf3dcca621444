"""Formula schema - Parse Cask.toml manifests.

A formula describes one package: where its release artifacts live for each
OS/architecture pair and which executable to publish. The original document
text is preserved verbatim so the installer can republish it.
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import BeforeValidator
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from .exceptions import CaskIOError
from .exceptions import FormulaNotFoundError
from .exceptions import FormulaParseError
from .exceptions import FormulaSchemaError
from .protocols import GitClientProtocol

logger = logging.getLogger(__name__)

ArchiveExtension = Literal[".tar.gz", ".tgz", ".tar", ".zip"]


class ResourceTargetDetail(BaseModel):
    """Archive resource: url template plus optional checksum, extension and interior path."""

    model_config = ConfigDict(frozen=True)

    url: str
    checksum: str | None = None
    extension: ArchiveExtension | None = None
    path: str | None = None


class ResourceTargetExecutable(BaseModel):
    """Bare executable resource, downloaded as-is without archive extraction."""

    model_config = ConfigDict(frozen=True)

    executable: str
    checksum: str | None = None


def _coerce_resource_target(value: Any) -> Any:
    # Untagged: `executable` key wins over `url`, a bare string is a simple url template
    if isinstance(value, dict):
        if "executable" in value:
            return ResourceTargetExecutable.model_validate(value)
        if "url" in value:
            return ResourceTargetDetail.model_validate(value)
        raise ValueError("resource target needs either an 'url' or an 'executable' field")
    return value


ResourceTarget = Annotated[
    ResourceTargetDetail | ResourceTargetExecutable | str,
    BeforeValidator(_coerce_resource_target),
]


class Platform(BaseModel):
    """Per-OS block mapping architecture keys to resource targets."""

    model_config = ConfigDict(frozen=True)

    x86: ResourceTarget | None = None
    x86_64: ResourceTarget | None = None
    arm: ResourceTarget | None = None
    armv7: ResourceTarget | None = None
    aarch64: ResourceTarget | None = None
    mips: ResourceTarget | None = None
    mips64: ResourceTarget | None = None
    mips64el: ResourceTarget | None = None
    riscv64: ResourceTarget | None = None


class Package(BaseModel):
    """The [package] section of a formula."""

    model_config = ConfigDict(frozen=True)

    name: str
    bin: str
    repository: str
    description: str
    version: str | None = None
    versions: list[str] | None = None
    authors: list[str] | None = None
    keywords: list[str] | None = None
    license: str | None = None


class CaskRecord(BaseModel):
    """Installation metadata, generated into the [cask] section of a stored formula."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="package_name")
    created_at: str
    version: str = ""
    repository: str = ""


class DependencyDetail(BaseModel):
    """Table form of a dependency: `name = { version = "..." }`."""

    model_config = ConfigDict(frozen=True)

    version: str


class Formula(BaseModel):
    """
    Parsed Cask.toml.

    `file_content`, `repository` and `filepath` come from the loader, not from
    the document. `cask_record` is only present in an installed formula.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_content: str = Field(default="", exclude=True)
    repository: str = Field(default="", exclude=True)
    filepath: Path = Field(default=Path(), exclude=True)

    cask_record: CaskRecord | None = Field(default=None, alias="cask")
    package: Package
    context: dict[str, str] | None = None
    windows: Platform | None = None
    darwin: Platform | None = None
    linux: Platform | None = None
    # Not acted upon by the installer
    dependencies: dict[str, str | DependencyDetail] | None = None
    # Passed verbatim to the hooks collaborator
    hook: dict[str, Any] | None = None

    @classmethod
    def from_file(cls, formula_path: Path, repository: str = "") -> "Formula":
        """
        Load a formula from a Cask.toml file.

        Args:
            formula_path: Path to the Cask.toml file
            repository: Source-control URL the formula was cloned from ("" for built-in)

        Returns:
            Formula instance

        Raises:
            FormulaNotFoundError: If the file doesn't exist
            FormulaParseError: If the file is not valid TOML
            FormulaSchemaError: If required fields are missing or invalid
        """
        formula_path = Path(formula_path)

        try:
            file_content = formula_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise FormulaNotFoundError(
                f"the formula does not exist: {formula_path}",
                context={"path": str(formula_path)},
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise CaskIOError(f"Failed to read formula {formula_path}: {e}", context={"path": str(formula_path)}) from e

        return cls.from_text(file_content, filepath=formula_path, repository=repository)

    @classmethod
    def from_text(cls, file_content: str, filepath: Path = Path(), repository: str = "") -> "Formula":
        """Parse formula text; see from_file for the raised errors."""
        try:
            data = tomllib.loads(file_content)
        except tomllib.TOMLDecodeError as e:
            raise FormulaParseError(
                f"Invalid formula {filepath}: {e}",
                context={"path": str(filepath)},
            ) from e

        # Loader-owned fields always win over document keys of the same name
        data.update(file_content=file_content, repository=repository, filepath=filepath)

        try:
            formula = cls.model_validate(data)
        except ValidationError as e:
            raise FormulaSchemaError(
                f"Invalid formula {filepath}: {e}",
                context={"path": str(filepath)},
            ) from e

        logger.debug(f"Loaded formula {formula.package.name} from {filepath}")
        return formula

    def platform_for(self, os_name: str) -> Platform | None:
        """Platform block for an OS key ("windows", "darwin" or "linux")."""
        return {"windows": self.windows, "darwin": self.darwin, "linux": self.linux}.get(os_name)

    def versions(self, git: GitClientProtocol | None = None) -> list[str]:
        """
        All versions of the package, newest first.

        Returns package.versions verbatim, or the remote tags of
        package.repository when the formula declares none.
        """
        from .versions import available_versions

        return available_versions(self, git=git)

    def latest(self, git: GitClientProtocol | None = None) -> str | None:
        """Latest version of the package, None if there is none."""
        from .versions import latest_version

        return latest_version(self, git=git)


def load_formula(formula_path: Path, repository: str = "") -> Formula:
    """Functional alias for Formula.from_file."""
    return Formula.from_file(formula_path, repository=repository)
