"""On-disk store layout.

    <root>/                          default: ~/.cask
      bin/<binary>                   publication links (put this on PATH)
      build-in/<a>/<b>/Cask.toml     bundled formulas
      formula/<hash>/
        Cask.toml                    generated header + original formula text
        bin/<binary>                 extracted executable
        version/<version><ext>       downloaded resource
        repository/                  persistent clone of the formula repository

`<hash>` is the lowercase hex SHA-256 of the package name.
"""

import logging
import os
import shutil
from pathlib import Path

from .exceptions import CaskError
from .exceptions import CaskIOError
from .exceptions import NoHomeError
from .exceptions import SymlinkError
from .schema import Formula
from .utils import iso8601_now
from .utils import sha256_hex
from .utils import toml_string

logger = logging.getLogger(__name__)

FORMULA_FILE_NAME = "Cask.toml"
GENERATED_HEADER = "# The file is generated by Cask. DO NOT MODIFY IT."


def package_hash(package_name: str) -> str:
    """Per-package directory name: hex SHA-256 of the package name."""
    return sha256_hex(package_name)


def render_stored_formula(
    formula: Formula,
    version: str,
    created_at: str | None = None,
) -> str:
    """Stored Cask.toml text: generated [cask] header, blank line, original formula text."""
    header = "\n".join(
        [
            GENERATED_HEADER,
            "[cask]",
            f"package_name = {toml_string(formula.package.name)}",
            f"created_at = {toml_string(created_at or iso8601_now())}",
            f"version = {toml_string(version)}",
            f"repository = {toml_string(formula.repository)}",
        ]
    )
    return f"{header}\n\n{formula.file_content}"


def strip_generated_header(text: str) -> str:
    """Original formula text of a stored Cask.toml (text unchanged if it has no header)."""
    if not text.startswith(GENERATED_HEADER + "\n"):
        return text
    _, sep, body = text.partition("\n\n")
    return body if sep else ""


class Store:
    """
    Cask store rooted at an injected directory.

    Example:
        >>> store = Store(Path("/opt/cask"))
        >>> store.link_path("gpm")
        PosixPath('/opt/cask/bin/gpm')
    """

    def __init__(self, root: Path):
        # Absolute, so publication links resolve from bin/
        self.root = Path(root).absolute()

    @classmethod
    def default(cls) -> "Store":
        """Store at $HOME/.cask.

        Raises:
            NoHomeError: If the home directory cannot be resolved
        """
        try:
            home = Path.home()
        except (RuntimeError, KeyError) as e:
            raise NoHomeError("can not get $HOME dir") from e
        return cls(home / ".cask")

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def formula_dir(self) -> Path:
        return self.root / "formula"

    @property
    def builtin_formula_dir(self) -> Path:
        return self.root / "build-in"

    def package_dir(self, package_name: str) -> Path:
        return self.formula_dir / package_hash(package_name)

    def manifest_path(self, package_name: str) -> Path:
        return self.package_dir(package_name) / FORMULA_FILE_NAME

    def package_bin_dir(self, package_name: str) -> Path:
        return self.package_dir(package_name) / "bin"

    def version_dir(self, package_name: str) -> Path:
        return self.package_dir(package_name) / "version"

    def repository_dir(self, package_name: str) -> Path:
        return self.package_dir(package_name) / "repository"

    def artifact_path(self, package_name: str, version: str, ext: str) -> Path:
        return self.version_dir(package_name) / f"{version}{ext}"

    def binary_path(self, package_name: str, binary_name: str) -> Path:
        return self.package_bin_dir(package_name) / binary_name

    def link_path(self, binary_name: str) -> Path:
        return self.bin_dir / binary_name

    def ensure_package_layout(self, package_name: str) -> Path:
        """Create the store and the package's bin/ and version/ directories if absent."""
        package_dir = self.package_dir(package_name)
        try:
            for directory in (
                self.bin_dir,
                self.formula_dir,
                package_dir,
                self.package_bin_dir(package_name),
                self.version_dir(package_name),
            ):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CaskIOError(
                f"Failed to create store directories for '{package_name}': {e}",
                context={"package": package_name, "path": str(package_dir)},
            ) from e
        return package_dir

    def write_formula(self, formula: Formula, version: str) -> Path:
        """Write the stored Cask.toml for an install, replacing any previous one."""
        path = self.manifest_path(formula.package.name)
        try:
            path.write_text(render_stored_formula(formula, version), encoding="utf-8")
        except OSError as e:
            raise CaskIOError(
                f"Failed to write formula of '{formula.package.name}' to {path}: {e}",
                context={"package": formula.package.name, "path": str(path)},
            ) from e
        logger.debug(f"Wrote {path}")
        return path

    def read_installed(self, package_name: str) -> Formula | None:
        """Installed formula of a package, None if it is not installed."""
        path = self.manifest_path(package_name)
        if not path.exists():
            return None
        return Formula.from_file(path)

    def list_installed(self) -> list[Formula]:
        """All installed formulas, sorted by package name."""
        if not self.formula_dir.exists():
            return []

        formulas = []
        for package_dir in self.formula_dir.iterdir():
            path = package_dir / FORMULA_FILE_NAME
            if not package_dir.is_dir() or not path.exists():
                continue
            try:
                formulas.append(Formula.from_file(path))
            except CaskError as e:
                logger.debug(f"Could not read installed formula {path}: {e}")

        return sorted(formulas, key=lambda f: f.package.name)

    def publish(self, binary: Path, binary_name: str) -> Path:
        """
        Link bin/<binary_name> to an extracted binary, replacing whatever has that name.

        Raises:
            SymlinkError: If the link cannot be created
        """
        link = self.link_path(binary_name)
        try:
            if link.is_symlink() or link.exists():
                if link.is_dir() and not link.is_symlink():
                    shutil.rmtree(link)
                else:
                    link.unlink()
            link.symlink_to(Path(binary).absolute())
        except OSError as e:
            raise SymlinkError(
                f"Failed to link {link} to {binary}: {e}",
                context={"link": str(link), "target": str(binary)},
            ) from e
        logger.debug(f"Linked {link} -> {binary}")
        return link

    def links_into(self, package_name: str) -> list[Path]:
        """Publication links that dereference into a package's directory."""
        if not self.bin_dir.exists():
            return []

        package_dir = self.package_dir(package_name).resolve()
        links = []
        for entry in self.bin_dir.iterdir():
            if not entry.is_symlink():
                continue
            target = Path(os.readlink(entry))
            if not target.is_absolute():
                target = entry.parent / target
            if target.resolve().is_relative_to(package_dir):
                links.append(entry)
        return links
