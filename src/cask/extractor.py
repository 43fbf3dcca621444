"""Extract a package binary from a downloaded resource.

Supported resources: gzip-compressed tar (.tar.gz, .tgz), plain tar (.tar),
zip (.zip), and bare executables (empty or .exe extension, copied as-is).
"""

import logging
import os
import posixpath
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path

from .exceptions import BinaryNotFoundError
from .exceptions import CaskIOError

logger = logging.getLogger(__name__)

EXECUTABLE_PERMISSIONS = 0o755
IS_POSIX = os.name == "posix"


def _normalize_dir(path: str) -> str:
    """Archive directory without leading './' or '/' and trailing '/'; "" for the root."""
    normalized = posixpath.normpath(path.replace("\\", "/")) if path else ""
    if normalized in (".", "/"):
        return ""
    return normalized.lstrip("/").removeprefix("./")


def _entry_matches(entry_name: str, bin_name: str, interior_path: str) -> bool:
    entry_dir, entry_base = posixpath.split(entry_name.replace("\\", "/").rstrip("/"))
    if entry_base != bin_name:
        return False
    wanted_dir = _normalize_dir(interior_path)
    if not wanted_dir:
        return True
    return _normalize_dir(entry_dir) == wanted_dir


def _make_executable(path: Path) -> None:
    if IS_POSIX:
        mode = stat.S_IMODE(path.stat().st_mode)
        path.chmod(mode | EXECUTABLE_PERMISSIONS)


def _extract_from_tar(artifact: Path, mode: str, bin_name: str, destination: Path, interior_path: str) -> bool:
    with tarfile.open(artifact, mode) as archive:
        for member in archive:
            if not member.isfile() or not _entry_matches(member.name, bin_name, interior_path):
                continue
            source = archive.extractfile(member)
            if source is None:
                continue
            logger.debug(f"Extracting {member.name} from {artifact.name}")
            with source, open(destination, "wb") as target:
                shutil.copyfileobj(source, target)
            return True
    return False


def _extract_from_zip(artifact: Path, bin_name: str, destination: Path, interior_path: str) -> bool:
    with zipfile.ZipFile(artifact) as archive:
        for info in archive.infolist():
            if info.is_dir() or not _entry_matches(info.filename, bin_name, interior_path):
                continue
            logger.debug(f"Extracting {info.filename} from {artifact.name}")
            with archive.open(info) as source, open(destination, "wb") as target:
                shutil.copyfileobj(source, target)

            unix_mode = stat.S_IMODE(info.external_attr >> 16)
            if IS_POSIX and unix_mode:
                destination.chmod(unix_mode)
            return True
    return False


def extract_binary(
    artifact: Path,
    ext: str,
    bin_name: str,
    destination: Path,
    interior_path: str = "/",
) -> Path:
    """
    Extract the package binary from a downloaded resource to destination.

    The first archive entry whose base name is bin_name, and whose directory
    equals interior_path (unless that is empty or "/"), wins.

    Args:
        artifact: Downloaded resource
        ext: Resource extension (".tar.gz", ".tgz", ".tar", ".zip", "" or ".exe")
        bin_name: Binary file name to look for (".exe" included on Windows)
        destination: Where to write the binary
        interior_path: Directory of the binary inside the archive

    Returns:
        destination

    Raises:
        BinaryNotFoundError: If no entry matches
        CaskIOError: If the archive cannot be read or the binary cannot be written
    """
    try:
        if ext in ("", ".exe"):
            shutil.copyfile(artifact, destination)
            found = True
        elif ext in (".tar.gz", ".tgz"):
            found = _extract_from_tar(artifact, "r:gz", bin_name, destination, interior_path)
        elif ext == ".tar":
            found = _extract_from_tar(artifact, "r:", bin_name, destination, interior_path)
        elif ext == ".zip":
            found = _extract_from_zip(artifact, bin_name, destination, interior_path)
        else:
            raise CaskIOError(f"Unsupported resource extension '{ext}'", context={"path": str(artifact)})
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise CaskIOError(
            f"Failed to extract '{bin_name}' from {artifact}: {e}",
            context={"path": str(artifact), "binary": bin_name},
        ) from e

    if not found:
        raise BinaryNotFoundError(
            f"can not found binary file '{bin_name}' in {artifact.name}",
            context={"path": str(artifact), "binary": bin_name, "interior_path": interior_path},
        )

    _make_executable(destination)
    return destination
