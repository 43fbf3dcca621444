"""Package installation pipeline.

Apps inject policy (store root, host, git client, HTTP session, progress UI);
this module only orders the steps:

1. Resolve the formula (persistent clone)
2. Select the host's resource target and the version, render url and path
3. Create formula/<hash>/{bin,version} and write the stored Cask.toml
4. Download the resource to formula/<hash>/version/<version><ext>
5. Extract the binary to formula/<hash>/bin/<binary>
6. Publish bin/<binary> -> formula/<hash>/bin/<binary>

A failing step leaves what earlier steps wrote; the publication link is only
touched in the last step.
"""

import logging
import shutil

import requests

from .downloader import download
from .exceptions import CaskError
from .exceptions import CaskIOError
from .exceptions import FormulaNotFoundError
from .extractor import extract_binary
from .host import HostPlatform
from .host import detect_host
from .protocols import ProgressReporterProtocol
from .resolver import FormulaResolver
from .schema import Formula
from .store import Store
from .target import resolve_download_target
from .versions import select_version

logger = logging.getLogger(__name__)


async def install_package(
    package_name: str,
    version: str | None = None,
    *,
    store: Store | None = None,
    resolver: FormulaResolver | None = None,
    host: HostPlatform | None = None,
    session: requests.Session | None = None,
    progress: ProgressReporterProtocol | None = None,
) -> Formula:
    """
    Install a package and publish its binary.

    Re-installing the same version overwrites the stored formula, the
    downloaded resource, the binary and the link; other files in the package
    directory are left alone.

    Args:
        package_name: Package identifier or formula repository url
        version: Version to install (defaults to package.version, then the latest)
        store: Store to install into (defaults to ~/.cask)
        resolver: Formula resolver (defaults to one over store)
        host: Target host (detected by default)
        session: HTTP session for the download
        progress: Download progress reporter

    Returns:
        The installed formula, read back from the store (cask_record set)

    Raises:
        CaskError: Subclass naming the failing step; anything unexpected is wrapped in CaskIOError

    Example:
        >>> formula = await install_package("github.com/axetroy/gpm.rs", "0.1.12")
        >>> formula.cask_record.version
        '0.1.12'
    """
    try:
        store = store or Store.default()
        resolver = resolver or FormulaResolver(store=store)
        host = host or detect_host()

        formula = resolver.fetch(package_name, temp=False)
        name = formula.package.name

        download_version = select_version(formula, version, git=resolver.git)
        target = resolve_download_target(formula, download_version, host)
        logger.info(f"Installing {name}@{download_version} for {host.os}/{host.arch}")

        store.ensure_package_layout(name)
        store.write_formula(formula, download_version)

        artifact = store.artifact_path(name, download_version, target.ext)
        await download(target.url, artifact, checksum=target.checksum, session=session, progress=progress)

        binary_name = host.binary_name(formula.package.bin)
        binary = extract_binary(
            artifact,
            target.ext,
            binary_name,
            store.binary_path(name, binary_name),
            interior_path=target.path,
        )

        link = store.publish(binary, binary_name)
        logger.info(f"Installed {name}@{download_version}: {link}")

        installed = store.read_installed(name)
        if installed is None:
            raise CaskIOError(f"Stored formula of '{name}' disappeared", context={"package": name})
        return installed

    except CaskError:
        raise
    except Exception as e:
        raise CaskIOError(f"Failed to install package '{package_name}': {e}", context={"package": package_name}) from e


async def uninstall_package(package_name: str, *, store: Store | None = None) -> None:
    """
    Remove an installed package and every publication link pointing into it.

    Raises:
        FormulaNotFoundError: If the package is not installed
        CaskIOError: If removal fails
    """
    store = store or Store.default()
    package_dir = store.package_dir(package_name)

    if not package_dir.exists():
        raise FormulaNotFoundError(
            f"Package '{package_name}' is not installed",
            context={"package": package_name, "path": str(package_dir)},
        )

    try:
        logger.info(f"Uninstalling {package_name}")
        for link in store.links_into(package_name):
            link.unlink()
            logger.debug(f"Removed link {link}")
        shutil.rmtree(package_dir)
    except OSError as e:
        raise CaskIOError(f"Failed to uninstall package '{package_name}': {e}", context={"package": package_name}) from e

    logger.info(f"Successfully uninstalled: {package_name}")
