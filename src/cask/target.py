"""Resource target selection and download target rendering."""

import logging
import posixpath
from dataclasses import dataclass
from urllib.parse import urlparse

from .exceptions import UnsupportedPlatformError
from .host import HostPlatform
from .host import detect_host
from .schema import Formula
from .schema import ResourceTargetDetail
from .schema import ResourceTargetExecutable
from .template import build_context
from .template import render_template

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSIONS = (".tar.gz", ".tgz", ".tar", ".zip")
DEFAULT_EXTENSION = ".tar.gz"


@dataclass(frozen=True)
class DownloadTarget:
    """Fully rendered resource for the host (derived, never persisted)."""

    url: str
    path: str
    checksum: str | None
    ext: str
    executable: bool


def select_target(
    formula: Formula, host: HostPlatform | None = None
) -> ResourceTargetDetail | ResourceTargetExecutable | str:
    """
    Pick the resource target for the host: OS block first, then architecture.

    Raises:
        UnsupportedPlatformError: If the OS block or the architecture entry is absent
    """
    host = host or detect_host()
    name = formula.package.name

    platform = formula.platform_for(host.os)
    if platform is None:
        raise UnsupportedPlatformError(
            f"the package '{name}' not support your system ({host.os})",
            context={"package": name, "os": host.os},
        )

    target = getattr(platform, host.arch, None) if host.arch in type(platform).model_fields else None
    if target is None:
        raise UnsupportedPlatformError(
            f"the package '{name}' not support your arch ({host.os}/{host.arch})",
            context={"package": name, "os": host.os, "arch": host.arch},
        )

    return target


def infer_extension(url: str) -> str:
    """Archive extension from the last path segment of a url, defaulting to .tar.gz."""
    filename = posixpath.basename(urlparse(url).path)
    for ext in ARCHIVE_EXTENSIONS:
        if filename.endswith(ext):
            return ext
    return DEFAULT_EXTENSION


def resolve_download_target(formula: Formula, version: str, host: HostPlatform | None = None) -> DownloadTarget:
    """
    Render the host's resource target for a version.

    The url template is rendered first, then the interior path template
    ("/" when absent or blank).

    Raises:
        UnsupportedPlatformError: If no target matches the host
        TemplateError: If a template references an unknown placeholder
    """
    host = host or detect_host()
    target = select_target(formula, host)
    context = build_context(formula, version)

    if isinstance(target, ResourceTargetDetail):
        url_template, path_template, checksum = target.url, target.path, target.checksum
    elif isinstance(target, ResourceTargetExecutable):
        url_template, path_template, checksum = target.executable, None, target.checksum
    else:
        url_template, path_template, checksum = target, None, None

    url = render_template(url_template, context)

    if path_template is None or not path_template.strip():
        path_template = "/"
    path = render_template(path_template, context).strip()

    if isinstance(target, ResourceTargetDetail) and target.extension:
        ext = target.extension
    elif isinstance(target, ResourceTargetExecutable):
        ext = host.exe_suffix
    else:
        ext = infer_extension(url)

    logger.debug(f"Resolved {formula.package.name}@{version} for {host.os}/{host.arch}: {url} ({ext or 'executable'})")

    return DownloadTarget(
        url=url,
        path=path,
        checksum=checksum,
        ext=ext,
        executable=isinstance(target, ResourceTargetExecutable),
    )
