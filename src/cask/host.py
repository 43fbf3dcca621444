"""Host OS and CPU architecture detection.

Resolved at runtime so a formula can be evaluated for any host (dry runs, tests).
"""

import platform
from dataclasses import dataclass

OS_KEYS = ("windows", "darwin", "linux")
ARCH_KEYS = ("x86", "x86_64", "arm", "armv7", "aarch64", "mips", "mips64", "mips64el", "riscv64")

_SYSTEM_TO_OS = {
    "darwin": "darwin",
    "macos": "darwin",
    "windows": "windows",
    "linux": "linux",
}

_MACHINE_TO_ARCH = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "armv7l": "armv7",
    "armv7": "armv7",
    "armv6l": "arm",
    "arm": "arm",
    "mips": "mips",
    "mips64": "mips64",
    "mips64el": "mips64el",
    "riscv64": "riscv64",
}


@dataclass(frozen=True)
class HostPlatform:
    """OS and architecture keys as used by formula platform blocks.

    `os` is one of OS_KEYS, `arch` one of ARCH_KEYS; either may be an
    unrecognised value, in which case no formula target matches.
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self.is_windows else ""

    def binary_name(self, bin_name: str) -> str:
        """File name of a package binary on this host."""
        return f"{bin_name}{self.exe_suffix}"


def detect_host() -> HostPlatform:
    """Detect the running host."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return HostPlatform(
        os=_SYSTEM_TO_OS.get(system, system),
        arch=_MACHINE_TO_ARCH.get(machine, machine),
    )
