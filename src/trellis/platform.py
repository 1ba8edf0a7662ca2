"""
Target platforms.

A ``Platform`` is one of the conda subdirs a project can declare under
``project.platforms`` and use as a key under ``target``.
"""

from __future__ import annotations

import platform as _platform
import sys
from enum import Enum
from typing import Dict, Tuple


class Platform(str, Enum):
    """Operating-system/architecture pair, named like a conda subdir."""

    NOARCH = "noarch"
    LINUX_32 = "linux-32"
    LINUX_64 = "linux-64"
    LINUX_AARCH64 = "linux-aarch64"
    LINUX_ARMV6L = "linux-armv6l"
    LINUX_ARMV7L = "linux-armv7l"
    LINUX_PPC64LE = "linux-ppc64le"
    LINUX_PPC64 = "linux-ppc64"
    LINUX_S390X = "linux-s390x"
    LINUX_RISCV32 = "linux-riscv32"
    LINUX_RISCV64 = "linux-riscv64"
    OSX_64 = "osx-64"
    OSX_ARM64 = "osx-arm64"
    WIN_32 = "win-32"
    WIN_64 = "win-64"
    WIN_ARM64 = "win-arm64"
    EMSCRIPTEN_WASM32 = "emscripten-wasm32"
    WASI_WASM32 = "wasi-wasm32"

    def __str__(self) -> str:
        return self.value

    @property
    def os(self) -> str:
        """The operating-system half of the subdir (``linux``, ``osx``, ...)."""
        return self.value.split("-", 1)[0]

    @property
    def arch(self) -> str:
        if self is Platform.NOARCH:
            return ""
        return self.value.split("-", 1)[1]

    @property
    def is_linux(self) -> bool:
        return self.os == "linux"

    @property
    def is_osx(self) -> bool:
        return self.os == "osx"

    @property
    def is_windows(self) -> bool:
        return self.os == "win"

    @property
    def is_unix(self) -> bool:
        return self.is_linux or self.is_osx

    @classmethod
    def parse(cls, value: "str | Platform") -> "Platform":
        """Parse a subdir string, raising ``ValueError`` listing known platforms."""
        if isinstance(value, Platform):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(p.value for p in cls)
            raise ValueError(f"'{value}' is not a known platform (expected one of: {known})") from None

    @classmethod
    def current(cls) -> "Platform":
        """
        Detect the host platform.

        ``TRELLIS_PLATFORM`` (via config) overrides detection, which is how
        tests and cross-platform tooling pin the "host".
        """
        from trellis.config import get_config

        override = get_config().platform
        if override is not None:
            return override
        return detect_platform(sys.platform, _platform.machine())


_MACHINE_ALIASES: Dict[str, str] = {
    "x86_64": "64",
    "amd64": "64",
    "i386": "32",
    "i686": "32",
    "x86": "32",
    "aarch64": "aarch64",
    "arm64": "arm64",
    "armv6l": "armv6l",
    "armv7l": "armv7l",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv32": "riscv32",
    "riscv64": "riscv64",
}

_OS_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("linux", "linux"),
    ("darwin", "osx"),
    ("win32", "win"),
    ("cygwin", "win"),
)


def detect_platform(sys_platform: str, machine: str) -> Platform:
    """Map ``sys.platform`` and ``platform.machine()`` values onto a ``Platform``."""
    if sys_platform.startswith("emscripten"):
        return Platform.EMSCRIPTEN_WASM32
    if sys_platform.startswith("wasi"):
        return Platform.WASI_WASM32

    os_name = next((os for prefix, os in _OS_PREFIXES if sys_platform.startswith(prefix)), None)
    arch = _MACHINE_ALIASES.get(machine.lower())
    if os_name is None or arch is None:
        raise ValueError(f"unsupported host platform: {sys_platform}/{machine}")

    # conda spells 64-bit ARM differently per OS
    if os_name == "linux" and arch == "arm64":
        arch = "aarch64"
    elif os_name in ("osx", "win") and arch == "aarch64":
        arch = "arm64"

    return Platform.parse(f"{os_name}-{arch}")
