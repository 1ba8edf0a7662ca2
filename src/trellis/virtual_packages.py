"""
Platform relevance of virtual packages.

A requirement such as ``__glibc`` only means something on platforms that
have a libc; asking a solver for it while resolving ``osx-arm64`` or
``win-64`` would make the environment unsolvable. This module decides which
virtual packages to drop for a given target platform.
"""

from __future__ import annotations

from trellis.models.system_requirements import (
    LibC,
    Linux,
    Osx,
    Unix,
    VirtualPackage,
    Win,
)
from trellis.platform import Platform


def non_relevant_virtual_packages_for_platform(requirement: VirtualPackage, platform: Platform) -> bool:
    """Return True when ``requirement`` has no meaning on ``platform``."""
    if isinstance(requirement, Win):
        return not platform.is_windows
    if isinstance(requirement, Unix):
        return not platform.is_unix
    if isinstance(requirement, (Linux, LibC)):
        return not platform.is_linux
    if isinstance(requirement, Osx):
        return not platform.is_osx
    # __cuda and __archspec apply on every platform
    return False
