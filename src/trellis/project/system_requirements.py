"""
System requirement resolution.

Requirements come from the default target of the default feature only;
platform overrides do not participate.
"""

from __future__ import annotations

from typing import Callable, List

from trellis.models.feature import Feature
from trellis.models.system_requirements import SystemRequirements, VirtualPackage
from trellis.platform import Platform
from trellis.virtual_packages import non_relevant_virtual_packages_for_platform

RelevancePredicate = Callable[[VirtualPackage, Platform], bool]


def system_requirements(feature: Feature) -> SystemRequirements:
    return feature.system_requirements


def virtual_packages_for_platform(
    feature: Feature,
    platform: Platform,
    is_non_relevant: RelevancePredicate = non_relevant_virtual_packages_for_platform,
) -> List[VirtualPackage]:
    """Declared virtual packages that mean something on ``platform``, in declared order."""
    return [
        requirement
        for requirement in feature.system_requirements.virtual_packages()
        if not is_non_relevant(requirement, platform)
    ]
