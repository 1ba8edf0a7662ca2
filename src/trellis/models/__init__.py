"""
trellis models package.

Re-exports the manifest data model: dependency names and specs, tasks,
targets, features, system requirements and the manifest itself.
"""

from __future__ import annotations

from trellis.models.dependency import (
    DependencyKind,
    DependencyName,
    DependencyType,
    NamelessMatchSpec,
    PackageName,
    PyPiPackageName,
    PyPiRequirement,
    SpecType,
    format_dependency,
)
from trellis.models.feature import Feature
from trellis.models.manifest import (
    Manifest,
    ProjectManifest,
    ProjectMetadata,
    load_manifest,
)
from trellis.models.system_requirements import (
    Archspec,
    Cuda,
    LibC,
    LibCSystemRequirement,
    Linux,
    Osx,
    SystemRequirements,
    Unix,
    VirtualPackage,
    Win,
)
from trellis.models.target import Activation, ResolvedTargets, Target, Targets
from trellis.models.task import Task

__all__ = [
    # Dependencies
    "DependencyKind",
    "DependencyName",
    "DependencyType",
    "NamelessMatchSpec",
    "PackageName",
    "PyPiPackageName",
    "PyPiRequirement",
    "SpecType",
    "format_dependency",
    # Layers
    "Activation",
    "Feature",
    "ResolvedTargets",
    "Target",
    "Targets",
    "Task",
    # System requirements
    "Archspec",
    "Cuda",
    "LibC",
    "LibCSystemRequirement",
    "Linux",
    "Osx",
    "SystemRequirements",
    "Unix",
    "VirtualPackage",
    "Win",
    # Manifest
    "Manifest",
    "ProjectManifest",
    "ProjectMetadata",
    "load_manifest",
]
