"""
Targets: single configuration layers, and how they are selected.

A ``Target`` holds one layer of configuration (dependencies per kind, PyPI
dependencies, tasks, activation, system requirements). ``Targets`` holds the
unconditioned default layer plus at most one override layer per platform:

    dependencies:            # default target
      python: "3.12.*"
    target:
      linux-64:              # override target for linux-64
        dependencies:
          python: "3.12.1"

``Targets.resolve(platform)`` is the single source of truth for specificity.
It yields the applicable layers MOST SPECIFIC FIRST:

    resolve(None)            -> [default]
    resolve(p), override     -> [override(p), default]
    resolve(p), no override  -> [default]

Consumers that merge (dependencies) walk it in reverse so the most specific
layer is applied last; consumers that pick one (tasks per name, activation)
walk it forward and take the first layer that has the data.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from trellis.consts import PYPI_DEPENDENCIES
from trellis.models.dependency import (
    NamelessMatchSpec,
    PackageName,
    PyPiPackageName,
    PyPiRequirement,
    SpecType,
)
from trellis.models.system_requirements import SystemRequirements
from trellis.models.task import Task
from trellis.platform import Platform

ACTIVATION = "activation"
TASKS = "tasks"
SYSTEM_REQUIREMENTS = "system-requirements"

# Sections a single target (default or platform override) may contain
TARGET_SECTIONS = frozenset(
    SpecType.sections() + [PYPI_DEPENDENCIES, ACTIVATION, TASKS, SYSTEM_REQUIREMENTS]
)


def as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    """
    Return a manifest section as a mapping; an empty section reads as {}.

    Raises:
        ValueError: The section holds a list or a scalar
    """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


class Activation(BaseModel):
    """Scripts sourced when activating the environment, in execution order."""

    scripts: Optional[List[Path]] = Field(
        None, description="Script paths relative to the project root"
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


class Target(BaseModel):
    """One configuration layer."""

    dependencies: Dict[SpecType, Dict[PackageName, NamelessMatchSpec]] = Field(
        default_factory=dict, description="Native dependencies per kind"
    )
    pypi_dependencies: Optional[Dict[PyPiPackageName, PyPiRequirement]] = Field(
        None, description="PyPI dependencies"
    )
    activation: Optional[Activation] = Field(None, description="Activation block")
    tasks: Dict[str, Task] = Field(default_factory=dict, description="Tasks by name")
    system_requirements: Optional[SystemRequirements] = Field(
        None, description="System requirements (normally only on the default target)"
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_manifest(cls, data: Optional[Mapping[str, Any]]) -> "Target":
        """
        Build a target from its manifest sections.

        Raises:
            ValueError: Unknown section (including a nested ``target``) or
                invalid content; pydantic's ValidationError is a ValueError.
        """
        data = dict(as_mapping(data, "a target"))
        unknown = sorted(set(data) - TARGET_SECTIONS)
        if unknown:
            if "target" in unknown:
                raise ValueError("platform targets cannot be nested inside a target")
            raise ValueError(f"unknown section(s): {', '.join(unknown)}")

        dependencies = {
            kind: data.get(kind.section) or {}
            for kind in SpecType
            if kind.section in data
        }
        return cls.model_validate(
            {
                "dependencies": dependencies,
                "pypi_dependencies": data.get(PYPI_DEPENDENCIES),
                "activation": data.get(ACTIVATION),
                "tasks": data.get(TASKS) or {},
                "system_requirements": data.get(SYSTEM_REQUIREMENTS),
            }
        )

    def dependencies_for(self, kind: SpecType) -> Dict[PackageName, NamelessMatchSpec]:
        """Dependencies of ``kind`` declared in this layer (empty if none)."""
        return self.dependencies.get(kind) or {}

    def has_pypi_dependencies(self) -> bool:
        return bool(self.pypi_dependencies)


@dataclass(frozen=True)
class ResolvedTargets:
    """
    The layers that apply to one request: the default target plus at most
    one platform-specific override. Iterates most specific first.
    """

    default: Target
    platform_specific: Optional[Target] = None

    def most_specific_first(self) -> Tuple[Target, ...]:
        if self.platform_specific is None:
            return (self.default,)
        return (self.platform_specific, self.default)

    def least_specific_first(self) -> Tuple[Target, ...]:
        return tuple(reversed(self.most_specific_first()))

    def __iter__(self) -> Iterator[Target]:
        return iter(self.most_specific_first())

    def __len__(self) -> int:
        return 1 if self.platform_specific is None else 2


class Targets(BaseModel):
    """The default target and the platform override targets of a feature."""

    default_target: Target = Field(default_factory=Target)
    targets: Dict[Platform, Target] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_manifest(cls, default: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]) -> "Targets":
        targets: Dict[Platform, Target] = {}
        for key, section in as_mapping(overrides, "'target'").items():
            platform = Platform.parse(str(key))
            if platform in targets:
                raise ValueError(f"duplicate target for platform '{platform}'")
            try:
                targets[platform] = Target.from_manifest(section)
            except ValueError as e:
                raise ValueError(f"target.{platform}: {e}") from e
        return cls(default_target=Target.from_manifest(default), targets=targets)

    def for_platform(self, platform: Platform) -> Optional[Target]:
        return self.targets.get(platform)

    def resolve(self, platform: Optional[Platform]) -> ResolvedTargets:
        """Layers applicable to ``platform``, most specific first."""
        if platform is None:
            return ResolvedTargets(default=self.default_target)
        return ResolvedTargets(
            default=self.default_target,
            platform_specific=self.targets.get(platform),
        )

    def all(self) -> Iterator[Target]:
        """Every target, default first, then overrides in declaration order."""
        yield self.default_target
        yield from self.targets.values()
