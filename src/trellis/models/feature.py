"""
Features: named bundles of targets.

The top level of the manifest is the implicit ``default`` feature. Further
features are declared under ``feature.<name>`` with the same sections:

    feature:
      test:
        dependencies:
          pytest: "*"
        target:
          win-64:
            dependencies:
              pywin32: "*"
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trellis.consts import DEFAULT_FEATURE
from trellis.models.system_requirements import SystemRequirements
from trellis.models.target import TARGET_SECTIONS, Targets, as_mapping
from trellis.platform import Platform

# Sections a feature adds on top of the sections of its default target
FEATURE_ONLY_SECTIONS = frozenset({"target", "platforms", "channels"})


class Feature(BaseModel):
    """A named default target plus per-platform override targets."""

    name: str = Field(..., description="Feature name ('default' for the top level)")
    platforms: Optional[List[Platform]] = Field(
        None, description="Platforms this feature is restricted to"
    )
    channels: Optional[List[str]] = Field(None, description="Extra channels for this feature")
    targets: Targets = Field(default_factory=Targets)

    model_config = ConfigDict(frozen=True)

    @field_validator("platforms", mode="before")
    @classmethod
    def parse_platforms(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [Platform.parse(p) if isinstance(p, str) else p for p in v]
        return v

    @classmethod
    def from_manifest(cls, name: str, data: Optional[Mapping[str, Any]]) -> "Feature":
        """Build a feature from its manifest sections."""
        data = dict(as_mapping(data, "a feature"))
        unknown = sorted(set(data) - TARGET_SECTIONS - FEATURE_ONLY_SECTIONS)
        if unknown:
            raise ValueError(f"unknown section(s): {', '.join(unknown)}")

        default_sections = {k: v for k, v in data.items() if k in TARGET_SECTIONS}
        return cls(
            name=name,
            platforms=data.get("platforms"),
            channels=data.get("channels"),
            targets=Targets.from_manifest(default_sections, data.get("target")),
        )

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_FEATURE

    @property
    def default_target(self):
        return self.targets.default_target

    @property
    def system_requirements(self) -> SystemRequirements:
        """Requirements declared on the default target (empty if none)."""
        return self.targets.default_target.system_requirements or SystemRequirements()

    def has_pypi_dependencies(self) -> bool:
        return any(target.has_pypi_dependencies() for target in self.targets.all())
