"""
Project manifest (trellis.yaml).

The manifest is the declarative description of a project:

    project:
      name: foo
      version: "0.1.0"
      channels: [conda-forge]
      platforms: [linux-64, osx-arm64, win-64]

    dependencies:
      python: "3.12.*"
    host-dependencies:
      libc: "2.12"
    build-dependencies:
      cmake: ">=3.28"
    pypi-dependencies:
      requests: ">=2.31"

    tasks:
      test: "pytest"

    activation:
      scripts: [env_setup.sh]

    system-requirements:
      libc: "2.17"

    target:
      win-64:
        activation:
          scripts: [env_setup.bat]

    feature:
      test:
        dependencies:
          pytest: "*"

``Manifest`` keeps three views of the same file:
- ``contents``: the text as last read or written (for error reporting)
- ``document``: the YAML mapping (what ``save()`` writes back)
- ``parsed``: the validated ``ProjectManifest`` everything else reads

Edits go through the document and are re-validated before they become
visible; a rejected edit leaves the manifest untouched.

Usage:
    from trellis.models.manifest import Manifest

    manifest = Manifest.from_path("path/to/trellis.yaml")
    manifest.add_dependency("numpy", ">=1.26", DependencyType.conda(SpecType.RUN))
    manifest.save()
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from trellis.consts import DEFAULT_FEATURE, PROJECT_MANIFEST
from trellis.errors import ManifestError, ManifestSaveError
from trellis.models.dependency import (
    UNQUOTED_FLOAT_VERSION,
    DependencyKind,
    DependencyType,
    NamelessMatchSpec,
    PackageName,
    PyPiPackageName,
    PyPiRequirement,
)
from trellis.models.feature import Feature
from trellis.models.target import TARGET_SECTIONS, TASKS, as_mapping
from trellis.models.task import Task
from trellis.platform import Platform

logger = logging.getLogger(__name__)

PROJECT = "project"
TARGET = "target"
FEATURE = "feature"

TOP_LEVEL_SECTIONS = TARGET_SECTIONS | {PROJECT, TARGET, FEATURE}


# =============================================================================
# PARSED MODEL
# =============================================================================


class ProjectMetadata(BaseModel):
    """The ``project`` section."""

    name: str = Field(..., min_length=1, description="Project name")
    version: Optional[str] = Field(None, description="Project version")
    description: Optional[str] = Field(None, description="Short description")
    authors: List[str] = Field(default_factory=list, description="Project authors")
    channels: List[str] = Field(..., description="Channels packages are resolved from, by priority")
    platforms: List[Platform] = Field(..., description="Platforms the project supports")
    license: Optional[str] = Field(None, description="SPDX license expression")
    license_file: Optional[Path] = Field(None, alias="license-file")
    readme: Optional[Path] = Field(None)
    homepage: Optional[str] = Field(None)
    repository: Optional[str] = Field(None)
    documentation: Optional[str] = Field(None)

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        if isinstance(v, float):
            raise ValueError(UNQUOTED_FLOAT_VERSION.format(v))
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("platforms", mode="before")
    @classmethod
    def parse_platforms(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        platforms = [Platform.parse(p) if isinstance(p, str) else p for p in v]
        duplicates = sorted({str(p) for p in platforms if platforms.count(p) > 1})
        if duplicates:
            raise ValueError(f"duplicate platform(s): {', '.join(duplicates)}")
        return platforms


class ProjectManifest(BaseModel):
    """Validated manifest: project metadata plus features (always with 'default')."""

    project: ProjectMetadata
    features: Dict[str, Feature] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "ProjectManifest":
        """
        Validate a YAML document.

        Raises:
            ValueError: Missing/unknown sections or invalid content
                (pydantic's ValidationError is a ValueError).
        """
        unknown = sorted(set(document) - TOP_LEVEL_SECTIONS)
        if unknown:
            raise ValueError(f"unknown top-level section(s): {', '.join(unknown)}")
        if PROJECT not in document:
            raise ValueError(f"missing '{PROJECT}' section")

        default_sections = {k: v for k, v in document.items() if k in TARGET_SECTIONS or k == TARGET}
        features: Dict[str, Feature] = {
            DEFAULT_FEATURE: Feature.from_manifest(DEFAULT_FEATURE, default_sections)
        }
        for name, section in as_mapping(document.get(FEATURE), f"'{FEATURE}'").items():
            name = str(name)
            if name == DEFAULT_FEATURE:
                raise ValueError(f"feature name '{DEFAULT_FEATURE}' is reserved for the top level")
            try:
                features[name] = Feature.from_manifest(name, section)
            except ValueError as e:
                raise ValueError(f"feature.{name}: {e}") from e

        return cls(project=ProjectMetadata.model_validate(document[PROJECT]), features=features)

    def default_feature(self) -> Feature:
        return self.features[DEFAULT_FEATURE]


# =============================================================================
# MANIFEST
# =============================================================================


class Manifest:
    """A manifest file: its text, its YAML document and its validated model."""

    def __init__(
        self,
        path: Path,
        contents: str,
        document: Dict[str, Any],
        parsed: ProjectManifest,
    ):
        self.path = path
        self.contents = contents
        self.document = document
        self.parsed = parsed

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_str(cls, root: Union[str, Path], contents: str) -> "Manifest":
        """
        Parse manifest text as if it lived in ``root``.

        Raises:
            ManifestError: Invalid YAML or a document that fails validation
        """
        path = Path(root) / PROJECT_MANIFEST
        try:
            document = yaml.safe_load(contents)
        except yaml.YAMLError as e:
            raise ManifestError(f"failed to parse {PROJECT_MANIFEST}: {e}", path) from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ManifestError(
                f"{PROJECT_MANIFEST} must be a mapping/object, got: {type(document).__name__}",
                path,
            )

        return cls(path=path, contents=contents, document=document, parsed=_validate(document, path))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Manifest":
        """
        Read and parse a manifest file.

        Raises:
            ManifestError: Unreadable file, invalid YAML or invalid content
        """
        path = Path(path)
        try:
            contents = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"failed to read {PROJECT_MANIFEST}: {e}", path) from e

        manifest = cls.from_str(path.parent, contents)
        manifest.path = path
        logger.debug("Loaded manifest %s (%d features)", path, len(manifest.parsed.features))
        return manifest

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self.path.parent

    def default_feature(self) -> Feature:
        return self.parsed.default_feature()

    def feature(self, name: str) -> Optional[Feature]:
        return self.parsed.features.get(name)

    def has_pypi_dependencies(self) -> bool:
        return any(feature.has_pypi_dependencies() for feature in self.parsed.features.values())

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def add_dependency(
        self,
        name: str,
        spec: Any,
        dependency_type: DependencyType,
        platform: Optional[Platform] = None,
    ) -> DependencyKind:
        """
        Add or replace a dependency in the default feature.

        An existing entry with the same normalized name keeps its position and
        spelling; only its spec changes.

        Returns:
            The validated spec that was written
        """
        if dependency_type.is_pypi:
            key = PyPiPackageName(name)
            validated: DependencyKind = PyPiRequirement.model_validate(spec)
        else:
            key = PackageName(name)
            validated = NamelessMatchSpec.model_validate(spec)

        def edit(document: Dict[str, Any]) -> None:
            section = _section(document, dependency_type.name, platform, create=True)
            existing = _find_key(section, key)
            section[existing if existing is not None else key.source] = validated.to_manifest()

        self._edit(edit)
        return validated

    def remove_dependency(
        self,
        name: str,
        dependency_type: DependencyType,
        platform: Optional[Platform] = None,
    ) -> None:
        """
        Remove a dependency from the default feature.

        Raises:
            ManifestError: The dependency is not declared in that section
        """
        key = PyPiPackageName(name) if dependency_type.is_pypi else PackageName(name)
        where = _describe(dependency_type.name, platform)

        def edit(document: Dict[str, Any]) -> None:
            section = _section(document, dependency_type.name, platform, create=False)
            existing = _find_key(section or {}, key)
            if section is None or existing is None:
                raise ManifestError(f"couldn't find {name} in {where}", self.path)
            del section[existing]
            _prune(document, dependency_type.name, platform)

        self._edit(edit)

    def add_task(
        self,
        name: str,
        task: Union[Task, str, List[str], Dict[str, Any]],
        platform: Optional[Platform] = None,
    ) -> Task:
        """Add or replace a task in the default feature."""
        validated = task if isinstance(task, Task) else Task.model_validate(task)

        def edit(document: Dict[str, Any]) -> None:
            section = _section(document, TASKS, platform, create=True)
            section[name] = validated.to_manifest()

        self._edit(edit)
        return validated

    def remove_task(self, name: str, platform: Optional[Platform] = None) -> None:
        """
        Remove a task from the default feature.

        Raises:
            ManifestError: The task is not declared in that section
        """
        where = _describe(TASKS, platform)

        def edit(document: Dict[str, Any]) -> None:
            section = _section(document, TASKS, platform, create=False)
            if not section or name not in section:
                raise ManifestError(f"task '{name}' does not exist in {where}", self.path)
            del section[name]
            _prune(document, TASKS, platform)

        self._edit(edit)

    def add_platforms(self, platforms: Iterable[Platform]) -> List[Platform]:
        """Append platforms not yet declared; returns the ones added."""
        added: List[Platform] = []

        def edit(document: Dict[str, Any]) -> None:
            declared = document[PROJECT].setdefault("platforms", [])
            for platform in platforms:
                platform = Platform.parse(platform)
                if platform.value not in declared:
                    declared.append(platform.value)
                    added.append(platform)

        self._edit(edit)
        return added

    def remove_platforms(self, platforms: Iterable[Platform]) -> None:
        """
        Remove declared platforms.

        Raises:
            ManifestError: A platform is not declared
        """

        def edit(document: Dict[str, Any]) -> None:
            declared = document[PROJECT].setdefault("platforms", [])
            for platform in platforms:
                platform = Platform.parse(platform)
                if platform.value not in declared:
                    raise ManifestError(f"platform {platform} is not declared", self.path)
                declared.remove(platform.value)

        self._edit(edit)

    def _edit(self, edit: Callable[[Dict[str, Any]], None]) -> None:
        # Work on a copy so a rejected edit leaves both views untouched
        document = copy.deepcopy(self.document)
        edit(document)
        parsed = _validate(document, self.path)
        self.document = document
        self.parsed = parsed

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.document, sort_keys=False, allow_unicode=True)

    def save(self) -> None:
        """
        Write the current document back to ``path``.

        Raises:
            ManifestSaveError: The file could not be written; ``contents`` is
                left as it was
        """
        contents = self.to_yaml()
        try:
            self.path.write_text(contents, encoding="utf-8")
        except OSError as e:
            raise ManifestSaveError(f"failed to write {PROJECT_MANIFEST}: {e}", self.path) from e
        self.contents = contents
        logger.debug("Saved manifest %s", self.path)


def load_manifest(path: Union[str, Path]) -> Manifest:
    """Load a manifest from a file (see ``Manifest.from_path``)."""
    return Manifest.from_path(path)


# =============================================================================
# DOCUMENT HELPERS
# =============================================================================


def _validate(document: Dict[str, Any], path: Path) -> ProjectManifest:
    try:
        return ProjectManifest.from_document(document)
    except ValueError as e:
        raise ManifestError(f"invalid {PROJECT_MANIFEST}: {e}", path) from e


def _section(
    document: Dict[str, Any],
    name: str,
    platform: Optional[Platform],
    create: bool,
) -> Optional[Dict[str, Any]]:
    """The mapping for ``name`` at the top level or under ``target.<platform>``."""
    parent: Optional[Dict[str, Any]] = document
    if platform is not None:
        targets = document.get(TARGET)
        if targets is None and create:
            targets = document[TARGET] = {}
        parent = (targets or {}).get(platform.value)
        if parent is None and create:
            parent = targets[platform.value] = {}
    if parent is None:
        return None

    section = parent.get(name)
    if section is None and create:
        section = parent[name] = {}
    return section


def _prune(document: Dict[str, Any], name: str, platform: Optional[Platform]) -> None:
    """Drop sections left empty by a removal."""
    parent = document if platform is None else document[TARGET][platform.value]
    if not parent.get(name):
        parent.pop(name, None)
    if platform is not None:
        if not document[TARGET][platform.value]:
            del document[TARGET][platform.value]
        if not document[TARGET]:
            del document[TARGET]


def _find_key(section: Dict[str, Any], key: Union[PackageName, PyPiPackageName]) -> Optional[str]:
    for existing in section:
        if type(key)(str(existing)) == key:
            return existing
    return None


def _describe(section: str, platform: Optional[Platform]) -> str:
    if platform is None:
        return f"[{section}]"
    return f"[{TARGET}.{platform}.{section}]"
