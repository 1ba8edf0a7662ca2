"""
The trellis project: the main object to interact with a project.

``Project`` owns a loaded ``Manifest`` and the directory it was loaded from,
and answers every "what applies on platform X" question by delegating to the
default feature's targets:

    project = Project.discover()
    project.all_dependencies(Platform.LINUX_64)
    project.tasks(Platform.current())
    project.activation_scripts(Platform.WIN_64)

It also holds the PyPI package database, built lazily on first use and
shared by every later caller on the same instance.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Union

from trellis.config import get_config
from trellis.consts import ENVIRONMENT_DIR, PROJECT_LOCK_FILE, PROJECT_MANIFEST, STATE_DIR
from trellis.errors import ManifestError, PackageDbError, ProjectNotFoundError
from trellis.models.dependency import (
    NamelessMatchSpec,
    PackageName,
    PyPiPackageName,
    PyPiRequirement,
    SpecType,
)
from trellis.models.manifest import Manifest
from trellis.models.system_requirements import SystemRequirements, VirtualPackage
from trellis.models.task import Task
from trellis.platform import Platform
from trellis.project import activation as _activation
from trellis.project import dependencies as _dependencies
from trellis.project import system_requirements as _system_requirements
from trellis.project import tasks as _tasks
from trellis.pypi import PackageDb, normalize_index_url
from trellis.utils.once import OnceCell

logger = logging.getLogger(__name__)


class NamedSource(NamedTuple):
    """Manifest text labelled with its file name, for error rendering."""

    name: str
    contents: str


class Project:
    """A project: its root directory, its manifest and its package database."""

    def __init__(self, manifest: Manifest, root: Optional[Path] = None):
        self.manifest = manifest
        self._root = Path(root) if root is not None else manifest.root
        self._package_db: OnceCell[PackageDb] = OnceCell()

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_manifest(cls, manifest: Manifest) -> "Project":
        """Wrap an in-memory manifest; nothing is read from disk."""
        return cls(manifest)

    @classmethod
    def discover(cls, cwd: Optional[Path] = None) -> "Project":
        """
        Load the manifest found in ``cwd`` (default: the current directory)
        or the nearest parent directory containing one.

        Raises:
            ProjectNotFoundError: No manifest up to the filesystem root
            ManifestError: The manifest found cannot be loaded
        """
        start = Path(cwd) if cwd is not None else Path.cwd()
        root = find_project_root(start)
        if root is None:
            raise ProjectNotFoundError(start, PROJECT_MANIFEST)
        return cls.load(root / PROJECT_MANIFEST)

    @classmethod
    def load(cls, manifest_path: Union[str, Path]) -> "Project":
        """
        Load a project from its manifest file.

        Raises:
            ManifestError: The path does not exist, is not named
                ``trellis.yaml``, or the file cannot be read or parsed
        """
        manifest_path = Path(manifest_path)
        try:
            full_path = manifest_path.resolve(strict=True)
        except OSError as e:
            raise ManifestError(f"could not resolve manifest path: {e}", manifest_path) from e

        if full_path.name != PROJECT_MANIFEST:
            raise ManifestError(f"the manifest-path must point to a {PROJECT_MANIFEST} file", full_path)

        logger.debug("Loading project from %s", full_path)
        manifest = Manifest.from_path(full_path)
        return cls(manifest, root=full_path.parent)

    @classmethod
    def load_or_else_discover(cls, manifest_path: Optional[Union[str, Path]] = None) -> "Project":
        if manifest_path is not None:
            return cls.load(manifest_path)
        return cls.discover()

    # -------------------------------------------------------------------------
    # Metadata and paths
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.manifest.parsed.project.name

    @property
    def version(self) -> Optional[str]:
        return self.manifest.parsed.project.version

    @property
    def description(self) -> Optional[str]:
        return self.manifest.parsed.project.description

    @property
    def root(self) -> Path:
        return self._root

    @property
    def state_dir(self) -> Path:
        """Directory for tool-managed state (``.trellis``)."""
        return self._root / STATE_DIR

    @property
    def environment_dir(self) -> Path:
        return self.state_dir / ENVIRONMENT_DIR

    @property
    def manifest_path(self) -> Path:
        return self.manifest.path

    @property
    def lock_file_path(self) -> Path:
        return self._root / PROJECT_LOCK_FILE

    @property
    def channels(self) -> List[str]:
        return list(self.manifest.parsed.project.channels)

    @property
    def platforms(self) -> List[Platform]:
        return list(self.manifest.parsed.project.platforms)

    def manifest_source(self) -> NamedSource:
        return NamedSource(PROJECT_MANIFEST, self.manifest.contents)

    def save(self) -> None:
        """Write the manifest back to where it was loaded from."""
        self.manifest.save()

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def tasks(self, platform: Optional[Platform] = None) -> Dict[str, Task]:
        return _tasks.tasks(self.manifest.default_feature(), platform)

    def task_opt(self, name: str, platform: Optional[Platform] = None) -> Optional[Task]:
        """
        The task called ``name``, or None. With a ``platform`` the platform's
        own definition is preferred over the default one.
        """
        return self.tasks(platform).get(name)

    def task_names(self, platform: Optional[Platform] = None) -> List[str]:
        return list(self.tasks(platform))

    def task_names_depending_on(self, name: str, platform: Optional[Platform] = None) -> List[str]:
        """
        Names of the tasks that depend on ``name``.

        Resolved for the host platform unless ``platform`` is given.
        """
        if platform is None:
            platform = Platform.current()
        return _tasks.task_names_depending_on(self.manifest.default_feature(), name, platform)

    # -------------------------------------------------------------------------
    # Dependencies
    # -------------------------------------------------------------------------

    def dependencies(self, platform: Platform, kind: SpecType) -> Dict[PackageName, NamelessMatchSpec]:
        return _dependencies.dependencies(self.manifest.default_feature(), platform, kind)

    def all_dependencies(self, platform: Platform) -> Dict[PackageName, NamelessMatchSpec]:
        """Run, host and build dependencies combined (build > host > run)."""
        return _dependencies.all_dependencies(self.manifest.default_feature(), platform)

    def pypi_dependencies(self, platform: Platform) -> Dict[PyPiPackageName, PyPiRequirement]:
        return _dependencies.pypi_dependencies(self.manifest.default_feature(), platform)

    def has_pypi_dependencies(self) -> bool:
        return self.manifest.has_pypi_dependencies()

    # -------------------------------------------------------------------------
    # PyPI package database
    # -------------------------------------------------------------------------

    def pypi_index_urls(self) -> List[str]:
        return [normalize_index_url(get_config().pypi_index_url)]

    def pypi_package_db(self) -> PackageDb:
        """
        The package database for PyPI metadata, created on first call.

        Raises:
            CacheDirError: The default cache directory cannot be determined
            PackageDbError: The client or cache directory cannot be set up;
                a later call will try again
        """
        return self._package_db.get_or_try_init(self._create_package_db)

    def _create_package_db(self) -> PackageDb:
        cache_dir = get_config().default_cache_dir() / "pypi"
        try:
            index_urls = self.pypi_index_urls()
        except ValueError as e:
            raise PackageDbError(f"invalid PyPI index URL: {e}") from e

        # Local import so the client (and its TLS setup) is only built on demand
        from trellis.client import default_client

        try:
            client = default_client()
        except (OSError, ValueError) as e:
            raise PackageDbError(f"failed to create HTTP client: {e}") from e

        try:
            return PackageDb(client, index_urls, cache_dir)
        except Exception:
            client.close()
            raise

    # -------------------------------------------------------------------------
    # Activation and system requirements
    # -------------------------------------------------------------------------

    def activation_scripts(self, platform: Platform) -> List[Path]:
        """Activation scripts for ``platform`` that exist on disk."""
        return _activation.activation_scripts(self.manifest.default_feature(), platform, self._root)

    def system_requirements(self) -> SystemRequirements:
        """
        The ``system-requirements`` section: a description of the reference
        machine minimally needed to run the project.
        """
        return _system_requirements.system_requirements(self.manifest.default_feature())

    def virtual_packages_for_platform(self, platform: Platform) -> List[VirtualPackage]:
        """System requirements as virtual packages, minus those irrelevant on ``platform``."""
        return _system_requirements.virtual_packages_for_platform(self.manifest.default_feature(), platform)


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """
    Return the first of ``start`` and its parents that contains the manifest.
    """
    try:
        current = (Path(start) if start is not None else Path.cwd()).resolve()
    except OSError:
        return None

    for directory in (current, *current.parents):
        if (directory / PROJECT_MANIFEST).is_file():
            return directory
    return None
