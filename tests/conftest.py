"""
Pytest configuration and fixtures for trellis tests.
"""

from __future__ import annotations

import os
import textwrap
from pathlib import Path
from typing import Callable, Dict, Generator, Optional

import pytest

from trellis.config import reset_config
from trellis.models.manifest import Manifest
from trellis.project import Project

PROJECT_BOILERPLATE = """\
project:
  name: foo
  version: "0.1.0"
  channels: []
  platforms: [linux-64, win-64, osx-64, osx-arm64]
"""


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from TRELLIS_* variables and the config singleton."""
    for key in list(os.environ):
        if key.startswith("TRELLIS_"):
            monkeypatch.delenv(key)
    reset_config()

    yield

    reset_config()


# ============================================================================
# Manifest Fixtures
# ============================================================================


def manifest_text(body: str = "") -> str:
    """Project boilerplate followed by ``body`` (dedented)."""
    return PROJECT_BOILERPLATE + textwrap.dedent(body)


@pytest.fixture
def manifest_from_str(tmp_path: Path) -> Callable[[str], Manifest]:
    """Parse boilerplate + body as if the manifest lived in ``tmp_path``."""

    def _factory(body: str = "") -> Manifest:
        return Manifest.from_str(tmp_path, manifest_text(body))

    return _factory


@pytest.fixture
def project_from_str(manifest_from_str: Callable[[str], Manifest]) -> Callable[[str], Project]:
    """In-memory project over boilerplate + body."""

    def _factory(body: str = "") -> Project:
        return Project.from_manifest(manifest_from_str(body))

    return _factory


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Project]:
    """
    Write a project to ``tmp_path`` and load it from disk.

    ``files`` maps project-relative paths to contents; parent directories are
    created as needed.
    """

    def _factory(body: str = "", files: Optional[Dict[str, str]] = None) -> Project:
        (tmp_path / "trellis.yaml").write_text(manifest_text(body), encoding="utf-8")
        for relative, contents in (files or {}).items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(contents, encoding="utf-8")
        return Project.load(tmp_path / "trellis.yaml")

    return _factory


@pytest.fixture
def dependency_target_sets() -> str:
    """Default dependencies of every kind plus a linux-64 override of every kind."""
    return """
        dependencies:
          foo: "1.0"
        host-dependencies:
          libc: "2.12"
        build-dependencies:
          bar: "1.0"
        target:
          linux-64:
            build-dependencies:
              baz: "1.0"
            host-dependencies:
              banksy: "1.0"
            dependencies:
              wolflib: "1.0"
    """
