"""
Tests for the trellis CLI.
"""

import json
import logging
import textwrap

import pytest
from click.testing import CliRunner

from trellis.cli import main
from trellis.logger import ROOT_LOGGER_NAME


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def project_path(make_project, tmp_path, dependency_target_sets):
    make_project(
        textwrap.dedent(dependency_target_sets)
        + textwrap.dedent(
            """
    pypi-dependencies:
      requests: ">=2.31"
    tasks:
      build: "make"
      test:
        cmd: "pytest"
        depends_on: [build]
    activation:
      scripts: [setup.sh, missing.sh]
    system-requirements:
      libc: "2.17"
      macos: "11.0"
"""
        ),
        files={"setup.sh": ""},
    )
    return tmp_path / "trellis.yaml"


def invoke(runner, project_path, *args):
    return runner.invoke(main, ["--manifest-path", str(project_path), *args])


class TestInfo:
    def test_text(self, runner, project_path):
        result = invoke(runner, project_path, "info")
        assert result.exit_code == 0, result.output
        assert "Project:   foo" in result.output
        assert "Platforms: linux-64, win-64, osx-64, osx-arm64" in result.output
        assert "Tasks:     build, test" in result.output

    def test_json(self, runner, project_path, tmp_path):
        result = invoke(runner, project_path, "info", "--format", "json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "foo"
        assert data["root"] == str(tmp_path)
        assert data["pypi"] is True

    def test_discovery_from_cwd(self, runner, project_path, monkeypatch):
        monkeypatch.chdir(project_path.parent)
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 0, result.output
        assert "Project:   foo" in result.output

    def test_not_found(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 1
        assert "could not find trellis.yaml" in result.output

    def test_bad_manifest(self, runner, tmp_path):
        path = tmp_path / "trellis.yaml"
        path.write_text("project: [\n", encoding="utf-8")
        result = runner.invoke(main, ["--manifest-path", str(path), "info"])
        assert result.exit_code == 1
        assert "failed to parse trellis.yaml" in result.output

    def test_malformed_target_section(self, runner, tmp_path):
        path = tmp_path / "trellis.yaml"
        path.write_text(
            "project:\n  name: foo\n  channels: []\n  platforms: [linux-64]\ntarget: [linux-64]\n",
            encoding="utf-8",
        )
        result = runner.invoke(main, ["--manifest-path", str(path), "info"])
        assert result.exit_code == 1
        assert "'target' must be a mapping, got list" in result.output
        assert not isinstance(result.exception, AttributeError)


class TestDeps:
    def test_all(self, runner, project_path):
        result = invoke(runner, project_path, "deps", "--platform", "linux-64")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            'foo = "1.0"',
            'wolflib = "1.0"',
            'libc = "2.12"',
            'banksy = "1.0"',
            'bar = "1.0"',
            'baz = "1.0"',
        ]

    def test_kind(self, runner, project_path):
        result = invoke(runner, project_path, "deps", "-p", "win-64", "--kind", "host")
        assert result.output.splitlines() == ['libc = "2.12"']

    def test_pypi_json(self, runner, project_path):
        result = invoke(runner, project_path, "deps", "-p", "osx-64", "-k", "pypi", "-f", "json")
        assert json.loads(result.output) == {"requests": ">=2.31"}

    def test_host_platform_default(self, runner, project_path, monkeypatch):
        monkeypatch.setenv("TRELLIS_PLATFORM", "linux-64")
        result = invoke(runner, project_path, "deps", "-k", "run")
        assert result.output.splitlines() == ['foo = "1.0"', 'wolflib = "1.0"']

    def test_unknown_platform(self, runner, project_path):
        result = invoke(runner, project_path, "deps", "-p", "linux-65")
        assert result.exit_code == 2


class TestTask:
    def test_list(self, runner, project_path):
        result = invoke(runner, project_path, "task", "list", "-p", "linux-64")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "build  make"
        assert lines[1] == "test   pytest  (depends on: build)"

    def test_depends_on(self, runner, project_path):
        result = invoke(runner, project_path, "task", "depends-on", "build", "-p", "win-64")
        assert result.output.splitlines() == ["test"]

    def test_depends_on_unknown(self, runner, project_path):
        result = invoke(runner, project_path, "task", "depends-on", "nope", "-p", "win-64")
        assert result.exit_code == 0
        assert result.output == ""


class TestActivationAndRequirements:
    def test_activation(self, runner, project_path, tmp_path):
        result = invoke(runner, project_path, "activation", "-p", "linux-64")
        assert result.exit_code == 0, result.output
        assert str(tmp_path / "setup.sh") in result.output.splitlines()
        assert "can't find activation scripts: missing.sh" in result.output

    def test_system_requirements_all(self, runner, project_path):
        result = invoke(runner, project_path, "system-requirements")
        assert result.output.splitlines() == ["__glibc=2.17", "__osx=11.0"]

    def test_system_requirements_for_platform(self, runner, project_path):
        result = invoke(runner, project_path, "system-requirements", "-p", "osx-arm64")
        assert result.output.splitlines() == ["__osx=11.0"]


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
