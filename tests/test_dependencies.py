"""
Tests for dependency aggregation across layers and kinds.
"""

from typing import Mapping

from trellis.models import SpecType, format_dependency
from trellis.platform import Platform
from trellis.project.dependencies import merge_layers


def format_dependencies(deps: Mapping) -> str:
    return "\n".join(format_dependency(name, spec) for name, spec in deps.items())


class TestMergeLayers:
    """Overwrite in place, append new names."""

    def test_overwrite_keeps_position(self):
        merged = merge_layers([{"a": 1, "b": 2, "c": 3}, {"b": 20, "d": 4}])
        assert list(merged.items()) == [("a", 1), ("b", 20), ("c", 3), ("d", 4)]

    def test_first_spelling_kept(self):
        from trellis.models import PackageName

        merged = merge_layers([{PackageName("NumPy"): "1"}, {PackageName("numpy"): "2"}])
        [(name, spec)] = merged.items()
        assert name.source == "NumPy"
        assert spec == "2"

    def test_inputs_untouched(self):
        default = {"a": 1}
        merge_layers([default, {"a": 2}])
        assert default == {"a": 1}


class TestDependencySets:
    """Aggregated dependency views of a project."""

    def test_dependency_sets(self, project_from_str):
        project = project_from_str(
            """
            dependencies:
              foo: "1.0"
            host-dependencies:
              libc: "2.12"
            build-dependencies:
              bar: "1.0"
            """
        )
        assert format_dependencies(project.all_dependencies(Platform.LINUX_64)) == (
            'foo = "1.0"\n'
            'libc = "2.12"\n'
            'bar = "1.0"'
        )

    def test_dependency_target_sets(self, project_from_str, dependency_target_sets):
        project = project_from_str(dependency_target_sets)
        deps = project.all_dependencies(Platform.LINUX_64)
        assert [str(name) for name in deps] == ["foo", "wolflib", "libc", "banksy", "bar", "baz"]
        assert all(str(spec) in ("1.0", "2.12") for spec in deps.values())

    def test_other_platform_sees_defaults_only(self, project_from_str, dependency_target_sets):
        project = project_from_str(dependency_target_sets)
        deps = project.all_dependencies(Platform.WIN_64)
        assert [str(name) for name in deps] == ["foo", "libc", "bar"]

    def test_position_stability(self, project_from_str):
        project = project_from_str(
            """
            dependencies:
              python: "3.11.*"
              numpy: ">=1.26"
              pandas: "*"
            target:
              linux-64:
                dependencies:
                  Numpy: "1.26.4"
                  scipy: "*"
            """
        )
        deps = project.dependencies(Platform.LINUX_64, SpecType.RUN)
        assert [str(name) for name in deps] == ["python", "numpy", "pandas", "scipy"]
        assert str(deps["numpy"]) == "1.26.4"
        assert str(deps["python"]) == "3.11.*"

    def test_kind_precedence(self, project_from_str):
        project = project_from_str(
            """
            dependencies:
              openssl: ">=3"
              zlib: "*"
            target:
              linux-64:
                host-dependencies:
                  openssl: "3.2.*"
            """
        )
        deps = project.all_dependencies(Platform.LINUX_64)
        assert [str(name) for name in deps] == ["openssl", "zlib"]
        assert str(deps["openssl"]) == "3.2.*"

    def test_build_wins_over_host_and_run(self, project_from_str):
        project = project_from_str(
            """
            dependencies:
              cmake: "*"
            host-dependencies:
              cmake: ">=3.20"
            build-dependencies:
              cmake: "3.28.*"
            """
        )
        deps = project.all_dependencies(Platform.OSX_64)
        assert len(deps) == 1
        assert str(deps["cmake"]) == "3.28.*"

    def test_no_override_fallback(self, project_from_str, dependency_target_sets):
        project = project_from_str(dependency_target_sets)
        default = project.manifest.default_feature().default_target.dependencies_for(SpecType.HOST)
        deps = project.dependencies(Platform.OSX_ARM64, SpecType.HOST)
        assert list(deps.items()) == list(default.items())

    def test_missing_kind_is_empty(self, project_from_str):
        project = project_from_str(
            """
            dependencies:
              foo: "1.0"
            """
        )
        assert project.dependencies(Platform.LINUX_64, SpecType.BUILD) == {}

    def test_idempotence(self, project_from_str, dependency_target_sets):
        project = project_from_str(dependency_target_sets)
        first = project.all_dependencies(Platform.LINUX_64)
        second = project.all_dependencies(Platform.LINUX_64)
        assert list(first.items()) == list(second.items())

    def test_manifest_not_mutated(self, project_from_str, dependency_target_sets):
        project = project_from_str(dependency_target_sets)
        default = project.manifest.default_feature().default_target
        before = dict(default.dependencies_for(SpecType.RUN))
        project.all_dependencies(Platform.LINUX_64)
        assert default.dependencies_for(SpecType.RUN) == before


class TestPyPiDependencies:
    """PyPI dependencies merge the same way but stay separate."""

    BODY = """
        dependencies:
          python: "3.12.*"
        pypi-dependencies:
          requests: ">=2.28"
          Flask_Login: "*"
        target:
          win-64:
            pypi-dependencies:
              flask-login: "==0.6.3"
              pywin32-ctypes: "*"
    """

    def test_override(self, project_from_str):
        project = project_from_str(self.BODY)
        deps = project.pypi_dependencies(Platform.WIN_64)
        assert [str(name) for name in deps] == ["requests", "Flask_Login", "pywin32-ctypes"]
        assert str(deps["flask-login"]) == "==0.6.3"

    def test_not_mixed_into_native(self, project_from_str):
        project = project_from_str(self.BODY)
        assert [str(name) for name in project.all_dependencies(Platform.WIN_64)] == ["python"]

    def test_has_pypi_dependencies(self, project_from_str):
        assert project_from_str(self.BODY).has_pypi_dependencies()
        assert not project_from_str("").has_pypi_dependencies()

    def test_feature_only_pypi(self, project_from_str):
        project = project_from_str(
            """
            feature:
              docs:
                pypi-dependencies:
                  sphinx: "*"
            """
        )
        assert project.has_pypi_dependencies()
        assert project.pypi_dependencies(Platform.LINUX_64) == {}
