"""
Tests for system requirements and virtual package filtering.
"""

import pytest
from pydantic import ValidationError

from trellis.models import (
    Archspec,
    Cuda,
    LibC,
    Linux,
    Osx,
    SystemRequirements,
    Unix,
    Win,
)
from trellis.platform import Platform
from trellis.virtual_packages import non_relevant_virtual_packages_for_platform


class TestLibCForms:
    """Every spelling of a glibc requirement yields the same virtual package."""

    @pytest.mark.parametrize(
        "body",
        [
            """
            system-requirements:
              libc: {version: "2.12"}
            """,
            """
            system-requirements:
              libc: "2.12"
            """,
            """
            system-requirements:
              libc:
                version: "2.12"
            """,
            """
            system-requirements:
              libc:
                version: "2.12"
                family: glibc
            """,
        ],
    )
    def test_system_requirements_edge_cases(self, project_from_str, body):
        project = project_from_str(body)
        assert project.system_requirements().virtual_packages() == [LibC(family="glibc", version="2.12")]

    def test_other_family(self):
        requirements = SystemRequirements.model_validate({"libc": {"family": "musl", "version": "1.2"}})
        [package] = requirements.virtual_packages()
        assert package.name == "__musl"
        assert str(package) == "__musl=1.2"


class TestVirtualPackages:
    """Tests for expanding requirements into virtual packages."""

    def test_declared_order(self):
        requirements = SystemRequirements.model_validate(
            {"cuda": "12", "linux": "4.18", "windows": True, "archspec": "x86_64_v3"}
        )
        assert requirements.virtual_packages() == [
            Cuda(version="12"),
            Linux(version="4.18"),
            Win(),
            Archspec(spec="x86_64_v3"),
        ]

    def test_false_flags_are_skipped(self):
        requirements = SystemRequirements.model_validate({"unix": False, "macos": "11.0"})
        assert requirements.virtual_packages() == [Osx(version="11.0")]

    def test_empty(self):
        assert SystemRequirements().is_empty()
        assert SystemRequirements().virtual_packages() == []

    def test_display(self):
        assert str(Archspec(spec="x86_64_v3")) == "__archspec=1=x86_64_v3"
        assert str(Unix()) == "__unix"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            SystemRequirements.model_validate({"glibc": "2.17"})

    def test_empty_version_rejected(self):
        with pytest.raises(ValidationError):
            SystemRequirements.model_validate({"linux": " "})

    def test_integer_version_is_coerced(self):
        assert SystemRequirements.model_validate({"cuda": 12}).virtual_packages() == [Cuda(version="12")]

    @pytest.mark.parametrize(
        "requirements",
        [
            {"cuda": 12.10},
            {"macos": 10.10},
            {"libc": 2.30},
            {"libc": {"family": "musl", "version": 1.20}},
        ],
    )
    def test_float_version_rejected(self, requirements):
        with pytest.raises(ValidationError, match="version must be a quoted string"):
            SystemRequirements.model_validate(requirements)


class TestRelevance:
    """Tests for the platform relevance predicate."""

    @pytest.mark.parametrize(
        "package,platform,irrelevant",
        [
            (LibC(version="2.17"), Platform.LINUX_64, False),
            (LibC(version="2.17"), Platform.OSX_ARM64, True),
            (LibC(version="2.17"), Platform.WIN_64, True),
            (Linux(version="4.18"), Platform.OSX_64, True),
            (Osx(version="11.0"), Platform.OSX_ARM64, False),
            (Osx(version="11.0"), Platform.LINUX_64, True),
            (Win(), Platform.WIN_64, False),
            (Win(), Platform.LINUX_64, True),
            (Unix(), Platform.OSX_64, False),
            (Unix(), Platform.WIN_64, True),
            (Cuda(version="12"), Platform.WIN_64, False),
            (Archspec(spec="x86_64_v3"), Platform.OSX_64, False),
        ],
    )
    def test_predicate(self, package, platform, irrelevant):
        assert non_relevant_virtual_packages_for_platform(package, platform) is irrelevant


class TestProjectVirtualPackages:
    """Tests for Project.virtual_packages_for_platform()."""

    BODY = """
        system-requirements:
          linux: "4.18"
          libc: "2.17"
          macos: "11.0"
          cuda: "12"
        target:
          osx-arm64:
            system-requirements:
              macos: "13.0"
    """

    def test_linux(self, project_from_str):
        project = project_from_str(self.BODY)
        assert project.virtual_packages_for_platform(Platform.LINUX_64) == [
            Linux(version="4.18"),
            LibC(version="2.17"),
            Cuda(version="12"),
        ]

    def test_osx_ignores_platform_override(self, project_from_str):
        project = project_from_str(self.BODY)
        assert project.virtual_packages_for_platform(Platform.OSX_ARM64) == [
            Osx(version="11.0"),
            Cuda(version="12"),
        ]

    def test_windows(self, project_from_str):
        project = project_from_str(self.BODY)
        assert project.virtual_packages_for_platform(Platform.WIN_64) == [Cuda(version="12")]

    def test_custom_predicate(self, project_from_str):
        from trellis.project.system_requirements import virtual_packages_for_platform

        project = project_from_str(self.BODY)
        seen = []

        def keep_everything(package, platform):
            seen.append(package.name)
            return False

        packages = virtual_packages_for_platform(
            project.manifest.default_feature(), Platform.WIN_64, keep_everything
        )
        assert len(packages) == 4
        assert seen == ["__linux", "__glibc", "__osx", "__cuda"]
