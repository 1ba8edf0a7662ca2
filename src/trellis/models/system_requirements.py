"""
System requirements and the virtual packages they expand to.

The ``system-requirements`` section describes a reference machine that is
minimally needed to run the project:

    system-requirements:
      linux: "4.18"
      libc: "2.17"                          # glibc 2.17
      # libc: {family: musl, version: "1.2"}
      cuda: "12"
      macos: "11.0"
      windows: true
      unix: true
      archspec: x86_64_v3

Each declared entry becomes a ``VirtualPackage`` that a solver can treat as
an installed, synthetic package (``__glibc``, ``__cuda``, ...).
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

from trellis.models.dependency import UNQUOTED_FLOAT_VERSION

DEFAULT_LIBC_FAMILY = "glibc"


def _version_to_str(v: Any) -> Any:
    if isinstance(v, float):
        raise ValueError(UNQUOTED_FLOAT_VERSION.format(v))
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str) and not v.strip():
        raise ValueError("version cannot be empty")
    return v


# =============================================================================
# VIRTUAL PACKAGES
# =============================================================================


class VirtualPackage(BaseModel):
    """A synthetic requirement describing the runtime environment."""

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name


class Win(VirtualPackage):
    @property
    def name(self) -> str:
        return "__win"


class Unix(VirtualPackage):
    @property
    def name(self) -> str:
        return "__unix"


class Linux(VirtualPackage):
    version: str

    @property
    def name(self) -> str:
        return "__linux"

    def __str__(self) -> str:
        return f"{self.name}={self.version}"


class Osx(VirtualPackage):
    version: str

    @property
    def name(self) -> str:
        return "__osx"

    def __str__(self) -> str:
        return f"{self.name}={self.version}"


class LibC(VirtualPackage):
    family: str = DEFAULT_LIBC_FAMILY
    version: str

    @property
    def name(self) -> str:
        return f"__{self.family.lower()}"

    def __str__(self) -> str:
        return f"{self.name}={self.version}"


class Cuda(VirtualPackage):
    version: str

    @property
    def name(self) -> str:
        return "__cuda"

    def __str__(self) -> str:
        return f"{self.name}={self.version}"


class Archspec(VirtualPackage):
    spec: str

    @property
    def name(self) -> str:
        return "__archspec"

    def __str__(self) -> str:
        return f"{self.name}=1={self.spec}"


# =============================================================================
# SYSTEM REQUIREMENTS
# =============================================================================


class LibCSystemRequirement(BaseModel):
    """libc requirement, either a bare version (glibc) or family + version."""

    family: str = Field(DEFAULT_LIBC_FAMILY, description="libc family (glibc, musl, ...)")
    version: str = Field(..., description="Minimum libc version")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def parse_version_form(cls, data: Any) -> Any:
        if isinstance(data, (str, int, float)) and not isinstance(data, bool):
            return {"version": data}
        return data

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        return _version_to_str(v)

    def virtual_package(self) -> LibC:
        return LibC(family=self.family, version=self.version)


class SystemRequirements(BaseModel):
    """Minimal reference machine a project declares it needs."""

    windows: Optional[bool] = Field(None, description="Requires Windows")
    unix: Optional[bool] = Field(None, description="Requires a Unix-like OS")
    macos: Optional[str] = Field(None, description="Minimum macOS version")
    linux: Optional[str] = Field(None, description="Minimum Linux kernel version")
    cuda: Optional[str] = Field(None, description="Minimum CUDA driver version")
    libc: Optional[LibCSystemRequirement] = Field(None, description="Minimum libc")
    archspec: Optional[str] = Field(None, description="Microarchitecture (archspec name)")

    model_config = ConfigDict(extra="forbid")

    # Keys in the order they were declared; drives virtual package ordering
    _declared_order: List[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def remember_declared_order(cls, data: Any, handler: Callable[[Any], "SystemRequirements"]) -> "SystemRequirements":
        model = handler(data)
        if isinstance(data, dict):
            model._declared_order = [key for key in data if key in cls.model_fields]
        return model

    @field_validator("macos", "linux", "cuda", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        return _version_to_str(v)

    def is_empty(self) -> bool:
        return not self.virtual_packages()

    def virtual_packages(self) -> List[VirtualPackage]:
        """Expand the requirements into virtual packages, in declared order."""
        fields = type(self).model_fields
        declared = [key for key in self._declared_order if key in fields]
        keys = declared + [key for key in fields if key not in declared]

        packages: List[VirtualPackage] = []
        for key in keys:
            package = self._virtual_package_for(key)
            if package is not None:
                packages.append(package)
        return packages

    def _virtual_package_for(self, key: str) -> Optional[VirtualPackage]:
        if key == "windows":
            return Win() if self.windows else None
        if key == "unix":
            return Unix() if self.unix else None
        if key == "macos":
            return Osx(version=self.macos) if self.macos else None
        if key == "linux":
            return Linux(version=self.linux) if self.linux else None
        if key == "cuda":
            return Cuda(version=self.cuda) if self.cuda else None
        if key == "libc":
            return self.libc.virtual_package() if self.libc else None
        if key == "archspec":
            return Archspec(spec=self.archspec) if self.archspec else None
        return None
