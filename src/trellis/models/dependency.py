"""
Dependency names, specs and kinds.

Native (conda-style) dependencies and PyPI dependencies live in separate
maps because their value types differ:

    dependencies:          {PackageName: NamelessMatchSpec}
    pypi-dependencies:     {PyPiPackageName: PyPiRequirement}

Names compare and hash by their normalized form so that ``Foo`` declared in
one layer and ``foo`` in another are the same map key, while the spelling
first seen is kept for display.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.utils import canonicalize_name
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import core_schema

from trellis.consts import PYPI_DEPENDENCIES

# Conda allows a leading underscore (``_libgcc_mutex``), PEP 508 does not
PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]([A-Za-z0-9_.\-]*[A-Za-z0-9_])?$")
PYPI_PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9._\-]*[A-Za-z0-9])?$")

# YAML reads an unquoted 3.10 as the float 3.1
UNQUOTED_FLOAT_VERSION = "version must be a quoted string, got the number {} (quote it, e.g. \"3.10\")"


# =============================================================================
# KINDS
# =============================================================================


class SpecType(str, Enum):
    """What a native dependency is needed for."""

    # Needed by the host environment when running the project
    HOST = "host"
    # Needed to build the project, may not be required at runtime
    BUILD = "build"
    # Regular dependencies needed to run the project
    RUN = "run"

    @property
    def section(self) -> str:
        """Manifest section holding this kind of dependency."""
        return _SPEC_TYPE_SECTIONS[self]

    @classmethod
    def from_section(cls, section: str) -> "SpecType":
        for kind, name in _SPEC_TYPE_SECTIONS.items():
            if name == section:
                return kind
        raise ValueError(f"'{section}' is not a dependency section")

    @classmethod
    def sections(cls) -> List[str]:
        return list(_SPEC_TYPE_SECTIONS.values())


_SPEC_TYPE_SECTIONS: Dict[SpecType, str] = {
    SpecType.RUN: "dependencies",
    SpecType.HOST: "host-dependencies",
    SpecType.BUILD: "build-dependencies",
}


@dataclass(frozen=True)
class DependencyType:
    """
    Either a native dependency of some ``SpecType`` or a PyPI dependency.

    Use ``DependencyType.conda(SpecType.RUN)`` or ``DependencyType.pypi()``.
    """

    spec_type: Optional[SpecType] = None

    @classmethod
    def conda(cls, spec_type: SpecType) -> "DependencyType":
        return cls(spec_type=spec_type)

    @classmethod
    def pypi(cls) -> "DependencyType":
        return cls(spec_type=None)

    @property
    def is_pypi(self) -> bool:
        return self.spec_type is None

    @property
    def name(self) -> str:
        """Manifest section name for this dependency type."""
        if self.spec_type is None:
            return PYPI_DEPENDENCIES
        return self.spec_type.section


# =============================================================================
# NAMES
# =============================================================================


class _NormalizedName:
    """Name that keeps its source spelling but compares by normalized form."""

    __slots__ = ("_source", "_normalized")

    _pattern = PACKAGE_NAME_PATTERN

    def __init__(self, source: str):
        if not isinstance(source, str):
            raise TypeError(f"package name must be a string, got {type(source).__name__}")
        source = source.strip()
        if not self._pattern.match(source):
            raise ValueError(f"'{source}' is not a valid package name")
        self._source = source
        self._normalized = self._normalize(source)

    @staticmethod
    def _normalize(source: str) -> str:
        return source.lower()

    @property
    def source(self) -> str:
        """The name as written in the manifest."""
        return self._source

    @property
    def normalized(self) -> str:
        return self._normalized

    def __eq__(self, other: object) -> bool:
        if isinstance(other, type(self)):
            return self._normalized == other._normalized
        if isinstance(other, str):
            # Only the normalized spelling, so hashing stays consistent
            return self._normalized == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._normalized)

    def __str__(self) -> str:
        return self._source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._source!r})"

    @classmethod
    def _validate(cls, value: Any) -> "_NormalizedName":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            # pydantic only reports ValueError as a validation error
            raise ValueError(f"package name must be a string, got {type(value).__name__}")
        return cls(value)

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class PackageName(_NormalizedName):
    """Name of a native package (case-insensitive)."""

    __slots__ = ()


class PyPiPackageName(_NormalizedName):
    """Name of a PyPI package, normalized per PEP 503."""

    __slots__ = ()

    _pattern = PYPI_PACKAGE_NAME_PATTERN

    @staticmethod
    def _normalize(source: str) -> str:
        return canonicalize_name(source)


# =============================================================================
# SPECS
# =============================================================================


class NamelessMatchSpec(BaseModel):
    """
    Version/build constraint of a native dependency.

    Accepted manifest forms:
        foo: "1.0"
        foo: ">=1.2,<2"
        foo: "1.0 py_0"            # version then build string
        foo: {version: "1.0", build: "py_0"}
    """

    version: Optional[str] = Field(None, description="Version constraint ('*' for any)")
    build: Optional[str] = Field(None, description="Build string constraint")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def parse_string_form(cls, data: Any) -> Any:
        if isinstance(data, float):
            raise ValueError(UNQUOTED_FLOAT_VERSION.format(data))
        if isinstance(data, int) and not isinstance(data, bool):
            data = str(data)
        if isinstance(data, str):
            parts = data.split()
            if not parts:
                raise ValueError("empty dependency spec")
            if len(parts) > 2:
                raise ValueError(f"could not parse dependency spec '{data}'")
            return {"version": parts[0], "build": parts[1] if len(parts) == 2 else None}
        return data

    def __str__(self) -> str:
        version = self.version or "*"
        if self.build:
            return f"{version} {self.build}"
        return version

    def to_manifest(self) -> Union[str, Dict[str, str]]:
        """Form written back to the manifest document."""
        return str(self)


class PyPiRequirement(BaseModel):
    """
    Requirement on a PyPI package.

    Accepted manifest forms:
        requests: "*"
        requests: ">=2.28"
        requests: {version: ">=2.28", extras: ["socks"]}
    """

    version: Optional[str] = Field(None, description="PEP 440 specifier set, None for any")
    extras: List[str] = Field(default_factory=list, description="Requested extras")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def parse_string_form(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"version": data}
        return data

    @field_validator("version")
    @classmethod
    def validate_specifier(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if v in ("", "*"):
            return None
        try:
            SpecifierSet(v)
        except InvalidSpecifier as e:
            raise ValueError(f"invalid PyPI version specifier '{v}': {e}") from e
        return v

    @property
    def specifier(self) -> SpecifierSet:
        return SpecifierSet(self.version or "")

    def as_pep508(self, name: Union[str, PyPiPackageName]) -> str:
        extras = f"[{','.join(self.extras)}]" if self.extras else ""
        return f"{name}{extras}{self.version or ''}"

    def __str__(self) -> str:
        return self.version or "*"

    def to_manifest(self) -> Union[str, Dict[str, Any]]:
        if not self.extras:
            return str(self)
        return {"version": str(self), "extras": list(self.extras)}


# Tagged unions used by manifest editing: the class tells conda from PyPI.
DependencyName = Union[PackageName, PyPiPackageName]
DependencyKind = Union[NamelessMatchSpec, PyPiRequirement]


def format_dependency(name: DependencyName, spec: DependencyKind) -> str:
    """Render ``name = "spec"`` for display."""
    return f'{name} = "{spec}"'
