"""
Trellis - Per-platform views over a declarative project manifest.

A ``trellis.yaml`` declares a project's metadata, its conda and PyPI
dependencies, tasks, activation scripts and system requirements, with
optional ``target.<platform>`` sections that override the defaults on
specific platforms. This package loads that manifest and answers "what
applies on platform X".

Example usage:
    from trellis import Platform, Project

    project = Project.discover()
    for name, spec in project.all_dependencies(Platform.LINUX_64).items():
        print(name, spec)
"""

__version__ = "0.1.0"
__all__ = [
    "Project",
    "Manifest",
    "Platform",
    "__version__",
]


# Lazy imports to keep ``import trellis`` light for the CLI entry point
def __getattr__(name: str):
    if name == "Project":
        from trellis.project import Project
        return Project
    if name == "Manifest":
        from trellis.models.manifest import Manifest
        return Manifest
    if name == "Platform":
        from trellis.platform import Platform
        return Platform
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
