"""
Project façade and the per-platform resolvers behind it.

Submodules:
    dependencies         Dependency aggregation across target layers
    tasks                Task registry and reverse task dependencies
    activation           Activation script selection
    system_requirements  System requirements as virtual packages
    core                 ``Project`` and manifest discovery
"""

from trellis.project.core import NamedSource, Project, find_project_root

__all__ = ["NamedSource", "Project", "find_project_root"]
