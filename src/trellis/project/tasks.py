"""
Task registry: the effective tasks for a platform.

Tasks are overridden, not merged. Walking the layers most specific first,
the first definition of a name wins outright (its command and its
``depends_on`` list); names only defined in less specific layers are still
included.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from trellis.models.feature import Feature
from trellis.models.task import Task
from trellis.platform import Platform


def tasks(feature: Feature, platform: Optional[Platform]) -> Dict[str, Task]:
    """Effective name -> task map for ``platform``."""
    resolved: Dict[str, Task] = {}
    for target in feature.targets.resolve(platform):
        for name, task in target.tasks.items():
            if name not in resolved:
                resolved[name] = task
    return resolved


def task_names_depending_on(feature: Feature, name: str, platform: Platform) -> List[str]:
    """
    Names of tasks whose ``depends_on`` contains ``name``.

    Resolved against ``platform``. An unknown ``name`` yields an empty list
    rather than an error, and ``name`` itself is never included.
    """
    resolved = tasks(feature, platform)
    if resolved.pop(name, None) is None:
        return []
    return [other for other, task in resolved.items() if name in task.depends_on]
