"""
Dependency aggregation across target layers.

Merging follows the resolver's specificity order reversed (least specific
first), folding each layer into an ordered map with
overwrite-preserving-first-position semantics:

- a name already present keeps its position and takes the new layer's spec
- a new name is appended at the end

So a platform override can change the constraint of a default dependency
without moving it, and dependencies it introduces come after the existing
ones. The same fold combines the kinds in ``all_dependencies``: run, then
host, then build, so build wins over host, which wins over run.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, TypeVar

from trellis.models.dependency import (
    NamelessMatchSpec,
    PackageName,
    PyPiPackageName,
    PyPiRequirement,
    SpecType,
)
from trellis.models.feature import Feature
from trellis.platform import Platform

K = TypeVar("K")
V = TypeVar("V")

# Later kinds take precedence when a name appears under several kinds
KIND_MERGE_ORDER = (SpecType.RUN, SpecType.HOST, SpecType.BUILD)


def merge_layers(layers: Iterable[Mapping[K, V]]) -> Dict[K, V]:
    """Fold ordered maps, later layers overwriting values in place."""
    merged: Dict[K, V] = {}
    for layer in layers:
        for name, spec in layer.items():
            # Existing key: value replaced in its original slot, first spelling kept.
            # New key: appended.
            merged[name] = spec
    return merged


def dependencies(
    feature: Feature,
    platform: Optional[Platform],
    kind: SpecType,
) -> Dict[PackageName, NamelessMatchSpec]:
    """Dependencies of ``kind`` for ``platform``, most specific layer applied last."""
    resolved = feature.targets.resolve(platform)
    return merge_layers(target.dependencies_for(kind) for target in resolved.least_specific_first())


def all_dependencies(
    feature: Feature,
    platform: Optional[Platform],
) -> Dict[PackageName, NamelessMatchSpec]:
    """Run, host and build dependencies combined into one map."""
    return merge_layers(dependencies(feature, platform, kind) for kind in KIND_MERGE_ORDER)


def pypi_dependencies(
    feature: Feature,
    platform: Optional[Platform],
) -> Dict[PyPiPackageName, PyPiRequirement]:
    """PyPI dependencies for ``platform``; never mixed with native ones."""
    resolved = feature.targets.resolve(platform)
    return merge_layers(target.pypi_dependencies or {} for target in resolved.least_specific_first())
