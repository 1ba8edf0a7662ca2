"""
Activation script resolution.

Only the most specific activation block applies: a platform override's
scripts replace the default ones entirely. Scripts are resolved against the
project root; missing ones are dropped with a warning, never an error.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from trellis.models.feature import Feature
from trellis.models.target import Activation
from trellis.platform import Platform

logger = logging.getLogger(__name__)


def select_activation(feature: Feature, platform: Optional[Platform]) -> Optional[Activation]:
    """The first activation block walking the layers most specific first."""
    return next(
        (target.activation for target in feature.targets.resolve(platform) if target.activation is not None),
        None,
    )


def activation_scripts(feature: Feature, platform: Optional[Platform], root: Path) -> List[Path]:
    """Existing activation scripts for ``platform``, as paths under ``root``."""
    activation = select_activation(feature, platform)
    if activation is None or not activation.scripts:
        return []

    full_paths: List[Path] = []
    missing: List[str] = []
    for script in activation.scripts:
        script_path = root / script
        if script_path.exists():
            full_paths.append(script_path)
            logger.debug("Found activation script: %s", script)
        else:
            missing.append(str(script))

    if missing:
        logger.warning(
            "can't find activation scripts: %s",
            ", ".join(missing),
            extra={"platform": str(platform) if platform else None, "missing_scripts": missing},
        )

    return full_paths
