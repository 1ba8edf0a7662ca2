"""
Fixed names shared across trellis.

Paths here are only computed by trellis; the directories are created by the
tools that populate them.
"""

PROJECT_MANIFEST = "trellis.yaml"
PROJECT_LOCK_FILE = "trellis.lock"
STATE_DIR = ".trellis"
ENVIRONMENT_DIR = "env"

DEFAULT_FEATURE = "default"
PYPI_DEPENDENCIES = "pypi-dependencies"

DEFAULT_PYPI_INDEX_URL = "https://pypi.org/simple/"
