"""
Central configuration for data paths and logging.

The criterion catalog and category weight tables ship as YAML inside the
package (media_matrix/data/). Override them via environment variables:
  - MEDIA_MATRIX_CATALOG (default: bundled criteria_catalog.yaml)
  - MEDIA_MATRIX_WEIGHTS (default: bundled category_weights.yaml)
  - MEDIA_MATRIX_LOG_LEVEL (default: INFO)
  - MEDIA_MATRIX_LOG_DIR (default: ./logs)
"""

import os
from pathlib import Path


def get_data_dir() -> Path:
    """Directory holding the bundled YAML tables."""
    return Path(__file__).parent / "data"


def get_catalog_path() -> Path:
    """
    Get the criterion catalog path.

    Uses MEDIA_MATRIX_CATALOG if set, otherwise the bundled catalog.

    Returns:
        Path to the catalog YAML file
    """
    env_path = os.environ.get("MEDIA_MATRIX_CATALOG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return get_data_dir() / "criteria_catalog.yaml"


def get_weights_path() -> Path:
    """Get the category weight tables path (MEDIA_MATRIX_WEIGHTS or bundled)."""
    env_path = os.environ.get("MEDIA_MATRIX_WEIGHTS")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return get_data_dir() / "category_weights.yaml"


def get_log_level() -> str:
    return os.environ.get("MEDIA_MATRIX_LOG_LEVEL", "INFO").upper()


def get_log_dir() -> Path:
    env_path = os.environ.get("MEDIA_MATRIX_LOG_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.cwd() / "logs"
