"""
Exercise catalog adapters.

Part of IRL-11: Exercise catalog lookup port
"""

from infrastructure.catalog.yaml_catalog import DEFAULT_CATALOG_PATH, YamlExerciseCatalog

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "YamlExerciseCatalog",
]
