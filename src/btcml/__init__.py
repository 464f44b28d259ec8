"""Top-level package for the btcml project."""

from .errors import (
    ConfigurationError,
    DataQualityWarning,
    DefinitionError,
    JoinIntegrityError,
    SchemaError,
)
from .paths import PROJECT_ROOT, get_data_dir, get_project_root

__all__ = [
    "ConfigurationError",
    "DataQualityWarning",
    "DefinitionError",
    "JoinIntegrityError",
    "SchemaError",
    "PROJECT_ROOT",
    "get_data_dir",
    "get_project_root",
]
