"""Configuration management for toolscout."""

from .hints import (
    TOOL_BINARY_PATH_KEY,
    TOOL_INSTALLATION_PREFERENCE_KEY,
    HintStore,
    MappingHintStore,
    PersistedHint,
    SqliteHintStore,
    read_persisted_hint,
)
from .parser import (
    ToolscoutConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "ToolscoutConfig",
    "load_config",
    "find_config_file",
    "HintStore",
    "MappingHintStore",
    "SqliteHintStore",
    "PersistedHint",
    "read_persisted_hint",
    "TOOL_BINARY_PATH_KEY",
    "TOOL_INSTALLATION_PREFERENCE_KEY",
]
