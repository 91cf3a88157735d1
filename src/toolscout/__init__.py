"""Locate the Claude CLI and the Node.js runtime it depends on."""

from .bootstrap import ArchiveFormat, ArchiveInstaller, BlockingRuntimeResolver, RuntimeResolver
from .config import ToolscoutConfig, load_config
from .discovery import (
    CandidateScanner,
    InstallationCandidate,
    InstallationRanker,
    InstallationType,
    RuntimeDescriptor,
    RuntimeSource,
)
from .errors import (
    ExtractionError,
    NotFoundError,
    RuntimeUnavailableError,
    ToolscoutError,
    TransportError,
    VersionParseError,
)
from .host import HostContext
from .launch import CommandEnvironmentBuilder, LaunchEnvironment
from .locator import ToolLocator, discover_tool_installations, find_tool_binary
from .versions import Ordering, compare_versions

__version__ = "0.1.0"

__all__ = [
    "ToolLocator",
    "find_tool_binary",
    "discover_tool_installations",
    "HostContext",
    "ToolscoutConfig",
    "load_config",
    "CandidateScanner",
    "InstallationRanker",
    "InstallationCandidate",
    "InstallationType",
    "RuntimeDescriptor",
    "RuntimeSource",
    "RuntimeResolver",
    "BlockingRuntimeResolver",
    "ArchiveFormat",
    "ArchiveInstaller",
    "CommandEnvironmentBuilder",
    "LaunchEnvironment",
    "compare_versions",
    "Ordering",
    "ToolscoutError",
    "NotFoundError",
    "RuntimeUnavailableError",
    "ExtractionError",
    "TransportError",
    "VersionParseError",
]
