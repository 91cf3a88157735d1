"""Data types for tool and runtime resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InstallationType(Enum):
    """How an installation came to be selected."""

    SYSTEM = "system"  # Found on the system by discovery
    CUSTOM = "custom"  # Path stored by the user
    BUNDLED = "bundled"  # Global install paired with the app's own runtime


@dataclass(frozen=True)
class InstallationCandidate:
    """A discovered, not-yet-ranked installation of the tool.

    Attributes:
        path: Path to the binary, or the bare command name for a PATH lookup
        version: Version reported by ``<path> --version`` (if available)
        source: Discovery label, e.g. "which", "homebrew", "nvm (v20.11.0)"
        installation_type: How the installation was obtained
    """

    path: str
    version: Optional[str]
    source: str
    installation_type: InstallationType = InstallationType.SYSTEM

    def is_bare_command(self, tool_name: str) -> bool:
        """True when ``path`` is just the command name, resolved through PATH at launch."""
        return self.path == tool_name

    def __repr__(self) -> str:
        version_str = f" v{self.version}" if self.version else ""
        return f"<InstallationCandidate{version_str} @ {self.path} ({self.source})>"


class RuntimeSource(Enum):
    """Which tier produced a runtime."""

    SYSTEM = "system"
    BUNDLED = "bundled"
    DOWNLOADED = "downloaded"


@dataclass(frozen=True)
class RuntimeDescriptor:
    """Outcome of runtime resolution. Not a live handle.

    Attributes:
        path: Absolute path to the runtime executable
        version: Runtime version without the leading "v" (if available)
        source: Tier that produced it
        is_bundled: True for the bundled and downloaded tiers
        origin: Discovery detail, e.g. "system" or "nvm (v20.11.0)"
    """

    path: str
    version: Optional[str]
    source: RuntimeSource
    is_bundled: bool
    origin: Optional[str] = None

    def __repr__(self) -> str:
        version_str = f" v{self.version}" if self.version else ""
        bundled = " (bundled)" if self.is_bundled else ""
        return f"<RuntimeDescriptor{version_str} @ {self.path}{bundled} ({self.source.value})>"
