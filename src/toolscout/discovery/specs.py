"""Declarative descriptions of the tool and the runtime.

This is DATA, not code. Install locations, source labels, the pinned runtime
release and the launch search path all live here. The lists mirror where
people actually install these binaries; keep their order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..errors import UnsupportedPlatformError


@dataclass(frozen=True)
class InstallLocation:
    """A directory that may contain the tool, plus the source label it reports."""

    directory: str
    source: str


@dataclass(frozen=True)
class ToolSpec:
    """Where to look for the CLI tool."""

    name: str
    # Absolute directories
    system_locations: List[InstallLocation]
    # Directories relative to the home directory
    home_locations: List[InstallLocation]
    # Checked (presence only) once a runtime has been secured.
    # Entries starting with "~/" are home-relative.
    global_install_locations: List[str]
    # Home-relative root holding one subdirectory per runtime version
    version_manager_root: str = ".nvm/versions/node"
    version_manager_label: str = "nvm"


@dataclass(frozen=True)
class RuntimeSpec:
    """How to find, and if needed download, the runtime."""

    display_name: str
    executable_name: str
    windows_executable_name: str
    system_paths: List[str]
    version_manager_root: str
    version_manager_label: str
    release_version: str
    download_base_url: str
    # (os_id, arch_id) -> artifact name template, "{version}" is substituted
    artifacts: Dict[Tuple[str, str], str] = field(default_factory=dict)

    def binary_name(self, os_id: str) -> str:
        return self.windows_executable_name if os_id == "win" else self.executable_name

    def download_url(self, os_id: str, arch_id: str) -> Tuple[str, str]:
        """Artifact URL and binary name for a platform.

        Raises:
            UnsupportedPlatformError: If no artifact is published for the platform
        """
        template = self.artifacts.get((os_id, arch_id))
        if template is None:
            raise UnsupportedPlatformError(
                f"Unsupported platform for {self.display_name} download: {os_id}-{arch_id}"
            )
        artifact = template.format(version=self.release_version)
        url = f"{self.download_base_url.rstrip('/')}/{self.release_version}/{artifact}"
        return url, self.binary_name(os_id)


CLAUDE_TOOL = ToolSpec(
    name="claude",
    system_locations=[
        InstallLocation("/usr/local/bin", "system"),
        InstallLocation("/opt/homebrew/bin", "homebrew"),
        InstallLocation("/usr/bin", "system"),
        InstallLocation("/bin", "system"),
    ],
    home_locations=[
        InstallLocation(".claude/local", "claude-local"),
        InstallLocation(".local/bin", "local-bin"),
        InstallLocation(".npm-global/bin", "npm-global"),
        InstallLocation(".yarn/bin", "yarn"),
        InstallLocation(".bun/bin", "bun"),
        InstallLocation("bin", "home-bin"),
        InstallLocation("node_modules/.bin", "node-modules"),
        InstallLocation(".config/yarn/global/node_modules/.bin", "yarn-global"),
    ],
    global_install_locations=[
        "~/.npm-global/bin",
        "~/.yarn/bin",
        "~/.local/bin",
        "/usr/local/bin",
        "/opt/homebrew/bin",
    ],
)


NODE_RUNTIME = RuntimeSpec(
    display_name="Node.js",
    executable_name="node",
    windows_executable_name="node.exe",
    system_paths=[
        "/usr/bin/node",
        "/usr/local/bin/node",
        "/opt/homebrew/bin/node",
        "/bin/node",
    ],
    version_manager_root=".nvm/versions/node",
    version_manager_label="nvm",
    release_version="v20.11.0",  # LTS
    download_base_url="https://nodejs.org/dist",
    artifacts={
        ("darwin", "x64"): "node-{version}-darwin-x64.tar.xz",
        ("darwin", "arm64"): "node-{version}-darwin-arm64.tar.xz",
        ("linux", "x64"): "node-{version}-linux-x64.tar.xz",
        ("linux", "arm64"): "node-{version}-linux-arm64.tar.xz",
        ("win", "x64"): "node-{version}-win-x64.zip",
    },
)


# Source label -> rank, lower is preferred. Only breaks ties between
# installations of equal (or unknown) version.
SOURCE_PREFERENCE: Dict[str, int] = {
    "which": 1,
    "homebrew": 2,
    "system": 3,
    # "nvm (<version dir>)" labels are matched by prefix, rank 4
    "local-bin": 5,
    "claude-local": 6,
    "npm-global": 7,
    "yarn": 8,
    "yarn-global": 8,
    "bun": 9,
    "node-modules": 10,
    "home-bin": 11,
    "PATH": 12,
}
NVM_SOURCE_RANK = 4
UNKNOWN_SOURCE_RANK = 13


def source_preference(source: str) -> int:
    """Rank of a source label; unknown labels rank last."""
    if source in SOURCE_PREFERENCE:
        return SOURCE_PREFERENCE[source]
    if source.startswith("nvm"):
        return NVM_SOURCE_RANK
    return UNKNOWN_SOURCE_RANK


# Launch environment

INHERITED_ENV_VARS = frozenset(
    {
        "PATH",
        "HOME",
        "USER",
        "SHELL",
        "LANG",
        "LC_ALL",
        "NODE_PATH",
        "NVM_DIR",
        "NVM_BIN",
        "HOMEBREW_PREFIX",
        "HOMEBREW_CELLAR",
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "NO_PROXY",
        "ALL_PROXY",
    }
)
INHERITED_ENV_PREFIXES = ("LC_",)

# /opt/homebrew/bin (Homebrew on Apple Silicon) must come first
SYSTEM_SEARCH_DIRS = [
    "/opt/homebrew/bin",
    "/usr/local/bin",
    "/usr/bin",
    "/bin",
]
HOMEBREW_ARM_BIN = SYSTEM_SEARCH_DIRS[0]

HOME_SEARCH_DIRS = [
    ".nvm/versions/node/v20.11.0/bin",
    ".nvm/versions/node/v18.19.0/bin",
    ".nvm/current/bin",
    ".npm-global/bin",
    ".yarn/bin",
    ".bun/bin",
    ".local/bin",
    "bin",
]

# A program whose path contains this is run from a version-manager install
VERSION_MANAGER_MARKER = "/.nvm/versions/node/"
