"""Explicit description of the host the resolver runs on.

Discovery code never reads ``os.environ`` or the home directory directly;
it receives a :class:`HostContext`. Tests build one pointing at a temporary
directory tree.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

APP_DIR_NAME = "toolscout"
BUNDLED_RUNTIME_DIR = "bundled_runtime"

_ARCH_IDS = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def detect_os_id(system: Optional[str] = None) -> str:
    """Map a platform name onto the ids used in runtime artifact names."""
    system = (system or platform.system()).lower()
    if system.startswith("win"):
        return "win"
    if system == "darwin":
        return "darwin"
    return system


def detect_arch_id(machine: Optional[str] = None) -> str:
    machine = (machine or platform.machine()).lower()
    return _ARCH_IDS.get(machine, machine)


def default_app_data_dir(os_id: str, home: Optional[Path], environ: Mapping[str, str]) -> Path:
    """Per-user application data directory for ``os_id``."""
    base_home = home or Path.cwd()
    if os_id == "win":
        appdata = environ.get("APPDATA")
        base = Path(appdata) if appdata else base_home / "AppData" / "Roaming"
    elif os_id == "darwin":
        base = base_home / "Library" / "Application Support"
    else:
        xdg = environ.get("XDG_DATA_HOME")
        base = Path(xdg) if xdg else base_home / ".local" / "share"
    return base / APP_DIR_NAME


@dataclass(frozen=True)
class HostContext:
    """Home directory, environment, platform and app data location.

    Attributes:
        home: User home directory, or None when HOME is unset
        environ: Environment of the host process (read-only view)
        os_id: "darwin", "linux" or "win"
        arch_id: "x64", "arm64" or the raw lowercase machine name
        app_data_dir: Application private data directory
    """

    home: Optional[Path]
    environ: Mapping[str, str] = field(default_factory=dict)
    os_id: str = field(default_factory=detect_os_id)
    arch_id: str = field(default_factory=detect_arch_id)
    app_data_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.app_data_dir is None:
            object.__setattr__(
                self,
                "app_data_dir",
                default_app_data_dir(self.os_id, self.home, self.environ),
            )

    @classmethod
    def from_process(
        cls,
        app_data_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "HostContext":
        """Capture the current process's host description."""
        env = dict(os.environ if environ is None else environ)
        home_value = env.get("HOME") or env.get("USERPROFILE")
        home = Path(home_value) if home_value else None
        return cls(
            home=home,
            environ=env,
            os_id=detect_os_id(),
            arch_id=detect_arch_id(),
            app_data_dir=Path(app_data_dir) if app_data_dir else None,
        )

    @property
    def is_windows(self) -> bool:
        return self.os_id == "win"

    @property
    def search_path(self) -> str:
        return self.environ.get("PATH", "")

    @property
    def path_entries(self) -> List[str]:
        return [entry for entry in self.search_path.split(os.pathsep) if entry]

    @property
    def bundled_runtime_dir(self) -> Path:
        return Path(self.app_data_dir) / BUNDLED_RUNTIME_DIR

    def home_path(self, *parts: str) -> Optional[Path]:
        """Join ``parts`` onto the home directory, or None when HOME is unknown."""
        if self.home is None:
            return None
        return self.home.joinpath(*parts)
