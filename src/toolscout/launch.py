"""Launch environment for the resolved tool.

The tool is usually a script with a ``#!/usr/bin/env node`` shebang, so it
only starts if ``node`` is on its PATH. GUI applications inherit a minimal
PATH that misses Homebrew, nvm and friends; the builder puts those
directories back in front.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .discovery.specs import (
    CLAUDE_TOOL,
    HOME_SEARCH_DIRS,
    HOMEBREW_ARM_BIN,
    INHERITED_ENV_PREFIXES,
    INHERITED_ENV_VARS,
    SYSTEM_SEARCH_DIRS,
    VERSION_MANAGER_MARKER,
    ToolSpec,
)
from .discovery.types import RuntimeDescriptor
from .host import HostContext

logger = logging.getLogger(__name__)

PROXY_VARS = ("HTTP_PROXY", "HTTPS_PROXY")


def _split_path(value: str) -> List[str]:
    return [entry for entry in value.split(os.pathsep) if entry]


@dataclass(frozen=True)
class LaunchEnvironment:
    """Program plus the complete environment its process should get."""

    program: str
    env: Dict[str, str] = field(default_factory=dict)

    @property
    def path_entries(self) -> List[str]:
        return _split_path(self.env.get("PATH", ""))

    def command(self, *args: str) -> List[str]:
        return [self.program, *args]

    def popen_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``subprocess.Popen``/``asyncio.create_subprocess_exec``."""
        return {"env": dict(self.env)}


class CommandEnvironmentBuilder:
    """Builds launch environments from an allow-listed subset of the host environment."""

    def __init__(self, host: HostContext, tool_spec: ToolSpec = CLAUDE_TOOL):
        self.host = host
        self.tool_spec = tool_spec

    def build(self, program: str) -> LaunchEnvironment:
        """Environment for running ``program``.

        Only allow-listed variables are inherited. PATH is rebuilt with the
        conventional runtime directories in front of the inherited entries.
        """
        logger.info("Creating command for: %s", program)

        env = self.inherited_environment()
        for name in PROXY_VARS:
            if name in env:
                logger.debug("Command will use %s=%s", name, env[name])

        inherited_path = env.get("PATH", "")
        inherited_entries = _split_path(inherited_path)
        additions = self.search_path_additions(inherited_entries)

        if additions:
            logger.info("Enhanced PATH with Node.js directories: %s", additions)
        elif HOMEBREW_ARM_BIN not in inherited_entries:
            additions = [HOMEBREW_ARM_BIN]
            logger.info("Added %s to PATH", HOMEBREW_ARM_BIN)

        enhanced_path = os.pathsep.join(additions + inherited_entries)

        # A program installed under nvm needs its own node first, even if
        # another node appears earlier on PATH.
        if VERSION_MANAGER_MARKER in program.replace("\\", "/"):
            node_bin_dir = str(Path(program).parent)
            logger.debug("Adding specific NVM bin directory to PATH: %s", node_bin_dir)
            enhanced_path = os.pathsep.join([node_bin_dir, enhanced_path]) if enhanced_path else node_bin_dir

        env["PATH"] = enhanced_path
        return LaunchEnvironment(program=program, env=env)

    def build_with_runtime(self, program: str, runtime: RuntimeDescriptor) -> LaunchEnvironment:
        """Like :meth:`build`, with a bundled runtime's directory put first on PATH."""
        launch = self.build(program)
        if not runtime.is_bundled:
            return launch

        runtime_dir = str(Path(runtime.path).parent)
        env = dict(launch.env)
        current = env.get("PATH", "")
        env["PATH"] = os.pathsep.join([runtime_dir, current]) if current else runtime_dir
        logger.info("Using bundled Node.js runtime: %s", runtime.path)
        return LaunchEnvironment(program=program, env=env)

    def inherited_environment(self) -> Dict[str, str]:
        """The allow-listed part of the host environment."""
        env = {}
        for key, value in self.host.environ.items():
            if key in INHERITED_ENV_VARS or key.startswith(INHERITED_ENV_PREFIXES):
                env[key] = value
        return env

    def search_path_additions(self, inherited_entries: List[str]) -> List[str]:
        """Existing runtime directories missing from the inherited PATH, in priority order."""
        candidates = list(SYSTEM_SEARCH_DIRS)
        for relative in HOME_SEARCH_DIRS:
            directory = self.host.home_path(relative)
            if directory is not None:
                candidates.append(str(directory))
        candidates.extend(self._version_manager_bin_dirs())

        additions: List[str] = []
        for directory in candidates:
            if directory in inherited_entries or directory in additions:
                continue
            if Path(directory).is_dir():
                additions.append(directory)
        return additions

    def _version_manager_bin_dirs(self) -> List[str]:
        root = self.host.home_path(self.tool_spec.version_manager_root)
        if root is None or not root.is_dir():
            return []
        try:
            entries = sorted(root.iterdir())
        except OSError as e:
            logger.warning("Cannot list %s: %s", root, e)
            return []
        return [str(entry / "bin") for entry in entries if (entry / "bin").is_dir()]
