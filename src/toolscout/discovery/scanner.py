"""Candidate discovery for the CLI tool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import VersionParseError
from ..host import HostContext
from ..utils.process import CommandRunner, run_command
from ..versions import extract_version
from .specs import CLAUDE_TOOL, ToolSpec
from .types import InstallationCandidate, InstallationType

logger = logging.getLogger(__name__)


def dedupe_candidates(candidates: Iterable[InstallationCandidate]) -> List[InstallationCandidate]:
    """Keep the first candidate for each literal path string.

    Paths are not canonicalized: two spellings of the same file (e.g. a
    symlink and its target) stay distinct.
    """
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate.path in seen:
            continue
        seen.add(candidate.path)
        unique.append(candidate)
    return unique


def parse_lookup_output(output: str, tool_name: str) -> Optional[str]:
    """Extract a path from ``which`` output.

    Handles shells that report aliases, e.g. "claude: aliased to /path/to/claude".
    """
    text = output.strip()
    if not text:
        return None
    if text.startswith(f"{tool_name}:") and "aliased to" in text:
        target = text.split("aliased to", 1)[1].strip()
        return target or None
    # `where` on Windows prints every match, one per line
    return text.splitlines()[0].strip()


class CandidateScanner:
    """Finds every installation of the tool on the host.

    Strategies run in a fixed order (search-path lookup, version manager,
    static locations); ranking does not depend on that order.
    """

    def __init__(
        self,
        host: HostContext,
        spec: ToolSpec = CLAUDE_TOOL,
        runner: CommandRunner = run_command,
    ):
        """Initialize scanner.

        Args:
            host: Host description (home, environment, platform)
            spec: Tool locations to probe
            runner: Executes probe commands; injectable for tests
        """
        self.host = host
        self.spec = spec
        self.runner = runner

    def scan(self) -> List[InstallationCandidate]:
        """Run every strategy and return unique candidates."""
        logger.info("Discovering %s installations...", self.spec.name)

        candidates: List[InstallationCandidate] = []

        lookup = self.find_with_lookup()
        if lookup:
            candidates.append(lookup)
        candidates.extend(self.find_version_manager_installations())
        candidates.extend(self.find_standard_installations())

        unique = dedupe_candidates(candidates)
        for candidate in unique:
            logger.info("Found %s installation: %r", self.spec.name, candidate)
        return unique

    def find_with_lookup(self) -> Optional[InstallationCandidate]:
        """Ask the platform's command lookup (`which`/`where`) for the tool."""
        lookup_cmd = "where" if self.host.is_windows else "which"
        logger.debug("Trying '%s %s' to find binary...", lookup_cmd, self.spec.name)

        result = self.runner([lookup_cmd, self.spec.name], self.host.environ)
        if result is None or not result.ok:
            return None

        path = parse_lookup_output(result.stdout, self.spec.name)
        if not path:
            return None

        if not Path(path).exists():
            logger.warning("Path from '%s' does not exist: %s", lookup_cmd, path)
            return None

        logger.debug("'%s' found %s at: %s", lookup_cmd, self.spec.name, path)
        return InstallationCandidate(
            path=path,
            version=self.probe_version(path),
            source="which",
        )

    def find_version_manager_installations(self) -> List[InstallationCandidate]:
        """One candidate per version-manager runtime that has the tool installed."""
        root = self.host.home_path(self.spec.version_manager_root)
        if root is None or not root.is_dir():
            return []

        logger.debug("Checking %s directory: %s", self.spec.version_manager_label, root)

        installations = []
        try:
            entries = sorted(root.iterdir())
        except OSError as e:
            logger.warning("Cannot list %s: %s", root, e)
            return []

        for entry in entries:
            tool_path = entry / "bin" / self.spec.name
            if not entry.is_dir() or not tool_path.is_file():
                continue
            path_str = str(tool_path)
            logger.debug("Found %s in %s node %s: %s", self.spec.name, self.spec.version_manager_label, entry.name, path_str)
            installations.append(
                InstallationCandidate(
                    path=path_str,
                    version=self.probe_version(path_str),
                    source=f"{self.spec.version_manager_label} ({entry.name})",
                )
            )
        return installations

    def find_standard_installations(self) -> List[InstallationCandidate]:
        """Check the conventional install locations, then the bare command name."""
        locations = [(Path(loc.directory), loc.source) for loc in self.spec.system_locations]
        for loc in self.spec.home_locations:
            directory = self.host.home_path(loc.directory)
            if directory is not None:
                locations.append((directory, loc.source))

        installations = []
        for directory, source in locations:
            tool_path = directory / self.spec.name
            if not tool_path.is_file():
                continue
            path_str = str(tool_path)
            logger.debug("Found %s at standard path: %s (%s)", self.spec.name, path_str, source)
            installations.append(
                InstallationCandidate(
                    path=path_str,
                    version=self.probe_version(path_str),
                    source=source,
                )
            )

        bare = self._probe_bare_command()
        if bare:
            installations.append(bare)

        return installations

    def _probe_bare_command(self) -> Optional[InstallationCandidate]:
        result = self.runner([self.spec.name, "--version"], self.host.environ)
        if result is None or not result.ok:
            return None

        logger.debug("%s is available in PATH", self.spec.name)
        return InstallationCandidate(
            path=self.spec.name,
            version=self._version_from_output(result.stdout),
            source="PATH",
            installation_type=InstallationType.SYSTEM,
        )

    def probe_version(self, path: str) -> Optional[str]:
        """Run ``<path> --version``; None when it fails or prints no version."""
        result = self.runner([path, "--version"], self.host.environ)
        if result is None:
            logger.warning("Failed to get version for %s", path)
            return None
        if not result.ok:
            return None
        return self._version_from_output(result.stdout)

    @staticmethod
    def _version_from_output(output: str) -> Optional[str]:
        try:
            version = extract_version(output)
        except VersionParseError as e:
            logger.debug("%s", e)
            return None
        logger.debug("Extracted version: %s", version)
        return version
