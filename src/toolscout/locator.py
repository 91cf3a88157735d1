"""Top-level tool resolution.

Order of resolution:

1. A persisted path the user chose earlier, if it still exists
2. The best installation found by scanning the system
3. With no installation found: secure a runtime (system, bundled or
   downloaded) and pair it with a global install of the tool
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .bootstrap.runtime_resolver import RuntimeResolver, find_global_tool_with_bundled_runtime
from .config.hints import HintStore, SqliteHintStore, read_persisted_hint
from .config.parser import ToolscoutConfig
from .discovery.ranking import InstallationRanker
from .discovery.scanner import CandidateScanner
from .discovery.specs import ToolSpec
from .discovery.types import InstallationCandidate, InstallationType, RuntimeDescriptor
from .errors import NotFoundError, ToolscoutError
from .host import HostContext
from .launch import CommandEnvironmentBuilder, LaunchEnvironment

logger = logging.getLogger(__name__)

TOOL_NOT_FOUND = "Claude Code not found"


class ToolLocator:
    """Resolves the tool binary for a host.

    Every call re-scans; nothing is cached between calls.
    """

    def __init__(
        self,
        config: Optional[ToolscoutConfig] = None,
        host: Optional[HostContext] = None,
        hints: Optional[HintStore] = None,
        scanner: Optional[CandidateScanner] = None,
        resolver: Optional[RuntimeResolver] = None,
        tool_spec: Optional[ToolSpec] = None,
    ):
        """Initialize locator.

        Args:
            config: Configuration (defaults if None)
            host: Host description (captured from the process if None)
            hints: Persisted hint store (the SQLite settings DB in the app data dir if None)
            scanner: Candidate scanner (built from config if None)
            resolver: Runtime resolver (built from config if None)
            tool_spec: Where to look for the tool (the scanner's spec, else derived from config)
        """
        self.config = config or ToolscoutConfig()
        self.host = host or HostContext.from_process(app_data_dir=self.config.paths.app_data_dir)
        if tool_spec is None:
            tool_spec = scanner.spec if scanner is not None else self.config.tool_spec()
        self.tool_spec = tool_spec
        self.hints = hints if hints is not None else SqliteHintStore(self.config.hint_db_path(self.host))
        self.scanner = scanner or CandidateScanner(self.host, self.tool_spec)
        self.resolver = resolver or RuntimeResolver(
            self.host,
            self.config.runtime_spec(),
            download_timeout=self.config.runtime.download_timeout_s,
        )
        self.ranker = InstallationRanker(self.tool_spec.name)
        self.environment_builder = CommandEnvironmentBuilder(self.host, self.tool_spec)

    def find_tool_binary(self) -> str:
        """Path of the tool to launch.

        Raises:
            NotFoundError: If no installation exists and none can be paired
                with a runtime
        """
        return self.resolve().path

    def resolve(self) -> InstallationCandidate:
        """Blocking resolution. Must not be called from a running event loop."""
        logger.info("Searching for %s binary...", self.tool_spec.name)

        hinted = self._from_hint()
        if hinted:
            return hinted

        best = self.ranker.select_best(self.scanner.scan())
        if best:
            return best

        logger.info("No system %s installations found, attempting to use bundled runtime", self.tool_spec.name)
        try:
            runtime = self.resolver.blocking().ensure_runtime(
                allow_download=self.config.runtime.auto_download
            )
        except ToolscoutError as e:
            logger.warning("Failed to ensure Node.js runtime: %s", e)
            raise self._not_found(e) from e
        return self._pair_with_runtime(runtime)

    async def resolve_async(self) -> InstallationCandidate:
        """Same as :meth:`resolve`, for callers already inside an event loop."""
        logger.info("Searching for %s binary...", self.tool_spec.name)

        hinted = await asyncio.to_thread(self._from_hint)
        if hinted:
            return hinted

        candidates = await asyncio.to_thread(self.scanner.scan)
        best = self.ranker.select_best(candidates)
        if best:
            return best

        logger.info("No system %s installations found, attempting to use bundled runtime", self.tool_spec.name)
        try:
            runtime = await self.resolver.ensure_runtime(
                allow_download=self.config.runtime.auto_download
            )
        except ToolscoutError as e:
            logger.warning("Failed to ensure Node.js runtime: %s", e)
            raise self._not_found(e) from e
        return self._pair_with_runtime(runtime)

    def discover_installations(self) -> List[InstallationCandidate]:
        """Every installation on the system, best first (for a version picker)."""
        logger.info("Discovering all %s installations...", self.tool_spec.name)
        return self.ranker.discover_all_sorted(self.scanner.scan())

    def launch_environment(
        self,
        program: Optional[str] = None,
        runtime: Optional[RuntimeDescriptor] = None,
    ) -> LaunchEnvironment:
        """Launch environment for ``program`` (the resolved tool if None)."""
        program = program or self.find_tool_binary()
        if runtime is not None:
            return self.environment_builder.build_with_runtime(program, runtime)
        return self.environment_builder.build(program)

    def _from_hint(self) -> Optional[InstallationCandidate]:
        hint = read_persisted_hint(self.hints)
        if hint is None:
            return None

        if hint.stored_path:
            logger.info("Found stored %s path: %s", self.tool_spec.name, hint.stored_path)
            usable = hint.usable_path()
            if usable:
                return InstallationCandidate(
                    path=usable,
                    version=None,
                    source="stored",
                    installation_type=InstallationType.CUSTOM,
                )
            logger.warning("Stored %s path no longer exists: %s", self.tool_spec.name, hint.stored_path)

        logger.info("User preference for %s installation: %s", self.tool_spec.name, hint.preference)
        return None

    def _pair_with_runtime(self, runtime: RuntimeDescriptor) -> InstallationCandidate:
        logger.info("Node.js runtime available: %r", runtime)
        try:
            path = find_global_tool_with_bundled_runtime(self.host, self.tool_spec)
        except NotFoundError as e:
            raise self._not_found(e) from e
        return InstallationCandidate(
            path=path,
            version=None,
            source="global",
            installation_type=InstallationType.BUNDLED,
        )

    def _not_found(self, cause: ToolscoutError) -> NotFoundError:
        logger.error(
            "Could not find %s binary in any location (%s)", self.tool_spec.name, cause.message
        )
        return NotFoundError(TOOL_NOT_FOUND)


def find_tool_binary(config: Optional[ToolscoutConfig] = None, host: Optional[HostContext] = None) -> str:
    """Resolve the tool path with default collaborators."""
    return ToolLocator(config=config, host=host).find_tool_binary()


def discover_tool_installations(
    config: Optional[ToolscoutConfig] = None, host: Optional[HostContext] = None
) -> List[InstallationCandidate]:
    """All installations, best first, with default collaborators."""
    return ToolLocator(config=config, host=host).discover_installations()

