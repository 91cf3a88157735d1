"""Runtime resolution: system, then bundled, then download.

:class:`RuntimeResolver` is asynchronous because the last tier downloads
the runtime. Callers that cannot await go through
:meth:`RuntimeResolver.blocking`, which runs the pipeline on its own event
loop in a dedicated thread.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Optional

from ..discovery.scanner import parse_lookup_output
from ..discovery.specs import CLAUDE_TOOL, NODE_RUNTIME, RuntimeSpec, ToolSpec
from ..discovery.types import RuntimeDescriptor, RuntimeSource
from ..errors import (
    ExtractionError,
    NotFoundError,
    RuntimeUnavailableError,
    ToolscoutError,
    VersionParseError,
)
from ..host import HostContext
from ..utils.process import CommandRunner, run_command
from ..versions import normalize_runtime_version
from .archive_installer import ArchiveFormat, ArchiveInstaller
from .download import ArchiveFetcher, fetch_archive

logger = logging.getLogger(__name__)

TIER_SYSTEM = "system"
TIER_BUNDLED = "bundled"
TIER_DOWNLOAD = "download"


class RuntimeResolver:
    """Secures a runtime for the tool.

    Tiers are tried in order and the first success wins:

    1. System: search-path lookup, well-known paths, version-manager installs
    2. Bundled: a runtime previously installed in the app data directory
    3. Download: fetch the pinned release and install it as the bundled runtime
    """

    def __init__(
        self,
        host: HostContext,
        spec: RuntimeSpec = NODE_RUNTIME,
        installer: Optional[ArchiveInstaller] = None,
        fetcher: ArchiveFetcher = fetch_archive,
        runner: CommandRunner = run_command,
        download_timeout: Optional[float] = None,
    ):
        self.host = host
        self.spec = spec
        self.installer = installer or ArchiveInstaller()
        self.fetcher = fetcher
        self.runner = runner
        self.download_timeout = download_timeout

    async def ensure_runtime(self, allow_download: bool = True) -> RuntimeDescriptor:
        """Return the first runtime any tier can provide.

        Args:
            allow_download: Whether the download tier may run

        Raises:
            RuntimeUnavailableError: If every tier failed. The message is the
                download tier's, the most actionable one.
        """
        logger.info("Ensuring %s runtime is available...", self.spec.display_name)
        tier_errors: Dict[str, ToolscoutError] = {}

        try:
            runtime = self.find_system_runtime()
            logger.info("Found system %s: %r", self.spec.display_name, runtime)
            return runtime
        except ToolscoutError as e:
            logger.debug("System tier failed: %s", e)
            tier_errors[TIER_SYSTEM] = e

        try:
            runtime = self.find_bundled_runtime()
            logger.info("Found bundled %s: %r", self.spec.display_name, runtime)
            return runtime
        except ToolscoutError as e:
            logger.debug("Bundled tier failed: %s", e)
            tier_errors[TIER_BUNDLED] = e

        if not allow_download:
            logger.warning("No %s runtime found and download is disabled", self.spec.display_name)
            raise RuntimeUnavailableError(
                f"{self.spec.display_name} runtime not available (download disabled)",
                tier_errors,
            )

        logger.info("No %s found, attempting to download...", self.spec.display_name)
        try:
            runtime = await self.download_and_install_runtime()
        except ToolscoutError as e:
            tier_errors[TIER_DOWNLOAD] = e
            prefix = f"Failed to download {self.spec.display_name}: "
            message = e.message if e.message.startswith(prefix) else prefix + e.message
            logger.error("%s", message)
            raise RuntimeUnavailableError(message, tier_errors) from e

        logger.info("Successfully downloaded and installed %s: %r", self.spec.display_name, runtime)
        return runtime

    def blocking(self) -> "BlockingRuntimeResolver":
        """Synchronous facade. Must be obtained outside any running event loop."""
        return BlockingRuntimeResolver(self)

    # Tier 1

    def find_system_runtime(self) -> RuntimeDescriptor:
        """Find a runtime installed on the system.

        Raises:
            NotFoundError: If no system runtime exists
        """
        logger.debug("Searching for system %s installation...", self.spec.display_name)
        binary_name = self.spec.binary_name(self.host.os_id)

        lookup_cmd = "where" if self.host.is_windows else "which"
        result = self.runner([lookup_cmd, binary_name], self.host.environ)
        if result is not None and result.ok:
            path = parse_lookup_output(result.stdout, binary_name)
            if path and Path(path).exists():
                return self._system_descriptor(path, "system")

        for path in self.spec.system_paths:
            if Path(path).exists():
                return self._system_descriptor(path, "system")

        root = self.host.home_path(self.spec.version_manager_root)
        if root is not None and root.is_dir():
            # Directory names sort roughly by version; newest first
            try:
                entries = sorted(root.iterdir(), key=lambda entry: entry.name, reverse=True)
            except OSError as e:
                logger.warning("Cannot list %s: %s", root, e)
                entries = []
            for entry in entries:
                runtime_path = entry / "bin" / binary_name
                if entry.is_dir() and runtime_path.exists():
                    return self._system_descriptor(
                        str(runtime_path),
                        f"{self.spec.version_manager_label} ({entry.name})",
                    )

        raise NotFoundError(f"No system {self.spec.display_name} installation found")

    def _system_descriptor(self, path: str, origin: str) -> RuntimeDescriptor:
        return RuntimeDescriptor(
            path=path,
            version=self.probe_version(path),
            source=RuntimeSource.SYSTEM,
            is_bundled=False,
            origin=origin,
        )

    # Tier 2

    def bundled_runtime_path(self) -> Path:
        return self.host.bundled_runtime_dir / self.spec.binary_name(self.host.os_id)

    def find_bundled_runtime(self) -> RuntimeDescriptor:
        """Find a runtime previously installed into the app data directory.

        Raises:
            NotFoundError: If there is none
        """
        logger.debug("Searching for bundled %s runtime...", self.spec.display_name)
        binary = self.bundled_runtime_path()
        if not binary.is_file():
            raise NotFoundError(f"No bundled {self.spec.display_name} runtime found")

        path = str(binary)
        return RuntimeDescriptor(
            path=path,
            version=self.probe_version(path),
            source=RuntimeSource.BUNDLED,
            is_bundled=True,
            origin="bundled",
        )

    # Tier 3

    async def download_and_install_runtime(self) -> RuntimeDescriptor:
        """Download the pinned runtime release and install it as the bundled runtime.

        Raises:
            UnsupportedPlatformError: If no artifact exists for this platform
            TransportError: If the download fails
            ExtractionError: If the archive cannot be installed
        """
        url, binary_name = self.spec.download_url(self.host.os_id, self.host.arch_id)
        fmt = ArchiveFormat.from_filename(url)

        bundled_dir = self.host.bundled_runtime_dir
        try:
            bundled_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(f"Failed to create bundled runtime directory: {e}") from e

        content = await self.fetcher(url, timeout=self.download_timeout)
        installed = await asyncio.to_thread(
            self.installer.install, content, bundled_dir, binary_name, fmt
        )

        path = str(installed)
        logger.info("Successfully installed bundled %s at: %s", self.spec.display_name, path)
        return RuntimeDescriptor(
            path=path,
            version=self.probe_version(path),
            source=RuntimeSource.DOWNLOADED,
            is_bundled=True,
            origin="downloaded",
        )

    def probe_version(self, path: str) -> Optional[str]:
        """``<runtime> --version`` without the leading "v"; None on any failure."""
        result = self.runner([path, "--version"], self.host.environ)
        if result is None or not result.ok:
            return None
        try:
            return normalize_runtime_version(result.stdout)
        except VersionParseError:
            return None


class BlockingRuntimeResolver:
    """Blocking entry point to :class:`RuntimeResolver`.

    Holding one is the capability to block: it can only be created on a
    thread without a running event loop. Each call runs the async pipeline
    with a fresh event loop on a dedicated worker thread, so it never nests
    inside another loop.
    """

    def __init__(self, resolver: RuntimeResolver):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "BlockingRuntimeResolver cannot be created inside a running event loop; "
                "await RuntimeResolver.ensure_runtime() instead"
            )
        self._resolver = resolver

    def ensure_runtime(self, allow_download: bool = True) -> RuntimeDescriptor:
        """Run :meth:`RuntimeResolver.ensure_runtime` to completion."""
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="toolscout-runtime") as pool:
            future = pool.submit(
                asyncio.run, self._resolver.ensure_runtime(allow_download=allow_download)
            )
            return future.result()


def find_global_tool_with_bundled_runtime(
    host: HostContext,
    spec: ToolSpec = CLAUDE_TOOL,
) -> str:
    """Find a global tool install to run with a secured (possibly bundled) runtime.

    Only checks that the file exists; the tool is not invoked.

    Raises:
        NotFoundError: If none of the global install locations has the tool
    """
    logger.info("Attempting to find global %s installation to use with bundled runtime...", spec.name)

    for location in spec.global_install_locations:
        if location.startswith("~/"):
            directory = host.home_path(location[2:])
            if directory is None:
                continue
        else:
            directory = Path(location)
        path = directory / spec.name
        if path.exists():
            logger.info("Found potential %s installation at: %s", spec.name, path)
            return str(path)

    raise NotFoundError(f"No global {spec.name} installation found to pair with bundled runtime")
