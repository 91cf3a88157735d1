"""Runtime bootstrap: resolve, download and install the runtime the tool needs."""

from .archive_installer import ArchiveFormat, ArchiveInstaller, TarExtractor, ZipExtractor
from .download import fetch_archive
from .runtime_resolver import (
    BlockingRuntimeResolver,
    RuntimeResolver,
    find_global_tool_with_bundled_runtime,
)

__all__ = [
    "ArchiveFormat",
    "ArchiveInstaller",
    "TarExtractor",
    "ZipExtractor",
    "fetch_archive",
    "RuntimeResolver",
    "BlockingRuntimeResolver",
    "find_global_tool_with_bundled_runtime",
]
