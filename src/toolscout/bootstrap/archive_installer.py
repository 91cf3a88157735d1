"""Runtime archive extraction and installation.

Downloaded runtime archives are unpacked into a throwaway directory, the
runtime binary is located inside, and only that binary is copied into the
bundled-runtime directory.
"""

from __future__ import annotations

import gzip
import io
import logging
import lzma
import os
import shutil
import stat
import tarfile
import tempfile
import zipfile
import zlib
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..errors import ExtractionError

logger = logging.getLogger(__name__)

# rwxr-xr-x: archives do not reliably carry the executable bit
EXECUTABLE_MODE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


def _top_level_dirs(root: Path):
    return sorted(entry for entry in root.iterdir() if entry.is_dir())


def _ensure_within(root: Path, member_name: str) -> Path:
    target = (root / member_name).resolve()
    if target != root and root not in target.parents:
        raise ExtractionError(f"Archive entry escapes extraction directory: {member_name}")
    return target


class TarExtractor:
    """tar.xz / tar.gz archives laid out as ``<dir>/bin/<binary>``."""

    def extract(self, data: bytes, dest: Path, binary_name: str) -> Path:
        raw = self._decompress(data)
        try:
            with tarfile.open(fileobj=io.BytesIO(raw), mode="r:") as archive:
                if hasattr(tarfile, "data_filter"):
                    archive.extractall(dest, filter="data")
                else:
                    root = dest.resolve()
                    for member in archive.getmembers():
                        _ensure_within(root, member.name)
                    archive.extractall(dest)
        except (tarfile.TarError, OSError) as e:
            raise ExtractionError(f"Failed to extract Node.js archive: {e}") from e

        for directory in _top_level_dirs(dest):
            candidate = directory / "bin" / binary_name
            if candidate.is_file():
                return candidate
        raise ExtractionError("Node.js binary not found in extracted archive")

    @staticmethod
    def _decompress(data: bytes) -> bytes:
        # xz first (what nodejs.org ships), then gzip on the same buffer
        try:
            return lzma.decompress(data, format=lzma.FORMAT_XZ)
        except lzma.LZMAError:
            logger.debug("Archive is not xz-compressed, trying gzip")
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise ExtractionError(f"Failed to extract Node.js archive: {e}") from e


class ZipExtractor:
    """zip archives laid out as ``<dir>/<binary>`` (Windows builds)."""

    def extract(self, data: bytes, dest: Path, binary_name: str) -> Path:
        root = dest.resolve()
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                for info in archive.infolist():
                    target = _ensure_within(root, info.filename)
                    if info.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with archive.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
        except (zipfile.BadZipFile, OSError) as e:
            raise ExtractionError(f"Failed to read zip archive: {e}") from e

        for directory in _top_level_dirs(dest):
            candidate = directory / binary_name
            if candidate.is_file():
                return candidate
        raise ExtractionError("Node.js binary not found in extracted zip archive")


class ArchiveFormat(Enum):
    """Supported runtime archive formats."""

    TAR = "tar"
    ZIP = "zip"

    @classmethod
    def from_filename(cls, name: str) -> "ArchiveFormat":
        lowered = name.lower()
        if lowered.endswith((".tar.xz", ".tar.gz", ".tgz")):
            return cls.TAR
        if lowered.endswith(".zip"):
            return cls.ZIP
        raise ExtractionError(f"Unsupported Node.js download format: {name}")

    @property
    def extractor(self) -> Union[TarExtractor, ZipExtractor]:
        return TarExtractor() if self is ArchiveFormat.TAR else ZipExtractor()


class ArchiveInstaller:
    """Installs a runtime binary from archive bytes.

    The destination is overwritten if it already exists; concurrent installers
    writing the same directory are not coordinated.
    """

    def __init__(self, temp_root: Optional[Path] = None, set_permissions: Optional[bool] = None):
        """Initialize installer.

        Args:
            temp_root: Parent for the temporary extraction directory (system temp if None)
            set_permissions: chmod the installed binary; defaults to True on POSIX
        """
        self.temp_root = temp_root
        self.set_permissions = os.name == "posix" if set_permissions is None else set_permissions

    def install(
        self,
        data: bytes,
        target_dir: Path,
        binary_name: str,
        fmt: ArchiveFormat,
    ) -> Path:
        """Extract ``binary_name`` from the archive into ``target_dir``.

        Returns:
            Path of the installed binary

        Raises:
            ExtractionError: If any step fails
        """
        logger.info("Extracting Node.js %s archive...", fmt.value)
        target_dir = Path(target_dir)

        try:
            with tempfile.TemporaryDirectory(prefix="node_extract", dir=self.temp_root) as tmp:
                extracted = fmt.extractor.extract(data, Path(tmp), binary_name)
                installed = self._install_binary(extracted, target_dir, binary_name)
        except OSError as e:
            # Creating or cleaning up the temporary directory failed
            raise ExtractionError(f"Failed to prepare extraction directory: {e}") from e

        logger.info("Node.js binary installed successfully at %s", installed)
        return installed

    def _install_binary(self, source: Path, target_dir: Path, binary_name: str) -> Path:
        dest = target_dir / binary_name
        partial = target_dir / f".{binary_name}.partial"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, partial)
            if self.set_permissions:
                os.chmod(partial, EXECUTABLE_MODE)
            os.replace(partial, dest)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise ExtractionError(f"Failed to install node binary: {e}") from e
        return dest
