"""Unit tests for runtime archive extraction."""

import io
import os
import stat
import tarfile

import pytest

from toolscout.bootstrap.archive_installer import ArchiveFormat, ArchiveInstaller, TarExtractor, ZipExtractor
from toolscout.errors import ExtractionError

from tests.helpers.fakes import build_tar_archive, build_zip_archive

posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")


@pytest.fixture
def temp_root(tmp_path):
    root = tmp_path / "tmp"
    root.mkdir()
    return root


@pytest.fixture
def target_dir(tmp_path):
    return tmp_path / "appdata" / "bundled_runtime"


class TestArchiveFormat:
    """Test format detection from artifact names."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("node-v20.11.0-linux-x64.tar.xz", ArchiveFormat.TAR),
            ("node-v20.11.0-linux-x64.tar.gz", ArchiveFormat.TAR),
            ("node.tgz", ArchiveFormat.TAR),
            ("https://nodejs.org/dist/v20.11.0/node-v20.11.0-win-x64.zip", ArchiveFormat.ZIP),
        ],
    )
    def test_known_formats(self, name, expected):
        assert ArchiveFormat.from_filename(name) == expected

    def test_unknown_format(self):
        with pytest.raises(ExtractionError, match="Unsupported"):
            ArchiveFormat.from_filename("node-v20.11.0.pkg")

    def test_extractor_dispatch(self):
        assert isinstance(ArchiveFormat.TAR.extractor, TarExtractor)
        assert isinstance(ArchiveFormat.ZIP.extractor, ZipExtractor)


class TestTarInstall:
    """Test installing from tar archives."""

    @posix_only
    def test_xz_archive(self, temp_root, target_dir):
        data = build_tar_archive(compression="xz")

        installed = ArchiveInstaller(temp_root=temp_root).install(data, target_dir, "node", ArchiveFormat.TAR)

        assert installed == target_dir / "node"
        assert installed.read_bytes() == b"#!/bin/sh\necho v20.11.0\n"
        assert stat.S_IMODE(installed.stat().st_mode) == 0o755

    def test_gzip_archive_with_tar_xz_name(self, temp_root, target_dir):
        """gzip content is accepted even when the format says tar."""
        data = build_tar_archive(compression="gz")

        installed = ArchiveInstaller(temp_root=temp_root).install(data, target_dir, "node", ArchiveFormat.TAR)

        assert installed.is_file()

    def test_only_the_binary_is_installed(self, temp_root, target_dir):
        ArchiveInstaller(temp_root=temp_root).install(build_tar_archive(), target_dir, "node", ArchiveFormat.TAR)
        assert sorted(p.name for p in target_dir.iterdir()) == ["node"]

    def test_overwrites_existing_binary(self, temp_root, target_dir):
        target_dir.mkdir(parents=True)
        (target_dir / "node").write_bytes(b"old")

        ArchiveInstaller(temp_root=temp_root).install(build_tar_archive(), target_dir, "node", ArchiveFormat.TAR)

        assert (target_dir / "node").read_bytes() != b"old"

    def test_missing_temp_root(self, tmp_path, target_dir):
        """A temporary directory that cannot be created is an extraction failure."""
        installer = ArchiveInstaller(temp_root=tmp_path / "missing")

        with pytest.raises(ExtractionError, match="extraction directory"):
            installer.install(build_tar_archive(), target_dir, "node", ArchiveFormat.TAR)

        assert not (target_dir / "node").exists()

    def test_temporary_directory_removed_on_success(self, temp_root, target_dir):
        ArchiveInstaller(temp_root=temp_root).install(build_tar_archive(), target_dir, "node", ArchiveFormat.TAR)
        assert list(temp_root.iterdir()) == []

    def test_corrupted_bytes(self, temp_root, target_dir):
        with pytest.raises(ExtractionError):
            ArchiveInstaller(temp_root=temp_root).install(
                b"definitely not an archive", target_dir, "node", ArchiveFormat.TAR
            )
        assert list(temp_root.iterdir()) == []
        assert not (target_dir / "node").exists()

    def test_binary_missing_from_archive(self, temp_root, target_dir):
        data = build_tar_archive(binary_name="npm")
        with pytest.raises(ExtractionError, match="not found"):
            ArchiveInstaller(temp_root=temp_root).install(data, target_dir, "node", ArchiveFormat.TAR)
        assert list(temp_root.iterdir()) == []

    def test_path_traversal_rejected(self, temp_root, target_dir, tmp_path):
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            payload = b"escape"
            info = tarfile.TarInfo("../../escaped")
            info.size = len(payload)
            archive.addfile(info, io.BytesIO(payload))

        with pytest.raises(ExtractionError):
            ArchiveInstaller(temp_root=temp_root).install(buffer.getvalue(), target_dir, "node", ArchiveFormat.TAR)
        assert not (tmp_path / "escaped").exists()


class TestZipInstall:
    """Test installing from zip archives."""

    def test_zip_archive(self, temp_root, target_dir):
        data = build_zip_archive()

        installed = ArchiveInstaller(temp_root=temp_root, set_permissions=False).install(
            data, target_dir, "node.exe", ArchiveFormat.ZIP
        )

        assert installed == target_dir / "node.exe"
        assert installed.read_bytes() == b"MZ fake node"
        assert list(temp_root.iterdir()) == []

    @posix_only
    def test_zip_binary_made_executable(self, temp_root, target_dir):
        data = build_zip_archive(top_dir="node-v20.11.0-linux-x64", binary_name="node")

        installed = ArchiveInstaller(temp_root=temp_root).install(data, target_dir, "node", ArchiveFormat.ZIP)

        assert stat.S_IMODE(installed.stat().st_mode) == 0o755

    def test_bad_zip(self, temp_root, target_dir):
        with pytest.raises(ExtractionError, match="zip"):
            ArchiveInstaller(temp_root=temp_root).install(b"PK nope", target_dir, "node.exe", ArchiveFormat.ZIP)
        assert list(temp_root.iterdir()) == []

    def test_binary_missing_from_zip(self, temp_root, target_dir):
        data = build_zip_archive(binary_name="npm.cmd")
        with pytest.raises(ExtractionError, match="not found"):
            ArchiveInstaller(temp_root=temp_root).install(data, target_dir, "node.exe", ArchiveFormat.ZIP)
