"""Integration tests for runtime download against a local HTTP server."""

import os
from dataclasses import replace

import pytest
from aiohttp import web
from aiohttp import test_utils

from toolscout.bootstrap.archive_installer import ArchiveInstaller
from toolscout.bootstrap.download import fetch_archive
from toolscout.bootstrap.runtime_resolver import RuntimeResolver
from toolscout.discovery.types import RuntimeSource
from toolscout.errors import RuntimeUnavailableError, TransportError
from toolscout.utils.process import run_command

from tests.helpers.fakes import build_tar_archive

pytestmark = pytest.mark.integration

ARTIFACT = "/v20.11.0/node-v20.11.0-linux-x64.tar.xz"


def node_dist_app(archive: bytes, hits: list) -> web.Application:
    async def artifact(request):
        hits.append(request.path)
        return web.Response(body=archive)

    async def unavailable(request):
        hits.append(request.path)
        return web.Response(status=503)

    app = web.Application()
    app.router.add_get(ARTIFACT, artifact)
    app.router.add_get("/broken/v20.11.0/node-v20.11.0-linux-x64.tar.xz", unavailable)
    return app


class TestFetchArchive:
    """Test the HTTP fetcher."""

    @pytest.mark.asyncio
    async def test_returns_body(self):
        hits = []
        async with test_utils.TestServer(node_dist_app(b"archive-bytes", hits)) as server:
            content = await fetch_archive(str(server.make_url(ARTIFACT)), timeout=10)

        assert content == b"archive-bytes"
        assert hits == [ARTIFACT]

    @pytest.mark.asyncio
    async def test_not_found_status(self):
        async with test_utils.TestServer(node_dist_app(b"", [])) as server:
            with pytest.raises(TransportError, match="HTTP 404") as exc_info:
                await fetch_archive(str(server.make_url("/v0.0.0/missing.tar.xz")))

        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        port = test_utils.unused_port()
        with pytest.raises(TransportError, match="Failed to download"):
            await fetch_archive(f"http://127.0.0.1:{port}/node.tar.xz", timeout=5)


@pytest.mark.skipif(os.name != "posix", reason="runs the installed runtime as a shell script")
class TestDownloadTier:
    """Test the download tier end to end."""

    @pytest.mark.asyncio
    async def test_downloads_installs_and_probes(self, host, runtime_spec, tmp_path):
        hits = []
        archive = build_tar_archive(payload=b"#!/bin/sh\necho v20.11.0\n")
        temp_root = tmp_path / "tmp"
        temp_root.mkdir()

        async with test_utils.TestServer(node_dist_app(archive, hits)) as server:
            spec = replace(runtime_spec, download_base_url=str(server.make_url("/")))
            resolver = RuntimeResolver(
                host,
                spec=spec,
                installer=ArchiveInstaller(temp_root=temp_root),
                runner=run_command,
                download_timeout=10,
            )
            runtime = await resolver.ensure_runtime()

        assert hits == [ARTIFACT]
        assert runtime.source == RuntimeSource.DOWNLOADED
        assert runtime.path == str(host.bundled_runtime_dir / "node")
        assert runtime.version == "20.11.0"
        assert list(temp_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_server_error_surfaces_as_runtime_unavailable(self, host, runtime_spec):
        async with test_utils.TestServer(node_dist_app(b"", [])) as server:
            spec = replace(runtime_spec, download_base_url=str(server.make_url("/broken")))
            resolver = RuntimeResolver(host, spec=spec, runner=run_command)

            with pytest.raises(RuntimeUnavailableError, match="HTTP 503"):
                await resolver.ensure_runtime()
