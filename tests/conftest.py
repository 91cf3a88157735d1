"""Pytest configuration and shared fixtures."""

from dataclasses import replace
from pathlib import Path

import pytest

from toolscout.discovery.specs import CLAUDE_TOOL, NODE_RUNTIME, InstallLocation, RuntimeSpec, ToolSpec
from toolscout.host import HostContext

from tests.helpers.fakes import FakeRunner


@pytest.fixture
def fake_home(tmp_path: Path) -> Path:
    """An empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def system_root(tmp_path: Path) -> Path:
    """Stand-in for "/" so system locations can be populated by tests."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def host(tmp_path: Path, fake_home: Path) -> HostContext:
    """Linux x64 host with an isolated home, environment and app data dir."""
    return HostContext(
        home=fake_home,
        environ={"HOME": str(fake_home), "PATH": "", "USER": "tester"},
        os_id="linux",
        arch_id="x64",
        app_data_dir=tmp_path / "appdata",
    )


@pytest.fixture
def tool_spec(system_root: Path) -> ToolSpec:
    """The Claude tool spec with system locations moved under ``system_root``."""
    return replace(
        CLAUDE_TOOL,
        system_locations=[
            InstallLocation(str(system_root / loc.directory.lstrip("/")), loc.source)
            for loc in CLAUDE_TOOL.system_locations
        ],
        global_install_locations=[
            loc if loc.startswith("~/") else str(system_root / loc.lstrip("/"))
            for loc in CLAUDE_TOOL.global_install_locations
        ],
    )


@pytest.fixture
def runtime_spec(system_root: Path) -> RuntimeSpec:
    """The Node.js runtime spec with system paths moved under ``system_root``."""
    return replace(
        NODE_RUNTIME,
        system_paths=[str(system_root / path.lstrip("/")) for path in NODE_RUNTIME.system_paths],
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
