"""Pytest configuration and fixtures for argonav tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from argonav.content_cache import ContentCache
from argonav.discovery import FileDiscovery
from argonav.search import SymbolIndexSearch
from argonav.workspace_cache import WorkspaceResultCache


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch):
    """Point the user config file at a throwaway location in every test."""
    home = tmp_path_factory.mktemp("argonav_home")
    monkeypatch.setattr("argonav.config.BASE_DIR", home)
    monkeypatch.setattr("argonav.config.CONFIG_FILE", home / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to the sample Argo project."""
    return Path(__file__).parent / "fixtures" / "argo_project"


@pytest.fixture
def argo_project(temp_dir: Path, sample_project_path: Path) -> Path:
    """Writable copy of the sample Argo project."""
    target = temp_dir / "argo_project"
    shutil.copytree(sample_project_path, target)
    return target


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def search() -> SymbolIndexSearch:
    """Search service with its own caches and no workspace cache."""
    return SymbolIndexSearch(discovery=FileDiscovery(), content_cache=ContentCache())


@pytest.fixture
def cached_search(clock: FakeClock) -> SymbolIndexSearch:
    """Search service with a workspace cache driven by the fake clock."""
    return SymbolIndexSearch(
        content_cache=ContentCache(clock=clock),
        workspace_cache=WorkspaceResultCache(clock=clock),
    )


def write(root: Path, relative: str, text: str) -> Path:
    """Write *text* to ``root/relative``, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
