"""Pytest configuration and fixtures for JobGraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from jobgraph.search import PythonSearch


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Keep every test away from the real ~/.jobgraph/config.toml."""
    base_dir = tmp_path / "jobgraph_home"
    monkeypatch.setattr("jobgraph.config_manager.BASE_DIR", base_dir)
    monkeypatch.setattr("jobgraph.config_manager.CONFIG_FILE", base_dir / "config.toml")
    return base_dir


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_app_path() -> Path:
    """Get path to the sample Ruby application."""
    return Path(__file__).parent / "fixtures" / "sample_app"


@pytest.fixture
def python_search() -> PythonSearch:
    return PythonSearch()


@pytest.fixture
def write_ruby(temp_dir: Path) -> Callable[[str, str], Path]:
    """Write a Ruby source file under the temporary directory."""
    def _write(relative: str, source: str) -> Path:
        path = temp_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source)
        return path
    return _write


@pytest.fixture
def mixed_namespace_source() -> str:
    """Job declared in one namespace, invoked from another."""
    return '''module A
  class FooJob < BaseJob
  end
end
class Caller
  def run
    FooJob.perform
  end
end
'''
