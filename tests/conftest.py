"""Shared test fixtures for embedgen."""

from pathlib import Path

import pytest

from embedgen.config import Settings

FIXTURES = Path(__file__).parent / "fixtures"

HOST_LINES = [f"line {n}\n" for n in range(1, 11)]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in ("GOFILE", "GOLINE", "EMBEDGEN_WORKDIR", "EMBEDGEN_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return Settings(formatter=[])


@pytest.fixture
def host(tmp_path):
    path = tmp_path / "host.go"
    path.write_text("".join(HOST_LINES))
    return path


@pytest.fixture
def workdir(tmp_path):
    """A working directory with formatting disabled."""
    (tmp_path / "embedgen.yaml").write_text("formatter: []\n")
    return tmp_path
