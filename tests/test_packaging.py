"""Tests for the distribution metadata."""

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def test_project_metadata():
    project = tomllib.loads(PYPROJECT.read_text())["project"]
    assert project["name"] == "chat-stats"
    assert "readme" not in project
    assert any(dep.startswith("python-dateutil") for dep in project["dependencies"])
