from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

REPO_ROOT = Path(__file__).resolve().parents[2]


def _project() -> dict:
    with (REPO_ROOT / "pyproject.toml").open("rb") as f:
        return tomllib.load(f)["project"]


@pytest.mark.integration
def test_project_metadata_has_no_readme_field():
    # パッケージ用 README は持たない（設計文書を long_description に流用しない）
    assert "readme" not in _project()


@pytest.mark.integration
def test_runtime_dependencies_are_declared():
    names = {d.split(">")[0].split("=")[0].strip().lower() for d in _project()["dependencies"]}
    assert {"numpy", "pyglet", "moderngl", "pyyaml"} <= names
