"""共通フィクスチャ。

- 乱数シード固定
- 小さなコンテナ/ハーネスと、エラーチャネルの記録係
- よく使うスケッチソース
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pytest

from api.harness import SketchHarness
from common import settings as settings_mod
from engine.core.container import ViewContainer
from tests._utils.sketches import ErrorLog


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def container() -> ViewContainer:
    return ViewContainer(64, 48)


@pytest.fixture()
def error_log() -> ErrorLog:
    return ErrorLog()


@pytest.fixture()
def harness(container: ViewContainer, error_log: ErrorLog) -> Iterator[SketchHarness]:
    h = SketchHarness(container, error_log, guard_frames=True, coalesce_resize=False, seed=7)
    yield h
    h.close()


@pytest.fixture()
def env_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """`CANVASAI_*` を差し替えて `reload_from_env()` するテスト用。終了時に既定へ戻す。"""
    yield monkeypatch
    monkeypatch.undo()
    settings_mod.reload_from_env()
