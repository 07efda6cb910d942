"""
どこで: `api.harness`（実行ハーネス）。
何を: スケッチソース文字列とコンテナから稼働中の `SketchInstance` を作り、ソース変更ごとに作り直す
      `SketchHarness`。コンパイル/構築/フレーム中の例外は `SketchError` としてエラーチャネルへ 1 回だけ届ける。
なぜ: 生成コードのライフサイクル上書き（setup/draw/入力）とホスト側のサーフェス管理を分離し、
      失敗しても中途半端なインスタンスを残さないため。

状態遷移:
    Empty --mount(src)--> Running --mount(src')--> Running（旧インスタンスを先に撤去）
    Running --mount("") / unmount--> Empty
    構築失敗 --> Empty + エラー通知

使用例:
    container = ViewContainer(640, 480)
    harness = SketchHarness(container, on_sketch_error=lambda e: print(e.describe()))
    harness.mount(source)
    harness.tick(1 / 60)

スケジューリング:
- `mount()` は同期で旧インスタンスを撤去しコンテナを空にしたうえで、構築を `scheduler` に委ねる。
  既定は即時実行。ライブランナーは `pyglet.clock.schedule_once` 相当を渡す。
- 構築待ちの間に再度 `mount()`/`unmount()` された場合、古い構築要求は世代番号で破棄される。
"""

from __future__ import annotations

import logging
from typing import Callable

from engine.core.container import Container
from engine.core.events import InputEvent
from engine.core.surface import Surface, SurfaceDimensions
from engine.core.tickable import Tickable
from engine.sandbox.binding import SketchBinding, SurfaceGate, callbacks_of
from engine.sandbox.compiler import SketchBody, compile_sketch
from engine.sandbox.errors import ConstructionError, RuntimeFrameError, SketchError
from engine.sandbox.instance import SketchInstance

from .resize import ResizeCoordinator, Scheduler

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[SketchError], None]


def _run_now(fn: Callable[[], None]) -> None:
    fn()


class SketchHarness(Tickable):
    """スケッチを 1 つだけ稼働させる実行ハーネス。

    Parameters
    ----------
    container : Container
        サーフェスを貼り付ける表示領域（ハーネスが独占）。
    on_sketch_error : Callable[[SketchError], None] | None
        エラーチャネル。失敗 1 回につき 1 回呼ばれる。後から属性として差し替えてもよい。
    scheduler : Callable[[Callable[[], None]], None] | None
        構築の実行タイミングを決める関数。None で即時。
    guard_frames : bool | None
        True でフレーム/入力コールバックの例外を捕捉し、インスタンスを撤去してエラー通知する。
        False なら例外は `tick()`/`dispatch()` の呼び出し元へ伝播する。None で設定値。
    coalesce_resize : bool | None
        リサイズ通知のバーストをまとめるか。None で設定値（`scheduler` 未指定時は常に同期）。
    max_source_bytes : int | None
        ソースサイズ上限。None で設定値。
    seed : int | None
        `p.random()` の乱数シード（テスト用）。
    """

    def __init__(
        self,
        container: Container,
        on_sketch_error: ErrorCallback | None = None,
        *,
        scheduler: Scheduler | None = None,
        guard_frames: bool | None = None,
        coalesce_resize: bool | None = None,
        max_source_bytes: int | None = None,
        seed: int | None = None,
    ):
        from common.settings import get as _get_settings

        settings = _get_settings()
        self._container = container
        self.on_sketch_error = on_sketch_error
        self._schedule: Scheduler = scheduler or _run_now
        self._guard_frames = settings.GUARD_FRAMES if guard_frames is None else bool(guard_frames)
        self._max_source_bytes = (
            settings.MAX_SOURCE_BYTES if max_source_bytes is None else int(max_source_bytes)
        )
        self._seed = seed
        coalesce = settings.COALESCE_RESIZE if coalesce_resize is None else bool(coalesce_resize)
        self._resize = ResizeCoordinator(container, coalesce=coalesce, scheduler=scheduler)
        self._instance: SketchInstance | None = None
        self._generation = 0
        self._closed = False

    # ------------------------------------------------------------------ #
    # 状態                                                                #
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> str:
        return "running" if self._instance is not None else "empty"

    @property
    def instance(self) -> SketchInstance | None:
        return self._instance

    @property
    def surface(self) -> Surface | None:
        return None if self._instance is None else self._instance.surface

    @property
    def container(self) -> Container:
        return self._container

    @property
    def resize_coordinator(self) -> ResizeCoordinator:
        return self._resize

    # ------------------------------------------------------------------ #
    # 公開操作                                                            #
    # ------------------------------------------------------------------ #
    def mount(self, source: str | None) -> None:
        """旧インスタンスを撤去し、`source` から新しいインスタンスを構築する。

        空/空白のみのソースは Empty のまま終わる。構築時の例外は呼び出し元へは伝播しない。
        """
        if self._closed:
            raise RuntimeError("harness is closed")
        self._generation += 1
        generation = self._generation
        self._teardown()
        self._container.clear()
        if source is None or not source.strip():
            logger.debug("empty sketch source; harness stays empty")
            return
        self._schedule(lambda: self._construct(source, generation))

    def unmount(self) -> None:
        """稼働中インスタンスを撤去する（冪等）。保留中の構築要求も無効化する。"""
        self._generation += 1
        self._teardown()
        self._container.clear()

    def close(self) -> None:
        """撤去に加えてリサイズ購読も解除する。ホストのビュー破棄時に呼ぶ。"""
        if self._closed:
            return
        self.unmount()
        self._resize.close()
        self._closed = True

    def tick(self, dt: float) -> None:
        instance = self._instance
        if instance is None:
            return
        if not self._guard_frames:
            instance.tick(dt)
            return
        try:
            instance.tick(dt)
        except Exception as exc:
            self._fail_running(RuntimeFrameError.from_exception(exc, callback="draw"))

    def dispatch(self, event: InputEvent) -> None:
        """入力イベントを稼働中インスタンスへ渡す。Empty なら何もしない。"""
        instance = self._instance
        if instance is None:
            return
        if not self._guard_frames:
            instance.dispatch(event)
            return
        try:
            instance.dispatch(event)
        except Exception as exc:
            self._fail_running(RuntimeFrameError.from_exception(exc, callback=event.kind))

    # ------------------------------------------------------------------ #
    # 構築                                                                #
    # ------------------------------------------------------------------ #
    def _construct(self, source: str, generation: int) -> None:
        if generation != self._generation:
            logger.debug("superseded sketch construction skipped (gen=%d)", generation)
            return
        # 遅延実行の間に別経路で作られたインスタンスがあれば先に外す
        self._teardown()
        self._container.clear()

        gate = SurfaceGate()
        try:
            body = compile_sketch(source, max_bytes=self._max_source_bytes)
            instance = SketchInstance(
                self._make_init(body, gate), self._container, gate=gate, seed=self._seed
            )
        except SketchError as err:
            self._discard(gate)
            self._deliver(err)
            return
        except Exception as exc:
            self._discard(gate)
            self._deliver(ConstructionError.from_exception(exc))
            return

        self._instance = instance
        self._resize.attach(instance)
        surface = instance.surface
        if surface is not None:
            logger.info("sketch mounted (%dx%d)", surface.width, surface.height)

    def _make_init(self, body: SketchBody, gate: SurfaceGate) -> Callable[[SketchBinding], None]:
        container = self._container

        def _init(binding: SketchBinding) -> None:
            # 1) スケッチ本体を実行し、コールバックを登録させる
            body(binding)
            callbacks = callbacks_of(binding)
            original_setup = callbacks.setup

            # 2) setup を差し替え: サーフェス確保 → 貼り付け → スケッチの setup
            def _managed_setup() -> None:
                dims = SurfaceDimensions.of(container)
                surface = gate.allocate(*dims.as_tuple())
                container.attach(surface)
                if original_setup is not None:
                    original_setup()

            callbacks.setup = _managed_setup

        return _init

    # ------------------------------------------------------------------ #
    # 後始末                                                              #
    # ------------------------------------------------------------------ #
    def _teardown(self) -> None:
        instance, self._instance = self._instance, None
        self._resize.detach()
        if instance is not None:
            instance.remove()

    def _discard(self, gate: SurfaceGate) -> None:
        surface = gate.surface
        if surface is not None:
            self._container.detach(surface)
        gate.release()
        self._container.clear()

    def _fail_running(self, err: SketchError) -> None:
        self._teardown()
        self._container.clear()
        self._deliver(err)

    def _deliver(self, err: SketchError) -> None:
        logger.warning("sketch error (%s): %s", err.phase, err.describe())
        callback = self.on_sketch_error
        if callback is not None:
            callback(err)


__all__ = ["SketchHarness", "ErrorCallback"]
