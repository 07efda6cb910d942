"""
どこで: `util.paths`。
何を: スクリーンショット保存先ディレクトリの生成と、重複しないファイル名の解決。
なぜ: ランタイムから簡潔に保存先を扱え、並行呼び出しでも安全に作成できるようにするため。
"""

from __future__ import annotations

from pathlib import Path

from .utils import _find_project_root


def ensure_screenshots_dir(root: Path | None = None) -> Path:
    """スクリーンショット出力先 `data/screenshot/` を作成して返す。

    - `root` 未指定時はプロジェクトルート直下に作成する。
    - 既存の場合もそのまま Path を返す（`exist_ok=True`）。
    """
    base = root if root is not None else _find_project_root(Path(__file__).parent)
    out = Path(base) / "data" / "screenshot"
    out.mkdir(parents=True, exist_ok=True)
    return out


def unique_path(path: Path) -> Path:
    """`path` が既存なら `stem-1.ext`, `stem-2.ext`, ... の最初の空きを返す。"""
    if not path.exists():
        return path
    i = 1
    while True:
        cand = path.parent / f"{path.stem}-{i}{path.suffix}"
        if not cand.exists():
            return cand
        i += 1


__all__ = ["ensure_screenshots_dir", "unique_path"]
