from __future__ import annotations

import argparse
import sys
from pathlib import Path

# src/ レイアウトからシンプルに import できるよう、`python main.py` 実行時にパスを補助
sys.path.insert(0, str((Path(__file__).resolve().parent / "src")))

from api import run  # type: ignore  # after sys.path tweak
from common.logging import setup_default_logging  # type: ignore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a CanvasAI sketch file in a live window.")
    parser.add_argument("path", type=Path, help="sketch source file (uses the `p` capability object)")
    parser.add_argument("--width", type=int, default=None, help="initial window width [px]")
    parser.add_argument("--height", type=int, default=None, help="initial window height [px]")
    parser.add_argument("--fps", type=int, default=None, help="frame rate")
    parser.add_argument("--background", default=None, help="window background, e.g. '#101018'")
    parser.add_argument("--no-watch", action="store_true", help="do not reload on file changes")
    parser.add_argument("--log-level", default=None, help="logging level (default: CANVASAI_LOG_LEVEL)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_default_logging(args.log_level)
    if not args.path.is_file():
        print(f"sketch file not found: {args.path}", file=sys.stderr)
        return 2
    run(
        args.path,
        width=args.width,
        height=args.height,
        fps=args.fps,
        background=args.background,
        watch=not args.no_watch,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
