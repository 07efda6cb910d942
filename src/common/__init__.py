"""
どこで: `common` パッケージ。
何を: 環境変数パース・型付き設定・ロギング補助など、全層から使う軽量ユーティリティ。
なぜ: 依存の少ない最内層に置き、engine/api からの依存の向きを単純化するため。
"""

from .logging import setup_default_logging

__all__ = [
    "setup_default_logging",
]
