"""
どこで: `engine.core` サブパッケージ。
何を: サーフェス・ラスタライザ・コンテナ・フレーム駆動（Tickable/FrameClock）・描画ウィンドウを提供。
なぜ: 描画計算と表示の基盤を構成し、上位層（Sandbox/Render/API）から再利用可能にするため。
"""
