"""
どこで: `engine.render` サブパッケージ。
何を: Surface → GPU テクスチャ転送・描画の入口。SurfacePresenter を提供。
なぜ: 計算（core/sandbox）と描画の責務を分離し、GPU リソース管理を局所化するため。
"""
