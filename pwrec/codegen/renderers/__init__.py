"""
レンダラーモジュール

アクション種別ごとの Python ステートメント生成ルールと、その登録機構を提供する。

主要エクスポート:
  - RendererRegistry: レンダラーの登録・検索・一覧
  - ActionRenderer: レンダラーの共通 Protocol
  - RenderContext: レンダリングコンテキスト
  - RendererInfo: レンダラーのメタ情報
  - create_default_registry: 標準レンダラー登録済みレジストリの生成
"""

from .builtin import create_default_registry
from .registry import (
    ActionRenderer,
    RenderContext,
    RendererInfo,
    RendererRegistry,
    normalize_tool_name,
)

__all__ = [
    "ActionRenderer",
    "RenderContext",
    "RendererInfo",
    "RendererRegistry",
    "create_default_registry",
    "normalize_tool_name",
]
