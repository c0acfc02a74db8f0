"""
レンダラーレジストリ — アクション種別ごとのコード生成ルールの登録・検索・一覧

アクション種別（toolName）をキーに、パラメータスキーマと
Python ステートメント生成ロジックを持つレンダラーを管理する。
新しいアクション種別の追加はレンダラーの登録のみで完結する。

主な構成:
  - ActionRenderer Protocol: レンダラーの共通インターフェース
  - RenderContext: 生成中に必要となった import 等の収集先
  - RendererInfo: レンダラーのメタ情報（名前、説明、カテゴリ、別名）
  - RendererRegistry: レンダラーの登録・検索・一覧
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# MCP ツール名として送られてくる場合に取り除く接頭辞
_TOOL_PREFIXES = ("playwright_", "browser_")


def normalize_tool_name(tool_name: str) -> str:
    """アクション種別名を正規化する。

    小文字化し、ハイフン・空白をアンダースコアに揃え、
    playwright_ / browser_ 接頭辞を取り除く。

    例: "assert-text" → "assert_text", "playwright_navigate" → "navigate"
    """
    name = re.sub(r"[\s\-]+", "_", tool_name.strip().lower())
    for prefix in _TOOL_PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix):
            return name[len(prefix):]
    return name


# ---------------------------------------------------------------------------
# レンダリングコンテキスト
# ---------------------------------------------------------------------------

@dataclass
class RenderContext:
    """1回のコード生成で共有されるコンテキスト。

    Attributes:
        imports: 生成コードに追加で必要なモジュール名（例: "re"）
    """

    imports: set[str] = field(default_factory=set)

    def require(self, module: str) -> None:
        """生成コードに import を追加する。"""
        self.imports.add(module)


# ---------------------------------------------------------------------------
# レンダラーメタ情報
# ---------------------------------------------------------------------------

@dataclass
class RendererInfo:
    """レンダラーのメタ情報。

    Attributes:
        name: 正規のアクション種別名
        description: 説明文
        category: カテゴリ（navigation, action, wait, validation, debug）
        aliases: 別名（正規化後の名前）
    """

    name: str
    description: str
    category: str
    aliases: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# レンダラー Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class ActionRenderer(Protocol):
    """アクションレンダラーの共通インターフェース。

    RendererRegistry に登録するには render() と get_schema() を実装すること。
    """

    def render(self, params: BaseModel, context: RenderContext) -> list[str]:
        """検証済みパラメータから Python ステートメント行を生成する。

        Args:
            params: get_schema() のモデルで検証済みのパラメータ
            context: レンダリングコンテキスト

        Returns:
            インデントなしのソース行リスト
        """
        ...

    def get_schema(self) -> type[BaseModel]:
        """パラメータの Pydantic スキーマクラスを返す。"""
        ...


# ---------------------------------------------------------------------------
# RendererRegistry 本体
# ---------------------------------------------------------------------------

class RendererRegistry:
    """アクションレンダラーの登録・検索・一覧を管理するレジストリ。

    使用例::

        registry = RendererRegistry()
        registry.register("click", ClickRenderer(), info=RendererInfo(...))
        renderer = registry.resolve("playwright_click")
    """

    def __init__(self) -> None:
        """空のレジストリを初期化する。"""
        self._renderers: dict[str, ActionRenderer] = {}
        self._info: dict[str, RendererInfo] = {}
        self._aliases: dict[str, str] = {}

    def register(
        self,
        name: str,
        renderer: ActionRenderer,
        *,
        info: Optional[RendererInfo] = None,
    ) -> None:
        """レンダラーを登録する。

        同名のレンダラーが既に登録されている場合は上書きする（警告を出力）。

        Args:
            name: 正規のアクション種別名
            renderer: レンダラーインスタンス
            info: メタ情報。None の場合はデフォルト値を使用

        Raises:
            TypeError: renderer が ActionRenderer Protocol を満たさない場合
        """
        if not isinstance(renderer, ActionRenderer):
            raise TypeError(
                f"renderer は ActionRenderer Protocol を満たす必要があります: "
                f"{type(renderer).__name__}"
            )

        key = normalize_tool_name(name)
        if key in self._renderers:
            logger.warning(
                "アクション '%s' のレンダラーを上書きします（既存: %s → 新規: %s）",
                key,
                type(self._renderers[key]).__name__,
                type(renderer).__name__,
            )

        self._renderers[key] = renderer
        if info is None:
            info = self._info.get(key) or RendererInfo(
                name=key, description=f"{key} アクション", category="unknown",
            )
        self._info[key] = info
        for alias in info.aliases:
            self._aliases[normalize_tool_name(alias)] = key

        logger.debug("アクション '%s' を登録しました: %s", key, type(renderer).__name__)

    def canonical_name(self, tool_name: str) -> Optional[str]:
        """アクション種別名を正規名に解決する。未登録なら None。"""
        key = normalize_tool_name(tool_name)
        if key in self._renderers:
            return key
        return self._aliases.get(key)

    def resolve(self, tool_name: str) -> Optional[ActionRenderer]:
        """アクション種別名（別名・接頭辞付き可）からレンダラーを返す。未登録なら None。"""
        key = self.canonical_name(tool_name)
        if key is None:
            return None
        return self._renderers[key]

    def get(self, name: str) -> ActionRenderer:
        """名前でレンダラーを取得する。

        Raises:
            KeyError: 指定名のレンダラーが未登録の場合
        """
        renderer = self.resolve(name)
        if renderer is None:
            registered = ", ".join(self.names)
            raise KeyError(
                f"アクション '{name}' は登録されていません。"
                f"登録済みアクション: [{registered}]"
            )
        return renderer

    def has(self, tool_name: str) -> bool:
        """指定名のアクションが登録されているかを返す。"""
        return self.canonical_name(tool_name) is not None

    def list_all(self) -> list[RendererInfo]:
        """登録済み全レンダラーのメタ情報を名前順で返す。"""
        return sorted(self._info.values(), key=lambda i: i.name)

    @property
    def names(self) -> list[str]:
        """登録済み全アクション名をソート済みリストで返す。"""
        return sorted(self._renderers.keys())
