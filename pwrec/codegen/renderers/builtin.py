"""
標準レンダラー — 記録アクションを Playwright (sync API) の Python 文に変換

各レンダラーは ActionRenderer Protocol を満たし、RendererRegistry に登録される。
パラメータ値は全て literals.py_literal でリテラル化するため、
引用符・改行・バックスラッシュを含む値でも生成コードの構文は壊れない。

カテゴリ:
  - ナビゲーション: navigate, go_back, go_forward, reload
  - 操作: click, dblclick, hover, fill, select, check, uncheck, press, upload
  - 待機: wait, wait_for_selector
  - 検証: assert_text, assert_visible, assert_hidden, assert_url, assert_title, assert_value
  - デバッグ: screenshot, evaluate
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..literals import py_literal
from .registry import ActionRenderer, RenderContext, RendererInfo, RendererRegistry

logger = logging.getLogger(__name__)


# ===========================================================================
# パラメータスキーマ定義
# ===========================================================================

class _ActionParams(BaseModel):
    """全アクションパラメータの基底。

    スキーマ外のキーや型変換が必要な値は検証エラーとし、
    フォールバック出力で記録値をそのまま残す。
    """

    model_config = ConfigDict(extra="forbid", strict=True)


# --- ナビゲーション ---

class NavigateParams(_ActionParams):
    """navigate アクションのパラメータ。"""
    url: str
    waitUntil: Optional[Literal["load", "domcontentloaded", "networkidle", "commit"]] = None


class NoParams(_ActionParams):
    """パラメータを持たないアクション（go_back 等）。"""


# --- 操作 ---

class SelectorParams(_ActionParams):
    """セレクタのみを取るアクションのパラメータ。"""
    selector: str


class ClickParams(_ActionParams):
    """click アクションのパラメータ。"""
    selector: str
    button: Optional[Literal["left", "right", "middle"]] = None
    clickCount: Optional[int] = Field(default=None, ge=1)


class FillParams(_ActionParams):
    """fill アクションのパラメータ。"""
    selector: str
    value: str


class SelectParams(_ActionParams):
    """select アクションのパラメータ。"""
    selector: str
    value: Union[str, list[str]]


class PressParams(_ActionParams):
    """press アクションのパラメータ。selector 省略時はページ全体へのキー入力。"""
    key: str
    selector: Optional[str] = None


class UploadParams(_ActionParams):
    """upload アクションのパラメータ。"""
    selector: str
    filePath: Union[str, list[str]]


# --- 待機 ---

class WaitParams(_ActionParams):
    """wait アクションのパラメータ（ミリ秒）。"""
    timeout: int = Field(..., ge=0)


class WaitForSelectorParams(_ActionParams):
    """wait_for_selector アクションのパラメータ。"""
    selector: str
    state: Optional[Literal["attached", "detached", "visible", "hidden"]] = None


# --- 検証 ---

class AssertTextParams(_ActionParams):
    """assert_text アクションのパラメータ。exact=True で完全一致。"""
    selector: str
    text: str
    exact: bool = False


class AssertUrlParams(_ActionParams):
    """assert_url アクションのパラメータ。regex=True で正規表現一致。"""
    url: str
    regex: bool = False


class AssertTitleParams(_ActionParams):
    """assert_title アクションのパラメータ。"""
    title: str


class AssertValueParams(_ActionParams):
    """assert_value アクションのパラメータ。"""
    selector: str
    value: str


# --- デバッグ ---

class ScreenshotParams(_ActionParams):
    """screenshot アクションのパラメータ。name は拡張子なしのファイル名。"""
    name: str
    fullPage: bool = False


class EvaluateParams(_ActionParams):
    """evaluate アクションのパラメータ。"""
    script: str


# ===========================================================================
# 生成ヘルパー
# ===========================================================================

def _call(target: str, method: str, *args: Any, **kwargs: Any) -> str:
    """`target.method(args..., key=value...)` 形式の呼び出し式を生成する。

    値が None のキーワード引数は出力しない。
    """
    parts = [py_literal(a) for a in args]
    parts.extend(f"{k}={py_literal(v)}" for k, v in kwargs.items() if v is not None)
    return f"{target}.{method}({', '.join(parts)})"


def _locator(selector: str) -> str:
    return f"page.locator({py_literal(selector)})"


# ===========================================================================
# ナビゲーションレンダラー
# ===========================================================================

class NavigateRenderer:
    """navigate — 指定 URL へ遷移。"""

    def render(self, params: NavigateParams, context: RenderContext) -> list[str]:
        return [_call("page", "goto", params.url, wait_until=params.waitUntil)]

    def get_schema(self) -> type[BaseModel]:
        return NavigateParams


class PageMethodRenderer:
    """引数なしの page メソッド呼び出し（go_back, go_forward, reload）。"""

    def __init__(self, method: str) -> None:
        self.method = method

    def render(self, params: NoParams, context: RenderContext) -> list[str]:
        return [_call("page", self.method)]

    def get_schema(self) -> type[BaseModel]:
        return NoParams


# ===========================================================================
# 操作レンダラー
# ===========================================================================

class ClickRenderer:
    """click — 要素をクリック。"""

    def render(self, params: ClickParams, context: RenderContext) -> list[str]:
        return [
            _call(
                _locator(params.selector), "click",
                button=params.button, click_count=params.clickCount,
            )
        ]

    def get_schema(self) -> type[BaseModel]:
        return ClickParams


class LocatorMethodRenderer:
    """セレクタのみを取る locator メソッド呼び出し（hover, check 等）。"""

    def __init__(self, method: str) -> None:
        self.method = method

    def render(self, params: SelectorParams, context: RenderContext) -> list[str]:
        return [_call(_locator(params.selector), self.method)]

    def get_schema(self) -> type[BaseModel]:
        return SelectorParams


class FillRenderer:
    """fill — 入力フィールドに値を入力。"""

    def render(self, params: FillParams, context: RenderContext) -> list[str]:
        return [_call(_locator(params.selector), "fill", params.value)]

    def get_schema(self) -> type[BaseModel]:
        return FillParams


class SelectRenderer:
    """select — HTML select からオプションを選択。"""

    def render(self, params: SelectParams, context: RenderContext) -> list[str]:
        return [_call(_locator(params.selector), "select_option", params.value)]

    def get_schema(self) -> type[BaseModel]:
        return SelectParams


class PressRenderer:
    """press — キーを押下（selector 指定時は要素に対して）。"""

    def render(self, params: PressParams, context: RenderContext) -> list[str]:
        if params.selector is None:
            return [_call("page.keyboard", "press", params.key)]
        return [_call(_locator(params.selector), "press", params.key)]

    def get_schema(self) -> type[BaseModel]:
        return PressParams


class UploadRenderer:
    """upload — ファイル入力にファイルを設定。"""

    def render(self, params: UploadParams, context: RenderContext) -> list[str]:
        return [_call(_locator(params.selector), "set_input_files", params.filePath)]

    def get_schema(self) -> type[BaseModel]:
        return UploadParams


# ===========================================================================
# 待機レンダラー
# ===========================================================================

class WaitRenderer:
    """wait — 指定ミリ秒待機。"""

    def render(self, params: WaitParams, context: RenderContext) -> list[str]:
        return [_call("page", "wait_for_timeout", params.timeout)]

    def get_schema(self) -> type[BaseModel]:
        return WaitParams


class WaitForSelectorRenderer:
    """wait_for_selector — 要素が指定状態になるまで待機。"""

    def render(self, params: WaitForSelectorParams, context: RenderContext) -> list[str]:
        return [_call("page", "wait_for_selector", params.selector, state=params.state)]

    def get_schema(self) -> type[BaseModel]:
        return WaitForSelectorParams


# ===========================================================================
# 検証レンダラー
# ===========================================================================

class AssertTextRenderer:
    """assert_text — 要素のテキストを検証（既定は部分一致）。"""

    def render(self, params: AssertTextParams, context: RenderContext) -> list[str]:
        method = "to_have_text" if params.exact else "to_contain_text"
        return [_call(f"expect({_locator(params.selector)})", method, params.text)]

    def get_schema(self) -> type[BaseModel]:
        return AssertTextParams


class ExpectLocatorRenderer:
    """引数なしの locator アサーション（to_be_visible 等）。"""

    def __init__(self, method: str) -> None:
        self.method = method

    def render(self, params: SelectorParams, context: RenderContext) -> list[str]:
        return [_call(f"expect({_locator(params.selector)})", self.method)]

    def get_schema(self) -> type[BaseModel]:
        return SelectorParams


class AssertUrlRenderer:
    """assert_url — ページ URL を検証。"""

    def render(self, params: AssertUrlParams, context: RenderContext) -> list[str]:
        if params.regex:
            context.require("re")
            return [f"expect(page).to_have_url(re.compile({py_literal(params.url)}))"]
        return [_call("expect(page)", "to_have_url", params.url)]

    def get_schema(self) -> type[BaseModel]:
        return AssertUrlParams


class AssertTitleRenderer:
    """assert_title — ページタイトルを検証。"""

    def render(self, params: AssertTitleParams, context: RenderContext) -> list[str]:
        return [_call("expect(page)", "to_have_title", params.title)]

    def get_schema(self) -> type[BaseModel]:
        return AssertTitleParams


class AssertValueRenderer:
    """assert_value — 入力要素の値を検証。"""

    def render(self, params: AssertValueParams, context: RenderContext) -> list[str]:
        return [_call(f"expect({_locator(params.selector)})", "to_have_value", params.value)]

    def get_schema(self) -> type[BaseModel]:
        return AssertValueParams


# ===========================================================================
# デバッグレンダラー
# ===========================================================================

class ScreenshotRenderer:
    """screenshot — スクリーンショットを保存。"""

    def render(self, params: ScreenshotParams, context: RenderContext) -> list[str]:
        return [
            _call(
                "page", "screenshot",
                path=f"{params.name}.png",
                full_page=True if params.fullPage else None,
            )
        ]

    def get_schema(self) -> type[BaseModel]:
        return ScreenshotParams


class EvaluateRenderer:
    """evaluate — ページ上で JavaScript を評価。"""

    def render(self, params: EvaluateParams, context: RenderContext) -> list[str]:
        return [_call("page", "evaluate", params.script)]

    def get_schema(self) -> type[BaseModel]:
        return EvaluateParams


# ===========================================================================
# 登録
# ===========================================================================

_BUILTIN_RENDERERS: list[tuple[str, ActionRenderer, RendererInfo]] = [
    # ナビゲーション
    ("navigate", NavigateRenderer(), RendererInfo("navigate", "指定 URL へ遷移", "navigation", ("goto",))),
    ("go_back", PageMethodRenderer("go_back"), RendererInfo("go_back", "ブラウザの「戻る」操作", "navigation", ("back",))),
    ("go_forward", PageMethodRenderer("go_forward"), RendererInfo("go_forward", "ブラウザの「進む」操作", "navigation", ("forward",))),
    ("reload", PageMethodRenderer("reload"), RendererInfo("reload", "ページリロード", "navigation")),
    # 操作
    ("click", ClickRenderer(), RendererInfo("click", "要素をクリック", "action")),
    ("dblclick", LocatorMethodRenderer("dblclick"), RendererInfo("dblclick", "要素をダブルクリック", "action", ("double_click",))),
    ("hover", LocatorMethodRenderer("hover"), RendererInfo("hover", "要素にマウスを重ねる", "action")),
    ("fill", FillRenderer(), RendererInfo("fill", "入力フィールドに値を入力", "action", ("type",))),
    ("select", SelectRenderer(), RendererInfo("select", "HTML select からオプションを選択", "action", ("select_option",))),
    ("check", LocatorMethodRenderer("check"), RendererInfo("check", "チェックボックスをチェック", "action")),
    ("uncheck", LocatorMethodRenderer("uncheck"), RendererInfo("uncheck", "チェックボックスのチェックを外す", "action")),
    ("press", PressRenderer(), RendererInfo("press", "キーを押下", "action", ("press_key",))),
    ("upload", UploadRenderer(), RendererInfo("upload", "ファイル入力にファイルを設定", "action", ("upload_file",))),
    # 待機
    ("wait", WaitRenderer(), RendererInfo("wait", "指定ミリ秒待機", "wait", ("wait_for_timeout",))),
    ("wait_for_selector", WaitForSelectorRenderer(), RendererInfo("wait_for_selector", "要素が指定状態になるまで待機", "wait")),
    # 検証
    ("assert_text", AssertTextRenderer(), RendererInfo("assert_text", "要素のテキストを検証", "validation", ("expect_text",))),
    ("assert_visible", ExpectLocatorRenderer("to_be_visible"), RendererInfo("assert_visible", "要素が可視状態であることを検証", "validation", ("expect_visible",))),
    ("assert_hidden", ExpectLocatorRenderer("to_be_hidden"), RendererInfo("assert_hidden", "要素が非表示状態であることを検証", "validation", ("expect_hidden",))),
    ("assert_url", AssertUrlRenderer(), RendererInfo("assert_url", "URL を検証", "validation", ("expect_url",))),
    ("assert_title", AssertTitleRenderer(), RendererInfo("assert_title", "ページタイトルを検証", "validation", ("expect_title",))),
    ("assert_value", AssertValueRenderer(), RendererInfo("assert_value", "入力要素の値を検証", "validation", ("expect_value",))),
    # デバッグ
    ("screenshot", ScreenshotRenderer(), RendererInfo("screenshot", "スクリーンショットを保存", "debug")),
    ("evaluate", EvaluateRenderer(), RendererInfo("evaluate", "JavaScript を評価", "debug")),
]


def register_builtin_renderers(registry: RendererRegistry) -> None:
    """全標準レンダラーをレジストリに登録する。

    Args:
        registry: 登録先の RendererRegistry
    """
    for name, renderer, info in _BUILTIN_RENDERERS:
        registry.register(name, renderer, info=info)
    logger.debug("標準レンダラー %d 種を登録しました", len(_BUILTIN_RENDERERS))


def create_default_registry() -> RendererRegistry:
    """標準レンダラーが登録済みの RendererRegistry を生成する。"""
    registry = RendererRegistry()
    register_builtin_renderers(registry)
    return registry
