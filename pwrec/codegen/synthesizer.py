"""
CodeSynthesizer — アクションログを pytest-playwright テストに変換

セッションのアクションログを、記録順に1アクション1ステートメントで
Python テストモジュールとして出力する。
同じ (actions, options) からは常にバイト単位で同一のコードを生成する。

出力構成:
  - 生成元ヘッダーコメント（セッション ID・開始/終了時刻、常に出力）
  - import 文
  - テスト関数（def test_<prefix>_<session id>(page: Page) -> None:）
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from .literals import describe_value, escape_string
from .models import CodegenAction, CodegenSession, GeneratedTest
from .renderers import RenderContext, RendererRegistry, create_default_registry

logger = logging.getLogger(__name__)

DEFAULT_TEST_NAME_PREFIX = "generated test"
GENERATOR_NAME = "pwrec codegen"

_INDENT = "    "


# ---------------------------------------------------------------------------
# 名前・時刻の整形
# ---------------------------------------------------------------------------

def slugify(text: str) -> str:
    """識別子に使える小文字スラッグに変換する。

    英数字以外の連続は '_' 1文字に置き換え、前後の '_' は除去する。
    結果が空の場合は "generated" を返す。
    """
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")
    return slug or "generated"


def derive_test_name(prefix: Optional[str], session_id: str) -> str:
    """テスト関数名を導出する。

    例: ("generated test", "a1b2c3d4e5") → "test_generated_test_a1b2c3d4e5"
    """
    base = slugify(prefix if prefix else DEFAULT_TEST_NAME_PREFIX)
    return f"test_{base}_{slugify(session_id)}"


def format_timestamp(ms: Optional[int]) -> str:
    """エポックミリ秒を ISO-8601 (UTC, ミリ秒精度) に変換する。None は "-"。"""
    if ms is None:
        return "-"
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _comment_line(action: CodegenAction) -> str:
    """includeComments 用の1行コメントを生成する。

    値はリテラル表記でエスケープ済みのため、改行を含む値でも1行に収まる。
    """
    summary = ", ".join(
        f"{escape_string(str(key))}={describe_value(value)}"
        for key, value in action.parameters.items()
    )
    name = escape_string(action.tool_name)
    if summary:
        return f"# {name}: {summary}"
    return f"# {name}"


def _fallback_lines(action: CodegenAction) -> list[str]:
    """未登録・パラメータ不正のアクションを no-op 文として出力する。"""
    return [
        f"# pwrec: unrecognized action {describe_value(action.tool_name)} "
        f"{describe_value(action.parameters)}",
        "pass",
    ]


# ---------------------------------------------------------------------------
# CodeSynthesizer 本体
# ---------------------------------------------------------------------------

class CodeSynthesizer:
    """アクションログから Python テストコードを生成する。

    入力セッションは変更しない純粋な変換であり、
    ファイルへの書き出しは呼び出し側（ScriptWriter 等）の責務とする。

    使用例::

        synthesizer = CodeSynthesizer()
        generated = synthesizer.render(session)
        print(generated.test_code)
    """

    def __init__(self, registry: Optional[RendererRegistry] = None) -> None:
        """CodeSynthesizer を初期化する。

        Args:
            registry: アクション種別ごとのレンダラーレジストリ
        """
        self._registry = registry if registry is not None else create_default_registry()

    def render(self, session: CodegenSession) -> GeneratedTest:
        """セッションからテストコードを生成する。

        Args:
            session: 生成元セッション（end_time 設定済みであることが望ましい）

        Returns:
            生成結果（出力先パスは options.outputPath をそのまま使用）
        """
        options = session.options
        test_name = derive_test_name(options.testNamePrefix, session.id)
        context = RenderContext()

        body: list[str] = []
        for action in session.actions:
            if options.includeComments:
                body.append(_comment_line(action))
            body.extend(self.render_action(action, context))
        if not body:
            body.append("pass")

        lines = self._header(session)
        lines.append("")
        for module in sorted(context.imports):
            lines.append(f"import {module}")
        if context.imports:
            lines.append("")
        lines.append("from playwright.sync_api import Page, expect")
        lines.append("")
        lines.append("")
        lines.append(f"def {test_name}(page: Page) -> None:")
        lines.extend(f"{_INDENT}{line}" for line in body)

        logger.info(
            "テストコードを生成しました: %s (%d アクション)", test_name, len(session.actions),
        )
        return GeneratedTest(
            file_path=options.outputPath,
            test_code="\n".join(lines) + "\n",
            session_id=session.id,
        )

    def render_action(self, action: CodegenAction, context: RenderContext) -> list[str]:
        """単一アクションをインデントなしのソース行に変換する。

        未登録のアクション種別、またはパラメータがレンダラーのスキーマに
        合わない場合はフォールバック文を返す（ログの欠落を防ぐため省略しない）。
        """
        renderer = self._registry.resolve(action.tool_name)
        if renderer is None:
            return _fallback_lines(action)

        try:
            params = renderer.get_schema().model_validate(action.parameters)
        except ValidationError as exc:
            logger.warning(
                "パラメータがスキーマに一致しないためフォールバック出力します: %s (%d 件のエラー)",
                action.tool_name,
                exc.error_count(),
            )
            return _fallback_lines(action)

        return renderer.render(params, context)

    def _header(self, session: CodegenSession) -> list[str]:
        """生成元ヘッダーコメントを構築する。"""
        return [
            f"# Generated by {GENERATOR_NAME}",
            f"# Session: {escape_string(session.id)}",
            f"# Started: {format_timestamp(session.start_time)}",
            f"# Ended: {format_timestamp(session.end_time)}",
            f"# Actions: {len(session.actions)}",
        ]


__all__ = [
    "CodeSynthesizer",
    "DEFAULT_TEST_NAME_PREFIX",
    "derive_test_name",
    "format_timestamp",
    "slugify",
]
