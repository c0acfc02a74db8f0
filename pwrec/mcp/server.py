"""
pwrec MCP Server — codegen セッション操作サーバー

FastMCP を使用して、AI エージェントが codegen セッションを開始し、
実行したブラウザ操作を記録し、終了時に Playwright テストコードを
受け取れる MCP サーバーを提供する。

公開ツール:
  - start_codegen_session / end_codegen_session: ライフサイクル
  - record_codegen_action: ドライバーからの操作記録
  - get_codegen_session / clear_codegen_session: 参照・破棄
  - list_codegen_actions: 対応アクション一覧
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from ..codegen.errors import CodegenError
from ..codegen.lifecycle import SessionLifecycleController
from ..codegen.models import CodegenOptions
from .config import ServerConfig, load_config_from_env
from .writer import ScriptWriter

logger = logging.getLogger(__name__)

SERVER_NAME = "pwrec-codegen"


@contextmanager
def _tool_errors() -> Iterator[None]:
    """codegen の例外を MCP クライアント向けの ToolError に変換する。"""
    try:
        yield
    except CodegenError as exc:
        logger.info("ツール呼び出しが失敗しました: %s", exc)
        raise ToolError(str(exc)) from exc


def create_server(
    config: Optional[ServerConfig] = None,
    controller: Optional[SessionLifecycleController] = None,
    writer: Optional[ScriptWriter] = None,
) -> FastMCP:
    """pwrec MCP サーバーを生成する。

    Args:
        config: サーバー設定。None の場合は環境変数から読み込む。
        controller: セッションコントローラー。None の場合は設定から生成する。
        writer: 生成コードの書き出し先。None の場合は ScriptWriter を使用する。

    Returns:
        設定済みの FastMCP サーバーインスタンス
    """
    if config is None:
        config = load_config_from_env()
    if controller is None:
        controller = SessionLifecycleController(
            default_test_name_prefix=config.test_name_prefix,
            default_include_comments=config.include_comments,
        )
    if writer is None:
        writer = ScriptWriter()

    mcp = FastMCP(SERVER_NAME)

    # -------------------------------------------------------------------
    # ライフサイクルツール（start / end）
    # -------------------------------------------------------------------

    @mcp.tool
    def start_codegen_session(options: CodegenOptions) -> dict[str, str]:
        """Start a new code generation session to record Playwright actions.

        Args:
            options: outputPath (required), testNamePrefix, includeComments

        Returns:
            {"sessionId": <id>}
        """
        with _tool_errors():
            return controller.start(options)

    @mcp.tool
    def end_codegen_session(sessionId: str) -> dict[str, Any]:
        """End a code generation session and generate the test file.

        Args:
            sessionId: ID returned by start_codegen_session

        Returns:
            filePath, testCode, sessionId and whether the file was written
        """
        with _tool_errors():
            generated = controller.end(sessionId)

        result: dict[str, Any] = generated.to_dict()
        result["written"] = False
        if config.write_files:
            try:
                writer.write(generated)
                result["written"] = True
            except OSError as exc:
                # セッションは既に終了済みのため、書き出し失敗はコード返却で補う
                logger.warning("テストコードの書き出しに失敗しました: %s (%s)", generated.file_path, exc)
                result["writeError"] = str(exc)
        return result

    # -------------------------------------------------------------------
    # 記録ツール
    # -------------------------------------------------------------------

    @mcp.tool
    def record_codegen_action(
        sessionId: str,
        toolName: str,
        parameters: Optional[dict[str, Any]] = None,
        result: Any = None,
    ) -> dict[str, Any]:
        """Record one browser action into an active code generation session.

        Args:
            sessionId: ID returned by start_codegen_session
            toolName: Action kind (navigate, click, fill, assert_text, ...)
            parameters: Action parameters, e.g. {"selector": "#go"}
            result: Optional outcome data (stored, not used for generation)

        Returns:
            The recorded action with its assigned timestamp
        """
        with _tool_errors():
            action = controller.record(sessionId, toolName, parameters, result)
        return action.to_dict()

    # -------------------------------------------------------------------
    # 参照・破棄ツール
    # -------------------------------------------------------------------

    @mcp.tool
    def get_codegen_session(sessionId: str) -> dict[str, Any]:
        """Get information about a code generation session.

        Args:
            sessionId: ID returned by start_codegen_session

        Returns:
            Session snapshot (actions, startTime, endTime, options, state)
        """
        with _tool_errors():
            return controller.get(sessionId)

    @mcp.tool
    def clear_codegen_session(sessionId: str) -> dict[str, bool]:
        """Clear a code generation session without generating a test.

        Args:
            sessionId: ID returned by start_codegen_session

        Returns:
            {"cleared": true}
        """
        with _tool_errors():
            return controller.clear(sessionId)

    @mcp.tool
    def list_codegen_actions() -> list[dict[str, Any]]:
        """List the action kinds that render to Playwright statements.

        Returns:
            name, description, category and aliases of each action kind
        """
        return [
            {
                "name": info.name,
                "description": info.description,
                "category": info.category,
                "aliases": list(info.aliases),
            }
            for info in controller.registry.list_all()
        ]

    return mcp


# ---------------------------------------------------------------------------
# エントリポイント（直接実行用）
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    from .config import apply_cli_args, build_cli_parser

    parser = build_cli_parser()
    args = parser.parse_args()

    srv_config = load_config_from_env()
    srv_config = apply_cli_args(srv_config, args)

    server = create_server(config=srv_config)
    server.run()
