"""
pwrec MCP Server パッケージ

AI エージェントが codegen セッションを操作し、記録したブラウザ操作を
Playwright テストコードとして受け取るための
MCP (Model Context Protocol) サーバーを提供する。

主な構成:
  - server: FastMCP サーバー本体（ツール定義）
  - config: 環境変数・CLI 引数からの設定読み込み
  - writer: 生成コードのファイル書き出し
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from ..codegen.lifecycle import SessionLifecycleController
    from .config import ServerConfig
    from .writer import ScriptWriter


def create_server(
    config: Optional[ServerConfig] = None,
    controller: Optional[SessionLifecycleController] = None,
    writer: Optional[ScriptWriter] = None,
) -> FastMCP:
    """pwrec MCP サーバーを生成する（server モジュールは初回呼び出し時に import）。

    pwrec.cli は render / list-actions でも writer を使うため本パッケージを読み込む。
    server（と fastmcp）の import をここまで遅らせ、それらのコマンドでは読み込まない。
    また server.py は直接実行用の __main__ ブロックを持つため、
    `python -m pwrec.mcp.server` で二重 import の RuntimeWarning も出さない。

    Args:
        config: ServerConfig インスタンス（None で環境変数から読み込み）
        controller: セッションコントローラー（None で設定から生成）
        writer: 生成コードの書き出し先（None で ScriptWriter）

    Returns:
        設定済みの FastMCP サーバーインスタンス
    """
    from .server import create_server as _create
    return _create(config=config, controller=controller, writer=writer)


__all__ = [
    "create_server",
]
