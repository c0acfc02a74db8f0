"""
CLI エントリポイント — Typer ベースのコマンドラインインターフェース

pwrec コマンドとして以下のサブコマンドを提供する:
  - serve: MCP サーバーを stdio で起動
  - render: アクションログ（YAML / JSON）からテストコードを生成
  - list-actions: 対応アクション一覧
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .codegen.errors import CodegenError
from .codegen.lifecycle import SessionLifecycleController
from .codegen.renderers import create_default_registry
from .mcp.writer import ScriptWriter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Typer アプリ定義
# ---------------------------------------------------------------------------

app = typer.Typer(
    help=(
        "pwrec — ブラウザ操作記録 + Playwright テスト生成ツール\n\n"
        "基本の流れ:\n"
        "  1. pwrec serve                 MCP サーバーを起動し、エージェントから操作を記録\n"
        "  2. pwrec render actions.yaml   保存済みアクションログからテストを生成\n\n"
        "詳しくは各コマンドに --help を付けてください。"
    ),
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# serve コマンド
# ---------------------------------------------------------------------------

@app.command()
def serve(
    test_name_prefix: Optional[str] = typer.Option(
        None, "--test-name-prefix", help="testNamePrefix 省略時の既定値",
    ),
    comments: Optional[bool] = typer.Option(
        None, "--comments/--no-comments", help="includeComments 省略時の既定値",
    ),
    no_write: bool = typer.Option(
        False, "--no-write", help="end 時にファイルへ書き出さずコードのみ返す",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="ログレベル (DEBUG / INFO / WARNING / ERROR)",
    ),
) -> None:
    """MCP サーバーを stdio で起動する。

    環境変数（PWREC_*）の設定を CLI オプションで上書きできます。
    """
    from .mcp.config import load_config_from_env
    from .mcp import create_server

    config = load_config_from_env()
    if test_name_prefix is not None:
        config.test_name_prefix = test_name_prefix
    if comments is not None:
        config.include_comments = comments
    if no_write:
        config.write_files = False
    if log_level is not None:
        config.log_level = log_level.upper()  # type: ignore[assignment]

    # stdout は MCP のトランスポートのため、ログは stderr に出力する
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        stream=sys.stderr,
    )

    server = create_server(config=config)
    server.run()


# ---------------------------------------------------------------------------
# render コマンド
# ---------------------------------------------------------------------------

def _load_action_log(path: Path) -> tuple[dict[str, Any], list[Any]]:
    """アクションログファイルを読み込む。

    以下のいずれかの形式を受け付ける（JSON は YAML として読み込める）:
      - アクションのリスト
      - {"options": {...}, "actions": [...]} 形式の辞書

    Returns:
        (options 辞書, アクションのリスト)

    Raises:
        ValueError: 形式が不正な場合
    """
    yaml = YAML(typ="safe")
    with open(path, encoding="utf-8") as f:
        data = yaml.load(f)

    if isinstance(data, list):
        return {}, data
    if isinstance(data, dict):
        options = data.get("options") or {}
        actions = data.get("actions") or []
        if not isinstance(options, dict) or not isinstance(actions, list):
            raise ValueError("options は辞書、actions はリストである必要があります")
        return dict(options), actions
    raise ValueError("アクションのリスト、または options / actions を持つ辞書が必要です")


@app.command()
def render(
    actions_file: Path = typer.Argument(
        ..., help="アクションログファイル（YAML / JSON）",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="出力先ファイルパス（省略時は標準出力）",
    ),
    prefix: Optional[str] = typer.Option(
        None, "--prefix", help="テスト名のプレフィックス",
    ),
    comments: Optional[bool] = typer.Option(
        None, "--comments/--no-comments", help="各ステートメントに説明コメントを付与する",
    ),
) -> None:
    """保存済みのアクションログから Playwright テストコードを生成する。

    各アクションは toolName と parameters を持つ辞書で指定します。
    """
    if not actions_file.exists():
        typer.echo(f"エラー: ファイルが見つかりません: {actions_file}", err=True)
        raise typer.Exit(code=1)

    try:
        options, actions = _load_action_log(actions_file)
    except (YAMLError, ValueError) as exc:
        typer.echo(f"エラー: アクションログを読み込めません: {exc}", err=True)
        raise typer.Exit(code=1)

    # CLI オプション > ファイル内 options の順で適用
    if output is not None:
        options["outputPath"] = str(output)
    options.setdefault("outputPath", f"test_{actions_file.stem}.py")
    if prefix is not None:
        options["testNamePrefix"] = prefix
    if comments is not None:
        options["includeComments"] = comments

    controller = SessionLifecycleController()
    try:
        session_id = controller.start(options)["sessionId"]
        for index, entry in enumerate(actions):
            if not isinstance(entry, dict):
                raise ValueError(f"actions[{index}] は辞書である必要があります")
            tool_name = entry.get("toolName", entry.get("tool"))
            controller.record(
                session_id,
                tool_name,
                entry.get("parameters") or {},
                entry.get("result"),
            )
        generated = controller.end(session_id)
    except (CodegenError, ValueError) as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(generated.test_code, nl=False)
        return

    try:
        path = ScriptWriter().write(generated)
    except OSError as exc:
        typer.echo(f"エラー: テストコードを書き出せません: {generated.file_path} ({exc})", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"テストコードを生成しました: {path} ({len(actions)} アクション)")


# ---------------------------------------------------------------------------
# list-actions コマンド
# ---------------------------------------------------------------------------

@app.command("list-actions")
def list_actions() -> None:
    """コード生成に対応したアクション種別を一覧表示する。"""
    registry = create_default_registry()
    for info in registry.list_all():
        aliases = f" (別名: {', '.join(info.aliases)})" if info.aliases else ""
        typer.echo(f"  {info.name:<20} [{info.category}] {info.description}{aliases}")


if __name__ == "__main__":
    app()
