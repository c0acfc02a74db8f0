"""
pwrec MCP Server CLI エントリポイント

python -m pwrec.mcp で MCP サーバーを stdio で起動する。
CLI 引数と環境変数でサーバー設定を制御できる。

使用例:
  python -m pwrec.mcp                              # デフォルト設定で起動
  python -m pwrec.mcp --comments                   # ステートメントごとにコメントを付与
  python -m pwrec.mcp --no-write                   # ファイルに書き出さずコードのみ返す
  python -m pwrec.mcp --test-name-prefix "login"   # テスト名プレフィックスを指定

環境変数:
  PWREC_INCLUDE_COMMENTS=true                      # コメント付与
  PWREC_WRITE_FILES=false                          # 書き出し無効
  PWREC_LOG_LEVEL=DEBUG                            # ログレベル変更
"""

from __future__ import annotations

import logging
import sys

from .config import apply_cli_args, build_cli_parser, load_config_from_env
from .server import create_server

# 環境変数 → CLI 引数の順で設定を構築
_config = load_config_from_env()
_parser = build_cli_parser()
_args = _parser.parse_args()
_config = apply_cli_args(_config, _args)

# stdout は MCP のトランスポートのため、ログは stderr に出力する
logging.basicConfig(
    level=_config.log_level,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    stream=sys.stderr,
)

# サーバー生成・起動
server = create_server(config=_config)
server.run()
