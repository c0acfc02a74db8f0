"""
MCP サーバー設定 — 環境変数・CLI 引数からの設定読み込み

環境変数または CLI 引数で MCP サーバーの動作を制御する。
CLI 引数 > 環境変数 > デフォルト値 の優先順位で適用される。

環境変数一覧:
  PWREC_TEST_NAME_PREFIX : start で省略されたテスト名プレフィックスの既定値
  PWREC_INCLUDE_COMMENTS : start で省略された includeComments の既定値（true/false, デフォルト: false）
  PWREC_WRITE_FILES      : end 時に生成コードをファイルへ書き出すか（true/false, デフォルト: true）
  PWREC_LOG_LEVEL        : ログレベル（DEBUG/INFO/WARNING/ERROR, デフォルト: INFO）
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Literal, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 環境変数キー定数
# ---------------------------------------------------------------------------

_ENV_TEST_NAME_PREFIX = "PWREC_TEST_NAME_PREFIX"
_ENV_INCLUDE_COMMENTS = "PWREC_INCLUDE_COMMENTS"
_ENV_WRITE_FILES = "PWREC_WRITE_FILES"
_ENV_LOG_LEVEL = "PWREC_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


# ---------------------------------------------------------------------------
# 設定データクラス
# ---------------------------------------------------------------------------

@dataclass
class ServerConfig:
    """MCP サーバーの実行時設定。

    Attributes:
        test_name_prefix: testNamePrefix 省略時の既定値（None で生成側の既定値）
        include_comments: includeComments 省略時の既定値
        write_files: end 時に生成コードを outputPath へ書き出すか
        log_level: ログレベル
    """

    test_name_prefix: Optional[str] = None
    include_comments: bool = False
    write_files: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


# ---------------------------------------------------------------------------
# 環境変数からの読み込み
# ---------------------------------------------------------------------------

def _parse_bool(value: str) -> bool:
    """文字列を bool に変換する。

    Args:
        value: "true", "1", "yes" → True、それ以外 → False

    Returns:
        変換結果
    """
    return value.lower() in ("true", "1", "yes")


def load_config_from_env() -> ServerConfig:
    """環境変数から ServerConfig を生成する。

    設定されていない環境変数はデフォルト値を使用する。

    Returns:
        環境変数から読み込んだ設定
    """
    config = ServerConfig()

    if os.environ.get(_ENV_TEST_NAME_PREFIX):
        config.test_name_prefix = os.environ[_ENV_TEST_NAME_PREFIX]

    if _ENV_INCLUDE_COMMENTS in os.environ:
        config.include_comments = _parse_bool(os.environ[_ENV_INCLUDE_COMMENTS])

    if _ENV_WRITE_FILES in os.environ:
        config.write_files = _parse_bool(os.environ[_ENV_WRITE_FILES])

    if _ENV_LOG_LEVEL in os.environ:
        val = os.environ[_ENV_LOG_LEVEL].upper()
        if val in _LOG_LEVELS:
            config.log_level = val  # type: ignore[assignment]
        else:
            logger.warning("PWREC_LOG_LEVEL の値が不正です: %s", os.environ[_ENV_LOG_LEVEL])

    logger.info("設定を読み込みました: %s", config)
    return config


def build_cli_parser():
    """CLI 引数パーサーを構築する。

    Returns:
        argparse.ArgumentParser インスタンス
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="pwrec MCP Server - record browser actions and generate Playwright tests",
    )
    parser.add_argument(
        "--test-name-prefix", type=str, default=None,
        help="Default test name prefix (default: 'generated test')",
    )
    parser.add_argument(
        "--comments", action="store_true", default=None,
        help="Include a comment above each generated statement by default",
    )
    parser.add_argument(
        "--no-comments", action="store_true", default=None,
        help="Do not include statement comments by default",
    )
    parser.add_argument(
        "--no-write", action="store_true", default=None,
        help="Return generated code without writing it to outputPath",
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=list(_LOG_LEVELS),
        help="Log level (default: INFO)",
    )
    return parser


def apply_cli_args(config: ServerConfig, args: Any) -> ServerConfig:
    """CLI 引数を ServerConfig に適用する。

    CLI 引数が指定されている場合のみ上書きする。

    Args:
        config: ベースとなる設定（環境変数から読み込み済み）
        args: argparse の解析結果

    Returns:
        CLI 引数が適用された設定
    """
    prefix = getattr(args, "test_name_prefix", None)
    if prefix is not None:
        config.test_name_prefix = prefix

    # comments / no-comments
    if getattr(args, "no_comments", None):
        config.include_comments = False
    elif getattr(args, "comments", None):
        config.include_comments = True

    if getattr(args, "no_write", None):
        config.write_files = False

    log_level = getattr(args, "log_level", None)
    if log_level is not None:
        config.log_level = log_level

    return config
