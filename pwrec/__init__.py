"""
pwrec — Playwright 操作記録 + テストコード生成ツール

MCP サーバー経由で記録したブラウザ操作を、
pytest-playwright 形式の Python テストとして出力する。
"""

__version__ = "0.1.0"
