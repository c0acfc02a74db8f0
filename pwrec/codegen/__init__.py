"""
codegen パッケージ — 操作記録 + 決定的テストコード生成

外部ドライバーが実行したブラウザ操作をセッション単位で記録し、
pytest-playwright 形式の Python テストコードとして出力する。

主な構成:
  - SessionStore: セッションの保管と ID 発行
  - ActionRecorder: アクションログへの追記
  - CodeSynthesizer: アクションログ → テストコード変換
  - SessionLifecycleController: start / record / get / end / clear の統括
"""

from __future__ import annotations

from .errors import (
    CodegenError,
    CodegenValidationError,
    SessionAlreadyEndedError,
    SessionClosedError,
    SessionNotFoundError,
    UnknownActionWarning,
)
from .lifecycle import SessionLifecycleController
from .models import (
    CodegenAction,
    CodegenOptions,
    CodegenSession,
    GeneratedTest,
    SessionState,
)
from .recorder import ActionRecorder
from .store import SessionStore
from .synthesizer import CodeSynthesizer

__all__ = [
    "ActionRecorder",
    "CodeSynthesizer",
    "CodegenAction",
    "CodegenError",
    "CodegenOptions",
    "CodegenSession",
    "CodegenValidationError",
    "GeneratedTest",
    "SessionAlreadyEndedError",
    "SessionClosedError",
    "SessionLifecycleController",
    "SessionNotFoundError",
    "SessionState",
    "SessionStore",
    "UnknownActionWarning",
]
