"""
エラー定義 — codegen セッション操作の例外階層

全ての致命的エラーは CodegenError を基底とし、呼び出し元へ同期的に送出される。
送出時点でストアの状態は変更されていない（部分的な更新は発生しない）。

主な構成:
  - CodegenValidationError: start / record の入力不正
  - SessionNotFoundError: 未知のセッション ID
  - SessionClosedError: 終了済みセッションへの record
  - SessionAlreadyEndedError: end の二重呼び出し
  - UnknownActionWarning: 未登録アクション（致命的ではない）
"""

from __future__ import annotations


class CodegenError(Exception):
    """codegen 操作の基底例外。"""


class CodegenValidationError(CodegenError, ValueError):
    """入力（オプション・アクション）が不正な場合の例外。"""


class SessionNotFoundError(CodegenError, KeyError):
    """指定 ID のセッションが存在しない場合の例外。

    Attributes:
        session_id: 見つからなかったセッション ID
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        # KeyError は repr で包むため明示的に上書きする
        return f"Session not found: {self.session_id}"


class SessionClosedError(CodegenError):
    """終了済みセッションにアクションを追加しようとした場合の例外。"""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session already ended, cannot record: {session_id}")
        self.session_id = session_id


class SessionAlreadyEndedError(CodegenError):
    """終了済みセッションを再度終了しようとした場合の例外。"""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session already ended: {session_id}")
        self.session_id = session_id


class UnknownActionWarning(UserWarning):
    """未登録のアクション種別が記録された場合の警告。

    アクション自体は破棄せず記録し、コード生成ではフォールバック文として出力する。
    """
