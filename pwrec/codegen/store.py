"""
SessionStore — codegen セッションのインメモリ保管

セッション ID の発行とセッションの存在管理を一手に担う。
プロセス寿命と同じ期間だけ保持し、永続化は行わない。

主な機能:
  - セッション生成（衝突しない ID の発行）
  - セッション取得・削除
  - 終了時刻の記録（一度のみ）
"""

from __future__ import annotations

import logging
import secrets
import string
import threading
import time
from typing import Callable, Optional

from .errors import (
    CodegenValidationError,
    SessionAlreadyEndedError,
    SessionNotFoundError,
)
from .models import CodegenOptions, CodegenSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ID 生成
# ---------------------------------------------------------------------------

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 10

# 36^10 の空間で衝突が連続することは実質ないため、上限到達は ID 生成器の異常とみなす
_MAX_ID_ATTEMPTS = 100


def generate_session_id() -> str:
    """10 文字の英小文字・数字からなるセッション ID を生成する。"""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def now_ms() -> int:
    """現在時刻をエポックミリ秒で返す。"""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# SessionStore 本体
# ---------------------------------------------------------------------------

class SessionStore:
    """codegen セッションのキー付きコンテナ。

    マップ自体は単一のロックで保護し、個々のセッションの変更は
    セッションごとのロック（CodegenSession.lock）で直列化する。

    使用例::

        store = SessionStore()
        session_id = store.create(CodegenOptions(outputPath="tests/test_x.py"))
        session = store.get(session_id)
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        """空のストアを初期化する。

        Args:
            id_factory: セッション ID 生成関数（テスト用に差し替え可能）
            clock: エポックミリ秒を返す時計関数
        """
        self._id_factory = id_factory or generate_session_id
        self._clock = clock or now_ms
        self._sessions: dict[str, CodegenSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def ids(self) -> list[str]:
        """保持中の全セッション ID を返す。"""
        with self._lock:
            return list(self._sessions)

    def create(self, options: CodegenOptions) -> str:
        """セッションを生成し、その ID を返す。

        生成した ID が既存セッションと衝突した場合は再生成する（上書きはしない）。

        Args:
            options: セッションの設定スナップショット

        Returns:
            新しいセッション ID

        Raises:
            RuntimeError: ID 生成器が衝突しない ID を返せなかった場合
        """
        with self._lock:
            for _ in range(_MAX_ID_ATTEMPTS):
                session_id = self._id_factory()
                if session_id not in self._sessions:
                    break
                logger.debug("セッション ID が衝突したため再生成します: %s", session_id)
            else:
                raise RuntimeError(
                    f"{_MAX_ID_ATTEMPTS} 回試行しても未使用のセッション ID を生成できませんでした"
                )

            session = CodegenSession(
                id=session_id,
                options=options,
                start_time=self._clock(),
            )
            self._sessions[session_id] = session

        logger.info("codegen セッションを開始しました: %s", session_id)
        return session_id

    def get(self, session_id: str) -> CodegenSession:
        """セッションを取得する。

        Raises:
            SessionNotFoundError: 指定 ID のセッションが存在しない場合
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        """セッションを削除する。

        進行中の同一セッション操作（append, end）の完了を待ってから削除する。

        Raises:
            SessionNotFoundError: 指定 ID のセッションが存在しない場合
        """
        session = self.get(session_id)
        with session.lock:
            with self._lock:
                if self._sessions.get(session_id) is not session:
                    raise SessionNotFoundError(session_id)
                del self._sessions[session_id]

        logger.info("codegen セッションを削除しました: %s", session_id)
        return True

    def mark_ended(self, session_id: str, end_time: int) -> None:
        """セッションの終了時刻を記録する。

        Args:
            session_id: セッション ID
            end_time: 終了時刻（エポックミリ秒、開始時刻以上）

        Raises:
            SessionNotFoundError: 指定 ID のセッションが存在しない場合
            SessionAlreadyEndedError: 既に終了時刻が記録されている場合
            CodegenValidationError: end_time が開始時刻より前の場合
        """
        session = self.get(session_id)
        with session.lock:
            if session.end_time is not None:
                raise SessionAlreadyEndedError(session_id)
            if end_time < session.start_time:
                raise CodegenValidationError(
                    f"end_time ({end_time}) は start_time ({session.start_time}) 以上である必要があります"
                )
            session.end_time = end_time

        logger.info("codegen セッションを終了しました: %s", session_id)
