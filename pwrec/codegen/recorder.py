"""
ActionRecorder — セッションのアクションログへの追記

外部ドライバーが実行した操作を検証し、タイムスタンプを付与して
セッションのアクションログに追記する。

未登録のアクション種別でも操作自体は発生しているため破棄せず、
recognized=False として記録する（コード生成でフォールバック出力される）。
"""

from __future__ import annotations

import copy
import logging
import warnings
from collections.abc import Mapping
from typing import Any, Callable, Optional

from .errors import (
    CodegenValidationError,
    SessionClosedError,
    SessionNotFoundError,
    UnknownActionWarning,
)
from .models import CodegenAction
from .renderers import RendererRegistry, create_default_registry
from .store import SessionStore, now_ms

logger = logging.getLogger(__name__)


class ActionRecorder:
    """セッションへのアクション追記を担当するレコーダー。

    使用例::

        recorder = ActionRecorder(store)
        recorder.append(session_id, "click", {"selector": "#go"})
    """

    def __init__(
        self,
        store: SessionStore,
        registry: Optional[RendererRegistry] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        """ActionRecorder を初期化する。

        Args:
            store: 追記先のセッションストア
            registry: 既知アクション判定に使うレンダラーレジストリ
            clock: エポックミリ秒を返す時計関数
        """
        self._store = store
        self._registry = registry if registry is not None else create_default_registry()
        self._clock = clock or now_ms

    def append(
        self,
        session_id: str,
        tool_name: str,
        parameters: Optional[Mapping[str, Any]] = None,
        result: Any = None,
    ) -> CodegenAction:
        """アクションをセッションのログに追記する。

        Args:
            session_id: 追記先セッション ID
            tool_name: アクション種別
            parameters: アクションパラメータ（None は空辞書として扱う）
            result: 操作結果（任意、解釈しない）

        Returns:
            追記されたアクション

        Raises:
            CodegenValidationError: tool_name / parameters の形式が不正な場合
            SessionNotFoundError: セッションが存在しない場合
            SessionClosedError: セッションが終了済みの場合
        """
        if not isinstance(tool_name, str) or not tool_name.strip():
            raise CodegenValidationError("toolName は空でない文字列である必要があります")
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, Mapping):
            raise CodegenValidationError(
                f"parameters は辞書である必要があります: {type(parameters).__name__}"
            )

        recognized = self._registry.has(tool_name)
        session = self._store.get(session_id)

        with session.lock:
            # ロック待ちの間に clear された場合は NotFound とする
            if self._store.get(session_id) is not session:
                raise SessionNotFoundError(session_id)
            if not session.is_active:
                raise SessionClosedError(session_id)
            # 同一セッションでは時計が戻ってもタイムスタンプを単調非減少に保つ
            timestamp = self._clock()
            if session.actions:
                timestamp = max(timestamp, session.actions[-1].timestamp)

            action = CodegenAction(
                tool_name=tool_name,
                parameters=copy.deepcopy(dict(parameters)),
                timestamp=timestamp,
                result=copy.deepcopy(result),
                recognized=recognized,
            )
            session.actions.append(action)

        if recognized:
            logger.debug("アクションを記録しました: %s (%s)", tool_name, session_id)
        else:
            logger.warning("未登録のアクションを記録しました: %s (%s)", tool_name, session_id)
            warnings.warn(
                f"Unknown action '{tool_name}' recorded; it will be rendered as a fallback statement",
                UnknownActionWarning,
                stacklevel=2,
            )
        return action
