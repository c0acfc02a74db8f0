"""
SessionLifecycleController — codegen セッションの状態遷移管理

NotStarted → Active → Ended の状態遷移を管理し、
CodeSynthesizer を呼び出す唯一のコンポーネントとして振る舞う。

主な操作:
  - start: セッション生成（NotStarted → Active）
  - record: アクション追記（Active のみ）
  - get: セッションのスナップショット取得
  - end: テストコード生成 + 終了（Active → Ended）
  - clear: セッション削除（Active / Ended、コード生成なし）
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from .errors import CodegenValidationError, SessionAlreadyEndedError, SessionNotFoundError
from .models import CodegenAction, CodegenOptions, CodegenSession, GeneratedTest
from .recorder import ActionRecorder
from .renderers import RendererRegistry, create_default_registry
from .store import SessionStore, now_ms
from .synthesizer import CodeSynthesizer

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    """Pydantic の検証エラーを1行のメッセージにまとめる。"""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
        for err in exc.errors()
    )
    return f"Invalid codegen options: {details}"


class SessionLifecycleController:
    """codegen セッションのライフサイクルを統括するコントローラー。

    使用例::

        controller = SessionLifecycleController()
        session_id = controller.start({"outputPath": "tests/test_login.py"})["sessionId"]
        controller.record(session_id, "navigate", {"url": "https://example.com"})
        generated = controller.end(session_id)
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        registry: Optional[RendererRegistry] = None,
        clock: Optional[Callable[[], int]] = None,
        default_test_name_prefix: Optional[str] = None,
        default_include_comments: bool = False,
    ) -> None:
        """コントローラーを初期化する。

        Args:
            store: セッションストア（None で新規生成）
            registry: レンダラーレジストリ（recorder と synthesizer で共有）
            clock: エポックミリ秒を返す時計関数
            default_test_name_prefix: start で省略された testNamePrefix の既定値
            default_include_comments: start で省略された includeComments の既定値
        """
        self._clock = clock or now_ms
        self.store = store if store is not None else SessionStore(clock=self._clock)
        self.registry = registry if registry is not None else create_default_registry()
        self.recorder = ActionRecorder(self.store, self.registry, clock=self._clock)
        self.synthesizer = CodeSynthesizer(self.registry)
        self.default_test_name_prefix = default_test_name_prefix
        self.default_include_comments = default_include_comments

    # -------------------------------------------------------------------
    # start
    # -------------------------------------------------------------------

    def build_options(
        self, options: Union[CodegenOptions, Mapping[str, Any], None],
    ) -> CodegenOptions:
        """入力をCodegenOptions に変換し、省略項目にコントローラーの既定値を補う。

        Raises:
            CodegenValidationError: 必須項目の欠落や型不正がある場合
        """
        if options is None:
            raise CodegenValidationError("Invalid codegen options: options is required")
        try:
            if isinstance(options, CodegenOptions):
                parsed = options
            elif isinstance(options, Mapping):
                parsed = CodegenOptions.model_validate(dict(options))
            else:
                raise CodegenValidationError(
                    f"Invalid codegen options: expected an object, got {type(options).__name__}"
                )
        except ValidationError as exc:
            raise CodegenValidationError(_format_validation_error(exc)) from exc

        updates: dict[str, Any] = {}
        if "testNamePrefix" not in parsed.model_fields_set and self.default_test_name_prefix:
            updates["testNamePrefix"] = self.default_test_name_prefix
        if "includeComments" not in parsed.model_fields_set and self.default_include_comments:
            updates["includeComments"] = True
        if updates:
            parsed = parsed.model_copy(update=updates)
        return parsed

    def start(
        self, options: Union[CodegenOptions, Mapping[str, Any], None],
    ) -> dict[str, str]:
        """セッションを開始する。

        Returns:
            {"sessionId": <ID>}

        Raises:
            CodegenValidationError: オプションが不正な場合（ストアは変更されない）
        """
        parsed = self.build_options(options)
        session_id = self.store.create(parsed)
        return {"sessionId": session_id}

    # -------------------------------------------------------------------
    # record / get
    # -------------------------------------------------------------------

    def record(
        self,
        session_id: str,
        tool_name: str,
        parameters: Optional[Mapping[str, Any]] = None,
        result: Any = None,
    ) -> CodegenAction:
        """アクションを記録する（ActionRecorder.append への委譲）。"""
        return self.recorder.append(session_id, tool_name, parameters, result)

    def get(self, session_id: str) -> dict[str, Any]:
        """セッションのスナップショットを返す。

        Raises:
            SessionNotFoundError: セッションが存在しない場合
        """
        session = self.store.get(session_id)
        with session.lock:
            return session.to_dict()

    def generated(self, session_id: str) -> Optional[GeneratedTest]:
        """end で生成済みのテストを返す。未終了なら None。再生成は行わない。"""
        return self.store.get(session_id).generated

    # -------------------------------------------------------------------
    # end / clear
    # -------------------------------------------------------------------

    def end(self, session_id: str) -> GeneratedTest:
        """セッションを終了し、テストコードを生成する。

        生成と終了記録は同一セッションのロック内で行うため、
        生成に使ったログと終了後に凍結されるログは常に一致する。

        Raises:
            SessionNotFoundError: セッションが存在しない場合
            SessionAlreadyEndedError: 既に終了済みの場合
        """
        session = self.store.get(session_id)
        with session.lock:
            if self.store.get(session_id) is not session:
                raise SessionNotFoundError(session_id)
            if not session.is_active:
                raise SessionAlreadyEndedError(session_id)

            end_time = self._clock()
            floor = session.actions[-1].timestamp if session.actions else session.start_time
            end_time = max(end_time, floor, session.start_time)

            frozen = CodegenSession(
                id=session.id,
                options=session.options,
                start_time=session.start_time,
                actions=list(session.actions),
                end_time=end_time,
            )
            generated = self.synthesizer.render(frozen)

            self.store.mark_ended(session_id, end_time)
            session.generated = generated

        return generated

    def clear(self, session_id: str) -> dict[str, bool]:
        """セッションを削除する（コード生成は行わない）。

        Returns:
            {"cleared": True}

        Raises:
            SessionNotFoundError: セッションが存在しない場合
        """
        self.store.delete(session_id)
        return {"cleared": True}
