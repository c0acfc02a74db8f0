"""
データモデル — codegen セッション・アクション・生成結果

MCP ツールの入力契約（camelCase）に合わせた CodegenOptions を Pydantic v2 で、
ストア内部で保持する可変レコードを dataclass で定義する。

主な構成:
  - CodegenOptions: セッション開始時に確定する不変の設定スナップショット
  - CodegenAction: 記録された1操作（種別・パラメータ・タイムスタンプ）
  - CodegenSession: 1回の記録コンテキスト（アクションログ + 開始/終了時刻）
  - GeneratedTest: コード生成結果（ファイルパス・テストコード）
"""

from __future__ import annotations

import copy
import enum
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# セッション状態
# ---------------------------------------------------------------------------

class SessionState(enum.Enum):
    """codegen セッションの状態。

    NotStarted はストアに存在しない状態として表現されるため列挙しない。
    """

    ACTIVE = "active"
    ENDED = "ended"


# ---------------------------------------------------------------------------
# CodegenOptions
# ---------------------------------------------------------------------------

class CodegenOptions(BaseModel):
    """セッション開始時に指定するコード生成オプション。

    セッション生成後は変更されない（frozen）。
    outputPath は出力先のヒントとしてそのまま返し、パスとしての検証は行わない。
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    outputPath: str = Field(..., min_length=1, description="生成テストの出力先パス")
    testNamePrefix: Optional[str] = Field(
        default=None, description="テスト名のプレフィックス（省略時は生成側の既定値）",
    )
    includeComments: bool = Field(
        default=False, description="各ステートメントに説明コメントを付与するか",
    )


# ---------------------------------------------------------------------------
# CodegenAction
# ---------------------------------------------------------------------------

@dataclass
class CodegenAction:
    """記録された1操作。

    Attributes:
        tool_name: 操作種別（navigate, click, fill 等）
        parameters: 操作パラメータ辞書
        timestamp: 記録時刻（エポックミリ秒、記録側が付与）
        result: 操作結果（生成処理では解釈しない）
        recognized: 既知の操作種別かどうか。False はフォールバック出力の対象
    """

    tool_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0
    result: Any = None
    recognized: bool = True

    def to_dict(self) -> dict[str, Any]:
        """外部公開用の辞書（camelCase）に変換する。"""
        data: dict[str, Any] = {
            "toolName": self.tool_name,
            "parameters": copy.deepcopy(self.parameters),
            "timestamp": self.timestamp,
            "recognized": self.recognized,
        }
        if self.result is not None:
            data["result"] = copy.deepcopy(self.result)
        return data


# ---------------------------------------------------------------------------
# GeneratedTest
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeneratedTest:
    """コード生成結果。

    Attributes:
        file_path: 出力先パス（options.outputPath をそのまま使用）
        test_code: 生成されたテストコード
        session_id: 生成元セッション ID
    """

    file_path: str
    test_code: str
    session_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "filePath": self.file_path,
            "testCode": self.test_code,
            "sessionId": self.session_id,
        }


# ---------------------------------------------------------------------------
# CodegenSession
# ---------------------------------------------------------------------------

@dataclass
class CodegenSession:
    """1回の記録コンテキスト。

    SessionStore が唯一の所有者であり、他コンポーネントは操作中に参照するのみ。
    同一セッションへの変更操作は lock で直列化する。

    Attributes:
        id: セッション ID（不変）
        options: 開始時の設定スナップショット（不変）
        start_time: 開始時刻（エポックミリ秒）
        actions: 記録済みアクション（追記のみ）
        end_time: 終了時刻。設定後はセッションが終端状態になる
        generated: end で生成されたテスト（再生成はしない）
    """

    id: str
    options: CodegenOptions
    start_time: int
    actions: list[CodegenAction] = field(default_factory=list)
    end_time: Optional[int] = None
    generated: Optional[GeneratedTest] = field(default=None, repr=False)
    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False,
    )

    @property
    def state(self) -> SessionState:
        """現在のセッション状態を返す。"""
        if self.end_time is None:
            return SessionState.ACTIVE
        return SessionState.ENDED

    @property
    def is_active(self) -> bool:
        """セッションがアクションを受け付けるかどうかを返す。"""
        return self.end_time is None

    def to_dict(self) -> dict[str, Any]:
        """セッションのスナップショットを辞書で返す。

        返り値は内部状態から切り離されたコピーであり、変更してもストアに影響しない。
        """
        return {
            "id": self.id,
            "actions": [action.to_dict() for action in self.actions],
            "startTime": self.start_time,
            "endTime": self.end_time,
            "options": self.options.model_dump(),
            "state": self.state.value,
        }
