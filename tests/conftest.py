"""
テスト共通フィクスチャ定義

全テストモジュールで共有するフィクスチャを提供する。
時刻は ManualClock で固定し、生成コードの比較を決定的にする。
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pwrec.codegen.lifecycle import SessionLifecycleController
from pwrec.codegen.store import SessionStore


# ---------------------------------------------------------------------------
# 時計
# ---------------------------------------------------------------------------

class ManualClock:
    """手動で進める時計（エポックミリ秒）。"""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


# ---------------------------------------------------------------------------
# pytest フィクスチャ
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> ManualClock:
    """固定開始時刻の ManualClock。"""
    return ManualClock()


@pytest.fixture
def store(clock: ManualClock) -> SessionStore:
    """ManualClock を使う空の SessionStore。"""
    return SessionStore(clock=clock)


@pytest.fixture
def controller(clock: ManualClock) -> SessionLifecycleController:
    """ManualClock を使う SessionLifecycleController。"""
    return SessionLifecycleController(clock=clock)


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    """生成テストの出力先パス（未作成のサブディレクトリ配下）。"""
    return tmp_path / "generated" / "test_recorded.py"
