"""
SessionLifecycleController テスト — start / record / get / end / clear の統合テスト
"""

from __future__ import annotations

import threading

import pytest

from pwrec.codegen.errors import (
    CodegenValidationError,
    SessionAlreadyEndedError,
    SessionClosedError,
    SessionNotFoundError,
    UnknownActionWarning,
)
from pwrec.codegen.lifecycle import SessionLifecycleController
from pwrec.codegen.models import CodegenOptions
from pwrec.codegen.renderers import RendererRegistry
from pwrec.codegen.store import SessionStore


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------

class TestStart:
    """start のテスト。"""

    def test_start_returns_session_id(self, controller: SessionLifecycleController):
        result = controller.start({"outputPath": "/out/t.spec"})
        assert set(result) == {"sessionId"}
        assert len(result["sessionId"]) == 10

    def test_injected_empty_store_is_used(self, clock):
        """空のストアを渡してもそのストアと ID 生成器が使われること。"""
        store = SessionStore(id_factory=lambda: "fixedid000", clock=clock)
        controller = SessionLifecycleController(store=store, clock=clock)

        assert controller.store is store
        assert controller.start({"outputPath": "/x.py"}) == {"sessionId": "fixedid000"}
        assert store.ids() == ["fixedid000"]

    def test_injected_registry_is_shared(self, clock):
        """渡したレジストリが recorder と synthesizer で共有されること。"""
        registry = RendererRegistry()
        controller = SessionLifecycleController(registry=registry, clock=clock)
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]

        assert controller.registry is registry
        with pytest.warns(UnknownActionWarning):
            controller.record(session_id, "click", {"selector": "#a"})
        assert '# pwrec: unrecognized action "click"' in controller.end(session_id).test_code

    def test_start_accepts_options_model(self, controller: SessionLifecycleController):
        session_id = controller.start(CodegenOptions(outputPath="/x.py"))["sessionId"]
        assert controller.get(session_id)["options"]["outputPath"] == "/x.py"

    @pytest.mark.parametrize(
        "options",
        [
            None,
            {},
            {"outputPath": ""},
            {"outputPath": 42},
            {"outputPath": "/x.py", "includeComments": "maybe"},
            {"outputPath": "/x.py", "unexpected": True},
            ["/x.py"],
        ],
    )
    def test_invalid_options_rejected(self, controller: SessionLifecycleController, options):
        """不正なオプションは ValidationError になり、ストアは変更されないこと。"""
        with pytest.raises(CodegenValidationError):
            controller.start(options)
        assert len(controller.store) == 0

    def test_validation_message_names_field(self, controller: SessionLifecycleController):
        with pytest.raises(CodegenValidationError, match="outputPath"):
            controller.start({})

    def test_server_defaults_fill_omitted_options(self, clock):
        """省略されたオプションにコントローラーの既定値が補われること。"""
        controller = SessionLifecycleController(
            clock=clock,
            default_test_name_prefix="smoke",
            default_include_comments=True,
        )
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        options = controller.get(session_id)["options"]
        assert options["testNamePrefix"] == "smoke"
        assert options["includeComments"] is True

    def test_explicit_options_override_defaults(self, clock):
        controller = SessionLifecycleController(
            clock=clock,
            default_test_name_prefix="smoke",
            default_include_comments=True,
        )
        session_id = controller.start(
            {"outputPath": "/x.py", "testNamePrefix": "login", "includeComments": False}
        )["sessionId"]
        options = controller.get(session_id)["options"]
        assert options["testNamePrefix"] == "login"
        assert options["includeComments"] is False


# ---------------------------------------------------------------------------
# record / get
# ---------------------------------------------------------------------------

class TestRecordAndGet:
    """record / get のテスト。"""

    def test_get_returns_actions_in_order(self, controller, clock):
        """k 件記録すると k 件が記録順・非減少タイムスタンプで返ること。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        for i in range(7):
            clock.advance(i % 2)
            controller.record(session_id, "click", {"selector": f"#b{i}"})

        snapshot = controller.get(session_id)
        actions = snapshot["actions"]
        assert [a["parameters"]["selector"] for a in actions] == [f"#b{i}" for i in range(7)]
        stamps = [a["timestamp"] for a in actions]
        assert stamps == sorted(stamps)
        assert snapshot["state"] == "active"
        assert snapshot["endTime"] is None

    def test_get_unknown_raises(self, controller):
        with pytest.raises(SessionNotFoundError):
            controller.get("neverissued")

    def test_snapshot_is_detached(self, controller):
        """get の返り値を変更してもセッションに影響しないこと。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        controller.record(session_id, "click", {"selector": "#a"})

        snapshot = controller.get(session_id)
        snapshot["actions"][0]["parameters"]["selector"] = "#hacked"
        snapshot["actions"].clear()

        again = controller.get(session_id)
        assert again["actions"][0]["parameters"]["selector"] == "#a"

    def test_record_unknown_action_warns(self, controller):
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        with pytest.warns(UnknownActionWarning):
            action = controller.record(session_id, "teleport", {})
        assert action.recognized is False


# ---------------------------------------------------------------------------
# end
# ---------------------------------------------------------------------------

class TestEnd:
    """end のテスト。"""

    def test_example_scenario(self, controller, clock):
        """click → fill → end → get → clear → get の一連の流れ。"""
        session_id = controller.start({"outputPath": "/out/t.spec"})["sessionId"]
        controller.record(session_id, "click", {"selector": "#go"})
        controller.record(session_id, "fill", {"selector": "#name", "value": "O'Brien"})
        assert len(controller.get(session_id)["actions"]) == 2

        clock.advance(5_000)
        generated = controller.end(session_id)
        result = generated.to_dict()

        assert result["filePath"] == "/out/t.spec"
        assert result["sessionId"] == session_id
        assert 'page.locator("#go").click()' in result["testCode"]
        assert 'page.locator("#name").fill("O\'Brien")' in result["testCode"]

        snapshot = controller.get(session_id)
        assert snapshot["endTime"] == clock.now
        assert snapshot["state"] == "ended"

        assert controller.clear(session_id) == {"cleared": True}
        with pytest.raises(SessionNotFoundError):
            controller.get(session_id)

    def test_end_empty_session(self, controller):
        """アクションなしでも end が成功し、テスト名を含むコードを返すこと。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        generated = controller.end(session_id)
        assert generated.test_code
        assert f"def test_generated_test_{session_id}(page: Page) -> None:" in generated.test_code

    def test_end_twice_raises(self, controller):
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        first = controller.end(session_id)
        with pytest.raises(SessionAlreadyEndedError):
            controller.end(session_id)
        assert controller.generated(session_id) == first

    def test_record_after_end_raises(self, controller):
        """end 後の record は SessionClosed になり、ログ長は変わらないこと。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        controller.record(session_id, "click", {"selector": "#a"})
        controller.end(session_id)

        with pytest.raises(SessionClosedError):
            controller.record(session_id, "click", {"selector": "#b"})
        assert len(controller.get(session_id)["actions"]) == 1

    def test_end_unknown_raises(self, controller):
        with pytest.raises(SessionNotFoundError):
            controller.end("missing")

    def test_generated_none_before_end(self, controller):
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        assert controller.generated(session_id) is None

    def test_header_times_match_session(self, controller, clock):
        """生成コードのヘッダー時刻がセッションの開始・終了時刻と一致すること。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        clock.advance(60_000)
        code = controller.end(session_id).test_code
        assert "# Started: 2023-11-14T22:13:20.000Z" in code
        assert "# Ended: 2023-11-14T22:14:20.000Z" in code

    def test_end_time_not_before_last_action(self, controller, clock):
        """時計が戻っても終了時刻は最後のアクション以降になること。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        clock.advance(1_000)
        action = controller.record(session_id, "click", {"selector": "#a"})
        clock.advance(-900)
        controller.end(session_id)
        assert controller.get(session_id)["endTime"] >= action.timestamp

    def test_regeneration_is_deterministic(self, clock):
        """同じログ・オプション・ID から同一のコードが生成されること。"""
        def run() -> str:
            ids = iter(["fixedid000"])
            local_clock = type(clock)()
            controller = SessionLifecycleController(
                store=SessionStore(id_factory=lambda: next(ids), clock=local_clock),
                clock=local_clock,
            )
            session_id = controller.start({"outputPath": "/x.py", "includeComments": True})["sessionId"]
            controller.record(session_id, "navigate", {"url": "https://example.com"})
            controller.record(session_id, "fill", {"selector": "#q", "value": "a\"b"})
            return controller.end(session_id).test_code

        assert run() == run()


# ---------------------------------------------------------------------------
# clear
# ---------------------------------------------------------------------------

class TestClear:
    """clear のテスト。"""

    def test_clear_active_session(self, controller):
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        controller.record(session_id, "click", {"selector": "#a"})
        assert controller.clear(session_id) == {"cleared": True}
        with pytest.raises(SessionNotFoundError):
            controller.get(session_id)

    def test_clear_unknown_raises(self, controller):
        with pytest.raises(SessionNotFoundError):
            controller.clear("missing")

    def test_clear_twice_raises(self, controller):
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        controller.clear(session_id)
        with pytest.raises(SessionNotFoundError):
            controller.clear(session_id)

    def test_clear_does_not_synthesize(self, controller, monkeypatch):
        """clear ではコード生成が呼ばれないこと。"""
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]

        def fail(*args, **kwargs):
            raise AssertionError("render must not be called")

        monkeypatch.setattr(controller.synthesizer, "render", fail)
        controller.clear(session_id)


# ---------------------------------------------------------------------------
# 並行アクセス
# ---------------------------------------------------------------------------

class TestConcurrency:
    """同一セッションへの並行操作のテスト。"""

    def test_concurrent_records_are_serialized(self):
        controller = SessionLifecycleController()
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]

        def worker(n: int) -> None:
            for i in range(50):
                controller.record(session_id, "click", {"selector": f"#w{n}-{i}"})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        actions = controller.get(session_id)["actions"]
        assert len(actions) == 400
        stamps = [a["timestamp"] for a in actions]
        assert stamps == sorted(stamps)

    def test_concurrent_end_only_once(self):
        """同時に end を呼んでも成功は1回だけであること。"""
        controller = SessionLifecycleController()
        session_id = controller.start({"outputPath": "/x.py"})["sessionId"]
        results: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            try:
                controller.end(session_id)
                outcome = "ok"
            except SessionAlreadyEndedError:
                outcome = "ended"
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count("ended") == 7
