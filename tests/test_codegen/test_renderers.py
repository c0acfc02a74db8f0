"""
レンダラーテスト — レジストリの登録・解決と各アクションの生成結果を検証する。
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from pwrec.codegen.models import CodegenAction
from pwrec.codegen.renderers import (
    RenderContext,
    RendererInfo,
    RendererRegistry,
    create_default_registry,
    normalize_tool_name,
)
from pwrec.codegen.synthesizer import CodeSynthesizer


def _render(tool_name: str, **params) -> tuple[list[str], RenderContext]:
    """単一アクションを標準レジストリで変換するヘルパー。"""
    context = RenderContext()
    lines = CodeSynthesizer().render_action(
        CodegenAction(tool_name=tool_name, parameters=params), context,
    )
    return lines, context


# ---------------------------------------------------------------------------
# 名前の正規化
# ---------------------------------------------------------------------------

class TestNormalizeToolName:
    """normalize_tool_name のテスト。"""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("click", "click"),
            ("assert-text", "assert_text"),
            ("Assert Text", "assert_text"),
            ("playwright_navigate", "navigate"),
            ("browser_click", "click"),
            ("playwright_", "playwright_"),
            ("  fill  ", "fill"),
        ],
    )
    def test_normalize(self, raw: str, expected: str):
        assert normalize_tool_name(raw) == expected


# ---------------------------------------------------------------------------
# レジストリ
# ---------------------------------------------------------------------------

class _EchoParams(BaseModel):
    text: str


class _EchoRenderer:
    def render(self, params: _EchoParams, context: RenderContext) -> list[str]:
        return [f"print({params.text!r})"]

    def get_schema(self) -> type[BaseModel]:
        return _EchoParams


class TestRendererRegistry:
    """RendererRegistry のテスト。"""

    def test_default_registry_contains_core_actions(self):
        """標準レジストリに主要アクションが登録されていること。"""
        registry = create_default_registry()
        for name in ("navigate", "click", "fill", "assert_text", "screenshot"):
            assert registry.has(name)

    def test_resolve_aliases_and_prefixes(self):
        """別名・接頭辞付きの名前が正規名に解決されること。"""
        registry = create_default_registry()
        assert registry.canonical_name("playwright_click") == "click"
        assert registry.canonical_name("goto") == "navigate"
        assert registry.canonical_name("assert-text") == "assert_text"
        assert registry.canonical_name("playwright_press_key") == "press"
        assert registry.canonical_name("teleport") is None

    def test_get_unknown_raises_key_error(self):
        registry = create_default_registry()
        with pytest.raises(KeyError):
            registry.get("teleport")

    def test_register_custom_renderer(self):
        """カスタムレンダラーを追加登録できること。"""
        registry = RendererRegistry()
        registry.register(
            "echo", _EchoRenderer(),
            info=RendererInfo("echo", "テスト用", "debug", ("say",)),
        )
        assert registry.resolve("say") is registry.get("echo")
        assert registry.names == ["echo"]

    def test_register_default_info(self):
        """info 省略時にデフォルトのメタ情報が付与されること。"""
        registry = RendererRegistry()
        registry.register("echo", _EchoRenderer())
        [info] = registry.list_all()
        assert info.name == "echo"
        assert info.category == "unknown"

    def test_register_rejects_non_renderer(self):
        """Protocol を満たさないオブジェクトは登録できないこと。"""
        registry = RendererRegistry()
        with pytest.raises(TypeError):
            registry.register("bad", object())  # type: ignore[arg-type]

    def test_list_all_sorted(self):
        registry = create_default_registry()
        names = [info.name for info in registry.list_all()]
        assert names == sorted(names)


# ---------------------------------------------------------------------------
# 各アクションの生成結果
# ---------------------------------------------------------------------------

class TestBuiltinRenderers:
    """標準レンダラーの出力テスト。"""

    def test_navigate(self):
        lines, _ = _render("navigate", url="https://example.com/")
        assert lines == ['page.goto("https://example.com/")']

    def test_navigate_wait_until(self):
        lines, _ = _render("navigate", url="/", waitUntil="networkidle")
        assert lines == ['page.goto("/", wait_until="networkidle")']

    def test_go_back(self):
        lines, _ = _render("go_back")
        assert lines == ["page.go_back()"]

    def test_click(self):
        lines, _ = _render("click", selector="#go")
        assert lines == ['page.locator("#go").click()']

    def test_click_options(self):
        lines, _ = _render("click", selector="#go", button="right", clickCount=2)
        assert lines == ['page.locator("#go").click(button="right", click_count=2)']

    def test_fill_escapes_value(self):
        lines, _ = _render("fill", selector="#name", value='O\'Brien "Jr"\n')
        assert lines == ['page.locator("#name").fill("O\'Brien \\"Jr\\"\\n")']

    def test_select_multiple(self):
        lines, _ = _render("select", selector="#c", value=["a", "b"])
        assert lines == ['page.locator("#c").select_option(["a", "b"])']

    def test_press_page_keyboard(self):
        lines, _ = _render("press_key", key="Enter")
        assert lines == ['page.keyboard.press("Enter")']

    def test_press_on_element(self):
        lines, _ = _render("press", key="Tab", selector="#q")
        assert lines == ['page.locator("#q").press("Tab")']

    def test_hover_check_uncheck(self):
        assert _render("hover", selector="a")[0] == ['page.locator("a").hover()']
        assert _render("check", selector="#c")[0] == ['page.locator("#c").check()']
        assert _render("uncheck", selector="#c")[0] == ['page.locator("#c").uncheck()']

    def test_upload(self):
        lines, _ = _render("upload", selector="input[type=file]", filePath="a.txt")
        assert lines == ['page.locator("input[type=file]").set_input_files("a.txt")']

    def test_wait(self):
        assert _render("wait", timeout=500)[0] == ["page.wait_for_timeout(500)"]

    def test_wait_for_selector(self):
        lines, _ = _render("wait_for_selector", selector=".toast", state="hidden")
        assert lines == ['page.wait_for_selector(".toast", state="hidden")']

    def test_assert_text_contains(self):
        lines, _ = _render("assert-text", selector="h1", text="Welcome")
        assert lines == ['expect(page.locator("h1")).to_contain_text("Welcome")']

    def test_assert_text_exact(self):
        lines, _ = _render("assert_text", selector="h1", text="Welcome", exact=True)
        assert lines == ['expect(page.locator("h1")).to_have_text("Welcome")']

    def test_assert_visible_hidden(self):
        assert _render("assert_visible", selector="#ok")[0] == [
            'expect(page.locator("#ok")).to_be_visible()'
        ]
        assert _render("assert_hidden", selector="#ok")[0] == [
            'expect(page.locator("#ok")).to_be_hidden()'
        ]

    def test_assert_url_plain(self):
        lines, context = _render("assert_url", url="https://example.com/done")
        assert lines == ['expect(page).to_have_url("https://example.com/done")']
        assert context.imports == set()

    def test_assert_url_regex_requires_re(self):
        lines, context = _render("assert_url", url=r".*/done\?id=\d+", regex=True)
        assert lines == ['expect(page).to_have_url(re.compile(".*/done\\\\?id=\\\\d+"))']
        assert context.imports == {"re"}

    def test_assert_title_and_value(self):
        assert _render("assert_title", title="Home")[0] == ['expect(page).to_have_title("Home")']
        assert _render("assert_value", selector="#n", value="x")[0] == [
            'expect(page.locator("#n")).to_have_value("x")'
        ]

    def test_screenshot(self):
        assert _render("screenshot", name="after-login")[0] == [
            'page.screenshot(path="after-login.png")'
        ]
        assert _render("screenshot", name="full", fullPage=True)[0] == [
            'page.screenshot(path="full.png", full_page=True)'
        ]

    def test_evaluate(self):
        lines, _ = _render("evaluate", script="() => window.scrollTo(0, 0)")
        assert lines == ['page.evaluate("() => window.scrollTo(0, 0)")']

    def test_invalid_params_fall_back(self):
        """スキーマに合わないパラメータはフォールバック文になること。"""
        lines, _ = _render("click", target="#go")
        assert lines == [
            '# pwrec: unrecognized action "click" {"target": "#go"}',
            "pass",
        ]

    def test_extra_params_fall_back(self):
        """スキーマ外のパラメータは捨てずにフォールバック文へ残すこと。"""
        lines, _ = _render("click", selector="#a", force=True, modifiers=["Shift"])
        assert lines == [
            '# pwrec: unrecognized action "click" '
            '{"selector": "#a", "force": True, "modifiers": ["Shift"]}',
            "pass",
        ]

    @pytest.mark.parametrize(
        "tool_name, params",
        [
            ("wait", {"timeout": "1500"}),
            ("wait", {"timeout": 1.5}),
            ("assert_text", {"selector": "h1", "text": "x", "exact": "no"}),
            ("screenshot", {"name": "s", "fullPage": 1}),
            ("fill", {"selector": "#n", "value": 42}),
        ],
    )
    def test_values_are_not_coerced(self, tool_name: str, params: dict):
        """型の異なる値は変換せず、記録値のままフォールバック出力すること。"""
        lines, _ = _render(tool_name, **params)
        assert lines[0].startswith(f'# pwrec: unrecognized action "{tool_name}"')
        assert lines[1] == "pass"

    def test_unknown_action_falls_back(self):
        lines, _ = _render("teleport", to="mars")
        assert lines == [
            '# pwrec: unrecognized action "teleport" {"to": "mars"}',
            "pass",
        ]
