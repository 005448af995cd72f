"""Tests for run controls on executable code blocks.

Most tests use a scripted stand-in for the sandbox so the state machine and
panel rendering can be checked deterministically; one test goes through the
real V8 sandbox end to end.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from blockdoc.execution.runner import (
    RUN_BUTTON_LABEL,
    ExecutableBlock,
    RunState,
    build_result_panel,
    instrument_surface,
    should_auto_run,
)
from blockdoc.execution.sandbox import JavaScriptSandbox
from blockdoc.execution.sink import ConsoleEntry, EvaluationResult, OutputSink
from blockdoc.render.surface import DisplaySurface

EXEC_MARKUP = (
    '<div class="article-code"><pre><code class="language-python">print(1)</code></pre></div>'
    '<div class="article-code"><pre>'
    '<code class="language-javascript executable-code">console.log("a")</code>'
    "</pre></div>"
    '<div class="article-code"><pre>'
    '<code class="language-js executable-code">document.write("&lt;iframe&gt;")</code>'
    "</pre></div>"
)


class ScriptedSandbox:
    """Returns queued results and records every evaluated source."""

    def __init__(self, *results: EvaluationResult, hook: Callable[[], None] | None = None) -> None:
        self.results = list(results)
        self.sources: list[str] = []
        self.hook = hook

    def evaluate(self, source: str, sink: OutputSink | None = None) -> EvaluationResult:
        self.sources.append(source)
        if self.hook is not None:
            self.hook()
        return self.results.pop(0)


def _surface(markup: str = EXEC_MARKUP) -> DisplaySurface:
    surface = DisplaySurface()
    surface.mount(markup)
    return surface


def _ok(*lines: str, value: str | None = None) -> EvaluationResult:
    return EvaluationResult(entries=tuple(ConsoleEntry("log", line) for line in lines), value=value)


def test_instrumentation_targets_only_executable_blocks() -> None:
    surface = _surface()
    sandbox: Any = ScriptedSandbox()
    blocks = instrument_surface(surface, sandbox)

    assert [b.index for b in blocks] == [0, 1]
    assert surface.executables == tuple(blocks)
    assert blocks[0].source == 'console.log("a")'
    assert blocks[1].source == 'document.write("<iframe>")'
    assert surface.root.xpath("count(//button[@class='execute-code-btn'])") == 2
    assert sandbox.sources == []


def test_controls_are_inserted_after_pre() -> None:
    surface = _surface()
    sandbox: Any = ScriptedSandbox()
    (block, _) = instrument_surface(surface, sandbox)

    pre = block.code.getparent()
    assert pre.tag == "pre"
    assert pre.getnext() is block.button
    assert block.button.getnext() is block.container
    assert block.button.text == RUN_BUTTON_LABEL
    assert block.button.get("type") == "button"
    assert block.container.get("class") == "code-output-container"
    assert len(block.container) == 0


def test_trigger_renders_console_and_return_value() -> None:
    surface = _surface()
    sandbox: Any = ScriptedSandbox(_ok("hi", value="42"))
    block = instrument_surface(surface, sandbox)[0]

    result = block.trigger()

    assert result is not None and result.value == "42"
    assert block.state is RunState.SUCCEEDED
    assert block.last_result is result
    panel = block.panel
    assert panel is not None
    assert panel.get("class") == "code-output"
    assert [li.text for li in panel.findall(".//li")] == ["hi"]
    assert panel.find(".//li").get("class") == "console-log"
    assert panel.find("div[@class='result-output']/pre").text == "42"
    assert "disabled" not in block.button.attrib


def test_retrigger_replaces_previous_panel() -> None:
    surface = _surface()
    sandbox: Any = ScriptedSandbox(_ok("first"), _ok("second"))
    block = instrument_surface(surface, sandbox)[0]

    block.trigger()
    block.trigger()

    assert len(block.container) == 1
    assert [li.text for li in block.container.findall(".//li")] == ["second"]
    assert "first" not in surface.to_html()


def test_failed_run_sets_failed_state_and_keeps_entries() -> None:
    failed = EvaluationResult(
        entries=(ConsoleEntry("log", "before"), ConsoleEntry("error", "Error: boom")),
        failed=True,
    )
    sandbox: Any = ScriptedSandbox(failed)
    block = instrument_surface(_surface(), sandbox)[0]

    block.trigger()

    assert block.state is RunState.FAILED
    classes = [li.get("class") for li in block.container.findall(".//li")]
    assert classes == ["console-log", "console-error"]
    assert block.container.find(".//div[@class='result-output']") is None


def test_trigger_while_running_is_refused() -> None:
    surface = _surface()
    seen: dict[str, Any] = {}
    blocks: list[ExecutableBlock] = []

    def reenter() -> None:
        seen["disabled"] = blocks[0].button.get("disabled")
        seen["state"] = blocks[0].state
        seen["nested"] = blocks[0].trigger()

    sandbox: Any = ScriptedSandbox(_ok("once"), hook=reenter)
    blocks.extend(instrument_surface(surface, sandbox))

    result = blocks[0].trigger()

    assert result is not None
    assert seen == {"disabled": "disabled", "state": RunState.RUNNING, "nested": None}
    assert len(sandbox.sources) == 1
    assert blocks[0].state is RunState.SUCCEEDED


def test_evaluator_crash_leaves_block_failed_and_retriggerable() -> None:
    def crash() -> None:
        raise RuntimeError("engine vanished")

    sandbox: Any = ScriptedSandbox(_ok("later"), hook=crash)
    block = instrument_surface(_surface(), sandbox)[0]

    with pytest.raises(RuntimeError):
        block.trigger()

    assert block.state is RunState.FAILED
    assert "disabled" not in block.button.attrib
    assert block.container.find(".//div[@class='code-error']") is not None

    sandbox.hook = None
    assert block.trigger() is not None
    assert block.state is RunState.SUCCEEDED


def test_panel_without_output_is_empty() -> None:
    panel = build_result_panel(EvaluationResult())
    assert panel.get("class") == "code-output"
    assert len(panel) == 0


def test_auto_run_policy() -> None:
    assert should_auto_run('document.write("x")')
    assert should_auto_run('el.innerHTML = "<iframe src=x>"')
    assert not should_auto_run("1 + 1")

    surface = _surface()
    sandbox: Any = ScriptedSandbox(_ok(value="written"))
    blocks = instrument_surface(surface, sandbox, auto_run=True)

    assert sandbox.sources == ['document.write("<iframe>")']
    assert blocks[0].state is RunState.IDLE
    assert blocks[1].state is RunState.SUCCEEDED


def test_auto_run_is_off_by_default() -> None:
    sandbox: Any = ScriptedSandbox()
    blocks = instrument_surface(_surface(), sandbox)
    assert all(block.state is RunState.IDLE for block in blocks)
    assert sandbox.sources == []


def test_end_to_end_with_real_sandbox() -> None:
    surface = _surface(
        '<div class="article-code"><pre><code class="language-javascript executable-code">'
        'console.log("hi"); 42</code></pre></div>'
        '<div class="article-code"><pre><code class="language-javascript executable-code">'
        'throw new Error("boom")</code></pre></div>'
    )
    ok, bad = instrument_surface(surface, JavaScriptSandbox())

    ok.trigger()
    bad.trigger()

    assert ok.state is RunState.SUCCEEDED
    assert [li.text for li in ok.container.findall(".//li")] == ["hi"]
    assert ok.container.find(".//pre").text == "42"
    assert bad.state is RunState.FAILED
    (error,) = bad.container.findall(".//li")
    assert error.get("class") == "console-error"
    assert "boom" in error.text
