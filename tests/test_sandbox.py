"""Tests for sandboxed JavaScript evaluation and output capture.

These run real V8 isolates through `mini-racer`; each test uses a fresh
sandbox so limits and captured output never leak between tests.
"""

from __future__ import annotations

import json

from blockdoc.execution.sandbox import JavaScriptSandbox, evaluate_source
from blockdoc.execution.sink import ConsoleEntry, EvaluationResult, OutputSink


def test_log_and_completion_value_are_captured() -> None:
    result = evaluate_source('console.log("hi"); 42')
    assert result.failed is False
    assert result.entries == (ConsoleEntry("log", "hi"),)
    assert result.value == "42"


def test_thrown_error_becomes_error_entry() -> None:
    result = evaluate_source('console.log("before"); throw new Error("boom")')
    assert result.failed is True
    assert result.value is None
    assert result.by_channel("log") == ["before"]
    (error,) = result.by_channel("error")
    assert error == "Error: boom"


def test_non_error_throw_and_syntax_error() -> None:
    thrown = evaluate_source('throw "plain"')
    assert thrown.failed
    assert thrown.by_channel("error") == ["Error: plain"]

    broken = evaluate_source("function (")
    assert broken.failed
    assert broken.by_channel("error")[0].startswith("Error: ")


def test_console_channels_are_mapped() -> None:
    result = evaluate_source(
        'console.log("l"); console.debug("d"); console.info("i");'
        ' console.warn("w"); console.error("e");'
    )
    assert [(e.channel, e.content) for e in result.entries] == [
        ("log", "l"),
        ("log", "d"),
        ("info", "i"),
        ("warning", "w"),
        ("error", "e"),
    ]
    # console.error output alone does not mark the run as failed.
    assert result.failed is False


def test_arguments_are_joined_and_objects_serialised() -> None:
    result = evaluate_source('console.log("n =", 3, {a: 1}); ({b: [1, 2]})')
    assert result.entries[0].content == 'n = 3 {\n  "a": 1\n}'
    assert json.loads(result.value or "") == {"b": [1, 2]}


def test_empty_values_mean_no_value() -> None:
    for source in ("var x = 1;", "null", "undefined", "''"):
        assert evaluate_source(source).value is None, source
    assert evaluate_source("false").value == "false"
    assert evaluate_source("0").value == "0"


def test_evaluations_are_isolated() -> None:
    sandbox = JavaScriptSandbox()
    sandbox.evaluate("globalThis.leaked = 'secret'; var also = 1;")
    result = sandbox.evaluate("typeof leaked + ' ' + typeof also")
    assert result.value == "undefined undefined"


def test_no_host_bindings_are_available() -> None:
    result = evaluate_source("[typeof require, typeof process, typeof document].join(',')")
    assert result.value == "undefined,undefined,undefined"


def test_timeout_is_reported_not_raised() -> None:
    result = JavaScriptSandbox(timeout_ms=200).evaluate('console.log("start"); while (true) {}')
    assert result.failed is True
    (error,) = result.by_channel("error")
    assert "timed out" in error
    assert error.startswith("Error: ")


def test_explicit_sink_receives_entries() -> None:
    sink = OutputSink()
    result = JavaScriptSandbox().evaluate('console.warn("careful")', sink)
    assert len(sink) == 1
    assert sink.entries() == result.entries
    assert not sink.has_errors


def test_output_sink_normalises_unknown_channels() -> None:
    sink = OutputSink()
    sink.write("trace", "x")  # type: ignore[arg-type]
    sink.error("bad")
    assert sink.entries() == (ConsoleEntry("log", "x"), ConsoleEntry("error", "bad"))
    assert sink.has_errors


def test_result_equality_ignores_duration() -> None:
    a = EvaluationResult(entries=(), value="1", duration_ms=1.0)
    b = EvaluationResult(entries=(), value="1", duration_ms=99.0)
    assert a == b
